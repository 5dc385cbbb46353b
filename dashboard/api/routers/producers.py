"""
Agency Pulse — Producers Router
=================================
Producer selection list and the weekly producer leaderboard.

Endpoints:
  GET /api/producers                 - Active producers for pickers
  GET /api/producers/weekly-summary  - QHH, quotes, sales, items, premium, close rate
"""
from __future__ import annotations

import asyncio
import threading

from fastapi import APIRouter, Depends, HTTPException, Query

from dashboard.api.middleware import require_role
from models.metrics_models import Producer, WeeklyProducerSummaryResponse
from scripts.analytics.weekly_producer_summary import get_weekly_producer_summary
from scripts.lib.decoding import decode_rows
from scripts.lib.errors import InvalidDateRangeError
from scripts.lib.logger import setup_logger
from scripts.lib.supabase_client import fetch_rows

logger = setup_logger("producers_router")

router = APIRouter(prefix="/api/producers", tags=["producers"])


@router.get("")
async def list_active_producers():
    """Active producers ordered by display name."""
    try:
        rows = fetch_rows(
            "producers",
            select="id, display_name",
            eq={"active": True},
            order_by="display_name",
        )
        producers = decode_rows(Producer, rows, "producers")
        results = [p.model_dump(exclude={"active"}) for p in producers]
        return {"results": results, "count": len(results)}
    except Exception as e:
        logger.error("List producers failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load producers")


@router.get(
    "/weekly-summary",
    response_model=WeeklyProducerSummaryResponse,
    dependencies=[Depends(require_role("owner", "manager", "reviewer"))],
)
async def weekly_summary(
    from_date: str = Query(..., description="First day, YYYY-MM-DD (Central Time)"),
    to_date: str = Query(..., description="Last day, YYYY-MM-DD (Central Time)"),
):
    """
    Per-producer metrics for a date range, ranked by close rate.

    Every producer with an entry in range is listed, including those with no
    quoted households. The aggregation runs off the event loop and is
    abandoned if the client disconnects.
    """
    cancel_event = threading.Event()
    try:
        results = await asyncio.to_thread(
            get_weekly_producer_summary, from_date, to_date, cancel_event=cancel_event,
        )
    except asyncio.CancelledError:
        cancel_event.set()
        raise
    except InvalidDateRangeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("Weekly producer summary failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load weekly producer summary")

    return WeeklyProducerSummaryResponse(
        from_date=from_date,
        to_date=to_date,
        results=results,
        count=len(results),
    )

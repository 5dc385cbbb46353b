"""
Agency Pulse — Summaries Router
=================================

Endpoints:
  GET /api/summaries/monthly      - Monthly totals for a month or a year
  GET /api/summaries/top-sources  - Top lead sources for a month
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from scripts.analytics.monthly_summary import get_monthly_summary, get_top_sources_by_month
from scripts.lib.logger import setup_logger

logger = setup_logger("summaries_router")

router = APIRouter(prefix="/api/summaries", tags=["summaries"])


@router.get("/monthly")
async def monthly(
    year: int = Query(..., ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12, description="Omit for the whole year"),
):
    try:
        rows = get_monthly_summary(year, month)
        return {"results": [r.model_dump() for r in rows], "count": len(rows)}
    except Exception as e:
        logger.error("Monthly summary query failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load monthly summary")


@router.get("/top-sources")
async def top_sources(
    target_month: Optional[str] = Query(None, description="Month start, YYYY-MM-DD"),
    metric_type: str = Query("quotes", pattern="^(quotes|qhh)$"),
):
    try:
        rows = get_top_sources_by_month(target_month, metric_type)
        return {"results": [r.model_dump() for r in rows], "count": len(rows)}
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("Top sources query failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load top sources")

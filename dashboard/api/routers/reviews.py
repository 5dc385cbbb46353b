"""
Agency Pulse — Accountability Reviews Router
==============================================

Endpoints:
  GET /api/reviews/summary  - Reviews for a month or a year, newest first
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dashboard.api.middleware import require_role
from scripts.analytics.reviews import get_review_summary
from scripts.lib.logger import setup_logger

logger = setup_logger("reviews_router")

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


@router.get(
    "/summary",
    dependencies=[Depends(require_role("owner", "manager", "reviewer"))],
)
async def review_summary(
    year: int = Query(..., ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12, description="Omit for the whole year"),
):
    try:
        rows = get_review_summary(year, month)
    except Exception as e:
        logger.error("Review summary query failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load review summary")

    return {
        "year": year,
        "month": month,
        "results": [r.model_dump() for r in rows],
        "count": len(rows),
    }

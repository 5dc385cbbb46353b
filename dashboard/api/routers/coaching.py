"""
Agency Pulse — Coaching Effectiveness Router
==============================================

Endpoints:
  GET /api/coaching/effectiveness  - Review metrics, producer progress, gaps, weekly trend
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from dashboard.api.middleware import require_role
from models.metrics_models import CoachingEffectivenessDashboard
from scripts.analytics.coaching import DEFAULT_TIMEFRAME_DAYS, get_coaching_effectiveness
from scripts.lib.logger import setup_logger

logger = setup_logger("coaching_router")

router = APIRouter(prefix="/api/coaching", tags=["coaching"])


@router.get(
    "/effectiveness",
    response_model=CoachingEffectivenessDashboard,
    dependencies=[Depends(require_role("owner", "manager"))],
)
async def coaching_effectiveness(
    timeframe: int = Query(DEFAULT_TIMEFRAME_DAYS, ge=1, le=365, description="Days back"),
):
    try:
        return get_coaching_effectiveness(timeframe)
    except Exception as e:
        logger.error("Coaching effectiveness query failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load coaching effectiveness")

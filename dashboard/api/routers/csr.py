"""
Agency Pulse — CSR Points Router
==================================

Endpoints:
  GET    /api/csr/leaderboard                - Year leaderboard with MTD/WTD points
  GET    /api/csr/points                     - Points by category for a period
  GET    /api/csr/points-config              - Point values, goals and badges
  GET    /api/csr/activities                 - Paginated activity log
  POST   /api/csr/activities                 - Log a manual activity
  DELETE /api/csr/activities/{activity_id}   - Remove an activity
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dashboard.api.middleware import require_role
from models.metrics_models import CSRActivityCreate, CSRActivityPage
from scripts.analytics.csr_activities import (
    ACTIVITY_LABELS,
    create_csr_activity,
    delete_csr_activity,
    list_csr_activities,
)
from scripts.analytics.csr_points import (
    get_csr_leaderboard,
    get_csr_points_config,
    get_csr_points_summary,
    goal_progress,
)
from scripts.lib.logger import setup_logger

logger = setup_logger("csr_router")

router = APIRouter(prefix="/api/csr", tags=["csr"])


@router.get("/leaderboard")
async def leaderboard(year: Optional[int] = Query(None, ge=2000, le=2100)):
    try:
        entries = get_csr_leaderboard(year)
        return {"results": [e.model_dump() for e in entries], "count": len(entries)}
    except Exception as e:
        logger.error("CSR leaderboard query failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load CSR leaderboard")


@router.get("/points")
async def points_summary(
    period: str = Query("ytd", pattern="^(week|month|ytd)$"),
    csr_profile_id: Optional[str] = Query(None, description="Limit to one CSR"),
):
    """Points per category, with progress toward the period goal."""
    try:
        summaries = get_csr_points_summary(period, csr_profile_id)
        config = get_csr_points_config()
    except Exception as e:
        logger.error("CSR points query failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load CSR points")

    goal = {
        "week": config.goals.weekly,
        "month": config.goals.monthly,
        "ytd": config.goals.yearly,
    }[period]
    results = [
        {**s.model_dump(), "goal": goal, "goal_progress": goal_progress(s.total_points, goal)}
        for s in summaries
    ]
    return {"period": period, "results": results, "count": len(results)}


@router.get("/points-config")
async def points_config():
    try:
        return get_csr_points_config().model_dump()
    except Exception as e:
        logger.error("CSR points config query failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load CSR points config")


# ─── Activity Log ─────────────────────────────────────────────

CSR_ROLES = ("owner", "manager", "csr", "sales_service")


@router.get(
    "/activities",
    response_model=CSRActivityPage,
    dependencies=[Depends(require_role(*CSR_ROLES))],
)
async def activities(
    csr_profile_id: Optional[str] = Query(None),
    activity_type: Optional[str] = Query(None, pattern=f"^({'|'.join(ACTIVITY_LABELS)})$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
):
    try:
        return list_csr_activities(csr_profile_id, activity_type, page, page_size)
    except Exception as e:
        logger.error("CSR activities query failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load CSR activities")


@router.post(
    "/activities",
    status_code=201,
    dependencies=[Depends(require_role(*CSR_ROLES))],
)
async def log_activity(activity: CSRActivityCreate):
    """Log a manual activity; the response carries the points awarded."""
    try:
        stored = create_csr_activity(activity)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("Logging CSR activity failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to log activity")
    return {**stored.model_dump(), "label": ACTIVITY_LABELS.get(stored.activity_type, "")}


@router.delete(
    "/activities/{activity_id}",
    dependencies=[Depends(require_role("owner", "manager"))],
)
async def remove_activity(activity_id: str):
    try:
        deleted = delete_csr_activity(activity_id)
    except Exception as e:
        logger.error("Deleting CSR activity %s failed: %s", activity_id, e)
        raise HTTPException(status_code=500, detail="Failed to delete activity")
    if not deleted:
        raise HTTPException(status_code=404, detail="Activity not found")
    return {"deleted": activity_id}

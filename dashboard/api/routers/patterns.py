"""
Agency Pulse — Detected Patterns Router
=========================================

Endpoints:
  GET /api/patterns                         - Active patterns for every producer
  GET /api/patterns/producers/{producer_id} - Active patterns for one producer
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from dashboard.api.middleware import require_role
from scripts.analytics.patterns import (
    PATTERN_LABELS,
    get_all_active_patterns,
    get_producer_patterns,
    pattern_counts,
)
from scripts.lib.logger import setup_logger

logger = setup_logger("patterns_router")

router = APIRouter(prefix="/api/patterns", tags=["patterns"])


def _pattern_response(patterns):
    return {
        "results": [
            {**p.model_dump(), "label": PATTERN_LABELS[p.pattern_type]} for p in patterns
        ],
        "counts": pattern_counts(patterns).model_dump(),
    }


@router.get("", dependencies=[Depends(require_role("owner", "manager"))])
async def all_active_patterns():
    try:
        patterns = get_all_active_patterns()
    except Exception as e:
        logger.error("Active patterns query failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load patterns")
    return _pattern_response(patterns)


@router.get(
    "/producers/{producer_id}",
    dependencies=[Depends(require_role("owner", "manager", "reviewer", "producer"))],
)
async def producer_patterns(producer_id: str):
    try:
        patterns = get_producer_patterns(producer_id)
    except Exception as e:
        logger.error("Patterns for producer %s failed: %s", producer_id, e)
        raise HTTPException(status_code=500, detail="Failed to load patterns")
    return {"producer_id": producer_id, **_pattern_response(patterns)}

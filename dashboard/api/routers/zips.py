"""
Agency Pulse — Zip Performance Router
=======================================

Endpoints:
  GET /api/zips/performance  - Quotes, sales and conversion by zip code
  GET /api/zips/health       - Classify a single zip's numbers
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from scripts.analytics.zip_performance import calculate_zip_health_status, get_zip_performance
from scripts.lib.errors import InvalidDateRangeError
from scripts.lib.logger import setup_logger

logger = setup_logger("zips_router")

router = APIRouter(prefix="/api/zips", tags=["zips"])


@router.get("/performance")
async def zip_performance(
    from_date: str = Query(..., description="First day, YYYY-MM-DD"),
    to_date: str = Query(..., description="Last day, YYYY-MM-DD"),
    producer_id: Optional[str] = Query(None, description="Filter by producer"),
    source_id: Optional[str] = Query(None, description="Filter by lead source"),
    min_quotes: int = Query(1, ge=0, description="Hide zips with fewer quotes"),
    include_unknown: bool = Query(False, description="Include rows with no zip"),
):
    """Zip code report with a green/yellow/red health status per row."""
    try:
        data = get_zip_performance(
            from_date,
            to_date,
            producer_id=producer_id,
            source_id=source_id,
            min_quotes=min_quotes,
            include_unknown=include_unknown,
        )
        return data.model_dump()
    except InvalidDateRangeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("Zip performance query failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load zip performance")


@router.get("/health")
async def zip_health(
    quotes: int = Query(..., description="Quotes in the zip"),
    sales: int = Query(..., description="Sales in the zip"),
    conversion_rate: float = Query(..., description="Conversion rate, percent"),
):
    """Health status for ad-hoc numbers (negative values count as zero)."""
    return {
        "quotes": quotes,
        "sales": sales,
        "conversion_rate": conversion_rate,
        "health_status": calculate_zip_health_status(quotes, sales, conversion_rate),
    }

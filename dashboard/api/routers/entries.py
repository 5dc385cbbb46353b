"""
Agency Pulse — Entry Dates Router
===================================
Central Time date defaults and the 6 PM entry lock.

Endpoints:
  GET /api/entries/defaults     - Today, yesterday and the default entry date
  GET /api/entries/lock-status  - Whether a day's entry is locked
"""
from __future__ import annotations

from fastapi import APIRouter, Query

from models.metrics_models import EntryDefaults, EntryLockStatus
from scripts.lib import timezone as ct

router = APIRouter(prefix="/api/entries", tags=["entries"])


@router.get("/defaults", response_model=EntryDefaults)
async def entry_defaults():
    now = ct.now_ct()
    default_date = ct.get_default_entry_date(now)
    return EntryDefaults(
        timezone=ct.CT_TIMEZONE,
        today=ct.today(now),
        yesterday=ct.yesterday(now),
        default_entry_date=default_date,
        default_entry_locked=ct.is_past_6pm(default_date, now),
    )


@router.get("/lock-status", response_model=EntryLockStatus)
async def lock_status(date: str = Query(..., description="Entry date, YYYY-MM-DD")):
    """Malformed dates report unlocked."""
    return EntryLockStatus(date=date, locked=ct.is_past_6pm(date))

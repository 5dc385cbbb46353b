"""
CSR Activities
==============

The activity log behind CSR points. Referral activities are written by
database triggers (source "auto"); the rest are logged by hand here
(source "manual"). Point totals are recomputed by the get_csr_* stored
procedures, so logging or deleting an activity is all that is needed.
"""
from __future__ import annotations

from typing import Optional

from models.metrics_models import CSRActivity, CSRActivityCreate, CSRActivityPage
from scripts.analytics.csr_points import get_csr_points_config
from scripts.lib.decoding import decode_rows
from scripts.lib.logger import setup_logger
from scripts.lib.supabase_client import delete_rows, fetch_page, insert_row
from scripts.lib.timezone import parse_date, today

logger = setup_logger(__name__)

# Fallback point values for manual activities when the config has none
MANUAL_ACTIVITY_POINTS = {
    "google_review": 10,
    "retention_save": 10,
    "new_customer_referral": 10,
    "winback_closed": 10,
    "winback_quoted": 3,
}

ACTIVITY_LABELS = {
    "referral_closed": "Referral Closed",
    "referral_quoted": "Referral Quoted",
    "google_review": "Google Review",
    "retention_save": "Retention Save",
    "new_customer_referral": "New Customer Referral",
    "winback_closed": "Win-Back Closed",
    "winback_quoted": "Win-Back Quoted",
}

ACTIVITY_SELECT = (
    "id, csr_profile_id, activity_type, points, activity_date, customer_name, "
    "notes, source, created_at, csr_profiles!inner(display_name)"
)

MAX_PAGE_SIZE = 100


def list_csr_activities(
    csr_profile_id: Optional[str] = None,
    activity_type: Optional[str] = None,
    page: int = 1,
    page_size: int = 10,
    client=None,
) -> CSRActivityPage:
    """Newest activities first, one page at a time, with the total count."""
    if page < 1:
        raise ValueError(f"page must be at least 1, got {page}")
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValueError(f"page_size must be 1-{MAX_PAGE_SIZE}, got {page_size}")

    eq = {}
    if csr_profile_id:
        eq["csr_profile_id"] = csr_profile_id
    if activity_type:
        eq["activity_type"] = activity_type

    rows, total = fetch_page(
        "csr_activities",
        select=ACTIVITY_SELECT,
        eq=eq,
        order_by=("activity_date", "created_at"),
        desc=True,
        page=page,
        page_size=page_size,
        client=client,
    )
    for row in rows:
        profile = row.pop("csr_profiles", None) or {}
        if isinstance(profile, list):
            profile = profile[0] if profile else {}
        row["csr_name"] = profile.get("display_name")

    return CSRActivityPage(
        results=decode_rows(CSRActivity, rows, "csr_activities"),
        count=total,
        page=page,
        page_size=page_size,
    )


def create_csr_activity(activity: CSRActivityCreate, client=None) -> CSRActivity:
    """
    Log a manual activity and return it as stored.

    Points default to the active points config for the activity type.

    Raises:
        ValueError: activity_date is not YYYY-MM-DD.
        DataWriteError: the insert failed.
    """
    activity_date = activity.activity_date or today()
    parse_date(activity_date)

    points = activity.points
    if points is None:
        configured = get_csr_points_config(client=client).points
        points = configured.get(
            activity.activity_type, MANUAL_ACTIVITY_POINTS[activity.activity_type],
        )

    stored = insert_row(
        "csr_activities",
        {
            "csr_profile_id": activity.csr_profile_id,
            "activity_type": activity.activity_type,
            "points": points,
            "activity_date": activity_date,
            "customer_name": activity.customer_name,
            "notes": activity.notes or None,
            "source": "manual",
            "created_by": activity.created_by,
        },
        client=client,
    )
    logger.info(
        "Logged %s for CSR %s (+%s points)",
        activity.activity_type, activity.csr_profile_id, points,
    )
    return decode_rows(CSRActivity, [stored], "csr_activities")[0]


def delete_csr_activity(activity_id: str, client=None) -> bool:
    """Remove one activity. False when no such activity existed."""
    return delete_rows("csr_activities", {"id": activity_id}, client=client) > 0

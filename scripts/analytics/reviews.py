"""
Accountability Review Summary
=============================

Reviews written against producers' daily entries for a month or a year,
joined to the entry's totals, the producer's name and the reviewer's name.

Two reads:

    accountability_reviews  (+ daily_entries + producers, entry_date in range)
    profiles                (id in reviewer ids)  -> reviewer names
"""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import ValidationError

from models.metrics_models import ReviewSummaryRow
from scripts.lib.errors import DecodeError
from scripts.lib.logger import setup_logger
from scripts.lib.num import first_row, to_int
from scripts.lib.supabase_client import fetch_rows
from scripts.lib.timezone import month_range

logger = setup_logger(__name__)

UNKNOWN_REVIEWER_NAME = "Unknown"

REVIEW_SELECT = """
    id,
    created_at,
    metrics_achieved,
    weak_steps,
    expansion_topics,
    activity_comments,
    reviewer_id,
    daily_entries!inner (
        id,
        entry_date,
        qhh_total,
        items_total,
        sales_total,
        producers!inner (id, display_name)
    )
"""


def _embedded(value) -> Optional[dict]:
    # PostgREST returns a to-one embed as an object, older clients as a list
    if isinstance(value, list):
        return first_row(value)
    return value


def _string_list(value) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def _to_summary_row(review: dict, reviewer_names: Dict[str, str]) -> ReviewSummaryRow:
    entry = _embedded(review.get("daily_entries"))
    if not isinstance(entry, dict):
        raise DecodeError(
            f"Review {review.get('id')!r} has no daily entry", source="accountability_reviews",
            field="daily_entries",
        )
    producer = _embedded(entry.get("producers")) or {}

    return ReviewSummaryRow(
        id=str(review["id"]),
        created_at=review.get("created_at"),
        entry_date=entry["entry_date"],
        producer_name=producer.get("display_name") or "",
        reviewer_name=reviewer_names.get(review.get("reviewer_id")) or UNKNOWN_REVIEWER_NAME,
        metrics_achieved=review.get("metrics_achieved"),
        weak_steps=_string_list(review.get("weak_steps")),
        expansion_topics=_string_list(review.get("expansion_topics")),
        activity_comments=review.get("activity_comments"),
        qhh_total=to_int(entry.get("qhh_total")),
        items_total=to_int(entry.get("items_total")),
        sales_total=to_int(entry.get("sales_total")),
    )


def get_review_summary(
    year: int, month: Optional[int] = None, client=None,
) -> List[ReviewSummaryRow]:
    """
    Reviews for one month (or the whole year), newest entry date first.

    Raises:
        ValueError: month outside 1-12.
        DataFetchError: either read failed.
        DecodeError: a review row is missing its entry or id.
    """
    if month is not None and not 1 <= month <= 12:
        raise ValueError(f"month must be 1-12, got {month}")

    from_date, to_date = month_range(year, month)
    reviews = fetch_rows(
        "accountability_reviews",
        select=REVIEW_SELECT,
        gte={"daily_entries.entry_date": from_date},
        lte={"daily_entries.entry_date": to_date},
        client=client,
    )
    if not reviews:
        return []

    reviewer_ids = sorted({r["reviewer_id"] for r in reviews if r.get("reviewer_id")})
    reviewer_names: Dict[str, str] = {}
    if reviewer_ids:
        profiles = fetch_rows(
            "profiles",
            select="id, display_name",
            in_={"id": reviewer_ids},
            client=client,
        )
        reviewer_names = {p["id"]: p.get("display_name") for p in profiles}

    try:
        rows = [_to_summary_row(review, reviewer_names) for review in reviews]
    except (KeyError, AttributeError, TypeError, ValidationError) as e:
        raise DecodeError(f"Bad review row: {e}", source="accountability_reviews") from e

    rows.sort(key=lambda r: (r.entry_date, r.created_at or ""), reverse=True)
    logger.info("Review summary %s..%s: %d reviews", from_date, to_date, len(rows))
    return rows

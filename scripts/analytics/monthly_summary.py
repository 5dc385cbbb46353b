"""
Monthly Summary
===============

Month-by-month production totals and top lead sources, both computed by
stored procedures.
"""
from __future__ import annotations

from typing import List, Optional

from models.metrics_models import MonthlySummaryRow, TopSourceRow
from scripts.lib.decoding import decode_list
from scripts.lib.logger import setup_logger
from scripts.lib.num import ym_to_date
from scripts.lib.supabase_client import rpc
from scripts.lib.timezone import month_range

logger = setup_logger(__name__)

TOP_SOURCE_METRICS = ("quotes", "qhh")


def get_monthly_summary(
    year: int, month: Optional[int] = None, client=None,
) -> List[MonthlySummaryRow]:
    """One row per month for a single month, or for the whole year."""
    if month is not None and not 1 <= month <= 12:
        raise ValueError(f"month must be 1-12, got {month}")

    from_date, to_date = month_range(year, month)
    logger.debug("Monthly summary range %s..%s", from_date, to_date)
    payload = rpc(
        "get_monthly_summary",
        {"from_date": from_date, "to_date": to_date},
        client=client,
    )
    return decode_list(MonthlySummaryRow, payload, "get_monthly_summary")


def get_top_sources_by_month(
    target_month: Optional[str], metric_type: str, client=None,
) -> List[TopSourceRow]:
    """Top lead sources for a month by quotes or quoted households."""
    if not target_month:
        return []
    if metric_type not in TOP_SOURCE_METRICS:
        raise ValueError(f"metric_type must be quotes or qhh, got {metric_type!r}")

    # '2025-09' and '2025-09-14' both mean the month starting 2025-09-01
    month_start = ym_to_date(target_month).isoformat()
    payload = rpc(
        "get_top_sources_by_month",
        {"target_month": month_start, "metric_type": metric_type},
        client=client,
    )
    return decode_list(TopSourceRow, payload, "get_top_sources_by_month")

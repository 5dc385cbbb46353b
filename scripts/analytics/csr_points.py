"""
CSR Points
==========

Gamified points for customer-service reps: year leaderboard, per-period
points breakdown, and the active points configuration.

Scoring itself happens in the get_csr_* stored procedures; this module
shapes their output.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import ValidationError

from models.metrics_models import (
    CSRLeaderboardEntry,
    CSRPointsConfig,
    CSRPointsSummary,
)
from scripts.lib.errors import DecodeError
from scripts.lib.logger import setup_logger
from scripts.lib.num import to_int, to_num
from scripts.lib.supabase_client import fetch_single, rpc
from scripts.lib.timezone import now_ct

logger = setup_logger(__name__)

CSR_PERIODS = ("week", "month", "ytd")

POINT_FIELDS = (
    "referral_closed_pts",
    "referral_quoted_pts",
    "google_review_pts",
    "retention_save_pts",
    "new_customer_referral_pts",
    "winback_closed_pts",
    "winback_quoted_pts",
    "total_points",
)

DEFAULT_POINTS_CONFIG = {
    "points": {
        "referral_closed": 15,
        "referral_quoted": 5,
        "google_review": 10,
        "retention_save": 10,
        "new_customer_referral": 10,
        "winback_closed": 10,
        "winback_quoted": 3,
    },
    "goals": {"weekly": 10, "monthly": 40, "yearly": 480},
    "badges": [],
}


def _expect_list(payload, source: str) -> list:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise DecodeError(
            f"Expected a list of rows, got {type(payload).__name__}", source=source,
        )
    return payload


def get_csr_leaderboard(year: Optional[int] = None, client=None) -> List[CSRLeaderboardEntry]:
    """Year-to-date CSR ranking with month and week subtotals."""
    year = year or now_ct().year
    rows = _expect_list(
        rpc("get_csr_leaderboard", {"p_year": year}, client=client),
        "get_csr_leaderboard",
    )
    try:
        return [
            CSRLeaderboardEntry(
                rank=to_int(row.get("rank")),
                csr_profile_id=row["csr_profile_id"],
                csr_name=row.get("csr_name") or "",
                ytd_points=to_num(row.get("ytd_points")),
                mtd_points=to_num(row.get("mtd_points")),
                wtd_points=to_num(row.get("wtd_points")),
            )
            for row in rows
        ]
    except (KeyError, AttributeError, ValidationError) as e:
        raise DecodeError(f"Bad leaderboard row: {e}", source="get_csr_leaderboard") from e


def get_csr_points_summary(
    period: str = "ytd",
    csr_profile_id: Optional[str] = None,
    client=None,
) -> List[CSRPointsSummary]:
    """Points by category for each CSR (or one CSR) over a period."""
    if period not in CSR_PERIODS:
        raise ValueError(f"period must be one of {', '.join(CSR_PERIODS)}, got {period!r}")

    rows = _expect_list(
        rpc(
            "get_csr_points_summary",
            {"p_period": period, "p_csr_profile_id": csr_profile_id or None},
            client=client,
        ),
        "get_csr_points_summary",
    )
    try:
        return [
            CSRPointsSummary(
                csr_profile_id=row["csr_profile_id"],
                csr_name=row.get("csr_name") or "",
                activity_count=to_int(row.get("activity_count")),
                **{f: to_num(row.get(f)) for f in POINT_FIELDS},
            )
            for row in rows
        ]
    except (KeyError, AttributeError, ValidationError) as e:
        raise DecodeError(f"Bad points row: {e}", source="get_csr_points_summary") from e


def get_csr_points_config(client=None) -> CSRPointsConfig:
    """Active point values, goals and badges, or the defaults when none is set."""
    row = fetch_single(
        "coaching_framework_config",
        select="config_data",
        eq={"config_type": "csr_points_config", "active": True},
        client=client,
    )
    config = (row or {}).get("config_data")
    if not config:
        logger.info("No active CSR points config, using defaults")
        return CSRPointsConfig.model_validate(DEFAULT_POINTS_CONFIG)

    try:
        return CSRPointsConfig.model_validate(config)
    except ValidationError as e:
        raise DecodeError(
            f"CSR points config is malformed: {e}", source="coaching_framework_config",
        ) from e


def goal_progress(points: float, goal: float) -> float:
    """Percent of a goal reached, capped at 100."""
    if goal <= 0:
        return 0.0
    return min(100.0, max(0.0, points / goal * 100))

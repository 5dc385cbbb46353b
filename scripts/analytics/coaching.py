"""
Coaching Effectiveness
======================

Whether accountability reviews are turning into improvement: overall
review metrics, per-producer progress, recurring gaps and the weekly
trend, each computed by its own stored procedure.
"""
from __future__ import annotations

from models.metrics_models import (
    CoachingEffectivenessDashboard,
    CoachingOverallMetrics,
    GapAnalysisRow,
    ProducerProgress,
    WeeklyCoachingTrend,
)
from scripts.lib.decoding import decode_list, decode_object
from scripts.lib.logger import setup_logger
from scripts.lib.supabase_client import rpc

logger = setup_logger(__name__)

DEFAULT_TIMEFRAME_DAYS = 30
TREND_WEEKS = 4


def get_coaching_effectiveness(
    timeframe: int = DEFAULT_TIMEFRAME_DAYS, client=None,
) -> CoachingEffectivenessDashboard:
    """
    All four coaching views for the last ``timeframe`` days.

    The weekly trend always covers the last four weeks. Any failed call
    fails the whole dashboard.
    """
    if timeframe < 1:
        raise ValueError(f"timeframe must be at least 1 day, got {timeframe}")

    params = {"p_days_back": timeframe}
    metrics = rpc("get_coaching_effectiveness_metrics", params, client=client)
    progress = rpc("get_producer_progress", params, client=client)
    gaps = rpc("get_gap_analysis", params, client=client)
    trend = rpc("get_weekly_coaching_trend", {"p_weeks_back": TREND_WEEKS}, client=client)
    logger.debug("Loaded coaching effectiveness for %d days", timeframe)

    return CoachingEffectivenessDashboard(
        timeframe_days=timeframe,
        overall_metrics=decode_object(
            CoachingOverallMetrics, metrics, "get_coaching_effectiveness_metrics",
        ),
        producer_progress=decode_list(ProducerProgress, progress, "get_producer_progress"),
        gap_analysis=decode_list(GapAnalysisRow, gaps, "get_gap_analysis"),
        weekly_trends=decode_list(WeeklyCoachingTrend, trend, "get_weekly_coaching_trend"),
    )

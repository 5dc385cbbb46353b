"""
Detected Patterns
=================

Warning signs the detector has flagged on producers' recent activity:
high quoting with no sales, a failing lead source, days outside the
framework and zero-item streaks.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from models.metrics_models import (
    DetectedPattern,
    DetectedPatternWithProducer,
    PatternCounts,
)
from scripts.lib.decoding import decode_list
from scripts.lib.logger import setup_logger
from scripts.lib.supabase_client import rpc

logger = setup_logger(__name__)

PATTERN_LABELS = {
    "low_conversion": "Low Conversion",
    "source_failing": "Source Struggling",
    "outside_streak": "Outside Framework",
    "zero_item_streak": "Zero Items",
}


def get_producer_patterns(producer_id: Optional[str], client=None) -> List[DetectedPattern]:
    """Active patterns for one producer; no producer means no patterns."""
    if not producer_id:
        return []
    payload = rpc("get_producer_patterns", {"p_producer_id": producer_id}, client=client)
    return decode_list(DetectedPattern, payload, "get_producer_patterns")


def get_all_active_patterns(client=None) -> List[DetectedPatternWithProducer]:
    """Active patterns across every producer."""
    payload = rpc("get_all_active_patterns", client=client)
    patterns = decode_list(DetectedPatternWithProducer, payload, "get_all_active_patterns")
    logger.debug("Loaded %d active patterns", len(patterns))
    return patterns


def pattern_counts(patterns: Iterable[DetectedPattern]) -> PatternCounts:
    counts = PatternCounts()
    for pattern in patterns:
        setattr(counts, pattern.severity, getattr(counts, pattern.severity) + 1)
        counts.total += 1
    return counts

"""
Weekly Producer Summary
=======================

Rolls raw producer activity up into one row per producer for a date range:
quoted households (distinct leads), quotes, sales (distinct sold leads),
items, premium and close rate, ranked by close rate.

Three reads against the store, each depending on the first:

    daily_entries      (entry_date in range)        -> entry ids, producer ids
    quoted_households  (daily_entry_id in entry ids) -> lead-level rows
    producers          (id in producer ids)          -> display names

Usage:
    from scripts.analytics.weekly_producer_summary import get_weekly_producer_summary

    rows = get_weekly_producer_summary("2025-09-01", "2025-09-07")
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Set

from models.metrics_models import DailyEntry, Producer, ProducerMetrics, QuotedHousehold
from scripts.lib.decoding import decode_rows
from scripts.lib.errors import AggregationCancelledError
from scripts.lib.logger import setup_logger
from scripts.lib.supabase_client import fetch_rows
from scripts.lib.timezone import parse_date_range

logger = setup_logger(__name__)

UNKNOWN_PRODUCER_NAME = "Unknown"


class ProducerActivityStore(Protocol):
    """Read access to the three tables the summary needs."""

    def list_daily_entries(self, from_date: str, to_date: str) -> List[DailyEntry]: ...

    def list_quoted_households(self, entry_ids: Sequence[str]) -> List[QuotedHousehold]: ...

    def list_producers(self, producer_ids: Sequence[str]) -> List[Producer]: ...


class SupabaseActivityStore:
    """ProducerActivityStore backed by Supabase tables."""

    def __init__(self, client=None):
        self.client = client

    def list_daily_entries(self, from_date: str, to_date: str) -> List[DailyEntry]:
        rows = fetch_rows(
            "daily_entries",
            select="id, producer_id",
            gte={"entry_date": from_date},
            lte={"entry_date": to_date},
            client=self.client,
        )
        return decode_rows(DailyEntry, rows, "daily_entries")

    def list_quoted_households(self, entry_ids: Sequence[str]) -> List[QuotedHousehold]:
        rows = fetch_rows(
            "quoted_households",
            select="daily_entry_id, lead_id, lines_quoted, items_sold, quoted_premium",
            in_={"daily_entry_id": entry_ids},
            client=self.client,
        )
        return decode_rows(QuotedHousehold, rows, "quoted_households")

    def list_producers(self, producer_ids: Sequence[str]) -> List[Producer]:
        rows = fetch_rows(
            "producers",
            select="id, display_name",
            in_={"id": producer_ids},
            client=self.client,
        )
        return decode_rows(Producer, rows, "producers")


@dataclass
class _ProducerTotals:
    unique_leads: Set[str] = field(default_factory=set)
    sold_leads: Set[str] = field(default_factory=set)
    quotes: int = 0
    items: int = 0
    premium: float = 0

    def add(self, row: QuotedHousehold) -> None:
        if row.lead_id:
            self.unique_leads.add(row.lead_id)

        self.quotes += row.lines_quoted or 0

        items_sold = row.items_sold or 0
        if items_sold > 0:
            self.items += items_sold
            self.premium += row.quoted_premium or 0
            if row.lead_id:
                self.sold_leads.add(row.lead_id)


def close_rate(sales: int, qhh: int) -> float:
    """Percentage of quoted households that sold; 0 when nothing was quoted."""
    if qhh <= 0:
        return 0.0
    return sales / qhh * 100


def _check_cancelled(cancel_event: Optional[threading.Event], stage: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.info("Weekly producer summary cancelled before %s", stage)
        raise AggregationCancelledError(stage)


def summarize_producers(
    entries: Sequence[DailyEntry],
    quoted_households: Iterable[QuotedHousehold],
    producers: Iterable[Producer],
) -> List[ProducerMetrics]:
    """
    Reduce already-fetched rows into ranked ProducerMetrics.

    Every producer that owns an entry gets a row, even with no quoted
    households. Rows whose entry is unknown are skipped.
    """
    entry_to_producer: Dict[str, str] = {}
    totals: Dict[str, _ProducerTotals] = {}
    for entry in entries:
        entry_to_producer[entry.id] = entry.producer_id
        if entry.producer_id not in totals:
            totals[entry.producer_id] = _ProducerTotals()

    names = {p.id: p.display_name for p in producers if p.display_name}

    skipped = 0
    for row in quoted_households:
        producer_id = entry_to_producer.get(row.daily_entry_id)
        if producer_id is None:
            skipped += 1
            continue
        totals[producer_id].add(row)

    if skipped:
        logger.debug("Skipped %d quoted households with unknown entries", skipped)

    results = []
    for producer_id, t in totals.items():
        qhh = len(t.unique_leads)
        sales = len(t.sold_leads)
        results.append(ProducerMetrics(
            producer_id=producer_id,
            producer_name=names.get(producer_id, UNKNOWN_PRODUCER_NAME),
            qhh=qhh,
            quotes=t.quotes,
            sales=sales,
            items=t.items,
            premium=t.premium,
            close_rate=close_rate(sales, qhh),
        ))

    # sorted() is stable: equal close rates keep first-seen producer order
    return sorted(results, key=lambda m: m.close_rate, reverse=True)


def get_weekly_producer_summary(
    from_date: str,
    to_date: str,
    store: ProducerActivityStore = None,
    cancel_event: Optional[threading.Event] = None,
) -> List[ProducerMetrics]:
    """
    Producer metrics for entries dated from_date..to_date (inclusive, CT dates).

    Args:
        from_date: First day, 'YYYY-MM-DD'.
        to_date: Last day, 'YYYY-MM-DD'.
        store: Data source (default: Supabase tables).
        cancel_event: Set by the caller to abandon the request; checked
            before each read and before the reduction.

    Returns:
        ProducerMetrics sorted by close rate, highest first.

    Raises:
        InvalidDateRangeError: malformed dates or from_date after to_date.
        DataFetchError: any of the three reads failed.
        DecodeError: a read returned rows of the wrong shape.
        AggregationCancelledError: cancel_event was set.
    """
    parse_date_range(from_date, to_date)
    store = store or SupabaseActivityStore()

    _check_cancelled(cancel_event, "daily_entries")
    entries = store.list_daily_entries(from_date, to_date)
    if not entries:
        logger.info("No daily entries between %s and %s", from_date, to_date)
        return []

    entry_ids = [e.id for e in entries]
    producer_ids = list(dict.fromkeys(e.producer_id for e in entries))

    _check_cancelled(cancel_event, "quoted_households")
    quoted_households = store.list_quoted_households(entry_ids)

    _check_cancelled(cancel_event, "producers")
    producers = store.list_producers(producer_ids)

    _check_cancelled(cancel_event, "aggregation")
    results = summarize_producers(entries, quoted_households, producers)

    logger.info(
        "Weekly producer summary %s..%s: %d producers, %d entries, %d quoted households",
        from_date, to_date, len(results), len(entries), len(quoted_households),
    )
    return results

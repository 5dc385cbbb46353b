"""Tests for the weekly producer aggregation."""

import threading

import pytest

from models.metrics_models import DailyEntry, Producer, QuotedHousehold
from scripts.analytics.weekly_producer_summary import (
    SupabaseActivityStore,
    get_weekly_producer_summary,
    summarize_producers,
)
from scripts.lib import supabase_client
from scripts.lib.errors import (
    AggregationCancelledError,
    DataFetchError,
    DecodeError,
    InvalidDateRangeError,
)


def qh(entry, lead, lines=1, items=0, premium=0):
    return {
        "daily_entry_id": entry,
        "lead_id": lead,
        "lines_quoted": lines,
        "items_sold": items,
        "quoted_premium": premium,
    }


def by_id(results):
    return {r.producer_id: r for r in results}


class TestWeeklyProducerSummary:
    def test_single_producer_scenario(self, fake_db):
        fake_db.tables = {
            "daily_entries": [{"id": "e1", "producer_id": "p1", "entry_date": "2025-09-02"}],
            "quoted_households": [
                qh("e1", "L1", lines=2, items=1, premium=500),
                qh("e1", "L1", lines=1, items=0, premium=0),
            ],
            "producers": [{"id": "p1", "display_name": "Alex"}],
        }

        results = get_weekly_producer_summary("2025-09-01", "2025-09-07")

        assert [r.model_dump() for r in results] == [{
            "producer_id": "p1",
            "producer_name": "Alex",
            "qhh": 1,
            "quotes": 3,
            "sales": 1,
            "items": 1,
            "premium": 500,
            "close_rate": 100,
        }]

    def test_no_entries_returns_empty_after_one_read(self, fake_db):
        fake_db.tables = {
            "daily_entries": [{"id": "e1", "producer_id": "p1", "entry_date": "2025-08-01"}],
        }

        assert get_weekly_producer_summary("2025-09-01", "2025-09-07") == []
        assert len(fake_db.calls) == 1
        assert fake_db.calls[0][1] == "daily_entries"

    def test_range_is_inclusive_on_both_ends(self, fake_db):
        fake_db.tables = {
            "daily_entries": [
                {"id": "e0", "producer_id": "p0", "entry_date": "2025-08-31"},
                {"id": "e1", "producer_id": "p1", "entry_date": "2025-09-01"},
                {"id": "e2", "producer_id": "p2", "entry_date": "2025-09-07"},
                {"id": "e3", "producer_id": "p3", "entry_date": "2025-09-08"},
            ],
            "quoted_households": [],
            "producers": [],
        }

        results = get_weekly_producer_summary("2025-09-01", "2025-09-07")

        assert set(by_id(results)) == {"p1", "p2"}

    def test_producer_without_quotes_gets_zero_row(self, fake_db):
        fake_db.tables = {
            "daily_entries": [
                {"id": "e1", "producer_id": "p1", "entry_date": "2025-09-02"},
                {"id": "e2", "producer_id": "p2", "entry_date": "2025-09-02"},
            ],
            "quoted_households": [qh("e1", "L1", items=1, premium=100)],
            "producers": [
                {"id": "p1", "display_name": "Alex"},
                {"id": "p2", "display_name": "Blair"},
            ],
        }

        idle = by_id(get_weekly_producer_summary("2025-09-01", "2025-09-07"))["p2"]

        assert idle.producer_name == "Blair"
        assert (idle.qhh, idle.quotes, idle.sales, idle.items) == (0, 0, 0, 0)
        assert idle.premium == 0
        assert idle.close_rate == 0

    def test_qhh_and_sales_count_distinct_leads(self, fake_db):
        fake_db.tables = {
            "daily_entries": [
                {"id": "e1", "producer_id": "p1", "entry_date": "2025-09-02"},
                {"id": "e2", "producer_id": "p1", "entry_date": "2025-09-03"},
            ],
            "quoted_households": [
                qh("e1", "L1", lines=2, items=1, premium=300),
                qh("e2", "L1", lines=1, items=2, premium=200),
                qh("e1", "L2", lines=3),
                qh("e2", "L3", lines=1),
            ],
            "producers": [{"id": "p1", "display_name": "Alex"}],
        }

        [row] = get_weekly_producer_summary("2025-09-01", "2025-09-07")

        assert row.qhh == 3
        assert row.sales == 1
        assert row.items == 3
        assert row.quotes == 7
        assert row.premium == 500
        assert row.close_rate == pytest.approx(100 / 3)

    def test_unsold_quotes_add_no_premium(self, fake_db):
        fake_db.tables = {
            "daily_entries": [{"id": "e1", "producer_id": "p1", "entry_date": "2025-09-02"}],
            "quoted_households": [
                qh("e1", "L1", lines=1, items=0, premium=900),
                qh("e1", "L2", lines=1, items=None, premium=400),
            ],
            "producers": [{"id": "p1", "display_name": "Alex"}],
        }

        [row] = get_weekly_producer_summary("2025-09-01", "2025-09-07")

        assert row.premium == 0
        assert row.sales == 0
        assert row.close_rate == 0

    def test_missing_values_default_to_zero(self, fake_db):
        fake_db.tables = {
            "daily_entries": [{"id": "e1", "producer_id": "p1", "entry_date": "2025-09-02"}],
            "quoted_households": [
                {"daily_entry_id": "e1", "lead_id": "L1", "lines_quoted": None,
                 "items_sold": 1, "quoted_premium": None},
            ],
            "producers": [{"id": "p1", "display_name": "Alex"}],
        }

        [row] = get_weekly_producer_summary("2025-09-01", "2025-09-07")

        assert row.quotes == 0
        assert row.items == 1
        assert row.premium == 0

    def test_sorted_by_close_rate_with_stable_ties(self, fake_db):
        fake_db.tables = {
            "daily_entries": [
                {"id": "e1", "producer_id": "p1", "entry_date": "2025-09-02"},
                {"id": "e2", "producer_id": "p2", "entry_date": "2025-09-02"},
                {"id": "e3", "producer_id": "p3", "entry_date": "2025-09-02"},
                {"id": "e4", "producer_id": "p4", "entry_date": "2025-09-02"},
            ],
            "quoted_households": [
                qh("e1", "A1"),
                qh("e2", "B1", items=1, premium=10),
                qh("e2", "B2"),
                qh("e3", "C1", items=1, premium=10),
                qh("e3", "C2"),
                qh("e4", "D1", items=1, premium=10),
            ],
            "producers": [],
        }

        results = get_weekly_producer_summary("2025-09-01", "2025-09-07")

        assert [r.producer_id for r in results] == ["p4", "p2", "p3", "p1"]
        assert all(0 <= r.close_rate <= 100 for r in results)

    def test_unknown_name_falls_back(self, fake_db):
        fake_db.tables = {
            "daily_entries": [{"id": "e1", "producer_id": "p9", "entry_date": "2025-09-02"}],
            "quoted_households": [],
            "producers": [],
        }

        [row] = get_weekly_producer_summary("2025-09-01", "2025-09-07")

        assert row.producer_name == "Unknown"

    def test_name_lookup_only_asks_for_entry_producers(self, fake_db):
        fake_db.tables = {
            "daily_entries": [
                {"id": "e1", "producer_id": "p1", "entry_date": "2025-09-02"},
                {"id": "e2", "producer_id": "p1", "entry_date": "2025-09-03"},
            ],
            "quoted_households": [],
            "producers": [{"id": "p1", "display_name": "Alex"}],
        }

        get_weekly_producer_summary("2025-09-01", "2025-09-07")

        [(_, _, filters)] = fake_db.table_calls("producers")
        assert filters == [("in", "id", ["p1"])]
        [(_, _, qh_filters)] = fake_db.table_calls("quoted_households")
        assert qh_filters == [("in", "daily_entry_id", ["e1", "e2"])]

    def test_quoted_households_past_the_row_cap_are_all_counted(self, fake_db, monkeypatch):
        monkeypatch.setattr(supabase_client, "PAGE_SIZE", 2)
        fake_db.max_rows = 2
        fake_db.tables = {
            "daily_entries": [{"id": "e1", "producer_id": "p1", "entry_date": "2025-09-02"}],
            "quoted_households": [
                {"id": f"q{i}", **qh("e1", f"L{i}", items=1 if i == 0 else 0, premium=100)}
                for i in range(5)
            ],
            "producers": [{"id": "p1", "display_name": "Alex"}],
        }

        [row] = get_weekly_producer_summary("2025-09-01", "2025-09-07")

        assert row.qhh == 5
        assert row.quotes == 5
        assert row.sales == 1
        assert row.close_rate == 20
        assert len(fake_db.table_calls("quoted_households")) == 3

    @pytest.mark.parametrize("table", ["daily_entries", "quoted_households", "producers"])
    def test_read_failure_propagates(self, fake_db, table):
        fake_db.tables = {
            "daily_entries": [{"id": "e1", "producer_id": "p1", "entry_date": "2025-09-02"}],
            "quoted_households": [],
            "producers": [],
        }
        cause = RuntimeError("connection reset")
        fake_db.errors[table] = cause

        with pytest.raises(DataFetchError) as exc_info:
            get_weekly_producer_summary("2025-09-01", "2025-09-07")

        assert exc_info.value.source == table
        assert exc_info.value.cause is cause

    def test_malformed_rows_raise_decode_error(self, fake_db):
        fake_db.tables = {
            "daily_entries": [{"id": "e1", "producer_id": None, "entry_date": "2025-09-02"}],
        }

        with pytest.raises(DecodeError):
            get_weekly_producer_summary("2025-09-01", "2025-09-07")

    @pytest.mark.parametrize("from_date,to_date", [
        ("2025-09-07", "2025-09-01"),
        ("2025-13-01", "2025-13-07"),
        ("last week", "2025-09-07"),
    ])
    def test_invalid_range_rejected_before_reading(self, fake_db, from_date, to_date):
        with pytest.raises(InvalidDateRangeError):
            get_weekly_producer_summary(from_date, to_date)
        assert fake_db.calls == []

    def test_cancelled_before_start(self, fake_db):
        event = threading.Event()
        event.set()

        with pytest.raises(AggregationCancelledError):
            get_weekly_producer_summary("2025-09-01", "2025-09-07", cancel_event=event)
        assert fake_db.calls == []

    def test_cancelled_between_reads(self, fake_db):
        event = threading.Event()
        fake_db.tables = {
            "daily_entries": [{"id": "e1", "producer_id": "p1", "entry_date": "2025-09-02"}],
        }

        class CancellingStore(SupabaseActivityStore):
            def list_daily_entries(self, from_date, to_date):
                entries = super().list_daily_entries(from_date, to_date)
                event.set()
                return entries

        with pytest.raises(AggregationCancelledError):
            get_weekly_producer_summary(
                "2025-09-01", "2025-09-07", store=CancellingStore(), cancel_event=event,
            )
        assert fake_db.table_calls("quoted_households") == []


class TestSummarizeProducers:
    def test_rows_for_unknown_entries_are_skipped(self):
        results = summarize_producers(
            [DailyEntry(id="e1", producer_id="p1")],
            [
                QuotedHousehold(daily_entry_id="e1", lead_id="L1", lines_quoted=1),
                QuotedHousehold(daily_entry_id="ghost", lead_id="L2", lines_quoted=5,
                                items_sold=3, quoted_premium=1000),
            ],
            [Producer(id="p1", display_name="Alex")],
        )

        [row] = results
        assert row.qhh == 1
        assert row.quotes == 1
        assert row.premium == 0

    def test_each_call_starts_from_zero(self):
        entries = [DailyEntry(id="e1", producer_id="p1")]
        rows = [QuotedHousehold(daily_entry_id="e1", lead_id="L1", lines_quoted=2)]

        first = summarize_producers(entries, rows, [])
        second = summarize_producers(entries, rows, [])

        assert first == second
        assert second[0].quotes == 2

    def test_numeric_ids_are_read_as_strings(self):
        [row] = summarize_producers(
            [DailyEntry.model_validate({"id": 1, "producer_id": 7})],
            [QuotedHousehold.model_validate({"daily_entry_id": 1, "lead_id": 42, "lines_quoted": 1})],
            [Producer.model_validate({"id": 7, "display_name": "Casey"})],
        )

        assert row.producer_id == "7"
        assert row.producer_name == "Casey"
        assert row.qhh == 1

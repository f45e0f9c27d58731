"""
Unit tests for RevenueAggregator month bucketing.

Covers the trailing window layout, inclusive month boundaries, tolerant
timestamp parsing and the amount sanitising rules.
"""

from decimal import Decimal

import pandas as pd
import pytest

from config.settings import ACCEPTED_REVENUE_STATUSES
from src.processing.revenue import (
    RevenueAggregator,
    MonetaryRecord,
    aggregate_revenue,
    buckets_to_dataframe,
    filter_accepted,
    month_windows,
    normalize_status,
    parse_amount,
    parse_timestamp,
)

NOW = pd.Timestamp("2025-06-15 10:00:00")


def _totals(buckets):
    return {(b.start.year, b.start.month): b.total for b in buckets}


def test_window_is_twelve_months_ending_current_month():
    buckets = RevenueAggregator(12).aggregate([], now=NOW)

    assert len(buckets) == 12
    assert buckets[0].start == pd.Timestamp("2024-07-01")
    assert buckets[-1].start == pd.Timestamp("2025-06-01")
    assert [b.label for b in buckets][:2] == ["juil.", "août"]
    assert buckets[-1].label == "juin"
    # Every bucket present and zero
    assert all(b.total == Decimal("0") for b in buckets)


def test_windows_are_contiguous_and_chronological():
    windows = month_windows(12, now=NOW)
    for (start, end), (next_start, _) in zip(windows, windows[1:]):
        assert start < end < next_start
        assert next_start - end == pd.Timedelta(1, unit="ns")


def test_sum_of_buckets_matches_in_window_records():
    records = [
        MonetaryRecord(1000, "2024-07-01 00:00:00+00"),
        MonetaryRecord("250.50", "2025-03-10 09:00:00"),
        MonetaryRecord(99.5, "2025-06-14"),
        # Outside the window
        MonetaryRecord(5000, "2024-06-15 12:00:00"),
        MonetaryRecord(7000, "2025-07-02 12:00:00"),
    ]

    buckets = RevenueAggregator(12).aggregate(records, now=NOW)

    assert sum(b.total for b in buckets) == Decimal("1000") + Decimal("250.50") + Decimal("99.5")
    totals = _totals(buckets)
    assert totals[(2025, 3)] == Decimal("250.50")
    assert totals[(2025, 6)] == Decimal("99.5")


def test_last_instant_of_month_stays_in_month():
    records = [
        MonetaryRecord(100, "2025-01-31 23:59:59.999999"),
        MonetaryRecord(10, "2025-02-01 00:00:00"),
    ]

    totals = _totals(RevenueAggregator(12).aggregate(records, now=NOW))

    assert totals[(2025, 1)] == Decimal("100")
    assert totals[(2025, 2)] == Decimal("10")


def test_utc_timestamps_are_bucketed_in_local_time():
    # 22:30 UTC on Jan 31st is still January in Paris, 23:30 UTC is February
    records = [
        MonetaryRecord(1, "2025-01-31 22:30:00+00"),
        MonetaryRecord(2, "2025-01-31 23:30:00+00"),
    ]

    totals = _totals(RevenueAggregator(12).aggregate(records, now=NOW))

    assert totals[(2025, 1)] == Decimal("1")
    assert totals[(2025, 2)] == Decimal("2")


def test_unparseable_timestamps_belong_to_no_bucket():
    records = [
        MonetaryRecord(100, None),
        MonetaryRecord(100, ""),
        MonetaryRecord(100, "pas une date"),
        MonetaryRecord(100, "0000-00-00 00:00:00"),
        MonetaryRecord(100, "1970-01-01 00:00:00+00"),
    ]

    buckets = RevenueAggregator(12).aggregate(records, now=NOW)

    assert sum(b.total for b in buckets) == Decimal("0")


def test_bad_amounts_contribute_zero():
    records = [
        MonetaryRecord(-50, "2025-05-01"),
        MonetaryRecord("abc", "2025-05-02"),
        MonetaryRecord(None, "2025-05-03"),
        MonetaryRecord(float("nan"), "2025-05-04"),
        MonetaryRecord(float("inf"), "2025-05-05"),
        MonetaryRecord(40, "2025-05-06"),
    ]

    totals = _totals(RevenueAggregator(12).aggregate(records, now=NOW))

    assert totals[(2025, 5)] == Decimal("40")


def test_decimal_summation_is_exact():
    records = [MonetaryRecord(0.1, "2025-04-01"), MonetaryRecord(0.2, "2025-04-02")]

    totals = _totals(RevenueAggregator(12).aggregate(records, now=NOW))

    assert totals[(2025, 4)] == Decimal("0.3")


def test_aggregate_is_idempotent():
    records = [MonetaryRecord(120, "2025-02-11 08:00:00"), MonetaryRecord(30, "2024-12-24")]
    aggregator = RevenueAggregator(12)

    assert aggregator.aggregate(records, now=NOW) == aggregator.aggregate(records, now=NOW)


def test_aggregate_revenue_reads_backend_rows():
    rows = [
        {"montant_ttc": 1500, "date_creation": "2025-06-01 08:00:00+00"},
        {"montant_ttc": None, "date_creation": "2025-06-02 08:00:00+00"},
    ]

    buckets = aggregate_revenue(rows, window_months=3, now=NOW)

    assert len(buckets) == 3
    assert buckets[-1].total == Decimal("1500")


def test_aggregate_revenue_accepts_none():
    assert len(aggregate_revenue(None, now=NOW)) == 12


def test_invalid_window_raises():
    with pytest.raises(ValueError):
        RevenueAggregator(0)


def test_parse_timestamp_accepts_space_separator_and_short_offset():
    ts = parse_timestamp("2025-12-30 12:11:02+00")
    assert ts == pd.Timestamp("2025-12-30 13:11:02")
    assert ts.tzinfo is None


def test_parse_amount_accepts_numeric_strings():
    assert parse_amount("1234.56") == Decimal("1234.56")
    assert parse_amount(True) == Decimal("0")


def test_month_bucket_contains_whole_last_day():
    bucket = RevenueAggregator(1).aggregate([], now="2025-02-10")[0]

    assert bucket.contains(pd.Timestamp("2025-02-28 23:59:59.999999999"))
    assert not bucket.contains(pd.Timestamp("2025-03-01 00:00:00"))
    assert not bucket.contains(pd.NaT)


def test_filter_accepted_tolerates_case_and_accents():
    rows = [
        {"statut": "Payé"},
        {"statut": "PAYES"},
        {"statut": "signé"},
        {"statut": "Accepte"},
        {"statut": "refusé"},
        {"statut": None},
    ]

    kept = filter_accepted(rows, ACCEPTED_REVENUE_STATUSES)

    assert [r["statut"] for r in kept] == ["Payé", "PAYES", "signé", "Accepte"]


def test_normalize_status():
    assert normalize_status("  Accepté ") == "accepte"


def test_buckets_to_dataframe():
    buckets = RevenueAggregator(2).aggregate([MonetaryRecord(10, "2025-06-01")], now=NOW)
    df = buckets_to_dataframe(buckets)

    assert list(df["month"]) == ["mai", "juin"]
    assert list(df["revenue"]) == [0.0, 10.0]

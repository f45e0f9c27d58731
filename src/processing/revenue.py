"""
Monthly Revenue Aggregation

Buckets quote amounts into the trailing calendar months shown on the
revenue chart.
"""

import logging
import re
import unicodedata
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from config.settings import LOCAL_TIMEZONE, MONTH_ABBR_MAP, REVENUE_WINDOW_MONTHS

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# "+00" / "-05" offsets as returned by PostgreSQL
_SHORT_UTC_OFFSET = re.compile(r"([+-]\d{2})$")


@dataclass(frozen=True)
class MonetaryRecord:
    """An amount with the timestamp it is attributed to."""
    amount: Any
    timestamp: Any

    @classmethod
    def from_row(
        cls,
        row: Mapping[str, Any],
        amount_key: str = "montant_ttc",
        timestamp_key: str = "date_creation"
    ) -> "MonetaryRecord":
        return cls(amount=row.get(amount_key), timestamp=row.get(timestamp_key))


@dataclass(frozen=True)
class MonthBucket:
    """Revenue total for one calendar month."""
    label: str
    start: pd.Timestamp
    end: pd.Timestamp
    total: Decimal

    def contains(self, ts: pd.Timestamp) -> bool:
        if pd.isna(ts):
            return False
        return self.start <= ts <= self.end


def parse_amount(value: Any) -> Decimal:
    """
    Convert a raw amount to Decimal.

    Missing, non-numeric, non-finite and negative amounts count as zero.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    if not amount.is_finite() or amount < 0:
        return ZERO
    return amount


def parse_timestamp(value: Any) -> pd.Timestamp:
    """
    Parse a backend timestamp into a naive local-time Timestamp.

    Accepts a space instead of 'T' between date and time and short UTC
    offsets ("2025-12-30 12:11:02+00"). Aware values are converted to the
    local timezone. Anything unparseable returns NaT.

    Args:
        value: Raw timestamp (string, datetime or Timestamp)

    Returns:
        Parsed timestamp or NaT
    """
    if value is None:
        return pd.NaT

    if isinstance(value, (pd.Timestamp, datetime)):
        ts = pd.Timestamp(value)
    else:
        str_val = str(value).strip()
        if not str_val or str_val.startswith('0000') or str_val.lower() in ('none', 'nan', 'nat'):
            return pd.NaT
        str_val = str_val.replace(' ', 'T', 1)
        str_val = _SHORT_UTC_OFFSET.sub(r"\1:00", str_val) if 'T' in str_val else str_val
        try:
            ts = pd.to_datetime(str_val, errors='coerce')
        except (ValueError, TypeError, OverflowError):
            return pd.NaT

    if pd.isna(ts):
        return pd.NaT
    if ts.tzinfo is not None:
        ts = ts.tz_convert(LOCAL_TIMEZONE).tz_localize(None)
    return ts


def local_now() -> pd.Timestamp:
    """Current time in the local timezone, as a naive Timestamp."""
    return pd.Timestamp.now(tz=LOCAL_TIMEZONE).tz_localize(None)


def month_windows(window_months: int, now: Optional[Any] = None) -> List[Tuple[pd.Timestamp, pd.Timestamp]]:
    """
    Build inclusive (start, end) ranges for the trailing calendar months.

    The last range is the month of `now`. Each end is the last nanosecond of
    its month, so the whole last day belongs to the month.

    Args:
        window_months: Number of months in the window
        now: Reference time (defaults to local now)

    Returns:
        List of (month_start, month_end), oldest first
    """
    if window_months < 1:
        raise ValueError(f"window_months must be >= 1, got {window_months}")

    ref = local_now() if now is None else parse_timestamp(now)
    if pd.isna(ref):
        raise ValueError(f"Invalid reference time: {now!r}")

    current_month = pd.Timestamp(ref.year, ref.month, 1)
    starts = pd.date_range(end=current_month, periods=window_months, freq="MS")
    return [
        (start, start + pd.offsets.MonthBegin(1) - pd.Timedelta(1, unit="ns"))
        for start in starts
    ]


def normalize_status(status: Any) -> str:
    """Lowercase a status label and strip its accents ('Payé' -> 'paye')."""
    text = unicodedata.normalize("NFKD", str(status or "")).strip()
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return text.casefold()


def filter_accepted(
    rows: Iterable[Mapping[str, Any]],
    accepted: Sequence[str],
    status_key: str = "statut"
) -> List[Mapping[str, Any]]:
    """
    Keep rows whose status matches one of the accepted labels.

    Comparison ignores case and accents, so any spelling variant of an
    accepted label qualifies.
    """
    accepted_norm = {normalize_status(s) for s in accepted}
    return [row for row in rows if normalize_status(row.get(status_key)) in accepted_norm]


class RevenueAggregator:
    """
    Sums amounts per calendar month over a trailing window.

    Status-agnostic: callers pass only the records that count as revenue.
    """

    def __init__(self, window_months: int = REVENUE_WINDOW_MONTHS):
        if window_months < 1:
            raise ValueError(f"window_months must be >= 1, got {window_months}")
        self.window_months = window_months

    def aggregate(self, records: Iterable[MonetaryRecord], now: Optional[Any] = None) -> List[MonthBucket]:
        """
        Bucket records by month.

        Args:
            records: Monetary records
            now: Reference time for the window (defaults to local now)

        Returns:
            One MonthBucket per month of the window, oldest first
        """
        windows = month_windows(self.window_months, now)
        totals: Dict[Tuple[int, int], Decimal] = {
            (start.year, start.month): ZERO for start, _ in windows
        }

        skipped = 0
        for record in records:
            ts = parse_timestamp(record.timestamp)
            if pd.isna(ts):
                skipped += 1
                continue
            key = (ts.year, ts.month)
            if key in totals:
                totals[key] += parse_amount(record.amount)

        if skipped:
            logger.debug("Skipped %d record(s) without a usable timestamp", skipped)

        return [
            MonthBucket(
                label=MONTH_ABBR_MAP[start.month],
                start=start,
                end=end,
                total=totals[(start.year, start.month)],
            )
            for start, end in windows
        ]


def aggregate_revenue(
    rows: Iterable[Mapping[str, Any]],
    window_months: int = REVENUE_WINDOW_MONTHS,
    now: Optional[Any] = None,
    amount_key: str = "montant_ttc",
    timestamp_key: str = "date_creation"
) -> List[MonthBucket]:
    """
    Convenience function to aggregate backend rows.

    Args:
        rows: Row dicts from the backend
        window_months: Number of trailing months
        now: Reference time
        amount_key: Column holding the amount
        timestamp_key: Column holding the timestamp

    Returns:
        Month buckets, oldest first
    """
    records = [MonetaryRecord.from_row(row, amount_key, timestamp_key) for row in rows or []]
    return RevenueAggregator(window_months).aggregate(records, now=now)


def buckets_to_dataframe(buckets: Sequence[MonthBucket]) -> pd.DataFrame:
    """Chart-ready DataFrame with 'month' and 'revenue' columns."""
    return pd.DataFrame(
        {
            "month": [b.label for b in buckets],
            "month_start": [b.start for b in buckets],
            "revenue": [float(b.total) for b in buckets],
        }
    )

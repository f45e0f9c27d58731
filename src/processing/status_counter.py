"""
Lead Status Counting

Counts leads per lifecycle status for the status pie chart.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping

import pandas as pd

from config.settings import LEAD_STATUS_COLORS, LEAD_STATUS_DEFAULT_COLOR, UNDEFINED_LABEL


@dataclass(frozen=True)
class StatusRecord:
    """A record's lifecycle status."""
    status: Any

    @classmethod
    def from_row(cls, row: Mapping[str, Any], status_key: str = "statut") -> "StatusRecord":
        return cls(status=row.get(status_key))


class StatusCounter:
    """
    Counts occurrences per distinct status.

    Output keeps the order in which each status was first seen. Unknown
    statuses are counted like any other; an empty status is counted under
    the undefined label.
    """

    @staticmethod
    def _label(status: Any) -> str:
        if status is None or (isinstance(status, float) and pd.isna(status)):
            return UNDEFINED_LABEL
        label = str(status).strip()
        return label or UNDEFINED_LABEL

    def count(self, records: Iterable[StatusRecord]) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for record in records:
            label = self._label(record.status)
            counts[label] = counts.get(label, 0) + 1
        return counts

    @staticmethod
    def to_dataframe(counts: Dict[str, int]) -> pd.DataFrame:
        """
        Chart-ready DataFrame with name, value and color columns.

        Statuses outside the known vocabulary get the default colour.
        """
        return pd.DataFrame(
            [
                {
                    "name": name,
                    "value": value,
                    "color": LEAD_STATUS_COLORS.get(name, LEAD_STATUS_DEFAULT_COLOR),
                }
                for name, value in counts.items()
            ],
            columns=["name", "value", "color"],
        )


def count_statuses(rows: Iterable[Mapping[str, Any]], status_key: str = "statut") -> Dict[str, int]:
    """Convenience function to count statuses of backend rows."""
    return StatusCounter().count(StatusRecord.from_row(row, status_key) for row in rows or [])

"""
Top Clients Aggregation

Ranks clients by accepted-quote revenue for the top clients bar chart.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping

import pandas as pd

from config.settings import TOP_CLIENTS_LIMIT, UNDEFINED_LABEL
from .revenue import ZERO, parse_amount


@dataclass(frozen=True)
class ClientTotal:
    client: str
    total: Decimal
    count: int


class TopClientsAggregator:
    """Sums amounts per client and keeps the largest totals."""

    def __init__(self, limit: int = TOP_CLIENTS_LIMIT):
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        self.limit = limit

    def aggregate(
        self,
        rows: Iterable[Mapping[str, Any]],
        client_key: str = "client_nom",
        amount_key: str = "montant_ttc"
    ) -> List[ClientTotal]:
        """
        Rank clients by total amount.

        Args:
            rows: Row dicts from the backend
            client_key: Column holding the client name
            amount_key: Column holding the amount

        Returns:
            At most `limit` ClientTotal, largest total first (ties by name)
        """
        totals: Dict[str, Decimal] = {}
        counts: Dict[str, int] = {}
        for row in rows or []:
            name = str(row.get(client_key) or "").strip() or UNDEFINED_LABEL
            totals[name] = totals.get(name, ZERO) + parse_amount(row.get(amount_key))
            counts[name] = counts.get(name, 0) + 1

        ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
        return [
            ClientTotal(client=name, total=total, count=counts[name])
            for name, total in ranked[:self.limit]
        ]

    @staticmethod
    def to_dataframe(clients: List[ClientTotal]) -> pd.DataFrame:
        return pd.DataFrame(
            [{"client": c.client, "total": float(c.total), "count": c.count} for c in clients],
            columns=["client", "total", "count"],
        )

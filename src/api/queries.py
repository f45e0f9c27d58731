"""
Dashboard Queries

The fixed set of backend queries used by the statistics page and the
exports, each cached under its own query identifier.
"""

from typing import Any, Dict, List, Optional

from config.settings import settings, ACCEPTED_REVENUE_STATUSES
from .backend import BackendClient
from .cache import QueryCache


# Query identifiers
REVENUE_QUERY = "revenueChart"
LEADS_BY_STATUS_QUERY = "leadsByStatus"
TOP_CLIENTS_QUERY = "topClients"
EXPORT_QUERY_PREFIX = "export:"

# Tables available for export
EXPORT_TABLES = ("leads", "devis", "chantiers")


class StatsQueries:
    """
    Cached accessors for the dashboard data.

    Call `refresh()` to force every query to hit the backend again.
    """

    def __init__(
        self,
        backend: Optional[BackendClient] = None,
        cache: Optional[QueryCache] = None
    ):
        self.backend = backend or BackendClient()
        self.cache = cache or QueryCache(ttl=settings.query_cache_ttl)

    def accepted_devis_amounts(self) -> List[Dict[str, Any]]:
        """Amounts and creation dates of quotes with an accepted status."""
        return self.cache.get_or_fetch(
            REVENUE_QUERY,
            lambda: self.backend.select(
                "devis",
                ["montant_ttc", "date_creation"],
                in_filters={"statut": ACCEPTED_REVENUE_STATUSES},
            ),
        )

    def lead_statuses(self) -> List[Dict[str, Any]]:
        """Status of every lead."""
        return self.cache.get_or_fetch(
            LEADS_BY_STATUS_QUERY,
            lambda: self.backend.select("leads", ["statut"]),
        )

    def accepted_devis_by_client(self) -> List[Dict[str, Any]]:
        """Client names and amounts of quotes with an accepted status."""
        return self.cache.get_or_fetch(
            TOP_CLIENTS_QUERY,
            lambda: self.backend.select(
                "devis",
                ["client_nom", "montant_ttc"],
                in_filters={"statut": ACCEPTED_REVENUE_STATUSES},
            ),
        )

    def table_rows(self, table: str) -> List[Dict[str, Any]]:
        """All columns of a table, for export."""
        if table not in EXPORT_TABLES:
            raise ValueError(f"Unknown export table: {table}")
        return self.cache.get_or_fetch(
            f"{EXPORT_QUERY_PREFIX}{table}",
            lambda: self.backend.select(table, ["*"]),
        )

    def refresh(self) -> None:
        """Invalidate every cached query."""
        self.cache.invalidate()

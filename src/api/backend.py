"""
Supabase Data Backend Client

Runs column-projected select queries against the hosted Supabase tables.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from supabase import Client, create_client

from config.settings import settings

logger = logging.getLogger(__name__)


class BackendClient:
    """
    Thin query wrapper around the Supabase client.

    Every query returns a list of plain dict rows. A null payload from the
    backend is returned as an empty list.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        key: Optional[str] = None
    ):
        """
        Initialize the backend client.

        Args:
            url: Supabase project URL (defaults to settings)
            key: Supabase anon/service key (defaults to settings)
        """
        self.url = url or settings.supabase_url
        self.key = key or settings.supabase_key
        self._client: Optional[Client] = None

    @property
    def client(self) -> Client:
        """Get or create the Supabase client."""
        if self._client is None:
            if not self.url or not self.key:
                raise BackendConfigurationError(
                    "SUPABASE_URL and SUPABASE_KEY must be configured"
                )
            self._client = create_client(self.url, self.key)
        return self._client

    def select(
        self,
        table: str,
        columns: Sequence[str],
        in_filters: Optional[Dict[str, Sequence[Any]]] = None
    ) -> List[Dict[str, Any]]:
        """
        Fetch rows from a table.

        Args:
            table: Table name (e.g. 'devis', 'leads')
            columns: Columns to project
            in_filters: Optional {column: allowed values} `in` filters

        Returns:
            List of row dicts

        Raises:
            BackendConfigurationError: If the backend is not configured
            BackendQueryError: If the query fails
        """
        client = self.client
        columns_str = ", ".join(columns) if columns else "*"

        try:
            query = client.table(table).select(columns_str)
            for column, values in (in_filters or {}).items():
                query = query.in_(column, list(values))
            response = query.execute()
        except Exception as e:
            raise BackendQueryError(f"Failed to query table '{table}': {e}") from e

        rows = response.data or []
        logger.info("Fetched %d row(s) from %s", len(rows), table)
        return rows


class BackendConfigurationError(Exception):
    """Raised when the Supabase URL or key is missing."""
    pass


class BackendQueryError(Exception):
    """Raised when a Supabase query fails."""
    pass

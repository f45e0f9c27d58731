"""API clients for the data backend and the report service."""
from .backend import BackendClient, BackendQueryError
from .cache import QueryCache
from .queries import StatsQueries
from .rapport import ReportRequestClient, ReportConfig, ReportResult, ReportStatus

__all__ = [
    "BackendClient",
    "BackendQueryError",
    "QueryCache",
    "StatsQueries",
    "ReportRequestClient",
    "ReportConfig",
    "ReportResult",
    "ReportStatus",
]

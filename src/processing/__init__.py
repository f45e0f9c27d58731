"""Data processing modules."""
from .revenue import RevenueAggregator, MonetaryRecord, MonthBucket
from .status_counter import StatusCounter, StatusRecord
from .top_clients import TopClientsAggregator, ClientTotal

__all__ = [
    "RevenueAggregator",
    "MonetaryRecord",
    "MonthBucket",
    "StatusCounter",
    "StatusRecord",
    "TopClientsAggregator",
    "ClientTotal",
]

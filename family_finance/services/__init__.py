"""
Services Package

Store access plus the read-side services built on it.
"""

from family_finance.services.balance import BalanceService, summarize_balance
from family_finance.services.reports import ReportService
from family_finance.services.store import (
    InfrastructureError,
    PostgresQueryStore,
    QueryFailedError,
    QueryStoreInterface,
    StoreConnectionError,
)
from family_finance.services.tasks import TaskCorrelationService

__all__ = [
    "BalanceService",
    "summarize_balance",
    "ReportService",
    "TaskCorrelationService",
    # Store
    "InfrastructureError",
    "PostgresQueryStore",
    "QueryFailedError",
    "QueryStoreInterface",
    "StoreConnectionError",
]

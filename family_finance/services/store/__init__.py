"""
Query Store Package

Abstract read interface plus the PostgreSQL implementation.
"""

from family_finance.services.store.interface import (
    InfrastructureError,
    QueryFailedError,
    QueryStoreInterface,
    StoreConnectionError,
)
from family_finance.services.store.postgres import PostgresQueryStore

__all__ = [
    # Interface
    "QueryStoreInterface",
    # Exceptions
    "InfrastructureError",
    "QueryFailedError",
    "StoreConnectionError",
    # PostgreSQL implementation
    "PostgresQueryStore",
]

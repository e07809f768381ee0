"""
Abstract Query Store Interface

DESIGN DECISION: Services talk to a tiny read interface instead of a
database driver. This allows us to:
1. Swap PostgreSQL for any other SQL backend
2. Use an in-memory fake for testing
3. Keep SQL text and parameter binding in the services that own them

The interface is intentionally minimal: parameterized SQL in, plain
row dicts out. Values are always bound as positional parameters
($1, $2, ...) and never interpolated into the SQL text.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any


class QueryStoreInterface(ABC):
    """
    Abstract interface for read access to a SQL store.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """
        Run a parameterized query.

        Args:
            sql: SQL text with $n placeholders
            params: Positional values for the placeholders

        Returns:
            One dict per row, keyed by column name (or alias)

        Raises:
            StoreConnectionError: If the store cannot be reached
            QueryFailedError: If the query itself fails
        """
        pass

    async def close(self) -> None:
        """Release any held resources. No-op by default."""
        return None


# =============================================================================
# EXCEPTIONS
# =============================================================================

class InfrastructureError(Exception):
    """Base exception for store failures."""
    pass


class StoreConnectionError(InfrastructureError):
    """Could not connect to the storage backend."""
    pass


class QueryFailedError(InfrastructureError):
    """The backend rejected or failed to run a query."""
    pass

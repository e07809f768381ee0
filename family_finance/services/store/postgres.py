"""
PostgreSQL Query Store

Implements QueryStoreInterface over an asyncpg connection pool.

TRADEOFFS:
- The pool is created lazily on first query, so building the app
  components never needs a reachable database.
- Only pool creation is retried. A failed query is reported at once;
  retrying reads here would hide slow or broken queries.
"""

from collections.abc import Sequence
from typing import Any, Optional

import asyncpg
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from family_finance.audit.logger import get_logger
from family_finance.config import DatabaseSettings
from family_finance.services.store.interface import (
    QueryFailedError,
    QueryStoreInterface,
    StoreConnectionError,
)

logger = get_logger(__name__)


class PostgresQueryStore(QueryStoreInterface):
    """
    asyncpg-backed store for one database.

    One instance per database (tasks, finance). Safe to share between
    coroutines; the pool serializes connection checkout itself.
    """

    def __init__(self, settings: DatabaseSettings):
        self._settings = settings
        self._pool: Optional[asyncpg.Pool] = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(StoreConnectionError),
        reraise=True,
    )
    async def connect(self) -> asyncpg.Pool:
        """
        Create the connection pool if needed.

        Raises:
            StoreConnectionError: After three failed attempts
        """
        if self._pool is None:
            try:
                self._pool = await asyncpg.create_pool(
                    dsn=self._settings.dsn,
                    min_size=self._settings.pool_min_size,
                    max_size=self._settings.pool_max_size,
                    command_timeout=self._settings.command_timeout,
                )
            except (OSError, asyncpg.PostgresError) as e:
                logger.warning(
                    "pool_init_failed",
                    host=self._settings.host,
                    database=self._settings.name,
                    error=str(e),
                )
                raise StoreConnectionError(
                    f"Failed to connect to {self._settings.host}/{self._settings.name}: {e}"
                )
            logger.info(
                "pool_initialized",
                host=self._settings.host,
                database=self._settings.name,
            )
        return self._pool

    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        pool = await self.connect()
        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(sql, *params)
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            raise QueryFailedError(f"Query failed on {self._settings.name}: {e}")
        return [dict(row) for row in rows]

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("pool_closed", database=self._settings.name)

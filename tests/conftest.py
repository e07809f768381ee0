"""
Shared fixtures.

No test touches a real database: stores are replaced by an in-memory
fake that records every SQL statement and returns canned rows.
"""

from collections.abc import Sequence
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from family_finance.audit import AuditLogger
from family_finance.currency import CurrencyConverter
from family_finance.services.store.interface import QueryStoreInterface

FIXED_NOW = datetime(2024, 3, 15, 12, 30, 0, tzinfo=timezone.utc)


class FakeQueryStore(QueryStoreInterface):
    """
    In-memory store.

    Responses are served in order; each call records (sql, params).
    An Exception instance in the response list is raised instead.
    """

    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.calls: list[tuple[str, list[Any]]] = []

    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        self.calls.append((sql, list(params)))
        response = self.responses.pop(0) if self.responses else []
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def test_rates():
    return {
        "MXN": Decimal("1.00"),
        "USD": Decimal("17.00"),
        "EUR": Decimal("18.50"),
        "PEN": Decimal("4.50"),
        "COP": Decimal("0.0042"),
        "CLP": Decimal("0.019"),
    }


@pytest.fixture
def mock_logger():
    return MagicMock()


@pytest.fixture
def converter(test_rates, mock_logger):
    return CurrencyConverter(rates=test_rates, native_currency="MXN", logger=mock_logger)


@pytest.fixture
def audit_logger():
    """AuditLogger whose wrappers are all async mocks."""
    return MagicMock(spec=AuditLogger, **{
        name: AsyncMock() for name in (
            "log",
            "log_record_built",
            "log_record_rejected",
            "log_report_query_built",
            "log_metrics_query_built",
            "log_query_rejected",
            "log_tasks_correlated",
            "log_balance_computed",
            "log_report_generated",
            "log_unknown_currency",
            "log_store_error",
        )
    })

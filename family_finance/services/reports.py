"""
Finance Report Service

Aggregates expenses and incomes over a resolved window into chart-ready
labels and datasets.

Grouping dimensions:
- date:     one bucket per period label (day, week, month, year)
- category: expenses per category, largest first
- source:   incomes per source, largest first
- member:   expenses, incomes and balance per household member

CRITICAL: Every SQL aggregate is grouped by currency as well, and each
partial total is converted into the report currency BEFORE it is added
to a bucket. Rows in other currencies are never silently dropped.
"""

import asyncio
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional

from family_finance.audit.logger import get_logger
from family_finance.currency import CurrencyConverter
from family_finance.models.finance import (
    DateRange,
    FinanceReport,
    ReportDataset,
    ReportGroupBy,
    ReportPeriod,
    ReportQuery,
)
from family_finance.reports.range import DataBounds, period_labels, resolve_report_range
from family_finance.services.store.interface import QueryStoreInterface
from family_finance.timestamps import parse_timestamp, to_iso

logger = get_logger(__name__)

EXPENSES_COLOR = "#F44336"
INCOME_COLOR = "#2196F3"
BALANCE_COLOR = "#4CAF50"

_BOUNDS_SQL = """
    SELECT MIN(date) AS min, MAX(date) AS max
    FROM (
        SELECT date FROM expenses
        UNION ALL
        SELECT date FROM income
    ) AS movements
"""

_WINDOW = "WHERE date >= $1 AND date <= $2"

_BY_CATEGORY_SQL = f"""
    SELECT category_id AS label, currency, SUM(amount) AS total
    FROM expenses
    {_WINDOW}
    GROUP BY category_id, currency
"""

_BY_SOURCE_SQL = f"""
    SELECT source AS label, currency, SUM(amount) AS total
    FROM income
    {_WINDOW}
    GROUP BY source, currency
"""

_BY_MEMBER_SQL = """
    SELECT member_id AS label, currency, SUM(amount) AS total
    FROM {table}
    WHERE date >= $1 AND date <= $2 AND member_id IS NOT NULL
    GROUP BY member_id, currency
"""

_BY_DAY_SQL = """
    SELECT DATE(date) AS day, currency, SUM(amount) AS total
    FROM {table}
    WHERE date >= $1 AND date <= $2
    GROUP BY DATE(date), currency
    ORDER BY day ASC
"""


def _row_day(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _bucket_index(day: date, buckets: list[date], period: Optional[str]) -> Optional[int]:
    """Index of the bucket a day falls into, or None when outside all buckets."""
    for index, start in enumerate(buckets):
        if period == ReportPeriod.WEEK.value:
            if start <= day < start + timedelta(days=7):
                return index
        elif period == ReportPeriod.MONTH.value:
            if (day.year, day.month) == (start.year, start.month):
                return index
        elif period == ReportPeriod.YEAR.value:
            if day.year == start.year:
                return index
        elif day == start:
            return index
    return None


def _balance(incomes: list[Decimal], expenses: list[Decimal]) -> list[Decimal]:
    return [income - expense for income, expense in zip(incomes, expenses)]


class ReportService:
    """Builds FinanceReports from the finance store."""

    def __init__(self, store: QueryStoreInterface, converter: CurrencyConverter):
        self._store = store
        self._converter = converter

    async def get_date_bounds(self) -> Optional[DataBounds]:
        """Earliest and latest record dates across both tables, or None when empty."""
        rows = await self._store.query(_BOUNDS_SQL)
        if not rows or rows[0].get("min") is None or rows[0].get("max") is None:
            return None
        return parse_timestamp(rows[0]["min"]), parse_timestamp(rows[0]["max"])

    async def resolve_range(self, query: ReportQuery, now: Optional[datetime] = None) -> DateRange:
        """
        Concrete window for a report query.

        Data bounds are only read when no explicit from was given.
        """
        data_bounds = None if query.from_ else await self.get_date_bounds()
        return resolve_report_range(query, now=now, data_bounds=data_bounds)

    def _converted(self, row: Mapping[str, Any], currency: str) -> Decimal:
        return self._converter.convert_to(row["total"], row["currency"], currency)

    def _totals_by_label(self, rows: Iterable[Mapping[str, Any]], currency: str) -> dict[str, Decimal]:
        totals: dict[str, Decimal] = {}
        for row in rows:
            label = str(row["label"])
            totals[label] = totals.get(label, Decimal("0")) + self._converted(row, currency)
        return totals

    async def _by_category(self, params: list[Any], currency: str):
        rows = await self._store.query(_BY_CATEGORY_SQL, params)
        totals = self._totals_by_label(rows, currency)
        labels = sorted(totals, key=totals.get, reverse=True)
        data = [totals[k] for k in labels]
        return labels, [ReportDataset(label="Expenses", data=data, color=EXPENSES_COLOR)]

    async def _by_source(self, params: list[Any], currency: str):
        rows = await self._store.query(_BY_SOURCE_SQL, params)
        totals = self._totals_by_label(rows, currency)
        labels = sorted(totals, key=totals.get, reverse=True)
        data = [totals[k] for k in labels]
        return labels, [ReportDataset(label="Income", data=data, color=INCOME_COLOR)]

    async def _by_member(self, params: list[Any], currency: str):
        expense_rows, income_rows = await asyncio.gather(
            self._store.query(_BY_MEMBER_SQL.format(table="expenses"), params),
            self._store.query(_BY_MEMBER_SQL.format(table="income"), params),
        )
        expense_totals = self._totals_by_label(expense_rows, currency)
        income_totals = self._totals_by_label(income_rows, currency)

        # Members with expenses come first, in query order
        labels = list(dict.fromkeys([*expense_totals, *income_totals]))
        expenses = [expense_totals.get(k, Decimal("0")) for k in labels]
        incomes = [income_totals.get(k, Decimal("0")) for k in labels]
        return labels, self._triple(expenses, incomes)

    async def _by_date(self, params: list[Any], currency: str, date_range: DateRange, period: Optional[str]):
        expense_rows, income_rows = await asyncio.gather(
            self._store.query(_BY_DAY_SQL.format(table="expenses"), params),
            self._store.query(_BY_DAY_SQL.format(table="income"), params),
        )
        labels = period_labels(date_range, period)
        buckets = [date.fromisoformat(label) for label in labels]

        def fill(rows: Iterable[Mapping[str, Any]]) -> list[Decimal]:
            values = [Decimal("0")] * len(labels)
            for row in rows:
                index = _bucket_index(_row_day(row["day"]), buckets, period)
                if index is not None:
                    values[index] += self._converted(row, currency)
            return values

        return labels, self._triple(fill(expense_rows), fill(income_rows))

    def _triple(self, expenses: list[Decimal], incomes: list[Decimal]) -> list[ReportDataset]:
        return [
            ReportDataset(label="Expenses", data=expenses, color=EXPENSES_COLOR),
            ReportDataset(label="Income", data=incomes, color=INCOME_COLOR),
            ReportDataset(label="Balance", data=_balance(incomes, expenses), color=BALANCE_COLOR),
        ]

    async def generate(self, query: ReportQuery, now: Optional[datetime] = None) -> FinanceReport:
        """
        Aggregate the finance store for a built report query.

        Args:
            query: Output of ReportQueryBuilder
            now: Reference instant for symbolic periods. Defaults to UTC now.

        Returns:
            FinanceReport with every value expressed in query.currency

        Raises:
            ValueError: If an explicit from/to cannot be parsed
            InfrastructureError: If the store fails
        """
        date_range = await self.resolve_range(query, now=now)
        params = [date_range.start, date_range.end]
        group_by = query.group_by or ReportGroupBy.DATE.value
        currency = query.currency

        if group_by == ReportGroupBy.CATEGORY.value:
            labels, datasets = await self._by_category(params, currency)
        elif group_by == ReportGroupBy.SOURCE.value:
            labels, datasets = await self._by_source(params, currency)
        elif group_by == ReportGroupBy.MEMBER.value:
            labels, datasets = await self._by_member(params, currency)
        elif group_by == ReportGroupBy.DATE.value:
            labels, datasets = await self._by_date(params, currency, date_range, query.period)
        else:
            # Unrecognized dimensions pass the builder untouched and aggregate nothing
            labels, datasets = [], self._triple([], [])

        logger.info(
            "report_generated",
            group_by=group_by,
            currency=currency,
            labels=len(labels),
        )
        return FinanceReport(
            labels=labels,
            datasets=datasets,
            meta={
                "period": query.period,
                "groupBy": group_by,
                "currency": currency,
                "range": {
                    "start": to_iso(date_range.start),
                    "end": to_iso(date_range.end),
                },
            },
        )

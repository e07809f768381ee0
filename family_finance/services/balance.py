"""
Household Balance Service

Totals incomes and expenses in the reporting currency.

CRITICAL: Each record is converted BEFORE summing. Summing raw amounts
across currencies and converting afterwards would mix units.

byCurrency keeps the original, unconverted sums per currency so the
caller can see where the money actually sits.
"""

import asyncio
from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from family_finance.audit.logger import get_logger
from family_finance.currency import CurrencyConverter
from family_finance.models.finance import (
    BalanceSummary,
    CurrencyBalance,
    Expense,
    Income,
    MonetaryRecord,
)
from family_finance.services.store.interface import QueryStoreInterface
from family_finance.timestamps import coerce_iso, parse_timestamp

logger = get_logger(__name__)

CENT = Decimal("0.01")

_EXPENSES_SQL = """
    SELECT id, amount, currency, category_id AS "categoryId",
           member_id AS "memberId", date, notes
    FROM expenses
    WHERE 1=1
"""

_INCOME_SQL = """
    SELECT id, amount, currency, source, member_id AS "memberId",
           date, notes
    FROM income
    WHERE 1=1
"""


def _dec(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _round(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _converted_total(records: Iterable[MonetaryRecord], converter: CurrencyConverter) -> Decimal:
    return sum(
        (_dec(converter.convert(record.amount, record.currency)) for record in records),
        Decimal("0"),
    )


def summarize_balance(
    expenses: Iterable[Expense],
    incomes: Iterable[Income],
    converter: CurrencyConverter,
) -> BalanceSummary:
    """
    Pure balance computation.

    Args:
        expenses: Expense records in any currencies
        incomes: Income records in any currencies
        converter: Converts each record into the reporting currency

    Returns:
        BalanceSummary with rounded converted totals and unconverted
        per-currency sums sorted by currency code
    """
    expenses = list(expenses)
    incomes = list(incomes)

    total_expenses = _converted_total(expenses, converter)
    total_incomes = _converted_total(incomes, converter)

    per_currency: dict[str, dict[str, Decimal]] = {}
    for income in incomes:
        bucket = per_currency.setdefault(
            income.currency, {"incomes": Decimal("0"), "expenses": Decimal("0")}
        )
        bucket["incomes"] += _dec(income.amount)
    for expense in expenses:
        bucket = per_currency.setdefault(
            expense.currency, {"incomes": Decimal("0"), "expenses": Decimal("0")}
        )
        bucket["expenses"] += _dec(expense.amount)

    by_currency = tuple(
        CurrencyBalance(
            currency=code,
            total_incomes=sums["incomes"],
            total_expenses=sums["expenses"],
            balance=sums["incomes"] - sums["expenses"],
        )
        for code, sums in sorted(per_currency.items())
    )

    return BalanceSummary(
        currency=converter.native_currency,
        total_incomes=_round(total_incomes),
        total_expenses=_round(total_expenses),
        balance=_round(total_incomes - total_expenses),
        by_currency=by_currency,
    )


def _date_filter(sql: str, from_: Optional[str], to: Optional[str]) -> tuple[str, list[Any]]:
    params: list[Any] = []
    if from_:
        params.append(parse_timestamp(from_))
        sql += f" AND date >= ${len(params)}"
    if to:
        params.append(parse_timestamp(to))
        sql += f" AND date <= ${len(params)}"
    return sql + " ORDER BY date DESC", params


def _row_fields(row: Mapping[str, Any]) -> dict[str, Any]:
    fields = {
        "amount": _dec(row["amount"]),
        "currency": row["currency"],
        "member_id": row.get("memberId"),
        "date": coerce_iso(row["date"]),
        "notes": row.get("notes"),
    }
    if fields["member_id"] is not None:
        fields["member_id"] = str(fields["member_id"])
    return fields


class BalanceService:
    """Reads finance records from the store and summarizes them."""

    def __init__(self, store: QueryStoreInterface, converter: CurrencyConverter):
        self._store = store
        self._converter = converter

    async def list_expenses(self, from_: Optional[str] = None, to: Optional[str] = None) -> list[Expense]:
        sql, params = _date_filter(_EXPENSES_SQL, from_, to)
        rows = await self._store.query(sql, params)
        return [Expense(category_id=str(row["categoryId"]), **_row_fields(row)) for row in rows]

    async def list_incomes(self, from_: Optional[str] = None, to: Optional[str] = None) -> list[Income]:
        sql, params = _date_filter(_INCOME_SQL, from_, to)
        rows = await self._store.query(sql, params)
        return [Income(source=str(row["source"]), **_row_fields(row)) for row in rows]

    async def get_balance(self, from_: Optional[str] = None, to: Optional[str] = None) -> BalanceSummary:
        """
        Balance over an optional date window.

        Raises:
            ValueError: If from/to cannot be parsed
            InfrastructureError: If the store fails
        """
        expenses, incomes = await asyncio.gather(
            self.list_expenses(from_, to),
            self.list_incomes(from_, to),
        )
        summary = summarize_balance(expenses, incomes, self._converter)
        logger.info(
            "balance_computed",
            currency=summary.currency,
            balance=str(summary.balance),
            expenses=len(expenses),
            incomes=len(incomes),
        )
        return summary

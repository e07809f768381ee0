"""
Monetary Record Builders

Turn raw, partially-trusted request fields into one validated
Expense or Income, or fail fast.

DESIGN DECISION: Validation happens twice.

SETTER TIME:
- amount must be a positive number
- category/source must be a non-blank string
These fire at the offending setter so a half-valid record never escapes.

BUILD TIME:
- amount and category/source must have been set at all
A caller that skips setters (partial deserialization, hand-driven
builders) still cannot materialize an invalid record.

IMPORTANT: "store if truthy" semantics apply to optional fields.
None, "", 0 and False all mean "absent" and resolve to the default.
"""

import math
from collections.abc import Callable, Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar, Optional

from family_finance.builders.errors import ValidationError
from family_finance.config import get_settings
from family_finance.models.finance import Amount, Expense, Income, MonetaryRecord
from family_finance.timestamps import coerce_iso, to_iso, utc_now

Clock = Callable[[], datetime]


def _coerce_amount(value: Any) -> Amount:
    """Accept numbers as-is, numeric strings as Decimal; reject the rest."""
    if isinstance(value, bool):
        raise ValidationError("amount must be a number", field="amount")
    if isinstance(value, str):
        try:
            value = Decimal(value.strip())
        except InvalidOperation:
            raise ValidationError("amount must be a number", field="amount")
    if not isinstance(value, (int, float, Decimal)):
        raise ValidationError("amount must be a number", field="amount")

    if isinstance(value, Decimal):
        if value.is_nan() or value.is_infinite():
            raise ValidationError("amount must be > 0", field="amount")
    elif isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        raise ValidationError("amount must be > 0", field="amount")
    return value


class RecordBuilder:
    """
    Fluent builder for a MonetaryRecord.

    Subclasses name the record type and the field carrying the
    category (expenses) or source (incomes).

    One builder serves one record construction. The working draft is
    private; build() returns a fresh frozen record and never writes
    defaults back into the draft.
    """

    record_type: ClassVar[type[MonetaryRecord]]
    entity_name: ClassVar[str]
    label_field: ClassVar[str]  # model field name
    label_key: ClassVar[str]    # request/wire key

    def __init__(
        self,
        default_currency: Optional[str] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Args:
            default_currency: Currency used when none is given.
                              Defaults to configuration ("USD").
            clock: Returns the current aware datetime. Defaults to UTC now.
        """
        self._draft: dict[str, Any] = {}
        self._default_currency = (
            default_currency or get_settings().currency.default_record_currency
        )
        self._clock = clock or utc_now

    def _store(self, **fields: Any) -> "RecordBuilder":
        self._draft = {**self._draft, **fields}
        return self

    # -------------------------------------------------------------------------
    # Setters
    # -------------------------------------------------------------------------

    def set_amount(self, value: Any) -> "RecordBuilder":
        """Store a positive amount verbatim; None leaves it unset."""
        if value is None:
            return self
        amount = _coerce_amount(value)
        if amount <= 0:
            raise ValidationError("amount must be > 0", field="amount")
        return self._store(amount=amount)

    def set_currency(self, value: Any) -> "RecordBuilder":
        return self._store(currency=str(value) if value else self._default_currency)

    def set_category_or_source(self, value: Any) -> "RecordBuilder":
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{self.label_key} is required", field=self.label_key)
        # Stored untrimmed
        return self._store(**{self.label_field: value})

    def set_member_id(self, value: Any) -> "RecordBuilder":
        if not value:
            return self
        return self._store(member_id=str(value))

    def set_date(self, value: Any) -> "RecordBuilder":
        """
        Store an ISO-8601 UTC timestamp.

        Raises:
            ValueError: If a provided value cannot be parsed
        """
        if value:
            return self._store(date=coerce_iso(value))
        return self._store(date=to_iso(self._clock()))

    def set_notes(self, value: Any) -> "RecordBuilder":
        if not value:
            return self
        return self._store(notes=str(value))

    # -------------------------------------------------------------------------
    # Finalize
    # -------------------------------------------------------------------------

    def build(self) -> MonetaryRecord:
        """
        Validate mandatory fields, resolve defaults and return a frozen record.

        Raises:
            ValidationError: If amount or category/source was never set
        """
        if "amount" not in self._draft:
            raise ValidationError("amount is required", field="amount")
        if self.label_field not in self._draft:
            raise ValidationError(f"{self.label_key} is required", field=self.label_key)

        fields = dict(self._draft)
        if not fields.get("currency"):
            fields["currency"] = self._default_currency
        if not fields.get("date"):
            fields["date"] = to_iso(self._clock())

        return self.record_type(**fields)

    @classmethod
    def from_request(
        cls,
        body: Optional[Mapping[str, Any]],
        default_currency: Optional[str] = None,
        clock: Optional[Clock] = None,
    ) -> MonetaryRecord:
        """
        Run every setter in order, then build.

        Order: amount, currency, category/source, member, date, notes.
        """
        body = body or {}
        return (
            cls(default_currency=default_currency, clock=clock)
            .set_amount(body.get("amount"))
            .set_currency(body.get("currency"))
            .set_category_or_source(body.get(cls.label_key))
            .set_member_id(body.get("memberId"))
            .set_date(body.get("date"))
            .set_notes(body.get("notes"))
            .build()
        )


class ExpenseBuilder(RecordBuilder):
    """Builds Expense records (category_id is mandatory)."""

    record_type = Expense
    entity_name = "expense"
    label_field = "category_id"
    label_key = "categoryId"

    def set_category_id(self, value: Any) -> "ExpenseBuilder":
        return self.set_category_or_source(value)


class IncomeBuilder(RecordBuilder):
    """Builds Income records (source is mandatory)."""

    record_type = Income
    entity_name = "income"
    label_field = "source"
    label_key = "source"

    def set_source(self, value: Any) -> "IncomeBuilder":
        return self.set_category_or_source(value)

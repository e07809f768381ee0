"""
Core Finance Models for Family Finance

These models are the canonical shapes produced by the builders.
They are designed to:
1. Be immutable once built (frozen value objects)
2. Serialize with the camelCase keys clients expect
3. Omit absent optional fields instead of writing nulls
4. Keep amounts exactly as the caller supplied them

DESIGN DECISION: Validation lives in the builders, not here.
The models describe a record that has already passed validation;
re-validating here would hide which builder step rejected the input.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel


def _json_number(value: Union[int, float, Decimal]) -> Union[int, float]:
    return float(value) if isinstance(value, Decimal) else value


# Decimal in Python, a plain number on the wire
JsonDecimal = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

Amount = Annotated[
    Union[int, float, Decimal],
    PlainSerializer(_json_number, return_type=Union[int, float], when_used="json"),
]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ReportPeriod(str, Enum):
    """Symbolic report windows."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class ReportGroupBy(str, Enum):
    """Dimensions a finance report can be grouped by."""
    CATEGORY = "category"
    MEMBER = "member"
    DATE = "date"
    SOURCE = "source"


class MetricsGroupBy(str, Enum):
    """Dimensions a task analytics query can be grouped by."""
    MEMBER = "member"
    DATE = "date"


class TimeGranularity(str, Enum):
    """Bucket size for date-grouped analytics."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class TaskMetric(str, Enum):
    """Measures available to task analytics."""
    COMPLETED = "completed"
    DURATION = "duration"
    POINTS = "points"


class _ValueObject(BaseModel):
    """Base config: frozen, camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_dict(self) -> dict:
        """JSON-ready dict with wire keys; absent optional fields are omitted."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# =============================================================================
# MONETARY RECORDS
# =============================================================================

class MonetaryRecord(_ValueObject):
    """
    Shape shared by expenses and incomes.

    CRITICAL: Instances are only created by a RecordBuilder after
    amount and category/source have been validated.
    """

    amount: Amount = Field(
        ...,
        description="Positive amount, stored exactly as supplied"
    )
    currency: str = Field(
        ...,
        description="Currency code of the amount"
    )
    member_id: Optional[str] = Field(
        default=None,
        description="Household member the record is attributed to"
    )
    date: str = Field(
        ...,
        description="ISO-8601 UTC timestamp of the movement"
    )
    notes: Optional[str] = None


class Expense(MonetaryRecord):
    """Money leaving the household, classified by category."""

    category_id: str = Field(
        ...,
        description="Expense category identifier (free text)"
    )


class Income(MonetaryRecord):
    """Money entering the household, classified by source."""

    source: str = Field(
        ...,
        description="Income source (free text)"
    )


# =============================================================================
# QUERY MODELS
# =============================================================================

class ReportQuery(_ValueObject):
    """
    Canonical finance report query.

    After building, currency and group_by are always populated.
    period is only defaulted when the caller gave no temporal scoping.
    """

    period: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    group_by: str = Field(
        default=ReportGroupBy.DATE.value,
        description="Grouping dimension"
    )
    currency: str = Field(
        ...,
        description="Currency the report is expressed in"
    )


class TaskMetricsQuery(_ValueObject):
    """
    Analytics query over task completion for one family.

    granularity is only meaningful (and only set) when grouping by date.
    """

    family_id: str
    members: Optional[tuple[str, ...]] = None
    start: Optional[str] = None
    end: Optional[str] = None
    group_by: MetricsGroupBy = MetricsGroupBy.MEMBER
    granularity: Optional[TimeGranularity] = None
    metric: TaskMetric = TaskMetric.COMPLETED
    include_inactive: bool = False


# =============================================================================
# BALANCE / REPORTING MODELS
# =============================================================================

class CurrencyBalance(_ValueObject):
    """Unconverted totals for a single currency."""

    currency: str
    total_incomes: JsonDecimal = Decimal("0")
    total_expenses: JsonDecimal = Decimal("0")
    balance: JsonDecimal = Decimal("0")


class BalanceSummary(_ValueObject):
    """
    Household balance in the reporting currency.

    Totals are converted per record before summing, then rounded to
    two decimal places. by_currency keeps the original currencies.
    """

    currency: str = Field(
        ...,
        description="Reporting currency of the totals"
    )
    total_incomes: JsonDecimal
    total_expenses: JsonDecimal
    balance: JsonDecimal
    by_currency: tuple[CurrencyBalance, ...] = ()


class DateRange(_ValueObject):
    """Resolved, concrete report window (both bounds inclusive)."""

    start: datetime
    end: datetime


class ReportDataset(_ValueObject):
    """One chart series: a value per label."""

    label: str
    data: tuple[JsonDecimal, ...] = ()
    color: str


class FinanceReport(_ValueObject):
    """
    Aggregated finance report, ready for charting.

    Every value in datasets is expressed in meta["currency"] and lines
    up index-for-index with labels.
    """

    labels: tuple[str, ...] = ()
    datasets: tuple[ReportDataset, ...] = ()
    meta: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "data": {
                "labels": list(self.labels),
                "datasets": [dataset.to_dict() for dataset in self.datasets],
            },
            "meta": dict(self.meta),
        }

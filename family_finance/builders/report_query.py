"""
Finance Report Query Builder

Resolves an ambiguous, partially-specified report request into one
unambiguous ReportQuery.

Setters never reject anything: each stores its value only if truthy.

Defaults are resolved at build() in this exact order:
1. currency unset            -> native record currency
2. group_by unset            -> "date"
3. period, from and to unset -> period = "month"

Explicit from/to always take precedence over any period and are never
overwritten. Turning a symbolic period into concrete bounds is left to
the report range resolver.
"""

from collections.abc import Mapping
from typing import Any, Optional

from family_finance.config import get_settings
from family_finance.models.finance import ReportGroupBy, ReportPeriod, ReportQuery
from family_finance.timestamps import coerce_iso


def _coerce_bound(value: Any) -> Any:
    """ISO-coerce a range bound; unparseable input is stored as given."""
    try:
        return coerce_iso(value)
    except (ValueError, OverflowError):
        return str(value)


class ReportQueryBuilder:
    """Fluent builder for ReportQuery."""

    def __init__(self, default_currency: Optional[str] = None):
        self._query: dict[str, Any] = {}
        self._default_currency = (
            default_currency or get_settings().currency.default_record_currency
        )

    def set_period(self, period: Any) -> "ReportQueryBuilder":
        if period:
            self._query["period"] = str(period)
        return self

    def set_from(self, value: Any) -> "ReportQueryBuilder":
        if value:
            self._query["from_"] = _coerce_bound(value)
        return self

    def set_to(self, value: Any) -> "ReportQueryBuilder":
        if value:
            self._query["to"] = _coerce_bound(value)
        return self

    def set_group_by(self, group_by: Any) -> "ReportQueryBuilder":
        if group_by:
            self._query["group_by"] = str(group_by)
        return self

    def set_currency(self, currency: Any) -> "ReportQueryBuilder":
        if currency:
            self._query["currency"] = str(currency)
        return self

    def build(self) -> ReportQuery:
        query = dict(self._query)

        if not query.get("currency"):
            query["currency"] = self._default_currency
        if not query.get("group_by"):
            query["group_by"] = ReportGroupBy.DATE.value
        if not (query.get("period") or query.get("from_") or query.get("to")):
            query["period"] = ReportPeriod.MONTH.value

        return ReportQuery(**query)

    @classmethod
    def from_query_params(
        cls,
        params: Optional[Mapping[str, Any]],
        default_currency: Optional[str] = None,
    ) -> ReportQuery:
        params = params or {}
        return (
            cls(default_currency=default_currency)
            .set_period(params.get("period"))
            .set_from(params.get("from"))
            .set_to(params.get("to"))
            .set_group_by(params.get("groupBy"))
            .set_currency(params.get("currency"))
            .build()
        )

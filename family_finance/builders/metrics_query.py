"""
Task Metrics Query Builder

Same normalization pattern as the report builder, applied to task
analytics: member filters, date grouping granularity and metric choice.

The builder starts from defaults (group by member, metric "completed",
inactive members excluded). build() returns an independent snapshot, so
later builder calls never affect a query already handed out.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Optional

from family_finance.builders.errors import ValidationError
from family_finance.models.finance import (
    MetricsGroupBy,
    TaskMetric,
    TaskMetricsQuery,
    TimeGranularity,
)
from family_finance.timestamps import TimestampInput, coerce_iso

_TRUE_STRINGS = {"true", "1", "yes"}


def _parse_enum(enum_cls, value: Any, field: str):
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"{field} must be one of: {allowed}", field=field
        )


def _parse_members(value: Any) -> list[str]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, Iterable):
        raise ValidationError("members must be a list of ids", field="members")
    return [str(member).strip() for member in value if str(member).strip()]


class TaskMetricsQueryBuilder:
    """Fluent builder for TaskMetricsQuery."""

    def __init__(self, family_id: str):
        if not family_id or not str(family_id).strip():
            raise ValidationError("familyId is required", field="familyId")
        self._q: dict[str, Any] = {
            "family_id": str(family_id),
            "group_by": MetricsGroupBy.MEMBER,
            "metric": TaskMetric.COMPLETED,
            "include_inactive": False,
        }

    def members(self, ids: Iterable[str]) -> "TaskMetricsQueryBuilder":
        self._q["members"] = tuple(ids)
        return self

    def start(self, value: TimestampInput) -> "TaskMetricsQueryBuilder":
        self._q["start"] = coerce_iso(value)
        return self

    def end(self, value: TimestampInput) -> "TaskMetricsQueryBuilder":
        self._q["end"] = coerce_iso(value)
        return self

    def date_range(self, start: datetime, end: datetime) -> "TaskMetricsQueryBuilder":
        return self.start(start).end(end)

    def group_by_member(self) -> "TaskMetricsQueryBuilder":
        self._q["group_by"] = MetricsGroupBy.MEMBER
        self._q["granularity"] = None
        return self

    def group_by_date(self, granularity: TimeGranularity) -> "TaskMetricsQueryBuilder":
        self._q["group_by"] = MetricsGroupBy.DATE
        self._q["granularity"] = TimeGranularity(granularity)
        return self

    def metric(self, value: Any) -> "TaskMetricsQueryBuilder":
        """
        Set the metric by name.

        Raises:
            ValidationError: If the name is not a known metric
        """
        self._q["metric"] = _parse_enum(TaskMetric, value, "metric")
        return self

    def metric_completed(self) -> "TaskMetricsQueryBuilder":
        self._q["metric"] = TaskMetric.COMPLETED
        return self

    def metric_duration(self) -> "TaskMetricsQueryBuilder":
        self._q["metric"] = TaskMetric.DURATION
        return self

    def metric_points(self) -> "TaskMetricsQueryBuilder":
        self._q["metric"] = TaskMetric.POINTS
        return self

    def include_inactive(self) -> "TaskMetricsQueryBuilder":
        self._q["include_inactive"] = True
        return self

    def build(self) -> TaskMetricsQuery:
        return TaskMetricsQuery(**self._q)

    @classmethod
    def from_params(cls, params: Optional[Mapping[str, Any]]) -> TaskMetricsQuery:
        """
        Normalize raw analytics parameters.

        Raises:
            ValidationError: Missing familyId or an unknown enumerated value
            ValueError: If start/end cannot be parsed
        """
        params = params or {}
        builder = cls(params.get("familyId"))

        if params.get("members"):
            members = _parse_members(params["members"])
            if members:
                builder.members(members)

        start, end = params.get("start"), params.get("end")
        if start:
            builder.start(start)
        if end:
            builder.end(end)

        group_by = params.get("groupBy")
        if group_by and _parse_enum(MetricsGroupBy, group_by, "groupBy") == MetricsGroupBy.DATE:
            granularity = params.get("granularity") or TimeGranularity.DAY.value
            builder.group_by_date(_parse_enum(TimeGranularity, granularity, "granularity"))
        else:
            builder.group_by_member()

        metric = params.get("metric")
        if metric:
            builder.metric(metric)

        include_inactive = params.get("includeInactive")
        if include_inactive is True or str(include_inactive).strip().lower() in _TRUE_STRINGS:
            builder.include_inactive()

        return builder.build()

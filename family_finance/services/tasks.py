"""
Task Correlation Service

Read-only access to completed chores so they can be laid next to
finance data (e.g. "who completed what, and in which category").

The task lifecycle belongs to the tasks database; this service never
writes. Every filter value is bound as a $n parameter.

IMPORTANT: get_tasks_stats always counts completed tasks, whatever
status the caller asked get_tasks_by_member for. Both read the same
member/date filters.
"""

from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any, Optional, Union

from family_finance.audit.logger import get_logger
from family_finance.models.task import (
    CategoryCount,
    MemberTaskReport,
    Task,
    TaskFilters,
    TaskStats,
)
from family_finance.services.store.interface import (
    InfrastructureError,
    QueryFailedError,
    QueryStoreInterface,
)
from family_finance.timestamps import coerce_iso, parse_timestamp, to_iso, utc_now

DEFAULT_STATUS = "completed"

FiltersInput = Union[TaskFilters, Mapping[str, Any], None]

_TASKS_SQL = """
    SELECT id, title, description, user_id AS "assignedTo",
           completed_at AS "completedAt", status, category AS "categoryId",
           created_at AS "createdAt"
    FROM tasks
    WHERE 1=1
"""

_STATS_SQL = """
    SELECT category AS "categoryId", COUNT(*) AS count
    FROM tasks
    WHERE status = 'completed'
"""


def _as_filters(filters: FiltersInput) -> TaskFilters:
    if isinstance(filters, TaskFilters):
        return filters
    return TaskFilters.model_validate(dict(filters or {}))


def _member_and_range(filters: TaskFilters, params: list[Any]) -> str:
    """Append member/date predicates; returns the SQL fragment."""
    clauses = []
    if filters.member_id:
        params.append(filters.member_id)
        clauses.append(f" AND user_id = ${len(params)}")
    if filters.from_:
        params.append(parse_timestamp(filters.from_))
        clauses.append(f" AND completed_at >= ${len(params)}")
    if filters.to:
        params.append(parse_timestamp(filters.to))
        clauses.append(f" AND completed_at <= ${len(params)}")
    return "".join(clauses)


def _row_to_task(row: Mapping[str, Any]) -> Task:
    completed_at = row.get("completedAt")
    return Task(
        id=str(row["id"]),
        title=row["title"],
        description=row.get("description") or "",
        assigned_to=row.get("assignedTo"),
        completed_at=coerce_iso(completed_at) if completed_at else None,
        status=row["status"],
        category_id=row.get("categoryId"),
    )


class TaskCorrelationService:
    """Reads tasks and completed-task stats from the tasks store."""

    def __init__(self, store: QueryStoreInterface, logger=None):
        self._store = store
        self._logger = logger or get_logger(__name__)

    async def _run(self, sql: str, params: list[Any]) -> list[dict[str, Any]]:
        try:
            return await self._store.query(sql, params)
        except InfrastructureError:
            raise
        except Exception as e:
            self._logger.error("task_query_failed", error=str(e))
            raise QueryFailedError(f"Task query failed: {e}") from e

    async def get_tasks_by_member(self, filters: FiltersInput = None) -> list[Task]:
        """
        Tasks matching the filters, newest completion first.

        status defaults to "completed" when absent or empty.

        Raises:
            ValueError: If from/to cannot be parsed
            InfrastructureError: If the store fails
        """
        filters = _as_filters(filters)
        params: list[Any] = []
        sql = _TASKS_SQL + _member_and_range(filters, params)

        params.append(filters.status or DEFAULT_STATUS)
        sql += f" AND status = ${len(params)}"
        sql += " ORDER BY completed_at DESC"

        rows = await self._run(sql, params)
        return [_row_to_task(row) for row in rows]

    async def get_tasks_stats(self, filters: FiltersInput = None) -> TaskStats:
        """Completed-task counts per category, largest first."""
        filters = _as_filters(filters)
        params: list[Any] = []
        sql = _STATS_SQL + _member_and_range(filters, params)
        sql += " GROUP BY category ORDER BY count DESC"

        rows = await self._run(sql, params)
        by_category = tuple(
            CategoryCount(category_id=row.get("categoryId"), count=int(row["count"]))
            for row in rows
        )
        return TaskStats(
            total_completed=sum(item.count for item in by_category),
            by_category=by_category,
        )

    async def get_member_task_report(
        self,
        filters: FiltersInput = None,
        now: Optional[datetime] = None,
        window_days: int = 30,
    ) -> MemberTaskReport:
        """
        Tasks, stats and lookup metadata in one response.

        The reported range falls back to the last window_days days when
        from/to are absent. The fallback only describes the response;
        it is not applied as a filter.
        """
        filters = _as_filters(filters)
        tasks = await self.get_tasks_by_member(filters)
        stats = await self.get_tasks_stats(filters)

        now = now or utc_now()
        start = coerce_iso(filters.from_) if filters.from_ else to_iso(now - timedelta(days=window_days))
        end = coerce_iso(filters.to) if filters.to else to_iso(now)

        self._logger.info(
            "tasks_correlated",
            member_id=filters.member_id or "all",
            task_count=len(tasks),
            total_completed=stats.total_completed,
        )
        return MemberTaskReport(
            tasks=tuple(tasks),
            stats=stats,
            meta={
                "count": len(tasks),
                "memberId": filters.member_id or "all",
                "status": filters.status or DEFAULT_STATUS,
                "range": {"start": start, "end": end},
            },
        )

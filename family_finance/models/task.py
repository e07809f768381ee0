"""
Task Models (read-only view of the chores domain)

The task lifecycle is owned entirely by the tasks service.
This package only reads completed tasks and aggregates them so they
can be laid next to finance categories in reports.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _TaskModel(BaseModel):
    # Ids arrive as integers from the tasks database
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class TaskFilters(_TaskModel):
    """
    Raw filters for task lookups.

    All fields optional. Empty strings are treated as absent by the
    correlation service.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    member_id: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    status: Optional[str] = None


class Task(_TaskModel):
    """A task row from the tasks store, renamed and coerced."""

    id: str
    title: str
    description: str = ""
    assigned_to: Optional[str] = None
    completed_at: Optional[str] = Field(
        default=None,
        description="ISO-8601 completion time, None while not completed"
    )
    status: str
    category_id: Optional[str] = None

    def to_dict(self) -> dict:
        """completedAt stays in the output even when None."""
        return self.model_dump(by_alias=True, mode="json")


class CategoryCount(_TaskModel):
    """Completed tasks for one category."""

    category_id: Optional[str] = None
    count: int = Field(ge=0)


class TaskStats(_TaskModel):
    """
    Completed-task aggregate.

    total_completed is always the sum of by_category counts.
    """

    total_completed: int = Field(ge=0)
    by_category: tuple[CategoryCount, ...] = ()

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class MemberTaskReport(_TaskModel):
    """Tasks plus stats plus the metadata describing the lookup."""

    tasks: tuple[Task, ...] = ()
    stats: TaskStats
    meta: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "data": {
                "tasks": [task.to_dict() for task in self.tasks],
                "stats": self.stats.to_dict(),
            },
            "meta": dict(self.meta),
        }

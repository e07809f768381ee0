"""
Audit Models for Family Finance

Every significant step of the finance core is logged for audit purposes.
This provides:
1. Traceability of which builder accepted or rejected which input
2. Debugging information when a store call fails
3. A record of degraded behavior (e.g. unknown currency fallback)

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every step in the finance pipeline has its own event type.
    """
    # Record construction
    RECORD_BUILT = "record_built"
    RECORD_REJECTED = "record_rejected"

    # Query normalization
    REPORT_QUERY_BUILT = "report_query_built"
    METRICS_QUERY_BUILT = "metrics_query_built"
    QUERY_REJECTED = "query_rejected"

    # Read aggregations
    TASKS_CORRELATED = "tasks_correlated"
    BALANCE_COMPUTED = "balance_computed"
    REPORT_GENERATED = "report_generated"

    # Degraded behavior
    UNKNOWN_CURRENCY = "unknown_currency"

    # System events
    STORE_ERROR = "store_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'income', 'report_query')"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events of one request)"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_built("expense", "50", "USD", correlation_id)
        event = AuditEventBuilder.store_error("tasks", message, correlation_id)
    """

    @staticmethod
    def record_built(
        record_type: str,
        amount: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_BUILT,
            entity_type=record_type,
            correlation_id=correlation_id,
            description=f"{record_type.capitalize()} built: {amount} {currency}",
            details={
                "amount": amount,
                "currency": currency,
            },
        )

    @staticmethod
    def record_rejected(
        record_type: str,
        field: Optional[str],
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=record_type,
            correlation_id=correlation_id,
            description=f"{record_type.capitalize()} rejected: {reason}",
            error_code="VALIDATION_ERROR",
            error_message=reason,
            details={
                "field": field,
            },
        )

    @staticmethod
    def report_query_built(
        query: dict,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_QUERY_BUILT,
            entity_type="report_query",
            correlation_id=correlation_id,
            description=f"Report query built grouped by {query.get('groupBy')}",
            details=query,
        )

    @staticmethod
    def metrics_query_built(
        query: dict,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.METRICS_QUERY_BUILT,
            entity_type="metrics_query",
            correlation_id=correlation_id,
            description=f"Metrics query built for family {query.get('familyId')}",
            details=query,
        )

    @staticmethod
    def query_rejected(
        query_type: str,
        field: Optional[str],
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.QUERY_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=query_type,
            correlation_id=correlation_id,
            description=f"Query rejected: {reason}",
            error_code="VALIDATION_ERROR",
            error_message=reason,
            details={
                "field": field,
            },
        )

    @staticmethod
    def tasks_correlated(
        member_id: Optional[str],
        task_count: int,
        total_completed: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TASKS_CORRELATED,
            entity_type="task_report",
            correlation_id=correlation_id,
            description=f"Task report for {member_id or 'all'}: {task_count} tasks",
            details={
                "member_id": member_id,
                "task_count": task_count,
                "total_completed": total_completed,
            },
        )

    @staticmethod
    def report_generated(
        group_by: str,
        currency: str,
        label_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_GENERATED,
            entity_type="finance_report",
            correlation_id=correlation_id,
            description=f"Report by {group_by} in {currency}: {label_count} labels",
            details={
                "group_by": group_by,
                "currency": currency,
                "label_count": label_count,
            },
        )

    @staticmethod
    def balance_computed(
        currency: str,
        balance: str,
        currencies: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_COMPUTED,
            entity_type="balance",
            correlation_id=correlation_id,
            description=f"Balance computed: {balance} {currency}",
            details={
                "balance": balance,
                "currencies": currencies,
            },
        )

    @staticmethod
    def unknown_currency(
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UNKNOWN_CURRENCY,
            severity=AuditSeverity.WARNING,
            entity_type="currency",
            correlation_id=correlation_id,
            description=f"Unknown currency {currency}, treated as native",
            details={
                "currency": currency,
            },
        )

    @staticmethod
    def store_error(
        store: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Store error: {store}",
            error_code="INFRASTRUCTURE_ERROR",
            error_message=error_message,
            details={
                "store": store,
            },
            correlation_id=correlation_id,
        )

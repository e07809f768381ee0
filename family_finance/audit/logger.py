"""
Audit Logger

DESIGN DECISION: Every significant action in the finance core is logged.
This provides:
1. Complete traceability of accepted and rejected input
2. Debugging capability for store failures
3. Visibility into degraded behavior (unknown currencies)

The audit logger:
- Is async so flows can await it alongside store calls
- Writes to the structured log only; it has no store of its own
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from family_finance.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def get_logger(name: Optional[str] = None):
    """Structured logger shared by the finance core."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Writes every event to the structured local log at a level
    matching its severity.
    """

    def __init__(self, logger=None):
        """
        Initialize audit logger.

        Args:
            logger: structlog-compatible logger. Defaults to the
                    package logger; tests pass a stub.
        """
        self._logger = logger or get_logger("family_finance.audit")

    async def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    async def log_record_built(
        self,
        record_type: str,
        amount: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successfully built expense/income."""
        event = AuditEventBuilder.record_built(
            record_type=record_type,
            amount=amount,
            currency=currency,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_record_rejected(
        self,
        record_type: str,
        field: Optional[str],
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a record rejected by builder validation."""
        event = AuditEventBuilder.record_rejected(
            record_type=record_type,
            field=field,
            reason=reason,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_report_query_built(
        self,
        query: dict,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.report_query_built(
            query=query,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_metrics_query_built(
        self,
        query: dict,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.metrics_query_built(
            query=query,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_query_rejected(
        self,
        query_type: str,
        field: Optional[str],
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.query_rejected(
            query_type=query_type,
            field=field,
            reason=reason,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_tasks_correlated(
        self,
        member_id: Optional[str],
        task_count: int,
        total_completed: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a member task report."""
        event = AuditEventBuilder.tasks_correlated(
            member_id=member_id,
            task_count=task_count,
            total_completed=total_completed,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_balance_computed(
        self,
        currency: str,
        balance: str,
        currencies: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.balance_computed(
            currency=currency,
            balance=balance,
            currencies=currencies,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_report_generated(
        self,
        group_by: str,
        currency: str,
        label_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.report_generated(
            group_by=group_by,
            currency=currency,
            label_count=label_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_unknown_currency(
        self,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a currency that fell back to native."""
        event = AuditEventBuilder.unknown_currency(
            currency=currency,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_store_error(
        self,
        store: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a store failure."""
        event = AuditEventBuilder.store_error(
            store=store,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new request.
    Pass it through all subsequent operations.
    """
    return uuid4()

"""
Main Orchestrator for Family Finance

This module ties together all the components and defines the
end-to-end flows for:
1. Record intake (request body -> builder -> Expense / Income)
2. Query normalization (query params -> ReportQuery / TaskMetricsQuery)
3. Read-side reports (member tasks, household balance, finance reports)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches storage or analytics without passing a builder
- Validation failures are audited, then re-raised unchanged
- Every step is audited

Builders stay synchronous and side-effect free; all I/O and audit
logging happens here.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from family_finance.audit import AuditLogger, create_correlation_id
from family_finance.builders import (
    ExpenseBuilder,
    IncomeBuilder,
    RecordBuilder,
    ReportQueryBuilder,
    TaskMetricsQueryBuilder,
    ValidationError,
)
from family_finance.builders.records import Clock
from family_finance.config import get_settings
from family_finance.currency import CurrencyConverter
from family_finance.models.finance import (
    BalanceSummary,
    DateRange,
    Expense,
    FinanceReport,
    Income,
    MonetaryRecord,
    ReportQuery,
    TaskMetricsQuery,
)
from family_finance.models.task import MemberTaskReport
from family_finance.reports import resolve_report_range
from family_finance.services import (
    BalanceService,
    InfrastructureError,
    PostgresQueryStore,
    ReportService,
    TaskCorrelationService,
)


class FinanceFlow:
    """
    Orchestrates the finance core.

    Flow per request:
    1. Build -> builder validates and normalizes the raw input
    2. Audit -> success or rejection is written to the audit log
    3. Read  -> services query the stores (read-side flows only)

    Services are optional so that record and query flows work
    without any database configured.
    """

    def __init__(
        self,
        converter: Optional[CurrencyConverter] = None,
        task_service: Optional[TaskCorrelationService] = None,
        balance_service: Optional[BalanceService] = None,
        report_service: Optional[ReportService] = None,
        audit_logger: Optional[AuditLogger] = None,
        default_currency: Optional[str] = None,
        clock: Optional[Clock] = None,
    ):
        settings = get_settings()
        self._converter = converter or CurrencyConverter()
        self._task_service = task_service
        self._balance_service = balance_service
        self._report_service = report_service
        self._audit_logger = audit_logger or AuditLogger()
        self._default_currency = default_currency or settings.currency.default_record_currency
        self._task_window_days = settings.app.default_task_window_days
        self._clock = clock

    # =========================================================================
    # RECORD INTAKE
    # =========================================================================

    async def _build_record(
        self,
        builder_cls: type[RecordBuilder],
        body: Optional[dict[str, Any]],
        correlation_id: UUID,
    ) -> MonetaryRecord:
        try:
            record = builder_cls.from_request(
                body,
                default_currency=self._default_currency,
                clock=self._clock,
            )
        except ValueError as e:
            await self._audit_logger.log_record_rejected(
                record_type=builder_cls.entity_name,
                field=getattr(e, "field", "date"),
                reason=str(e),
                correlation_id=correlation_id,
            )
            raise

        await self._audit_logger.log_record_built(
            record_type=builder_cls.entity_name,
            amount=str(record.amount),
            currency=record.currency,
            correlation_id=correlation_id,
        )
        if not self._converter.is_supported(record.currency):
            await self._audit_logger.log_unknown_currency(
                currency=record.currency,
                correlation_id=correlation_id,
            )
        return record

    async def create_expense(
        self,
        body: Optional[dict[str, Any]],
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Validate and normalize an expense request body.

        Raises:
            ValidationError: Bad or missing amount / categoryId
            ValueError: Unparseable date
        """
        return await self._build_record(
            ExpenseBuilder, body, correlation_id or create_correlation_id()
        )

    async def create_income(
        self,
        body: Optional[dict[str, Any]],
        correlation_id: Optional[UUID] = None,
    ) -> Income:
        """Same as create_expense, with source instead of categoryId."""
        return await self._build_record(
            IncomeBuilder, body, correlation_id or create_correlation_id()
        )

    # =========================================================================
    # QUERY NORMALIZATION
    # =========================================================================

    async def build_report_query(
        self,
        params: Optional[dict[str, Any]],
        correlation_id: Optional[UUID] = None,
    ) -> ReportQuery:
        query = ReportQueryBuilder.from_query_params(
            params, default_currency=self._default_currency
        )
        await self._audit_logger.log_report_query_built(
            query=query.to_dict(),
            correlation_id=correlation_id or create_correlation_id(),
        )
        return query

    async def build_metrics_query(
        self,
        params: Optional[dict[str, Any]],
        correlation_id: Optional[UUID] = None,
    ) -> TaskMetricsQuery:
        """
        Raises:
            ValidationError: Missing familyId or unknown enumerated value
        """
        correlation_id = correlation_id or create_correlation_id()
        try:
            query = TaskMetricsQueryBuilder.from_params(params)
        except ValidationError as e:
            await self._audit_logger.log_query_rejected(
                query_type="task_metrics",
                field=e.field,
                reason=str(e),
                correlation_id=correlation_id,
            )
            raise

        await self._audit_logger.log_metrics_query_built(
            query=query.to_dict(),
            correlation_id=correlation_id,
        )
        return query

    # =========================================================================
    # READ-SIDE REPORTS
    # =========================================================================

    def _require(self, service: Any, name: str) -> Any:
        if service is None:
            raise InfrastructureError(f"{name} is not configured")
        return service

    async def member_tasks(
        self,
        filters: Optional[dict[str, Any]] = None,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> MemberTaskReport:
        """Tasks and completion stats for one member (or everyone)."""
        correlation_id = correlation_id or create_correlation_id()
        service: TaskCorrelationService = self._require(self._task_service, "Task store")
        try:
            report = await service.get_member_task_report(
                filters, now=now, window_days=self._task_window_days
            )
        except InfrastructureError as e:
            await self._audit_logger.log_store_error(
                store="tasks",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        await self._audit_logger.log_tasks_correlated(
            member_id=report.meta.get("memberId"),
            task_count=len(report.tasks),
            total_completed=report.stats.total_completed,
            correlation_id=correlation_id,
        )
        return report

    async def balance(
        self,
        from_: Optional[str] = None,
        to: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> BalanceSummary:
        """Household balance in the reporting currency."""
        correlation_id = correlation_id or create_correlation_id()
        service: BalanceService = self._require(self._balance_service, "Finance store")
        try:
            summary = await service.get_balance(from_, to)
        except InfrastructureError as e:
            await self._audit_logger.log_store_error(
                store="finance",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        currencies = [item.currency for item in summary.by_currency]
        for code in currencies:
            if not self._converter.is_supported(code):
                await self._audit_logger.log_unknown_currency(
                    currency=code,
                    correlation_id=correlation_id,
                )
        await self._audit_logger.log_balance_computed(
            currency=summary.currency,
            balance=str(summary.balance),
            currencies=currencies,
            correlation_id=correlation_id,
        )
        return summary

    async def report(
        self,
        query: ReportQuery,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> FinanceReport:
        """
        Chart-ready finance report for a built query.

        Raises:
            ValueError: Unparseable explicit from/to
            InfrastructureError: Store failure, or no finance store wired
        """
        correlation_id = correlation_id or create_correlation_id()
        service: ReportService = self._require(self._report_service, "Finance store")
        try:
            report = await service.generate(query, now=now)
        except InfrastructureError as e:
            await self._audit_logger.log_store_error(
                store="finance",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        if not self._converter.is_supported(query.currency):
            await self._audit_logger.log_unknown_currency(
                currency=query.currency,
                correlation_id=correlation_id,
            )
        await self._audit_logger.log_report_generated(
            group_by=report.meta["groupBy"],
            currency=report.meta["currency"],
            label_count=len(report.labels),
            correlation_id=correlation_id,
        )
        return report

    async def report_range(
        self,
        query: ReportQuery,
        now: Optional[datetime] = None,
    ) -> DateRange:
        """
        Concrete window for a report query.

        Data bounds are only read when no explicit from was given and a
        finance store is configured.
        """
        if self._report_service is None:
            return resolve_report_range(query, now=now)
        return await self._report_service.resolve_range(query, now=now)


def create_app_components(
    use_storage: bool = True,
) -> tuple[FinanceFlow, list[PostgresQueryStore]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to wire the PostgreSQL stores.
                    Set to False for builder-only use and tests.

    Returns:
        (finance_flow, stores) - callers close the stores on shutdown
    """
    settings = get_settings()
    converter = CurrencyConverter(
        rates=settings.currency.rates,
        native_currency=settings.currency.native_currency,
    )
    audit_logger = AuditLogger()

    stores: list[PostgresQueryStore] = []
    task_service = None
    balance_service = None
    report_service = None

    if use_storage:
        # Pools are created lazily on first query
        tasks_store = PostgresQueryStore(settings.tasks_db)
        finance_store = PostgresQueryStore(settings.finance_db)
        stores = [tasks_store, finance_store]
        task_service = TaskCorrelationService(tasks_store)
        balance_service = BalanceService(finance_store, converter)
        report_service = ReportService(finance_store, converter)

    flow = FinanceFlow(
        converter=converter,
        task_service=task_service,
        balance_service=balance_service,
        report_service=report_service,
        audit_logger=audit_logger,
    )
    return flow, stores

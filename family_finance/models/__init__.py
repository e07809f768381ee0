"""
Data Models Package

This package contains all Pydantic models used in the Family Finance core.
Everything the builders and services return conforms to these schemas.
"""

from family_finance.models.finance import (
    BalanceSummary,
    CurrencyBalance,
    DateRange,
    Expense,
    FinanceReport,
    Income,
    MetricsGroupBy,
    MonetaryRecord,
    ReportDataset,
    ReportGroupBy,
    ReportPeriod,
    ReportQuery,
    TaskMetric,
    TaskMetricsQuery,
    TimeGranularity,
)
from family_finance.models.task import (
    CategoryCount,
    MemberTaskReport,
    Task,
    TaskFilters,
    TaskStats,
)
from family_finance.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "BalanceSummary",
    "CurrencyBalance",
    "DateRange",
    "Expense",
    "FinanceReport",
    "Income",
    "MetricsGroupBy",
    "MonetaryRecord",
    "ReportDataset",
    "ReportGroupBy",
    "ReportPeriod",
    "ReportQuery",
    "TaskMetric",
    "TaskMetricsQuery",
    "TimeGranularity",
    # Task models
    "CategoryCount",
    "MemberTaskReport",
    "Task",
    "TaskFilters",
    "TaskStats",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

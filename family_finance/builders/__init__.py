"""
Builders Package

Fluent builders that turn untrusted request input into canonical,
frozen records and queries.
"""

from family_finance.builders.errors import ValidationError
from family_finance.builders.metrics_query import TaskMetricsQueryBuilder
from family_finance.builders.records import ExpenseBuilder, IncomeBuilder, RecordBuilder
from family_finance.builders.report_query import ReportQueryBuilder

__all__ = [
    "ValidationError",
    # Records
    "ExpenseBuilder",
    "IncomeBuilder",
    "RecordBuilder",
    # Queries
    "ReportQueryBuilder",
    "TaskMetricsQueryBuilder",
]

"""
Tests for Family Finance

Test strategy:
1. Unit tests for individual components (models, builders, converter)
2. Service and flow tests against an in-memory fake store
3. No real database or network calls in tests (use mocks)
"""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from uuid import uuid4

from family_finance.models.finance import (
    BalanceSummary,
    CurrencyBalance,
    DateRange,
    Expense,
    FinanceReport,
    Income,
    ReportDataset,
    ReportGroupBy,
    ReportPeriod,
    ReportQuery,
    TaskMetric,
    TaskMetricsQuery,
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


class TestFinanceModels:
    """Tests for finance value objects."""

    def test_expense_wire_keys(self):
        """Test camelCase serialization and omission of absent optionals."""
        expense = Expense(
            amount=Decimal("9.99"),
            currency="USD",
            category_id="food",
            date="2024-01-01T00:00:00.000Z",
        )
        assert expense.to_dict() == {
            "amount": 9.99,
            "currency": "USD",
            "categoryId": "food",
            "date": "2024-01-01T00:00:00.000Z",
        }

    def test_expense_is_frozen(self):
        """Test that value objects cannot be mutated."""
        expense = Expense(amount=1, currency="USD", category_id="x", date="2024-01-01T00:00:00.000Z")
        with pytest.raises(ValueError):
            expense.currency = "EUR"

    def test_report_query_from_alias(self):
        """Test that from_ is exposed as 'from'."""
        query = ReportQuery.model_validate({"from": "2024-01-01T00:00:00.000Z", "currency": "USD"})
        assert query.from_ == "2024-01-01T00:00:00.000Z"
        assert query.to_dict() == {
            "from": "2024-01-01T00:00:00.000Z",
            "groupBy": "date",
            "currency": "USD",
        }

    def test_balance_summary_nested_keys(self):
        summary = BalanceSummary(
            currency="MXN",
            total_incomes=Decimal("10.00"),
            total_expenses=Decimal("4.00"),
            balance=Decimal("6.00"),
            by_currency=(CurrencyBalance(currency="MXN", total_incomes=Decimal("10")),),
        )
        data = summary.to_dict()
        assert data["totalIncomes"] == 10.0
        assert data["byCurrency"][0]["totalExpenses"] == 0.0
        assert summary.total_incomes == Decimal("10.00")


class TestTaskModels:
    """Tests for the read-only task view."""

    def test_integer_ids_from_database(self):
        """Test that integer ids in task rows become strings."""
        task = Task.model_validate(
            {"id": 17, "title": "Dishes", "status": "completed", "assignedTo": 7, "categoryId": 3}
        )
        assert task.assigned_to == "7"
        assert task.category_id == "3"
        assert CategoryCount.model_validate({"categoryId": 3, "count": 2}).category_id == "3"

    def test_filters_coerce_numbers(self):
        """Test that numeric ids from query strings become strings."""
        filters = TaskFilters.model_validate({"memberId": 12, "unknown": "ignored"})
        assert filters.member_id == "12"

    def test_task_keeps_null_completion(self):
        task = Task(id="1", title="Trash", status="pending")
        assert task.to_dict()["completedAt"] is None

    def test_category_count_non_negative(self):
        with pytest.raises(ValueError):
            CategoryCount(category_id="x", count=-1)

    def test_member_report_shape(self):
        """Test the data/meta envelope."""
        report = MemberTaskReport(
            tasks=(Task(id="1", title="Trash", status="completed"),),
            stats=TaskStats(total_completed=1, by_category=(CategoryCount(category_id="c", count=1),)),
            meta={"count": 1},
        )
        output = report.to_dict()
        assert set(output) == {"data", "meta"}
        assert output["data"]["stats"] == {
            "totalCompleted": 1,
            "byCategory": [{"categoryId": "c", "count": 1}],
        }


class TestJsonOutput:
    """to_dict() output must survive json.dumps for every model."""

    @pytest.mark.parametrize("model", [
        Expense(amount=Decimal("19.99"), currency="USD", category_id="food", date="2024-01-01T00:00:00.000Z"),
        Income(amount=2500, currency="MXN", source="salary", member_id="3", date="2024-01-01T00:00:00.000Z"),
        ReportQuery(currency="USD", period="month"),
        TaskMetricsQuery(family_id="f-1", members=("a", "b"), group_by="date", granularity="week"),
        BalanceSummary(
            currency="MXN",
            total_incomes=Decimal("10.50"),
            total_expenses=Decimal("4.25"),
            balance=Decimal("6.25"),
            by_currency=(CurrencyBalance(currency="USD", total_incomes=Decimal("1.5")),),
        ),
        DateRange(start=datetime(2024, 1, 1, tzinfo=timezone.utc), end=datetime(2024, 1, 31, tzinfo=timezone.utc)),
        FinanceReport(
            labels=("2024-01-01",),
            datasets=(ReportDataset(label="Expenses", data=(Decimal("3.10"),), color="#F44336"),),
            meta={"currency": "MXN"},
        ),
        Task(id="1", title="Trash", status="completed"),
        MemberTaskReport(
            tasks=(Task(id="1", title="Trash", status="completed"),),
            stats=TaskStats(total_completed=1, by_category=(CategoryCount(category_id="c", count=1),)),
            meta={"count": 1},
        ),
    ], ids=lambda model: type(model).__name__)
    def test_to_dict_is_json_serializable(self, model):
        data = model.to_dict()
        assert json.loads(json.dumps(data)) == data

    def test_decimal_amount_becomes_number(self):
        """Test that Decimal amounts are emitted as JSON numbers."""
        expense = Expense(
            amount=Decimal("19.99"), currency="USD", category_id="food", date="2024-01-01T00:00:00.000Z"
        )
        assert json.dumps(expense.to_dict()["amount"]) == "19.99"
        assert expense.amount == Decimal("19.99")

    def test_date_range_renders_iso(self):
        data = DateRange(
            start=datetime(2024, 1, 1, tzinfo=timezone.utc),
            end=datetime(2024, 1, 2, tzinfo=timezone.utc),
        ).to_dict()
        assert data["start"].startswith("2024-01-01T00:00:00")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_BUILT,
            description="Expense built",
        )
        assert event.event_id is not None
        assert event.timestamp.tzinfo is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dict."""
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.STORE_ERROR,
            severity=AuditSeverity.ERROR,
            description="Store error",
            correlation_id=correlation_id,
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "store_error"
        assert log_dict["severity"] == "error"
        assert log_dict["correlation_id"] == str(correlation_id)

    def test_audit_event_builder_record_rejected(self):
        """Test AuditEventBuilder for rejected records."""
        event = AuditEventBuilder.record_rejected(
            record_type="expense",
            field="amount",
            reason="amount must be > 0",
        )
        assert event.event_type == AuditEventType.RECORD_REJECTED
        assert event.severity == AuditSeverity.WARNING
        assert event.error_code == "VALIDATION_ERROR"
        assert event.details == {"field": "amount"}

    def test_audit_event_builder_unknown_currency(self):
        event = AuditEventBuilder.unknown_currency("GBP")
        assert event.severity == AuditSeverity.WARNING
        assert "GBP" in event.description


class TestEnums:
    """Tests for enumerated values."""

    def test_report_periods(self):
        assert {p.value for p in ReportPeriod} == {"day", "week", "month", "year"}

    def test_report_group_by(self):
        assert {g.value for g in ReportGroupBy} == {"category", "member", "date", "source"}

    def test_task_metrics(self):
        assert {m.value for m in TaskMetric} == {"completed", "duration", "points"}

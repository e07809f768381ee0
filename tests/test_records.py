"""Tests for the expense and income builders."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from family_finance.builders import ExpenseBuilder, IncomeBuilder, ValidationError
from family_finance.models import Expense, Income


class TestExpenseBuilder:
    """Setter and build-time validation for expenses."""

    def test_minimal_expense_gets_defaults(self, fixed_clock):
        """Test that currency and date are defaulted at build."""
        expense = ExpenseBuilder.from_request(
            {"amount": 50, "categoryId": "food"},
            clock=fixed_clock,
        )
        assert isinstance(expense, Expense)
        assert expense.to_dict() == {
            "amount": 50,
            "currency": "USD",
            "categoryId": "food",
            "date": "2024-03-15T12:30:00.000Z",
        }

    def test_full_expense(self, fixed_clock):
        """Test that every field flows through unchanged."""
        expense = ExpenseBuilder.from_request(
            {
                "amount": 12.5,
                "currency": "EUR",
                "categoryId": "transport",
                "memberId": "m-7",
                "date": "2024-01-02",
                "notes": "bus pass",
            },
            clock=fixed_clock,
        )
        assert expense.amount == 12.5
        assert expense.currency == "EUR"
        assert expense.member_id == "m-7"
        assert expense.date == "2024-01-02T00:00:00.000Z"
        assert expense.notes == "bus pass"

    @pytest.mark.parametrize("amount", [0, -1, -0.01])
    def test_non_positive_amount_rejected(self, amount):
        """Test that the amount setter rejects zero and negatives."""
        with pytest.raises(ValidationError, match="amount must be > 0") as exc:
            ExpenseBuilder(default_currency="USD").set_amount(amount)
        assert exc.value.field == "amount"

    def test_missing_amount_rejected_at_build(self):
        """Test that a skipped amount setter is caught by build()."""
        builder = ExpenseBuilder(default_currency="USD").set_category_id("food")
        with pytest.raises(ValidationError, match="amount is required"):
            builder.build()

    def test_none_amount_is_noop(self):
        """Test that a None amount leaves the draft untouched."""
        builder = ExpenseBuilder(default_currency="USD").set_amount(None).set_category_id("food")
        with pytest.raises(ValidationError, match="amount is required"):
            builder.build()

    @pytest.mark.parametrize("category", [None, "", "   ", 42])
    def test_blank_category_rejected(self, category):
        """Test that category must be a non-blank string."""
        with pytest.raises(ValidationError, match="categoryId is required"):
            ExpenseBuilder.from_request({"amount": 10, "categoryId": category})

    def test_category_stored_untrimmed(self, fixed_clock):
        """Test that a padded category is kept verbatim."""
        expense = ExpenseBuilder.from_request(
            {"amount": 10, "categoryId": "  food "}, clock=fixed_clock
        )
        assert expense.category_id == "  food "

    def test_numeric_string_amount_coerced(self, fixed_clock):
        """Test that numeric strings become Decimal."""
        expense = ExpenseBuilder.from_request(
            {"amount": "19.99", "categoryId": "food"}, clock=fixed_clock
        )
        assert expense.amount == Decimal("19.99")

    @pytest.mark.parametrize("amount", ["abc", True, [1]])
    def test_non_numeric_amount_rejected(self, amount):
        """Test that non-numbers are rejected at the setter."""
        with pytest.raises(ValidationError, match="amount must be a number"):
            ExpenseBuilder(default_currency="USD").set_amount(amount)

    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), "NaN"])
    def test_nan_and_infinity_rejected(self, amount):
        """Test that NaN and infinity are not positive amounts."""
        with pytest.raises(ValidationError, match="amount must be > 0"):
            ExpenseBuilder(default_currency="USD").set_amount(amount)

    @pytest.mark.parametrize("falsy", [None, "", 0, False])
    def test_falsy_currency_uses_default(self, falsy, fixed_clock):
        """Test that every falsy currency resolves to the default."""
        expense = ExpenseBuilder.from_request(
            {"amount": 1, "categoryId": "x", "currency": falsy},
            default_currency="MXN",
            clock=fixed_clock,
        )
        assert expense.currency == "MXN"

    def test_falsy_optionals_omitted(self, fixed_clock):
        """Test that empty member and notes are left out of the output."""
        expense = ExpenseBuilder.from_request(
            {"amount": 1, "categoryId": "x", "memberId": "", "notes": 0},
            clock=fixed_clock,
        )
        data = expense.to_dict()
        assert "memberId" not in data
        assert "notes" not in data

    def test_unparseable_date_raises(self):
        """Test that an invalid date propagates as ValueError."""
        with pytest.raises(ValueError):
            ExpenseBuilder.from_request({"amount": 1, "categoryId": "x", "date": "not-a-date"})

    def test_date_overflowing_utc_raises_value_error(self):
        """Test that a date past year 9999 in UTC is reported as ValueError."""
        with pytest.raises(ValueError, match="out of range"):
            ExpenseBuilder(default_currency="USD").set_date("9999-12-31T23:00:00-05:00")

    def test_build_does_not_mutate_draft(self, fixed_clock):
        """Test that build() returns independent snapshots."""
        builder = ExpenseBuilder(default_currency="USD", clock=fixed_clock)
        builder.set_amount(5).set_category_id("food")
        first = builder.build()
        builder.set_amount(7)
        second = builder.build()
        assert first.amount == 5
        assert second.amount == 7
        assert "currency" not in builder._draft

    def test_only_currency_set_fails_on_amount(self):
        """Test that build() reports the first missing mandatory field."""
        builder = ExpenseBuilder(default_currency="USD").set_currency("EUR")
        with pytest.raises(ValidationError, match="amount is required"):
            builder.build()

    def test_repeated_build_observes_fresh_now(self):
        """Test that an unset date is resolved per build()."""
        instants = iter([
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2024, 1, 2, tzinfo=timezone.utc),
        ])
        builder = ExpenseBuilder(default_currency="USD", clock=lambda: next(instants))
        builder.set_amount(3).set_category_id("food")
        first, second = builder.build(), builder.build()
        assert first.date != second.date
        assert first.model_dump(exclude={"date"}) == second.model_dump(exclude={"date"})

    def test_repeated_build_with_explicit_date_identical(self):
        builder = ExpenseBuilder(default_currency="USD")
        builder.set_amount(3).set_category_id("food").set_date("2024-05-05T05:05:05Z")
        assert builder.build() == builder.build()

    def test_built_record_is_frozen(self, fixed_clock):
        """Test that records cannot be modified after build."""
        expense = ExpenseBuilder.from_request(
            {"amount": 1, "categoryId": "x"}, clock=fixed_clock
        )
        with pytest.raises(Exception):
            expense.amount = 2


class TestIncomeBuilder:
    """Income uses source instead of categoryId."""

    def test_income_requires_source(self):
        """Test that source is mandatory."""
        with pytest.raises(ValidationError, match="source is required") as exc:
            IncomeBuilder.from_request({"amount": 100})
        assert exc.value.field == "source"

    def test_income_build(self, fixed_clock):
        """Test a full income."""
        income = IncomeBuilder.from_request(
            {"amount": 2500, "source": "salary", "currency": "MXN", "memberId": 3},
            clock=fixed_clock,
        )
        assert isinstance(income, Income)
        assert income.to_dict() == {
            "amount": 2500,
            "currency": "MXN",
            "source": "salary",
            "memberId": "3",
            "date": "2024-03-15T12:30:00.000Z",
        }

    def test_missing_source_caught_at_build(self):
        """Test the build-time guard when set_source is skipped."""
        builder = IncomeBuilder(default_currency="USD").set_amount(10)
        with pytest.raises(ValidationError, match="source is required"):
            builder.build()

    def test_validation_error_is_value_error(self):
        """Test that callers catching ValueError also see builder errors."""
        with pytest.raises(ValueError):
            IncomeBuilder.from_request({})

import pytest
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

from joyeria.errors import ErrorType
from joyeria.exceptions import AppException
from joyeria.services import lifecycle


class TestSplitAmount:
    """Tests for splitting a plan total into installments."""

    def test_even_split(self):
        assert lifecycle.split_amount(Decimal("900"), 3) == [Decimal("300.00")] * 3

    def test_leftover_cents_go_to_first_installments(self):
        amounts = lifecycle.split_amount(Decimal("100"), 3)

        assert amounts == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
        assert sum(amounts) == Decimal("100.00")

    def test_shares_always_add_up(self):
        for count in (2, 7, 11, 24):
            assert sum(lifecycle.split_amount(Decimal("1234.56"), count)) == Decimal("1234.56")

    @pytest.mark.parametrize("total,count", [("1.14", 24), ("0.02", 2), ("0.24", 24), ("0.05", 3)])
    def test_tiny_totals_keep_every_share_positive(self, total, count):
        amounts = lifecycle.split_amount(Decimal(total), count)

        assert len(amounts) == count
        assert all(amount >= Decimal("0.01") for amount in amounts)
        assert sum(amounts) == Decimal(total)
        assert max(amounts) - min(amounts) <= Decimal("0.01")

    @pytest.mark.parametrize("total,count", [("0", 2), ("0.01", 2), ("0.23", 24)])
    def test_total_below_one_cent_per_installment(self, total, count):
        with pytest.raises(AppException) as exc_info:
            lifecycle.split_amount(Decimal(total), count)

        assert exc_info.value.error_type == ErrorType.VALIDATION


class TestInstallmentDueDates:
    """Tests for spacing installment due dates."""

    def test_ninety_days_in_three(self):
        start = date(2025, 1, 1)
        due = start + timedelta(days=90)

        dates = lifecycle.installment_due_dates(start, due, 3)

        assert dates == [start + timedelta(days=d) for d in (30, 60, 90)]

    def test_uneven_spacing_rounds_up(self):
        start = date(2025, 1, 1)

        dates = lifecycle.installment_due_dates(start, start + timedelta(days=10), 3)

        assert dates == [start + timedelta(days=d) for d in (4, 7, 10)]

    def test_last_date_is_plan_due_date(self):
        start = date(2025, 3, 15)
        due = date(2026, 2, 28)

        assert lifecycle.installment_due_dates(start, due, 24)[-1] == due


class TestValidation:
    """Tests for input validation rules."""

    @pytest.mark.parametrize("count", [1, 25, 0])
    def test_installment_count_out_of_range(self, count):
        with pytest.raises(AppException) as exc_info:
            lifecycle.validate_installment_count(count)

        assert exc_info.value.error_type == ErrorType.VALIDATION

    @pytest.mark.parametrize("count", [2, 24])
    def test_installment_count_bounds_accepted(self, count):
        lifecycle.validate_installment_count(count)

    def test_due_date_today_rejected(self):
        today = date(2025, 5, 10)

        with pytest.raises(AppException) as exc_info:
            lifecycle.validate_future_date(today, today)

        assert exc_info.value.error_type == ErrorType.VALIDATION
        lifecycle.validate_future_date(today + timedelta(days=1), today)

    def test_deposit_below_minimum(self):
        with pytest.raises(AppException) as exc_info:
            lifecycle.validate_deposit(Decimal("50"), Decimal("1000"))

        assert "100.00" in exc_info.value.message

    @pytest.mark.parametrize("deposit", ["100", "150", "999.99"])
    def test_deposit_accepted(self, deposit):
        lifecycle.validate_deposit(Decimal(deposit), Decimal("1000"))

    def test_deposit_equal_to_total_rejected(self):
        with pytest.raises(AppException):
            lifecycle.validate_deposit(Decimal("1000"), Decimal("1000"))


class TestApplyPayment:
    """Tests for registering payments against an installment."""

    def test_partial_then_paid(self):
        paid, status = lifecycle.apply_payment(Decimal("300"), Decimal("0"), Decimal("100"))
        assert (paid, status) == (Decimal("100.00"), "partial")

        paid, status = lifecycle.apply_payment(Decimal("300"), paid, Decimal("200"))
        assert (paid, status) == (Decimal("300.00"), "paid")

    def test_overpayment_rejected(self):
        with pytest.raises(AppException) as exc_info:
            lifecycle.apply_payment(Decimal("300"), Decimal("250"), Decimal("60"))

        assert exc_info.value.error_type == ErrorType.VALIDATION
        assert "50.00" in exc_info.value.message

    def test_zero_payment_rejected(self):
        with pytest.raises(AppException):
            lifecycle.apply_payment(Decimal("300"), Decimal("0"), Decimal("0"))


class TestEffectiveStatus:
    """Tests for overdue-aware statuses."""

    today = date(2025, 6, 1)
    yesterday = date(2025, 5, 31)

    def test_pending_installment_overdue(self):
        assert lifecycle.effective_installment_status("pending", self.yesterday, self.today) == "expired"
        assert lifecycle.effective_installment_status("pending", self.today, self.today) == "pending"

    def test_partial_and_paid_installments_never_expire(self):
        assert lifecycle.effective_installment_status("partial", self.yesterday, self.today) == "partial"
        assert lifecycle.effective_installment_status("paid", self.yesterday, self.today) == "paid"

    def test_open_plan_overdue(self):
        assert lifecycle.effective_plan_status("in_progress", self.yesterday, self.today) == "expired"
        assert lifecycle.effective_plan_status("completed", self.yesterday, self.today) == "completed"

    def test_active_reservation_overdue(self):
        assert lifecycle.effective_reservation_status("active", self.yesterday, self.today) == "expired"
        assert lifecycle.effective_reservation_status("cancelled", self.yesterday, self.today) == "cancelled"


class TestDerivePlanStatus:
    """Tests for the plan status implied by its installments."""

    def _installment(self, status, amount_paid):
        return SimpleNamespace(status=status, amount_paid=Decimal(amount_paid))

    def test_nothing_paid(self):
        installments = [self._installment("pending", "0"), self._installment("pending", "0")]
        assert lifecycle.derive_plan_status(installments) == "pending"

    def test_some_paid(self):
        installments = [self._installment("partial", "10"), self._installment("pending", "0")]
        assert lifecycle.derive_plan_status(installments) == "in_progress"

    def test_all_paid(self):
        installments = [self._installment("paid", "300"), self._installment("paid", "300")]
        assert lifecycle.derive_plan_status(installments) == "completed"

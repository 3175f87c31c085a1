"""Tests for the payment status transition table."""

import pytest

from payments.models import InvalidTransition, Payment

S = Payment.Status


class TestCanTransition:
    """Test Payment.can_transition."""

    @pytest.mark.parametrize(
        "current, target",
        [
            (S.PENDING, S.COMPLETED),
            (S.PENDING, S.AWAITING_DEPOSIT),
            (S.PENDING, S.FAILED),
            (S.PENDING, S.CANCELLED),
            (S.AWAITING_DEPOSIT, S.COMPLETED),
            (S.AWAITING_DEPOSIT, S.FAILED),
            (S.COMPLETED, S.REFUNDED),
            (S.COMPLETED, S.PARTIAL_REFUND),
            (S.PARTIAL_REFUND, S.REFUNDED),
        ],
    )
    def test_allowed(self, current, target):
        assert Payment(status=current).can_transition(target)

    @pytest.mark.parametrize(
        "current, target",
        [
            (S.COMPLETED, S.PENDING),
            (S.COMPLETED, S.FAILED),
            (S.PENDING, S.REFUNDED),
            (S.AWAITING_DEPOSIT, S.PARTIAL_REFUND),
            (S.FAILED, S.COMPLETED),
            (S.CANCELLED, S.PENDING),
            (S.REFUNDED, S.COMPLETED),
        ],
    )
    def test_refused(self, current, target):
        assert not Payment(status=current).can_transition(target)

    def test_same_status_is_allowed(self):
        """Test that re-applying the current status is a no-op, not an error."""
        assert Payment(status=S.REFUNDED).can_transition(S.REFUNDED)


class TestSetStatus:
    """Test Payment.set_status."""

    def test_sets_allowed_status(self):
        payment = Payment(status=S.PENDING)
        payment.set_status(S.COMPLETED)
        assert payment.status == S.COMPLETED

    def test_raises_on_refused_status(self):
        payment = Payment(status=S.FAILED)
        with pytest.raises(InvalidTransition):
            payment.set_status(S.COMPLETED)
        assert payment.status == S.FAILED


class TestDerivedFields:
    def test_branch_ratio(self):
        assert Payment(hq_fee_rate=10).branch_ratio == 90

    def test_is_terminal(self):
        assert not Payment(status=S.PENDING).is_terminal
        assert not Payment(status=S.AWAITING_DEPOSIT).is_terminal
        assert Payment(status=S.COMPLETED).is_terminal

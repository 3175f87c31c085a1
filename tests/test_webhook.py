"""Tests for the payment gateway webhook: status changes and settlement events."""

import pytest

from booking.models import Reservation
from inventory.models import Vehicle
from payments.models import Payment
from payments.services import DEPOSIT_EXPIRED_MESSAGE, match_settlement_side

pytestmark = pytest.mark.django_db

WEBHOOK_URL = "/api/payments/webhook"


@pytest.fixture
def post_event(api_client, webhook_secret):
    def _post(event_type, data, secret=None):
        payload = {"eventType": event_type, "secret": webhook_secret if secret is None else secret, "data": data}
        return api_client.post(WEBHOOK_URL, payload, format="json")
    return _post


def _result(response):
    return response.json()["data"]["result"]


class TestWebhookAuthentication:
    def test_wrong_secret(self, post_event, card_payment):
        response = post_event("PAYMENT_STATUS_CHANGED", {"orderId": card_payment.pg_order_id, "status": "DONE"},
                              secret="nope")
        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"
        card_payment.refresh_from_db()
        assert card_payment.status == Payment.Status.PENDING

    def test_unconfigured_secret_rejects_everything(self, settings, api_client):
        settings.ADAPTERS_CONFIG = {"payments.fake": {}, "maps.fake": {}}
        response = api_client.post(WEBHOOK_URL, {"eventType": "PAYMENT_STATUS_CHANGED", "secret": ""}, format="json")
        assert response.status_code == 401

    def test_unknown_event_is_ignored(self, post_event):
        response = post_event("SOMETHING_NEW", {})
        assert response.status_code == 200
        assert _result(response) == "ignored"

    @pytest.mark.parametrize("data", [["not", "a", "dict"], "DONE", 42])
    def test_malformed_data_is_tolerated(self, post_event, data):
        response = post_event("PAYMENT_STATUS_CHANGED", data)
        assert response.status_code == 200
        assert _result(response) == "payment_not_found"


class TestPaymentStatusChanged:
    """Test PAYMENT_STATUS_CHANGED handling."""

    def test_done_completes_payment(self, post_event, card_payment):
        response = post_event("PAYMENT_STATUS_CHANGED", {
            "orderId": card_payment.pg_order_id,
            "status": "DONE",
            "paymentKey": "pk_from_webhook",
            "approvedAt": "2030-01-01T10:00:00+09:00",
        })

        assert response.status_code == 200
        assert _result(response) == "completed"
        card_payment.refresh_from_db()
        assert card_payment.status == Payment.Status.COMPLETED
        assert card_payment.pg_transaction_id == "pk_from_webhook"
        reservation = card_payment.reservation
        reservation.refresh_from_db()
        assert reservation.payment_status == Reservation.PaymentStatus.PAID

    def test_done_twice_is_idempotent(self, post_event, completed_payment):
        paid_at = completed_payment.paid_at
        response = post_event("PAYMENT_STATUS_CHANGED", {
            "orderId": completed_payment.pg_order_id,
            "status": "DONE",
            "paymentKey": "pk_other",
        })

        assert _result(response) == "already_processed"
        completed_payment.refresh_from_db()
        assert completed_payment.paid_at == paid_at
        assert completed_payment.pg_transaction_id == "pk_test_123"

    def test_deposit_done_completes_virtual_account(self, post_event, virtual_account_payment):
        response = post_event("PAYMENT_STATUS_CHANGED", {
            "orderId": virtual_account_payment.pg_order_id,
            "status": "DONE",
        })
        assert _result(response) == "completed"
        virtual_account_payment.refresh_from_db()
        assert virtual_account_payment.status == Payment.Status.COMPLETED

    def test_canceled_after_completion_refunds(self, post_event, completed_payment):
        response = post_event("PAYMENT_STATUS_CHANGED", {
            "orderId": completed_payment.pg_order_id,
            "status": "CANCELED",
        })

        assert _result(response) == "cancelled"
        completed_payment.refresh_from_db()
        assert completed_payment.status == Payment.Status.REFUNDED
        assert completed_payment.refund_amount == completed_payment.amount
        reservation = completed_payment.reservation
        reservation.refresh_from_db()
        assert reservation.status == Reservation.Status.CANCELLED
        assert reservation.payment_status == Reservation.PaymentStatus.REFUNDED

    def test_canceled_before_completion(self, post_event, card_payment):
        post_event("PAYMENT_STATUS_CHANGED", {"orderId": card_payment.pg_order_id, "status": "CANCELED"})
        card_payment.refresh_from_db()
        assert card_payment.status == Payment.Status.CANCELLED
        assert card_payment.cancelled_at is not None

    def test_expired_deposit_leaves_vehicle_alone(self, post_event, virtual_account_payment):
        vehicle = virtual_account_payment.reservation.vehicle
        Vehicle.objects.filter(pk=vehicle.pk).update(status=Vehicle.Status.MAINTENANCE)

        response = post_event("PAYMENT_STATUS_CHANGED", {
            "orderId": virtual_account_payment.pg_order_id,
            "status": "EXPIRED",
        })

        assert _result(response) == "expired"
        virtual_account_payment.refresh_from_db()
        assert virtual_account_payment.status == Payment.Status.FAILED
        assert virtual_account_payment.error_message == DEPOSIT_EXPIRED_MESSAGE
        reservation = virtual_account_payment.reservation
        reservation.refresh_from_db()
        assert reservation.status == Reservation.Status.CANCELLED
        assert reservation.payment_status == Reservation.PaymentStatus.EXPIRED
        vehicle.refresh_from_db()
        assert vehicle.status == Vehicle.Status.MAINTENANCE

    def test_expired_twice(self, post_event, virtual_account_payment):
        data = {"orderId": virtual_account_payment.pg_order_id, "status": "EXPIRED"}
        post_event("PAYMENT_STATUS_CHANGED", data)
        assert _result(post_event("PAYMENT_STATUS_CHANGED", data)) == "already_processed"

    def test_unknown_order(self, post_event):
        response = post_event("PAYMENT_STATUS_CHANGED", {"orderId": "ORDER_unknown", "status": "DONE"})
        assert response.status_code == 200
        assert _result(response) == "payment_not_found"

    def test_unhandled_status(self, post_event, card_payment):
        response = post_event("PAYMENT_STATUS_CHANGED", {"orderId": card_payment.pg_order_id, "status": "READY"})
        assert _result(response) == "ignored"


class TestSettlementEvents:
    """Test SETTLEMENT_COMPLETED and SETTLEMENT_FAILED handling."""

    def test_both_sides_settle(self, post_event, completed_payment):
        order_id = completed_payment.pg_order_id

        post_event("SETTLEMENT_COMPLETED", {"orderId": order_id, "subMallId": "sub_gangnam", "settlementAmount": 135000})
        completed_payment.refresh_from_db()
        assert completed_payment.branch_settlement_status == Payment.SettlementStatus.COMPLETED
        assert completed_payment.branch_settled_amount == 135000
        assert completed_payment.branch_settled_at is not None
        assert completed_payment.settlement_status == Payment.SettlementStatus.PROCESSING

        post_event("SETTLEMENT_COMPLETED", {"orderId": order_id, "subMallId": "sub_hq", "settlementAmount": 15000})
        completed_payment.refresh_from_db()
        assert completed_payment.hq_settlement_status == Payment.SettlementStatus.COMPLETED
        assert completed_payment.settlement_status == Payment.SettlementStatus.COMPLETED

    def test_unknown_submall_is_ignored(self, post_event, completed_payment):
        response = post_event("SETTLEMENT_COMPLETED", {
            "orderId": completed_payment.pg_order_id, "subMallId": "sub_elsewhere",
        })
        assert _result(response) == "ignored"

    def test_failure_records_reason(self, post_event, completed_payment):
        response = post_event("SETTLEMENT_FAILED", {
            "orderId": completed_payment.pg_order_id,
            "subMallId": "sub_hq",
            "failReason": "계좌 정보 불일치",
        })

        assert _result(response) == "settlement_failed"
        completed_payment.refresh_from_db()
        assert completed_payment.settlement_status == Payment.SettlementStatus.FAILED
        assert completed_payment.hq_settlement_status == Payment.SettlementStatus.FAILED
        assert completed_payment.settlement_error_message == "계좌 정보 불일치"

    def test_failure_without_submall_is_ignored(self, post_event, completed_payment):
        response = post_event("SETTLEMENT_FAILED", {
            "orderId": completed_payment.pg_order_id,
            "failReason": "계좌 정보 불일치",
        })

        assert _result(response) == "ignored"
        completed_payment.refresh_from_db()
        assert completed_payment.settlement_status != Payment.SettlementStatus.FAILED
        assert completed_payment.settlement_error_message == ""


class TestMatchSettlementSide:
    """Test match_settlement_side when sub-merchant ids collide."""

    def _payment(self, **kwargs):
        defaults = dict(
            branch_submall_id="sub_same",
            hq_submall_id="sub_same",
            branch_settlement_amount=9000,
            hq_settlement_amount=1000,
        )
        defaults.update(kwargs)
        return Payment(**defaults)

    def test_distinct_ids(self):
        payment = self._payment(branch_submall_id="sub_b", hq_submall_id="sub_h")
        assert match_settlement_side(payment, "sub_b") == "branch"
        assert match_settlement_side(payment, "sub_h") == "hq"
        assert match_settlement_side(payment, "sub_x") is None
        assert match_settlement_side(payment, None) is None

    def test_amount_decides(self):
        assert match_settlement_side(self._payment(), "sub_same", 1000) == "hq"
        assert match_settlement_side(self._payment(), "sub_same", 9000) == "branch"

    def test_first_open_side_when_amount_unknown(self):
        payment = self._payment(branch_settlement_status=Payment.SettlementStatus.COMPLETED)
        assert match_settlement_side(payment, "sub_same") == "hq"
        assert match_settlement_side(self._payment(), "sub_same") == "branch"

from datetime import timedelta
from typing import Any, Dict, Optional
import uuid

from django.utils import timezone

from ..registry import register
from ..base import PaymentAdapter, GatewayError


@register("payments.fake")
class FakePaymentAdapter(PaymentAdapter):
    """
    Offline stand-in for the Toss adapter, used in development and tests.
    Set ``fail_with`` in the adapter config to make every call fail with that message.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config or {})
        self.fail_with = self.config.get("fail_with")

    def _maybe_fail(self):
        if self.fail_with:
            raise GatewayError(self.fail_with, status_code=400, code="FAKE_FAILURE")

    def confirm(self, *, payment_key: str, order_id: str, amount: int) -> Dict[str, Any]:
        self._maybe_fail()
        return {
            "paymentKey": payment_key,
            "orderId": order_id,
            "status": "DONE",
            "method": "카드",
            "totalAmount": amount,
            "approvedAt": timezone.now().isoformat(),
            "card": {
                "issuerCode": "11",
                "number": "5365********1234",
                "installmentPlanMonths": 0,
            },
        }

    def issue_virtual_account(
        self,
        *,
        order_id: str,
        amount: int,
        order_name: str,
        customer_name: str,
        bank_code: str,
        customer_email: Optional[str] = None,
        customer_phone: Optional[str] = None,
        valid_hours: int = 168,
    ) -> Dict[str, Any]:
        self._maybe_fail()
        return {
            "paymentKey": f"fake_{uuid.uuid4().hex}",
            "orderId": order_id,
            "orderName": order_name,
            "status": "WAITING_FOR_DEPOSIT",
            "totalAmount": amount,
            "virtualAccount": {
                "accountNumber": f"X{uuid.uuid4().int % 10 ** 13:013d}",
                "bankCode": bank_code,
                "customerName": customer_name,
                "dueDate": (timezone.now() + timedelta(hours=valid_hours)).isoformat(),
            },
        }

    def cancel(self, *, payment_key: str, cancel_reason: str,
               cancel_amount: Optional[int] = None) -> Dict[str, Any]:
        self._maybe_fail()
        return {
            "paymentKey": payment_key,
            "status": "PARTIAL_CANCELED" if cancel_amount is not None else "CANCELED",
            "cancels": [{
                "cancelAmount": cancel_amount,
                "cancelReason": cancel_reason,
                "canceledAt": timezone.now().isoformat(),
            }],
        }

import base64
import logging
from typing import Any, Dict, Optional

import requests

from ..registry import register
from ..base import PaymentAdapter, GatewayError, GatewayNotConfigured

logger = logging.getLogger(__name__)

TOSS_API_BASE = "https://api.tosspayments.com/v1"


@register("payments.toss")
class TossPaymentsAdapter(PaymentAdapter):

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config or {})
        self.secret_key = self.config.get("secret_key")
        self.webhook_secret = self.config.get("webhook_secret")
        self.base = self.config.get("base_url", TOSS_API_BASE).rstrip("/")
        self.timeout = self.config.get("timeout", 10)

    def _require_key(self):
        if not self.secret_key:
            raise GatewayNotConfigured("결제 설정이 완료되지 않았습니다.")

    def _headers(self, idempotency_key: Optional[str] = None) -> Dict[str, str]:
        # Basic auth with the secret key as username and an empty password.
        token = base64.b64encode(f"{self.secret_key}:".encode("utf-8")).decode("ascii")
        headers = {
            "Authorization": f"Basic {token}",
            "Content-Type": "application/json",
        }
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key
        return headers

    def _request(self, method: str, path: str, *, body: Optional[Dict[str, Any]] = None,
                 idempotency_key: Optional[str] = None) -> Dict[str, Any]:
        self._require_key()
        url = f"{self.base}{path}"
        try:
            r = requests.request(
                method, url, json=body, headers=self._headers(idempotency_key), timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.exception("Toss request %s %s failed", method, path)
            raise GatewayError("결제 서버와 통신할 수 없습니다.", status_code=502, code="NETWORK_ERROR") from exc

        try:
            data = r.json()
        except ValueError:
            data = {}

        if not r.ok:
            logger.warning("Toss %s %s returned %s: %s", method, path, r.status_code, data)
            raise GatewayError(
                data.get("message") or "결제 요청이 거절되었습니다.",
                status_code=r.status_code,
                code=data.get("code"),
                payload=data,
            )
        return data

    def confirm(self, *, payment_key: str, order_id: str, amount: int) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/payments/confirm",
            body={"paymentKey": payment_key, "orderId": order_id, "amount": amount},
            idempotency_key=f"confirm-{order_id}",
        )

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
        body = {
            "amount": amount,
            "orderId": order_id,
            "orderName": order_name,
            "customerName": customer_name,
            "bank": bank_code,
            "validHours": valid_hours,
        }
        if customer_email:
            body["customerEmail"] = customer_email
        if customer_phone:
            body["customerMobilePhone"] = customer_phone
        return self._request("POST", "/virtual-accounts", body=body)

    def cancel(self, *, payment_key: str, cancel_reason: str,
               cancel_amount: Optional[int] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"cancelReason": cancel_reason}
        if cancel_amount is not None:
            body["cancelAmount"] = cancel_amount
        return self._request("POST", f"/payments/{payment_key}/cancel", body=body)

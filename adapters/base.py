from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from django.utils.crypto import constant_time_compare


class GatewayError(Exception):
    """Raised by adapters when a third-party API rejects a call or cannot be reached."""

    def __init__(self, message: str, status_code: int = 400, code: Optional[str] = None,
                 payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.payload = payload or {}


class GatewayNotConfigured(GatewayError):
    def __init__(self, message: str):
        super().__init__(message, status_code=500, code="NOT_CONFIGURED")


class AdapterBase:
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}


class PaymentAdapter(AdapterBase, ABC):
    """
    Payment gateway contract. Amounts are integral KRW.
    Every method returns the gateway's JSON payload as a dict.
    """

    @abstractmethod
    def confirm(self, *, payment_key: str, order_id: str, amount: int) -> Dict[str, Any]:
        ...

    @abstractmethod
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
        ...

    @abstractmethod
    def cancel(self, *, payment_key: str, cancel_reason: str,
               cancel_amount: Optional[int] = None) -> Dict[str, Any]:
        ...

    def verify_webhook_secret(self, secret: Optional[str]) -> bool:
        expected = self.config.get("webhook_secret")
        if not expected or not secret:
            return False
        return constant_time_compare(str(secret), str(expected))


class MapsAdapter(AdapterBase, ABC):

    @abstractmethod
    def geocode(self, *, address: str) -> Optional[Dict[str, Any]]:
        """Return {"lat", "lng", "address"} for the best match, or None."""

    def static_map_url(self, *, lat: float, lng: float, zoom: int = 16,
                       width: int = 600, height: int = 400) -> Optional[str]:
        return None

import logging
import re
import time
from typing import Any, Callable, Dict, Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.crypto import get_random_string
from django.utils.dateparse import parse_datetime

from adapters import get_payment_adapter
from adapters.base import GatewayError, GatewayNotConfigured
from adapters.payments.banks import BANK_NAMES, resolve_bank_code
from booking.models import Reservation
from booking import services as booking_services
from .models import Payment, InvalidTransition
from .split import split_amounts

logger = logging.getLogger(__name__)

SETTLEMENT_NOTICE = "결제가 완료되었습니다. 정산은 T+1일에 각 계좌로 입금됩니다."
DEPOSIT_EXPIRED_MESSAGE = "입금 기한이 만료되었습니다."
DEFAULT_REFUND_REASON = "고객 요청 환불"
VIRTUAL_ACCOUNT_VALID_HOURS = 168

Status = Payment.Status
Settlement = Payment.SettlementStatus


class PaymentError(Exception):
    """A payment operation failed; ``status_code`` is the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int = 400, **extra):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.extra = extra


class PaymentNotFound(PaymentError):
    def __init__(self, message: str = "결제 정보를 찾을 수 없습니다."):
        super().__init__(message, status_code=404)


def _gateway():
    return get_payment_adapter(settings.PAYMENT_GATEWAY)


def generate_order_id() -> str:
    millis = int(time.time() * 1000)
    return f"ORDER_{millis}_{get_random_string(9, allowed_chars='abcdefghijklmnopqrstuvwxyz0123456789')}"


def build_order_name(reservation: Reservation) -> str:
    vehicle = reservation.vehicle
    label = vehicle.display_name if vehicle else ""
    period = f"({reservation.start_date} ~ {reservation.end_date})"
    if label:
        return f"{label} 렌트 {period}"
    return f"차량 렌트 {period}"


def _digits(phone: Optional[str]) -> str:
    return re.sub(r"\D", "", phone or "")


def _parse_dt(value):
    if not value:
        return None
    parsed = parse_datetime(str(value))
    if parsed is not None and timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def _to_int(value) -> Optional[int]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def split_info(payment: Payment, message: Optional[str] = None) -> Dict[str, Any]:
    info = {
        "branchSubMallId": payment.branch_submall_id,
        "branchAmount": payment.branch_settlement_amount,
        "branchRatio": payment.branch_ratio,
        "hqSubMallId": payment.hq_submall_id,
        "hqAmount": payment.hq_settlement_amount,
        "hqRatio": payment.hq_fee_rate,
    }
    if message:
        info["message"] = message
    return info


def virtual_account_info(payment: Payment) -> Dict[str, Any]:
    return {
        "payment_id": str(payment.pk),
        "orderId": payment.pg_order_id,
        "accountNumber": payment.virtual_account_number,
        "bankCode": payment.virtual_account_bank,
        "bank": BANK_NAMES.get(payment.virtual_account_bank, payment.virtual_account_bank),
        "customerName": payment.virtual_account_holder,
        "dueDate": payment.virtual_account_due_date,
        "amount": payment.amount,
        "status": payment.status,
    }


def _get_payment(payment_id, *, lock: bool = False) -> Payment:
    qs = Payment.objects.select_related("reservation", "reservation__vehicle")
    if lock:
        qs = qs.select_for_update()
    try:
        payment = qs.filter(pk=payment_id).first()
    except (DjangoValidationError, ValueError):
        payment = None
    if payment is None:
        raise PaymentNotFound()
    return payment


def _get_reservation(reservation_id) -> Optional[Reservation]:
    try:
        return (
            Reservation.objects.select_related("branch", "vehicle")
            .filter(pk=reservation_id)
            .first()
        )
    except (DjangoValidationError, ValueError):
        return None


def _normalize_method(payment_method: Optional[str]) -> str:
    method = (payment_method or "card").replace("-", "_").lower()
    if method == "card":
        return Payment.Method.CARD
    if method in ("virtualaccount", "virtual_account"):
        return Payment.Method.VIRTUAL_ACCOUNT
    raise PaymentError("지원하지 않는 결제 수단입니다.")


# --- Request -----------------------------------------------------------------

def request_payment(reservation_id, payment_method: Optional[str] = "card", bank: Optional[str] = None) -> Dict[str, Any]:
    """
    Create a Payment row for a reservation and return what the client needs
    to open the gateway checkout.
    """
    if not reservation_id:
        raise PaymentError("예약 ID가 필요합니다.")
    method = _normalize_method(payment_method)

    bank_code = None
    if method == Payment.Method.VIRTUAL_ACCOUNT:
        if not bank:
            raise PaymentError("가상계좌 발급 시 은행을 선택해주세요.")
        bank_code = resolve_bank_code(bank)
        if bank_code is None:
            raise PaymentError("지원하지 않는 은행입니다.")

    reservation = _get_reservation(reservation_id)
    if reservation is None:
        raise PaymentError("예약을 찾을 수 없습니다.", status_code=404)
    if reservation.payment_status == Reservation.PaymentStatus.PAID:
        raise PaymentError("이미 결제가 완료된 예약입니다.")
    if reservation.status == Reservation.Status.CANCELLED:
        raise PaymentError("취소된 예약은 결제할 수 없습니다.")

    branch = reservation.branch
    cfg = getattr(settings, "SETTLEMENT", {})
    branch_submall_id = branch.submall_id or cfg.get("DEFAULT_BRANCH_SUBMALL_ID")
    hq_submall_id = branch.hq_submall_id or cfg.get("HQ_SUBMALL_ID")
    if not branch_submall_id or not hq_submall_id:
        logger.error("Settlement ids missing for branch=%s", branch.pk)
        raise PaymentError("정산 설정이 완료되지 않았습니다. 관리자에게 문의하세요.", status_code=500)

    try:
        split = split_amounts(reservation.total_price)
    except ValueError:
        raise PaymentError("결제 금액이 올바르지 않습니다.")

    payment = Payment.objects.create(
        reservation=reservation,
        branch=branch,
        amount=reservation.total_price,
        payment_method=method,
        pg_provider=settings.PAYMENT_GATEWAY,
        pg_order_id=generate_order_id(),
        status=Status.AWAITING_DEPOSIT if method == Payment.Method.VIRTUAL_ACCOUNT else Status.PENDING,
        hq_fee_rate=split.hq_ratio,
        branch_submall_id=branch_submall_id,
        hq_submall_id=hq_submall_id,
        branch_settlement_amount=split.branch_amount,
        hq_settlement_amount=split.hq_amount,
        settlement_status=Settlement.PENDING,
    )
    logger.info("Payment %s requested for reservation=%s amount=%s method=%s",
                payment.pg_order_id, reservation.pk, payment.amount, method)

    base = settings.PUBLIC_BASE_URL
    data = {
        "payment_id": str(payment.pk),
        "payment_method": method,
        "orderId": payment.pg_order_id,
        "amount": payment.amount,
        "orderName": build_order_name(reservation),
        "customerName": reservation.customer_name,
        "customerEmail": reservation.customer_email,
        "customerMobilePhone": _digits(reservation.customer_phone),
        "successUrl": f"{base}/payment/success",
        "failUrl": f"{base}/payment/fail",
        "splitInfo": split_info(payment),
    }
    if method == Payment.Method.VIRTUAL_ACCOUNT:
        data.update({
            "bank": BANK_NAMES.get(bank_code, bank),
            "bankCode": bank_code,
            "virtualAccountUrl": "/api/payments/virtual-account",
        })
    return data


# --- Completion ----------------------------------------------------------------

def _apply_completion(payment: Payment, gateway_payload: Dict[str, Any]) -> bool:
    """Mark a locked payment completed. Returns False when it already was."""
    if payment.status == Status.COMPLETED:
        return False
    payment.set_status(Status.COMPLETED)

    payment.pg_transaction_id = gateway_payload.get("paymentKey") or payment.pg_transaction_id
    payment.paid_at = _parse_dt(gateway_payload.get("approvedAt")) or timezone.now()
    card = gateway_payload.get("card") or {}
    if card:
        payment.card_company = card.get("issuerCode") or card.get("company") or ""
        payment.card_number = card.get("number") or ""
        payment.installment_months = _to_int(card.get("installmentPlanMonths")) or 0
    payment.error_message = ""
    payment.settlement_status = Settlement.PROCESSING
    payment.branch_settlement_status = Settlement.PROCESSING
    payment.hq_settlement_status = Settlement.PROCESSING
    payment.gateway_response = gateway_payload
    payment.save()

    booking_services.mark_reservation_paid(payment.reservation)
    logger.info("Payment %s completed", payment.pg_order_id)
    return True


def _mark_failed(payment: Payment, message: str) -> None:
    with transaction.atomic():
        locked = Payment.objects.select_for_update().get(pk=payment.pk)
        if not locked.can_transition(Status.FAILED):
            logger.warning("Not marking payment %s failed from %s", locked.pg_order_id, locked.status)
            return
        locked.set_status(Status.FAILED)
        locked.error_message = message
        locked.save(update_fields=["status", "error_message", "updated_at"])


def confirm_card_payment(payment_key: Optional[str], order_id: Optional[str], amount) -> Dict[str, Any]:
    if not payment_key or not order_id or amount in (None, ""):
        raise PaymentError("필수 파라미터가 누락되었습니다.")

    payment = (
        Payment.objects.select_related("reservation", "reservation__vehicle")
        .filter(pg_order_id=order_id)
        .first()
    )
    if payment is None:
        raise PaymentNotFound()

    if _to_int(amount) != payment.amount:
        logger.warning("Amount mismatch for %s: got %r, stored %s", order_id, amount, payment.amount)
        raise PaymentError("결제 금액이 일치하지 않습니다.")

    if payment.status == Status.COMPLETED:
        return {"payment": payment, "toss": payment.gateway_response, "already_processed": True}
    if payment.status not in (Status.PENDING, Status.AWAITING_DEPOSIT):
        raise PaymentError("처리할 수 없는 결제 상태입니다.")

    try:
        result = _gateway().confirm(payment_key=payment_key, order_id=order_id, amount=payment.amount)
    except GatewayNotConfigured as exc:
        logger.error("Payment gateway not configured")
        raise PaymentError(exc.message, status_code=500)
    except GatewayError as exc:
        if exc.code == "NETWORK_ERROR":
            raise PaymentError(exc.message, status_code=502)
        message = exc.message or "결제 승인에 실패했습니다."
        _mark_failed(payment, message)
        raise PaymentError(message, code=exc.code)

    # The gateway has taken the money; a local write failure is logged, not undone.
    try:
        with transaction.atomic():
            locked = _get_payment(payment.pk, lock=True)
            _apply_completion(locked, result)
            payment = locked
    except (DatabaseError, InvalidTransition):
        logger.exception("Gateway confirmed %s but the local update failed", order_id)

    return {"payment": payment, "toss": result, "already_processed": False}


# --- Virtual accounts ----------------------------------------------------------

def issue_virtual_account(payment_id, bank: Optional[str]) -> Dict[str, Any]:
    if not payment_id:
        raise PaymentError("결제 ID가 필요합니다.")
    if not bank:
        raise PaymentError("은행을 선택해주세요.")
    bank_code = resolve_bank_code(bank)
    if bank_code is None:
        raise PaymentError("지원하지 않는 은행입니다.")

    payment = _get_payment(payment_id)
    if payment.virtual_account_number:
        return {"payment": payment, "issued": False}
    if payment.status not in (Status.PENDING, Status.AWAITING_DEPOSIT):
        raise PaymentError("가상계좌를 발급할 수 없는 결제 상태입니다.")

    reservation = payment.reservation
    try:
        result = _gateway().issue_virtual_account(
            order_id=payment.pg_order_id,
            amount=payment.amount,
            order_name=build_order_name(reservation),
            customer_name=reservation.customer_name or "고객",
            customer_email=reservation.customer_email or None,
            customer_phone=_digits(reservation.customer_phone) or None,
            bank_code=bank_code,
            valid_hours=VIRTUAL_ACCOUNT_VALID_HOURS,
        )
    except GatewayNotConfigured as exc:
        raise PaymentError(exc.message, status_code=500)
    except GatewayError as exc:
        if exc.code != "NETWORK_ERROR":
            _mark_failed(payment, exc.message)
        raise PaymentError(exc.message or "가상계좌 발급에 실패했습니다.", code=exc.code)

    account = result.get("virtualAccount") or {}
    with transaction.atomic():
        locked = _get_payment(payment.pk, lock=True)
        locked.set_status(Status.AWAITING_DEPOSIT)
        locked.payment_method = Payment.Method.VIRTUAL_ACCOUNT
        locked.pg_transaction_id = result.get("paymentKey") or locked.pg_transaction_id
        locked.virtual_account_number = account.get("accountNumber") or ""
        locked.virtual_account_bank = account.get("bankCode") or account.get("bank") or bank_code
        locked.virtual_account_holder = account.get("customerName") or reservation.customer_name
        locked.virtual_account_due_date = _parse_dt(account.get("dueDate"))
        locked.gateway_response = result
        locked.save()
        booking_services.mark_reservation_awaiting(locked.reservation)

    logger.info("Virtual account issued for %s (%s)", locked.pg_order_id, locked.virtual_account_bank)
    return {"payment": locked, "issued": True}


def get_virtual_account(payment_id) -> Dict[str, Any]:
    if not payment_id:
        raise PaymentError("결제 ID가 필요합니다.")
    payment = _get_payment(payment_id)
    if not payment.virtual_account_number:
        raise PaymentError("가상계좌가 발급되지 않았습니다.", status_code=404)
    return virtual_account_info(payment)


# --- Refunds -------------------------------------------------------------------

def refund_payment(payment_id, refund_amount=None, refund_reason: Optional[str] = None) -> Dict[str, Any]:
    if not payment_id:
        raise PaymentError("결제 ID가 필요합니다.")
    payment = _get_payment(payment_id)
    if payment.status != Status.COMPLETED:
        raise PaymentError("완료된 결제만 환불 가능합니다.")

    if refund_amount in (None, ""):
        requested = payment.amount
    else:
        requested = _to_int(refund_amount)
        if requested is None or requested <= 0:
            raise PaymentError("환불 금액이 올바르지 않습니다.")
    is_full = requested >= payment.amount
    amount = min(requested, payment.amount)

    if not payment.pg_transaction_id:
        raise PaymentError("결제 승인 정보가 없어 환불할 수 없습니다.")

    reason = refund_reason or DEFAULT_REFUND_REASON
    try:
        result = _gateway().cancel(
            payment_key=payment.pg_transaction_id,
            cancel_reason=reason,
            cancel_amount=None if is_full else amount,
        )
    except GatewayNotConfigured as exc:
        raise PaymentError(exc.message, status_code=500)
    except GatewayError as exc:
        logger.warning("Refund of %s rejected: %s", payment.pg_order_id, exc.message)
        raise PaymentError(exc.message or "환불 처리에 실패했습니다.", code=exc.code)

    with transaction.atomic():
        locked = _get_payment(payment.pk, lock=True)
        try:
            locked.set_status(Status.REFUNDED if is_full else Status.PARTIAL_REFUND)
        except InvalidTransition:
            logger.error("Gateway refunded %s but it is now %s", locked.pg_order_id, locked.status)
            raise PaymentError("이미 처리된 결제입니다.", status_code=409)
        now = timezone.now()
        locked.refund_amount = amount
        locked.refund_reason = reason
        locked.refunded_at = now
        if is_full:
            locked.cancelled_at = now
        locked.gateway_response = result
        locked.save()
        if is_full:
            booking_services.cancel_reservation_for_refund(locked.reservation, refund_reason)

    logger.info("Refunded %s of %s (%s)", amount, locked.pg_order_id, "full" if is_full else "partial")
    return {"payment": locked, "refund_amount": amount, "is_full": is_full}


# --- Webhook -------------------------------------------------------------------

def _lock_by_order_id(order_id: Optional[str]) -> Optional[Payment]:
    if not order_id:
        return None
    return (
        Payment.objects.select_for_update()
        .select_related("reservation", "reservation__vehicle")
        .filter(pg_order_id=order_id)
        .first()
    )


def _on_done(payment: Payment, data: Dict[str, Any]) -> str:
    if payment.status == Status.COMPLETED:
        return "already_processed"
    if not payment.can_transition(Status.COMPLETED):
        logger.warning("Ignoring DONE for %s in status %s", payment.pg_order_id, payment.status)
        return "ignored"
    _apply_completion(payment, data)
    return "completed"


def _on_canceled(payment: Payment, data: Dict[str, Any]) -> str:
    if payment.status in (Status.CANCELLED, Status.REFUNDED):
        return "already_processed"
    now = timezone.now()
    if payment.status in (Status.PENDING, Status.AWAITING_DEPOSIT):
        payment.set_status(Status.CANCELLED)
        payment.cancelled_at = now
    elif payment.can_transition(Status.REFUNDED):
        payment.set_status(Status.REFUNDED)
        payment.cancelled_at = now
        payment.refunded_at = now
        payment.refund_amount = payment.amount
    else:
        logger.warning("Ignoring CANCELED for %s in status %s", payment.pg_order_id, payment.status)
        return "ignored"
    payment.save()
    booking_services.cancel_reservation_for_refund(payment.reservation)
    return "cancelled"


def _on_expired(payment: Payment, data: Dict[str, Any]) -> str:
    if payment.status == Status.FAILED and payment.error_message == DEPOSIT_EXPIRED_MESSAGE:
        return "already_processed"
    if not payment.can_transition(Status.FAILED) or payment.status == Status.FAILED:
        logger.warning("Ignoring EXPIRED for %s in status %s", payment.pg_order_id, payment.status)
        return "ignored"
    payment.set_status(Status.FAILED)
    payment.error_message = DEPOSIT_EXPIRED_MESSAGE
    payment.save(update_fields=["status", "error_message", "updated_at"])
    booking_services.mark_reservation_expired(payment.reservation)
    return "expired"


STATUS_HANDLERS: Dict[str, Callable[[Payment, Dict[str, Any]], str]] = {
    "DONE": _on_done,
    "CANCELED": _on_canceled,
    "EXPIRED": _on_expired,
}


def match_settlement_side(payment: Payment, sub_mall_id: Optional[str], amount: Optional[int] = None,
                          target: str = Settlement.COMPLETED) -> Optional[str]:
    """
    Decide whether a settlement event is about the "branch" or "hq" share.
    When both sides carry the same sub-merchant id, the settled amount picks the
    side; failing that, the first side not yet in ``target`` (branch first).
    """
    if not sub_mall_id:
        return None
    sides = [side for side in ("branch", "hq") if getattr(payment, f"{side}_submall_id") == sub_mall_id]
    if len(sides) <= 1:
        return sides[0] if sides else None
    if amount is not None:
        by_amount = [s for s in sides if getattr(payment, f"{s}_settlement_amount") == amount]
        if len(by_amount) == 1:
            return by_amount[0]
    open_sides = [s for s in sides if getattr(payment, f"{s}_settlement_status") != target]
    return open_sides[0] if open_sides else sides[0]


def _on_settlement_completed(data: Dict[str, Any]) -> str:
    payment = _lock_by_order_id(data.get("orderId"))
    if payment is None:
        logger.warning("Settlement event for unknown order %s", data.get("orderId"))
        return "payment_not_found"
    amount = _to_int(data.get("settlementAmount"))
    side = match_settlement_side(payment, data.get("subMallId"), amount)
    if side is None:
        logger.warning("Settlement sub-mall %s does not match %s", data.get("subMallId"), payment.pg_order_id)
        return "ignored"

    setattr(payment, f"{side}_settlement_status", Settlement.COMPLETED)
    setattr(payment, f"{side}_settled_amount", amount if amount is not None else getattr(payment, f"{side}_settlement_amount"))
    setattr(payment, f"{side}_settled_at", timezone.now())
    if payment.branch_settlement_status == Settlement.COMPLETED and payment.hq_settlement_status == Settlement.COMPLETED:
        payment.settlement_status = Settlement.COMPLETED
    payment.save()
    logger.info("Settlement of %s share completed for %s", side, payment.pg_order_id)
    return "settled"


def _on_settlement_failed(data: Dict[str, Any]) -> str:
    payment = _lock_by_order_id(data.get("orderId"))
    if payment is None:
        logger.warning("Settlement failure for unknown order %s", data.get("orderId"))
        return "payment_not_found"
    if not data.get("subMallId"):
        logger.warning("Settlement failure for %s carries no sub-mall id", payment.pg_order_id)
        return "ignored"
    side = match_settlement_side(payment, data.get("subMallId"), target=Settlement.FAILED)
    if side is not None:
        setattr(payment, f"{side}_settlement_status", Settlement.FAILED)
    payment.settlement_status = Settlement.FAILED
    payment.settlement_error_message = data.get("failReason") or ""
    payment.save()
    logger.warning("Settlement failed for %s (%s): %s", payment.pg_order_id, side, payment.settlement_error_message)
    return "settlement_failed"


def _on_status_changed(data: Dict[str, Any]) -> str:
    payment = _lock_by_order_id(data.get("orderId"))
    if payment is None:
        logger.warning("Status change for unknown order %s", data.get("orderId"))
        return "payment_not_found"
    handler = STATUS_HANDLERS.get(data.get("status"))
    if handler is None:
        logger.info("Ignoring payment status %s for %s", data.get("status"), payment.pg_order_id)
        return "ignored"
    return handler(payment, data)


EVENT_HANDLERS: Dict[str, Callable[[Dict[str, Any]], str]] = {
    "PAYMENT_STATUS_CHANGED": _on_status_changed,
    "SETTLEMENT_COMPLETED": _on_settlement_completed,
    "SETTLEMENT_FAILED": _on_settlement_failed,
}


def handle_webhook(payload: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        payload = {}
    if not _gateway().verify_webhook_secret(payload.get("secret")):
        logger.warning("Webhook rejected: secret mismatch or not configured")
        raise PaymentError("Unauthorized", status_code=401)

    event_type = payload.get("eventType")
    data = payload.get("data")
    if not isinstance(data, dict):
        data = {}
    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        logger.info("Ignoring webhook event %s", event_type)
        return {"event": event_type, "result": "ignored"}

    with transaction.atomic():
        result = handler(data)
    logger.info("Webhook %s for %s: %s", event_type, data.get("orderId"), result)
    return {"event": event_type, "result": result}

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from django.db import transaction
from django.utils import timezone

from inventory.models import Vehicle
from .models import Reservation

logger = logging.getLogger(__name__)

DEFAULT_REFUND_CANCEL_REASON = "결제 환불"
DEPOSIT_EXPIRED_CANCEL_REASON = "입금 기한 만료"


class ReservationError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


S = Reservation.Status

# action -> (statuses it may be applied from, resulting status)
ACTION_RULES = {
    "approve": ({S.PENDING}, S.APPROVED),
    "confirm": ({S.PENDING, S.APPROVED}, S.CONFIRMED),
    "start": ({S.APPROVED, S.CONFIRMED}, S.IN_USE),
    "complete": ({S.IN_USE}, S.COMPLETED),
    "cancel": ({S.PENDING, S.APPROVED, S.CONFIRMED, S.IN_USE}, S.CANCELLED),
}


def _rental_days(start_date: date, end_date: date) -> int:
    return max((end_date - start_date).days, 1)


def find_overlapping(vehicle: Vehicle, start_date: date, end_date: date, exclude: Optional[Reservation] = None):
    qs = Reservation.objects.filter(
        vehicle=vehicle,
        start_date__lte=end_date,
        end_date__gte=start_date,
    ).exclude(status=S.CANCELLED)
    if exclude is not None:
        qs = qs.exclude(pk=exclude.pk)
    return qs


@transaction.atomic
def create_reservation(*, branch, vehicle: Vehicle, start_date: date, end_date: date, **fields: Any) -> Reservation:
    """
    Book ``vehicle`` for the inclusive date range.

    The vehicle row stays locked until commit, so two bookings for the same
    vehicle are checked for overlap one after the other.
    """
    if end_date < start_date:
        raise ReservationError("반납일은 대여일 이후여야 합니다.")

    locked = (
        Vehicle.objects.select_for_update()
        .filter(pk=vehicle.pk, branch=branch, is_active=True)
        .first()
    )
    if locked is None:
        raise ReservationError("차량을 찾을 수 없습니다.", status_code=404)

    if find_overlapping(locked, start_date, end_date).exists():
        logger.info("Overlap for vehicle=%s %s~%s", locked.pk, start_date, end_date)
        raise ReservationError("해당 기간에 이미 예약이 있습니다.")

    base_price = fields.pop("base_price", None)
    if not base_price:
        base_price = locked.price_per_day * _rental_days(start_date, end_date)

    reservation = Reservation(
        branch=branch,
        vehicle=locked,
        start_date=start_date,
        end_date=end_date,
        base_price=base_price,
        status=S.PENDING,
        payment_status=Reservation.PaymentStatus.UNPAID,
        **fields,
    )
    reservation.recalc_total(save=False)
    reservation.save()
    logger.info("Reservation %s created for vehicle=%s total=%s",
                reservation.reservation_number, locked.pk, reservation.total_price)
    return reservation


def release_vehicle(vehicle: Vehicle, exclude: Optional[Reservation] = None) -> bool:
    """Mark the vehicle available unless another reservation still has it in use."""
    in_use = Reservation.objects.filter(vehicle_id=vehicle.pk, status=S.IN_USE)
    if exclude is not None:
        in_use = in_use.exclude(pk=exclude.pk)
    if in_use.exists():
        return False
    Vehicle.objects.filter(pk=vehicle.pk).update(status=Vehicle.Status.AVAILABLE, updated_at=timezone.now())
    vehicle.status = Vehicle.Status.AVAILABLE
    return True


@transaction.atomic
def apply_reservation_action(reservation: Reservation, action: str, cancel_reason: Optional[str] = None) -> Reservation:
    rule = ACTION_RULES.get((action or "").lower())
    if rule is None:
        raise ReservationError("잘못된 액션입니다.")
    allowed_from, target = rule

    reservation = Reservation.objects.select_for_update().get(pk=reservation.pk)
    if reservation.status not in allowed_from:
        raise ReservationError("현재 상태에서는 처리할 수 없는 요청입니다.")

    vehicle = Vehicle.objects.select_for_update().get(pk=reservation.vehicle_id)
    action = action.lower()

    if action == "start":
        busy = Reservation.objects.filter(vehicle=vehicle, status=S.IN_USE).exclude(pk=reservation.pk)
        if busy.exists():
            raise ReservationError("이미 운행 중인 차량입니다.")
        vehicle.status = Vehicle.Status.RENTED
        vehicle.save(update_fields=["status", "updated_at"])

    reservation.status = target
    if action == "confirm":
        reservation.payment_status = Reservation.PaymentStatus.PAID
    if action == "cancel":
        reservation.cancelled_at = timezone.now()
        reservation.cancel_reason = cancel_reason or ""
    reservation.save()

    if action in ("complete", "cancel"):
        release_vehicle(vehicle, exclude=reservation)

    logger.info("Reservation %s -> %s (%s)", reservation.reservation_number, target, action)
    return reservation


# --- Payment projections -------------------------------------------------

def mark_reservation_paid(reservation: Reservation) -> Reservation:
    fields = ["payment_status", "updated_at"]
    reservation.payment_status = Reservation.PaymentStatus.PAID
    if reservation.status in (S.PENDING, S.APPROVED):
        reservation.status = S.CONFIRMED
        fields.append("status")
    reservation.save(update_fields=fields)
    return reservation


def mark_reservation_awaiting(reservation: Reservation) -> Reservation:
    if reservation.payment_status != Reservation.PaymentStatus.PAID:
        reservation.payment_status = Reservation.PaymentStatus.AWAITING
        reservation.save(update_fields=["payment_status", "updated_at"])
    return reservation


def cancel_reservation_for_refund(reservation: Reservation, reason: Optional[str] = None) -> Reservation:
    reservation.status = S.CANCELLED
    reservation.payment_status = Reservation.PaymentStatus.REFUNDED
    reservation.cancelled_at = reservation.cancelled_at or timezone.now()
    reservation.cancel_reason = reason or reservation.cancel_reason or DEFAULT_REFUND_CANCEL_REASON
    reservation.save(update_fields=["status", "payment_status", "cancelled_at", "cancel_reason", "updated_at"])
    release_vehicle(reservation.vehicle, exclude=reservation)
    return reservation


def mark_reservation_expired(reservation: Reservation) -> Reservation:
    """Deposit window lapsed. The vehicle is left as it is."""
    reservation.status = S.CANCELLED
    reservation.payment_status = Reservation.PaymentStatus.EXPIRED
    reservation.cancelled_at = reservation.cancelled_at or timezone.now()
    reservation.cancel_reason = reservation.cancel_reason or DEPOSIT_EXPIRED_CANCEL_REASON
    reservation.save(update_fields=["status", "payment_status", "cancelled_at", "cancel_reason", "updated_at"])
    return reservation


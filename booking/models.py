import uuid
from datetime import time

from django.db import models
from django.utils import timezone
from django.utils.crypto import get_random_string


def generate_reservation_number() -> str:
    stamp = timezone.localdate().strftime("%y%m%d")
    return f"R{stamp}{get_random_string(6, allowed_chars='ABCDEFGHJKLMNPQRSTUVWXYZ23456789')}"


class Reservation(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "접수"
        APPROVED = "approved", "승인"
        CONFIRMED = "confirmed", "확정"
        IN_USE = "in_use", "이용 중"
        COMPLETED = "completed", "완료"
        CANCELLED = "cancelled", "취소"

    class PaymentStatus(models.TextChoices):
        UNPAID = "unpaid", "미결제"
        AWAITING = "awaiting", "입금 대기"
        PAID = "paid", "결제 완료"
        REFUNDED = "refunded", "환불"
        EXPIRED = "expired", "입금 기한 만료"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reservation_number = models.CharField(max_length=20, unique=True, default=generate_reservation_number)
    branch = models.ForeignKey("branches.Branch", on_delete=models.PROTECT, related_name="reservations")
    vehicle = models.ForeignKey("inventory.Vehicle", on_delete=models.PROTECT, related_name="reservations")

    customer_name = models.CharField(max_length=60)
    customer_phone = models.CharField(max_length=30)
    customer_email = models.EmailField(blank=True)
    customer_birth = models.DateField(null=True, blank=True)
    license_number = models.CharField(max_length=30, blank=True)
    license_type = models.CharField(max_length=20, blank=True)

    start_date = models.DateField()
    end_date = models.DateField()
    start_time = models.TimeField(default=time(10, 0))
    end_time = models.TimeField(default=time(10, 0))
    pickup_location = models.CharField(max_length=255, blank=True)
    return_location = models.CharField(max_length=255, blank=True)

    base_price = models.PositiveIntegerField(default=0)
    discount_amount = models.PositiveIntegerField(default=0)
    insurance_fee = models.PositiveIntegerField(default=0)
    additional_fee = models.PositiveIntegerField(default=0)
    total_price = models.PositiveIntegerField(default=0)
    options = models.JSONField(default=dict, blank=True)

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    payment_status = models.CharField(max_length=16, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID)

    customer_memo = models.TextField(blank=True)
    admin_memo = models.TextField(blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["vehicle", "start_date", "end_date"]),
            models.Index(fields=["branch", "status", "created_at"]),
        ]

    def __str__(self):
        return f"Reservation {self.reservation_number} ({self.customer_name})"

    def recalc_total(self, save=True) -> int:
        """
        Recalculate the total from the price breakdown. Never negative.
        """
        total = self.base_price + self.insurance_fee + self.additional_fee - self.discount_amount
        self.total_price = max(total, 0)
        if save:
            self.save(update_fields=["total_price", "updated_at"])
        return self.total_price

    @property
    def rental_days(self) -> int:
        return max((self.end_date - self.start_date).days, 1)

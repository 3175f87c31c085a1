import uuid

from django.db import models


class InvalidTransition(Exception):
    pass


class Payment(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "결제 대기"
        AWAITING_DEPOSIT = "awaiting_deposit", "입금 대기"
        COMPLETED = "completed", "결제 완료"
        FAILED = "failed", "실패"
        CANCELLED = "cancelled", "취소"
        REFUNDED = "refunded", "환불"
        PARTIAL_REFUND = "partial_refund", "부분 환불"

    class Method(models.TextChoices):
        CARD = "card", "카드"
        VIRTUAL_ACCOUNT = "virtual_account", "가상계좌"

    class SettlementStatus(models.TextChoices):
        PENDING = "pending", "정산 대기"
        PROCESSING = "processing", "정산 중"
        COMPLETED = "completed", "정산 완료"
        FAILED = "failed", "정산 실패"

    # Status writes go through set_status(); anything not listed here is refused.
    ALLOWED_TRANSITIONS = {
        Status.PENDING: {Status.AWAITING_DEPOSIT, Status.COMPLETED, Status.FAILED, Status.CANCELLED},
        Status.AWAITING_DEPOSIT: {Status.COMPLETED, Status.FAILED, Status.CANCELLED},
        Status.COMPLETED: {Status.REFUNDED, Status.PARTIAL_REFUND},
        Status.PARTIAL_REFUND: {Status.REFUNDED},
        Status.FAILED: set(),
        Status.CANCELLED: set(),
        Status.REFUNDED: set(),
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reservation = models.ForeignKey("booking.Reservation", on_delete=models.PROTECT, related_name="payments")
    branch = models.ForeignKey("branches.Branch", on_delete=models.PROTECT, related_name="payments")
    amount = models.PositiveIntegerField()
    payment_method = models.CharField(max_length=20, choices=Method.choices, default=Method.CARD)
    pg_provider = models.CharField(max_length=30, default="toss")
    pg_order_id = models.CharField(max_length=64, unique=True)
    pg_transaction_id = models.CharField(max_length=200, blank=True, help_text="Gateway payment key")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    error_message = models.TextField(blank=True)

    card_company = models.CharField(max_length=40, blank=True)
    card_number = models.CharField(max_length=40, blank=True)
    installment_months = models.PositiveSmallIntegerField(default=0)

    virtual_account_number = models.CharField(max_length=40, blank=True)
    virtual_account_bank = models.CharField(max_length=30, blank=True)
    virtual_account_holder = models.CharField(max_length=60, blank=True)
    virtual_account_due_date = models.DateTimeField(null=True, blank=True)

    paid_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    refund_amount = models.PositiveIntegerField(null=True, blank=True)
    refund_reason = models.TextField(blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)

    # Split settlement, copied from the branch when the payment is created.
    hq_fee_rate = models.PositiveSmallIntegerField(default=10)
    branch_submall_id = models.CharField(max_length=64, blank=True)
    hq_submall_id = models.CharField(max_length=64, blank=True)
    branch_settlement_amount = models.PositiveIntegerField(default=0)
    hq_settlement_amount = models.PositiveIntegerField(default=0)
    settlement_status = models.CharField(
        max_length=16, choices=SettlementStatus.choices, default=SettlementStatus.PENDING
    )
    branch_settlement_status = models.CharField(
        max_length=16, choices=SettlementStatus.choices, default=SettlementStatus.PENDING
    )
    hq_settlement_status = models.CharField(
        max_length=16, choices=SettlementStatus.choices, default=SettlementStatus.PENDING
    )
    branch_settled_amount = models.PositiveIntegerField(null=True, blank=True)
    hq_settled_amount = models.PositiveIntegerField(null=True, blank=True)
    branch_settled_at = models.DateTimeField(null=True, blank=True)
    hq_settled_at = models.DateTimeField(null=True, blank=True)
    settlement_error_message = models.TextField(blank=True)

    gateway_response = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["reservation", "status", "created_at"]),
            models.Index(fields=["branch", "status", "created_at"]),
            models.Index(fields=["settlement_status"]),
        ]

    def __str__(self):
        return f"{self.pg_provider}:{self.pg_order_id} -> {self.reservation_id} [{self.status}]"

    @property
    def is_terminal(self) -> bool:
        return self.status in {
            self.Status.COMPLETED, self.Status.FAILED, self.Status.CANCELLED,
            self.Status.REFUNDED, self.Status.PARTIAL_REFUND,
        }

    @property
    def branch_ratio(self) -> int:
        return 100 - self.hq_fee_rate

    def can_transition(self, to: str) -> bool:
        if to == self.status:
            return True
        return to in self.ALLOWED_TRANSITIONS.get(self.status, set())

    def set_status(self, to: str):
        if not self.can_transition(to):
            raise InvalidTransition(f"Payment {self.pk}: {self.status} -> {to} is not allowed")
        self.status = to

from rest_framework import serializers

from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    reservation_number = serializers.CharField(source="reservation.reservation_number", read_only=True)
    customer_name = serializers.CharField(source="reservation.customer_name", read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True)

    class Meta:
        model = Payment
        fields = (
            "id",
            "reservation",
            "reservation_number",
            "customer_name",
            "branch",
            "branch_name",
            "amount",
            "payment_method",
            "pg_provider",
            "pg_order_id",
            "pg_transaction_id",
            "status",
            "error_message",
            "card_company",
            "card_number",
            "installment_months",
            "virtual_account_number",
            "virtual_account_bank",
            "virtual_account_holder",
            "virtual_account_due_date",
            "paid_at",
            "cancelled_at",
            "refund_amount",
            "refund_reason",
            "refunded_at",
            "hq_fee_rate",
            "branch_submall_id",
            "hq_submall_id",
            "branch_settlement_amount",
            "hq_settlement_amount",
            "settlement_status",
            "branch_settlement_status",
            "hq_settlement_status",
            "branch_settled_amount",
            "hq_settled_amount",
            "branch_settled_at",
            "hq_settled_at",
            "settlement_error_message",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class PaymentLiteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ("id", "amount", "payment_method", "status", "pg_order_id", "paid_at", "refund_amount", "created_at")
        read_only_fields = fields

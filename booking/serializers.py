from rest_framework import serializers

from branches.models import Branch
from inventory.models import Vehicle
from inventory.serializers import VehicleLiteSerializer
from payments.serializers import PaymentLiteSerializer
from .models import Reservation


class ReservationReadSerializer(serializers.ModelSerializer):
    branch_id = serializers.IntegerField(read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True)
    vehicle = VehicleLiteSerializer(read_only=True)
    payments = PaymentLiteSerializer(many=True, read_only=True)
    rental_days = serializers.IntegerField(read_only=True)

    class Meta:
        model = Reservation
        fields = (
            "id",
            "reservation_number",
            "branch_id",
            "branch_name",
            "vehicle",
            "customer_name",
            "customer_phone",
            "customer_email",
            "customer_birth",
            "license_number",
            "license_type",
            "start_date",
            "end_date",
            "start_time",
            "end_time",
            "rental_days",
            "pickup_location",
            "return_location",
            "base_price",
            "discount_amount",
            "insurance_fee",
            "additional_fee",
            "total_price",
            "options",
            "status",
            "payment_status",
            "customer_memo",
            "admin_memo",
            "cancelled_at",
            "cancel_reason",
            "payments",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class ReservationCreateSerializer(serializers.Serializer):
    """Validates booking input; business rules live in booking.services.create_reservation."""
    branch_id = serializers.PrimaryKeyRelatedField(queryset=Branch.objects.filter(is_active=True), source="branch")
    vehicle_id = serializers.PrimaryKeyRelatedField(queryset=Vehicle.objects.all(), source="vehicle")
    customer_name = serializers.CharField(max_length=60)
    customer_phone = serializers.CharField(max_length=30)
    customer_email = serializers.EmailField(required=False, allow_blank=True)
    customer_birth = serializers.DateField(required=False, allow_null=True)
    license_number = serializers.CharField(max_length=30, required=False, allow_blank=True)
    license_type = serializers.CharField(max_length=20, required=False, allow_blank=True)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    start_time = serializers.TimeField(required=False)
    end_time = serializers.TimeField(required=False)
    pickup_location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    return_location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    base_price = serializers.IntegerField(min_value=0, required=False)
    discount_amount = serializers.IntegerField(min_value=0, required=False)
    insurance_fee = serializers.IntegerField(min_value=0, required=False)
    additional_fee = serializers.IntegerField(min_value=0, required=False)
    options = serializers.JSONField(required=False)
    customer_memo = serializers.CharField(required=False, allow_blank=True)

    def validate_options(self, value):
        if value is not None and not isinstance(value, dict):
            raise serializers.ValidationError("옵션 형식이 올바르지 않습니다.")
        return value or {}

    def validate(self, attrs):
        if attrs["end_date"] < attrs["start_date"]:
            raise serializers.ValidationError({"end_date": "반납일은 대여일 이후여야 합니다."})
        return attrs


class ReservationUpdateSerializer(serializers.ModelSerializer):
    """Field edits by HQ or branch staff. Status moves go through actions instead."""

    class Meta:
        model = Reservation
        fields = (
            "customer_name",
            "customer_phone",
            "customer_email",
            "customer_birth",
            "license_number",
            "license_type",
            "start_time",
            "end_time",
            "pickup_location",
            "return_location",
            "discount_amount",
            "insurance_fee",
            "additional_fee",
            "options",
            "customer_memo",
            "admin_memo",
        )

    def update(self, instance, validated_data):
        instance = super().update(instance, validated_data)
        if {"discount_amount", "insurance_fee", "additional_fee"} & set(validated_data):
            instance.recalc_total()
        return instance

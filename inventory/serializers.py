from django.utils import timezone
from rest_framework import serializers

from booking.models import Reservation
from branches.models import Branch
from .models import Vehicle, VehicleInsurance


class VehicleSerializer(serializers.ModelSerializer):
    branch_id = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.filter(is_active=True),
        source="branch",
    )
    branch_name = serializers.CharField(source="branch.name", read_only=True)
    thumbnail = serializers.ImageField(required=False, allow_null=True, write_only=True)
    thumbnail_url = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Vehicle
        fields = (
            "id",
            "branch_id",
            "branch_name",
            "name",
            "brand",
            "model",
            "year",
            "license_plate",
            "vehicle_type",
            "price_per_day",
            "price_per_hour",
            "deposit",
            "color",
            "seats",
            "fuel_type",
            "transmission",
            "mileage",
            "images",
            "thumbnail",
            "thumbnail_url",
            "description",
            "features",
            "status",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("is_active", "created_at", "updated_at")

    def get_thumbnail_url(self, obj):
        img = getattr(obj, "thumbnail", None)
        if img:
            return getattr(img, "url", None)
        return obj.images[0] if obj.images else None

    def validate_images(self, value):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise serializers.ValidationError("이미지는 URL 목록이어야 합니다.")
        return value

    def validate_features(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("옵션은 목록이어야 합니다.")
        return value

    def validate_status(self, value):
        # "rented" follows the vehicle's in_use reservation
        current = getattr(self.instance, "status", None)
        if value == current:
            return value
        if value == Vehicle.Status.RENTED:
            raise serializers.ValidationError("대여 중 상태는 예약 출고로만 변경됩니다.")
        if current == Vehicle.Status.RENTED and self.instance.reservations.filter(
            status=Reservation.Status.IN_USE
        ).exists():
            raise serializers.ValidationError("운행 중인 예약이 있어 차량 상태를 변경할 수 없습니다.")
        return value


class BranchVehicleSerializer(VehicleSerializer):
    """Vehicle writes from the branch portal; the branch comes from the token."""
    branch_id = serializers.PrimaryKeyRelatedField(source="branch", read_only=True)


class VehicleLiteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vehicle
        fields = ("id", "name", "brand", "model", "license_plate", "vehicle_type", "price_per_day", "status")
        read_only_fields = fields


class VehicleInsuranceSerializer(serializers.ModelSerializer):
    vehicle_id = serializers.PrimaryKeyRelatedField(
        queryset=Vehicle.objects.filter(is_active=True),
        source="vehicle",
    )
    branch_id = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.all(),
        source="branch",
    )
    vehicle = VehicleLiteSerializer(read_only=True)
    days_until_expiry = serializers.SerializerMethodField()

    class Meta:
        model = VehicleInsurance
        fields = (
            "id",
            "vehicle_id",
            "vehicle",
            "branch_id",
            "insurance_company",
            "policy_number",
            "insurance_type",
            "coverage",
            "start_date",
            "end_date",
            "annual_premium",
            "monthly_premium",
            "document_url",
            "is_active",
            "days_until_expiry",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("is_active", "created_at", "updated_at")

    def get_days_until_expiry(self, obj):
        return (obj.end_date - timezone.localdate()).days

    def validate(self, attrs):
        vehicle = attrs.get("vehicle", getattr(self.instance, "vehicle", None))
        branch = attrs.get("branch", getattr(self.instance, "branch", None))
        if vehicle and branch and vehicle.branch_id != branch.pk:
            raise serializers.ValidationError({"vehicle_id": "차량과 지점 정보가 일치하지 않습니다."})
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "보험 종료일은 시작일 이후여야 합니다."})
        return attrs

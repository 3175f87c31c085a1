from rest_framework import serializers

from branches.models import Branch
from inventory.models import Vehicle
from .models import Review


class ReviewSerializer(serializers.ModelSerializer):
    branch_id = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.filter(is_active=True),
        source="branch",
    )
    vehicle_id = serializers.PrimaryKeyRelatedField(
        queryset=Vehicle.objects.filter(is_active=True),
        source="vehicle",
        required=False,
        allow_null=True,
    )

    class Meta:
        model = Review
        fields = (
            "id",
            "branch_id",
            "vehicle_id",
            "customer_name",
            "customer_phone",
            "rating",
            "content",
            "vehicle_name",
            "is_approved",
            "is_visible",
            "created_at",
        )
        read_only_fields = ("is_approved", "created_at")
        extra_kwargs = {"customer_phone": {"write_only": True}}

    def validate(self, attrs):
        vehicle = attrs.get("vehicle")
        branch = attrs.get("branch", getattr(self.instance, "branch", None))
        if vehicle is not None and branch is not None and vehicle.branch_id != branch.pk:
            raise serializers.ValidationError({"vehicle_id": "차량과 지점 정보가 일치하지 않습니다."})
        if vehicle is not None and not attrs.get("vehicle_name"):
            attrs["vehicle_name"] = vehicle.display_name
        return attrs

from rest_framework import serializers

from .models import Inquiry


class InquirySerializer(serializers.ModelSerializer):
    class Meta:
        model = Inquiry
        fields = ("id", "name", "phone", "email", "region", "inquiry_type", "message", "is_read", "created_at")
        read_only_fields = ("created_at",)

    def create(self, validated_data):
        validated_data["is_read"] = False
        return super().create(validated_data)

from django.utils import timezone
from rest_framework import serializers

from .models import News


class NewsSerializer(serializers.ModelSerializer):
    thumbnail = serializers.ImageField(required=False, allow_null=True, write_only=True)
    thumbnail_url = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = News
        fields = (
            "id",
            "title",
            "content",
            "category",
            "thumbnail",
            "thumbnail_url",
            "is_published",
            "published_at",
            "view_count",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("view_count", "created_at", "updated_at")

    def get_thumbnail_url(self, obj):
        return getattr(obj.thumbnail, "url", None) if obj.thumbnail else None

    def validate(self, attrs):
        if attrs.get("is_published") and not attrs.get("published_at"):
            if not getattr(self.instance, "published_at", None):
                attrs["published_at"] = timezone.now()
        return attrs

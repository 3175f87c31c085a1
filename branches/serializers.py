from rest_framework import serializers

from .models import Branch
from .services import static_map_url


class BranchSerializer(serializers.ModelSerializer):
    """Public micro-site view of a branch; credentials and settlement fields stay out."""
    logo = serializers.ImageField(required=False, allow_null=True, write_only=True)
    banner = serializers.ImageField(required=False, allow_null=True, write_only=True)
    logo_url = serializers.SerializerMethodField(read_only=True)
    banner_url = serializers.SerializerMethodField(read_only=True)
    static_map_url = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Branch
        fields = (
            "id",
            "name",
            "region",
            "address",
            "phone",
            "manager",
            "owner_name",
            "type",
            "lat",
            "lng",
            "website_url",
            "subdomain",
            "business_hours",
            "description",
            "introduction",
            "logo",
            "logo_url",
            "banner",
            "banner_url",
            "theme",
            "static_map_url",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("is_active", "created_at", "updated_at")

    def get_logo_url(self, obj):
        return getattr(obj.logo, "url", None) if obj.logo else None

    def get_banner_url(self, obj):
        return getattr(obj.banner, "url", None) if obj.banner else None

    def get_static_map_url(self, obj):
        return static_map_url(obj)


class BranchAdminSerializer(BranchSerializer):
    """Staff-facing branch serializer including settlement routing and bank details."""

    class Meta(BranchSerializer.Meta):
        fields = BranchSerializer.Meta.fields + (
            "admin_email",
            "submall_id",
            "hq_submall_id",
            "bank_name",
            "bank_account_number",
            "bank_holder_name",
        )


class BranchPortalSerializer(serializers.ModelSerializer):
    class Meta:
        model = Branch
        fields = ("id", "name", "region", "address", "phone", "type", "subdomain", "theme")
        read_only_fields = fields

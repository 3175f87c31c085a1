from django.contrib import admin
from django.utils.html import format_html

from .models import Branch
from .services import fill_coordinates


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ("name", "region", "type", "subdomain", "phone", "has_coordinates", "is_active", "logo_preview")
    list_filter = ("region", "type", "theme", "is_active")
    search_fields = ("name", "address", "subdomain", "manager", "owner_name")
    readonly_fields = ("api_key", "logo_preview", "created_at", "updated_at")
    actions = ["rotate_api_keys", "geocode_branches", "deactivate_branches"]
    fieldsets = (
        ("Basic Information", {
            "fields": ("name", "region", "address", "phone", "manager", "owner_name", "type", "is_active")
        }),
        ("Location", {
            "fields": (("lat", "lng"),)
        }),
        ("Micro-site", {
            "fields": (
                "subdomain",
                "website_url",
                "business_hours",
                "description",
                "introduction",
                "logo",
                "logo_preview",
                "banner",
                "theme",
                "admin_email",
            )
        }),
        ("Portal", {
            "fields": ("api_key",),
            "classes": ("collapse",)
        }),
        ("Settlement", {
            "fields": ("submall_id", "hq_submall_id", "bank_name", "bank_account_number", "bank_holder_name")
        }),
        ("Timestamps", {
            "fields": ("created_at", "updated_at"),
            "classes": ("collapse",)
        }),
    )

    def logo_preview(self, obj):
        if getattr(obj, "logo", None):
            try:
                return format_html('<img src="{}" style="height:40px;" />', obj.logo.url)
            except AttributeError:
                return "-"
        return "-"
    logo_preview.short_description = "Logo"

    def has_coordinates(self, obj):
        return obj.has_coordinates
    has_coordinates.boolean = True
    has_coordinates.short_description = "Geocoded"

    def rotate_api_keys(self, request, queryset):
        for branch in queryset:
            branch.rotate_api_key()
        self.message_user(request, f"{queryset.count()} branch API key(s) rotated.")
    rotate_api_keys.short_description = "Rotate portal API keys"

    def geocode_branches(self, request, queryset):
        updated = sum(1 for branch in queryset if fill_coordinates(branch, force=True))
        self.message_user(request, f"{updated} branch(es) geocoded.")
    geocode_branches.short_description = "Geocode selected branches"

    def deactivate_branches(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f"{updated} branch(es) deactivated.")
    deactivate_branches.short_description = "Deactivate selected branches"

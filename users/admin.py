from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "role", "branch", "is_staff", "is_active", "avatar_preview")
    list_filter = ("role", "branch", "is_staff", "is_active")
    search_fields = ("username", "email", "phone")
    readonly_fields = ("avatar_preview",)
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Rental platform", {"fields": ("role", "branch", "phone", "avatar", "avatar_preview")}),
    )

    def avatar_preview(self, obj):
        url = getattr(obj.avatar, "url", None) if getattr(obj, "avatar", None) else None
        if url:
            return format_html('<img src="{}" style="height:50px;border-radius:4px" />', url)
        return "-"
    avatar_preview.short_description = "Avatar"

from django.contrib import admin

from .models import Inquiry


@admin.register(Inquiry)
class InquiryAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "inquiry_type", "region", "is_read", "created_at")
    list_filter = ("inquiry_type", "is_read", "created_at")
    search_fields = ("name", "phone", "email", "message")
    readonly_fields = ("created_at", "updated_at")
    actions = ["mark_read", "mark_unread"]

    def mark_read(self, request, queryset):
        updated = queryset.update(is_read=True)
        self.message_user(request, f"{updated} inquiry(ies) marked as read.")
    mark_read.short_description = "Mark selected inquiries as read"

    def mark_unread(self, request, queryset):
        updated = queryset.update(is_read=False)
        self.message_user(request, f"{updated} inquiry(ies) marked as unread.")
    mark_unread.short_description = "Mark selected inquiries as unread"

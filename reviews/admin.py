from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "branch", "customer_name", "vehicle_name", "rating", "is_approved", "is_visible", "created_at")
    list_filter = ("rating", "is_approved", "is_visible", "branch", "created_at")
    search_fields = ("customer_name", "customer_phone", "content", "vehicle_name")
    readonly_fields = ("created_at", "updated_at")
    actions = ["approve_reviews", "disapprove_reviews", "hide_reviews"]

    def approve_reviews(self, request, queryset):
        updated = queryset.update(is_approved=True)
        self.message_user(request, f"{updated} review(s) approved.")
    approve_reviews.short_description = "Approve selected reviews"

    def disapprove_reviews(self, request, queryset):
        updated = queryset.update(is_approved=False)
        self.message_user(request, f"{updated} review(s) disapproved.")
    disapprove_reviews.short_description = "Disapprove selected reviews"

    def hide_reviews(self, request, queryset):
        updated = queryset.update(is_visible=False)
        self.message_user(request, f"{updated} review(s) hidden.")
    hide_reviews.short_description = "Hide selected reviews"

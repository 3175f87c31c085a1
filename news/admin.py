from django.contrib import admin
from django.utils import timezone

from .models import News


@admin.register(News)
class NewsAdmin(admin.ModelAdmin):
    list_display = ("title", "category", "is_published", "published_at", "view_count", "created_at")
    list_filter = ("category", "is_published")
    search_fields = ("title", "content")
    readonly_fields = ("view_count", "created_at", "updated_at")
    actions = ["publish_news", "unpublish_news"]

    def publish_news(self, request, queryset):
        queryset.filter(published_at__isnull=True).update(published_at=timezone.now())
        updated = queryset.update(is_published=True)
        self.message_user(request, f"{updated} news item(s) published.")
    publish_news.short_description = "Publish selected news"

    def unpublish_news(self, request, queryset):
        updated = queryset.update(is_published=False)
        self.message_user(request, f"{updated} news item(s) unpublished.")
    unpublish_news.short_description = "Unpublish selected news"

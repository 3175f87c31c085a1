from django.db import models
from django.utils import timezone
from cloudinary.models import CloudinaryField


class News(models.Model):
    class Category(models.TextChoices):
        MEDIA = "Media", "언론 보도"
        BUSINESS = "Business", "사업"
        PARTNERSHIP = "Partnership", "제휴"
        MILESTONE = "Milestone", "성과"
        EVENT = "Event", "이벤트"

    title = models.CharField(max_length=200)
    content = models.TextField()
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.MEDIA)
    thumbnail = CloudinaryField("thumbnail", folder="chanolja/news", blank=True, null=True)
    is_published = models.BooleanField(default=False)
    published_at = models.DateTimeField(null=True, blank=True)
    view_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-published_at", "-created_at"]
        verbose_name_plural = "news"

    def __str__(self):
        return self.title

    def set_published(self, published: bool):
        self.is_published = published
        if published and self.published_at is None:
            self.published_at = timezone.now()
        self.save(update_fields=["is_published", "published_at", "updated_at"])

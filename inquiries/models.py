from django.db import models


class Inquiry(models.Model):
    class Type(models.TextChoices):
        BRANCH = "branch", "가맹 문의"
        CORPORATION = "corporation", "법인 문의"
        CAMPING = "camping", "캠핑카 문의"
        OTHER = "other", "기타"

    name = models.CharField(max_length=60)
    phone = models.CharField(max_length=30)
    email = models.EmailField(blank=True)
    region = models.CharField(max_length=50, blank=True)
    inquiry_type = models.CharField(max_length=16, choices=Type.choices, default=Type.OTHER)
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "inquiries"

    def __str__(self):
        return f"{self.name} ({self.get_inquiry_type_display()})"

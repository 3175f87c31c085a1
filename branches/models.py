import secrets

from django.db import models
from cloudinary.models import CloudinaryField


class Branch(models.Model):
    class Type(models.TextChoices):
        RENTCAR = "rentcar", "렌트카"
        CAMPING = "camping", "캠핑카"
        BOTH = "both", "렌트카 + 캠핑카"

    class Theme(models.TextChoices):
        SKY = "sky", "Sky"
        CORAL = "coral", "Coral"
        VIOLET = "violet", "Violet"

    name = models.CharField(max_length=120)
    region = models.CharField(max_length=50, blank=True)
    address = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    manager = models.CharField(max_length=60, blank=True)
    owner_name = models.CharField(max_length=60, blank=True)
    type = models.CharField(max_length=16, choices=Type.choices, default=Type.RENTCAR)
    lat = models.FloatField(null=True, blank=True)
    lng = models.FloatField(null=True, blank=True)

    # Micro-site
    website_url = models.URLField(blank=True)
    subdomain = models.CharField(max_length=63, unique=True, null=True, blank=True)
    business_hours = models.CharField(max_length=120, blank=True)
    description = models.TextField(blank=True)
    introduction = models.TextField(blank=True)
    logo = CloudinaryField("logo", folder="chanolja/branches", blank=True, null=True)
    banner = CloudinaryField("banner", folder="chanolja/branches", blank=True, null=True)
    theme = models.CharField(max_length=16, choices=Theme.choices, default=Theme.SKY)
    admin_email = models.EmailField(blank=True)

    # Branch portal credential
    api_key = models.CharField(max_length=64, unique=True, null=True, blank=True)

    # Settlement routing
    submall_id = models.CharField(max_length=64, blank=True, help_text="Gateway sub-merchant id of the branch")
    hq_submall_id = models.CharField(max_length=64, blank=True, help_text="Gateway sub-merchant id of HQ")
    bank_name = models.CharField(max_length=40, blank=True)
    bank_account_number = models.CharField(max_length=40, blank=True)
    bank_holder_name = models.CharField(max_length=60, blank=True)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [models.Index(fields=["region", "is_active"])]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.api_key:
            self.api_key = self.generate_api_key()
        if self.subdomain == "":
            self.subdomain = None
        super().save(*args, **kwargs)

    @staticmethod
    def generate_api_key() -> str:
        return f"br_{secrets.token_urlsafe(32)}"

    def rotate_api_key(self) -> str:
        self.api_key = self.generate_api_key()
        self.save(update_fields=["api_key", "updated_at"])
        return self.api_key

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None

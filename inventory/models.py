from django.db import models
from cloudinary.models import CloudinaryField


class Vehicle(models.Model):
    class Type(models.TextChoices):
        SEDAN = "sedan", "승용"
        SUV = "suv", "SUV"
        VAN = "van", "승합"
        TRUCK = "truck", "화물"
        CAMPER = "camper", "캠핑카"
        LUXURY = "luxury", "고급"

    class Status(models.TextChoices):
        AVAILABLE = "available", "대여 가능"
        RENTED = "rented", "대여 중"
        MAINTENANCE = "maintenance", "정비 중"

    branch = models.ForeignKey("branches.Branch", on_delete=models.CASCADE, related_name="vehicles")
    name = models.CharField(max_length=120)
    brand = models.CharField(max_length=60, blank=True)
    model = models.CharField(max_length=60, blank=True)
    year = models.PositiveSmallIntegerField(null=True, blank=True)
    license_plate = models.CharField(max_length=20, blank=True)
    vehicle_type = models.CharField(max_length=16, choices=Type.choices, default=Type.SEDAN)
    price_per_day = models.PositiveIntegerField()
    price_per_hour = models.PositiveIntegerField(null=True, blank=True)
    deposit = models.PositiveIntegerField(default=0)
    color = models.CharField(max_length=30, blank=True)
    seats = models.PositiveSmallIntegerField(default=5)
    fuel_type = models.CharField(max_length=20, blank=True)
    transmission = models.CharField(max_length=20, blank=True)
    mileage = models.PositiveIntegerField(null=True, blank=True)
    images = models.JSONField(default=list, blank=True, help_text="Gallery image URLs")
    thumbnail = CloudinaryField(
        "image",
        folder="chanolja/vehicles",
        resource_type="image",
        blank=True,
        null=True,
    )
    description = models.TextField(blank=True)
    features = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.AVAILABLE)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["branch", "status", "is_active"])]

    def __str__(self):
        label = " ".join(part for part in (self.brand, self.model or self.name) if part)
        return f"{label or self.name} ({self.license_plate or '-'})"

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.brand, self.model or self.name) if part)


def default_coverage():
    return {
        "liability_per_person": 100_000_000,
        "liability_per_accident": 200_000_000,
        "property_damage": 20_000_000,
        "uninsured_motorist": 20_000_000,
        "self_damage": True,
        "self_damage_deductible": 300_000,
    }


class VehicleInsurance(models.Model):
    class Type(models.TextChoices):
        COMPREHENSIVE = "comprehensive", "종합보험"
        LIABILITY_ONLY = "liability_only", "책임보험"

    vehicle = models.ForeignKey(Vehicle, on_delete=models.CASCADE, related_name="insurances")
    branch = models.ForeignKey("branches.Branch", on_delete=models.CASCADE, related_name="insurances")
    insurance_company = models.CharField(max_length=80)
    policy_number = models.CharField(max_length=80, blank=True)
    insurance_type = models.CharField(max_length=20, choices=Type.choices, default=Type.COMPREHENSIVE)
    coverage = models.JSONField(default=default_coverage, blank=True)
    start_date = models.DateField()
    end_date = models.DateField()
    annual_premium = models.PositiveIntegerField(null=True, blank=True)
    monthly_premium = models.PositiveIntegerField(null=True, blank=True)
    document_url = models.URLField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["end_date"]
        indexes = [models.Index(fields=["branch", "is_active", "end_date"])]

    def __str__(self):
        return f"{self.insurance_company} {self.policy_number or ''} - {self.vehicle}".strip()

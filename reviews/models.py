from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Review(models.Model):
    branch = models.ForeignKey("branches.Branch", on_delete=models.CASCADE, related_name="reviews")
    vehicle = models.ForeignKey(
        "inventory.Vehicle", on_delete=models.SET_NULL, null=True, blank=True, related_name="reviews"
    )
    customer_name = models.CharField(max_length=60)
    customer_phone = models.CharField(max_length=30, blank=True)
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    content = models.TextField()
    vehicle_name = models.CharField(max_length=120, blank=True, help_text="Snapshot of the vehicle name at time of review")
    is_approved = models.BooleanField(default=False)
    is_visible = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["branch", "is_approved", "is_visible"])]

    def __str__(self):
        return f"{self.customer_name} ({self.rating}) - {self.branch}"

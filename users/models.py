from django.db import models
from django.contrib.auth.models import AbstractUser
from cloudinary.models import CloudinaryField

class User(AbstractUser):
    class Role(models.TextChoices):
        HQ_ADMIN = 'HQ_ADMIN', '본사 관리자'
        BRANCH_ADMIN = 'BRANCH_ADMIN', '지점 관리자'
        STAFF = 'STAFF', '직원'

    role = models.CharField(max_length=16, choices=Role.choices, default=Role.STAFF)
    phone = models.CharField(max_length=30, blank=True, null=True)
    branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="admins",
    )
    avatar = CloudinaryField("avatar", blank=True, null=True)

    def __str__(self):
        return f"{self.username} ({self.role})"

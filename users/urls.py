from django.urls import path
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
    TokenVerifyView,
)
from .views import CreateAdminUserView, MeView

urlpatterns = [
    path("auth/me/", MeView.as_view(), name="me"),

    # JWT endpoints
    path("auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("auth/token/verify/", TokenVerifyView.as_view(), name="token_verify"),

    # HQ-only account provisioning
    path("admin/create-user", CreateAdminUserView.as_view(), name="admin-create-user"),
]

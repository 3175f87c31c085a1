from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("users.urls")),
    path("api/", include("branches.urls")),
    path("api/", include("inventory.urls")),
    path("api/", include("booking.urls")),
    path("api/payments/", include("payments.urls")),
    path("api/", include("reviews.urls")),
    path("api/", include("news.urls")),
    path("api/", include("inquiries.urls")),
]

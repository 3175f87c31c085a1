from django.urls import path
from rest_framework.routers import DefaultRouter

from . import portal
from .views import BranchViewSet, GeocodeView

router = DefaultRouter()
router.register(r"branches", BranchViewSet, basename="branch")

urlpatterns = [
    path("geocode", GeocodeView.as_view(), name="geocode"),
    path("branch/auth", portal.BranchAuthView.as_view(), name="branch-auth"),
    path("branch/vehicles", portal.BranchVehiclesView.as_view(), name="branch-vehicles"),
    path("branch/reservations", portal.BranchReservationsView.as_view(), name="branch-reservations"),
    path("branch/reviews", portal.BranchReviewsView.as_view(), name="branch-reviews"),
    path("branch/stats", portal.BranchStatsView.as_view(), name="branch-stats"),
] + router.urls

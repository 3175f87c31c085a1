from rest_framework.routers import DefaultRouter
from django.urls import path, include

from .views import VehicleViewSet, VehicleInsuranceViewSet

router = DefaultRouter()
router.register(r'vehicles', VehicleViewSet, basename='vehicle')
router.register(r'insurances', VehicleInsuranceViewSet, basename='insurance')

urlpatterns = [
    path("", include(router.urls)),
]

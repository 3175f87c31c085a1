import logging

from rest_framework import filters, viewsets
from django_filters.rest_framework import DjangoFilterBackend

from permissions import IsStaffOrReadOnly
from responses import EnvelopeViewSetMixin
from .filters import VehicleFilter, VehicleInsuranceFilter
from .models import Vehicle, VehicleInsurance
from .serializers import VehicleSerializer, VehicleInsuranceSerializer
from .services import register_insurance

logger = logging.getLogger(__name__)


class VehicleViewSet(EnvelopeViewSetMixin, viewsets.ModelViewSet):
    queryset = Vehicle.objects.filter(is_active=True).select_related("branch")
    serializer_class = VehicleSerializer
    permission_classes = [IsStaffOrReadOnly]
    filter_backends = (DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter)
    filterset_class = VehicleFilter
    search_fields = ("name", "brand", "model", "license_plate")
    ordering_fields = ("price_per_day", "created_at", "year")

    required_fields = ("branch_id", "name", "price_per_day")
    not_found_message = "차량을 찾을 수 없습니다."
    created_message = "차량이 등록되었습니다."
    updated_message = "차량 정보가 수정되었습니다."
    deleted_message = "차량이 삭제되었습니다."

    def perform_create(self, serializer):
        instance = serializer.save()
        logger.info("Vehicle created: id=%s branch=%s by user=%s", instance.id, instance.branch_id, self.request.user)

    def perform_destroy(self, instance):
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])
        logger.info("Vehicle soft-deleted: id=%s by user=%s", instance.id, self.request.user)


class VehicleInsuranceViewSet(EnvelopeViewSetMixin, viewsets.ModelViewSet):
    queryset = VehicleInsurance.objects.filter(is_active=True).select_related("vehicle").order_by("end_date")
    serializer_class = VehicleInsuranceSerializer
    permission_classes = [IsStaffOrReadOnly]
    filter_backends = (DjangoFilterBackend,)
    filterset_class = VehicleInsuranceFilter

    required_fields = ("vehicle_id", "branch_id", "insurance_company", "start_date", "end_date")
    not_found_message = "보험 정보를 찾을 수 없습니다."
    created_message = "보험이 등록되었습니다."
    updated_message = "보험 정보가 수정되었습니다."
    deleted_message = "보험 정보가 삭제되었습니다."

    def perform_create(self, serializer):
        insurance = register_insurance(serializer)
        logger.info("Insurance created: id=%s vehicle=%s", insurance.id, insurance.vehicle_id)

    def perform_destroy(self, instance):
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])

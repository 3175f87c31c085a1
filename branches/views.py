import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, views, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny

from adapters.base import GatewayError, GatewayNotConfigured
from inventory.filters import VehicleFilter
from inventory.models import Vehicle
from inventory.serializers import VehicleSerializer
from permissions import IsStaffOrReadOnly
from responses import EnvelopeViewSetMixin, failure, success
from reviews.serializers import ReviewSerializer
from reviews.services import public_reviews
from .filters import BranchFilter
from .models import Branch
from .serializers import BranchAdminSerializer, BranchSerializer
from .services import fill_coordinates, geocode_address, resolve_branch

logger = logging.getLogger(__name__)


class BranchViewSet(EnvelopeViewSetMixin, viewsets.ModelViewSet):
    """
    Branch directory and micro-site lookup.

    ``/api/branches/{identifier}/`` accepts a numeric id, a subdomain or a
    (partial, URL-encoded) branch name.
    """
    queryset = Branch.objects.all()
    serializer_class = BranchSerializer
    permission_classes = [IsStaffOrReadOnly]
    filter_backends = (DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter)
    filterset_class = BranchFilter
    search_fields = ("name", "address", "region")
    ordering_fields = ("name", "region", "created_at")
    lookup_value_regex = "[^/]+"

    required_fields = ("name",)
    not_found_message = "지점을 찾을 수 없습니다."
    created_message = "지점이 등록되었습니다."
    updated_message = "지점 정보가 수정되었습니다."
    deleted_message = "지점이 삭제되었습니다."

    def _is_staff(self):
        user = self.request.user
        return bool(user and user.is_authenticated and user.is_staff)

    def get_queryset(self):
        if self._is_staff():
            return Branch.objects.all()
        return Branch.objects.filter(is_active=True)

    def get_serializer_class(self):
        if self._is_staff():
            return BranchAdminSerializer
        return BranchSerializer

    def get_object(self):
        identifier = self.kwargs[self.lookup_field]
        queryset = self.get_queryset()
        branch = None
        if str(identifier).isdigit():
            branch = queryset.filter(pk=int(identifier)).first()
        if branch is None:
            branch = resolve_branch(identifier, queryset=queryset)
        if branch is None:
            raise NotFound(self.not_found_message)
        self.check_object_permissions(self.request, branch)
        return branch

    def perform_create(self, serializer):
        branch = serializer.save()
        if not branch.has_coordinates:
            fill_coordinates(branch)
        logger.info("Branch created: id=%s by user=%s", branch.pk, self.request.user)

    def perform_update(self, serializer):
        previous_address = serializer.instance.address
        branch = serializer.save()
        coords_given = "lat" in serializer.validated_data or "lng" in serializer.validated_data
        if branch.address != previous_address and not coords_given:
            fill_coordinates(branch, force=True)
        elif not branch.has_coordinates:
            fill_coordinates(branch)

    def perform_destroy(self, instance):
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])
        logger.info("Branch deactivated: id=%s by user=%s", instance.pk, self.request.user)

    @action(detail=True, methods=["get"])
    def vehicles(self, request, pk=None):
        branch = self.get_object()
        queryset = VehicleFilter(
            request.query_params,
            queryset=Vehicle.objects.filter(branch=branch, is_active=True).order_by("price_per_day"),
        ).qs
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(VehicleSerializer(page, many=True).data)
        return success(VehicleSerializer(queryset, many=True).data)

    @action(detail=True, methods=["get"])
    def reviews(self, request, pk=None):
        branch = self.get_object()
        queryset = public_reviews(branch)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(ReviewSerializer(page, many=True).data)
        return success(ReviewSerializer(queryset, many=True).data)


class GeocodeView(views.APIView):
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        address = (request.data.get("address") or "").strip()
        if not address:
            return failure("주소가 필요합니다")
        try:
            result = geocode_address(address)
        except GatewayNotConfigured as exc:
            logger.error("Geocoding unavailable: %s", exc.message)
            return failure(exc.message, exc.status_code)
        except GatewayError as exc:
            return failure(exc.message, exc.status_code)

        if not result:
            return success({"lat": None, "lng": None})
        return success({"lat": result["lat"], "lng": result["lng"]})

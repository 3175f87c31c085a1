import logging

from rest_framework import permissions, status, viewsets
from django_filters.rest_framework import DjangoFilterBackend

from responses import EnvelopeViewSetMixin, failure, missing_fields, success
from .filters import ReservationFilter
from .models import Reservation
from .serializers import ReservationCreateSerializer, ReservationReadSerializer, ReservationUpdateSerializer
from .services import ReservationError, apply_reservation_action, create_reservation

logger = logging.getLogger(__name__)


class ReservationViewSet(EnvelopeViewSetMixin, viewsets.ModelViewSet):
    """
    Customers create and look up their own reservation by id; listing,
    editing and cancelling belong to HQ staff.
    """
    queryset = (
        Reservation.objects.select_related("branch", "vehicle")
        .prefetch_related("payments")
    )
    serializer_class = ReservationReadSerializer
    filter_backends = (DjangoFilterBackend,)
    filterset_class = ReservationFilter
    http_method_names = ["get", "post", "put", "patch", "delete", "head", "options"]

    required_fields = ("branch_id", "vehicle_id", "customer_name", "customer_phone", "start_date", "end_date")
    not_found_message = "예약을 찾을 수 없습니다."

    def get_permissions(self):
        if self.action in ("create", "retrieve"):
            return [permissions.AllowAny()]
        return [permissions.IsAdminUser()]

    def create(self, request, *args, **kwargs):
        missing = missing_fields(request.data, self.required_fields)
        if missing:
            return failure(self.required_message, missing_fields=missing)

        serializer = ReservationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        try:
            reservation = create_reservation(
                branch=data.pop("branch"),
                vehicle=data.pop("vehicle"),
                start_date=data.pop("start_date"),
                end_date=data.pop("end_date"),
                **data,
            )
        except ReservationError as exc:
            return failure(exc.message, exc.status_code)
        return success(
            ReservationReadSerializer(reservation).data,
            message="예약이 접수되었습니다.",
            status_code=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        reservation = self.get_object()
        action_name = request.data.get("action")
        if action_name:
            try:
                reservation = apply_reservation_action(reservation, action_name, request.data.get("cancel_reason"))
            except ReservationError as exc:
                return failure(exc.message, exc.status_code)
            logger.info("Reservation %s action=%s by user=%s", reservation.pk, action_name, request.user)
            return success(ReservationReadSerializer(reservation).data, message="예약 상태가 변경되었습니다.")

        serializer = ReservationUpdateSerializer(reservation, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        reservation = serializer.save()
        return success(ReservationReadSerializer(reservation).data, message="예약 정보가 수정되었습니다.")

    def destroy(self, request, *args, **kwargs):
        reservation = self.get_object()
        try:
            apply_reservation_action(reservation, "cancel", request.data.get("cancel_reason") or "관리자 취소")
        except ReservationError as exc:
            return failure(exc.message, exc.status_code)
        logger.info("Reservation %s cancelled by user=%s", reservation.pk, request.user)
        return success(message="예약이 취소되었습니다.")

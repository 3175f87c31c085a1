"""
Branch portal API.

Branches sign in with their API key and get a short-lived token; every other
portal endpoint is scoped to the branch that token was issued for.
"""
import logging
import uuid

from rest_framework import generics, status
from rest_framework.permissions import AllowAny

from booking.filters import ReservationFilter
from booking.models import Reservation
from booking.serializers import ReservationReadSerializer
from booking.services import ReservationError, apply_reservation_action
from inventory.filters import VehicleFilter
from inventory.models import Vehicle
from inventory.serializers import BranchVehicleSerializer
from permissions import IsBranchAuthenticated
from responses import failure, missing_fields, success
from reviews.models import Review
from reviews.serializers import ReviewSerializer
from reviews.services import ReviewActionError, moderate_review
from .authentication import BranchTokenAuthentication, issue_branch_token
from .models import Branch
from .serializers import BranchPortalSerializer
from .services import branch_stats

logger = logging.getLogger(__name__)


def _parse_uuid(value):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class BranchAuthView(generics.GenericAPIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        api_key = (request.data.get("api_key") or "").strip()
        if not api_key:
            return failure("API 키가 필요합니다.")

        branch = Branch.objects.filter(api_key=api_key, is_active=True).first()
        if branch is None:
            logger.warning("Branch portal login rejected")
            return failure("유효하지 않은 API 키입니다.", status.HTTP_401_UNAUTHORIZED)

        token = issue_branch_token(branch)
        logger.info("Branch portal login: branch=%s", branch.pk)
        return success(
            {
                "branch": BranchPortalSerializer(branch).data,
                "token": token["token"],
                "expires_at": token["expires_at"],
            },
            message="인증 성공",
        )


class BranchPortalView(generics.GenericAPIView):
    authentication_classes = [BranchTokenAuthentication]
    permission_classes = [IsBranchAuthenticated]

    @property
    def branch(self) -> Branch:
        return self.request.user.branch

    def paginated(self, queryset, serializer_class):
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(serializer_class(page, many=True).data)
        return success(serializer_class(queryset, many=True).data)


class BranchVehiclesView(BranchPortalView):

    def get(self, request, *args, **kwargs):
        queryset = VehicleFilter(
            request.query_params,
            queryset=Vehicle.objects.filter(branch=self.branch, is_active=True).order_by("-created_at"),
        ).qs
        return self.paginated(queryset, BranchVehicleSerializer)

    def post(self, request, *args, **kwargs):
        if missing_fields(request.data, ("name", "price_per_day")):
            return failure("차량명과 일 요금은 필수입니다.")
        serializer = BranchVehicleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        vehicle = serializer.save(branch=self.branch)
        logger.info("Vehicle created from portal: id=%s branch=%s", vehicle.pk, self.branch.pk)
        return success(
            BranchVehicleSerializer(vehicle).data,
            message="차량이 등록되었습니다.",
            status_code=status.HTTP_201_CREATED,
        )


class BranchReservationsView(BranchPortalView):

    def get(self, request, *args, **kwargs):
        queryset = ReservationFilter(
            request.query_params,
            queryset=(
                Reservation.objects.filter(branch=self.branch)
                .select_related("branch", "vehicle")
                .prefetch_related("payments")
                .order_by("-created_at")
            ),
        ).qs
        return self.paginated(queryset, ReservationReadSerializer)

    def put(self, request, *args, **kwargs):
        reservation_id = request.data.get("reservation_id")
        action_name = request.data.get("action")
        if not reservation_id or not action_name:
            return failure("예약 ID와 액션이 필요합니다.")

        pk = _parse_uuid(reservation_id)
        reservation = Reservation.objects.filter(pk=pk, branch=self.branch).first() if pk else None
        if reservation is None:
            return failure("예약을 찾을 수 없습니다.", status.HTTP_404_NOT_FOUND)

        try:
            reservation = apply_reservation_action(reservation, action_name, request.data.get("cancel_reason"))
        except ReservationError as exc:
            return failure(exc.message, exc.status_code)
        logger.info("Portal reservation %s action=%s branch=%s", reservation.pk, action_name, self.branch.pk)
        return success(ReservationReadSerializer(reservation).data, message="예약 상태가 변경되었습니다.")


class BranchReviewsView(BranchPortalView):

    def get(self, request, *args, **kwargs):
        queryset = Review.objects.filter(branch=self.branch).select_related("vehicle")
        return self.paginated(queryset, ReviewSerializer)

    def put(self, request, *args, **kwargs):
        review_id = request.data.get("review_id")
        action_name = request.data.get("action")
        if not review_id or not action_name:
            return failure("리뷰 ID와 액션이 필요합니다.")

        review = Review.objects.filter(pk=review_id, branch=self.branch).first() if str(review_id).isdigit() else None
        if review is None:
            return failure("리뷰를 찾을 수 없습니다.", status.HTTP_404_NOT_FOUND)

        try:
            review = moderate_review(review, action_name)
        except ReviewActionError as exc:
            return failure(exc.message, exc.status_code)
        return success(ReviewSerializer(review).data, message="리뷰 상태가 변경되었습니다.")


class BranchStatsView(BranchPortalView):

    def get(self, request, *args, **kwargs):
        return success(branch_stats(self.branch))

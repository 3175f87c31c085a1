import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAdminUser

from responses import EnvelopeViewSetMixin, success
from .filters import ReviewFilter
from .models import Review
from .serializers import ReviewSerializer
from .services import moderate_review, public_reviews

logger = logging.getLogger(__name__)


class ReviewViewSet(EnvelopeViewSetMixin, viewsets.ModelViewSet):
    queryset = Review.objects.select_related("branch", "vehicle")
    serializer_class = ReviewSerializer
    filter_backends = (DjangoFilterBackend, filters.OrderingFilter)
    filterset_class = ReviewFilter
    ordering_fields = ("rating", "created_at")

    required_fields = ("branch_id", "customer_name", "rating", "content")
    not_found_message = "리뷰를 찾을 수 없습니다."
    created_message = "리뷰가 등록되었습니다. 관리자 승인 후 게시됩니다."
    updated_message = "리뷰가 수정되었습니다."
    deleted_message = "리뷰가 삭제되었습니다."

    def get_permissions(self):
        if self.action in ("list", "retrieve", "create"):
            return [AllowAny()]
        return [IsAdminUser()]

    def get_queryset(self):
        user = self.request.user
        if user.is_authenticated and user.is_staff:
            return self.queryset.all()
        return public_reviews().select_related("branch", "vehicle")

    def perform_create(self, serializer):
        review = serializer.save(is_approved=False)
        logger.info("Review submitted: id=%s branch=%s", review.pk, review.branch_id)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        review = moderate_review(self.get_object(), "approve")
        return success(self.get_serializer(review).data, message="리뷰가 승인되었습니다.")

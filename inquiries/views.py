import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets
from rest_framework.permissions import AllowAny, IsAdminUser

from responses import EnvelopeViewSetMixin
from .models import Inquiry
from .serializers import InquirySerializer

logger = logging.getLogger(__name__)


class InquiryViewSet(EnvelopeViewSetMixin, viewsets.ModelViewSet):
    """Anyone may send an inquiry; reading and triaging them is for staff."""
    queryset = Inquiry.objects.all()
    serializer_class = InquirySerializer
    filter_backends = (DjangoFilterBackend,)
    filterset_fields = ("is_read", "inquiry_type")
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    required_fields = ("name", "phone", "message")
    not_found_message = "문의를 찾을 수 없습니다."
    created_message = "문의가 접수되었습니다."
    updated_message = "문의가 수정되었습니다."
    deleted_message = "문의가 삭제되었습니다."

    def get_permissions(self):
        if self.action == "create":
            return [AllowAny()]
        return [IsAdminUser()]

    def perform_create(self, serializer):
        inquiry = serializer.save()
        logger.info("Inquiry received: id=%s type=%s", inquiry.pk, inquiry.inquiry_type)

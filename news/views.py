import logging

from django.db.models import F
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser

from permissions import IsStaffOrReadOnly
from responses import EnvelopeViewSetMixin, success
from .filters import NewsFilter
from .models import News
from .serializers import NewsSerializer

logger = logging.getLogger(__name__)


class NewsViewSet(EnvelopeViewSetMixin, viewsets.ModelViewSet):
    queryset = News.objects.all()
    serializer_class = NewsSerializer
    permission_classes = [IsStaffOrReadOnly]
    filter_backends = (DjangoFilterBackend, filters.SearchFilter)
    filterset_class = NewsFilter
    search_fields = ("title", "content")

    required_fields = ("title", "content")
    not_found_message = "뉴스를 찾을 수 없습니다."
    created_message = "뉴스가 등록되었습니다."
    updated_message = "뉴스가 수정되었습니다."
    deleted_message = "뉴스가 삭제되었습니다."

    def get_queryset(self):
        user = self.request.user
        if user.is_authenticated and user.is_staff:
            return News.objects.all()
        return News.objects.filter(is_published=True)

    def retrieve(self, request, *args, **kwargs):
        news = self.get_object()
        if news.is_published:
            News.objects.filter(pk=news.pk).update(view_count=F("view_count") + 1)
            news.refresh_from_db(fields=["view_count"])
        return success(self.get_serializer(news).data)

    @action(detail=True, methods=["post"], permission_classes=[IsAdminUser])
    def publish(self, request, pk=None):
        """Toggle publication, or set it explicitly with {"is_published": bool}."""
        news = self.get_object()
        published = request.data.get("is_published")
        if published is None:
            published = not news.is_published
        elif isinstance(published, str):
            published = published.lower() in ("true", "1", "yes")
        news.set_published(bool(published))
        logger.info("News %s published=%s by user=%s", news.pk, news.is_published, request.user)
        message = "뉴스가 게시되었습니다." if news.is_published else "뉴스 게시가 해제되었습니다."
        return success(self.get_serializer(news).data, message=message)

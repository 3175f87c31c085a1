import logging
from typing import Any

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated, NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "필수 필드가 누락되었습니다."


def success(data: Any = None, message: str = None, status_code: int = status.HTTP_200_OK, **extra) -> Response:
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    body.update(extra)
    return Response(body, status=status_code)


def failure(error: str, status_code: int = status.HTTP_400_BAD_REQUEST, **extra) -> Response:
    body = {"success": False, "error": error}
    body.update(extra)
    return Response(body, status=status_code)


def first_error_message(detail) -> str:
    if isinstance(detail, dict):
        for value in detail.values():
            return first_error_message(value)
        return ""
    if isinstance(detail, (list, tuple)):
        return first_error_message(detail[0]) if detail else ""
    return str(detail)


def api_exception_handler(exc, context):
    """Wrap every DRF error in the {success, error} envelope; unknown errors become a logged 500."""
    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error("Unhandled error in %s", view.__class__.__name__ if view else "view", exc_info=exc)
        return failure("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, ValidationError):
        response.data = {
            "success": False,
            "error": first_error_message(exc.detail) or "잘못된 요청입니다.",
            "errors": exc.detail,
        }
        return response

    if isinstance(exc, NotAuthenticated):
        error = "인증이 필요합니다."
    elif isinstance(exc, (Http404, NotFound)) and not isinstance(getattr(exc, "detail", None), str):
        error = "리소스를 찾을 수 없습니다."
    else:
        error = first_error_message(getattr(exc, "detail", response.data))
    response.data = {"success": False, "error": error}
    return response


def missing_fields(data, required) -> list:
    return [name for name in required if data.get(name) in (None, "")]


class EnvelopeViewSetMixin:
    """
    ModelViewSet mixin that answers in the {success, data, message} envelope,
    rejects creates with missing required fields and soft-deletes when asked to.
    """
    not_found_message = "리소스를 찾을 수 없습니다."
    required_fields = ()
    required_message = REQUIRED_FIELDS_MESSAGE
    created_message = None
    updated_message = None
    deleted_message = None

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound(self.not_found_message)

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        serializer = self.get_serializer(queryset, many=True)
        return success(serializer.data)

    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return success(serializer.data)

    def create(self, request, *args, **kwargs):
        missing = missing_fields(request.data, self.required_fields)
        if missing:
            return failure(self.required_message, missing_fields=missing)
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        return success(serializer.data, message=self.created_message, status_code=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        return success(serializer.data, message=self.updated_message)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.perform_destroy(instance)
        return success(message=self.deleted_message)

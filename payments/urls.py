from django.urls import path

from .views import (
    PaymentConfirmView,
    PaymentListView,
    PaymentRefundView,
    PaymentRequestView,
    PaymentWebhookView,
    VirtualAccountView,
)

urlpatterns = [
    path("", PaymentListView.as_view(), name="payment-list"),
    path("request", PaymentRequestView.as_view(), name="payment-request"),
    path("confirm", PaymentConfirmView.as_view(), name="payment-confirm"),
    path("virtual-account", VirtualAccountView.as_view(), name="payment-virtual-account"),
    path("refund", PaymentRefundView.as_view(), name="payment-refund"),
    path("webhook", PaymentWebhookView.as_view(), name="payment-webhook"),
]

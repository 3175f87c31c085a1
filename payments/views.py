import logging

from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import generics, views
from rest_framework.permissions import AllowAny, IsAdminUser

from responses import failure, success
from . import services
from .filters import PaymentFilter
from .models import Payment
from .serializers import PaymentSerializer
from .services import PaymentError

logger = logging.getLogger(__name__)


def _error(exc: PaymentError):
    return failure(exc.message, exc.status_code, **exc.extra)


class PaymentListView(generics.ListAPIView):
    queryset = Payment.objects.select_related("reservation", "branch")
    serializer_class = PaymentSerializer
    permission_classes = [IsAdminUser]
    filter_backends = (DjangoFilterBackend,)
    filterset_class = PaymentFilter


class PaymentRequestView(views.APIView):
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        try:
            data = services.request_payment(
                request.data.get("reservation_id"),
                payment_method=request.data.get("payment_method") or "card",
                bank=request.data.get("bank"),
            )
        except PaymentError as exc:
            return _error(exc)
        return success(data)


class PaymentConfirmView(views.APIView):
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        try:
            result = services.confirm_card_payment(
                request.data.get("paymentKey"),
                request.data.get("orderId"),
                request.data.get("amount"),
            )
        except PaymentError as exc:
            return _error(exc)

        payment = result["payment"]
        data = {
            "payment": PaymentSerializer(payment).data,
            "toss": result["toss"],
            "splitInfo": services.split_info(payment, services.SETTLEMENT_NOTICE),
        }
        return success(data, message="결제가 완료되었습니다.")


class VirtualAccountView(views.APIView):
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        try:
            data = services.get_virtual_account(request.query_params.get("payment_id"))
        except PaymentError as exc:
            return _error(exc)
        return success(data)

    def post(self, request, *args, **kwargs):
        try:
            result = services.issue_virtual_account(request.data.get("payment_id"), request.data.get("bank"))
        except PaymentError as exc:
            return _error(exc)

        data = services.virtual_account_info(result["payment"])
        if not result["issued"]:
            return success(data, message="이미 발급된 가상계좌 정보입니다.")
        return success(data, message="가상계좌가 발급되었습니다. 입금 기한 내에 입금해주세요.")


class PaymentRefundView(views.APIView):
    permission_classes = [IsAdminUser]

    def post(self, request, *args, **kwargs):
        try:
            result = services.refund_payment(
                request.data.get("payment_id"),
                refund_amount=request.data.get("refund_amount"),
                refund_reason=request.data.get("refund_reason"),
            )
        except PaymentError as exc:
            return _error(exc)

        logger.info("Refund by user=%s payment=%s", request.user, result["payment"].pk)
        return success(
            {"payment": PaymentSerializer(result["payment"]).data, "refundAmount": result["refund_amount"],
             "isFullRefund": result["is_full"]},
            message=f"{result['refund_amount']:,}원이 환불되었습니다.",
        )


@method_decorator(csrf_exempt, name="dispatch")
class PaymentWebhookView(views.APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        try:
            result = services.handle_webhook(request.data)
        except PaymentError as exc:
            return _error(exc)
        return success(result)

from django.contrib import admin

from payments.models import Payment
from .models import Reservation
from .services import ReservationError, apply_reservation_action


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    can_delete = False
    fields = ("pg_order_id", "payment_method", "amount", "status", "paid_at", "refund_amount")
    readonly_fields = fields


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ("reservation_number", "branch", "vehicle", "customer_name", "start_date", "end_date",
                    "total_price", "status", "payment_status", "created_at")
    list_filter = ("status", "payment_status", "branch", "start_date")
    search_fields = ("reservation_number", "customer_name", "customer_phone", "vehicle__license_plate")
    readonly_fields = ("reservation_number", "total_price", "cancelled_at", "created_at", "updated_at")
    date_hierarchy = "start_date"
    inlines = (PaymentInline,)
    actions = ["approve_reservations", "cancel_reservations"]

    def _apply(self, request, queryset, action_name, reason=None):
        done = 0
        for reservation in queryset:
            try:
                apply_reservation_action(reservation, action_name, reason)
                done += 1
            except ReservationError as exc:
                self.message_user(request, f"{reservation.reservation_number}: {exc.message}", level="warning")
        return done

    def approve_reservations(self, request, queryset):
        done = self._apply(request, queryset, "approve")
        self.message_user(request, f"{done} reservation(s) approved.")
    approve_reservations.short_description = "Approve selected reservations"

    def cancel_reservations(self, request, queryset):
        done = self._apply(request, queryset, "cancel", "관리자 취소")
        self.message_user(request, f"{done} reservation(s) cancelled.")
    cancel_reservations.short_description = "Cancel selected reservations"

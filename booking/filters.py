import django_filters

from .models import Reservation


class ReservationFilter(django_filters.FilterSet):
    branch_id = django_filters.NumberFilter(field_name="branch_id")
    vehicle_id = django_filters.NumberFilter(field_name="vehicle_id")
    status = django_filters.ChoiceFilter(choices=Reservation.Status.choices)
    payment_status = django_filters.ChoiceFilter(choices=Reservation.PaymentStatus.choices)
    start_date = django_filters.DateFilter(field_name="start_date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="end_date", lookup_expr="lte")

    class Meta:
        model = Reservation
        fields = ("branch_id", "vehicle_id", "status", "payment_status", "start_date", "end_date")

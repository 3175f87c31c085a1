import django_filters

from .models import Payment


class PaymentFilter(django_filters.FilterSet):
    branch_id = django_filters.NumberFilter(field_name="branch_id")
    status = django_filters.ChoiceFilter(choices=Payment.Status.choices)
    settlement_status = django_filters.ChoiceFilter(choices=Payment.SettlementStatus.choices)
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = Payment
        fields = ("branch_id", "status", "settlement_status", "start_date", "end_date")

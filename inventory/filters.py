from datetime import timedelta

import django_filters
from django.utils import timezone

from .models import Vehicle, VehicleInsurance

EXPIRY_WINDOW_DAYS = 30


class VehicleFilter(django_filters.FilterSet):
    branch_id = django_filters.NumberFilter(field_name="branch_id")
    status = django_filters.ChoiceFilter(choices=Vehicle.Status.choices)
    vehicle_type = django_filters.ChoiceFilter(choices=Vehicle.Type.choices)

    class Meta:
        model = Vehicle
        fields = ("branch_id", "status", "vehicle_type")


class VehicleInsuranceFilter(django_filters.FilterSet):
    branch_id = django_filters.NumberFilter(field_name="branch_id")
    vehicle_id = django_filters.NumberFilter(field_name="vehicle_id")
    expiring_soon = django_filters.BooleanFilter(method="filter_expiring_soon")

    class Meta:
        model = VehicleInsurance
        fields = ("branch_id", "vehicle_id", "expiring_soon")

    def filter_expiring_soon(self, queryset, name, value):
        if not value:
            return queryset
        today = timezone.localdate()
        return queryset.filter(end_date__gte=today, end_date__lte=today + timedelta(days=EXPIRY_WINDOW_DAYS))

import django_filters

from .models import Review


class ReviewFilter(django_filters.FilterSet):
    branch_id = django_filters.NumberFilter(field_name="branch_id")
    vehicle_id = django_filters.NumberFilter(field_name="vehicle_id")
    rating = django_filters.NumberFilter()
    is_approved = django_filters.BooleanFilter()
    is_visible = django_filters.BooleanFilter()

    class Meta:
        model = Review
        fields = ("branch_id", "vehicle_id", "rating", "is_approved", "is_visible")

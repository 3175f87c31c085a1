import django_filters

from .models import Branch


class BranchFilter(django_filters.FilterSet):
    region = django_filters.CharFilter(lookup_expr="icontains")
    type = django_filters.ChoiceFilter(choices=Branch.Type.choices)

    class Meta:
        model = Branch
        fields = ("region", "type", "is_active")

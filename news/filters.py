import django_filters

from .models import News


class NewsFilter(django_filters.FilterSet):
    category = django_filters.ChoiceFilter(choices=News.Category.choices)
    is_published = django_filters.BooleanFilter()

    class Meta:
        model = News
        fields = ("category", "is_published")

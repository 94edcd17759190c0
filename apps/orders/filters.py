import django_filters

from .models import Order


class OrderFilter(django_filters.FilterSet):
    """
    ?userId=<uuid>&status=<STATUS|all>
    """
    userId = django_filters.UUIDFilter(field_name="user_id")
    status = django_filters.CharFilter(method="filter_status")

    class Meta:
        model = Order
        fields = ["userId", "status"]

    def filter_status(self, queryset, name, value):
        if not value or value.lower() == "all":
            return queryset
        return queryset.filter(status=value.upper())

import django_filters
from django.db.models import Q

from .models import InventoryItem


class InventoryFilter(django_filters.FilterSet):
    """
    Search criteria shared by every travel mode. Criteria that do not apply
    to a mode (``airline`` on hotels, say) simply match nothing extra.
    Prices are in minor units.
    """

    location = django_filters.CharFilter(method="filter_location")
    origin = django_filters.CharFilter(method="filter_origin")
    destination = django_filters.CharFilter(method="filter_destination")
    date = django_filters.DateFilter(method="filter_date")
    min_price = django_filters.NumberFilter(field_name="price_cents", lookup_expr="gte", min_value=0)
    max_price = django_filters.NumberFilter(field_name="price_cents", lookup_expr="lte", min_value=0)
    airline = django_filters.CharFilter(field_name="flight__airline", lookup_expr="icontains")
    max_stops = django_filters.NumberFilter(field_name="flight__stops", lookup_expr="lte", min_value=0)
    stars = django_filters.NumberFilter(field_name="hotel__stars", lookup_expr="gte", min_value=0, max_value=5)
    category = django_filters.CharFilter(field_name="car__category", lookup_expr="iexact")

    class Meta:
        model = InventoryItem
        fields = []

    def filter_location(self, queryset, name, value):
        return queryset.filter(
            Q(searchable_location__icontains=value)
            | Q(hotel__location__icontains=value)
            | Q(car__location__icontains=value)
        )

    def filter_origin(self, queryset, name, value):
        return queryset.filter(
            Q(flight__origin__icontains=value)
            | Q(flight__origin_code__iexact=value)
            | Q(train__origin__icontains=value)
            | Q(bus__origin__icontains=value)
        )

    def filter_destination(self, queryset, name, value):
        return queryset.filter(
            Q(flight__destination__icontains=value)
            | Q(flight__destination_code__iexact=value)
            | Q(train__destination__icontains=value)
            | Q(bus__destination__icontains=value)
        )

    def filter_date(self, queryset, name, value):
        return queryset.filter(
            Q(flight__depart_at__date=value) | Q(train__depart_at__date=value) | Q(bus__depart_at__date=value)
        )

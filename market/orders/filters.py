import django_filters
from django.db.models import Q
from .models import Order


class OrderFilter(django_filters.FilterSet):
    """Admin order list filtering"""
    status = django_filters.ChoiceFilter(field_name='order_status', choices=Order.STATUS_CHOICES)
    date_from = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')
    seller = django_filters.NumberFilter(method='filter_seller')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Order
        fields = ['status', 'date_from', 'date_to', 'seller', 'search']

    def filter_seller(self, queryset, name, value):
        return queryset.filter(items__product__seller_id=value).distinct()

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(order_number__icontains=value) |
            Q(recipient_name__icontains=value) |
            Q(recipient_phone__icontains=value) |
            Q(user__username__icontains=value)
        )

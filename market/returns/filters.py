import django_filters
from django.db.models import Q
from .models import ReturnRequest


class ReturnRequestFilter(django_filters.FilterSet):
    """Admin return list filtering"""
    status = django_filters.ChoiceFilter(choices=ReturnRequest.STATUS_CHOICES)
    reason_category = django_filters.ChoiceFilter(choices=ReturnRequest.REASON_CHOICES)
    date_from = django_filters.DateFilter(field_name='requested_at', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='requested_at', lookup_expr='date__lte')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = ReturnRequest
        fields = ['status', 'reason_category', 'date_from', 'date_to', 'search']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(order__order_number__icontains=value) |
            Q(order__user__username__icontains=value) |
            Q(detailed_reason__icontains=value)
        )

import django_filters
from .models import Settlement


class SettlementFilter(django_filters.FilterSet):
    """Admin settlement list filtering"""
    seller = django_filters.NumberFilter(field_name='seller_id')
    status = django_filters.ChoiceFilter(choices=Settlement.STATUS_CHOICES)
    start_date = django_filters.DateFilter(field_name='start_date', lookup_expr='gte')
    end_date = django_filters.DateFilter(field_name='end_date', lookup_expr='lte')

    class Meta:
        model = Settlement
        fields = ['seller', 'status', 'start_date', 'end_date']

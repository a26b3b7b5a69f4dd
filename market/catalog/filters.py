import django_filters
from django.db.models import Q
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Storefront product filtering"""
    search = django_filters.CharFilter(method='filter_search')
    category = django_filters.NumberFilter(method='filter_category')
    seller = django_filters.NumberFilter(field_name='seller_id')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')
    is_event = django_filters.BooleanFilter(field_name='is_event_product')
    in_stock = django_filters.BooleanFilter(method='filter_in_stock')

    class Meta:
        model = Product
        fields = ['search', 'category', 'seller', 'min_price', 'max_price', 'is_event', 'in_stock']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(description__icontains=value) |
            Q(origin__icontains=value)
        )

    def filter_category(self, queryset, name, value):
        """Match the category itself and its direct children"""
        return queryset.filter(Q(category_id=value) | Q(category__parent_id=value))

    def filter_in_stock(self, queryset, name, value):
        if value:
            return queryset.filter(stock__gt=0)
        return queryset.filter(stock=0)


PRODUCT_SORTS = {
    'newest': ['-created_at', '-id'],
    'price_asc': ['price', 'id'],
    'price_desc': ['-price', 'id'],
    'name': ['name', 'id'],
    'popular': ['-reviews_count', '-created_at'],
}


def apply_product_sort(queryset, sort):
    return queryset.order_by(*PRODUCT_SORTS.get(sort or 'newest', PRODUCT_SORTS['newest']))

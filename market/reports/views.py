import logging
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from django.contrib.auth import get_user_model
from django.db.models import Sum, Count, F, DecimalField, ExpressionWrapper
from django.utils import timezone
from datetime import datetime, time, timedelta
from decimal import Decimal

from market.catalog.models import Product
from market.core.cache_utils import get_cached_dashboard_stats, cache_dashboard_stats
from market.core.pricing import calculate_growth_rate
from market.orders.models import Order, OrderItem

logger = logging.getLogger(__name__)

User = get_user_model()


def _month_ranges(now):
    """(today_start, month_start, last_month_start) as aware datetimes"""
    tz = timezone.get_current_timezone()
    today = timezone.localtime(now).date()
    month_start_date = today.replace(day=1)
    last_month_start_date = (month_start_date - timedelta(days=1)).replace(day=1)
    return (
        timezone.make_aware(datetime.combine(today, time.min), tz),
        timezone.make_aware(datetime.combine(month_start_date, time.min), tz),
        timezone.make_aware(datetime.combine(last_month_start_date, time.min), tz),
    )


def _sales(queryset):
    return queryset.aggregate(total=Sum('final_amount'))['total'] or Decimal('0.00')


def top_products(since, limit=5):
    """Best sellers by quantity among sold orders created since a moment"""
    rows = OrderItem.objects.filter(
        order__order_status__in=Order.SOLD_STATUSES,
        order__created_at__gte=since,
    ).values('product_id', 'product_name').annotate(
        quantity_sold=Sum('quantity'),
        revenue=Sum(ExpressionWrapper(F('price') * F('quantity'),
                                      output_field=DecimalField(max_digits=14, decimal_places=2))),
        order_count=Count('order', distinct=True),
    ).order_by('-quantity_sold', 'product_name')[:limit]
    return [
        {
            'product_id': row['product_id'],
            'product_name': row['product_name'],
            'quantity_sold': row['quantity_sold'],
            'revenue': row['revenue'] or Decimal('0.00'),
            'order_count': row['order_count'],
        }
        for row in rows
    ]


def build_dashboard_stats(now=None):
    now = now or timezone.now()
    today_start, month_start, last_month_start = _month_ranges(now)

    sold = Order.objects.filter(order_status__in=Order.SOLD_STATUSES)
    month_sales = _sales(sold.filter(created_at__gte=month_start, created_at__lte=now))
    last_month_sales = _sales(sold.filter(created_at__gte=last_month_start, created_at__lt=month_start))

    orders = Order.objects.all()
    month_orders = orders.filter(created_at__gte=month_start, created_at__lte=now).count()
    last_month_orders = orders.filter(created_at__gte=last_month_start, created_at__lt=month_start).count()

    month_new_users = User.objects.filter(date_joined__gte=month_start, date_joined__lte=now).count()
    last_month_new_users = User.objects.filter(
        date_joined__gte=last_month_start, date_joined__lt=month_start
    ).count()

    return {
        'total_sales': _sales(sold),
        'today_sales': _sales(sold.filter(created_at__gte=today_start)),
        'month_sales': month_sales,
        'sales_growth_rate': calculate_growth_rate(month_sales, last_month_sales),
        'total_orders': orders.count(),
        'today_orders': orders.filter(created_at__gte=today_start).count(),
        'month_orders': month_orders,
        'orders_growth_rate': calculate_growth_rate(month_orders, last_month_orders),
        'pending_orders': orders.filter(order_status=Order.STATUS_PENDING_PAYMENT).count(),
        'total_users': User.objects.count(),
        'today_new_users': User.objects.filter(date_joined__gte=today_start).count(),
        'users_growth_rate': calculate_growth_rate(month_new_users, last_month_new_users),
        'low_stock_count': Product.objects.filter(
            is_active=True, stock__lte=F('low_stock_threshold')
        ).count(),
        'top_products': top_products(month_start),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def dashboard_stats(request):
    """Admin dashboard KPIs, cached for a few minutes"""
    today = timezone.localdate()
    cached_data, cache_key = get_cached_dashboard_stats(today)
    if cached_data is not None:
        response = Response(cached_data)
        response['X-Cache'] = 'HIT'
        return response

    data = build_dashboard_stats()
    cache_dashboard_stats(cache_key, data)
    response = Response(data)
    response['X-Cache'] = 'MISS'
    return response

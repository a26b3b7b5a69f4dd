"""
Test suite for reports module
Tests: Dashboard KPIs, Growth rates, Top products
"""
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from datetime import timedelta
from decimal import Decimal

from market.core.test_utils import TestDataFactory, AuthenticatedAPIClient, LOCMEM_CACHES
from market.orders.models import Order
from market.reports.views import _month_ranges, build_dashboard_stats

User = get_user_model()


class DashboardStatsTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.customer = TestDataFactory.create_user()
        self.apple = TestDataFactory.create_product(name='Apple', price=Decimal('10000'), stock=100)
        self.pear = TestDataFactory.create_product(name='Pear', price=Decimal('5000'), stock=3)
        _, self.month_start, _ = _month_ranges(timezone.now())

    def test_sales_count_sold_orders_only(self):
        TestDataFactory.create_order(self.customer, [(self.apple, 2)], status=Order.STATUS_PAID)
        TestDataFactory.create_order(self.customer, [(self.pear, 1)], status=Order.STATUS_DELIVERED)
        TestDataFactory.create_order(self.customer, [(self.apple, 5)])
        TestDataFactory.create_order(self.customer, [(self.apple, 5)], status=Order.STATUS_CANCELLED)

        stats = build_dashboard_stats()
        self.assertEqual(stats['total_sales'], Decimal('25000'))
        self.assertEqual(stats['today_sales'], Decimal('25000'))
        self.assertEqual(stats['total_orders'], 4)
        self.assertEqual(stats['pending_orders'], 1)

    def test_growth_rate_against_last_month(self):
        last_month = self.month_start - timedelta(days=1)
        TestDataFactory.create_order(
            self.customer, [(self.apple, 2)], status=Order.STATUS_DELIVERED, created_at=last_month
        )
        TestDataFactory.create_order(self.customer, [(self.apple, 3)], status=Order.STATUS_PAID)

        stats = build_dashboard_stats()
        self.assertEqual(stats['month_sales'], Decimal('30000'))
        self.assertEqual(stats['sales_growth_rate'], 50.0)
        self.assertEqual(stats['orders_growth_rate'], 0.0)

    def test_growth_from_empty_month(self):
        TestDataFactory.create_order(self.customer, [(self.apple, 1)], status=Order.STATUS_PAID)
        stats = build_dashboard_stats()
        self.assertEqual(stats['sales_growth_rate'], 100.0)

    def test_users_and_low_stock(self):
        User.objects.filter(pk=self.customer.pk).update(date_joined=self.month_start - timedelta(days=3))
        stats = build_dashboard_stats()
        self.assertEqual(stats['total_users'], 2)
        self.assertEqual(stats['today_new_users'], 1)
        self.assertEqual(stats['low_stock_count'], 1)

    def test_top_products(self):
        TestDataFactory.create_order(self.customer, [(self.apple, 2), (self.pear, 6)], status=Order.STATUS_PAID)
        TestDataFactory.create_order(self.customer, [(self.apple, 1)], status=Order.STATUS_SHIPPED)
        stats = build_dashboard_stats()
        top = stats['top_products']
        self.assertEqual([row['product_name'] for row in top], ['Pear', 'Apple'])
        self.assertEqual(top[1]['quantity_sold'], 3)
        self.assertEqual(top[1]['order_count'], 2)
        self.assertEqual(top[1]['revenue'], Decimal('30000'))

    def test_endpoint(self):
        response = self.client.get('/api/v1/admin/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['X-Cache'], 'MISS')
        self.assertIn('sales_growth_rate', response.data)

    def test_customer_forbidden(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/admin/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


@override_settings(CACHES=LOCMEM_CACHES)
class DashboardCacheTests(TestCase):
    """Dashboard figures are cached until order data changes"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_admin())
        self.customer = TestDataFactory.create_user()
        self.apple = TestDataFactory.create_product(name='Apple', price=Decimal('10000'), stock=100)

    def tearDown(self):
        cache.clear()

    def test_hit_then_miss_after_new_order(self):
        first = self.client.get('/api/v1/admin/dashboard/')
        self.assertEqual(first['X-Cache'], 'MISS')
        self.assertEqual(first.data['total_orders'], 0)
        self.assertEqual(self.client.get('/api/v1/admin/dashboard/')['X-Cache'], 'HIT')

        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.create_order(self.customer, [(self.apple, 1)], status=Order.STATUS_PAID)

        response = self.client.get('/api/v1/admin/dashboard/')
        self.assertEqual(response['X-Cache'], 'MISS')
        self.assertEqual(response.data['total_orders'], 1)

"""
Test suite for sellers module
Tests: Seller management, Settlement generation, Settlement status flow, Statistics
"""
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from datetime import timedelta
from decimal import Decimal

from market.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from market.orders.models import Order
from market.sellers import utils
from market.sellers.models import Seller, Settlement


class SellerTests(TestCase):
    """Test seller endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_seller(self):
        response = self.client.post('/api/v1/admin/sellers/', {
            'name': 'Green Valley Farm',
            'business_number': '123-45-67890',
            'commission_rate': '12.50',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['product_count'], 0)

    def test_duplicate_business_number(self):
        TestDataFactory.create_seller(business_number='123-45-67890')
        response = self.client.post('/api/v1/admin/sellers/', {
            'name': 'Copy Farm', 'business_number': '123-45-67890'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search_and_active_filter(self):
        TestDataFactory.create_seller(name='Sunny Orchard')
        inactive = TestDataFactory.create_seller(name='Sunny Dairy')
        inactive.is_active = False
        inactive.save()
        response = self.client.get('/api/v1/admin/sellers/?search=sunny&is_active=true')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([seller['name'] for seller in response.data['results']], ['Sunny Orchard'])

    def test_toggle_status(self):
        seller = TestDataFactory.create_seller()
        response = self.client.patch(f'/api/v1/admin/sellers/{seller.id}/status/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])

    def test_delete_with_settlements_blocked(self):
        seller = TestDataFactory.create_seller()
        today = timezone.localdate()
        utils.generate_settlement(seller, today, today)
        response = self.client.delete(f'/api/v1/admin/sellers/{seller.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Seller.objects.filter(pk=seller.id).exists())

    def test_regular_user_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/admin/sellers/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class SettlementTests(TestCase):
    """Test settlement generation and status transitions"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.customer = TestDataFactory.create_user()
        self.seller = TestDataFactory.create_seller(commission_rate=Decimal('10'))
        self.product = TestDataFactory.create_product(price=Decimal('10000'), seller=self.seller)
        self.today = timezone.localdate()

        TestDataFactory.create_order(self.customer, [(self.product, 2)], status=Order.STATUS_PAID)
        TestDataFactory.create_order(self.customer, [(self.product, 1)], status=Order.STATUS_DELIVERED)
        TestDataFactory.create_order(self.customer, [(self.product, 5)])
        TestDataFactory.create_order(self.customer, [(self.product, 5)], status=Order.STATUS_CANCELLED)

    def generate(self, **extra):
        payload = {'seller_id': self.seller.id, 'start_date': str(self.today), 'end_date': str(self.today)}
        payload.update(extra)
        return self.client.post('/api/v1/admin/settlements/', payload, format='json')

    def test_generate_counts_sold_orders_only(self):
        response = self.generate()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['total_sales_amount']), Decimal('30000'))
        self.assertEqual(Decimal(response.data['commission_amount']), Decimal('3000'))
        self.assertEqual(Decimal(response.data['settlement_amount']), Decimal('27000'))
        self.assertEqual(response.data['order_count'], 2)
        self.assertEqual(response.data['status'], Settlement.STATUS_PENDING)

    def test_period_outside_orders(self):
        yesterday = str(self.today - timedelta(days=1))
        response = self.generate(start_date=yesterday, end_date=yesterday)
        self.assertEqual(Decimal(response.data['total_sales_amount']), Decimal('0'))

    def test_duplicate_period_rejected(self):
        self.generate()
        response = self.generate()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_start_after_end_rejected(self):
        response = self.generate(start_date=str(self.today + timedelta(days=1)))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_seller_id_required(self):
        response = self.client.post('/api/v1/admin/settlements/', {
            'start_date': str(self.today), 'end_date': str(self.today)
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_generate_all_skips_existing(self):
        TestDataFactory.create_seller()
        self.generate()
        response = self.client.post('/api/v1/admin/settlements/generate-all/', {
            'start_date': str(self.today), 'end_date': str(self.today)
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created_count'], 1)
        self.assertEqual(response.data['skipped_count'], 1)
        self.assertEqual(response.data['skipped'][0]['seller_id'], self.seller.id)

    def test_status_flow(self):
        settlement_id = self.generate().data['id']
        base = f'/api/v1/admin/settlements/{settlement_id}'

        response = self.client.post(f'{base}/pay/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'{base}/approve/')
        self.assertEqual(response.data['status'], Settlement.STATUS_APPROVED)
        self.assertIsNotNone(response.data['approved_at'])

        response = self.client.post(f'{base}/pay/')
        self.assertEqual(response.data['status'], Settlement.STATUS_PAID)
        self.assertEqual(response.data['settled_by'], self.admin.id)

        response = self.client.post(f'{base}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancelled_period_can_be_regenerated(self):
        settlement_id = self.generate().data['id']
        self.client.post(f'/api/v1/admin/settlements/{settlement_id}/cancel/')
        response = self.generate()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_update_commission_recomputes(self):
        settlement_id = self.generate().data['id']
        response = self.client.patch(f'/api/v1/admin/settlements/{settlement_id}/', {
            'commission_rate': '5', 'memo': 'Promotional rate'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['commission_amount']), Decimal('1500'))
        self.assertEqual(Decimal(response.data['settlement_amount']), Decimal('28500'))

    def test_update_after_approval_rejected(self):
        settlement_id = self.generate().data['id']
        self.client.post(f'/api/v1/admin/settlements/{settlement_id}/approve/')
        response = self.client.patch(f'/api/v1/admin/settlements/{settlement_id}/', {'memo': 'late'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filter_and_stats(self):
        settlement_id = self.generate().data['id']
        self.client.post(f'/api/v1/admin/settlements/{settlement_id}/approve/')
        response = self.client.get(f'/api/v1/admin/settlements/?status={Settlement.STATUS_APPROVED}')
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/v1/admin/settlements/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_count'], 1)
        self.assertEqual(response.data['by_status'][Settlement.STATUS_APPROVED]['count'], 1)

    def test_list_rejects_malformed_filters(self):
        self.generate()
        for query in ('seller=abc', 'start_date=not-a-date', 'end_date=2024-13-45', 'status=UNKNOWN'):
            response = self.client.get(f'/api/v1/admin/settlements/?{query}')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, query)
        response = self.client.get('/api/v1/admin/settlements/stats/?seller=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filter_by_seller_and_period(self):
        self.generate()
        response = self.client.get(f'/api/v1/admin/settlements/?seller={self.seller.id}')
        self.assertEqual(response.data['count'], 1)
        response = self.client.get(f'/api/v1/admin/settlements/?seller={self.seller.id + 1000}')
        self.assertEqual(response.data['count'], 0)

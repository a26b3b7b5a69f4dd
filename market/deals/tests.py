"""
Test suite for deals module
Tests: Ongoing/upcoming listings, Admin deal management, Deal products
"""
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from datetime import timedelta

from market.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from market.deals.models import SpecialDeal


def create_deal(title, start_offset_hours, end_offset_hours, **extra):
    now = timezone.now()
    return SpecialDeal.objects.create(
        title=title,
        start_time=now + timedelta(hours=start_offset_hours),
        end_time=now + timedelta(hours=end_offset_hours),
        **extra
    )


class StorefrontDealTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.product = TestDataFactory.create_product(name='Jeju Tangerine')
        self.ongoing = create_deal('Morning sale', -1, 5)
        self.ongoing.products.add(self.product)
        self.upcoming = create_deal('Weekend sale', 24, 48)
        self.expired = create_deal('Last week', -200, -100)
        self.hidden = create_deal('Draft', -1, 5, is_active=False)

    def test_ongoing(self):
        response = self.client.get('/api/v1/special-deals/ongoing/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([deal['title'] for deal in response.data], ['Morning sale'])
        self.assertEqual(response.data[0]['products'][0]['name'], 'Jeju Tangerine')
        self.assertTrue(response.data[0]['is_ongoing'])

    def test_upcoming(self):
        response = self.client.get('/api/v1/special-deals/upcoming/')
        self.assertEqual([deal['title'] for deal in response.data], ['Weekend sale'])
        self.assertTrue(response.data[0]['is_upcoming'])

    def test_inactive_detail_hidden(self):
        response = self.client.get(f'/api/v1/special-deals/{self.hidden.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.get(f'/api/v1/special-deals/{self.expired.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_expired'])


class AdminDealTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.product = TestDataFactory.create_product()

    def test_create_with_products(self):
        now = timezone.now()
        response = self.client.post('/api/v1/admin/special-deals/', {
            'title': 'Harvest festival',
            'start_time': now.isoformat(),
            'end_time': (now + timedelta(days=3)).isoformat(),
            'discount_rate': 30,
            'product_ids': [self.product.id],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual([product['id'] for product in response.data['products']], [self.product.id])

    def test_end_before_start_rejected(self):
        now = timezone.now()
        response = self.client.post('/api/v1/admin/special-deals/', {
            'title': 'Broken',
            'start_time': now.isoformat(),
            'end_time': (now - timedelta(hours=1)).isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('end_time', response.data)

    def test_add_and_remove_product(self):
        deal = create_deal('Flash', 0, 2)
        url = f'/api/v1/admin/special-deals/{deal.id}/products/{self.product.id}/'
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['products']), 1)
        response = self.client.delete(url)
        self.assertEqual(response.data['products'], [])

    def test_update_and_delete(self):
        deal = create_deal('Flash', 0, 2)
        response = self.client.patch(
            f'/api/v1/admin/special-deals/{deal.id}/', {'display_order': 3}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['display_order'], 3)
        response = self.client.delete(f'/api/v1/admin/special-deals/{deal.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_customer_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/admin/special-deals/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

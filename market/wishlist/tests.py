"""
Test suite for wishlist module
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal

from market.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from market.reviews.models import Review
from market.wishlist.models import WishlistItem


class WishlistTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(price=Decimal('20000'), discount_rate=25)

    def test_add_and_list(self):
        Review.objects.create(product=self.product, user=TestDataFactory.create_user(), rating=4, content='Good')
        response = self.client.post('/api/v1/wishlist/', {'product_id': self.product.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get('/api/v1/wishlist/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(Decimal(response.data[0]['discounted_price']), Decimal('15000'))
        self.assertEqual(response.data[0]['average_rating'], 4.0)
        self.assertEqual(response.data[0]['review_count'], 1)

    def test_duplicate_rejected(self):
        WishlistItem.objects.create(user=self.user, product=self.product)
        response = self.client.post('/api/v1/wishlist/', {'product_id': self.product.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_product(self):
        response = self.client.post('/api/v1/wishlist/', {'product_id': 999999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_check_and_remove(self):
        WishlistItem.objects.create(user=self.user, product=self.product)
        response = self.client.get(f'/api/v1/wishlist/{self.product.id}/check/')
        self.assertTrue(response.data['in_wishlist'])

        response = self.client.delete(f'/api/v1/wishlist/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        response = self.client.get(f'/api/v1/wishlist/{self.product.id}/check/')
        self.assertFalse(response.data['in_wishlist'])

    def test_lists_are_per_user(self):
        WishlistItem.objects.create(user=TestDataFactory.create_user(), product=self.product)
        response = self.client.get('/api/v1/wishlist/')
        self.assertEqual(response.data, [])

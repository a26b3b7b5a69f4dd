"""
Test suite for inventory module
Tests: Statistics, Item listing, Single stock updates, Bulk set/adjust, Adjustment history
"""
from django.core.cache import cache
from django.test import TestCase, override_settings
from rest_framework import status
from decimal import Decimal
from unittest.mock import patch

from market.catalog.models import Product, ProductOption
from market.core.models import AuditLog
from market.core.test_utils import TestDataFactory, AuthenticatedAPIClient, LOCMEM_CACHES
from market.inventory.models import StockAdjustment


class InventoryQueryTests(TestCase):
    """Test statistics and the item list"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.apple = TestDataFactory.create_product(name='Apple', price=Decimal('1000'), stock=50)
        self.pear = TestDataFactory.create_product(name='Pear', price=Decimal('2000'), stock=5)
        self.plum = TestDataFactory.create_product(name='Plum', price=Decimal('3000'), stock=0)
        self.apple_box = TestDataFactory.create_option(
            self.apple, option_name='Gift box', additional_price=Decimal('500'), stock=2
        )

    def test_statistics(self):
        response = self.client.get('/api/v1/admin/inventory/statistics/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_products'], 3)
        self.assertEqual(response.data['total_options'], 1)
        self.assertEqual(response.data['in_stock_count'], 1)
        self.assertEqual(response.data['low_stock_count'], 2)
        self.assertEqual(response.data['sold_out_count'], 1)
        # 1000*50 + 2000*5 + 1500*2
        self.assertEqual(Decimal(str(response.data['total_stock_value'])), Decimal('63000'))

    def test_items_filter_by_status(self):
        response = self.client.get('/api/v1/admin/inventory/items/?stock_status=low_stock')
        names = [row['name'] for row in response.data['results']]
        self.assertEqual(names, ['Apple - Gift box', 'Pear'])

    def test_items_keyword_matches_option(self):
        response = self.client.get('/api/v1/admin/inventory/items/?keyword=gift')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['type'], StockAdjustment.ITEM_OPTION)
        self.assertEqual(Decimal(response.data['results'][0]['price']), Decimal('1500'))

    def test_regular_user_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/admin/inventory/statistics/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class StockUpdateTests(TestCase):
    """Test stock changes and their history"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.product = TestDataFactory.create_product(stock=10)
        self.option = TestDataFactory.create_option(self.product, stock=3)

    def test_set_product_stock(self):
        response = self.client.put(f'/api/v1/admin/inventory/products/{self.product.id}/stock/', {
            'stock': 25, 'reason': 'Delivery received'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['previous_stock'], 10)
        self.assertEqual(response.data['change'], 15)
        self.assertEqual(response.data['created_by'], self.admin.id)
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 25)

    def test_negative_stock_rejected(self):
        response = self.client.put(
            f'/api/v1/admin/inventory/options/{self.option.id}/stock/', {'stock': -1}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(ProductOption.objects.get(pk=self.option.id).stock, 3)

    def test_threshold_update(self):
        response = self.client.patch(
            f'/api/v1/admin/inventory/products/{self.product.id}/threshold/', {'threshold': 20}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stock_status'], 'low_stock')

    def test_bulk_update(self):
        response = self.client.post('/api/v1/admin/inventory/bulk-update/', {
            'items': [
                {'id': self.product.id, 'type': 'PRODUCT', 'new_stock': 40},
                {'id': self.option.id, 'type': 'OPTION', 'new_stock': 8},
            ],
            'reason': 'Stocktake',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['updated_count'], 2)
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 40)
        self.assertEqual(ProductOption.objects.get(pk=self.option.id).stock, 8)
        self.assertTrue(AuditLog.objects.filter(action='stock_bulk_update').exists())

    def test_bulk_update_missing_item_rolls_back(self):
        response = self.client.post('/api/v1/admin/inventory/bulk-update/', {
            'items': [
                {'id': self.product.id, 'type': 'PRODUCT', 'new_stock': 40},
                {'id': 999999, 'type': 'OPTION', 'new_stock': 8},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 10)
        self.assertFalse(StockAdjustment.objects.exists())

    def test_bulk_update_rejects_negative(self):
        response = self.client.post('/api/v1/admin/inventory/bulk-update/', {
            'items': [{'id': self.product.id, 'type': 'PRODUCT', 'new_stock': -5}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_adjust_floors_at_zero(self):
        response = self.client.post('/api/v1/admin/inventory/bulk-adjust/', {
            'items': [
                {'id': self.product.id, 'type': 'PRODUCT'},
                {'id': self.option.id, 'type': 'OPTION'},
            ],
            'delta': -5,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 5)
        self.assertEqual(ProductOption.objects.get(pk=self.option.id).stock, 0)

    def test_bulk_adjust_item_delta_overrides(self):
        self.client.post('/api/v1/admin/inventory/bulk-adjust/', {
            'items': [
                {'id': self.product.id, 'type': 'PRODUCT', 'delta': 7},
                {'id': self.option.id, 'type': 'OPTION'},
            ],
            'delta': 1,
        }, format='json')
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 17)
        self.assertEqual(ProductOption.objects.get(pk=self.option.id).stock, 4)

    def test_bulk_adjust_requires_delta(self):
        response = self.client.post('/api/v1/admin/inventory/bulk-adjust/', {
            'items': [{'id': self.product.id, 'type': 'PRODUCT'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_adjustment_history(self):
        self.client.put(f'/api/v1/admin/inventory/products/{self.product.id}/stock/', {'stock': 12}, format='json')
        self.client.put(f'/api/v1/admin/inventory/options/{self.option.id}/stock/', {'stock': 6}, format='json')
        response = self.client.get('/api/v1/admin/inventory/adjustments/?item_type=OPTION')
        self.assertEqual(response.data['count'], 1)
        response = self.client.get(f'/api/v1/admin/inventory/adjustments/?product={self.product.id}')
        self.assertEqual(response.data['count'], 2)


@override_settings(CACHES=LOCMEM_CACHES)
class InventoryCacheTests(TestCase):
    """Bulk stock changes drop the product list cache once, after the writes"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_admin())
        self.storefront = AuthenticatedAPIClient()
        self.product = TestDataFactory.create_product(name='Kiwi', stock=10)
        self.other = TestDataFactory.create_product(name='Lime', stock=10)

    def tearDown(self):
        cache.clear()

    def bulk_update(self):
        return self.client.post('/api/v1/admin/inventory/bulk-update/', {
            'items': [
                {'id': self.product.id, 'type': 'PRODUCT', 'new_stock': 40},
                {'id': self.other.id, 'type': 'PRODUCT', 'new_stock': 0},
            ],
            'reason': 'Stocktake',
        }, format='json')

    def test_bulk_update_refreshes_product_list(self):
        self.storefront.get('/api/v1/products/')
        self.assertEqual(self.storefront.get('/api/v1/products/')['X-Cache'], 'HIT')

        with self.captureOnCommitCallbacks(execute=True):
            response = self.bulk_update()
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.storefront.get('/api/v1/products/')
        self.assertEqual(response['X-Cache'], 'MISS')
        stocks = {entry['name']: entry['stock'] for entry in response.data['results']}
        self.assertEqual(stocks, {'Kiwi': 40, 'Lime': 0})

    @patch('market.inventory.views.invalidate_products_cache')
    @patch('market.core.cache_signals.invalidate_products_cache')
    def test_bulk_update_invalidates_once(self, signal_invalidate, view_invalidate):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.bulk_update()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        signal_invalidate.assert_not_called()
        view_invalidate.assert_called_once()

    @patch('market.core.cache_signals.invalidate_products_cache')
    def test_single_update_uses_signal(self, signal_invalidate):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.patch(
                f'/api/v1/admin/inventory/products/{self.product.id}/stock/', {'stock': 3}, format='json'
            )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        signal_invalidate.assert_called()

"""
Test suite for catalog module
Tests: Categories, Storefront product list/detail, Shipping quotes, Admin products and options
"""
from django.core.cache import cache
from django.test import TestCase, override_settings
from rest_framework import status
from decimal import Decimal

from market.catalog.models import Product, ProductNotice
from market.core.models import AuditLog
from market.core.test_utils import TestDataFactory, AuthenticatedAPIClient, LOCMEM_CACHES
from market.reviews.models import Review


class StorefrontProductTests(TestCase):
    """Test public product endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.fruit = TestDataFactory.create_category(name='Fruit')
        self.berries = TestDataFactory.create_category(name='Berries', parent=self.fruit)
        self.apple = TestDataFactory.create_product(
            name='Apple', price=Decimal('12000'), category=self.fruit, discount_rate=10
        )
        self.strawberry = TestDataFactory.create_product(
            name='Strawberry', price=Decimal('8000'), category=self.berries, stock=0
        )
        self.hidden = TestDataFactory.create_product(name='Hidden', category=self.fruit, is_active=False)

    def test_list_only_active(self):
        response = self.client.get('/api/v1/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = [item['name'] for item in response.data['results']]
        self.assertIn('Apple', names)
        self.assertNotIn('Hidden', names)

    def test_category_filter_includes_children(self):
        response = self.client.get(f'/api/v1/products/?category={self.fruit.id}')
        self.assertEqual(response.data['count'], 2)

    def test_in_stock_filter(self):
        response = self.client.get('/api/v1/products/?in_stock=true')
        names = [item['name'] for item in response.data['results']]
        self.assertEqual(names, ['Apple'])

    def test_price_sort(self):
        response = self.client.get('/api/v1/products/?sort=price_asc')
        names = [item['name'] for item in response.data['results']]
        self.assertEqual(names, ['Strawberry', 'Apple'])

    def test_detail_includes_discount_and_rating(self):
        user = TestDataFactory.create_user()
        Review.objects.create(product=self.apple, user=user, rating=4, content='Crisp')
        Review.objects.create(product=self.apple, user=TestDataFactory.create_user(), rating=5, content='Sweet')
        response = self.client.get(f'/api/v1/products/{self.apple.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['discounted_price']), Decimal('10800'))
        self.assertEqual(response.data['average_rating'], 4.5)
        self.assertEqual(response.data['review_count'], 2)
        self.assertIsNone(response.data['notice'])

    def test_inactive_detail_not_found(self):
        response = self.client.get(f'/api/v1/products/{self.hidden.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_options_only_available(self):
        TestDataFactory.create_option(self.apple, option_name='5kg')
        TestDataFactory.create_option(self.apple, option_name='10kg', is_available=False)
        response = self.client.get(f'/api/v1/products/{self.apple.id}/options/')
        self.assertEqual([option['option_name'] for option in response.data], ['5kg'])

    def test_notice(self):
        ProductNotice.objects.create(product=self.apple, food_type='Fresh fruit', manufacturer='Orchard')
        response = self.client.get(f'/api/v1/products/{self.apple.id}/notice/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['food_type'], 'Fresh fruit')

    def test_shipping_quote_combined(self):
        product = TestDataFactory.create_product(
            shipping_fee=Decimal('3000'), can_combine_shipping=True, combine_shipping_unit=2
        )
        response = self.client.get(f'/api/v1/products/{product.id}/shipping-quote/?quantity=5')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(str(response.data['shipping_fee'])), Decimal('9000'))

    def test_shipping_quote_invalid_quantity(self):
        response = self.client.get(f'/api/v1/products/{self.apple.id}/shipping-quote/?quantity=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_category_tree(self):
        response = self.client.get('/api/v1/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        fruit = next(category for category in response.data if category['name'] == 'Fruit')
        self.assertEqual([child['name'] for child in fruit['children']], ['Berries'])


class AdminProductTests(TestCase):
    """Test admin product management"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.category = TestDataFactory.create_category()
        self.seller = TestDataFactory.create_seller()

    def product_payload(self, **overrides):
        payload = {
            'name': 'Organic Carrot',
            'category': self.category.id,
            'seller': self.seller.id,
            'price': '5000',
            'stock': 30,
            'shipping_fee': '3000',
        }
        payload.update(overrides)
        return payload

    def test_create_product_uses_default_threshold(self):
        response = self.client.post('/api/v1/admin/products/', self.product_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        product = Product.objects.get(pk=response.data['id'])
        self.assertEqual(product.low_stock_threshold, 10)
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Product').exists())

    def test_combined_shipping_requires_unit(self):
        response = self.client.post(
            '/api/v1/admin/products/', self.product_payload(can_combine_shipping=True), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('combine_shipping_unit', response.data)

    def test_max_below_min_rejected(self):
        response = self.client.post(
            '/api/v1/admin/products/',
            self.product_payload(min_order_quantity=5, max_order_quantity=2),
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_records_changes(self):
        product = TestDataFactory.create_product(price=Decimal('5000'))
        response = self.client.patch(f'/api/v1/admin/products/{product.id}/', {'price': '6000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        log = AuditLog.objects.filter(action='update', model_name='Product').latest('created_at')
        self.assertEqual(log.changes['price']['new'], '6000.00')

    def test_regular_user_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post('/api/v1/admin/products/', self.product_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_option_crud(self):
        product = TestDataFactory.create_product()
        response = self.client.post(f'/api/v1/admin/products/{product.id}/options/', {
            'option_name': '2kg box', 'additional_price': '4000', 'stock': 20
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        option_id = response.data['id']

        response = self.client.patch(
            f'/api/v1/admin/products/{product.id}/options/{option_id}/', {'stock': -1}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.delete(f'/api/v1/admin/products/{product.id}/options/{option_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_option_of_other_product(self):
        product = TestDataFactory.create_product()
        other_option = TestDataFactory.create_option(TestDataFactory.create_product())
        response = self.client.get(f'/api/v1/admin/products/{product.id}/options/{other_option.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_notice_upsert(self):
        product = TestDataFactory.create_product()
        url = f'/api/v1/admin/products/{product.id}/notice/'
        response = self.client.put(url, {'food_type': 'Vegetable'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.put(url, {'food_type': 'Root vegetable'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(ProductNotice.objects.get(product=product).food_type, 'Root vegetable')


@override_settings(CACHES=LOCMEM_CACHES)
class CatalogCacheTests(TestCase):
    """Test product list and category tree caching with a real cache backend"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.admin_client = AuthenticatedAPIClient()
        self.admin_client.authenticate_user(TestDataFactory.create_admin())
        self.melon = TestDataFactory.create_product(name='Melon', price=Decimal('20000'))

    def tearDown(self):
        cache.clear()

    def test_second_request_is_a_hit(self):
        first = self.client.get('/api/v1/products/')
        self.assertEqual(first['X-Cache'], 'MISS')
        second = self.client.get('/api/v1/products/')
        self.assertEqual(second['X-Cache'], 'HIT')
        self.assertEqual(second.data, first.data)

    def test_filters_are_cached_separately(self):
        self.client.get('/api/v1/products/')
        response = self.client.get('/api/v1/products/?sort=price_asc')
        self.assertEqual(response['X-Cache'], 'MISS')

    def test_product_edit_invalidates_list(self):
        self.client.get('/api/v1/products/')
        with self.captureOnCommitCallbacks(execute=True):
            response = self.admin_client.patch(
                f'/api/v1/admin/products/{self.melon.id}/', {'price': '25000'}, format='json'
            )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.get('/api/v1/products/')
        self.assertEqual(response['X-Cache'], 'MISS')
        self.assertEqual(Decimal(str(response.data['results'][0]['price'])), Decimal('25000'))

    def test_invalidation_waits_for_commit(self):
        self.client.get('/api/v1/products/')
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            self.admin_client.patch(f'/api/v1/admin/products/{self.melon.id}/', {'price': '25000'}, format='json')
        self.assertTrue(callbacks)
        response = self.client.get('/api/v1/products/')
        self.assertEqual(response['X-Cache'], 'HIT')

    def test_new_category_invalidates_tree(self):
        response = self.client.get('/api/v1/categories/')
        names = [entry['name'] for entry in response.data]
        self.assertNotIn('Herbs', names)

        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.create_category(name='Herbs')
        response = self.client.get('/api/v1/categories/')
        self.assertIn('Herbs', [entry['name'] for entry in response.data])

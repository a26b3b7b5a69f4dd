"""
Test suite for orders module
Tests: Cart, Checkout preview, Order creation, Payment, Cancellation, Admin status and tracking
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from unittest.mock import patch

from market.catalog.models import Product, ProductOption
from market.core.exceptions import BusinessError
from market.core.models import AuditLog
from market.core.pricing import PERCENTAGE
from market.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from market.coupons.models import Coupon, UserCoupon
from market.orders import utils
from market.orders.models import CartItem, Order


SHIPPING = {
    'recipient_name': 'Kim Minji',
    'recipient_phone': '010-1234-5678',
    'shipping_postcode': '06236',
    'shipping_address_line1': '123 Teheran-ro',
}


class CartTests(TestCase):
    """Test cart endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(price=Decimal('10000'), stock=5)

    def test_add_merges_same_line(self):
        self.client.post('/api/v1/cart/items/', {'product_id': self.product.id, 'quantity': 2}, format='json')
        response = self.client.post(
            '/api/v1/cart/items/', {'product_id': self.product.id, 'quantity': 1}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['quantity'], 3)
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 1)

    def test_add_beyond_stock(self):
        response = self.client.post(
            '/api/v1/cart/items/', {'product_id': self.product.id, 'quantity': 6}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Insufficient stock', response.data['error'])

    def test_add_unknown_product(self):
        response = self.client.post('/api/v1/cart/items/', {'product_id': 999999, 'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_cart_totals(self):
        self.client.post('/api/v1/cart/items/', {'product_id': self.product.id, 'quantity': 2}, format='json')
        response = self.client.get('/api/v1/cart/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['subtotal']), Decimal('20000'))
        self.assertEqual(Decimal(response.data['shipping_fee']), Decimal('6000'))
        self.assertEqual(Decimal(response.data['total']), Decimal('26000'))

    def test_update_and_remove_item(self):
        response = self.client.post(
            '/api/v1/cart/items/', {'product_id': self.product.id, 'quantity': 1}, format='json'
        )
        item_id = response.data['id']
        response = self.client.patch(f'/api/v1/cart/items/{item_id}/', {'quantity': 4}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], 4)

        response = self.client.patch(f'/api/v1/cart/items/{item_id}/', {'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.delete(f'/api/v1/cart/items/{item_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_other_users_item_forbidden(self):
        response = self.client.post(
            '/api/v1/cart/items/', {'product_id': self.product.id, 'quantity': 1}, format='json'
        )
        item_id = response.data['id']
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.delete(f'/api/v1/cart/items/{item_id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_clear_cart(self):
        self.client.post('/api/v1/cart/items/', {'product_id': self.product.id, 'quantity': 1}, format='json')
        response = self.client.delete('/api/v1/cart/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['item_count'], 0)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/cart/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class CheckoutTests(TestCase):
    """Test order preview, creation, payment and cancellation"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(
            price=Decimal('10000'), stock=10, shipping_fee=Decimal('3000'),
            can_combine_shipping=True, combine_shipping_unit=2
        )
        self.option = TestDataFactory.create_option(self.product, additional_price=Decimal('2000'), stock=4)

    def place_order(self, items, **extra):
        payload = dict(SHIPPING, items=items)
        payload.update(extra)
        return self.client.post('/api/v1/orders/', payload, format='json')

    def test_preview_amounts(self):
        response = self.client.post('/api/v1/orders/preview/', {
            'items': [{'product_id': self.product.id, 'quantity': 3}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(str(response.data['total_amount'])), Decimal('30000'))
        self.assertEqual(Decimal(str(response.data['shipping_fee'])), Decimal('6000'))
        self.assertEqual(Decimal(str(response.data['final_amount'])), Decimal('36000'))

    def test_order_with_percentage_coupon(self):
        coupon = TestDataFactory.create_coupon(
            discount_type=PERCENTAGE, discount_value=Decimal('10'), max_discount_amount=Decimal('2500')
        )
        user_coupon = TestDataFactory.create_user_coupon(self.user, coupon)
        response = self.place_order(
            [{'product_id': self.product.id, 'quantity': 4}], user_coupon_id=user_coupon.id
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        # 10% of 40000 is 4000, capped at 2500; two boxes of 3000
        self.assertEqual(Decimal(response.data['coupon_discount_amount']), Decimal('2500'))
        self.assertEqual(Decimal(response.data['shipping_fee']), Decimal('6000'))
        self.assertEqual(Decimal(response.data['final_amount']), Decimal('43500'))
        self.assertEqual(response.data['order_status'], Order.STATUS_PENDING_PAYMENT)
        self.assertTrue(response.data['order_number'].startswith('ORD-'))

        user_coupon.refresh_from_db()
        coupon.refresh_from_db()
        self.assertIsNotNone(user_coupon.used_at)
        self.assertEqual(coupon.used_quantity, 1)

    def test_coupon_minimum_order_amount(self):
        coupon = TestDataFactory.create_coupon(min_order_amount=Decimal('50000'))
        user_coupon = TestDataFactory.create_user_coupon(self.user, coupon)
        response = self.place_order(
            [{'product_id': self.product.id, 'quantity': 1}], user_coupon_id=user_coupon.id
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Order.objects.exists())

    def test_option_stock_checked(self):
        response = self.place_order([{'product_id': self.product.id, 'option_id': self.option.id, 'quantity': 5}])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_order_from_cart(self):
        self.client.post('/api/v1/cart/items/', {'product_id': self.product.id, 'quantity': 2}, format='json')
        response = self.client.post('/api/v1/orders/', SHIPPING, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['items']), 1)

    def test_empty_cart_rejected(self):
        response = self.client.post('/api/v1/orders/', SHIPPING, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pay_deducts_stock(self):
        self.client.post('/api/v1/cart/items/', {'product_id': self.product.id, 'quantity': 1}, format='json')
        response = self.place_order([{'product_id': self.product.id, 'option_id': self.option.id, 'quantity': 3}])
        order_id = response.data['id']

        response = self.client.post(f'/api/v1/orders/{order_id}/pay/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order_status'], Order.STATUS_PAID)
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 7)
        self.assertEqual(ProductOption.objects.get(pk=self.option.id).stock, 1)
        self.assertFalse(CartItem.objects.filter(cart__user=self.user).exists())

        response = self.client.post(f'/api/v1/orders/{order_id}/pay/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel_paid_order_restores_stock_and_coupon(self):
        coupon = TestDataFactory.create_coupon()
        user_coupon = TestDataFactory.create_user_coupon(self.user, coupon)
        response = self.place_order([{'product_id': self.product.id, 'quantity': 2}], user_coupon_id=user_coupon.id)
        order_id = response.data['id']
        self.client.post(f'/api/v1/orders/{order_id}/pay/')

        response = self.client.post(f'/api/v1/orders/{order_id}/cancel/', {'reason': 'Changed mind'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order_status'], Order.STATUS_CANCELLED)
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 10)
        self.assertIsNone(UserCoupon.objects.get(pk=user_coupon.id).used_at)
        self.assertEqual(Coupon.objects.get(pk=coupon.id).used_quantity, 0)
        self.assertTrue(AuditLog.objects.filter(action='order_cancel', object_id=order_id).exists())

    def test_cancel_unpaid_order_keeps_stock(self):
        response = self.place_order([{'product_id': self.product.id, 'quantity': 2}])
        self.client.post(f"/api/v1/orders/{response.data['id']}/cancel/")
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 10)

    def test_cannot_cancel_shipped(self):
        order = TestDataFactory.create_order(self.user, [(self.product, 1)], status=Order.STATUS_SHIPPED)
        response = self.client.post(f'/api/v1/orders/{order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cannot_cancel_others_order(self):
        order = TestDataFactory.create_order(TestDataFactory.create_user(), [(self.product, 1)])
        response = self.client.post(f'/api/v1/orders/{order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_confirm_delivered(self):
        order = TestDataFactory.create_order(self.user, [(self.product, 1)], status=Order.STATUS_DELIVERED)
        response = self.client.post(f'/api/v1/orders/{order.id}/confirm/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['confirmed_at'])

    def test_order_list_only_own(self):
        TestDataFactory.create_order(self.user, [(self.product, 1)])
        TestDataFactory.create_order(TestDataFactory.create_user(), [(self.product, 1)])
        response = self.client.get('/api/v1/orders/')
        self.assertEqual(response.data['count'], 1)


class AdminOrderTests(TestCase):
    """Test admin order management"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.product = TestDataFactory.create_product(stock=10)

    def test_tracking_moves_paid_to_shipped(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 1)], status=Order.STATUS_PAID)
        response = self.client.patch(f'/api/v1/admin/orders/{order.id}/tracking/', {
            'tracking_number': '1234567890', 'courier_company': 'CJ Logistics'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order_status'], Order.STATUS_SHIPPED)
        self.assertEqual(response.data['items'][0]['tracking_number'], '1234567890')

    def test_tracking_rejected_for_unpaid(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 1)])
        response = self.client.patch(f'/api/v1/admin/orders/{order.id}/tracking/', {
            'tracking_number': '1234567890'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_delivered_sets_timestamps(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 1)], status=Order.STATUS_PAID)
        response = self.client.patch(
            f'/api/v1/admin/orders/{order.id}/status/', {'status': Order.STATUS_DELIVERED}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['delivered_at'])
        self.assertIsNotNone(response.data['shipped_at'])

    def test_status_requires_payment(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 1)])
        response = self.client.patch(
            f'/api/v1/admin/orders/{order.id}/status/', {'status': Order.STATUS_SHIPPED}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_status_reports_failures(self):
        paid = TestDataFactory.create_order(self.customer, [(self.product, 1)], status=Order.STATUS_PAID)
        cancelled = TestDataFactory.create_order(self.customer, [(self.product, 1)], status=Order.STATUS_CANCELLED)
        response = self.client.post('/api/v1/admin/orders/bulk-status/', {
            'order_ids': [paid.id, cancelled.id, 999999],
            'status': Order.STATUS_PREPARING,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['success_ids'], [paid.id])
        self.assertEqual(response.data['failure_count'], 2)

    def test_list_filter_by_status(self):
        TestDataFactory.create_order(self.customer, [(self.product, 1)], status=Order.STATUS_PAID)
        TestDataFactory.create_order(self.customer, [(self.product, 1)])
        response = self.client.get(f'/api/v1/admin/orders/?status={Order.STATUS_PAID}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_customer_cannot_use_admin(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/admin/orders/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def paid_order(self, quantity=3):
        order = TestDataFactory.create_order(self.customer, [(self.product, quantity)])
        return utils.complete_payment(order)

    def customer_client(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.customer)
        return client

    def test_paid_order_cannot_return_to_pending_payment(self):
        order = self.paid_order()
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 7)

        response = self.client.patch(
            f'/api/v1/admin/orders/{order.id}/status/', {'status': Order.STATUS_PENDING_PAYMENT}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Order.objects.get(pk=order.id).order_status, Order.STATUS_PAID)

        response = self.customer_client().post(f'/api/v1/orders/{order.id}/pay/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 7)

    def test_paid_order_cannot_become_payment_failed(self):
        order = self.paid_order()
        response = self.client.patch(
            f'/api/v1/admin/orders/{order.id}/status/', {'status': Order.STATUS_PAYMENT_FAILED}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.customer_client().post(f'/api/v1/orders/{order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 10)

    def test_shipped_order_cannot_return_to_unpaid(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 1)], status=Order.STATUS_SHIPPED)
        for target in (Order.STATUS_PENDING_PAYMENT, Order.STATUS_PAYMENT_FAILED):
            response = self.client.patch(
                f'/api/v1/admin/orders/{order.id}/status/', {'status': target}, format='json'
            )
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, target)

    def test_unpaid_order_can_be_marked_payment_failed(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 1)])
        response = self.client.patch(
            f'/api/v1/admin/orders/{order.id}/status/', {'status': Order.STATUS_PAYMENT_FAILED}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order_status'], Order.STATUS_PAYMENT_FAILED)
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 10)

    def test_admin_paid_status_deducts_stock(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 2)])
        response = self.client.patch(
            f'/api/v1/admin/orders/{order.id}/status/', {'status': Order.STATUS_PAID}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order_status'], Order.STATUS_PAID)
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 8)

    def test_return_statuses_not_set_directly(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 1)], status=Order.STATUS_DELIVERED)
        response = self.client.patch(
            f'/api/v1/admin/orders/{order.id}/status/', {'status': Order.STATUS_RETURN_REQUESTED}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class OrderLockingTests(TestCase):
    """Order and coupon state is re-read under a row lock before it changes"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(stock=10)

    def test_stale_copy_cannot_pay_again(self):
        order = TestDataFactory.create_order(self.user, [(self.product, 3)])
        first = Order.objects.get(pk=order.pk)
        second = Order.objects.get(pk=order.pk)

        utils.complete_payment(first)
        with self.assertRaises(BusinessError):
            utils.complete_payment(second)
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 7)

    def test_stale_copy_cannot_cancel_again(self):
        order = utils.complete_payment(TestDataFactory.create_order(self.user, [(self.product, 3)]))
        first = Order.objects.get(pk=order.pk)
        second = Order.objects.get(pk=order.pk)

        utils.cancel_order(first)
        with self.assertRaises(BusinessError):
            utils.cancel_order(second)
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 10)

    def test_caller_copy_reflects_new_status(self):
        order = TestDataFactory.create_order(self.user, [(self.product, 1)])
        utils.complete_payment(order)
        self.assertEqual(order.order_status, Order.STATUS_PAID)
        self.assertIsNotNone(order.paid_at)

    def test_user_coupon_spent_once(self):
        coupon = TestDataFactory.create_coupon()
        user_coupon = TestDataFactory.create_user_coupon(self.user, coupon)
        items = [{'product_id': self.product.id, 'quantity': 1}]

        utils.create_order(self.user, SHIPPING, items, user_coupon.id)
        with self.assertRaises(BusinessError):
            utils.create_order(self.user, SHIPPING, items, user_coupon.id)
        self.assertEqual(Coupon.objects.get(pk=coupon.id).used_quantity, 1)
        self.assertEqual(Order.objects.filter(user=self.user).count(), 1)

    @patch('market.core.cache_signals.invalidate_products_cache')
    def test_cancel_invalidates_product_cache(self, mock_invalidate):
        order = utils.complete_payment(TestDataFactory.create_order(self.user, [(self.product, 2)]))
        mock_invalidate.reset_mock()

        with self.captureOnCommitCallbacks(execute=True):
            utils.cancel_order(order)
        mock_invalidate.assert_called()
        self.assertEqual(Product.objects.get(pk=self.product.id).stock, 10)

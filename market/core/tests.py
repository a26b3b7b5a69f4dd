"""
Test suite for core module
Tests: Authentication, Profile, Admin users, Audit logs, Price arithmetic
"""
from django.test import TestCase, SimpleTestCase
from rest_framework import status
from decimal import Decimal

from market.core.models import AuditLog
from market.core.pricing import (
    FIXED_AMOUNT, PERCENTAGE, apply_stock_delta, calculate_commission, calculate_coupon_discount,
    calculate_discounted_price, calculate_growth_rate, calculate_order_shipping, calculate_shipping_fee,
)
from market.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from market.core.utils import create_audit_log


class ShippingFeeTests(SimpleTestCase):
    """Shipping fee arithmetic"""

    def test_combined_shipping_rounds_boxes_up(self):
        self.assertEqual(calculate_shipping_fee(5, Decimal('3000'), True, 2), Decimal('9000'))
        self.assertEqual(calculate_shipping_fee(4, Decimal('3000'), True, 2), Decimal('6000'))
        self.assertEqual(calculate_shipping_fee(1, Decimal('3000'), True, 10), Decimal('3000'))

    def test_separate_shipping_charges_every_item(self):
        self.assertEqual(calculate_shipping_fee(5, Decimal('3000'), False, 2), Decimal('15000'))

    def test_combined_without_unit_falls_back_to_per_item(self):
        self.assertEqual(calculate_shipping_fee(3, Decimal('2500'), True, None), Decimal('7500'))

    def test_zero_quantity_or_fee(self):
        self.assertEqual(calculate_shipping_fee(0, Decimal('3000')), Decimal('0'))
        self.assertEqual(calculate_shipping_fee(3, Decimal('0')), Decimal('0'))

    def test_order_shipping_groups_same_product(self):
        class Item:
            def __init__(self, pk, fee, combine, unit):
                self.pk = pk
                self.shipping_fee = fee
                self.can_combine_shipping = combine
                self.combine_shipping_unit = unit

        apples = Item(1, Decimal('3000'), True, 4)
        pears = Item(2, Decimal('2000'), False, None)
        # 3 + 2 apples share ceil(5/4) = 2 boxes, pears ship per item
        fee = calculate_order_shipping([(apples, 3), (pears, 2), (apples, 2)])
        self.assertEqual(fee, Decimal('10000'))


class CouponDiscountTests(SimpleTestCase):
    """Coupon discount arithmetic"""

    def test_fixed_amount(self):
        self.assertEqual(calculate_coupon_discount(Decimal('20000'), FIXED_AMOUNT, Decimal('3000')), Decimal('3000'))

    def test_fixed_amount_clamped_to_total(self):
        self.assertEqual(calculate_coupon_discount(Decimal('2000'), FIXED_AMOUNT, Decimal('3000')), Decimal('2000'))

    def test_percentage_with_cap(self):
        self.assertEqual(
            calculate_coupon_discount(Decimal('50000'), PERCENTAGE, Decimal('10'), Decimal('3000')),
            Decimal('3000')
        )

    def test_percentage_below_cap(self):
        self.assertEqual(
            calculate_coupon_discount(Decimal('20000'), PERCENTAGE, Decimal('10'), Decimal('3000')),
            Decimal('2000')
        )

    def test_percentage_rounds_half_up(self):
        self.assertEqual(calculate_coupon_discount(Decimal('12345'), PERCENTAGE, Decimal('10')), Decimal('1235'))

    def test_unknown_type(self):
        with self.assertRaises(ValueError):
            calculate_coupon_discount(Decimal('1000'), 'BOGUS', Decimal('10'))


class ArithmeticTests(SimpleTestCase):
    """Stock delta, discounted price, commission and growth rate"""

    def test_stock_delta_never_negative(self):
        self.assertEqual(apply_stock_delta(5, -10), 0)
        self.assertEqual(apply_stock_delta(5, 3), 8)
        self.assertEqual(apply_stock_delta(5, -5), 0)

    def test_discounted_price(self):
        self.assertEqual(calculate_discounted_price(Decimal('10000'), 15), Decimal('8500'))
        self.assertEqual(calculate_discounted_price(Decimal('9990'), 15), Decimal('8492'))
        self.assertEqual(calculate_discounted_price(Decimal('10000'), 0), Decimal('10000'))
        self.assertEqual(calculate_discounted_price(Decimal('10000'), 150), Decimal('0'))

    def test_commission(self):
        self.assertEqual(calculate_commission(Decimal('123456'), Decimal('10.5')), Decimal('12962.88'))

    def test_growth_rate(self):
        self.assertEqual(calculate_growth_rate(150, 100), 50.0)
        self.assertEqual(calculate_growth_rate(100, 0), 100.0)
        self.assertEqual(calculate_growth_rate(0, 0), 0.0)
        self.assertEqual(calculate_growth_rate(1, 3), -66.7)


class AuthenticationTests(TestCase):
    """Test authentication endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(username='shopper', password='testpass123')

    def test_register(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'newshopper',
            'email': 'new@test.com',
            'password': 'Fresh-Produce-2024',
            'password_confirm': 'Fresh-Produce-2024',
            'name': 'New Shopper',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['username'], 'newshopper')

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'mismatch',
            'password': 'Fresh-Produce-2024',
            'password_confirm': 'Other-Produce-2024',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login(self):
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'shopper',
            'password': 'testpass123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'shopper')

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'shopper',
            'password': 'wrong',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_token(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_update_profile(self):
        self.client.authenticate_user(self.user)
        response = self.client.patch('/api/v1/auth/me/', {
            'name': 'Kim', 'postcode': '04524', 'is_staff': True
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.name, 'Kim')
        self.assertFalse(self.user.is_staff)


class AdminUserTests(TestCase):
    """Test admin user management"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user(name='Lee')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_non_admin_forbidden(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/admin/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_users_paginated(self):
        response = self.client.get('/api/v1/admin/users/?search=Lee')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertIn('total_pages', response.data)

    def test_toggle_active(self):
        response = self.client.patch(f'/api/v1/admin/users/{self.user.id}/toggle-active/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertFalse(self.user.is_active)
        self.assertTrue(AuditLog.objects.filter(model_name='User', object_id=str(self.user.id)).exists())

    def test_cannot_delete_self(self):
        response = self.client.delete(f'/api/v1/admin/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AuditLogTests(TestCase):
    """Test audit log visibility"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()
        create_audit_log(action='create', model_name='Product', object_id=1, user=self.admin)
        create_audit_log(action='order_create', model_name='Order', object_id=2, user=self.user)
        self.client = AuthenticatedAPIClient()

    def test_admin_sees_all(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.data['count'], 2)

    def test_user_sees_own(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['action'], 'order_create')

    def test_missing_fields_skipped(self):
        self.assertIsNone(create_audit_log(action='create', model_name=None, object_id=1))

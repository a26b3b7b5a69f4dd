"""
Test suite for coupons module
Tests: Admin coupon management, Issuing, Download, Validation, Coupons usable for an order
"""
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from datetime import timedelta
from decimal import Decimal

from market.core.pricing import FIXED_AMOUNT, PERCENTAGE
from market.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from market.coupons.models import Coupon, UserCoupon


class CouponModelTests(TestCase):
    """Test coupon rules on the model"""

    def test_code_is_uppercased(self):
        coupon = TestDataFactory.create_coupon(code=' welcome10 ')
        self.assertEqual(coupon.code, 'WELCOME10')

    def test_has_stock(self):
        coupon = TestDataFactory.create_coupon(total_quantity=2, used_quantity=2)
        self.assertFalse(coupon.has_stock)
        self.assertFalse(coupon.is_valid)

    def test_applicable_to_category_children(self):
        parent = TestDataFactory.create_category()
        child = TestDataFactory.create_category(parent=parent)
        coupon = TestDataFactory.create_coupon(applicable_category=parent)
        self.assertTrue(coupon.is_applicable_to(TestDataFactory.create_product(category=child)))
        self.assertFalse(coupon.is_applicable_to(TestDataFactory.create_product()))

    def test_applicable_products(self):
        included = TestDataFactory.create_product()
        coupon = TestDataFactory.create_coupon()
        coupon.applicable_products.add(included)
        self.assertTrue(coupon.is_applicable_to(included))
        self.assertFalse(coupon.is_applicable_to(TestDataFactory.create_product()))

    def test_fixed_discount_clamped_to_amount(self):
        coupon = TestDataFactory.create_coupon(discount_value=Decimal('5000'))
        self.assertEqual(coupon.calculate_discount(Decimal('3000')), Decimal('3000'))


class AdminCouponTests(TestCase):
    """Test admin coupon endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def coupon_payload(self, **overrides):
        now = timezone.now()
        payload = {
            'code': 'spring20',
            'name': 'Spring sale',
            'discount_type': PERCENTAGE,
            'discount_value': '20',
            'max_discount_amount': '5000',
            'start_date': now.isoformat(),
            'end_date': (now + timedelta(days=7)).isoformat(),
        }
        payload.update(overrides)
        return payload

    def test_create_coupon(self):
        response = self.client.post('/api/v1/admin/coupons/', self.coupon_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'SPRING20')
        self.assertIsNone(response.data['remaining_quantity'])

    def test_duplicate_code_rejected(self):
        TestDataFactory.create_coupon(code='SPRING20')
        response = self.client.post('/api/v1/admin/coupons/', self.coupon_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_percentage_over_100_rejected(self):
        response = self.client.post(
            '/api/v1/admin/coupons/', self.coupon_payload(discount_value='150'), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('discount_value', response.data)

    def test_end_before_start_rejected(self):
        now = timezone.now()
        response = self.client.post('/api/v1/admin/coupons/', self.coupon_payload(
            start_date=now.isoformat(), end_date=(now - timedelta(days=1)).isoformat()
        ), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_used_coupon_cannot_be_deleted(self):
        coupon = TestDataFactory.create_coupon(used_quantity=1)
        response = self.client.delete(f'/api/v1/admin/coupons/{coupon.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_issue_single_use_twice(self):
        coupon = TestDataFactory.create_coupon()
        user = TestDataFactory.create_user()
        url = f'/api/v1/admin/coupons/{coupon.id}/issue/'
        response = self.client.post(url, {'user_id': user.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post(url, {'user_id': user.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_issue_all_skips_holders(self):
        coupon = TestDataFactory.create_coupon()
        holder = TestDataFactory.create_user()
        TestDataFactory.create_user_coupon(holder, coupon)
        TestDataFactory.create_user()
        TestDataFactory.create_user(is_active=False)
        response = self.client.post(f'/api/v1/admin/coupons/{coupon.id}/issue-all/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        # admin and the new active user
        self.assertEqual(response.data['issued_count'], 2)

    def test_issue_expired_coupon(self):
        coupon = TestDataFactory.create_coupon(end_date=timezone.now() - timedelta(hours=1))
        response = self.client.post(f'/api/v1/admin/coupons/{coupon.id}/issue-all/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class StorefrontCouponTests(TestCase):
    """Test customer coupon endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_active_list_excludes_exhausted_and_future(self):
        TestDataFactory.create_coupon(code='OPEN')
        TestDataFactory.create_coupon(code='GONE', total_quantity=1, used_quantity=1)
        TestDataFactory.create_coupon(code='LATER', start_date=timezone.now() + timedelta(days=1))
        self.client.logout()
        response = self.client.get('/api/v1/coupons/active/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([coupon['code'] for coupon in response.data], ['OPEN'])

    def test_download_by_code(self):
        TestDataFactory.create_coupon(code='HELLO')
        response = self.client.post('/api/v1/coupons/download/', {'code': 'hello'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(UserCoupon.objects.filter(user=self.user, coupon__code='HELLO').exists())

    def test_download_not_started(self):
        TestDataFactory.create_coupon(code='SOON', start_date=timezone.now() + timedelta(days=2))
        response = self.client.post('/api/v1/coupons/download/', {'code': 'SOON'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_download_unknown(self):
        response = self.client.post('/api/v1/coupons/download/', {'code': 'NOPE'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_validate_percentage_with_cap(self):
        TestDataFactory.create_coupon(
            code='TENOFF', discount_type=PERCENTAGE, discount_value=Decimal('10'),
            max_discount_amount=Decimal('3000')
        )
        response = self.client.post('/api/v1/coupons/validate/', {
            'code': 'TENOFF', 'order_amount': '50000'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['valid'])
        self.assertEqual(Decimal(str(response.data['discount_amount'])), Decimal('3000'))
        self.assertEqual(Decimal(str(response.data['final_amount'])), Decimal('47000'))

    def test_validate_below_minimum(self):
        TestDataFactory.create_coupon(code='BIG', discount_type=FIXED_AMOUNT, min_order_amount=Decimal('30000'))
        response = self.client.post('/api/v1/coupons/validate/', {
            'code': 'BIG', 'order_amount': '10000'
        }, format='json')
        self.assertFalse(response.data['valid'])

    def test_my_coupons_hides_used(self):
        available = TestDataFactory.create_user_coupon(self.user, TestDataFactory.create_coupon())
        used = TestDataFactory.create_user_coupon(self.user, TestDataFactory.create_coupon())
        used.used_at = timezone.now()
        used.save()
        response = self.client.get('/api/v1/coupons/mine/')
        self.assertEqual([entry['id'] for entry in response.data], [available.id])
        response = self.client.get('/api/v1/coupons/mine/?all=true')
        self.assertEqual(len(response.data), 2)

    def test_coupons_for_order(self):
        TestDataFactory.create_user_coupon(self.user, TestDataFactory.create_coupon(discount_value=Decimal('2000')))
        TestDataFactory.create_user_coupon(
            self.user, TestDataFactory.create_coupon(min_order_amount=Decimal('100000'))
        )
        response = self.client.get('/api/v1/coupons/for-order/?amount=20000')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(Decimal(response.data[0]['expected_discount']), Decimal('2000'))

    def test_coupons_for_order_bad_amount(self):
        response = self.client.get('/api/v1/coupons/for-order/?amount=lots')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_coupons_for_order_rejects_non_finite_or_negative_amount(self):
        for amount in ('NaN', 'Infinity', '-100'):
            response = self.client.get(f'/api/v1/coupons/for-order/?amount={amount}')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, amount)

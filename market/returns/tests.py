"""
Test suite for returns module
Tests: Eligibility, Return requests, Withdrawal, Admin approve/reject/complete, Stock restore
"""
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from datetime import timedelta
from decimal import Decimal

from market.catalog.models import Product, ProductOption
from market.core.models import AuditLog
from market.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from market.orders.models import Order
from market.returns.models import ReturnRequest


def deliver(order, days_ago=1):
    Order.objects.filter(pk=order.pk).update(
        order_status=Order.STATUS_DELIVERED,
        delivered_at=timezone.now() - timedelta(days=days_ago),
    )
    order.refresh_from_db()
    return order


class CustomerReturnTests(TestCase):
    """Test return eligibility, requests and withdrawal"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.apple = TestDataFactory.create_product(name='Apple', price=Decimal('10000'), stock=20)
        self.pear = TestDataFactory.create_product(name='Pear', price=Decimal('5000'), stock=20)
        self.order = deliver(TestDataFactory.create_order(
            self.user, [(self.apple, 2), (self.pear, 1)], status=Order.STATUS_PAID, shipping_fee=Decimal('3000')
        ))
        self.apple_line, self.pear_line = list(self.order.items.all())

    def request_return(self, reason='CHANGE_OF_MIND', items=None, **extra):
        payload = {
            'order_id': self.order.id,
            'reason_category': reason,
            'detailed_reason': 'Not as fresh as expected',
            'items': items if items is not None else [{'order_item_id': self.apple_line.id, 'quantity': 1}],
        }
        payload.update(extra)
        return self.client.post('/api/v1/returns/', payload, format='json')

    def test_eligible_within_window(self):
        response = self.client.get(f'/api/v1/returns/eligibility/{self.order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['eligible'])
        self.assertIsNotNone(response.data['return_deadline'])

    def test_not_eligible_after_window(self):
        deliver(self.order, days_ago=8)
        response = self.client.get(f'/api/v1/returns/eligibility/{self.order.id}/')
        self.assertFalse(response.data['eligible'])
        self.assertIn('return period', response.data['reason'])

    def test_not_eligible_before_delivery(self):
        order = TestDataFactory.create_order(self.user, [(self.apple, 1)], status=Order.STATUS_SHIPPED)
        response = self.client.get(f'/api/v1/returns/eligibility/{order.id}/')
        self.assertFalse(response.data['eligible'])

    def test_eligibility_of_other_users_order(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/returns/eligibility/{self.order.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_change_of_mind_refunds_items_only(self):
        response = self.request_return()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], ReturnRequest.STATUS_REQUESTED)
        self.assertEqual(Decimal(response.data['items_refund_amount']), Decimal('10000'))
        self.assertEqual(Decimal(response.data['shipping_refund_amount']), Decimal('0'))
        self.assertEqual(Decimal(response.data['total_refund_amount']), Decimal('10000'))
        self.assertEqual(Order.objects.get(pk=self.order.id).order_status, Order.STATUS_RETURN_REQUESTED)
        self.assertTrue(AuditLog.objects.filter(action='return_request').exists())

    def test_seller_fault_refunds_shipping(self):
        response = self.request_return(reason='DEFECTIVE_PRODUCT', items=[
            {'order_item_id': self.apple_line.id, 'quantity': 2},
            {'order_item_id': self.pear_line.id, 'quantity': 1},
        ])
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['items_refund_amount']), Decimal('25000'))
        self.assertEqual(Decimal(response.data['shipping_refund_amount']), Decimal('3000'))
        self.assertEqual(Decimal(response.data['total_refund_amount']), Decimal('28000'))
        self.assertEqual(len(response.data['items']), 2)

    def test_quantity_above_ordered_rejected(self):
        response = self.request_return(items=[{'order_item_id': self.apple_line.id, 'quantity': 3}])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(ReturnRequest.objects.exists())
        self.assertEqual(Order.objects.get(pk=self.order.id).order_status, Order.STATUS_DELIVERED)

    def test_item_from_another_order_rejected(self):
        other = TestDataFactory.create_order(self.user, [(self.apple, 1)], status=Order.STATUS_DELIVERED)
        response = self.request_return(items=[{'order_item_id': other.items.first().id, 'quantity': 1}])
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(ReturnRequest.objects.exists())

    def test_duplicate_line_rejected(self):
        response = self.request_return(items=[
            {'order_item_id': self.apple_line.id, 'quantity': 1},
            {'order_item_id': self.apple_line.id, 'quantity': 1},
        ])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_empty_items_rejected(self):
        response = self.request_return(items=[])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_second_request_rejected(self):
        self.request_return()
        response = self.request_return()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(ReturnRequest.objects.count(), 1)

    def test_withdraw_pending_request(self):
        return_id = self.request_return().data['id']
        response = self.client.delete(f'/api/v1/returns/{return_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ReturnRequest.objects.exists())
        self.assertEqual(Order.objects.get(pk=self.order.id).order_status, Order.STATUS_DELIVERED)

        response = self.request_return()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_cannot_withdraw_approved_request(self):
        return_request = ReturnRequest.objects.get(pk=self.request_return().data['id'])
        return_request.status = ReturnRequest.STATUS_APPROVED
        return_request.save()
        response = self.client.delete(f'/api/v1/returns/{return_request.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_and_detail_only_own(self):
        return_id = self.request_return().data['id']
        response = self.client.get('/api/v1/returns/')
        self.assertEqual(response.data['count'], 1)

        self.client.authenticate_user(TestDataFactory.create_user())
        self.assertEqual(self.client.get('/api/v1/returns/').data['count'], 0)
        response = self.client.get(f'/api/v1/returns/{return_id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(f'/api/v1/returns/{return_id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_returning_order_cannot_be_cancelled(self):
        self.request_return()
        response = self.client.post(f'/api/v1/orders/{self.order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AdminReturnTests(TestCase):
    """Test admin processing of return requests"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.customer)
        self.apple = TestDataFactory.create_product(name='Apple', price=Decimal('10000'), stock=20)
        self.box = TestDataFactory.create_option(self.apple, option_name='Gift box', stock=5)
        self.pear = TestDataFactory.create_product(name='Pear', price=Decimal('5000'), stock=20)
        self.order = deliver(TestDataFactory.create_order(
            self.customer, [(self.apple, 2, self.box), (self.pear, 1)], status=Order.STATUS_PAID
        ))
        self.apple_line, self.pear_line = list(self.order.items.all())

    def open_return(self, items):
        response = self.client.post('/api/v1/returns/', {
            'order_id': self.order.id,
            'reason_category': 'WRONG_DELIVERY',
            'items': items,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.client.authenticate_user(self.admin)
        return response.data['id']

    def test_full_flow_partial_return(self):
        return_id = self.open_return([{'order_item_id': self.apple_line.id, 'quantity': 2}])

        response = self.client.post(f'/api/v1/admin/returns/{return_id}/complete/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'/api/v1/admin/returns/{return_id}/approve/', {'note': 'Send it back'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], ReturnRequest.STATUS_APPROVED)
        self.assertEqual(response.data['order_status'], Order.STATUS_RETURN_APPROVED)

        response = self.client.post(f'/api/v1/admin/returns/{return_id}/complete/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], ReturnRequest.STATUS_COMPLETED)
        self.assertIsNotNone(response.data['refunded_at'])
        self.assertEqual(response.data['order_status'], Order.STATUS_PARTIALLY_RETURNED)
        self.assertEqual(Product.objects.get(pk=self.apple.id).stock, 22)
        self.assertEqual(ProductOption.objects.get(pk=self.box.id).stock, 7)
        self.assertEqual(Product.objects.get(pk=self.pear.id).stock, 20)
        self.assertEqual(AuditLog.objects.filter(action='return_status').count(), 2)

    def test_full_return_completes_order(self):
        return_id = self.open_return([
            {'order_item_id': self.apple_line.id, 'quantity': 2},
            {'order_item_id': self.pear_line.id, 'quantity': 1},
        ])
        self.client.post(f'/api/v1/admin/returns/{return_id}/approve/')
        response = self.client.post(f'/api/v1/admin/returns/{return_id}/complete/')
        self.assertEqual(response.data['order_status'], Order.STATUS_RETURN_COMPLETED)
        self.assertEqual(Product.objects.get(pk=self.pear.id).stock, 21)

    def test_completed_return_cannot_be_completed_again(self):
        return_id = self.open_return([{'order_item_id': self.pear_line.id, 'quantity': 1}])
        self.client.post(f'/api/v1/admin/returns/{return_id}/approve/')
        self.client.post(f'/api/v1/admin/returns/{return_id}/complete/')
        response = self.client.post(f'/api/v1/admin/returns/{return_id}/complete/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Product.objects.get(pk=self.pear.id).stock, 21)

    def test_reject_restores_delivered(self):
        return_id = self.open_return([{'order_item_id': self.pear_line.id, 'quantity': 1}])
        response = self.client.post(f'/api/v1/admin/returns/{return_id}/reject/', {'reason': ' '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'/api/v1/admin/returns/{return_id}/reject/',
                                    {'reason': 'Item was opened'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], ReturnRequest.STATUS_REJECTED)
        self.assertEqual(response.data['admin_note'], 'Item was opened')
        self.assertEqual(response.data['order_status'], Order.STATUS_DELIVERED)

        response = self.client.post(f'/api/v1/admin/returns/{return_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters_and_stats(self):
        self.open_return([{'order_item_id': self.pear_line.id, 'quantity': 1}])
        response = self.client.get(f'/api/v1/admin/returns/?status={ReturnRequest.STATUS_REQUESTED}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        response = self.client.get(f'/api/v1/admin/returns/?search={self.order.order_number}')
        self.assertEqual(response.data['count'], 1)
        response = self.client.get('/api/v1/admin/returns/?reason_category=CHANGE_OF_MIND')
        self.assertEqual(response.data['count'], 0)
        response = self.client.get('/api/v1/admin/returns/?status=LOST')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.get('/api/v1/admin/returns/stats/')
        self.assertEqual(response.data['total_count'], 1)
        self.assertEqual(response.data['pending_count'], 1)

    def test_admin_can_read_any_request(self):
        return_id = self.open_return([{'order_item_id': self.pear_line.id, 'quantity': 1}])
        self.assertEqual(self.client.get(f'/api/v1/returns/{return_id}/').status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(f'/api/v1/admin/returns/{return_id}/').status_code, status.HTTP_200_OK)

    def test_order_status_endpoint_cannot_move_returning_order(self):
        self.open_return([{'order_item_id': self.pear_line.id, 'quantity': 1}])
        response = self.client.patch(
            f'/api/v1/admin/orders/{self.order.id}/status/', {'status': Order.STATUS_DELIVERED}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_customer_cannot_use_admin_endpoints(self):
        response = self.client.get('/api/v1/admin/returns/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

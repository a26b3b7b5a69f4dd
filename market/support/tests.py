"""
Test suite for support module
Tests: Customer inquiries, Admin answers
"""
from django.test import TestCase
from rest_framework import status

from market.core.models import AuditLog
from market.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from market.support.models import Inquiry


class InquiryTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def create_inquiry(self, user=None, **extra):
        fields = {'title': 'Where is my order?', 'content': 'It has been a week', 'category': Inquiry.CATEGORY_ORDER}
        fields.update(extra)
        return Inquiry.objects.create(user=user or self.user, **fields)

    def test_submit_inquiry(self):
        response = self.client.post('/api/v1/inquiries/', {
            'title': 'Bruised peaches', 'content': 'Two were damaged', 'category': Inquiry.CATEGORY_RETURN,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], Inquiry.STATUS_PENDING)
        self.assertEqual(response.data['user'], self.user.id)

    def test_default_category(self):
        response = self.client.post('/api/v1/inquiries/', {'title': 'Hello', 'content': 'Question'}, format='json')
        self.assertEqual(response.data['category'], Inquiry.CATEGORY_OTHER)

    def test_list_only_own(self):
        self.create_inquiry()
        self.create_inquiry(user=TestDataFactory.create_user())
        response = self.client.get('/api/v1/inquiries/')
        self.assertEqual(response.data['count'], 1)

    def test_other_user_cannot_read(self):
        inquiry = self.create_inquiry(user=TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/inquiries/{inquiry.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_pending(self):
        inquiry = self.create_inquiry()
        response = self.client.delete(f'/api/v1/inquiries/{inquiry.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_answered_cannot_be_deleted(self):
        inquiry = self.create_inquiry(status=Inquiry.STATUS_ANSWERED, answer='Shipped today')
        response = self.client.delete(f'/api/v1/inquiries/{inquiry.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AdminInquiryTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user(username='peachlover')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.inquiry = Inquiry.objects.create(
            user=self.customer, title='Late delivery', content='Not arrived', category=Inquiry.CATEGORY_DELIVERY
        )

    def test_answer(self):
        response = self.client.post(f'/api/v1/admin/inquiries/{self.inquiry.id}/answer/', {
            'answer': 'It ships tomorrow morning.'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Inquiry.STATUS_ANSWERED)
        self.assertEqual(response.data['answered_by_username'], self.admin.username)
        self.assertIsNotNone(response.data['answered_at'])
        self.assertTrue(AuditLog.objects.filter(action='inquiry_answer', object_id=str(self.inquiry.id)).exists())

    def test_blank_answer_rejected(self):
        response = self.client.post(f'/api/v1/admin/inquiries/{self.inquiry.id}/answer/', {
            'answer': '   '
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_can_read_any(self):
        response = self.client.get(f'/api/v1/inquiries/{self.inquiry.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_filters(self):
        Inquiry.objects.create(user=self.customer, title='Refund', content='Please', category=Inquiry.CATEGORY_RETURN,
                               status=Inquiry.STATUS_ANSWERED)
        response = self.client.get(f'/api/v1/admin/inquiries/?status={Inquiry.STATUS_PENDING}')
        self.assertEqual(response.data['count'], 1)
        response = self.client.get(f'/api/v1/admin/inquiries/?category={Inquiry.CATEGORY_RETURN}')
        self.assertEqual(response.data['results'][0]['title'], 'Refund')
        response = self.client.get('/api/v1/admin/inquiries/?search=peachlover')
        self.assertEqual(response.data['count'], 2)

    def test_customer_forbidden(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/admin/inquiries/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

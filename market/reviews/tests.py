"""
Test suite for reviews module
Tests: Review listing with rating summary, Posting, Author-only edits
"""
from django.test import TestCase
from rest_framework import status

from market.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from market.reviews.models import Review


class ReviewTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product()
        self.url = f'/api/v1/products/{self.product.id}/reviews/'

    def test_post_review(self):
        response = self.client.post(self.url, {
            'rating': 5, 'title': 'Very fresh', 'content': 'Arrived cold and crisp',
            'image_urls': ['https://cdn.example.com/r/1.jpg'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['username'], self.user.username)
        self.assertEqual(response.data['product'], self.product.id)

    def test_rating_out_of_range(self):
        response = self.client.post(self.url, {'rating': 6, 'content': 'Too good'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('rating', response.data)

    def test_anonymous_cannot_post(self):
        self.client.logout()
        response = self.client.post(self.url, {'rating': 4, 'content': 'Nice'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_includes_summary(self):
        Review.objects.create(product=self.product, user=self.user, rating=5, content='Great')
        Review.objects.create(product=self.product, user=TestDataFactory.create_user(), rating=4, content='Good')
        Review.objects.create(product=self.product, user=TestDataFactory.create_user(), rating=4, content='Fine')
        self.client.logout()
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(response.data['average_rating'], 4.3)
        self.assertEqual(response.data['review_count'], 3)

    def test_rating_without_reviews(self):
        response = self.client.get(f'/api/v1/products/{self.product.id}/rating/')
        self.assertEqual(response.data['average_rating'], 0.0)
        self.assertEqual(response.data['review_count'], 0)

    def test_author_can_edit_and_delete(self):
        review = Review.objects.create(product=self.product, user=self.user, rating=3, content='Okay')
        response = self.client.patch(f'/api/v1/reviews/{review.id}/', {'rating': 4}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['rating'], 4)
        response = self.client.delete(f'/api/v1/reviews/{review.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_other_user_cannot_edit(self):
        review = Review.objects.create(product=self.product, user=self.user, rating=3, content='Okay')
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.patch(f'/api/v1/reviews/{review.id}/', {'rating': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(f'/api/v1/reviews/{review.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_my_reviews(self):
        Review.objects.create(product=self.product, user=self.user, rating=5, content='Mine')
        Review.objects.create(product=self.product, user=TestDataFactory.create_user(), rating=2, content='Theirs')
        response = self.client.get('/api/v1/reviews/mine/')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['content'], 'Mine')

from django.urls import path
from .views import product_review_list_create, product_rating, my_reviews, review_detail

urlpatterns = [
    path('products/<int:pk>/reviews/', product_review_list_create, name='product-review-list-create'),
    path('products/<int:pk>/rating/', product_rating, name='product-rating'),
    path('reviews/mine/', my_reviews, name='my-reviews'),
    path('reviews/<int:pk>/', review_detail, name='review-detail'),
]

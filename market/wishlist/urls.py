from django.urls import path
from .views import wishlist_list_add, wishlist_remove, wishlist_check

urlpatterns = [
    path('wishlist/', wishlist_list_add, name='wishlist-list-add'),
    path('wishlist/<int:product_id>/', wishlist_remove, name='wishlist-remove'),
    path('wishlist/<int:product_id>/check/', wishlist_check, name='wishlist-check'),
]

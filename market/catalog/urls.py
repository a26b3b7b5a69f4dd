from django.urls import path
from .views import (
    category_list, product_list, product_detail, product_options, product_notice, product_shipping_quote,
    admin_category_list_create, admin_category_detail,
    admin_product_list_create, admin_product_detail,
    admin_product_options, admin_product_option_detail, admin_product_notice,
)

urlpatterns = [
    # Storefront endpoints
    path('categories/', category_list, name='category-list'),
    path('products/', product_list, name='product-list'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
    path('products/<int:pk>/options/', product_options, name='product-options'),
    path('products/<int:pk>/notice/', product_notice, name='product-notice'),
    path('products/<int:pk>/shipping-quote/', product_shipping_quote, name='product-shipping-quote'),

    # Admin category endpoints
    path('admin/categories/', admin_category_list_create, name='admin-category-list-create'),
    path('admin/categories/<int:pk>/', admin_category_detail, name='admin-category-detail'),

    # Admin product endpoints
    path('admin/products/', admin_product_list_create, name='admin-product-list-create'),
    path('admin/products/<int:pk>/', admin_product_detail, name='admin-product-detail'),
    path('admin/products/<int:pk>/options/', admin_product_options, name='admin-product-options'),
    path('admin/products/<int:pk>/options/<int:option_id>/', admin_product_option_detail, name='admin-product-option-detail'),
    path('admin/products/<int:pk>/notice/', admin_product_notice, name='admin-product-notice'),
]

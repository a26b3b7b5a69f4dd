from django.urls import path
from .views import (
    cart_detail, cart_add_item, cart_item_detail,
    order_list_create, order_preview, order_detail, order_pay, order_payment_failed,
    order_cancel, order_confirm,
    admin_order_list, admin_order_detail, admin_order_status, admin_order_tracking, admin_order_bulk_status,
)

urlpatterns = [
    # Cart endpoints
    path('cart/', cart_detail, name='cart-detail'),
    path('cart/items/', cart_add_item, name='cart-add-item'),
    path('cart/items/<int:item_id>/', cart_item_detail, name='cart-item-detail'),

    # Order endpoints
    path('orders/', order_list_create, name='order-list-create'),
    path('orders/preview/', order_preview, name='order-preview'),
    path('orders/<int:pk>/', order_detail, name='order-detail'),
    path('orders/<int:pk>/pay/', order_pay, name='order-pay'),
    path('orders/<int:pk>/payment-failed/', order_payment_failed, name='order-payment-failed'),
    path('orders/<int:pk>/cancel/', order_cancel, name='order-cancel'),
    path('orders/<int:pk>/confirm/', order_confirm, name='order-confirm'),

    # Admin order endpoints
    path('admin/orders/', admin_order_list, name='admin-order-list'),
    path('admin/orders/bulk-status/', admin_order_bulk_status, name='admin-order-bulk-status'),
    path('admin/orders/<int:pk>/', admin_order_detail, name='admin-order-detail'),
    path('admin/orders/<int:pk>/status/', admin_order_status, name='admin-order-status'),
    path('admin/orders/<int:pk>/tracking/', admin_order_tracking, name='admin-order-tracking'),
]

from django.urls import path
from .views import (
    seller_list_create, seller_detail, seller_status,
    settlement_list_create, settlement_generate_all, settlement_detail,
    settlement_approve, settlement_pay, settlement_cancel, settlement_stats,
)

urlpatterns = [
    # Seller endpoints
    path('admin/sellers/', seller_list_create, name='seller-list-create'),
    path('admin/sellers/<int:pk>/', seller_detail, name='seller-detail'),
    path('admin/sellers/<int:pk>/status/', seller_status, name='seller-status'),

    # Settlement endpoints
    path('admin/settlements/', settlement_list_create, name='settlement-list-create'),
    path('admin/settlements/generate-all/', settlement_generate_all, name='settlement-generate-all'),
    path('admin/settlements/stats/', settlement_stats, name='settlement-stats'),
    path('admin/settlements/<int:pk>/', settlement_detail, name='settlement-detail'),
    path('admin/settlements/<int:pk>/approve/', settlement_approve, name='settlement-approve'),
    path('admin/settlements/<int:pk>/pay/', settlement_pay, name='settlement-pay'),
    path('admin/settlements/<int:pk>/cancel/', settlement_cancel, name='settlement-cancel'),
]

from django.urls import path
from .views import (
    admin_coupon_list_create, admin_coupon_detail, admin_coupon_issue, admin_coupon_issue_all,
    coupon_active_list, coupon_validate, coupon_download, my_coupons, coupons_for_order,
)

urlpatterns = [
    # Storefront coupon endpoints
    path('coupons/active/', coupon_active_list, name='coupon-active-list'),
    path('coupons/validate/', coupon_validate, name='coupon-validate'),
    path('coupons/download/', coupon_download, name='coupon-download'),
    path('coupons/mine/', my_coupons, name='my-coupons'),
    path('coupons/for-order/', coupons_for_order, name='coupons-for-order'),

    # Admin coupon endpoints
    path('admin/coupons/', admin_coupon_list_create, name='admin-coupon-list-create'),
    path('admin/coupons/<int:pk>/', admin_coupon_detail, name='admin-coupon-detail'),
    path('admin/coupons/<int:pk>/issue/', admin_coupon_issue, name='admin-coupon-issue'),
    path('admin/coupons/<int:pk>/issue-all/', admin_coupon_issue_all, name='admin-coupon-issue-all'),
]

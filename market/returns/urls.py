from django.urls import path
from .views import (
    return_eligibility, return_list_create, return_detail,
    admin_return_list, admin_return_stats, admin_return_detail,
    admin_return_approve, admin_return_reject, admin_return_complete,
)

urlpatterns = [
    # Customer endpoints
    path('returns/', return_list_create, name='return-list-create'),
    path('returns/eligibility/<int:order_id>/', return_eligibility, name='return-eligibility'),
    path('returns/<int:pk>/', return_detail, name='return-detail'),

    # Admin endpoints
    path('admin/returns/', admin_return_list, name='admin-return-list'),
    path('admin/returns/stats/', admin_return_stats, name='admin-return-stats'),
    path('admin/returns/<int:pk>/', admin_return_detail, name='admin-return-detail'),
    path('admin/returns/<int:pk>/approve/', admin_return_approve, name='admin-return-approve'),
    path('admin/returns/<int:pk>/reject/', admin_return_reject, name='admin-return-reject'),
    path('admin/returns/<int:pk>/complete/', admin_return_complete, name='admin-return-complete'),
]

from django.urls import path
from .views import (
    deal_ongoing_list, deal_upcoming_list, deal_detail,
    admin_deal_list_create, admin_deal_detail, admin_deal_product,
)

urlpatterns = [
    path('special-deals/ongoing/', deal_ongoing_list, name='deal-ongoing-list'),
    path('special-deals/upcoming/', deal_upcoming_list, name='deal-upcoming-list'),
    path('special-deals/<int:pk>/', deal_detail, name='deal-detail'),
    path('admin/special-deals/', admin_deal_list_create, name='admin-deal-list-create'),
    path('admin/special-deals/<int:pk>/', admin_deal_detail, name='admin-deal-detail'),
    path('admin/special-deals/<int:pk>/products/<int:product_id>/', admin_deal_product, name='admin-deal-product'),
]

from django.urls import path
from .views import (
    inventory_statistics, inventory_items, product_stock_update, option_stock_update,
    product_threshold_update, bulk_stock_update, bulk_stock_adjust, stock_adjustment_list,
)

urlpatterns = [
    path('admin/inventory/statistics/', inventory_statistics, name='inventory-statistics'),
    path('admin/inventory/items/', inventory_items, name='inventory-items'),
    path('admin/inventory/products/<int:pk>/stock/', product_stock_update, name='inventory-product-stock'),
    path('admin/inventory/options/<int:pk>/stock/', option_stock_update, name='inventory-option-stock'),
    path('admin/inventory/products/<int:pk>/threshold/', product_threshold_update, name='inventory-product-threshold'),
    path('admin/inventory/bulk-update/', bulk_stock_update, name='inventory-bulk-update'),
    path('admin/inventory/bulk-adjust/', bulk_stock_adjust, name='inventory-bulk-adjust'),
    path('admin/inventory/adjustments/', stock_adjustment_list, name='inventory-adjustments'),
]

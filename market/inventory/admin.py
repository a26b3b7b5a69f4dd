from django.contrib import admin
from .models import StockAdjustment


@admin.register(StockAdjustment)
class StockAdjustmentAdmin(admin.ModelAdmin):
    list_display = ['item_type', 'product', 'product_option', 'previous_stock', 'new_stock', 'change', 'created_by', 'created_at']
    list_filter = ['item_type', 'created_at']
    search_fields = ['product__name', 'reason']
    readonly_fields = ['previous_stock', 'new_stock', 'change', 'created_at']

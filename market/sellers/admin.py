from django.contrib import admin
from .models import Seller, Settlement


@admin.register(Seller)
class SellerAdmin(admin.ModelAdmin):
    list_display = ['name', 'business_number', 'representative', 'phone', 'commission_rate', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name', 'business_number', 'representative', 'email']
    ordering = ['name']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Settlement)
class SettlementAdmin(admin.ModelAdmin):
    list_display = ['seller', 'start_date', 'end_date', 'total_sales_amount', 'commission_amount',
                    'settlement_amount', 'order_count', 'status', 'settled_at']
    list_filter = ['status', 'start_date', 'seller']
    search_fields = ['seller__name', 'seller__business_number']
    ordering = ['-created_at']
    readonly_fields = ['total_sales_amount', 'commission_amount', 'settlement_amount', 'order_count',
                       'approved_at', 'settled_at', 'settled_by', 'created_at', 'updated_at']

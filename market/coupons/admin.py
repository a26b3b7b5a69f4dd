from django.contrib import admin
from .models import Coupon, UserCoupon


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'discount_type', 'discount_value', 'used_quantity', 'total_quantity',
                    'is_active', 'start_date', 'end_date']
    list_filter = ['discount_type', 'usage_type', 'is_active', 'start_date', 'end_date']
    search_fields = ['code', 'name']
    ordering = ['-created_at']
    filter_horizontal = ['applicable_products']
    readonly_fields = ['used_quantity', 'created_at', 'updated_at']


@admin.register(UserCoupon)
class UserCouponAdmin(admin.ModelAdmin):
    list_display = ['user', 'coupon', 'issued_at', 'used_at', 'order', 'expires_at']
    list_filter = ['used_at', 'expires_at']
    search_fields = ['user__username', 'coupon__code']
    ordering = ['-issued_at']
    readonly_fields = ['issued_at']

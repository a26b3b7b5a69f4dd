from django.contrib import admin
from .models import Cart, CartItem, Order, OrderItem


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    readonly_fields = ['product', 'product_option', 'quantity', 'price']


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ['user', 'created_at', 'updated_at']
    search_fields = ['user__username']
    ordering = ['-updated_at']
    inlines = [CartItemInline]
    readonly_fields = ['created_at', 'updated_at']


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['product', 'product_option', 'product_name', 'option_name', 'quantity', 'price',
                       'tracking_number', 'shipped_at']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'user', 'order_status', 'final_amount', 'coupon_code', 'tracking_number', 'created_at']
    list_filter = ['order_status', 'created_at']
    search_fields = ['order_number', 'recipient_name', 'recipient_phone', 'user__username']
    ordering = ['-created_at']
    inlines = [OrderItemInline]
    readonly_fields = [
        'order_number', 'total_amount', 'product_discount_amount', 'coupon_code', 'coupon_discount_amount',
        'shipping_fee', 'final_amount', 'paid_at', 'shipped_at', 'delivered_at', 'confirmed_at',
        'cancelled_at', 'created_at', 'updated_at'
    ]

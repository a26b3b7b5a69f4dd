from django.contrib import admin
from .models import Category, Product, ProductOption, ProductNotice


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'parent', 'display_order', 'is_active', 'created_at']
    list_filter = ['is_active', 'parent']
    search_fields = ['name', 'description']
    ordering = ['display_order', 'name']


class ProductOptionInline(admin.TabularInline):
    model = ProductOption
    extra = 0
    fields = ['option_name', 'option_value', 'additional_price', 'stock', 'is_required', 'is_available']


class ProductNoticeInline(admin.StackedInline):
    model = ProductNotice
    extra = 0
    can_delete = False


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'seller', 'price', 'discount_rate', 'stock', 'is_event_product', 'is_active', 'created_at']
    list_filter = ['is_active', 'is_event_product', 'can_combine_shipping', 'category', 'seller']
    search_fields = ['name', 'origin', 'description']
    ordering = ['-created_at']
    list_select_related = ['category', 'seller']
    inlines = [ProductOptionInline, ProductNoticeInline]
    readonly_fields = ['created_at', 'updated_at']
    fieldsets = (
        (None, {'fields': ('name', 'category', 'seller', 'origin', 'description', 'is_active', 'is_event_product')}),
        ('Pricing', {'fields': ('price', 'discount_rate', 'supply_price')}),
        ('Stock', {'fields': ('stock', 'low_stock_threshold', 'min_order_quantity', 'max_order_quantity')}),
        ('Shipping', {'fields': ('shipping_fee', 'can_combine_shipping', 'combine_shipping_unit', 'courier_company')}),
        ('Images', {'fields': ('image_url', 'image_urls', 'detail_image_urls')}),
        ('Timestamps', {'fields': ('created_at', 'updated_at')}),
    )

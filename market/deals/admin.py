from django.contrib import admin
from .models import SpecialDeal


@admin.register(SpecialDeal)
class SpecialDealAdmin(admin.ModelAdmin):
    list_display = ['title', 'start_time', 'end_time', 'discount_rate', 'is_active', 'display_order']
    list_filter = ['is_active', 'start_time']
    search_fields = ['title', 'description']
    filter_horizontal = ['products']

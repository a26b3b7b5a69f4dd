from django.contrib import admin
from .models import ReturnRequest, ReturnItem


class ReturnItemInline(admin.TabularInline):
    model = ReturnItem
    extra = 0
    readonly_fields = ['order_item', 'quantity', 'refund_amount']


@admin.register(ReturnRequest)
class ReturnRequestAdmin(admin.ModelAdmin):
    list_display = ['order', 'status', 'reason_category', 'total_refund_amount', 'requested_at', 'completed_at']
    list_filter = ['status', 'reason_category', 'requested_at']
    search_fields = ['order__order_number', 'order__user__username', 'detailed_reason']
    readonly_fields = ['approved_at', 'rejected_at', 'completed_at', 'refunded_at', 'processed_by']
    inlines = [ReturnItemInline]

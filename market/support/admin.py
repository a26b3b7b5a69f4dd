from django.contrib import admin
from .models import Inquiry


@admin.register(Inquiry)
class InquiryAdmin(admin.ModelAdmin):
    list_display = ['title', 'user', 'category', 'status', 'created_at', 'answered_at']
    list_filter = ['status', 'category', 'created_at']
    search_fields = ['title', 'content', 'user__username']
    readonly_fields = ['answered_at', 'answered_by']

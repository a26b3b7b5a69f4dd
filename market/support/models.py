from django.conf import settings
from django.db import models


class Inquiry(models.Model):
    """Customer question answered by an admin"""
    CATEGORY_PRODUCT = 'PRODUCT'
    CATEGORY_ORDER = 'ORDER'
    CATEGORY_DELIVERY = 'DELIVERY'
    CATEGORY_RETURN = 'RETURN'
    CATEGORY_ACCOUNT = 'ACCOUNT'
    CATEGORY_OTHER = 'OTHER'
    CATEGORY_CHOICES = [
        (CATEGORY_PRODUCT, 'Product'),
        (CATEGORY_ORDER, 'Order'),
        (CATEGORY_DELIVERY, 'Delivery'),
        (CATEGORY_RETURN, 'Return / exchange'),
        (CATEGORY_ACCOUNT, 'Account'),
        (CATEGORY_OTHER, 'Other'),
    ]

    STATUS_PENDING = 'PENDING'
    STATUS_ANSWERED = 'ANSWERED'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ANSWERED, 'Answered'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='inquiries')
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default=CATEGORY_OTHER)
    title = models.CharField(max_length=200)
    content = models.TextField()
    attachment_url = models.URLField(max_length=500, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    answer = models.TextField(blank=True)
    answered_at = models.DateTimeField(null=True, blank=True)
    answered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='answered_inquiries'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'inquiries'
        verbose_name_plural = 'inquiries'
        ordering = ['-created_at']

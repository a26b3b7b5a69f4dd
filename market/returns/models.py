from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal


class ReturnRequest(models.Model):
    """Customer request to send back some or all items of a delivered order"""
    STATUS_REQUESTED = 'REQUESTED'
    STATUS_APPROVED = 'APPROVED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CHOICES = [
        (STATUS_REQUESTED, 'Requested'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    REASON_CHANGE_OF_MIND = 'CHANGE_OF_MIND'
    REASON_DEFECTIVE_PRODUCT = 'DEFECTIVE_PRODUCT'
    REASON_WRONG_DELIVERY = 'WRONG_DELIVERY'
    REASON_PRODUCT_INFO_MISMATCH = 'PRODUCT_INFO_MISMATCH'
    REASON_DELIVERY_DELAY = 'DELIVERY_DELAY'
    REASON_OTHER = 'OTHER'
    REASON_CHOICES = [
        (REASON_CHANGE_OF_MIND, 'Change of mind'),
        (REASON_DEFECTIVE_PRODUCT, 'Defective product'),
        (REASON_WRONG_DELIVERY, 'Wrong delivery'),
        (REASON_PRODUCT_INFO_MISMATCH, 'Product differs from description'),
        (REASON_DELIVERY_DELAY, 'Delivery delay'),
        (REASON_OTHER, 'Other'),
    ]
    # The seller pays return shipping for these
    SELLER_FAULT_REASONS = [
        REASON_DEFECTIVE_PRODUCT, REASON_WRONG_DELIVERY, REASON_PRODUCT_INFO_MISMATCH, REASON_DELIVERY_DELAY
    ]

    order = models.ForeignKey('orders.Order', on_delete=models.CASCADE, related_name='return_requests')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_REQUESTED, db_index=True)
    reason_category = models.CharField(max_length=30, choices=REASON_CHOICES)
    detailed_reason = models.TextField(blank=True)
    proof_image_urls = models.JSONField(default=list, blank=True)
    admin_note = models.TextField(blank=True)

    items_refund_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    shipping_refund_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_refund_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='processed_returns'
    )
    requested_at = models.DateTimeField(auto_now_add=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Return for {self.order.order_number}"

    @property
    def is_seller_fault(self):
        return self.reason_category in self.SELLER_FAULT_REASONS

    class Meta:
        db_table = 'return_requests'
        ordering = ['-requested_at']
        indexes = [
            models.Index(fields=['status', '-requested_at'], name='return_status_requested_idx'),
        ]


class ReturnItem(models.Model):
    """Quantity of one order line being returned"""
    return_request = models.ForeignKey(ReturnRequest, on_delete=models.CASCADE, related_name='items')
    order_item = models.ForeignKey('orders.OrderItem', on_delete=models.PROTECT, related_name='return_items')
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    item_reason = models.TextField(blank=True)

    def __str__(self):
        return f"{self.order_item.product_name} x{self.quantity}"

    # restore_stock() reads these like an order line
    @property
    def product_id(self):
        return self.order_item.product_id

    @property
    def product_option_id(self):
        return self.order_item.product_option_id

    class Meta:
        db_table = 'return_items'
        ordering = ['id']

from django.conf import settings
from django.db import models


class StockAdjustment(models.Model):
    """History of admin stock changes for products and options"""
    ITEM_PRODUCT = 'PRODUCT'
    ITEM_OPTION = 'OPTION'
    ITEM_TYPE_CHOICES = [
        (ITEM_PRODUCT, 'Product'),
        (ITEM_OPTION, 'Product option'),
    ]

    item_type = models.CharField(max_length=10, choices=ITEM_TYPE_CHOICES)
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='stock_adjustments')
    product_option = models.ForeignKey(
        'catalog.ProductOption', on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_adjustments'
    )
    previous_stock = models.IntegerField()
    new_stock = models.IntegerField()
    change = models.IntegerField()
    reason = models.CharField(max_length=255, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_adjustments'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.item_type} {self.product_id}: {self.previous_stock} -> {self.new_stock}"

    class Meta:
        db_table = 'stock_adjustments'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['product', '-created_at'], name='stock_adj_product_idx'),
        ]

from django.conf import settings
from django.db import models


class WishlistItem(models.Model):
    """Product saved by a user for later"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='wishlist_items')
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='wishlisted_by')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user} - {self.product}"

    class Meta:
        db_table = 'wishlist_items'
        unique_together = ['user', 'product']
        ordering = ['-created_at']

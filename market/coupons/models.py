from django.conf import settings
from django.db import models
from django.utils import timezone
from decimal import Decimal

from market.core.pricing import calculate_coupon_discount, FIXED_AMOUNT, PERCENTAGE


class Coupon(models.Model):
    """Discount coupon issued to users"""
    DISCOUNT_TYPE_CHOICES = [
        (FIXED_AMOUNT, 'Fixed Amount'),
        (PERCENTAGE, 'Percentage'),
    ]
    USAGE_SINGLE = 'SINGLE_USE'
    USAGE_MULTI = 'MULTI_USE'
    USAGE_TYPE_CHOICES = [
        (USAGE_SINGLE, 'Single Use'),
        (USAGE_MULTI, 'Multi Use'),
    ]

    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    discount_type = models.CharField(max_length=20, choices=DISCOUNT_TYPE_CHOICES)
    discount_value = models.DecimalField(max_digits=12, decimal_places=2)
    min_order_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    max_discount_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    total_quantity = models.PositiveIntegerField(null=True, blank=True)  # None = unlimited
    used_quantity = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    usage_type = models.CharField(max_length=20, choices=USAGE_TYPE_CHOICES, default=USAGE_SINGLE)
    applicable_category = models.ForeignKey(
        'catalog.Category', on_delete=models.SET_NULL, null=True, blank=True, related_name='coupons'
    )
    applicable_products = models.ManyToManyField('catalog.Product', blank=True, related_name='coupons')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        if self.code:
            self.code = self.code.strip().upper()
        super().save(*args, **kwargs)

    @property
    def has_stock(self):
        return self.total_quantity is None or self.used_quantity < self.total_quantity

    @property
    def is_expired(self):
        return timezone.now() > self.end_date

    @property
    def is_started(self):
        return timezone.now() >= self.start_date

    @property
    def is_valid(self):
        return self.is_active and self.is_started and not self.is_expired and self.has_stock

    def meets_min_order_amount(self, amount):
        return Decimal(str(amount)) >= self.min_order_amount

    def is_applicable_to(self, product):
        """Whether the coupon can discount this product"""
        if self.applicable_category_id:
            category = product.category
            if category is None:
                return False
            if self.applicable_category_id not in (category.id, category.parent_id):
                return False
        product_ids = [p.id for p in self.applicable_products.all()]
        if product_ids and product.id not in product_ids:
            return False
        return True

    def calculate_discount(self, amount):
        return calculate_coupon_discount(amount, self.discount_type, self.discount_value, self.max_discount_amount)

    class Meta:
        db_table = 'coupons'
        ordering = ['-created_at']


class UserCoupon(models.Model):
    """Coupon held by a user"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='user_coupons')
    coupon = models.ForeignKey(Coupon, on_delete=models.CASCADE, related_name='user_coupons')
    issued_at = models.DateTimeField(auto_now_add=True)
    used_at = models.DateTimeField(null=True, blank=True)
    order = models.ForeignKey('orders.Order', on_delete=models.SET_NULL, null=True, blank=True, related_name='user_coupons')
    expires_at = models.DateTimeField()

    def __str__(self):
        return f"{self.user.username} - {self.coupon.code}"

    def save(self, *args, **kwargs):
        if not self.expires_at and self.coupon_id:
            self.expires_at = self.coupon.end_date
        super().save(*args, **kwargs)

    @property
    def is_used(self):
        return self.used_at is not None

    @property
    def is_expired(self):
        return timezone.now() > self.expires_at

    @property
    def is_available(self):
        return not self.is_used and not self.is_expired and self.coupon.is_active

    class Meta:
        db_table = 'user_coupons'
        ordering = ['-issued_at']
        indexes = [
            models.Index(fields=['user', 'used_at'], name='user_coupon_user_used_idx'),
        ]

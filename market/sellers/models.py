from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal


class Seller(models.Model):
    """Supplier/farm selling through the marketplace"""
    name = models.CharField(max_length=200, db_index=True)
    business_number = models.CharField(max_length=20, unique=True)
    representative = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    bank_name = models.CharField(max_length=50, blank=True)
    account_number = models.CharField(max_length=50, blank=True)
    account_holder = models.CharField(max_length=100, blank=True)
    commission_rate = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal('10.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )  # percent
    is_active = models.BooleanField(default=True)
    memo = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.business_number})"

    class Meta:
        db_table = 'sellers'
        ordering = ['-created_at']


class Settlement(models.Model):
    """Payout to a seller for sales over a period, net of commission"""
    STATUS_PENDING = 'PENDING'
    STATUS_APPROVED = 'APPROVED'
    STATUS_PAID = 'PAID'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_PAID, 'Paid'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    seller = models.ForeignKey(Seller, on_delete=models.PROTECT, related_name='settlements')
    start_date = models.DateField()
    end_date = models.DateField()
    total_sales_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    commission_rate = models.DecimalField(max_digits=5, decimal_places=2)
    commission_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    settlement_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    order_count = models.IntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    settled_at = models.DateTimeField(null=True, blank=True)
    settled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='settlements_paid'
    )
    memo = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.seller.name} {self.start_date}~{self.end_date}"

    class Meta:
        db_table = 'settlements'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['seller', 'start_date', 'end_date'], name='settlement_seller_period_idx'),
        ]

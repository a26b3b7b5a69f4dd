from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal

from market.core.pricing import calculate_order_shipping


class Cart(models.Model):
    """Shopping cart, one per user"""
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='cart')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Cart of {self.user.username}"

    def get_subtotal(self):
        return sum((item.get_line_total() for item in self.items.all()), Decimal('0'))

    def get_shipping_fee(self):
        return calculate_order_shipping((item.product, item.quantity) for item in self.items.all())

    def get_total(self):
        return self.get_subtotal() + self.get_shipping_fee()

    class Meta:
        db_table = 'carts'


class CartItem(models.Model):
    """Product (and option) in a cart"""
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='cart_items')
    product_option = models.ForeignKey(
        'catalog.ProductOption', on_delete=models.CASCADE, null=True, blank=True, related_name='cart_items'
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=12, decimal_places=2)  # unit price when added
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.product.name} x{self.quantity}"

    def get_line_total(self):
        return self.price * self.quantity

    class Meta:
        db_table = 'cart_items'
        ordering = ['id']


class Order(models.Model):
    """Customer order"""
    STATUS_PENDING_PAYMENT = 'PENDING_PAYMENT'
    STATUS_PAYMENT_FAILED = 'PAYMENT_FAILED'
    STATUS_PAID = 'PAID'
    STATUS_PREPARING = 'PREPARING'
    STATUS_SHIPPED = 'SHIPPED'
    STATUS_DELIVERED = 'DELIVERED'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_RETURN_REQUESTED = 'RETURN_REQUESTED'
    STATUS_RETURN_APPROVED = 'RETURN_APPROVED'
    STATUS_RETURN_COMPLETED = 'RETURN_COMPLETED'
    STATUS_PARTIALLY_RETURNED = 'PARTIALLY_RETURNED'

    STATUS_CHOICES = [
        (STATUS_PENDING_PAYMENT, 'Pending Payment'),
        (STATUS_PAYMENT_FAILED, 'Payment Failed'),
        (STATUS_PAID, 'Paid'),
        (STATUS_PREPARING, 'Preparing'),
        (STATUS_SHIPPED, 'Shipped'),
        (STATUS_DELIVERED, 'Delivered'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_RETURN_REQUESTED, 'Return Requested'),
        (STATUS_RETURN_APPROVED, 'Return Approved'),
        (STATUS_RETURN_COMPLETED, 'Return Completed'),
        (STATUS_PARTIALLY_RETURNED, 'Partially Returned'),
    ]

    UNPAID_STATUSES = [STATUS_PENDING_PAYMENT, STATUS_PAYMENT_FAILED]
    # Stock has been deducted for orders in these statuses
    STOCK_DEDUCTED_STATUSES = [STATUS_PAID, STATUS_PREPARING]
    # Counted as revenue for dashboards and settlements
    SOLD_STATUSES = [STATUS_PAID, STATUS_PREPARING, STATUS_SHIPPED, STATUS_DELIVERED]
    RETURN_STATUSES = [
        STATUS_RETURN_REQUESTED, STATUS_RETURN_APPROVED, STATUS_RETURN_COMPLETED, STATUS_PARTIALLY_RETURNED
    ]

    order_number = models.CharField(max_length=50, unique=True, db_index=True)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='orders')
    order_status = models.CharField(max_length=30, choices=STATUS_CHOICES, default=STATUS_PENDING_PAYMENT, db_index=True)

    # Shipping info
    recipient_name = models.CharField(max_length=100)
    recipient_phone = models.CharField(max_length=20)
    shipping_postcode = models.CharField(max_length=10, blank=True)
    shipping_address_line1 = models.CharField(max_length=255)
    shipping_address_line2 = models.CharField(max_length=255, blank=True)
    sender_name = models.CharField(max_length=100, blank=True)
    sender_phone = models.CharField(max_length=20, blank=True)
    delivery_message = models.CharField(max_length=255, blank=True)

    # Amounts
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))  # items after product discount
    product_discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    coupon_code = models.CharField(max_length=50, blank=True)
    coupon_discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    shipping_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    final_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    # Delivery
    courier_company = models.CharField(max_length=50, blank=True)
    tracking_number = models.CharField(max_length=100, blank=True)

    paid_at = models.DateTimeField(null=True, blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.order_number

    def get_items_total(self):
        return sum((item.get_line_total() for item in self.items.all()), Decimal('0'))

    @property
    def is_cancellable(self):
        return self.order_status in (
            self.STATUS_PENDING_PAYMENT, self.STATUS_PAYMENT_FAILED, self.STATUS_PAID, self.STATUS_PREPARING
        )

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='order_user_created_idx'),
            models.Index(fields=['order_status', 'created_at'], name='order_status_created_idx'),
        ]


class OrderItem(models.Model):
    """Line of an order, with price and names captured at order time"""
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.SET_NULL, null=True, related_name='order_items')
    product_option = models.ForeignKey(
        'catalog.ProductOption', on_delete=models.SET_NULL, null=True, blank=True, related_name='order_items'
    )
    product_name = models.CharField(max_length=200)
    option_name = models.CharField(max_length=200, blank=True)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=12, decimal_places=2)  # unit price incl. option, after product discount
    courier_company = models.CharField(max_length=50, blank=True)
    tracking_number = models.CharField(max_length=100, blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.product_name} x{self.quantity}"

    def get_line_total(self):
        return self.price * self.quantity

    class Meta:
        db_table = 'order_items'
        ordering = ['id']

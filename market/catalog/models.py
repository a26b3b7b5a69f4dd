from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal

from market.core.pricing import calculate_discounted_price


def default_shipping_fee():
    return Decimal(str(getattr(settings, 'DEFAULT_SHIPPING_FEE', 3000)))


def default_low_stock_threshold():
    return getattr(settings, 'LOW_STOCK_THRESHOLD', 10)


STOCK_STATUS_IN_STOCK = 'in_stock'
STOCK_STATUS_LOW_STOCK = 'low_stock'
STOCK_STATUS_SOLD_OUT = 'sold_out'


def get_stock_status(stock, threshold):
    """Classify a stock level against a low stock threshold"""
    if stock <= 0:
        return STOCK_STATUS_SOLD_OUT
    if stock <= threshold:
        return STOCK_STATUS_LOW_STOCK
    return STOCK_STATUS_IN_STOCK


class Category(models.Model):
    """Product categories"""
    name = models.CharField(max_length=200, db_index=True)
    parent = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='children')
    description = models.TextField(blank=True)
    display_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['display_order', 'name']


class Product(models.Model):
    """Product sold on the storefront"""
    name = models.CharField(max_length=200, db_index=True)
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    seller = models.ForeignKey('sellers.Seller', on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    origin = models.CharField(max_length=100, blank=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    discount_rate = models.IntegerField(
        default=0, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )  # percent
    supply_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    stock = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    low_stock_threshold = models.IntegerField(default=default_low_stock_threshold, validators=[MinValueValidator(0)])

    # Shipping
    shipping_fee = models.DecimalField(max_digits=12, decimal_places=2, default=default_shipping_fee)  # per box
    can_combine_shipping = models.BooleanField(default=False)
    combine_shipping_unit = models.PositiveIntegerField(null=True, blank=True)  # items per box
    courier_company = models.CharField(max_length=50, blank=True)

    min_order_quantity = models.PositiveIntegerField(default=1)
    max_order_quantity = models.PositiveIntegerField(null=True, blank=True)

    is_event_product = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True, db_index=True)
    image_url = models.URLField(max_length=500, blank=True)
    image_urls = models.JSONField(default=list, blank=True)
    detail_image_urls = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def discounted_price(self):
        return calculate_discounted_price(self.price, self.discount_rate)

    @property
    def stock_status(self):
        return get_stock_status(self.stock, self.low_stock_threshold)

    def clean(self):
        if self.max_order_quantity is not None and self.max_order_quantity < self.min_order_quantity:
            raise ValidationError({'max_order_quantity': 'Maximum order quantity must be at least the minimum order quantity'})
        if self.can_combine_shipping and not self.combine_shipping_unit:
            raise ValidationError({'combine_shipping_unit': 'Combine shipping unit is required when combined shipping is enabled'})

    class Meta:
        db_table = 'products'
        indexes = [
            models.Index(fields=['category', 'is_active'], name='product_category_active_idx'),
            models.Index(fields=['-created_at'], name='product_created_idx'),
        ]


class ProductOption(models.Model):
    """Purchasable option of a product (size, weight, grade...)"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='options')
    option_name = models.CharField(max_length=100)
    option_value = models.CharField(max_length=100, blank=True)
    additional_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    stock = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    is_required = models.BooleanField(default=False)
    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.product.name} - {self.option_name}"

    @property
    def display_name(self):
        if self.option_value:
            return f"{self.option_name}: {self.option_value}"
        return self.option_name

    @property
    def unit_price(self):
        """Price of the product with this option, after product discount"""
        return self.product.discounted_price + self.additional_price

    @property
    def stock_status(self):
        return get_stock_status(self.stock, self.product.low_stock_threshold)

    class Meta:
        db_table = 'product_options'
        ordering = ['id']


class ProductNotice(models.Model):
    """Statutory food product information notice"""
    product = models.OneToOneField(Product, on_delete=models.CASCADE, related_name='notice')
    product_name = models.CharField(max_length=200, blank=True)
    food_type = models.CharField(max_length=100, blank=True)
    manufacturer = models.CharField(max_length=200, blank=True)
    expiration_info = models.CharField(max_length=200, blank=True)
    capacity = models.CharField(max_length=100, blank=True)
    ingredients = models.TextField(blank=True)
    nutrition_facts = models.TextField(blank=True)
    gmo_info = models.CharField(max_length=200, blank=True)
    safety_warnings = models.TextField(blank=True)
    import_declaration = models.CharField(max_length=200, blank=True)
    customer_service_phone = models.CharField(max_length=30, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Notice for {self.product.name}"

    class Meta:
        db_table = 'product_notices'

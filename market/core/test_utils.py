"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from datetime import timedelta
from decimal import Decimal
import random
import string

from market.catalog.models import Category, Product, ProductOption
from market.core.pricing import FIXED_AMOUNT
from market.coupons.models import Coupon, UserCoupon
from market.orders.models import Order, OrderItem
from market.orders.utils import generate_order_number
from market.sellers.models import Seller

User = get_user_model()

# Tests run on DummyCache; cache behaviour tests switch to this with override_settings
LOCMEM_CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'market-tests',
    }
}


class TestDataFactory:
    """Factory class for creating test data"""
    __test__ = False

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False, **extra):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser,
            **extra
        )

    @staticmethod
    def create_admin(username=None):
        return TestDataFactory.create_user(username=username, is_staff=True)

    @staticmethod
    def create_category(name=None, parent=None):
        """Create a test category"""
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return Category.objects.create(name=name, parent=parent, description=f'Test category {name}')

    @staticmethod
    def create_seller(name=None, business_number=None, commission_rate=None):
        """Create a test seller"""
        if not name:
            name = f'Farm_{TestDataFactory.random_string(6)}'
        if not business_number:
            business_number = f'{random.randint(100, 999)}-{random.randint(10, 99)}-{random.randint(10000, 99999)}'
            while Seller.objects.filter(business_number=business_number).exists():
                business_number = f'{random.randint(100, 999)}-{random.randint(10, 99)}-{random.randint(10000, 99999)}'
        return Seller.objects.create(
            name=name,
            business_number=business_number,
            commission_rate=commission_rate if commission_rate is not None else Decimal('10.00'),
        )

    @staticmethod
    def create_product(name=None, price=None, stock=100, category=None, seller=None, **extra):
        """Create a test product (shipping 3000 per item unless overridden)"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if category is None:
            category = TestDataFactory.create_category()
        fields = {
            'discount_rate': 0,
            'shipping_fee': Decimal('3000'),
            'low_stock_threshold': 10,
        }
        fields.update(extra)
        return Product.objects.create(
            name=name,
            price=price if price is not None else Decimal('10000'),
            stock=stock,
            category=category,
            seller=seller,
            **fields
        )

    @staticmethod
    def create_option(product, option_name=None, additional_price=None, stock=50, **extra):
        """Create a test product option"""
        return ProductOption.objects.create(
            product=product,
            option_name=option_name or f'Option_{TestDataFactory.random_string(4)}',
            additional_price=additional_price if additional_price is not None else Decimal('0'),
            stock=stock,
            **extra
        )

    @staticmethod
    def create_coupon(code=None, discount_type=FIXED_AMOUNT, discount_value=None,
                      days_valid=30, **extra):
        """Create a test coupon valid from yesterday"""
        if not code:
            code = f'CPN{TestDataFactory.random_string(6).upper()}'
        now = timezone.now()
        fields = {
            'start_date': now - timedelta(days=1),
            'end_date': now + timedelta(days=days_valid),
        }
        fields.update(extra)
        return Coupon.objects.create(
            code=code,
            name=f'Coupon {code}',
            discount_type=discount_type,
            discount_value=discount_value if discount_value is not None else Decimal('1000'),
            **fields
        )

    @staticmethod
    def create_user_coupon(user, coupon):
        return UserCoupon.objects.create(user=user, coupon=coupon, expires_at=coupon.end_date)

    @staticmethod
    def create_order(user, items=None, status=Order.STATUS_PENDING_PAYMENT, created_at=None, shipping_fee=None):
        """
        Create an order directly (no stock checks)

        ``items`` is a list of (product, quantity) or (product, quantity, option).
        """
        items = items or []
        total = sum((product.discounted_price * quantity for product, quantity, *_ in items), Decimal('0'))
        shipping_fee = shipping_fee if shipping_fee is not None else Decimal('0')
        order = Order.objects.create(
            order_number=generate_order_number(),
            user=user,
            order_status=status,
            recipient_name='Recipient',
            recipient_phone='010-0000-0000',
            shipping_address_line1='1 Test Street',
            total_amount=total,
            shipping_fee=shipping_fee,
            final_amount=total + shipping_fee,
            paid_at=timezone.now() if status in Order.SOLD_STATUSES else None,
        )
        for product, quantity, *rest in items:
            option = rest[0] if rest else None
            price = product.discounted_price + (option.additional_price if option else Decimal('0'))
            OrderItem.objects.create(
                order=order,
                product=product,
                product_option=option,
                product_name=product.name,
                option_name=option.display_name if option else '',
                quantity=quantity,
                price=price,
            )
        if created_at is not None:
            # auto_now_add ignores explicit values on create
            Order.objects.filter(pk=order.pk).update(created_at=created_at)
            order.refresh_from_db()
        return order


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()

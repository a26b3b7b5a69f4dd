from rest_framework import serializers
from market.core.pricing import PERCENTAGE
from .models import Coupon, UserCoupon


class CouponSerializer(serializers.ModelSerializer):
    remaining_quantity = serializers.SerializerMethodField()
    is_valid = serializers.BooleanField(read_only=True)

    class Meta:
        model = Coupon
        fields = [
            'id', 'code', 'name', 'description', 'discount_type', 'discount_value', 'min_order_amount',
            'max_discount_amount', 'start_date', 'end_date', 'total_quantity', 'used_quantity',
            'remaining_quantity', 'is_active', 'is_valid', 'usage_type', 'applicable_category',
            'applicable_products', 'created_at', 'updated_at'
        ]
        read_only_fields = ['used_quantity', 'created_at', 'updated_at']

    def get_remaining_quantity(self, obj):
        if obj.total_quantity is None:
            return None
        return max(obj.total_quantity - obj.used_quantity, 0)

    def validate_code(self, value):
        code = value.strip().upper()
        queryset = Coupon.objects.filter(code=code)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('A coupon with this code already exists')
        return code

    def validate(self, attrs):
        def current(field):
            if field in attrs:
                return attrs[field]
            return getattr(self.instance, field, None) if self.instance else None

        start_date = current('start_date')
        end_date = current('end_date')
        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({'end_date': 'End date must be after start date'})

        value = current('discount_value')
        if value is not None and value <= 0:
            raise serializers.ValidationError({'discount_value': 'Discount value must be positive'})
        if current('discount_type') == PERCENTAGE and value is not None and value > 100:
            raise serializers.ValidationError({'discount_value': 'Percentage discount must be between 0 and 100'})
        return attrs


class PublicCouponSerializer(serializers.ModelSerializer):
    class Meta:
        model = Coupon
        fields = [
            'id', 'code', 'name', 'description', 'discount_type', 'discount_value', 'min_order_amount',
            'max_discount_amount', 'start_date', 'end_date', 'usage_type'
        ]


class UserCouponSerializer(serializers.ModelSerializer):
    coupon = PublicCouponSerializer(read_only=True)
    is_used = serializers.BooleanField(read_only=True)
    is_expired = serializers.BooleanField(read_only=True)
    is_available = serializers.BooleanField(read_only=True)
    order_number = serializers.CharField(source='order.order_number', read_only=True, default=None)

    class Meta:
        model = UserCoupon
        fields = [
            'id', 'coupon', 'issued_at', 'used_at', 'order', 'order_number', 'expires_at',
            'is_used', 'is_expired', 'is_available'
        ]


class CouponValidateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    order_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)

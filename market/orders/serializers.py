from rest_framework import serializers
from .models import Cart, CartItem, Order, OrderItem


class CartItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_image_url = serializers.CharField(source='product.image_url', read_only=True)
    option_name = serializers.SerializerMethodField()
    stock = serializers.IntegerField(source='product.stock', read_only=True)
    line_total = serializers.SerializerMethodField()

    class Meta:
        model = CartItem
        fields = [
            'id', 'product', 'product_name', 'product_image_url', 'product_option', 'option_name',
            'quantity', 'price', 'line_total', 'stock', 'created_at', 'updated_at'
        ]

    def get_option_name(self, obj):
        return obj.product_option.display_name if obj.product_option else None

    def get_line_total(self, obj):
        return str(obj.get_line_total())


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)
    item_count = serializers.SerializerMethodField()
    subtotal = serializers.SerializerMethodField()
    shipping_fee = serializers.SerializerMethodField()
    total = serializers.SerializerMethodField()

    class Meta:
        model = Cart
        fields = ['id', 'items', 'item_count', 'subtotal', 'shipping_fee', 'total', 'updated_at']

    def get_item_count(self, obj):
        return obj.items.count()

    def get_subtotal(self, obj):
        return str(obj.get_subtotal())

    def get_shipping_fee(self, obj):
        return str(obj.get_shipping_fee())

    def get_total(self, obj):
        return str(obj.get_total())


class CartItemAddSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    option_id = serializers.IntegerField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, default=1)


class OrderItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    option_id = serializers.IntegerField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    """Checkout request: shipping info, optional items (defaults to cart) and coupon"""
    recipient_name = serializers.CharField(max_length=100)
    recipient_phone = serializers.CharField(max_length=20)
    shipping_postcode = serializers.CharField(max_length=10, required=False, allow_blank=True, default='')
    shipping_address_line1 = serializers.CharField(max_length=255)
    shipping_address_line2 = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    sender_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    sender_phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    delivery_message = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    items = OrderItemInputSerializer(many=True, required=False)
    user_coupon_id = serializers.IntegerField(required=False, allow_null=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('Order must contain at least one item')
        return value


class OrderPreviewSerializer(serializers.Serializer):
    items = OrderItemInputSerializer(many=True, required=False)
    user_coupon_id = serializers.IntegerField(required=False, allow_null=True)


class OrderItemSerializer(serializers.ModelSerializer):
    line_total = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = [
            'id', 'product', 'product_option', 'product_name', 'option_name', 'quantity', 'price',
            'line_total', 'courier_company', 'tracking_number', 'shipped_at'
        ]

    def get_line_total(self, obj):
        return str(obj.get_line_total())


class OrderListSerializer(serializers.ModelSerializer):
    item_count = serializers.SerializerMethodField()
    first_item_name = serializers.SerializerMethodField()
    status_display = serializers.CharField(source='get_order_status_display', read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'order_status', 'status_display', 'recipient_name', 'final_amount',
            'item_count', 'first_item_name', 'tracking_number', 'created_at'
        ]

    def get_item_count(self, obj):
        return len(obj.items.all())

    def get_first_item_name(self, obj):
        items = obj.items.all()
        return items[0].product_name if items else None


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    status_display = serializers.CharField(source='get_order_status_display', read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'user', 'username', 'order_status', 'status_display',
            'recipient_name', 'recipient_phone', 'shipping_postcode', 'shipping_address_line1',
            'shipping_address_line2', 'sender_name', 'sender_phone', 'delivery_message',
            'total_amount', 'product_discount_amount', 'coupon_code', 'coupon_discount_amount',
            'shipping_fee', 'final_amount', 'courier_company', 'tracking_number',
            'paid_at', 'shipped_at', 'delivered_at', 'confirmed_at',
            'cancellation_reason', 'cancelled_at', 'items', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class TrackingNumberSerializer(serializers.Serializer):
    tracking_number = serializers.CharField(max_length=100)
    courier_company = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')


class BulkOrderStatusSerializer(serializers.Serializer):
    order_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)

from rest_framework import serializers
from .models import Category, Product, ProductOption, ProductNotice


class CategorySerializer(serializers.ModelSerializer):
    children = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'parent', 'description', 'display_order', 'is_active', 'children', 'created_at', 'updated_at']

    def get_children(self, obj):
        children = [child for child in obj.children.all() if child.is_active]
        return [{'id': child.id, 'name': child.name} for child in children]


class ProductOptionSerializer(serializers.ModelSerializer):
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    stock_status = serializers.CharField(read_only=True)

    class Meta:
        model = ProductOption
        fields = [
            'id', 'product', 'option_name', 'option_value', 'additional_price', 'stock',
            'is_required', 'is_available', 'unit_price', 'stock_status', 'created_at', 'updated_at'
        ]
        read_only_fields = ['product', 'created_at', 'updated_at']

    def validate_stock(self, value):
        if value < 0:
            raise serializers.ValidationError('Stock cannot be negative')
        return value


class ProductNoticeSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductNotice
        fields = [
            'id', 'product', 'product_name', 'food_type', 'manufacturer', 'expiration_info', 'capacity',
            'ingredients', 'nutrition_facts', 'gmo_info', 'safety_warnings', 'import_declaration',
            'customer_service_phone', 'updated_at'
        ]
        read_only_fields = ['product', 'updated_at']


class ProductListSerializer(serializers.ModelSerializer):
    """Lightweight product representation for lists"""
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    seller_name = serializers.CharField(source='seller.name', read_only=True, default=None)
    discounted_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    stock_status = serializers.CharField(read_only=True)
    average_rating = serializers.SerializerMethodField()
    review_count = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'category', 'category_name', 'seller', 'seller_name', 'origin', 'price',
            'discount_rate', 'discounted_price', 'stock', 'stock_status', 'shipping_fee',
            'can_combine_shipping', 'combine_shipping_unit', 'is_event_product', 'image_url',
            'average_rating', 'review_count', 'created_at'
        ]

    def get_average_rating(self, obj):
        value = getattr(obj, 'avg_rating', None)
        return round(float(value), 1) if value is not None else 0.0

    def get_review_count(self, obj):
        return getattr(obj, 'reviews_count', 0) or 0


class ProductDetailSerializer(ProductListSerializer):
    options = serializers.SerializerMethodField()
    notice = serializers.SerializerMethodField()

    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + [
            'description', 'courier_company', 'min_order_quantity', 'max_order_quantity',
            'image_urls', 'detail_image_urls', 'options', 'notice', 'updated_at'
        ]

    def get_options(self, obj):
        options = [option for option in obj.options.all() if option.is_available]
        return ProductOptionSerializer(options, many=True).data

    def get_notice(self, obj):
        notice = getattr(obj, 'notice', None)
        if notice is None:
            return None
        return ProductNoticeSerializer(notice).data


class ProductSerializer(serializers.ModelSerializer):
    """Admin read/write serializer"""
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    seller_name = serializers.CharField(source='seller.name', read_only=True, default=None)
    discounted_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    stock_status = serializers.CharField(read_only=True)
    options = ProductOptionSerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'category', 'category_name', 'seller', 'seller_name', 'origin', 'description',
            'price', 'discount_rate', 'discounted_price', 'supply_price', 'stock', 'low_stock_threshold',
            'stock_status', 'shipping_fee', 'can_combine_shipping', 'combine_shipping_unit',
            'courier_company', 'min_order_quantity', 'max_order_quantity', 'is_event_product',
            'is_active', 'image_url', 'image_urls', 'detail_image_urls', 'options',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        def current(field):
            if field in attrs:
                return attrs[field]
            return getattr(self.instance, field, None) if self.instance else None

        min_qty = current('min_order_quantity') or 1
        max_qty = current('max_order_quantity')
        if min_qty < 1:
            raise serializers.ValidationError({'min_order_quantity': 'Minimum order quantity must be at least 1'})
        if max_qty is not None and max_qty < min_qty:
            raise serializers.ValidationError({
                'max_order_quantity': 'Maximum order quantity must be at least the minimum order quantity'
            })

        if current('can_combine_shipping'):
            unit = current('combine_shipping_unit')
            if not unit or unit <= 0:
                raise serializers.ValidationError({
                    'combine_shipping_unit': 'Combine shipping unit is required when combined shipping is enabled'
                })

        shipping_fee = current('shipping_fee')
        if shipping_fee is not None and shipping_fee < 0:
            raise serializers.ValidationError({'shipping_fee': 'Shipping fee cannot be negative'})
        return attrs

from rest_framework import serializers
from .models import WishlistItem


class WishlistItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_price = serializers.DecimalField(source='product.price', max_digits=12, decimal_places=2, read_only=True)
    discount_rate = serializers.IntegerField(source='product.discount_rate', read_only=True)
    discounted_price = serializers.DecimalField(
        source='product.discounted_price', max_digits=12, decimal_places=2, read_only=True
    )
    image_url = serializers.CharField(source='product.image_url', read_only=True)
    stock_status = serializers.CharField(source='product.stock_status', read_only=True)
    is_active = serializers.BooleanField(source='product.is_active', read_only=True)
    average_rating = serializers.SerializerMethodField()
    review_count = serializers.SerializerMethodField()

    class Meta:
        model = WishlistItem
        fields = [
            'id', 'product', 'product_name', 'product_price', 'discount_rate', 'discounted_price',
            'image_url', 'stock_status', 'is_active', 'average_rating', 'review_count', 'created_at'
        ]

    def get_average_rating(self, obj):
        average = getattr(obj, 'avg_rating', None)
        return round(float(average), 1) if average is not None else 0.0

    def get_review_count(self, obj):
        return getattr(obj, 'reviews_count', 0) or 0

from rest_framework import serializers

from market.catalog.models import Product
from market.catalog.serializers import ProductListSerializer
from .models import SpecialDeal


class SpecialDealSerializer(serializers.ModelSerializer):
    products = ProductListSerializer(many=True, read_only=True)
    product_ids = serializers.PrimaryKeyRelatedField(
        source='products', queryset=Product.objects.all(), many=True, write_only=True, required=False
    )
    is_ongoing = serializers.BooleanField(read_only=True)
    is_upcoming = serializers.BooleanField(read_only=True)
    is_expired = serializers.BooleanField(read_only=True)

    class Meta:
        model = SpecialDeal
        fields = [
            'id', 'title', 'description', 'start_time', 'end_time', 'discount_rate', 'is_active',
            'display_order', 'banner_image_url', 'background_color', 'text_color', 'products',
            'product_ids', 'is_ongoing', 'is_upcoming', 'is_expired', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, data):
        start_time = data.get('start_time', getattr(self.instance, 'start_time', None))
        end_time = data.get('end_time', getattr(self.instance, 'end_time', None))
        if start_time and end_time and end_time <= start_time:
            raise serializers.ValidationError({'end_time': 'End time must be after start time'})
        return data

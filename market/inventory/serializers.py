from rest_framework import serializers
from .models import StockAdjustment


class StockAdjustmentSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    option_name = serializers.CharField(source='product_option.option_name', read_only=True, default=None)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = StockAdjustment
        fields = [
            'id', 'item_type', 'product', 'product_name', 'product_option', 'option_name',
            'previous_stock', 'new_stock', 'change', 'reason', 'created_by', 'created_by_username', 'created_at'
        ]
        read_only_fields = fields


class InventoryItemSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    type = serializers.CharField()
    product_id = serializers.IntegerField()
    option_id = serializers.IntegerField(allow_null=True)
    name = serializers.CharField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    stock = serializers.IntegerField()
    low_stock_threshold = serializers.IntegerField()
    stock_status = serializers.CharField()
    is_active = serializers.BooleanField()


class BulkStockItemSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    type = serializers.ChoiceField(choices=StockAdjustment.ITEM_TYPE_CHOICES)
    new_stock = serializers.IntegerField(required=False, min_value=0)
    delta = serializers.IntegerField(required=False)


class BulkStockUpdateSerializer(serializers.Serializer):
    items = BulkStockItemSerializer(many=True, allow_empty=False)
    reason = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_items(self, value):
        missing = [item['id'] for item in value if 'new_stock' not in item]
        if missing:
            raise serializers.ValidationError(f'new_stock is required for items: {missing}')
        return value


class BulkStockAdjustSerializer(serializers.Serializer):
    items = BulkStockItemSerializer(many=True, allow_empty=False)
    delta = serializers.IntegerField(required=False)
    reason = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, data):
        if 'delta' not in data and any('delta' not in item for item in data['items']):
            raise serializers.ValidationError({'delta': 'A delta is required for every item'})
        return data

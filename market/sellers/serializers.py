from rest_framework import serializers
from .models import Seller, Settlement


class SellerSerializer(serializers.ModelSerializer):
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Seller
        fields = [
            'id', 'name', 'business_number', 'representative', 'phone', 'email', 'address',
            'bank_name', 'account_number', 'account_holder', 'commission_rate', 'is_active',
            'memo', 'product_count', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def get_product_count(self, obj):
        return obj.products.count()

    def validate_business_number(self, value):
        value = value.strip()
        queryset = Seller.objects.filter(business_number=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('A seller with this business number already exists')
        return value


class SettlementSerializer(serializers.ModelSerializer):
    seller_name = serializers.CharField(source='seller.name', read_only=True)
    settled_by_name = serializers.CharField(source='settled_by.username', read_only=True, default=None)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Settlement
        fields = [
            'id', 'seller', 'seller_name', 'start_date', 'end_date', 'total_sales_amount',
            'commission_rate', 'commission_amount', 'settlement_amount', 'order_count',
            'status', 'status_display', 'approved_at', 'settled_at', 'settled_by', 'settled_by_name',
            'memo', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class SettlementGenerateSerializer(serializers.Serializer):
    seller_id = serializers.IntegerField(required=False)
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs['start_date'] > attrs['end_date']:
            raise serializers.ValidationError({'end_date': 'End date must not be before start date'})
        return attrs


class SettlementUpdateSerializer(serializers.Serializer):
    memo = serializers.CharField(required=False, allow_blank=True)
    commission_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, min_value=0, max_value=100)

from rest_framework import serializers
from .models import ReturnRequest, ReturnItem


class ReturnItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='order_item.product_name', read_only=True)
    option_name = serializers.CharField(source='order_item.option_name', read_only=True)
    ordered_quantity = serializers.IntegerField(source='order_item.quantity', read_only=True)

    class Meta:
        model = ReturnItem
        fields = [
            'id', 'order_item', 'product_name', 'option_name', 'ordered_quantity', 'quantity',
            'refund_amount', 'item_reason'
        ]


class ReturnRequestSerializer(serializers.ModelSerializer):
    items = ReturnItemSerializer(many=True, read_only=True)
    order_number = serializers.CharField(source='order.order_number', read_only=True)
    order_status = serializers.CharField(source='order.order_status', read_only=True)
    username = serializers.CharField(source='order.user.username', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    reason_display = serializers.CharField(source='get_reason_category_display', read_only=True)

    class Meta:
        model = ReturnRequest
        fields = [
            'id', 'order', 'order_number', 'order_status', 'username', 'status', 'status_display',
            'reason_category', 'reason_display', 'detailed_reason', 'proof_image_urls', 'admin_note',
            'items_refund_amount', 'shipping_refund_amount', 'total_refund_amount', 'processed_by',
            'requested_at', 'approved_at', 'rejected_at', 'completed_at', 'refunded_at', 'items'
        ]
        read_only_fields = fields


class ReturnItemInputSerializer(serializers.Serializer):
    order_item_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class ReturnCreateSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    reason_category = serializers.ChoiceField(choices=ReturnRequest.REASON_CHOICES)
    detailed_reason = serializers.CharField(required=False, allow_blank=True, default='')
    proof_image_urls = serializers.ListField(
        child=serializers.URLField(max_length=500), required=False, default=list
    )
    items = ReturnItemInputSerializer(many=True, allow_empty=False)


class ReturnApproveSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, default='')


class ReturnRejectSerializer(serializers.Serializer):
    reason = serializers.CharField()

    def validate_reason(self, value):
        if not value.strip():
            raise serializers.ValidationError('Rejection reason cannot be blank')
        return value.strip()

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from django.shortcuts import get_object_or_404
import logging

from market.catalog.models import Product, ProductOption
from market.core.cache_signals import suspend_cache_signals
from market.core.cache_utils import invalidate_products_cache
from market.core.exceptions import BusinessError
from market.core.utils import create_audit_log, error_response, paginated_response
from .models import StockAdjustment
from .serializers import (
    StockAdjustmentSerializer, InventoryItemSerializer, BulkStockUpdateSerializer, BulkStockAdjustSerializer
)
from . import utils

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def inventory_statistics(request):
    return Response(utils.inventory_statistics())


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def inventory_items(request):
    """Products and their options with stock status; filter by stock_status and keyword"""
    rows = utils.inventory_items(
        stock_status=request.query_params.get('stock_status'),
        keyword=request.query_params.get('keyword'),
    )
    return paginated_response(request, rows, lambda page: InventoryItemSerializer(page, many=True).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminUser])
def product_stock_update(request, pk):
    product = get_object_or_404(Product, pk=pk)
    try:
        adjustment = utils.set_product_stock(product, request.data.get('stock'),
                                             request.data.get('reason', ''), request.user)
    except BusinessError as e:
        return error_response(e)
    create_audit_log(request=request, action='stock_update', model_name='Product', object_id=product.id,
                     object_name=product.name,
                     changes={'previous_stock': adjustment.previous_stock, 'new_stock': adjustment.new_stock})
    return Response(StockAdjustmentSerializer(adjustment).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminUser])
def option_stock_update(request, pk):
    option = get_object_or_404(ProductOption.objects.select_related('product'), pk=pk)
    try:
        adjustment = utils.set_option_stock(option, request.data.get('stock'),
                                            request.data.get('reason', ''), request.user)
    except BusinessError as e:
        return error_response(e)
    create_audit_log(request=request, action='stock_update', model_name='ProductOption', object_id=option.id,
                     object_name=str(option),
                     changes={'previous_stock': adjustment.previous_stock, 'new_stock': adjustment.new_stock})
    return Response(StockAdjustmentSerializer(adjustment).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminUser])
def product_threshold_update(request, pk):
    product = get_object_or_404(Product, pk=pk)
    previous_threshold = product.low_stock_threshold
    try:
        utils.set_low_stock_threshold(product, request.data.get('threshold'))
    except BusinessError as e:
        return error_response(e)
    create_audit_log(request=request, action='update', model_name='Product', object_id=product.id,
                     object_name=product.name,
                     changes={'low_stock_threshold': [previous_threshold, product.low_stock_threshold]})
    return Response({
        'id': product.id,
        'low_stock_threshold': product.low_stock_threshold,
        'stock_status': product.stock_status,
    })


def _bulk_response(request, adjustments):
    invalidate_products_cache()
    create_audit_log(request=request, action='stock_bulk_update', model_name='StockAdjustment',
                     object_id=adjustments[0].id if adjustments else 'bulk',
                     changes={'items': [
                         {'type': a.item_type, 'product': a.product_id, 'option': a.product_option_id,
                          'previous_stock': a.previous_stock, 'new_stock': a.new_stock}
                         for a in adjustments
                     ]})
    return Response({
        'updated_count': len(adjustments),
        'adjustments': StockAdjustmentSerializer(adjustments, many=True).data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def bulk_stock_update(request):
    """Set the stock of several items; all or nothing"""
    serializer = BulkStockUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        with suspend_cache_signals():
            adjustments = utils.bulk_set_stock(
                serializer.validated_data['items'], serializer.validated_data['reason'], request.user
            )
    except BusinessError as e:
        logger.warning(f"Bulk stock update rejected: {e}")
        return error_response(e)
    return _bulk_response(request, adjustments)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def bulk_stock_adjust(request):
    """Add a delta to the stock of several items, flooring at zero; all or nothing"""
    serializer = BulkStockAdjustSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        with suspend_cache_signals():
            adjustments = utils.bulk_adjust_stock(
                serializer.validated_data['items'],
                serializer.validated_data.get('delta'),
                serializer.validated_data['reason'],
                request.user,
            )
    except BusinessError as e:
        logger.warning(f"Bulk stock adjust rejected: {e}")
        return error_response(e)
    return _bulk_response(request, adjustments)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def stock_adjustment_list(request):
    """Stock change history, optionally for one product"""
    queryset = StockAdjustment.objects.select_related('product', 'product_option', 'created_by')
    product_id = request.query_params.get('product')
    if product_id:
        queryset = queryset.filter(product_id=product_id)
    item_type = request.query_params.get('item_type')
    if item_type:
        queryset = queryset.filter(item_type=item_type)
    queryset = queryset.order_by('-created_at', '-id')
    return paginated_response(request, queryset, lambda page: StockAdjustmentSerializer(page, many=True).data)

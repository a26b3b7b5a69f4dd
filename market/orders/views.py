from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from django.shortcuts import get_object_or_404
import logging

from market.core.exceptions import BusinessError
from market.core.utils import create_audit_log, error_response, paginated_response
from .filters import OrderFilter
from .models import Order
from .serializers import (
    CartSerializer, CartItemSerializer, CartItemAddSerializer,
    OrderCreateSerializer, OrderPreviewSerializer, OrderListSerializer, OrderSerializer,
    OrderStatusUpdateSerializer, TrackingNumberSerializer, BulkOrderStatusSerializer
)
from . import utils

logger = logging.getLogger(__name__)


def cart_response(user, status_code=status.HTTP_200_OK):
    cart = utils.get_or_create_cart(user)
    return Response(CartSerializer(cart).data, status=status_code)


# Cart views
@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def cart_detail(request):
    """Get the current user's cart or clear it"""
    if request.method == 'DELETE':
        utils.clear_cart(request.user)
    return cart_response(request.user)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_add_item(request):
    """Add a product (and option) to the cart"""
    serializer = CartItemAddSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        item = utils.add_to_cart(
            request.user,
            serializer.validated_data['product_id'],
            serializer.validated_data.get('option_id'),
            serializer.validated_data['quantity'],
        )
    except BusinessError as e:
        return error_response(e)
    return Response(CartItemSerializer(item).data, status=status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def cart_item_detail(request, item_id):
    """Change the quantity of a cart item or remove it"""
    try:
        if request.method == 'DELETE':
            utils.remove_cart_item(request.user, item_id)
            return Response(status=status.HTTP_204_NO_CONTENT)
        item = utils.update_cart_item(request.user, item_id, request.data.get('quantity'))
    except BusinessError as e:
        return error_response(e)
    return Response(CartItemSerializer(item).data)


# Order views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """List the current user's orders or place a new order"""
    if request.method == 'GET':
        queryset = Order.objects.filter(user=request.user).prefetch_related('items')
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(order_status=status_filter)
        queryset = queryset.order_by('-created_at')
        return paginated_response(request, queryset, lambda page: OrderListSerializer(page, many=True).data)

    serializer = OrderCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = dict(serializer.validated_data)
    items = data.pop('items', None)
    user_coupon_id = data.pop('user_coupon_id', None)
    try:
        order = utils.create_order(request.user, data, items=items, user_coupon_id=user_coupon_id)
    except BusinessError as e:
        logger.warning(f"Order rejected for user {request.user.id}: {e}")
        return error_response(e)

    create_audit_log(
        request=request,
        action='order_create',
        model_name='Order',
        object_id=order.id,
        object_name=f"Order {order.order_number}",
        object_reference=order.order_number,
        changes={
            'total_amount': str(order.total_amount),
            'coupon_code': order.coupon_code,
            'coupon_discount_amount': str(order.coupon_discount_amount),
            'shipping_fee': str(order.shipping_fee),
            'final_amount': str(order.final_amount),
            'items': [f"{item.product_name} x{item.quantity}" for item in order.items.all()],
        }
    )
    return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_preview(request):
    """Compute checkout totals without placing the order"""
    serializer = OrderPreviewSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        preview = utils.preview_order(
            request.user,
            items=serializer.validated_data.get('items'),
            user_coupon_id=serializer.validated_data.get('user_coupon_id'),
        )
    except BusinessError as e:
        return error_response(e)
    return Response(preview)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    """Retrieve one of the current user's orders"""
    order = get_object_or_404(Order.objects.prefetch_related('items'), pk=pk)
    if order.user_id != request.user.id and not request.user.is_staff:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    return Response(OrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_pay(request, pk):
    """Confirm payment for an order: deducts stock and marks it PAID"""
    order = get_object_or_404(Order, pk=pk)
    if order.user_id != request.user.id:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    try:
        utils.complete_payment(order)
    except BusinessError as e:
        logger.warning(f"Payment rejected for order {order.order_number}: {e}")
        return error_response(e)
    create_audit_log(request=request, action='order_pay', model_name='Order', object_id=order.id,
                     object_name=f"Order {order.order_number}", object_reference=order.order_number,
                     changes={'final_amount': str(order.final_amount)})
    return Response(OrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_payment_failed(request, pk):
    """Record a failed payment attempt"""
    order = get_object_or_404(Order, pk=pk)
    if order.user_id != request.user.id:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    try:
        utils.fail_payment(order)
    except BusinessError as e:
        return error_response(e)
    return Response(OrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_cancel(request, pk):
    """Cancel one of the current user's orders"""
    order = get_object_or_404(Order, pk=pk)
    reason = request.data.get('reason', '')
    previous_status = order.order_status
    try:
        utils.cancel_order(order, reason=reason, user=request.user)
    except BusinessError as e:
        return error_response(e)
    create_audit_log(request=request, action='order_cancel', model_name='Order', object_id=order.id,
                     object_name=f"Order {order.order_number}", object_reference=order.order_number,
                     changes={'previous_status': previous_status, 'reason': reason})
    return Response(OrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_confirm(request, pk):
    """Confirm receipt of a delivered order"""
    order = get_object_or_404(Order, pk=pk)
    try:
        utils.confirm_order(order, request.user)
    except BusinessError as e:
        return error_response(e)
    create_audit_log(request=request, action='order_confirm', model_name='Order', object_id=order.id,
                     object_name=f"Order {order.order_number}", object_reference=order.order_number)
    return Response(OrderSerializer(order).data)


# Admin order views
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_order_list(request):
    """List all orders with status, date range, seller and search filters"""
    queryset = Order.objects.select_related('user').prefetch_related('items')
    order_filter = OrderFilter(request.query_params, queryset=queryset)
    if not order_filter.is_valid():
        return Response(order_filter.errors, status=status.HTTP_400_BAD_REQUEST)
    queryset = order_filter.qs.order_by('-created_at', '-id')
    return paginated_response(request, queryset, lambda page: OrderSerializer(page, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_order_detail(request, pk):
    order = get_object_or_404(Order.objects.select_related('user').prefetch_related('items'), pk=pk)
    return Response(OrderSerializer(order).data)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_order_status(request, pk):
    """Change the status of an order"""
    order = get_object_or_404(Order, pk=pk)
    serializer = OrderStatusUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    previous_status = order.order_status
    try:
        utils.update_order_status(order, serializer.validated_data['status'], serializer.validated_data['reason'])
    except BusinessError as e:
        return error_response(e)
    create_audit_log(request=request, action='order_status', model_name='Order', object_id=order.id,
                     object_name=f"Order {order.order_number}", object_reference=order.order_number,
                     changes={'old_status': previous_status, 'new_status': order.order_status})
    return Response(OrderSerializer(order).data)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_order_tracking(request, pk):
    """Register the tracking number of an order"""
    order = get_object_or_404(Order, pk=pk)
    serializer = TrackingNumberSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        utils.update_tracking_number(
            order, serializer.validated_data['tracking_number'], serializer.validated_data['courier_company']
        )
    except BusinessError as e:
        return error_response(e)
    create_audit_log(request=request, action='order_tracking', model_name='Order', object_id=order.id,
                     object_name=f"Order {order.order_number}", object_reference=order.order_number,
                     changes={'tracking_number': order.tracking_number, 'courier_company': order.courier_company})
    return Response(OrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_order_bulk_status(request):
    """Change the status of several orders at once"""
    serializer = BulkOrderStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    result = utils.bulk_update_order_status(
        serializer.validated_data['order_ids'], serializer.validated_data['status']
    )
    for order_id in result['success_ids']:
        create_audit_log(request=request, action='order_status', model_name='Order', object_id=order_id,
                         changes={'new_status': serializer.validated_data['status'], 'bulk': True})
    return Response(result)

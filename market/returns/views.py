from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from django.shortcuts import get_object_or_404

from market.core.exceptions import BusinessError
from market.core.utils import create_audit_log, error_response, paginated_response
from market.orders.models import Order
from .filters import ReturnRequestFilter
from .models import ReturnRequest
from .serializers import (
    ReturnRequestSerializer, ReturnCreateSerializer, ReturnApproveSerializer, ReturnRejectSerializer
)
from . import utils


def return_queryset():
    return ReturnRequest.objects.select_related('order__user').prefetch_related('items__order_item')


def return_response(pk, status_code=status.HTTP_200_OK):
    return Response(ReturnRequestSerializer(return_queryset().get(pk=pk)).data, status=status_code)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def return_eligibility(request, order_id):
    """Whether one of the current user's orders can still be returned"""
    order = get_object_or_404(Order, pk=order_id)
    try:
        return Response(utils.check_eligibility(order, request.user))
    except BusinessError as e:
        return error_response(e)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def return_list_create(request):
    """List the current user's return requests or open a new one"""
    if request.method == 'GET':
        queryset = return_queryset().filter(order__user=request.user).order_by('-requested_at', '-id')
        return paginated_response(request, queryset, lambda page: ReturnRequestSerializer(page, many=True).data)

    serializer = ReturnCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    order = get_object_or_404(Order, pk=data['order_id'])
    try:
        return_request = utils.create_return_request(
            request.user, order, data['reason_category'], data['items'],
            detailed_reason=data['detailed_reason'], proof_image_urls=data['proof_image_urls'],
        )
    except BusinessError as e:
        return error_response(e)
    create_audit_log(request=request, action='return_request', model_name='ReturnRequest',
                     object_id=return_request.id, object_name=str(return_request),
                     object_reference=order.order_number,
                     changes={'reason_category': return_request.reason_category,
                              'total_refund_amount': str(return_request.total_refund_amount)})
    return return_response(return_request.id, status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def return_detail(request, pk):
    """Owner or admin can read; the owner can withdraw a pending request"""
    return_request = get_object_or_404(return_queryset(), pk=pk)

    if request.method == 'GET':
        if return_request.order.user_id != request.user.id and not request.user.is_staff:
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        return Response(ReturnRequestSerializer(return_request).data)

    try:
        utils.cancel_return_request(return_request, request.user)
    except BusinessError as e:
        return error_response(e)
    return Response(status=status.HTTP_204_NO_CONTENT)


# Admin return views
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_return_list(request):
    """All return requests with status, reason, date and search filters"""
    return_filter = ReturnRequestFilter(request.query_params, queryset=return_queryset())
    if not return_filter.is_valid():
        return Response(return_filter.errors, status=status.HTTP_400_BAD_REQUEST)
    queryset = return_filter.qs.order_by('-requested_at', '-id')
    return paginated_response(request, queryset, lambda page: ReturnRequestSerializer(page, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_return_stats(request):
    return Response(utils.return_stats())


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_return_detail(request, pk):
    return_request = get_object_or_404(return_queryset(), pk=pk)
    return Response(ReturnRequestSerializer(return_request).data)


def _status_change(request, return_request, action):
    create_audit_log(request=request, action='return_status', model_name='ReturnRequest',
                     object_id=return_request.id, object_name=str(return_request),
                     object_reference=return_request.order.order_number,
                     changes={'action': action, 'status': return_request.status})
    return return_response(return_request.id)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_return_approve(request, pk):
    return_request = get_object_or_404(ReturnRequest, pk=pk)
    serializer = ReturnApproveSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        return_request = utils.approve_return(return_request, request.user, serializer.validated_data['note'])
    except BusinessError as e:
        return error_response(e)
    return _status_change(request, return_request, 'approve')


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_return_reject(request, pk):
    return_request = get_object_or_404(ReturnRequest, pk=pk)
    serializer = ReturnRejectSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        return_request = utils.reject_return(return_request, request.user, serializer.validated_data['reason'])
    except BusinessError as e:
        return error_response(e)
    return _status_change(request, return_request, 'reject')


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_return_complete(request, pk):
    """Restock the returned items and record the refund"""
    return_request = get_object_or_404(ReturnRequest, pk=pk)
    try:
        return_request = utils.complete_return(return_request, request.user)
    except BusinessError as e:
        return error_response(e)
    return _status_change(request, return_request, 'complete')

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from django.shortcuts import get_object_or_404

from market.core.exceptions import BusinessError
from market.core.utils import create_audit_log, error_response, paginated_response, parse_bool
from .filters import SettlementFilter
from .models import Seller, Settlement
from .serializers import (
    SellerSerializer, SettlementSerializer, SettlementGenerateSerializer, SettlementUpdateSerializer
)
from . import utils

SETTLEMENT_SORT_FIELDS = ['created_at', 'start_date', 'total_sales_amount', 'settlement_amount']


# Seller views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def seller_list_create(request):
    """List sellers (search by name, filter by active) or create a seller"""
    if request.method == 'GET':
        queryset = Seller.objects.all()
        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(name__icontains=search)
        is_active = parse_bool(request.query_params.get('is_active'))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        queryset = queryset.order_by('-created_at', '-id')
        return paginated_response(request, queryset, lambda page: SellerSerializer(page, many=True).data)

    serializer = SellerSerializer(data=request.data)
    if serializer.is_valid():
        seller = serializer.save()
        create_audit_log(request=request, action='create', model_name='Seller', object_id=seller.id,
                         object_name=seller.name, object_reference=seller.business_number)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def seller_detail(request, pk):
    """Retrieve, update or delete a seller"""
    seller = get_object_or_404(Seller, pk=pk)

    if request.method == 'GET':
        return Response(SellerSerializer(seller).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SellerSerializer(seller, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='Seller', object_id=seller.id,
                             object_name=seller.name,
                             changes={key: str(value) for key, value in serializer.validated_data.items()})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if seller.settlements.exists():
            return Response({'error': 'Sellers with settlements cannot be deleted; deactivate them instead'},
                            status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request=request, action='delete', model_name='Seller', object_id=seller.id,
                         object_name=seller.name, object_reference=seller.business_number)
        seller.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdminUser])
def seller_status(request, pk):
    """Activate or deactivate a seller"""
    seller = get_object_or_404(Seller, pk=pk)
    is_active = parse_bool(request.data.get('is_active'))
    seller.is_active = (not seller.is_active) if is_active is None else is_active
    seller.save(update_fields=['is_active', 'updated_at'])
    create_audit_log(request=request, action='update', model_name='Seller', object_id=seller.id,
                     object_name=seller.name, changes={'is_active': seller.is_active})
    return Response(SellerSerializer(seller).data)


# Settlement views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def settlement_list_create(request):
    """List settlements with filters and sorting, or generate one for a seller"""
    if request.method == 'GET':
        queryset = Settlement.objects.select_related('seller', 'settled_by')
        settlement_filter = SettlementFilter(request.query_params, queryset=queryset)
        if not settlement_filter.is_valid():
            return Response(settlement_filter.errors, status=status.HTTP_400_BAD_REQUEST)
        queryset = settlement_filter.qs

        sort = request.query_params.get('sort', 'created_at')
        if sort not in SETTLEMENT_SORT_FIELDS:
            sort = 'created_at'
        direction = request.query_params.get('direction', 'desc')
        ordering = sort if direction == 'asc' else f'-{sort}'
        queryset = queryset.order_by(ordering, '-id')
        return paginated_response(request, queryset, lambda page: SettlementSerializer(page, many=True).data)

    serializer = SettlementGenerateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    if not serializer.validated_data.get('seller_id'):
        return Response({'seller_id': ['This field is required.']}, status=status.HTTP_400_BAD_REQUEST)
    seller = get_object_or_404(Seller, pk=serializer.validated_data['seller_id'])
    try:
        settlement = utils.generate_settlement(
            seller, serializer.validated_data['start_date'], serializer.validated_data['end_date']
        )
    except BusinessError as e:
        return error_response(e)
    create_audit_log(request=request, action='settlement_generate', model_name='Settlement',
                     object_id=settlement.id, object_name=str(settlement),
                     changes={'settlement_amount': str(settlement.settlement_amount)})
    return Response(SettlementSerializer(settlement).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def settlement_generate_all(request):
    """Generate settlements for all active sellers over a period"""
    serializer = SettlementGenerateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        created, skipped = utils.generate_all_settlements(
            serializer.validated_data['start_date'], serializer.validated_data['end_date']
        )
    except BusinessError as e:
        return error_response(e)
    for settlement in created:
        create_audit_log(request=request, action='settlement_generate', model_name='Settlement',
                         object_id=settlement.id, object_name=str(settlement))
    return Response({
        'created_count': len(created),
        'skipped_count': len(skipped),
        'settlements': SettlementSerializer(created, many=True).data,
        'skipped': skipped,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminUser])
def settlement_detail(request, pk):
    """Retrieve a settlement or edit a pending one"""
    settlement = get_object_or_404(Settlement.objects.select_related('seller'), pk=pk)
    if request.method == 'GET':
        return Response(SettlementSerializer(settlement).data)

    serializer = SettlementUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        utils.update_settlement(
            settlement,
            memo=serializer.validated_data.get('memo'),
            commission_rate=serializer.validated_data.get('commission_rate'),
        )
    except BusinessError as e:
        return error_response(e)
    return Response(SettlementSerializer(settlement).data)


def _transition(request, pk, action):
    settlement = get_object_or_404(Settlement, pk=pk)
    previous_status = settlement.status
    try:
        action(settlement)
    except BusinessError as e:
        return error_response(e)
    create_audit_log(request=request, action='settlement_status', model_name='Settlement',
                     object_id=settlement.id, object_name=str(settlement),
                     changes={'old_status': previous_status, 'new_status': settlement.status})
    return Response(SettlementSerializer(settlement).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def settlement_approve(request, pk):
    return _transition(request, pk, utils.approve_settlement)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def settlement_pay(request, pk):
    return _transition(request, pk, lambda settlement: utils.pay_settlement(settlement, request.user))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def settlement_cancel(request, pk):
    return _transition(request, pk, utils.cancel_settlement)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def settlement_stats(request):
    """Settlement counts and amounts by status"""
    settlement_filter = SettlementFilter(request.query_params, queryset=Settlement.objects.all())
    if not settlement_filter.is_valid():
        return Response(settlement_filter.errors, status=status.HTTP_400_BAD_REQUEST)
    return Response(utils.settlement_stats(settlement_filter.qs))

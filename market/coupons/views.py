from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from django.contrib.auth import get_user_model
from django.db.models import F, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from decimal import Decimal, InvalidOperation

from market.core.exceptions import BusinessError
from market.core.utils import create_audit_log, error_response, paginated_response, parse_bool
from .models import Coupon, UserCoupon
from .serializers import (
    CouponSerializer, PublicCouponSerializer, UserCouponSerializer, CouponValidateSerializer
)
from . import utils

User = get_user_model()


# Admin coupon views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_coupon_list_create(request):
    """List all coupons or create a new coupon"""
    if request.method == 'GET':
        queryset = Coupon.objects.all().prefetch_related('applicable_products')
        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(Q(code__icontains=search) | Q(name__icontains=search))
        is_active = parse_bool(request.query_params.get('is_active'))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        return paginated_response(request, queryset, lambda page: CouponSerializer(page, many=True).data)

    serializer = CouponSerializer(data=request.data)
    if serializer.is_valid():
        coupon = serializer.save()
        create_audit_log(request=request, action='create', model_name='Coupon', object_id=coupon.id,
                         object_name=coupon.name, object_reference=coupon.code)
        return Response(CouponSerializer(coupon).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_coupon_detail(request, pk):
    """Retrieve, update or delete a coupon"""
    coupon = get_object_or_404(Coupon, pk=pk)

    if request.method == 'GET':
        return Response(CouponSerializer(coupon).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CouponSerializer(coupon, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='Coupon', object_id=coupon.id,
                             object_name=coupon.name, object_reference=coupon.code,
                             changes={key: str(value) for key, value in serializer.validated_data.items()})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if coupon.used_quantity > 0:
            return Response({'error': 'A coupon that has been used cannot be deleted'},
                            status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request=request, action='delete', model_name='Coupon', object_id=coupon.id,
                         object_name=coupon.name, object_reference=coupon.code)
        coupon.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_coupon_issue(request, pk):
    """Issue a coupon to one user"""
    coupon = get_object_or_404(Coupon, pk=pk)
    user = get_object_or_404(User, pk=request.data.get('user_id'))
    try:
        user_coupon = utils.issue_coupon_to_user(coupon, user)
    except BusinessError as e:
        return error_response(e)
    create_audit_log(request=request, action='coupon_issue', model_name='Coupon', object_id=coupon.id,
                     object_name=coupon.name, object_reference=coupon.code, changes={'user_id': user.id})
    return Response(UserCouponSerializer(user_coupon).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_coupon_issue_all(request, pk):
    """Issue a coupon to every active user"""
    coupon = get_object_or_404(Coupon, pk=pk)
    try:
        issued_count = utils.issue_coupon_to_all_users(coupon)
    except BusinessError as e:
        return error_response(e)
    create_audit_log(request=request, action='coupon_issue', model_name='Coupon', object_id=coupon.id,
                     object_name=coupon.name, object_reference=coupon.code, changes={'issued_count': issued_count})
    return Response({'issued_count': issued_count})


# Storefront coupon views
@api_view(['GET'])
@permission_classes([AllowAny])
def coupon_active_list(request):
    """Coupons currently valid and in stock"""
    now = timezone.now()
    coupons = Coupon.objects.filter(
        is_active=True, start_date__lte=now, end_date__gte=now
    ).filter(
        Q(total_quantity__isnull=True) | Q(used_quantity__lt=F('total_quantity'))
    ).order_by('end_date')
    return Response(PublicCouponSerializer(coupons, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def coupon_validate(request):
    """Check whether a coupon code applies to an order amount"""
    serializer = CouponValidateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    result = utils.validate_coupon(serializer.validated_data['code'], serializer.validated_data['order_amount'])
    return Response(result)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def coupon_download(request):
    """Claim a coupon by code"""
    code = request.data.get('code', '')
    if not code:
        return Response({'error': 'Coupon code is required'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        user_coupon = utils.download_coupon(request.user, code)
    except BusinessError as e:
        return error_response(e)
    return Response(UserCouponSerializer(user_coupon).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_coupons(request):
    """Current user's coupons; available only unless ?all=true"""
    if parse_bool(request.query_params.get('all')):
        user_coupons = UserCoupon.objects.filter(user=request.user).select_related('coupon', 'order')
    else:
        user_coupons = utils.get_available_coupons(request.user)
    return Response(UserCouponSerializer(user_coupons, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def coupons_for_order(request):
    """Current user's coupons usable for an order amount"""
    try:
        amount = Decimal(request.query_params.get('amount', ''))
    except InvalidOperation:
        return Response({'error': 'amount must be a number'}, status=status.HTTP_400_BAD_REQUEST)
    if not amount.is_finite() or amount < 0:
        return Response({'error': 'amount must be a non-negative number'}, status=status.HTTP_400_BAD_REQUEST)
    user_coupons = utils.get_available_coupons_for_order(request.user, amount)
    data = UserCouponSerializer(user_coupons, many=True).data
    for entry, user_coupon in zip(data, user_coupons):
        entry['expected_discount'] = str(user_coupon.coupon.calculate_discount(amount))
    return Response(data)

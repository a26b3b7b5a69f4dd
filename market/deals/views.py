from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from django.db.models import Prefetch
from django.shortcuts import get_object_or_404
from django.utils import timezone

from market.catalog.models import Product
from market.catalog.views import with_ratings
from market.core.utils import create_audit_log
from .models import SpecialDeal
from .serializers import SpecialDealSerializer


def deals_with_products(queryset):
    products = with_ratings(Product.objects.select_related('category', 'seller'))
    return queryset.prefetch_related(Prefetch('products', queryset=products))


# Storefront deal views
@api_view(['GET'])
@permission_classes([AllowAny])
def deal_ongoing_list(request):
    now = timezone.now()
    deals = deals_with_products(
        SpecialDeal.objects.filter(is_active=True, start_time__lte=now, end_time__gte=now)
    ).order_by('display_order', 'end_time')
    return Response(SpecialDealSerializer(deals, many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def deal_upcoming_list(request):
    deals = deals_with_products(
        SpecialDeal.objects.filter(is_active=True, start_time__gt=timezone.now())
    ).order_by('display_order', 'start_time')
    return Response(SpecialDealSerializer(deals, many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def deal_detail(request, pk):
    deal = get_object_or_404(deals_with_products(SpecialDeal.objects.filter(is_active=True)), pk=pk)
    return Response(SpecialDealSerializer(deal).data)


# Admin deal views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_deal_list_create(request):
    """List all special deals or create one"""
    if request.method == 'GET':
        deals = deals_with_products(SpecialDeal.objects.all()).order_by('display_order', '-start_time')
        return Response(SpecialDealSerializer(deals, many=True).data)

    serializer = SpecialDealSerializer(data=request.data)
    if serializer.is_valid():
        deal = serializer.save()
        create_audit_log(request=request, action='create', model_name='SpecialDeal', object_id=deal.id,
                         object_name=deal.title)
        return Response(SpecialDealSerializer(deal).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_deal_detail(request, pk):
    deal = get_object_or_404(SpecialDeal, pk=pk)

    if request.method == 'GET':
        return Response(SpecialDealSerializer(deal).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SpecialDealSerializer(deal, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            deal = serializer.save()
            create_audit_log(request=request, action='update', model_name='SpecialDeal', object_id=deal.id,
                             object_name=deal.title,
                             changes={key: str(value) for key, value in request.data.items()})
            return Response(SpecialDealSerializer(deal).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='SpecialDeal', object_id=deal.id,
                         object_name=deal.title)
        deal.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_deal_product(request, pk, product_id):
    """Add a product to a deal (POST) or remove it (DELETE)"""
    deal = get_object_or_404(SpecialDeal, pk=pk)
    product = get_object_or_404(Product, pk=product_id)
    if request.method == 'POST':
        deal.products.add(product)
    else:
        deal.products.remove(product)
    deal = deals_with_products(SpecialDeal.objects.all()).get(pk=deal.pk)
    return Response(SpecialDealSerializer(deal).data)

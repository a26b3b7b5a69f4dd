from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Avg, Count
from django.shortcuts import get_object_or_404

from market.catalog.models import Product
from .models import WishlistItem
from .serializers import WishlistItemSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def wishlist_list_add(request):
    """List the current user's wishlist or add a product to it"""
    if request.method == 'GET':
        items = WishlistItem.objects.filter(user=request.user).select_related('product').annotate(
            avg_rating=Avg('product__reviews__rating'),
            reviews_count=Count('product__reviews', distinct=True),
        ).order_by('-created_at', '-id')
        return Response(WishlistItemSerializer(items, many=True).data)

    product = get_object_or_404(Product, pk=request.data.get('product_id'))
    if WishlistItem.objects.filter(user=request.user, product=product).exists():
        return Response({'error': 'Product is already in the wishlist'}, status=status.HTTP_400_BAD_REQUEST)
    item = WishlistItem.objects.create(user=request.user, product=product)
    return Response(WishlistItemSerializer(item).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def wishlist_remove(request, product_id):
    item = get_object_or_404(WishlistItem, user=request.user, product_id=product_id)
    item.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def wishlist_check(request, product_id):
    """Whether a product is in the current user's wishlist"""
    in_wishlist = WishlistItem.objects.filter(user=request.user, product_id=product_id).exists()
    return Response({'product_id': product_id, 'in_wishlist': in_wishlist})

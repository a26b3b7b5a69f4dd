from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.db.models import Avg, Count
from django.shortcuts import get_object_or_404

from market.catalog.models import Product
from market.core.utils import paginated_response
from .models import Review
from .serializers import ReviewSerializer


def rating_summary(product):
    """Average rating (one decimal) and review count of a product"""
    summary = product.reviews.aggregate(average=Avg('rating'), count=Count('id'))
    average = summary['average']
    return {
        'product_id': product.id,
        'average_rating': round(float(average), 1) if average is not None else 0.0,
        'review_count': summary['count'],
    }


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def product_review_list_create(request, pk):
    """List reviews of a product, or post a review (authenticated)"""
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'GET':
        queryset = product.reviews.select_related('user', 'product').order_by('-created_at', '-id')
        response = paginated_response(request, queryset, lambda page: ReviewSerializer(page, many=True).data)
        response.data.update(rating_summary(product))
        return response

    if not request.user or not request.user.is_authenticated:
        return Response({'error': 'Authentication required'}, status=status.HTTP_401_UNAUTHORIZED)
    serializer = ReviewSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(product=product, user=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([AllowAny])
def product_rating(request, pk):
    product = get_object_or_404(Product, pk=pk)
    return Response(rating_summary(product))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_reviews(request):
    queryset = Review.objects.filter(user=request.user).select_related('product', 'user').order_by('-created_at')
    return paginated_response(request, queryset, lambda page: ReviewSerializer(page, many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([AllowAny])
def review_detail(request, pk):
    """Retrieve a review; only its author may update or delete it"""
    review = get_object_or_404(Review.objects.select_related('user', 'product'), pk=pk)

    if request.method == 'GET':
        return Response(ReviewSerializer(review).data)

    if not request.user or not request.user.is_authenticated:
        return Response({'error': 'Authentication required'}, status=status.HTTP_401_UNAUTHORIZED)
    if review.user_id != request.user.id:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = ReviewSerializer(review, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    review.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from django.db.models import Avg, Count, Q
from django.shortcuts import get_object_or_404
import logging

from market.core.cache_utils import (
    cached_query, get_cached_products_list, cache_products_list, CATEGORY_TREE_CACHE_TTL, CATEGORY_TREE_PREFIX
)
from market.core.pricing import calculate_product_shipping
from market.core.utils import create_audit_log, get_page_params, paginate, paginated_response, parse_bool
from .filters import ProductFilter, apply_product_sort
from .models import Category, Product, ProductOption, ProductNotice
from .serializers import (
    CategorySerializer, ProductListSerializer, ProductDetailSerializer, ProductSerializer,
    ProductOptionSerializer, ProductNoticeSerializer
)

logger = logging.getLogger(__name__)


def with_ratings(queryset):
    return queryset.annotate(
        avg_rating=Avg('reviews__rating'),
        reviews_count=Count('reviews', distinct=True),
    )


@cached_query(cache_ttl=CATEGORY_TREE_CACHE_TTL, key_prefix=CATEGORY_TREE_PREFIX)
def get_category_tree():
    categories = Category.objects.filter(is_active=True, parent__isnull=True).prefetch_related('children')
    return CategorySerializer(categories, many=True).data


# Storefront views
@api_view(['GET'])
@permission_classes([AllowAny])
def category_list(request):
    """Active top-level categories with their children"""
    return Response(get_category_tree())


@api_view(['GET'])
@permission_classes([AllowAny])
def product_list(request):
    """Active products with filtering, sorting and pagination"""
    page, limit = get_page_params(request, default_limit=20)
    filters_dict = {key: request.query_params.get(key, '') for key in ProductFilter.Meta.fields}
    filters_dict.update({'sort': request.query_params.get('sort', 'newest'), 'page': page, 'limit': limit})

    cached_data, cache_key = get_cached_products_list(filters_dict)
    if cached_data is not None:
        response = Response(cached_data)
        response['X-Cache'] = 'HIT'
        return response

    queryset = with_ratings(
        Product.objects.filter(is_active=True).select_related('category', 'seller')
    )
    product_filter = ProductFilter(request.query_params, queryset=queryset)
    if not product_filter.is_valid():
        return Response(product_filter.errors, status=status.HTTP_400_BAD_REQUEST)
    queryset = apply_product_sort(product_filter.qs, request.query_params.get('sort'))

    page_obj, meta = paginate(queryset, page, limit)
    data = {'results': ProductListSerializer(page_obj, many=True).data, **meta}
    cache_products_list(cache_key, data)

    response = Response(data)
    response['X-Cache'] = 'MISS'
    return response


@api_view(['GET'])
@permission_classes([AllowAny])
def product_detail(request, pk):
    """Product detail with options, notice and rating summary"""
    queryset = with_ratings(
        Product.objects.filter(is_active=True).select_related('category', 'seller', 'notice')
    ).prefetch_related('options')
    product = get_object_or_404(queryset, pk=pk)
    return Response(ProductDetailSerializer(product).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def product_options(request, pk):
    """Available options of a product"""
    product = get_object_or_404(Product, pk=pk, is_active=True)
    options = product.options.filter(is_available=True)
    return Response(ProductOptionSerializer(options, many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def product_notice(request, pk):
    """Food information notice of a product"""
    product = get_object_or_404(Product, pk=pk, is_active=True)
    notice = get_object_or_404(ProductNotice, product=product)
    return Response(ProductNoticeSerializer(notice).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def product_shipping_quote(request, pk):
    """Shipping fee for buying a quantity of a product"""
    product = get_object_or_404(Product, pk=pk, is_active=True)
    try:
        quantity = int(request.query_params.get('quantity', product.min_order_quantity))
    except (TypeError, ValueError):
        return Response({'error': 'quantity must be an integer'}, status=status.HTTP_400_BAD_REQUEST)
    if quantity < 1:
        return Response({'error': 'quantity must be at least 1'}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'product_id': product.id,
        'quantity': quantity,
        'can_combine_shipping': product.can_combine_shipping,
        'combine_shipping_unit': product.combine_shipping_unit,
        'shipping_fee_per_box': product.shipping_fee,
        'shipping_fee': calculate_product_shipping(product, quantity),
    })


# Admin category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_category_list_create(request):
    """List all categories or create a new category"""
    if request.method == 'GET':
        categories = Category.objects.all().prefetch_related('children')
        return Response(CategorySerializer(categories, many=True).data)
    serializer = CategorySerializer(data=request.data)
    if serializer.is_valid():
        category = serializer.save()
        create_audit_log(request=request, action='create', model_name='Category',
                         object_id=category.id, object_name=category.name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_category_detail(request, pk):
    """Retrieve, update or delete a category"""
    category = get_object_or_404(Category, pk=pk)

    if request.method == 'GET':
        return Response(CategorySerializer(category).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            parent = serializer.validated_data.get('parent')
            if parent is not None and parent.pk == category.pk:
                return Response({'error': 'A category cannot be its own parent'}, status=status.HTTP_400_BAD_REQUEST)
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Category',
                         object_id=category.id, object_name=category.name)
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Admin product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_product_list_create(request):
    """List all products (active or not) or create a new product"""
    if request.method == 'GET':
        queryset = Product.objects.select_related('category', 'seller').prefetch_related('options')

        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(origin__icontains=search))
        category_id = request.query_params.get('category')
        if category_id:
            queryset = queryset.filter(category_id=category_id)
        seller_id = request.query_params.get('seller')
        if seller_id:
            queryset = queryset.filter(seller_id=seller_id)
        is_active = parse_bool(request.query_params.get('is_active'))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)

        queryset = queryset.order_by('-created_at', '-id')
        return paginated_response(request, queryset, lambda page: ProductSerializer(page, many=True).data)

    serializer = ProductSerializer(data=request.data)
    if serializer.is_valid():
        product = serializer.save()
        logger.info(f"Product created: id={product.id}, name={product.name}")
        create_audit_log(
            request=request,
            action='create',
            model_name='Product',
            object_id=product.id,
            object_name=product.name,
            changes={'price': str(product.price), 'stock': product.stock}
        )
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'GET':
        return Response(ProductSerializer(product).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            old_values = {field: str(getattr(product, field)) for field in serializer.validated_data}
            product = serializer.save()
            changes = {
                field: {'old': old_values[field], 'new': str(getattr(product, field))}
                for field in old_values
                if old_values[field] != str(getattr(product, field))
            }
            create_audit_log(
                request=request,
                action='update',
                model_name='Product',
                object_id=product.id,
                object_name=product.name,
                changes=changes
            )
            return Response(ProductSerializer(product).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Product',
                         object_id=product.id, object_name=product.name)
        logger.info(f"Product deleted: id={product.id}, name={product.name}")
        product.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_product_options(request, pk):
    """List all options of a product or add a new option"""
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'GET':
        return Response(ProductOptionSerializer(product.options.all(), many=True).data)
    serializer = ProductOptionSerializer(data=request.data)
    if serializer.is_valid():
        option = serializer.save(product=product)
        create_audit_log(request=request, action='create', model_name='ProductOption',
                         object_id=option.id, object_name=str(option))
        return Response(ProductOptionSerializer(option).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_product_option_detail(request, pk, option_id):
    """Retrieve, update or delete an option of a product"""
    product = get_object_or_404(Product, pk=pk)
    option = get_object_or_404(ProductOption, pk=option_id)
    if option.product_id != product.id:
        return Response({'error': 'Option does not belong to this product'}, status=status.HTTP_400_BAD_REQUEST)

    if request.method == 'GET':
        return Response(ProductOptionSerializer(option).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProductOptionSerializer(option, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='ProductOption',
                         object_id=option.id, object_name=str(option))
        option.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_product_notice(request, pk):
    """Get or create/replace the food information notice of a product"""
    product = get_object_or_404(Product, pk=pk)
    notice = ProductNotice.objects.filter(product=product).first()

    if request.method == 'GET':
        if notice is None:
            return Response({'error': 'Product notice not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(ProductNoticeSerializer(notice).data)

    serializer = ProductNoticeSerializer(notice, data=request.data)
    if serializer.is_valid():
        created = notice is None
        notice = serializer.save(product=product)
        return Response(
            ProductNoticeSerializer(notice).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

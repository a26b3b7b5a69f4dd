from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone

from market.core.utils import create_audit_log, paginated_response
from .models import Inquiry
from .serializers import InquirySerializer, InquiryAnswerSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def inquiry_list_create(request):
    """List the current user's inquiries or submit a new one"""
    if request.method == 'GET':
        queryset = Inquiry.objects.filter(user=request.user).select_related('user', 'answered_by')
        return paginated_response(request, queryset, lambda page: InquirySerializer(page, many=True).data)

    serializer = InquirySerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(user=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def inquiry_detail(request, pk):
    """Owner or admin can read; only the owner can delete, and only before it is answered"""
    inquiry = get_object_or_404(Inquiry.objects.select_related('user', 'answered_by'), pk=pk)

    if request.method == 'GET':
        if inquiry.user_id != request.user.id and not request.user.is_staff:
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        return Response(InquirySerializer(inquiry).data)

    if inquiry.user_id != request.user.id:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    if inquiry.status != Inquiry.STATUS_PENDING:
        return Response({'error': 'Answered inquiries cannot be deleted'}, status=status.HTTP_400_BAD_REQUEST)
    inquiry.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_inquiry_list(request):
    queryset = Inquiry.objects.select_related('user', 'answered_by')
    status_filter = request.query_params.get('status')
    if status_filter:
        queryset = queryset.filter(status=status_filter)
    category = request.query_params.get('category')
    if category:
        queryset = queryset.filter(category=category)
    search = request.query_params.get('search', '').strip()
    if search:
        queryset = queryset.filter(
            Q(title__icontains=search) | Q(content__icontains=search) | Q(user__username__icontains=search)
        )
    queryset = queryset.order_by('-created_at', '-id')
    return paginated_response(request, queryset, lambda page: InquirySerializer(page, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_inquiry_answer(request, pk):
    """Answer an inquiry (re-answering replaces the previous answer)"""
    inquiry = get_object_or_404(Inquiry, pk=pk)
    serializer = InquiryAnswerSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    inquiry.answer = serializer.validated_data['answer']
    inquiry.status = Inquiry.STATUS_ANSWERED
    inquiry.answered_at = timezone.now()
    inquiry.answered_by = request.user
    inquiry.save(update_fields=['answer', 'status', 'answered_at', 'answered_by', 'updated_at'])
    create_audit_log(request=request, action='inquiry_answer', model_name='Inquiry', object_id=inquiry.id,
                     object_name=inquiry.title)
    return Response(InquirySerializer(inquiry).data)

from django.urls import path
from .views import inquiry_list_create, inquiry_detail, admin_inquiry_list, admin_inquiry_answer

urlpatterns = [
    path('inquiries/', inquiry_list_create, name='inquiry-list-create'),
    path('inquiries/<int:pk>/', inquiry_detail, name='inquiry-detail'),
    path('admin/inquiries/', admin_inquiry_list, name='admin-inquiry-list'),
    path('admin/inquiries/<int:pk>/answer/', admin_inquiry_answer, name='admin-inquiry-answer'),
]

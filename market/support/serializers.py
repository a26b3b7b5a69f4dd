from rest_framework import serializers
from .models import Inquiry


class InquirySerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True)
    answered_by_username = serializers.CharField(source='answered_by.username', read_only=True, default=None)

    class Meta:
        model = Inquiry
        fields = [
            'id', 'user', 'username', 'category', 'title', 'content', 'attachment_url', 'status',
            'answer', 'answered_at', 'answered_by', 'answered_by_username', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'user', 'status', 'answer', 'answered_at', 'answered_by', 'created_at', 'updated_at'
        ]


class InquiryAnswerSerializer(serializers.Serializer):
    answer = serializers.CharField()

    def validate_answer(self, value):
        if not value.strip():
            raise serializers.ValidationError('Answer cannot be blank')
        return value.strip()

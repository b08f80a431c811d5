"""
Message serializers for request/response validation.
"""

from rest_framework import serializers
from .models import Message


class MessageSerializer(serializers.ModelSerializer):
    conversation_id = serializers.UUIDField(read_only=True)
    user_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Message
        fields = [
            'id',
            'conversation_id',
            'user_id',
            'content',
            'attachment',
            'created_at',
        ]
        read_only_fields = fields


class SendMessageSerializer(serializers.Serializer):
    """
    Message payload; JSON or multipart

    Whether at least one field is present is checked by the service.
    """
    content = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)
    attachment = serializers.FileField(required=False, allow_null=True, allow_empty_file=False)

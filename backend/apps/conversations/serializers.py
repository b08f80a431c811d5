"""
Conversation serializers for request/response validation.
"""

from rest_framework import serializers

from apps.authentication.models import User
from .models import Conversation


class MemberSerializer(serializers.ModelSerializer):
    """Minimal user projection: no credential fields"""

    class Meta:
        model = User
        fields = ['id', 'name', 'email']


class ConversationSerializer(serializers.ModelSerializer):
    members = MemberSerializer(many=True, read_only=True)

    class Meta:
        model = Conversation
        fields = [
            'id',
            'type',
            'name',
            'members',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class OneToOneConversationSerializer(serializers.Serializer):
    user_one_id = serializers.UUIDField(required=True)
    user_two_id = serializers.UUIDField(required=True)


class GroupConversationSerializer(serializers.Serializer):
    name = serializers.CharField(required=True, max_length=255)
    member_ids = serializers.ListField(
        child=serializers.UUIDField(),
        required=True,
        min_length=1
    )


"""
Authentication serializers for request/response validation.
"""

from rest_framework import serializers

from .models import User


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(required=True, max_length=255)
    email = serializers.EmailField(required=True, max_length=255)
    password = serializers.CharField(required=True, min_length=8, write_only=True)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField(required=True)
    password = serializers.CharField(required=True, write_only=True)


class RefreshTokenSerializer(serializers.Serializer):
    refreshToken = serializers.CharField(required=True)


class UserResponseSerializer(serializers.ModelSerializer):
    """
    Public user projection

    Never exposes the password hash.
    """
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'createdAt']

"""
Authentication views (controllers).
"""

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated

from apps.core.exceptions import NotFoundError
from .models import User
from .services import auth_service
from .serializers import (
    RegisterSerializer,
    LoginSerializer,
    RefreshTokenSerializer,
    UserResponseSerializer,
)


class RegisterView(APIView):
    """
    Register a new user

    POST /api/auth/register
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = auth_service.register(
            serializer.validated_data['name'],
            serializer.validated_data['email'],
            serializer.validated_data['password'],
        )
        tokens = auth_service.generate_tokens(user.id, user.email)

        return Response({
            'user': UserResponseSerializer(user).data,
            'tokens': tokens,
        }, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    Login user

    POST /api/auth/login
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user, tokens = auth_service.login(
            serializer.validated_data['email'],
            serializer.validated_data['password'],
        )

        return Response({
            'user': UserResponseSerializer(user).data,
            'tokens': tokens,
        }, status=status.HTTP_200_OK)


class RefreshTokenView(APIView):
    """
    Refresh access token

    POST /api/auth/refresh
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        tokens = auth_service.refresh_access_token(serializer.validated_data['refreshToken'])

        return Response({'tokens': tokens}, status=status.HTTP_200_OK)


class LogoutView(APIView):
    """
    Logout user

    POST /api/auth/logout
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        auth_service.logout(serializer.validated_data['refreshToken'])

        return Response({'message': 'Logged out successfully'}, status=status.HTTP_200_OK)


class CurrentUserView(APIView):
    """
    Get current user info

    GET /api/auth/me
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            user = User.objects.get(id=request.user.id)
        except User.DoesNotExist:
            raise NotFoundError('User no longer exists')

        return Response({'user': UserResponseSerializer(user).data})

"""
Authentication service.

User registration, login and access/refresh token management.
"""

import logging
import uuid

import jwt
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.exceptions import AppError, ConflictError, ValidationError
from .models import User, RefreshToken

logger = logging.getLogger(__name__)


class AuthenticationError(AppError):
    """Credentials or tokens were rejected"""
    status_code = 401
    code = 'AUTHENTICATION_FAILED'


class AuthService:
    """
    Authentication service for user registration, login, and token management
    """

    def register(self, name: str, email: str, password: str) -> User:
        """
        Register a new user

        Args:
            name: Display name
            email: User's email address
            password: User's password (plain text)

        Returns:
            User instance

        Raises:
            ValidationError: If input is incomplete
            ConflictError: If the email is already registered
        """
        if not name or not email or not password:
            raise ValidationError('Name, email and password are required')

        if len(password) < 8:
            raise ValidationError('Password must be at least 8 characters long')

        email = email.lower()
        if User.objects.filter(email=email).exists():
            raise ConflictError('User with this email already exists', code='USER_EXISTS')

        user = User(name=name, email=email)
        user.set_password(password)
        try:
            with transaction.atomic():
                user.save()
        except IntegrityError:
            # Lost a race against a concurrent registration
            raise ConflictError('User with this email already exists', code='USER_EXISTS')

        logger.info(f'Registered user {user.id}')
        return user

    def login(self, email: str, password: str) -> tuple[User, dict]:
        """
        Login user and generate tokens

        Returns:
            Tuple of (User instance, tokens dict)

        Raises:
            AuthenticationError: If credentials are invalid
        """
        if not email or not password:
            raise ValidationError('Email and password are required')

        try:
            user = User.objects.get(email=email.lower())
        except User.DoesNotExist:
            raise AuthenticationError('Invalid email or password')

        if not user.check_password(password):
            raise AuthenticationError('Invalid email or password')

        return user, self.generate_tokens(user.id, user.email)

    def generate_tokens(self, user_id, email: str) -> dict:
        """
        Generate access and refresh tokens

        The refresh token is persisted so it can be revoked later.

        Returns:
            Dict with accessToken and refreshToken
        """
        now = timezone.now()
        payload = {
            'userId': str(user_id),
            'email': email,
            'iat': now,
        }

        access_token = jwt.encode(
            {**payload, 'exp': now + settings.JWT_ACCESS_TOKEN_LIFETIME},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM
        )

        # jti keeps two refresh tokens issued within the same second distinct
        refresh_token_str = jwt.encode(
            {
                **payload,
                'exp': now + settings.JWT_REFRESH_TOKEN_LIFETIME,
                'jti': str(uuid.uuid4()),
            },
            settings.JWT_REFRESH_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM
        )

        RefreshToken.objects.create(
            user_id=user_id,
            token=refresh_token_str,
            expires_at=now + settings.JWT_REFRESH_TOKEN_LIFETIME
        )

        return {
            'accessToken': access_token,
            'refreshToken': refresh_token_str
        }

    def refresh_access_token(self, refresh_token: str) -> dict:
        """
        Rotate a refresh token into a fresh token pair

        Raises:
            AuthenticationError: If token is invalid, expired, or revoked
        """
        try:
            jwt.decode(
                refresh_token,
                settings.JWT_REFRESH_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM]
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError('Refresh token has expired', code='TOKEN_REFRESH_FAILED')
        except jwt.InvalidTokenError:
            raise AuthenticationError('Invalid refresh token', code='TOKEN_REFRESH_FAILED')

        try:
            token_record = RefreshToken.objects.select_related('user').get(token=refresh_token)
        except RefreshToken.DoesNotExist:
            raise AuthenticationError('Invalid refresh token', code='TOKEN_REFRESH_FAILED')

        if token_record.is_revoked:
            raise AuthenticationError('Refresh token has been revoked', code='TOKEN_REFRESH_FAILED')

        if token_record.is_expired:
            raise AuthenticationError('Refresh token has expired', code='TOKEN_REFRESH_FAILED')

        with transaction.atomic():
            new_tokens = self.generate_tokens(token_record.user.id, token_record.user.email)
            token_record.revoked_at = timezone.now()
            token_record.save(update_fields=['revoked_at'])

        return new_tokens

    def logout(self, refresh_token: str) -> None:
        """Revoke a refresh token; unknown tokens are ignored"""
        RefreshToken.objects.filter(token=refresh_token, revoked_at__isnull=True).update(
            revoked_at=timezone.now()
        )


# Create singleton instance
auth_service = AuthService()

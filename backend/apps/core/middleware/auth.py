"""
JWT Authentication middleware.

Verifies the bearer token once per request and attaches the caller's identity
as ``request.user_jwt``; views never read it from anywhere else.
"""

import logging

import jwt
from django.conf import settings
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

PUBLIC_PATHS = (
    '/health',
    '/api/auth/register',
    '/api/auth/login',
    '/api/auth/refresh',
    '/api/auth/logout',
    '/admin/',
)


def decode_access_token(token: str) -> dict:
    """
    Decode an access token into the identity dict used across the project

    Raises:
        jwt.InvalidTokenError (or its ExpiredSignatureError subclass)
    """
    payload = jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM]
    )
    if not payload.get('userId'):
        raise jwt.InvalidTokenError('Token carries no user id')
    return {
        'user_id': payload['userId'],
        'email': payload.get('email'),
    }


def _error(code, message, status):
    return JsonResponse({
        'error': {
            'code': code,
            'message': message,
            'retryable': False,
        }
    }, status=status)


class JWTAuthenticationMiddleware(MiddlewareMixin):
    """
    Middleware to authenticate JWT tokens
    """

    def process_request(self, request):
        request.user_jwt = None

        if any(request.path.startswith(path) for path in PUBLIC_PATHS):
            return None

        auth_header = request.META.get('HTTP_AUTHORIZATION', '')

        if not auth_header:
            # Allow request to continue (will be caught by DRF permissions)
            return None

        # Bearer TOKEN format
        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            return _error(
                'INVALID_TOKEN_FORMAT',
                'Authorization header must be in format: Bearer <token>',
                401,
            )

        try:
            request.user_jwt = decode_access_token(parts[1])
        except jwt.ExpiredSignatureError:
            return _error('TOKEN_EXPIRED', 'Access token has expired', 401)
        except jwt.InvalidTokenError as e:
            logger.debug(f'Rejected access token: {e}')
            return _error('INVALID_TOKEN', 'Invalid access token', 401)

        return None

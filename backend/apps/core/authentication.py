"""
DRF JWT Authentication class.

Integrates the identity verified by ``JWTAuthenticationMiddleware`` with
Django Rest Framework's permission system.
"""

from rest_framework.authentication import BaseAuthentication


class JWTUser:
    """
    User-like object built from the JWT payload

    Only carries what the token asserts; no database lookup.
    """
    is_authenticated = True
    is_anonymous = False

    def __init__(self, user_id: str, email: str = None):
        self.id = str(user_id)
        self.email = email

    def __str__(self):
        return self.email or self.id


class JWTAuthentication(BaseAuthentication):
    """
    JWT Authentication for Django Rest Framework
    """

    def authenticate(self, request):
        """
        Returns:
            Tuple of (JWTUser, None) if the middleware verified a token
            None if no authentication attempted
        """
        user_jwt = getattr(request._request, 'user_jwt', None)
        if not user_jwt or not user_jwt.get('user_id'):
            return None

        return (JWTUser(user_jwt['user_id'], user_jwt.get('email')), None)

    def authenticate_header(self, request):
        """
        Return the authentication header to use for 401 responses
        """
        return 'Bearer realm="api"'


def current_user_id(request) -> str:
    """Acting user id for an authenticated DRF request"""
    return request.user.id

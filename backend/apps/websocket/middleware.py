"""
WebSocket authentication middleware.

Authenticates the socket with the access token passed as ``?token=``.
"""

import logging
from urllib.parse import parse_qs

import jwt
from channels.middleware import BaseMiddleware

from apps.core.middleware.auth import decode_access_token

logger = logging.getLogger(__name__)


class JWTAuthMiddleware(BaseMiddleware):
    """
    JWT authentication middleware for WebSocket connections

    Sets ``scope['user_jwt']`` to the identity dict, or None.
    """

    async def __call__(self, scope, receive, send):
        query_params = parse_qs(scope.get('query_string', b'').decode())
        token = query_params.get('token', [None])[0]

        scope = dict(scope)
        scope['user_jwt'] = None

        if token:
            try:
                scope['user_jwt'] = decode_access_token(token)
            except jwt.InvalidTokenError as e:
                logger.info(f'Rejected websocket token: {e}')

        return await super().__call__(scope, receive, send)

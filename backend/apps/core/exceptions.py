"""
Custom exceptions and error handlers.

Every error leaves the API as ``{"error": {"code", "message", "retryable"}}``.
"""

from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger(__name__)


class AppError(Exception):
    """
    Base application error

    Carries the HTTP status and the machine-readable code it is rendered with.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = 'INTERNAL_ERROR'

    def __init__(
        self,
        message: str,
        status_code: int = None,
        code: str = None,
        retryable: bool = False,
        details: dict = None
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.retryable = retryable
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'VALIDATION_ERROR'


class NotFoundError(AppError):
    """Referenced conversation or user does not exist"""
    status_code = status.HTTP_404_NOT_FOUND
    code = 'NOT_FOUND'


class ForbiddenError(AppError):
    """Structurally disallowed operation"""
    status_code = status.HTTP_403_FORBIDDEN
    code = 'FORBIDDEN'


class ConflictError(AppError):
    """Concurrent write collision that could not be resolved"""
    status_code = status.HTTP_409_CONFLICT
    code = 'CONFLICT'


def render_app_error(exc: AppError) -> dict:
    body = {
        'code': exc.code,
        'message': exc.message,
        'retryable': exc.retryable,
    }
    if exc.details:
        body['details'] = exc.details
    return {'error': body}


def custom_exception_handler(exc, context):
    """
    Custom exception handler for DRF

    Args:
        exc: The exception instance
        context: The context in which the exception occurred

    Returns:
        Response object with error details
    """
    if isinstance(exc, AppError):
        if exc.status_code >= 500:
            logger.error(f'{exc.code}: {exc.message}', exc_info=True)
        else:
            logger.info(f'{exc.code}: {exc.message}')
        return Response(render_app_error(exc), status=exc.status_code)

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    # Handle DRF exceptions
    if response is not None:
        error_code = 'VALIDATION_ERROR'
        retryable = False

        # Determine error code based on status
        if response.status_code == 401:
            error_code = 'UNAUTHORIZED'
        elif response.status_code == 403:
            error_code = 'FORBIDDEN'
        elif response.status_code == 404:
            error_code = 'NOT_FOUND'
        elif response.status_code == 405:
            error_code = 'METHOD_NOT_ALLOWED'
        elif response.status_code == 415:
            error_code = 'UNSUPPORTED_MEDIA_TYPE'
        elif response.status_code >= 500:
            error_code = 'INTERNAL_ERROR'
            retryable = True

        error_message = response.data
        details = None
        if isinstance(error_message, dict):
            if 'detail' in error_message:
                error_message = str(error_message['detail'])
            else:
                details = error_message
                error_message = 'Invalid request data'

        body = {
            'code': error_code,
            'message': error_message,
            'retryable': retryable,
        }
        if details:
            body['details'] = details

        return Response({'error': body}, status=response.status_code)

    # Handle unexpected exceptions
    logger.error(f'Unexpected error: {exc}', exc_info=True)
    return Response({
        'error': {
            'code': 'INTERNAL_ERROR',
            'message': 'An unexpected error occurred',
            'retryable': False,
        }
    }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

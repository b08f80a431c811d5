"""
URL configuration for the chat backend.
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse
from django.db import connection
from django.conf import settings
from django.conf.urls.static import static
import logging

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check endpoint
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except Exception as e:
        logger.error(f'Health check failed: {e}')
        return JsonResponse({
            'status': 'error',
            'error': 'Service unavailable',
        }, status=503)

    return JsonResponse({
        'status': 'ok',
        'services': {
            'database': 'connected',
        }
    })


urlpatterns = [
    path('admin/', admin.site.urls),

    path('health', health_check, name='health_check'),

    path('api/auth/', include('apps.authentication.urls')),
    path('api/conversations/', include('apps.conversations.urls')),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

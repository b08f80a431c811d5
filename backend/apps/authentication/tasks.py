"""
Authentication background tasks.
"""

from celery import shared_task
from django.utils import timezone
from .models import RefreshToken
import logging

logger = logging.getLogger(__name__)


@shared_task(name='apps.authentication.tasks.cleanup_expired_tokens')
def cleanup_expired_tokens():
    """
    Delete refresh tokens past their expiry
    Scheduled daily by celery beat (config/celery.py)
    """
    deleted_count, _ = RefreshToken.objects.filter(
        expires_at__lt=timezone.now()
    ).delete()

    logger.info(f'Cleaned up {deleted_count} expired refresh tokens')
    return deleted_count

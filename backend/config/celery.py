"""
Celery configuration for the chat backend.
"""

import os
from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('chat_backend')

# All celery-related configuration keys carry a `CELERY_` prefix in settings
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django apps.
app.autodiscover_tasks()

app.conf.beat_schedule = {
    'cleanup-expired-tokens-daily': {
        'task': 'apps.authentication.tasks.cleanup_expired_tokens',
        'schedule': crontab(hour=2, minute=0),  # Every day at 2 AM
    },
}

app.conf.update(
    enable_utc=True,
    task_time_limit=5 * 60,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)

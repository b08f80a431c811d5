"""
Settings for the test suite.
"""

import os
import tempfile

from .settings import *  # noqa: F401,F403

DEBUG = False

# File-backed so that threads share one database; writers wait for the lock
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.path.join(tempfile.gettempdir(), 'chat-backend.sqlite3'),
        'OPTIONS': {
            'timeout': 20,
        },
        'TEST': {
            'NAME': os.path.join(tempfile.mkdtemp(prefix='chat-db-'), 'test.sqlite3'),
        },
    }
}

CHANNEL_LAYERS = {
    'default': {
        'BACKEND': 'channels.layers.InMemoryChannelLayer',
    }
}

MEDIA_ROOT = tempfile.mkdtemp(prefix='chat-media-')

CELERY_TASK_ALWAYS_EAGER = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

JWT_SECRET_KEY = 'test-secret'
JWT_REFRESH_SECRET_KEY = 'test-refresh-secret'

LOG_LEVEL = 'WARNING'
LOGGING['root']['level'] = LOG_LEVEL  # noqa: F405

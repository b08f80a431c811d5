"""
Message URL configuration.

Mounted under /api/conversations/<conversation_id>/messages
"""

from django.urls import path
from .views import ConversationMessagesView

app_name = 'messaging'

urlpatterns = [
    path('', ConversationMessagesView.as_view(), name='conversation_messages'),
]

"""
Conversation URL configuration.
"""

from django.urls import include, path
from .views import (
    ConversationDetailView,
    ConversationMembersView,
    ConversationsListView,
    GroupConversationView,
    LeaveConversationView,
    OneToOneConversationView,
)

app_name = 'conversations'

urlpatterns = [
    # GET /api/conversations/
    path('', ConversationsListView.as_view(), name='list'),

    # POST /api/conversations/one-to-one
    path('one-to-one', OneToOneConversationView.as_view(), name='one_to_one'),

    # POST /api/conversations/group
    path('group', GroupConversationView.as_view(), name='group'),

    # GET /api/conversations/:conversationId
    path('<uuid:conversation_id>', ConversationDetailView.as_view(), name='detail'),

    # POST /api/conversations/:conversationId/leave
    path('<uuid:conversation_id>/leave', LeaveConversationView.as_view(), name='leave'),

    # GET|POST /api/conversations/:conversationId/members
    path('<uuid:conversation_id>/members', ConversationMembersView.as_view(), name='members'),

    # GET|POST /api/conversations/:conversationId/messages
    path('<uuid:conversation_id>/messages', include('apps.messaging.urls')),
]

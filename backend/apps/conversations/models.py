"""
Conversation models.

Tables: conversations, conversation_members
"""

import uuid
from django.db import models
from apps.authentication.models import User


class Conversation(models.Model):
    """
    One-to-one or group conversation

    ``type`` is fixed at creation. One-to-one conversations carry the
    canonicalized member pair in ``pair_key``; its unique index guarantees a
    single conversation per pair even under concurrent creation.
    """
    ONE_TO_ONE = 'one-to-one'
    GROUP = 'group'
    TYPE_CHOICES = [
        (ONE_TO_ONE, 'One-to-one'),
        (GROUP, 'Group'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    name = models.CharField(max_length=255, null=True, blank=True)
    pair_key = models.CharField(max_length=80, unique=True, null=True, blank=True, editable=False)
    members = models.ManyToManyField(
        User,
        through='ConversationMember',
        related_name='conversations'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'conversations'
        ordering = ['-created_at']

    def __str__(self):
        if self.is_group:
            return self.name
        return f'one-to-one {self.pair_key}'

    @property
    def is_group(self):
        return self.type == self.GROUP


class ConversationMember(models.Model):
    """
    Membership of a user in a conversation
    """
    id = models.BigAutoField(primary_key=True)
    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'conversation_members'
        unique_together = ['conversation', 'user']
        indexes = [
            models.Index(fields=['user'], name='conv_member_user_idx'),
        ]

    def __str__(self):
        return f'{self.user_id} in {self.conversation_id}'

"""
Message models.

Table: messages
"""

from django.db import models
from apps.authentication.models import User
from apps.conversations.models import Conversation


class Message(models.Model):
    """
    Message posted to a conversation

    Immutable once created. Carries text, an attachment reference, or both.
    """
    id = models.BigAutoField(primary_key=True)
    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name='messages'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='messages'
    )
    content = models.TextField(null=True, blank=True)
    attachment = models.CharField(max_length=500, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'messages'
        indexes = [
            models.Index(fields=['conversation', 'created_at'], name='messages_conv_created_idx'),
            models.Index(fields=['conversation', 'user'], name='messages_conv_user_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(content__isnull=False) | models.Q(attachment__isnull=False),
                name='messages_content_or_attachment',
            ),
        ]
        ordering = ['created_at', 'id']

    def __str__(self):
        preview = (self.content or self.attachment or '')[:50]
        return f'{self.user_id}: {preview}'

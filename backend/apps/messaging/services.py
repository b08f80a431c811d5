"""
Message service.

Appends messages to conversations and lists them. New messages are published
to the other members only after the database commit; publishing never affects
the outcome of the write.
"""

import logging
from typing import List

from django.db import transaction

from apps.conversations.models import ConversationMember
from apps.conversations.services import conversation_service, normalize_id
from apps.core.exceptions import ValidationError
from .models import Message
from .storage import delete_attachment, store_attachment

logger = logging.getLogger(__name__)


class MessageService:
    """
    Message append and listing scoped to a conversation
    """

    def append_message(self, conversation_id, author_id, content=None, attachment=None) -> Message:
        """
        Create a message in a conversation

        Args:
            conversation_id: Target conversation
            author_id: Acting user
            content: Optional text
            attachment: Optional uploaded file

        Returns:
            The created Message

        Raises:
            ValidationError: If neither content nor attachment is given
            NotFoundError: If the conversation does not exist
        """
        if content is not None and not str(content).strip():
            content = None
        if content is None and not attachment:
            raise ValidationError('A message needs content or an attachment')

        author_id = normalize_id(author_id, 'user_id')
        conversation_service.require_users([author_id])
        conversation = conversation_service.require_conversation(conversation_id)

        attachment_ref = store_attachment(attachment) if attachment else None
        try:
            with transaction.atomic():
                message = Message.objects.create(
                    conversation=conversation,
                    user_id=author_id,
                    content=content,
                    attachment=attachment_ref,
                )
                transaction.on_commit(lambda: self._broadcast(message))
        except Exception:
            delete_attachment(attachment_ref)
            raise

        logger.info(f'Message {message.id} appended to conversation {conversation.id}')
        return message

    def list_messages(self, conversation_id) -> List[Message]:
        """All messages of a conversation, oldest first"""
        conversation = conversation_service.require_conversation(conversation_id)
        return list(
            Message.objects.filter(conversation=conversation).order_by('created_at', 'id')
        )

    def _broadcast(self, message: Message) -> None:
        from apps.websocket.services import websocket_service
        from .serializers import MessageSerializer

        try:
            recipients = [
                str(user_id)
                for user_id in ConversationMember.objects.filter(
                    conversation_id=message.conversation_id
                ).exclude(user_id=message.user_id).values_list('user_id', flat=True)
            ]
            payload = MessageSerializer(message).data
        except Exception as e:
            logger.warning(f'Could not prepare broadcast for message {message.id}: {e}')
            return

        for user_id in recipients:
            websocket_service.emit_new_message(
                user_id,
                payload,
                conversation={'id': str(message.conversation_id)},
            )


# Create singleton instance
message_service = MessageService()

"""
WebSocket service for emitting events to clients.

Every connected socket joins a per-user room; events are addressed to users,
never to conversations. Emission is best effort: failures are logged and
never raised to the caller.
"""

import asyncio
import logging
from typing import Dict, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def user_room(user_id) -> str:
    """Get the room name for a user"""
    return f'user_{user_id}'


class WebSocketService:
    """
    WebSocket service for real-time updates
    """

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        # Resolved lazily so settings overrides (tests) are honoured
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    def _is_async_context(self) -> bool:
        try:
            asyncio.get_running_loop()
            return True
        except RuntimeError:
            return False

    def _send(self, user_id, event_type: str, data: Dict) -> bool:
        """
        group_send to a user's room

        Returns:
            True if the event was handed to the channel layer
        """
        layer = self.channel_layer
        if not layer:
            logger.warning(f'Channel layer not configured, dropping {event_type} event')
            return False

        message = {'type': event_type, 'data': data}
        try:
            if self._is_async_context():
                asyncio.get_running_loop().create_task(layer.group_send(user_room(user_id), message))
            else:
                async_to_sync(layer.group_send)(user_room(user_id), message)
        except Exception as e:
            logger.warning(f'Failed to emit {event_type} to user {user_id}: {e}')
            return False

        logger.debug(f'Emitted {event_type} event to user {user_id}')
        return True

    def emit_new_message(self, user_id, message: Dict, conversation: Optional[Dict] = None) -> bool:
        """
        Emit a new message event to a user
        """
        return self._send(user_id, 'new_message', {
            'message': message,
            'conversation': conversation,
            'timestamp': message.get('created_at'),
        })

    def emit_conversation_update(self, user_id, conversation: Dict) -> bool:
        """
        Emit a conversation update event (e.g. the user was added to a group)
        """
        return self._send(user_id, 'conversation_update', {
            'conversation': conversation,
            'timestamp': conversation.get('updated_at'),
        })


# Create singleton instance
websocket_service = WebSocketService()

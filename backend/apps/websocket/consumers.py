"""
WebSocket consumers for real-time updates.
"""

import asyncio
import json
import logging

from channels.generic.websocket import AsyncWebsocketConsumer

from .services import user_room

logger = logging.getLogger(__name__)


class MessagingConsumer(AsyncWebsocketConsumer):
    """
    WebSocket consumer for real-time messaging updates

    One socket per user session; it listens on the user's room and relays
    ``new_message`` and ``conversation_update`` events.
    """

    async def connect(self):
        self.user_id = None
        self.group_joined = False

        user_jwt = self.scope.get('user_jwt')
        if user_jwt:
            self.user_id = user_jwt.get('user_id')

        if not self.user_id:
            # Reject connection if not authenticated
            await self.close(code=4001)
            return

        await self.accept()

        self.user_room = user_room(self.user_id)
        await self._safe_group_add()

        await self.send_event('authenticated', {
            'userId': self.user_id,
            'email': user_jwt.get('email'),
            'realtime': self.group_joined,
        })

        logger.info(f'User {self.user_id} connected (realtime={self.group_joined})')

    async def _safe_group_add(self):
        """Join the user room; a broken channel layer leaves the socket in polling mode"""
        if not self.channel_layer:
            return
        try:
            await asyncio.wait_for(
                self.channel_layer.group_add(self.user_room, self.channel_name),
                timeout=5.0
            )
            self.group_joined = True
        except asyncio.TimeoutError:
            logger.warning('Channel layer timeout, real-time updates disabled')
        except Exception as e:
            logger.warning(f'Channel layer unavailable: {e}. Real-time updates disabled.')

    async def disconnect(self, close_code):
        if getattr(self, 'group_joined', False):
            try:
                await asyncio.wait_for(
                    self.channel_layer.group_discard(self.user_room, self.channel_name),
                    timeout=5.0
                )
            except Exception as e:
                logger.debug(f'group_discard failed on disconnect: {e}')

        logger.info(f'User {getattr(self, "user_id", None)} disconnected ({close_code})')

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            await self.send_event('error', {'message': 'Invalid JSON'})
            return

        if isinstance(data, dict) and data.get('event') == 'ping':
            await self.send(text_data=json.dumps({
                'event': 'pong',
                'timestamp': data.get('timestamp')
            }))

    async def send_event(self, event, data):
        await self.send(text_data=json.dumps({'event': event, 'data': data}))

    # Channel layer event handlers

    async def new_message(self, event):
        await self.send_event('new_message', event['data'])

    async def conversation_update(self, event):
        await self.send_event('conversation_update', event['data'])

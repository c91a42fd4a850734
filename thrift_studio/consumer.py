"""
WebSocket consumer pushing try-on status updates to a signed-in user.
"""

import json
import logging
import urllib.parse

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.tokens import AccessToken

User = get_user_model()
logger = logging.getLogger(__name__)


class UserWebSocketConsumer(AsyncWebsocketConsumer):
    """
    Each user connects with their user ID and a JWT access token
    (``?token=`` or ``Authorization: Bearer``); try-on status changes for
    that user are pushed through this connection.
    """

    async def connect(self):
        self.user_id = self.scope['url_route']['kwargs'].get('user_id')
        logger.info("WebSocket connection attempt: user_id=%s", self.user_id)

        if not self.user_id:
            await self.close(code=4001)
            return

        if not self.channel_layer:
            logger.error("WebSocket connection rejected: Channel layer not configured")
            await self.close(code=4002)
            return

        user = await self.authenticate_user()
        if not user:
            logger.warning("WebSocket connection rejected: Authentication failed for user ID %s", self.user_id)
            await self.close(code=4003)
            return

        if user.id != int(self.user_id):
            logger.warning(
                "WebSocket connection rejected: token user %s does not match URL user %s",
                user.id,
                self.user_id
            )
            await self.close(code=4004)
            return

        self.room_group_name = f'user_{self.user_id}'
        await self.channel_layer.group_add(self.room_group_name, self.channel_name)
        await self.accept()
        logger.info("WebSocket connected: user_id=%s", self.user_id)

        await self.send(text_data=json.dumps({
            'type': 'connection',
            'status': 'connected',
            'user_id': self.user_id,
        }))

    async def disconnect(self, close_code):
        if hasattr(self, 'room_group_name'):
            await self.channel_layer.group_discard(self.room_group_name, self.channel_name)
            logger.info("WebSocket disconnected: user_id=%s", self.user_id)

    async def receive(self, text_data):
        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            await self.send(text_data=json.dumps({'type': 'error', 'message': 'Invalid JSON format'}))
            return

        if data.get('type') == 'ping':
            await self.send(text_data=json.dumps({'type': 'pong', 'timestamp': data.get('timestamp')}))

    async def task_status_update(self, event):
        """Forward a status update sent to the user's group."""
        await self.send(text_data=json.dumps({
            'type': 'task_status',
            'task_type': event.get('task_type', 'tryon'),
            'data': event.get('data', {}),
            'timestamp': event.get('timestamp'),
        }))

    @database_sync_to_async
    def get_user_from_token(self, token):
        try:
            access = AccessToken(token)
            return User.objects.get(id=access['user_id'])
        except (InvalidToken, TokenError, KeyError, User.DoesNotExist) as e:
            logger.error("Token validation error: %s", e)
            return None

    async def authenticate_user(self):
        token = None

        query_string = self.scope.get('query_string', b'').decode()
        if query_string:
            token_list = urllib.parse.parse_qs(query_string).get('token', [])
            if token_list:
                token = token_list[0]

        if not token:
            headers = dict(self.scope.get('headers', []))
            auth_header = headers.get(b'authorization', b'').decode()
            if auth_header.startswith('Bearer '):
                token = auth_header.split(' ', 1)[1]

        if not token:
            return None

        return await self.get_user_from_token(urllib.parse.unquote(token))

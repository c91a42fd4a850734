"""
WebSocket URL routing for Django Channels.
"""

from django.urls import re_path
from .consumer import UserWebSocketConsumer

websocket_urlpatterns = [
    re_path(r'^ws/user/(?P<user_id>\d+)/$', UserWebSocketConsumer.as_asgi()),
]

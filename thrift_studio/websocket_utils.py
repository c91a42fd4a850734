"""
WebSocket utility functions for sending try-on status updates to clients.

Celery tasks call these synchronously; messages are routed to the
per-user group joined by UserWebSocketConsumer.
"""

import logging
import time
from typing import Optional, Dict, Any
from channels.layers import get_channel_layer
from asgiref.sync import async_to_sync

logger = logging.getLogger(__name__)

FINAL_STATUSES = ('completed', 'degraded', 'skipped', 'failed', 'cancelled')


def _send_websocket_message(channel_layer, user_id: int, data: Dict[str, Any]):
    try:
        async_to_sync(channel_layer.group_send)(
            f'user_{user_id}',
            {
                'type': 'task_status_update',
                'task_type': 'tryon',
                'data': data,
                'timestamp': time.time()
            }
        )
        logger.info(
            "[WS] Sent try-on status to user_id=%s status=%s tryon_request_id=%s",
            user_id,
            data.get('status'),
            data.get('tryon_request_id')
        )
    except Exception as e:
        logger.error("[WS] Failed to send WebSocket message to user_id=%s: %s", user_id, e, exc_info=True)


def send_tryon_status_update(
    user_id: int,
    tryon_request_id: int,
    status: str,
    task_id: Optional[str] = None,
    processed_image_url: Optional[str] = None,
    message: Optional[str] = None,
):
    """
    Push a try-on status change to the owning user.

    Failures to reach the channel layer are logged and never propagate:
    the status endpoint remains the source of truth.
    """
    try:
        channel_layer = get_channel_layer()
        if not channel_layer:
            logger.warning("[WS] Channel layer not configured, cannot send status update to user %s", user_id)
            return

        message_data = {
            'tryon_request_id': tryon_request_id,
            'task_id': task_id,
            'status': status,
        }
        if processed_image_url:
            message_data['processed_image_url'] = processed_image_url
        if message:
            message_data['message'] = message
        if status in FINAL_STATUSES:
            message_data['final'] = True

        _send_websocket_message(channel_layer, user_id, message_data)

    except Exception as e:
        logger.error("[WS] Failed to send status update to user %s: %s", user_id, e, exc_info=True)

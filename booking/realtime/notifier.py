"""Push queue events to WebSocket listeners through the channel layer."""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings

logger = logging.getLogger(__name__)


def notification_group(role: str) -> str:
    return f"{role}_notifications"


class ChannelsNotifier:
    """Fire-and-forget publisher; the queue dashboard group unless ``groups`` says otherwise."""

    def __init__(self, group: str | None = None):
        self.group = group or settings.QUEUE_UPDATES_GROUP

    def publish(self, event: str, payload, groups: Optional[Iterable[str]] = None) -> None:
        channel_layer = get_channel_layer()
        if channel_layer is None:
            logger.debug('No channel layer configured; dropping %s', event)
            return
        message = {'type': 'relay.event', 'event': event, 'payload': payload}
        for group in groups or [self.group]:
            try:
                async_to_sync(channel_layer.group_send)(group, message)
            except Exception:
                logger.exception('Failed to publish %s to %s', event, group)

import json

from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings

from ..permissions import notification_roles
from .notifier import notification_group


class RelayConsumer(AsyncWebsocketConsumer):
    """Joins ``get_groups()`` and relays whatever the notifier publishes there."""

    def get_groups(self) -> list:
        return []

    async def connect(self):
        self.groups_joined = self.get_groups()
        if not self.groups_joined:
            await self.close()
            return
        for group in self.groups_joined:
            await self.channel_layer.group_add(group, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        for group in getattr(self, "groups_joined", []):
            await self.channel_layer.group_discard(group, self.channel_name)

    async def relay_event(self, event):
        # event: {"type": "relay.event", "event": "queueUpdate", "payload": [...]}
        await self.send(json.dumps({"type": event["event"], "data": event["payload"]}))


class QueueUpdatesConsumer(RelayConsumer):
    """Dashboard socket; relays queue snapshots published by the booking service."""

    def get_groups(self):
        return [settings.QUEUE_UPDATES_GROUP]


class NotificationsConsumer(RelayConsumer):
    """Back-office socket; one ``<role>_notifications`` group per role of the signed-in user."""

    def get_groups(self):
        roles = notification_roles(self.scope.get("user"))
        return [notification_group(role) for role in sorted(roles)]

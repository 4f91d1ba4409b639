import logging

from channels.generic.websocket import AsyncJsonWebsocketConsumer

from .backends import push_group_name

logger = logging.getLogger(__name__)


class NotificationConsumer(AsyncJsonWebsocketConsumer):
    """Forwards push payloads published to ``user_<id>`` to the browser."""

    async def connect(self):
        self.user = self.scope.get("user")

        if self.user is None or not self.user.is_authenticated:
            logger.info("WebSocket connection rejected: User not authenticated")
            await self.close()
            return

        self.group_name = push_group_name(self.user.pk)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def push_notification(self, event):
        await self.send_json({"type": "notification", "payload": event["payload"]})

"""Authenticated JSON WebSocket consumer that routes client messages by type."""

import logging
from typing import Dict, Any

from channels.generic.websocket import AsyncJsonWebsocketConsumer

from realtime.notifications import user_group

logger = logging.getLogger(__name__)


class BaseConsumer(AsyncJsonWebsocketConsumer):
    """
    Rejects anonymous sockets, keeps every accepted socket in its user's
    personal group and tracks any other group it joins so disconnect can
    clean up.

    Subclasses list their client message types in ``message_handlers``
    (type -> coroutine method name) and may override ``on_connect``.
    """

    message_handlers: Dict[str, str] = {}

    async def connect(self):
        user = self.scope.get("user")
        if user is None or user.is_anonymous:
            logger.debug("Rejecting unauthenticated socket %s", self.channel_name)
            await self.close()
            return

        self.user = user
        self.user_id = user.id
        self.groups_joined = set()

        await self.join(user_group(self.user_id))
        await self.accept()
        await self.on_connect()

    async def on_connect(self):
        await self.reply("connection_established", user_id=self.user_id)

    async def disconnect(self, close_code):
        for group in list(getattr(self, "groups_joined", ())):
            await self.leave(group)
        logger.debug("Socket for user %s closed (%s)", getattr(self, "user_id", None), close_code)

    async def receive_json(self, content, **kwargs):
        msg_type = content.get("type") if isinstance(content, dict) else None
        if not msg_type:
            await self.send_error("Message type is required")
            return

        handler_name = self.message_handlers.get(msg_type)
        if handler_name is None:
            await self.send_error(f"Unknown message type: {msg_type}")
            return

        try:
            await getattr(self, handler_name)(content)
        except Exception:
            logger.exception("Error handling %s from user %s", msg_type, self.user_id)
            await self.send_error(f"Error processing {msg_type}")

    # ---------------------- Groups ----------------------

    async def join(self, group: str):
        await self.channel_layer.group_add(group, self.channel_name)
        self.groups_joined.add(group)

    async def leave(self, group: str):
        await self.channel_layer.group_discard(group, self.channel_name)
        self.groups_joined.discard(group)

    # ---------------------- Replies ----------------------

    async def reply(self, msg_type: str, **fields: Any):
        await self.send_json({"type": msg_type, **fields})

    async def send_error(self, message: str):
        await self.reply("error", message=message)

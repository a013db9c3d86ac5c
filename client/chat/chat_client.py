"""
Chat client module.

This module handles client-side chat messaging functionality.
"""

import json
from typing import Awaitable, Callable, Dict, List, Optional

from common.constants import MessageTypes
from common.protocol_definitions import (
    encode_frame, create_send_message, create_typing_message, create_edit_message,
    create_delete_message, create_register_message, create_auth_message,
    create_logout_message
)

Handler = Callable[[dict], Awaitable[None]]


class ChatClient:
    """Client-side chat functionality over a WebSocket connection."""

    def __init__(self, websocket=None):
        self.websocket = websocket
        self.token: Optional[str] = None
        self.user: Optional[dict] = None
        self.handlers: Dict[str, List[Handler]] = {}

    def set_websocket(self, websocket):
        """Set the connection used for sending messages."""
        self.websocket = websocket

    def on(self, msg_type: str, handler: Handler):
        """Register a coroutine to run for every event of the given type."""
        self.handlers.setdefault(msg_type, []).append(handler)

    async def send_message(self, message: dict) -> bool:
        """Send a JSON message to the server."""
        if self.websocket is None:
            return False
        await self.websocket.send(encode_frame(message))
        return True

    async def register(self, name: str) -> bool:
        return await self.send_message(create_register_message(name))

    async def authenticate(self, token: Optional[str] = None) -> bool:
        """Check a stored token (or the current one) with the server."""
        token = token or self.token
        if not token:
            return False
        return await self.send_message(create_auth_message(token))

    async def logout(self) -> bool:
        if not self.token:
            return False
        sent = await self.send_message(create_logout_message(self.token))
        self.token = None
        self.user = None
        return sent

    async def send_chat(self, text: str) -> bool:
        """Send a chat message as the current user."""
        if not self.token:
            return False
        return await self.send_message(create_send_message(text, self.token))

    async def send_typing(self) -> bool:
        if not self.token:
            return False
        return await self.send_message(create_typing_message(self.token))

    async def edit_message(self, message_id: str, new_text: str) -> bool:
        return await self.send_message(create_edit_message(message_id, new_text, self.token))

    async def delete_message(self, message_id: str) -> bool:
        return await self.send_message(create_delete_message(message_id, self.token))

    async def handle_raw(self, raw) -> Optional[dict]:
        """Decode a frame from the server and hand it to handle_message."""
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            return None
        if not isinstance(message, dict):
            return None
        await self.handle_message(message)
        return message

    async def handle_message(self, message: dict):
        """Handle different types of events from the server."""
        msg_type = message.get('type', '')

        # Remember the session on successful register/auth
        if msg_type in (MessageTypes.REGISTER_OK, MessageTypes.AUTH_OK):
            self.token = message.get('token')
            self.user = message.get('user')

        for handler in self.handlers.get(msg_type, []):
            await handler(message)

    async def listen(self):
        """Read events until the connection closes."""
        async for raw in self.websocket:
            await self.handle_raw(raw)

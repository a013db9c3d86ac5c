#!/usr/bin/env python3
"""
Unit tests for client/chat/chat_client.py
"""

import json
import unittest
from unittest.mock import AsyncMock

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from client.chat.chat_client import ChatClient
from common.constants import MessageTypes


class TestChatClient(unittest.IsolatedAsyncioTestCase):
    """Test cases for ChatClient."""

    def setUp(self):
        self.websocket = AsyncMock()
        self.client = ChatClient(self.websocket)

    def sent_frames(self):
        return [json.loads(call.args[0]) for call in self.websocket.send.await_args_list]

    async def test_actions_need_a_token(self):
        self.assertFalse(await self.client.send_chat("hi"))
        self.assertFalse(await self.client.send_typing())
        self.assertFalse(await self.client.authenticate())
        self.websocket.send.assert_not_awaited()

    async def test_register_ok_stores_token(self):
        await self.client.register("Alice")
        await self.client.handle_raw(json.dumps({
            "type": MessageTypes.REGISTER_OK,
            "user": {"userid": "123456", "name": "Alice"},
            "token": "tok",
            "maxAge": 10
        }))
        await self.client.send_chat("hi")
        await self.client.edit_message("m1", "hello")

        self.assertEqual(self.client.token, "tok")
        self.assertEqual(self.sent_frames(), [
            {"type": MessageTypes.REGISTER, "name": "Alice"},
            {"type": MessageTypes.SEND_MESSAGE, "text": "hi", "token": "tok"},
            {"type": MessageTypes.EDIT_MESSAGE, "messageId": "m1", "newMessage": "hello", "token": "tok"},
        ])

    async def test_logout_clears_session(self):
        self.client.token = "tok"

        self.assertTrue(await self.client.logout())

        self.assertIsNone(self.client.token)
        self.assertEqual(self.sent_frames(), [{"type": MessageTypes.LOGOUT, "token": "tok"}])

    async def test_handlers_receive_events(self):
        received = []

        async def on_typing(message):
            received.append(message['name'])

        self.client.on(MessageTypes.NOTIFY_TYPING, on_typing)
        await self.client.handle_raw(json.dumps({"type": MessageTypes.NOTIFY_TYPING, "name": "Bob"}))
        await self.client.handle_raw("garbage")

        self.assertEqual(received, ["Bob"])

    async def test_not_connected(self):
        client = ChatClient()
        client.token = "tok"
        self.assertFalse(await client.send_chat("hi"))


if __name__ == '__main__':
    unittest.main()

"""
Chat server module.

This module handles the realtime side of the chat: connection bookkeeping,
inbound actions and the events they broadcast.
"""

import asyncio
from typing import Dict, Iterable, List, Optional, Tuple

from common.constants import TOKEN_MAX_AGE
from common.errors import ChatError, NotFoundError, ValidationError
from common.protocol_definitions import (
    Action, AuthAction, DeleteMessageAction, EditMessageAction, LogoutAction,
    RegisterAction, SendMessageAction, TypingAction, User, encode_frame,
    create_all_messages_message, create_auth_ok_message, create_logout_ok_message,
    create_message_deleted_message, create_message_updated_message,
    create_new_message_message, create_notify_typing_message,
    create_register_ok_message, create_users_count_message
)
from server.auth.session_store import SessionStore
from server.chat.message_ledger import MessageLedger
from server.chat.presence import PresenceCounter
from server.utils.logger import logger, mask_token


class ChatServer:
    """
    Server-side realtime gateway.

    A channel is anything with an async ``send(str)`` method. Identity is
    never bound to a channel: every action carries its own token and is
    re-authenticated against the session store.
    """

    def __init__(self, sessions: SessionStore, ledger: MessageLedger, presence: PresenceCounter,
                 require_auth_for_edits: bool = False, token_max_age: int = TOKEN_MAX_AGE):
        self.sessions = sessions
        self.ledger = ledger
        self.presence = presence
        self.require_auth_for_edits = require_auth_for_edits
        self.token_max_age = token_max_age
        self.clients: Dict[int, object] = {}  # conn_id -> channel
        self.next_conn_id = 1
        self.lock = asyncio.Lock()  # Protect the client registry

    def _recipients(self, exclude_conn_id: Optional[int] = None) -> List[Tuple[int, object]]:
        # Caller holds self.lock
        return [
            (conn_id, channel) for conn_id, channel in self.clients.items()
            if exclude_conn_id is None or conn_id != exclude_conn_id
        ]

    async def broadcast(self, message: dict, exclude_conn_id: Optional[int] = None) -> List[int]:
        """
        Send a JSON message to all connected clients.
        Optionally exclude a specific client by conn_id.
        Returns the conn_ids that could not be reached.
        """
        async with self.lock:
            recipients = self._recipients(exclude_conn_id)
        return await self._fan_out(encode_frame(message), recipients)

    async def _fan_out(self, data: str, recipients: Iterable) -> List[int]:
        """Send to every recipient concurrently so one slow socket does not hold up the rest."""
        recipients = list(recipients)
        results = await asyncio.gather(
            *(channel.send(data) for _, channel in recipients),
            return_exceptions=True
        )
        failed = []
        for (conn_id, _), result in zip(recipients, results):
            if isinstance(result, Exception):
                logger.error(f"Failed to broadcast to conn_id={conn_id}: {result}")
                failed.append(conn_id)
        return failed

    async def send_message(self, conn_id: int, message: dict) -> bool:
        """Send a JSON message to a specific client."""
        async with self.lock:
            channel = self.clients.get(conn_id)
        if channel is None:
            return False
        return not await self._fan_out(encode_frame(message), [(conn_id, channel)])

    async def connect(self, channel, addr=None) -> int:
        """
        Register a new channel, announce presence and send it the ledger.

        The registry lock is held until the snapshot is delivered, so events
        from other connections reach the newcomer only after its snapshot and
        never repeat a message the snapshot already holds.
        """
        async with self.lock:
            conn_id = self.next_conn_id
            self.next_conn_id += 1
            self.clients[conn_id] = channel

            count = self.presence.increment()
            logger.log_connection(addr, conn_id, count)

            await self._fan_out(encode_frame(create_users_count_message(count)), self._recipients())
            await self._fan_out(
                encode_frame(create_all_messages_message(self.ledger.snapshot())),
                [(conn_id, channel)]
            )
        return conn_id

    async def disconnect(self, conn_id: int):
        """Remove a channel and announce the new presence count."""
        async with self.lock:
            channel = self.clients.pop(conn_id, None)
        if channel is None:
            return

        count = self.presence.decrement()
        logger.log_disconnect(conn_id, count)
        await self.broadcast(create_users_count_message(count))

    def _resolve(self, token: Optional[str], action: str, conn_id: int) -> Optional[User]:
        try:
            return self.sessions.authenticate(token)
        except NotFoundError:
            logger.debug(f"Dropped {action} from conn_id={conn_id}: unknown token {mask_token(token)}")
            return None

    async def handle_send_message(self, conn_id: int, text: str, token: Optional[str]):
        """Append a message, echo the ledger to the sender and fan it out to others."""
        user = self._resolve(token, "send-message", conn_id)
        if user is None:
            return

        async with self.lock:
            try:
                message, evicted = self.ledger.append_with_evictions(text, user)
            except ValidationError as e:
                logger.debug(f"Dropped send-message from conn_id={conn_id}: {e.message}")
                return
            snapshot = self.ledger.snapshot()
            sender = self.clients.get(conn_id)
            others = self._recipients(exclude_conn_id=conn_id)
            everyone = self._recipients()

        logger.log_chat(user.name, user.user_id, message.message_id, message.text)

        if sender is not None:
            await self._fan_out(encode_frame(create_all_messages_message(snapshot)), [(conn_id, sender)])
        await self._fan_out(encode_frame(create_new_message_message(message)), others)

        # Messages pushed out of a bounded history are gone for every client
        for old in evicted:
            logger.log_delete(old.message_id)
            await self._fan_out(encode_frame(create_message_deleted_message(old.message_id)), everyone)

    async def handle_typing(self, conn_id: int, token: Optional[str]):
        """Tell everyone else that this token's user is typing."""
        user = self._resolve(token, "typing", conn_id)
        if user is None:
            return
        await self.broadcast(create_notify_typing_message(user.name), exclude_conn_id=conn_id)

    def _may_modify(self, conn_id: int, message_id: str, token: Optional[str]) -> bool:
        if not self.require_auth_for_edits:
            return True
        user = self._resolve(token, "modify", conn_id)
        if user is None:
            return False
        try:
            return self.ledger.get(message_id).author.user_id == user.user_id
        except NotFoundError:
            return False

    async def handle_edit_message(self, conn_id: int, message_id: str, new_text: str,
                                  token: Optional[str] = None):
        """Edit a message in place and tell every client, editor included."""
        if not self._may_modify(conn_id, message_id, token):
            return

        try:
            message = self.ledger.edit(message_id, new_text)
        except ChatError as e:
            logger.debug(f"Ignored edit of {message_id} from conn_id={conn_id}: {e.message}")
            return

        logger.log_edit(message_id, message.text)
        await self.broadcast(create_message_updated_message(message))

    async def handle_delete_message(self, conn_id: int, message_id: str, token: Optional[str] = None):
        """Remove a message and tell every client."""
        if not self._may_modify(conn_id, message_id, token):
            return

        try:
            self.ledger.delete(message_id)
        except NotFoundError:
            logger.debug(f"Ignored delete of unknown message {message_id} from conn_id={conn_id}")
            return

        logger.log_delete(message_id)
        await self.broadcast(create_message_deleted_message(message_id))

    async def handle_register(self, conn_id: int, name: str):
        """Register a user and reply with its token. Errors go back to the caller."""
        try:
            user, token = self.sessions.register(name)
        except ValidationError as e:
            await self.send_message(conn_id, e.to_dict())
            return
        logger.log_register(user.name, user.user_id, token)
        await self.send_message(conn_id, create_register_ok_message(user, token, self.token_max_age))

    async def handle_auth(self, conn_id: int, token: str):
        """Check a stored token and reply with its user."""
        try:
            user = self.sessions.authenticate(token)
        except NotFoundError:
            logger.debug(f"Rejected auth on conn_id={conn_id}: unknown token {mask_token(token)}")
            await self.send_message(conn_id, NotFoundError("session", status_code=401).to_dict())
            return
        logger.info(f"User '{user.name}' authenticated on conn_id={conn_id}")
        await self.send_message(conn_id, create_auth_ok_message(user, token))

    async def handle_logout(self, conn_id: int, token: str):
        """End a session."""
        if self.sessions.invalidate(token):
            logger.info(f"Session {mask_token(token)} logged out on conn_id={conn_id}")
        await self.send_message(conn_id, create_logout_ok_message())

    async def dispatch(self, conn_id: int, action: Action):
        """Dispatch a parsed action to the appropriate handler."""
        if isinstance(action, SendMessageAction):
            await self.handle_send_message(conn_id, action.text, action.token)
        elif isinstance(action, TypingAction):
            await self.handle_typing(conn_id, action.token)
        elif isinstance(action, EditMessageAction):
            await self.handle_edit_message(conn_id, action.message_id, action.new_text, action.token)
        elif isinstance(action, DeleteMessageAction):
            await self.handle_delete_message(conn_id, action.message_id, action.token)
        elif isinstance(action, RegisterAction):
            await self.handle_register(conn_id, action.name)
        elif isinstance(action, AuthAction):
            await self.handle_auth(conn_id, action.token)
        elif isinstance(action, LogoutAction):
            await self.handle_logout(conn_id, action.token)
        else:
            logger.warning(f"Unknown action {action!r} from conn_id={conn_id}")

    def get_connection_count(self) -> int:
        """Get the number of open channels."""
        return len(self.clients)

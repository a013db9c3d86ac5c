"""
Message ledger module.

Holds the ordered, mutable collection of live chat messages. Messages are
frozen dataclasses, so anything handed out by the ledger is a value that
later edits cannot change.
"""

import threading
import uuid
from collections import OrderedDict
from typing import List, Optional, Tuple

from common.constants import MAX_MESSAGE_LENGTH
from common.errors import NotFoundError, ValidationError
from common.protocol_definitions import Message, User


class MessageLedger:
    """Insertion-ordered chat history keyed by message id."""

    def __init__(self, max_message_length: int = MAX_MESSAGE_LENGTH, max_messages: Optional[int] = None):
        self.max_message_length = max_message_length
        self.max_messages = max_messages
        self._messages: "OrderedDict[str, Message]" = OrderedDict()
        self.lock = threading.Lock()  # Protect shared state

    def _validate_text(self, text: str):
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Message text must not be empty", field="text")
        if self.max_message_length and len(text) > self.max_message_length:
            raise ValidationError(
                f"Message text exceeds {self.max_message_length} characters", field="text"
            )

    def append(self, text: str, author: User) -> Message:
        """Store a new message at the end of the ledger."""
        return self.append_with_evictions(text, author)[0]

    def append_with_evictions(self, text: str, author: User) -> Tuple[Message, List[Message]]:
        """
        Store a new message and return it together with the oldest messages
        pushed out by the max_messages bound (empty when unbounded).
        """
        self._validate_text(text)

        evicted = []
        with self.lock:
            message_id = str(uuid.uuid4())
            while message_id in self._messages:
                message_id = str(uuid.uuid4())
            message = Message(message_id=message_id, text=text, author=author)
            self._messages[message_id] = message

            # Evict oldest when bounded
            if self.max_messages is not None:
                while len(self._messages) > self.max_messages:
                    evicted.append(self._messages.popitem(last=False)[1])
        return message, evicted

    def edit(self, message_id: str, new_text: str) -> Message:
        """Replace a message's text, keeping its id, author and position."""
        with self.lock:
            current = self._messages.get(message_id)
            if current is None:
                raise NotFoundError("message", message_id)
            self._validate_text(new_text)
            updated = current.with_text(new_text)
            self._messages[message_id] = updated
        return updated

    def delete(self, message_id: str) -> Message:
        """Remove a message and return it."""
        with self.lock:
            removed = self._messages.pop(message_id, None)
        if removed is None:
            raise NotFoundError("message", message_id)
        return removed

    def get(self, message_id: str) -> Message:
        with self.lock:
            message = self._messages.get(message_id)
        if message is None:
            raise NotFoundError("message", message_id)
        return message

    def snapshot(self) -> List[Message]:
        """Point-in-time copy of the ledger in insertion order."""
        with self.lock:
            return list(self._messages.values())

    def __len__(self) -> int:
        with self.lock:
            return len(self._messages)

"""
Session store module.

Maps opaque session tokens to registered users.
"""

import random
import threading
import uuid
from typing import Dict, Optional, Tuple

from common.constants import USER_ID_MIN, USER_ID_MAX
from common.errors import NotFoundError, ValidationError
from common.protocol_definitions import User


def generate_user_id() -> str:
    """Generate a 6-digit display identifier."""
    return str(random.randint(USER_ID_MIN, USER_ID_MAX))


def generate_token() -> str:
    """Generate a unique session token."""
    return str(uuid.uuid4())


class SessionStore:
    """In-memory token -> user mapping."""

    def __init__(self):
        self._sessions: Dict[str, User] = {}
        self.lock = threading.Lock()  # Protect shared state

    def register(self, name: str) -> Tuple[User, str]:
        """Create a user and a fresh token for it."""
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Name is required to register", field="name")

        user = User(user_id=generate_user_id(), name=name.strip())
        with self.lock:
            token = generate_token()
            while token in self._sessions:
                token = generate_token()
            self._sessions[token] = user
        return user, token

    def authenticate(self, token: Optional[str]) -> User:
        """Return the user for a token, or raise NotFoundError."""
        if not token:
            raise NotFoundError("session")
        with self.lock:
            user = self._sessions.get(token)
        if user is None:
            raise NotFoundError("session")
        return user

    def invalidate(self, token: Optional[str]) -> bool:
        """End a session. Returns False when the token was not known."""
        if not token:
            return False
        with self.lock:
            return self._sessions.pop(token, None) is not None

    def __contains__(self, token) -> bool:
        with self.lock:
            return token in self._sessions

    def __len__(self) -> int:
        with self.lock:
            return len(self._sessions)

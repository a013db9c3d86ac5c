"""
Protocol definitions for the realtime chat backend.

This module defines the message structures and data formats used in communication
between client and server components. Every frame is a JSON object whose
``type`` field selects one of the inbound actions or outbound events below.
"""

import json
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Union

from common.constants import MessageTypes
from common.errors import ProtocolError


@dataclass(frozen=True)
class User:
    """User information structure."""
    user_id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"userid": self.user_id, "name": self.name}


@dataclass(frozen=True)
class Message:
    """Chat message structure."""
    message_id: str
    text: str
    author: User

    def with_text(self, text: str) -> "Message":
        return replace(self, text=text)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "messageId": self.message_id,
            "message": self.text,
            "user": self.author.to_dict()
        }


# Inbound actions

@dataclass(frozen=True)
class SendMessageAction:
    """Post a new chat message."""
    text: str
    token: Optional[str]


@dataclass(frozen=True)
class TypingAction:
    """Announce that the token's user is typing."""
    token: Optional[str]


@dataclass(frozen=True)
class EditMessageAction:
    """Replace the text of an existing message."""
    message_id: str
    new_text: str
    token: Optional[str] = None


@dataclass(frozen=True)
class DeleteMessageAction:
    """Remove an existing message."""
    message_id: str
    token: Optional[str] = None


@dataclass(frozen=True)
class RegisterAction:
    """Create a new user and session."""
    name: str


@dataclass(frozen=True)
class AuthAction:
    """Check an existing session token."""
    token: str


@dataclass(frozen=True)
class LogoutAction:
    """End a session."""
    token: str


Action = Union[
    SendMessageAction, TypingAction, EditMessageAction, DeleteMessageAction,
    RegisterAction, AuthAction, LogoutAction
]


def _require_str(data: Dict[str, Any], field: str) -> str:
    value = data.get(field)
    if not isinstance(value, str):
        raise ProtocolError(f"Field '{field}' must be a string")
    return value


def _optional_str(data: Dict[str, Any], field: str) -> Optional[str]:
    value = data.get(field)
    if value is not None and not isinstance(value, str):
        raise ProtocolError(f"Field '{field}' must be a string")
    return value


def _credential(data: Dict[str, Any]) -> Optional[str]:
    # A missing or non-string token authenticates as nobody and is dropped downstream
    token = data.get('token')
    return token if isinstance(token, str) else None


def parse_action(raw: Union[str, bytes]) -> Action:
    """
    Decode a raw inbound frame into a typed action.

    Raises ProtocolError for malformed JSON, unknown types, or missing fields.
    Content validation (empty text, unknown token) is left to the stores.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode('utf-8')
        except UnicodeDecodeError:
            raise ProtocolError("Frame is not valid UTF-8")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        raise ProtocolError("Malformed JSON")

    if not isinstance(data, dict):
        raise ProtocolError("Frame must be a JSON object")

    msg_type = data.get('type')
    if not isinstance(msg_type, str) or not msg_type:
        raise ProtocolError("Missing message type")

    if msg_type == MessageTypes.SEND_MESSAGE:
        return SendMessageAction(text=_require_str(data, 'text'), token=_credential(data))
    if msg_type == MessageTypes.TYPING:
        return TypingAction(token=_credential(data))
    if msg_type == MessageTypes.EDIT_MESSAGE:
        return EditMessageAction(
            message_id=_require_str(data, 'messageId'),
            new_text=_require_str(data, 'newMessage'),
            token=_optional_str(data, 'token')
        )
    if msg_type == MessageTypes.DELETE_MESSAGE:
        return DeleteMessageAction(
            message_id=_require_str(data, 'messageId'),
            token=_optional_str(data, 'token')
        )
    if msg_type == MessageTypes.REGISTER:
        return RegisterAction(name=_require_str(data, 'name'))
    if msg_type == MessageTypes.AUTH:
        return AuthAction(token=_require_str(data, 'token'))
    if msg_type == MessageTypes.LOGOUT:
        return LogoutAction(token=_require_str(data, 'token'))

    raise ProtocolError(f"Unknown message type '{msg_type}'")


def encode_frame(message: Dict[str, Any]) -> str:
    """Serialize an outbound frame."""
    return json.dumps(message, ensure_ascii=False)


# Client to Server

def create_send_message(text: str, token: str) -> Dict[str, Any]:
    """Create a send-message action."""
    return {
        "type": MessageTypes.SEND_MESSAGE,
        "text": text,
        "token": token
    }


def create_typing_message(token: str) -> Dict[str, Any]:
    """Create a typing action."""
    return {
        "type": MessageTypes.TYPING,
        "token": token
    }


def create_edit_message(message_id: str, new_text: str, token: Optional[str] = None) -> Dict[str, Any]:
    """Create an edit-message action."""
    message = {
        "type": MessageTypes.EDIT_MESSAGE,
        "messageId": message_id,
        "newMessage": new_text
    }
    if token is not None:
        message["token"] = token
    return message


def create_delete_message(message_id: str, token: Optional[str] = None) -> Dict[str, Any]:
    """Create a delete-message action."""
    message = {
        "type": MessageTypes.DELETE_MESSAGE,
        "messageId": message_id
    }
    if token is not None:
        message["token"] = token
    return message


def create_register_message(name: str) -> Dict[str, Any]:
    """Create a register request."""
    return {
        "type": MessageTypes.REGISTER,
        "name": name
    }


def create_auth_message(token: str) -> Dict[str, Any]:
    """Create an auth request."""
    return {
        "type": MessageTypes.AUTH,
        "token": token
    }


def create_logout_message(token: str) -> Dict[str, Any]:
    """Create a logout request."""
    return {
        "type": MessageTypes.LOGOUT,
        "token": token
    }


# Server to Client

def create_users_count_message(count: int) -> Dict[str, Any]:
    """Create a presence count message."""
    return {
        "type": MessageTypes.USERS_COUNT,
        "count": count
    }


def create_all_messages_message(messages: List[Message]) -> Dict[str, Any]:
    """Create a full ledger snapshot message."""
    return {
        "type": MessageTypes.ALL_MESSAGES,
        "messages": [m.to_dict() for m in messages]
    }


def create_new_message_message(message: Message) -> Dict[str, Any]:
    """Create a new chat message notification."""
    return {
        "type": MessageTypes.NEW_MESSAGE,
        "message": message.to_dict()
    }


def create_notify_typing_message(name: str) -> Dict[str, Any]:
    """Create a typing notification."""
    return {
        "type": MessageTypes.NOTIFY_TYPING,
        "name": name
    }


def create_message_updated_message(message: Message) -> Dict[str, Any]:
    """Create an edited message notification."""
    return {
        "type": MessageTypes.MESSAGE_UPDATED,
        "messageId": message.message_id,
        "message": message.to_dict()
    }


def create_message_deleted_message(message_id: str) -> Dict[str, Any]:
    """Create a removed message notification."""
    return {
        "type": MessageTypes.MESSAGE_DELETED,
        "messageId": message_id
    }


def create_register_ok_message(user: User, token: str, max_age: int) -> Dict[str, Any]:
    """Create a registration success message."""
    return {
        "type": MessageTypes.REGISTER_OK,
        "user": user.to_dict(),
        "token": token,
        "maxAge": max_age
    }


def create_auth_ok_message(user: User, token: str) -> Dict[str, Any]:
    """Create an authentication success message."""
    return {
        "type": MessageTypes.AUTH_OK,
        "user": user.to_dict(),
        "token": token
    }


def create_logout_ok_message() -> Dict[str, Any]:
    """Create a logout confirmation message."""
    return {
        "type": MessageTypes.LOGOUT_OK
    }

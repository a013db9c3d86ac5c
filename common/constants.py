"""
Shared constants for the realtime chat backend.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 3009

# Frame limits
MAX_FRAME_SIZE = 1024 * 1024  # 1MB
MAX_MESSAGE_LENGTH = 2000

# Sessions
TOKEN_MAX_AGE = 30 * 24 * 60 * 60  # 30 days in seconds
USER_ID_MIN = 100000
USER_ID_MAX = 999999

# Chat History (None = unbounded)
MAX_MESSAGES = None

# Logging
LOG_DIR = 'logs'
CHAT_LOG_FILE = 'chat_history.log'
TOKEN_LOG_PREFIX = 8


# Message Types
class MessageTypes:
    # Client to Server
    SEND_MESSAGE = 'client-message-sent'
    TYPING = 'client-typing'
    EDIT_MESSAGE = 'message-update'
    DELETE_MESSAGE = 'message-delete'
    REGISTER = 'register'
    AUTH = 'auth'
    LOGOUT = 'logout'

    # Server to Client
    USERS_COUNT = 'users-count'
    ALL_MESSAGES = 'all-messages'
    NEW_MESSAGE = 'new-message'
    NOTIFY_TYPING = 'notify-typing'
    MESSAGE_UPDATED = 'message-updated'
    MESSAGE_DELETED = 'message-deleted'
    REGISTER_OK = 'register-ok'
    AUTH_OK = 'auth-ok'
    LOGOUT_OK = 'logout-ok'
    ERROR = 'error'


# Error codes
class ErrorCodes:
    VALIDATION_ERROR = 'VALIDATION_ERROR'
    NOT_FOUND = 'NOT_FOUND'
    PROTOCOL_ERROR = 'PROTOCOL_ERROR'
    INTERNAL_ERROR = 'INTERNAL_ERROR'

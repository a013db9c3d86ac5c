"""
Server configuration module.

This module handles server-side configuration settings.
"""

import os
from typing import Mapping, Optional

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, LOG_DIR, MAX_FRAME_SIZE,
    MAX_MESSAGE_LENGTH, MAX_MESSAGES, TOKEN_MAX_AGE
)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 logs_dir: Optional[str] = LOG_DIR, require_auth_for_edits: bool = False):
        self.host = host
        self.port = port

        # Logging configuration
        self.logs_dir = logs_dir

        # Chat settings
        self.max_message_length = MAX_MESSAGE_LENGTH
        self.max_messages = MAX_MESSAGES
        self.require_auth_for_edits = require_auth_for_edits

        # Session settings
        self.token_max_age = TOKEN_MAX_AGE

        # Connection settings
        self.max_frame_size = MAX_FRAME_SIZE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        """Build a config from CHAT_* environment variables."""
        environ = os.environ if environ is None else environ
        config = cls()
        if environ.get('CHAT_HOST'):
            config.host = environ['CHAT_HOST']
        if environ.get('CHAT_PORT'):
            config.port = int(environ['CHAT_PORT'])
        if environ.get('CHAT_LOG_DIR'):
            config.logs_dir = environ['CHAT_LOG_DIR']
        if environ.get('CHAT_MAX_MESSAGES'):
            config.max_messages = int(environ['CHAT_MAX_MESSAGES'])
        if environ.get('CHAT_REQUIRE_AUTH_FOR_EDITS'):
            config.require_auth_for_edits = _parse_bool(environ['CHAT_REQUIRE_AUTH_FOR_EDITS'])
        return config

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port
        }

    def get_chat_settings(self):
        """Get chat ledger settings."""
        return {
            'max_message_length': self.max_message_length,
            'max_messages': self.max_messages,
            'require_auth_for_edits': self.require_auth_for_edits
        }

    def get_log_settings(self):
        """Get logging settings."""
        return {
            'logs_dir': self.logs_dir
        }

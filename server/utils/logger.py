"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from common.constants import LOG_DIR, CHAT_LOG_FILE, TOKEN_LOG_PREFIX


def mask_token(token: Optional[str]) -> str:
    """Shorten a session token so it never appears in full in logs."""
    if not token:
        return '<none>'
    return token[:TOKEN_LOG_PREFIX] + '...'


class ServerLogger:
    """Server logging class."""

    def __init__(self, logs_dir: Optional[str] = LOG_DIR, log_level: int = logging.INFO):
        # Set up main logger
        self.logger = logging.getLogger('chat_server')
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        # Add handler to logger
        self.logger.addHandler(console_handler)

        self.chat_log_path: Optional[Path] = None
        self.set_logs_dir(logs_dir)

    def set_logs_dir(self, logs_dir: Optional[str]):
        """Point the chat transcript at a new directory, or disable it with None."""
        if logs_dir is None:
            self.chat_log_path = None
            return
        logs_path = Path(logs_dir)
        logs_path.mkdir(parents=True, exist_ok=True)
        self.chat_log_path = logs_path / CHAT_LOG_FILE

    def set_level(self, log_level: int):
        """Change the level of the logger and its handlers."""
        self.logger.setLevel(log_level)
        for handler in self.logger.handlers:
            handler.setLevel(log_level)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, addr, conn_id: int, count: int):
        """Log client connection."""
        self.info(f"New connection from {addr}, assigned conn_id={conn_id}, connected={count}")

    def log_disconnect(self, conn_id: int, count: int):
        """Log client disconnect."""
        self.info(f"Connection conn_id={conn_id} closed, connected={count}")

    def log_register(self, name: str, user_id: str, token: str):
        """Log user registration."""
        self.info(f"User '{name}' registered with userid={user_id}, token={mask_token(token)}")

    def log_chat(self, name: str, user_id: str, message_id: str, text: str):
        """Log chat message."""
        self.info(f"Chat from {name} (userid={user_id}) [{message_id}]: {text}")
        self._write_to_file(f"{datetime.now().isoformat()} | NEW | {name} (userid={user_id}) | {message_id} | {text}")

    def log_edit(self, message_id: str, text: str):
        """Log message edit."""
        self.info(f"Message {message_id} edited: {text}")
        self._write_to_file(f"{datetime.now().isoformat()} | EDIT | {message_id} | {text}")

    def log_delete(self, message_id: str):
        """Log message removal."""
        self.info(f"Message {message_id} deleted")
        self._write_to_file(f"{datetime.now().isoformat()} | DELETE | {message_id}")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")

    def _write_to_file(self, content: str):
        """Write content to the chat transcript."""
        if self.chat_log_path is None:
            return
        try:
            with open(self.chat_log_path, 'a', encoding='utf-8') as f:
                f.write(content + '\n')
        except OSError as e:
            self.error(f"Failed to write to log file {self.chat_log_path}: {e}")


# Global logger instance; the transcript stays off until a logs dir is configured
logger = ServerLogger(logs_dir=os.environ.get('CHAT_LOG_DIR'))

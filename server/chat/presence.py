"""
Presence counter module.

Counts the realtime channels that are currently open.
"""

import threading

from server.utils.logger import logger


class PresenceCounter:
    """Non-negative connection counter."""

    def __init__(self):
        self._count = 0
        self.lock = threading.Lock()

    def increment(self) -> int:
        with self.lock:
            self._count += 1
            return self._count

    def decrement(self) -> int:
        with self.lock:
            if self._count == 0:
                logger.warning("Presence decrement without a matching connect, staying at 0")
                return 0
            self._count -= 1
            return self._count

    @property
    def count(self) -> int:
        with self.lock:
            return self._count

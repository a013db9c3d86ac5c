"""
Error types shared by the chat backend.

Request-style operations surface these to the caller as ``error`` frames;
realtime action handlers absorb them.
"""

from typing import Any, Dict, Optional

from common.constants import ErrorCodes, MessageTypes


class ChatError(Exception):
    """Base exception for all chat backend errors."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Render as an error frame."""
        frame = {
            "type": MessageTypes.ERROR,
            "code": self.code,
            "status": self.status_code,
            "message": self.message,
        }
        if self.details:
            frame["details"] = self.details
        return frame


class ValidationError(ChatError):
    """Raised when input validation fails (empty name or text)."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else None
        super().__init__(
            message=message,
            code=ErrorCodes.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class NotFoundError(ChatError):
    """Raised when a token or message id is unknown."""

    def __init__(self, resource_type: str, resource_id: Optional[str] = None, status_code: int = 404):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            message=f"{resource_type} not found",
            code=ErrorCodes.NOT_FOUND,
            status_code=status_code,
            details={"resource_type": resource_type}
        )


class ProtocolError(ChatError):
    """Raised when an inbound frame cannot be parsed into an action."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code=ErrorCodes.PROTOCOL_ERROR,
            status_code=400
        )

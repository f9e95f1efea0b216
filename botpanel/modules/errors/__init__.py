"""
Errors Module - Black Box Interface

Purpose: Error taxonomy shared by every module
Interface: BotPanelError and its subclasses, each carrying an HTTP status
Hidden: Nothing; the API layer maps these to {"error": message} responses

Modules raise these instead of HTTPException so they stay usable outside FastAPI.
"""

from typing import Optional


class BotPanelError(Exception):
    """Base error. Carries the HTTP status the API layer should answer with."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BotPanelError):
    """Malformed client input (missing token, empty message, bad id)."""

    status_code = 400
    default_message = "Invalid request"


class SessionExpired(BotPanelError):
    """Unknown or already destroyed session id."""

    status_code = 401
    default_message = "Session expired"


class AuthError(BotPanelError):
    """Bot token rejected, or the gateway connection could not be established."""

    status_code = 401
    default_message = "Invalid token or login failed"


class InvalidChannel(BotPanelError):
    """Channel does not exist or is not a guild text channel."""

    status_code = 400
    default_message = "Invalid channel"


class RemoteOperationError(BotPanelError):
    """Discord rejected an operation. The message is passed through verbatim."""

    status_code = 500
    default_message = "Remote operation failed"


__all__ = [
    "BotPanelError",
    "ValidationError",
    "SessionExpired",
    "AuthError",
    "InvalidChannel",
    "RemoteOperationError",
]

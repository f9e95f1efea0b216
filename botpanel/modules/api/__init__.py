"""
API Module - Black Box Interface

Purpose: Request and response contracts for the HTTP layer
Interface: Pydantic models serialized as camelCase JSON
Hidden: Alias generation, field validation

The API layer only orchestrates - it contains no business logic.
All logic is delegated to the session, guild and profile modules.
"""

from .models import (
    ActivityPayload,
    AvatarRequest,
    ChannelListResponse,
    ChannelSummary,
    ErrorResponse,
    GuildListResponse,
    GuildSummary,
    LoginGuildSummary,
    LoginRequest,
    LoginResponse,
    MessageListResponse,
    MessageSentResponse,
    MessageSummary,
    NicknameRequest,
    PresenceRequest,
    PresenceStatus,
    SendMessageRequest,
    SuccessResponse,
    UserProfile,
    UsernameRequest,
)

__all__ = [
    "ActivityPayload",
    "AvatarRequest",
    "ChannelListResponse",
    "ChannelSummary",
    "ErrorResponse",
    "GuildListResponse",
    "GuildSummary",
    "LoginGuildSummary",
    "LoginRequest",
    "LoginResponse",
    "MessageListResponse",
    "MessageSentResponse",
    "MessageSummary",
    "NicknameRequest",
    "PresenceRequest",
    "PresenceStatus",
    "SendMessageRequest",
    "SuccessResponse",
    "UserProfile",
    "UsernameRequest",
]

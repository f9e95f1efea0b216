"""
botpanel shared data models.

These models define the structure of all data passed between
the session, guild and profile modules and the HTTP layer.
JSON field names are camelCase to match the browser front-end.
"""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Enums


class PresenceStatus(str, Enum):
    """Visible online status of the bot."""

    ONLINE = "online"
    IDLE = "idle"
    DND = "dnd"
    INVISIBLE = "invisible"


class CamelModel(BaseModel):
    """Base model serializing snake_case fields as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Request Models (API Input)


class LoginRequest(CamelModel):
    """Request to log a bot in."""

    token: Optional[str] = Field(None, description="Discord bot token")


class ActivityPayload(CamelModel):
    """Activity shown next to the bot's presence."""

    name: str = Field(..., min_length=1, max_length=128, description="Activity text")
    type: Optional[Union[int, str]] = Field(
        None, description="Activity type as a number (0-5) or name (playing, watching, ...)"
    )
    url: Optional[str] = Field(None, description="Stream URL, for streaming activities")
    state: Optional[str] = Field(None, description="Custom status text")


class PresenceRequest(CamelModel):
    """Request to change the bot's presence."""

    status: PresenceStatus = Field(default=PresenceStatus.ONLINE)
    activity: Optional[ActivityPayload] = None


class NicknameRequest(CamelModel):
    """Request to change the bot's nickname in one guild. Empty resets it."""

    nickname: Optional[str] = Field(None, max_length=32)


class AvatarRequest(CamelModel):
    """Request to change the bot's avatar."""

    avatar_base64: Optional[str] = Field(
        None, description="Image as a data URI or bare base64 string"
    )


class UsernameRequest(CamelModel):
    """Request to change the bot's global username."""

    username: Optional[str] = None


class SendMessageRequest(CamelModel):
    """Request to post a message as the bot."""

    content: Optional[str] = None


# Response Models (API Output)


class UserProfile(CamelModel):
    """The logged-in bot user."""

    id: str
    username: str
    avatar_url: Optional[str] = Field(None, alias="avatarURL")


class GuildSummary(CamelModel):
    """Projection of a guild from the client cache."""

    id: str
    name: str
    icon_url: Optional[str] = Field(None, alias="iconURL")
    member_count: Optional[int] = None


class LoginGuildSummary(GuildSummary):
    """Guild summary returned at login, with a freshly minted invite if allowed."""

    invite_url: Optional[str] = Field(None, alias="inviteURL")


class ChannelSummary(CamelModel):
    """A text channel the bot can post in."""

    id: str
    name: str


class MessageSummary(CamelModel):
    """A message in a text channel."""

    id: str
    author: str
    content: str
    timestamp: int = Field(..., description="Creation time in milliseconds since the epoch")


class LoginResponse(CamelModel):
    """Response after a successful login."""

    session_id: str
    user: UserProfile
    guilds: List[LoginGuildSummary]


class GuildListResponse(CamelModel):
    guilds: List[GuildSummary]


class ChannelListResponse(CamelModel):
    channels: List[ChannelSummary]


class MessageListResponse(CamelModel):
    messages: List[MessageSummary]


class SuccessResponse(CamelModel):
    success: bool = True


class MessageSentResponse(SuccessResponse):
    message_id: str


class ErrorResponse(CamelModel):
    error: str

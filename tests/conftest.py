"""
Shared pytest fixtures for botpanel tests.

This module provides common fixtures including:
- Fake discord.py objects (client, guilds, channels, members, messages)
  that behave like the real ones for the attributes botpanel touches
- A fake connector standing in for a real Discord login
- FastAPI test client wiring
"""

import itertools
import os
import sys
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Dict, Iterable, List, Optional
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from botpanel.config.provider import APIConfig, DiscordConfig
from botpanel.modules.errors import AuthError

BOT_USER_ID = 900000000000000001
BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

_ids = itertools.count(1000)


def next_id() -> int:
    return 100000000000000000 + next(_ids)


def make_http_error(
    cls=discord.HTTPException,
    status: int = 403,
    message: str = "Missing Permissions",
    code: int = 50013,
):
    """Build a discord.py HTTP error the way the library does from an API response."""
    response = MagicMock()
    response.status = status
    response.reason = "Error"
    return cls(response, {"message": message, "code": code})


# =============================================================================
# Fake Discord Objects
# =============================================================================


def make_message(content: str, author: str = "someone", offset_seconds: int = 0, message_id=None):
    return SimpleNamespace(
        id=message_id or next_id(),
        author=SimpleNamespace(name=author),
        content=content,
        created_at=BASE_TIME + timedelta(seconds=offset_seconds),
    )


class FakeChannel:
    """Guild channel with history, send and create_invite."""

    def __init__(
        self,
        name: str,
        channel_type: discord.ChannelType = discord.ChannelType.text,
        permissions: Optional[discord.Permissions] = None,
        messages: Iterable = (),
        channel_id: Optional[int] = None,
    ):
        self.id = channel_id or next_id()
        self.name = name
        self.type = channel_type
        self.permissions = permissions if permissions is not None else discord.Permissions.none()
        self.messages: List = list(messages)
        self.history_calls: List[int] = []
        self.send = AsyncMock(side_effect=self._send)
        self.create_invite = AsyncMock(
            return_value=SimpleNamespace(code=f"code{self.id % 10000}")
        )

    def permissions_for(self, member):
        return self.permissions

    async def history(self, limit: int = 100):
        # Discord returns newest first
        self.history_calls.append(limit)
        newest_first = sorted(self.messages, key=lambda m: m.created_at, reverse=True)
        for message in newest_first[:limit]:
            yield message

    async def _send(self, content: str):
        latest = max((m.created_at for m in self.messages), default=BASE_TIME)
        message = make_message(content, author="botpanel-bot")
        message.created_at = latest + timedelta(seconds=1)
        self.messages.append(message)
        return message


class FakeGuild:
    """Guild as cached by the gateway."""

    def __init__(
        self,
        name: str,
        channels: Iterable[FakeChannel] = (),
        member_count: int = 42,
        with_icon: bool = True,
        me_cached: bool = True,
        guild_id: Optional[int] = None,
    ):
        self.id = guild_id or next_id()
        self.name = name
        self.member_count = member_count
        self.icon = (
            SimpleNamespace(url=f"https://cdn.discordapp.com/icons/{self.id}/abc.png")
            if with_icon
            else None
        )
        self.member = SimpleNamespace(id=BOT_USER_ID, edit=AsyncMock())
        self.me = self.member if me_cached else None
        self.fetch_channels = AsyncMock(return_value=list(channels))
        self.fetch_member = AsyncMock(return_value=self.member)
        self.leave = AsyncMock()


class FakeClient:
    """discord.Client with only the attributes botpanel uses."""

    def __init__(
        self,
        guilds: Iterable[FakeGuild] = (),
        channels: Iterable[FakeChannel] = (),
        cached_channels: bool = False,
    ):
        self.user = SimpleNamespace(
            id=BOT_USER_ID,
            name="botpanel-bot",
            display_avatar=SimpleNamespace(
                url=f"https://cdn.discordapp.com/avatars/{BOT_USER_ID}/a1.png"
            ),
            edit=AsyncMock(),
        )
        self.guilds = list(guilds)
        self.channels: Dict[int, FakeChannel] = {c.id: c for c in channels}
        self.cached_channels = cached_channels
        self.fetch_guild = AsyncMock(side_effect=self._fetch_guild)
        self.fetch_channel = AsyncMock(side_effect=self._fetch_channel)
        self.change_presence = AsyncMock()

    def get_guild(self, guild_id: int):
        return next((g for g in self.guilds if g.id == guild_id), None)

    def get_channel(self, channel_id: int):
        return self.channels.get(channel_id) if self.cached_channels else None

    async def _fetch_guild(self, guild_id: int):
        raise make_http_error(discord.Forbidden, 403, "Missing Access", 50001)

    async def _fetch_channel(self, channel_id: int):
        if channel_id in self.channels:
            return self.channels[channel_id]
        raise make_http_error(discord.NotFound, 404, "Unknown Channel", 10003)


class FakeConnection:
    """Stands in for BotConnection."""

    def __init__(self, client: FakeClient):
        self.client = client
        self.closed = False
        self.close = AsyncMock(side_effect=self._close)

    @property
    def user(self):
        return self.client.user

    @property
    def is_closed(self) -> bool:
        return self.closed

    async def _close(self):
        self.closed = True


class FakeConnector:
    """
    Replacement for BotConnection.open.

    Tokens listed in ``rejected`` fail like a bad Discord login; every other
    token gets a new connection around a client built by ``client_factory``.
    """

    def __init__(self, client_factory=None, rejected=("BAD",)):
        self.client_factory = client_factory or FakeClient
        self.rejected = set(rejected)
        self.tokens: List[str] = []
        self.connections: List[FakeConnection] = []

    async def __call__(self, token: str) -> FakeConnection:
        self.tokens.append(token)
        if token in self.rejected:
            raise AuthError()
        connection = FakeConnection(self.client_factory())
        self.connections.append(connection)
        return connection


class StubConfigProvider:
    """Config provider with test-friendly values and no static front-end."""

    def __init__(self, discord_config: Optional[DiscordConfig] = None):
        self.discord_config = discord_config or DiscordConfig()

    def get_api_config(self) -> APIConfig:
        return APIConfig(
            port=4000,
            host="127.0.0.1",
            debug=False,
            cors_origins=["*"],
            static_dir=None,
            log_level="INFO",
        )

    def get_discord_config(self) -> DiscordConfig:
        return self.discord_config


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def discord_config():
    return DiscordConfig()


@pytest.fixture
def fake_connector():
    return FakeConnector()


@pytest.fixture
def two_guild_client():
    """
    Bot in two guilds; it may create invites only in the first one.
    """
    general = FakeChannel("general", permissions=discord.Permissions(create_instant_invite=True))
    announcements = FakeChannel("announcements", permissions=discord.Permissions(send_messages=True))

    def factory():
        return FakeClient(
            guilds=[
                FakeGuild("Alpha", channels=[general]),
                FakeGuild("Beta", channels=[announcements], with_icon=False),
            ]
        )

    return factory


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring a real Discord token"
    )

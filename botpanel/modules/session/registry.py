import logging
import secrets
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

import discord

from ...logging_config import mask_session_id
from ..api.models import LoginGuildSummary, UserProfile
from ..errors import SessionExpired, ValidationError
from ..guild import GuildModule
from .connection import BotConnection

logger = logging.getLogger(__name__)

Connector = Callable[[str], Awaitable[BotConnection]]


def build_profile(user: discord.ClientUser) -> UserProfile:
    """Project the logged-in bot user."""
    return UserProfile(
        id=str(user.id),
        username=user.name,
        avatar_url=str(user.display_avatar.url),
    )


class SessionRegistry:
    """
    In-memory map of session id -> BotConnection.

    Sessions live until logout or process shutdown; there is no expiry.
    Every mutation is a plain dict operation with no await between check
    and write, so concurrent requests on one event loop need no lock.
    """

    def __init__(self, connector: Connector, guild_module: GuildModule):
        """
        Initialize session registry.

        Args:
            connector: Coroutine function turning a bot token into a ready BotConnection
            guild_module: Used to build the guild list returned at login
        """
        self._connector = connector
        self._guilds = guild_module
        self._sessions: Dict[str, BotConnection] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    async def create(
        self, token: Optional[str]
    ) -> Tuple[str, UserProfile, List[LoginGuildSummary]]:
        """
        Log a bot in and register a new session.

        Args:
            token: Discord bot token

        Returns:
            (session_id, bot profile, guild summaries with best-effort invites)

        Raises:
            ValidationError: Token missing or blank
            AuthError: Token rejected or gateway not ready

        Logic:
        1. Open the connection (login + wait for ready)
        2. Build the profile and guild list, minting invites where allowed
        3. Issue a fresh session id and store the connection
        """
        if not token or not token.strip():
            raise ValidationError("Token required")

        connection = await self._connector(token.strip())

        try:
            profile = build_profile(connection.user)
            guilds = await self._guilds.summarize_with_invites(connection.client)
        except Exception:
            await connection.close()
            raise

        session_id = self._new_session_id()
        self._sessions[session_id] = connection

        logger.info(
            f"Session {mask_session_id(session_id)} created for {profile.username} "
            f"({len(guilds)} guilds, {len(self._sessions)} active)"
        )
        return session_id, profile, guilds

    def lookup(self, session_id: str) -> BotConnection:
        """
        Get the connection for a session.

        Raises:
            SessionExpired: Session never existed or was destroyed
        """
        connection = self._sessions.get(session_id)
        if connection is None:
            raise SessionExpired()
        return connection

    async def destroy(self, session_id: str) -> bool:
        """
        End a session and terminate its connection.

        Idempotent: unknown ids are ignored.

        Returns:
            True if a session was removed
        """
        connection = self._sessions.pop(session_id, None)
        if connection is None:
            return False

        try:
            await connection.close()
        except Exception as exc:
            logger.warning(f"Error closing session {mask_session_id(session_id)}: {exc}")

        logger.info(
            f"Session {mask_session_id(session_id)} destroyed ({len(self._sessions)} active)"
        )
        return True

    async def close_all(self) -> int:
        """
        Destroy every session. Called on application shutdown.

        Returns:
            Number of sessions closed
        """
        closed = 0
        for session_id in list(self._sessions):
            if await self.destroy(session_id):
                closed += 1
        return closed

    def _new_session_id(self) -> str:
        session_id = secrets.token_hex(16)
        while session_id in self._sessions:
            session_id = secrets.token_hex(16)
        return session_id

import asyncio
import logging
from typing import Optional

import aiohttp
import discord

from ...config.provider import DiscordConfig
from ..errors import AuthError

logger = logging.getLogger(__name__)


def build_intents() -> discord.Intents:
    """Gateway intents needed to list guilds, members and message content."""
    intents = discord.Intents.default()
    intents.guilds = True
    intents.members = True
    intents.guild_messages = True
    intents.message_content = True
    return intents


class BotConnection:
    """
    One authenticated discord.py client plus the task running its gateway.

    The connection is owned by exactly one session. Nothing watches the
    gateway for silent disconnects; a dead connection only shows up when
    an operation against it fails.
    """

    def __init__(self, client: discord.Client, gateway_task: Optional[asyncio.Task] = None):
        self.client = client
        self._gateway_task = gateway_task

    @property
    def user(self) -> Optional[discord.ClientUser]:
        return self.client.user

    @property
    def is_closed(self) -> bool:
        return self.client.is_closed()

    @classmethod
    async def open(cls, token: str, config: DiscordConfig) -> "BotConnection":
        """
        Log in with a bot token and wait for the gateway to become ready.

        Args:
            token: Discord bot token
            config: Discord client settings (ready timeout)

        Returns:
            A ready BotConnection

        Raises:
            AuthError: Token rejected or Discord unreachable; also when the gateway
                refuses (e.g. privileged intents not enabled) or is not ready in time
        """
        client = discord.Client(intents=build_intents())

        try:
            await client.login(token)
        except (
            discord.LoginFailure,
            discord.HTTPException,
            aiohttp.ClientError,
            OSError,
            asyncio.TimeoutError,
        ) as exc:
            # Unreachable Discord counts as a failed login
            logger.info(f"Discord login failed: {exc.__class__.__name__}")
            await client.close()
            raise AuthError() from exc

        gateway_task = asyncio.create_task(client.connect(reconnect=True), name="discord-gateway")
        ready_task = asyncio.create_task(client.wait_until_ready(), name="discord-ready")

        done, _ = await asyncio.wait(
            {gateway_task, ready_task},
            timeout=config.ready_timeout,
            return_when=asyncio.FIRST_COMPLETED,
        )

        if ready_task not in done:
            ready_task.cancel()
            await asyncio.gather(ready_task, return_exceptions=True)
            failure = None
            if gateway_task in done and not gateway_task.cancelled():
                failure = gateway_task.exception()

            if failure is not None:
                logger.info(f"Discord gateway failed before ready: {failure!r}")
            else:
                logger.info(f"Discord gateway not ready within {config.ready_timeout}s")

            await cls(client, gateway_task).close()
            raise AuthError() from failure

        logger.info(f"Discord client ready as {client.user} ({len(client.guilds)} guilds)")
        return cls(client, gateway_task)

    async def close(self) -> None:
        """Terminate the client and reap the gateway task."""
        if not self.is_closed:
            await self.client.close()

        task = self._gateway_task
        if task is None:
            return

        if not task.done():
            task.cancel()

        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as exc:
            logger.debug(f"Discord gateway task ended with {exc!r}")

import asyncio
import logging
from typing import Any, Dict, List, Optional

import discord

from ...config.provider import DiscordConfig
from ..api.models import ChannelSummary, GuildSummary, LoginGuildSummary, MessageSummary
from ..errors import ValidationError
from ..errors.remote import remote_call
from .resolve import resolve_guild, resolve_member, resolve_text_channel

logger = logging.getLogger(__name__)


def _guild_fields(guild: discord.Guild) -> Dict[str, Any]:
    return {
        "id": str(guild.id),
        "name": guild.name,
        "icon_url": str(guild.icon.url) if guild.icon else None,
        "member_count": guild.member_count,
    }


def summarize_message(message: discord.Message) -> MessageSummary:
    return MessageSummary(
        id=str(message.id),
        author=message.author.name,
        content=message.content,
        timestamp=int(message.created_at.timestamp() * 1000),
    )


def is_text_channel(channel: Any) -> bool:
    return channel.type == discord.ChannelType.text


class GuildModule:
    """
    Guild, channel and message operations against one client.

    Cache policy:
    - Guild lists come from the gateway cache (never re-fetched)
    - Channel lists and message history are re-fetched on every call
    """

    def __init__(self, config: DiscordConfig):
        self.config = config

    def list_guilds(self, client: discord.Client) -> List[GuildSummary]:
        """Summaries of every cached guild, without invites."""
        return [GuildSummary(**_guild_fields(guild)) for guild in client.guilds]

    async def summarize_with_invites(self, client: discord.Client) -> List[LoginGuildSummary]:
        """
        Summaries of every cached guild, each with a best-effort invite link.

        Invites are minted concurrently; a guild where no invite can be
        created simply gets ``invite_url=None``.
        """
        guilds = list(client.guilds)
        invite_urls = await asyncio.gather(
            *(self._try_create_invite(client, guild) for guild in guilds)
        )

        return [
            LoginGuildSummary(**_guild_fields(guild), invite_url=invite_url)
            for guild, invite_url in zip(guilds, invite_urls)
        ]

    async def list_sendable_channels(
        self, client: discord.Client, guild_id: str
    ) -> List[ChannelSummary]:
        """Text channels in a guild where the bot may send messages."""
        guild = await resolve_guild(client, guild_id)

        with remote_call("fetch channels"):
            channels = await guild.fetch_channels()

        me = await resolve_member(client, guild)

        return [
            ChannelSummary(id=str(channel.id), name=channel.name)
            for channel in channels
            if is_text_channel(channel) and channel.permissions_for(me).send_messages
        ]

    async def fetch_recent_messages(
        self, client: discord.Client, channel_id: str
    ) -> List[MessageSummary]:
        """
        Most recent messages of a text channel, oldest first.

        Raises:
            InvalidChannel: Unknown or non-text channel
            RemoteOperationError: History could not be read
        """
        channel = await resolve_text_channel(client, channel_id)
        limit = self.config.message_limit

        with remote_call("fetch messages"):
            messages = [message async for message in channel.history(limit=limit)]

        messages.sort(key=lambda message: (message.created_at, message.id))
        return [summarize_message(message) for message in messages[-limit:]]

    async def send_message(
        self, client: discord.Client, channel_id: str, content: Optional[str]
    ) -> str:
        """
        Post a message as the bot.

        Returns:
            The new message id

        Raises:
            ValidationError: Empty or whitespace-only content (checked before any remote call)
            InvalidChannel: Unknown or non-text channel
            RemoteOperationError: Discord rejected the message
        """
        if content is None or not content.strip():
            raise ValidationError("Message content required")

        channel = await resolve_text_channel(client, channel_id)

        with remote_call("send message"):
            message = await channel.send(content)

        logger.debug(f"Sent message {message.id} to channel {channel.id}")
        return str(message.id)

    async def _try_create_invite(
        self, client: discord.Client, guild: discord.Guild
    ) -> Optional[str]:
        try:
            channels = await guild.fetch_channels()
            me = await resolve_member(client, guild)

            invite_channel = next(
                (
                    channel
                    for channel in channels
                    if is_text_channel(channel)
                    and channel.permissions_for(me).create_instant_invite
                ),
                None,
            )
            if invite_channel is None:
                return None

            invite = await invite_channel.create_invite(
                max_age=self.config.invite_max_age,
                max_uses=self.config.invite_max_uses,
                unique=True,
            )
            return self.config.invite_url(invite.code)
        except Exception as exc:
            # Missing permissions are routine; the guild just has no invite
            logger.debug(f"No invite for guild {guild.id}: {exc}")
            return None

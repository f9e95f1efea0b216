"""Lookup helpers shared by the guild and profile modules."""

import discord

from ..errors import BotPanelError, InvalidChannel, ValidationError
from ..errors.remote import remote_call


def parse_snowflake(value: str, error: BotPanelError) -> int:
    """Parse a Discord id from a path segment, raising ``error`` when it is not one."""
    try:
        snowflake = int(value)
    except (TypeError, ValueError):
        raise error from None
    if snowflake <= 0:
        raise error
    return snowflake


async def resolve_guild(client: discord.Client, guild_id: str) -> discord.Guild:
    """Get a guild from the gateway cache, falling back to a REST fetch."""
    snowflake = parse_snowflake(guild_id, ValidationError("Invalid guild id"))

    guild = client.get_guild(snowflake)
    if guild is not None:
        return guild

    with remote_call("fetch guild"):
        return await client.fetch_guild(snowflake)


async def resolve_member(client: discord.Client, guild: discord.Guild) -> discord.Member:
    """Get the bot's own member object in a guild."""
    if guild.me is not None:
        return guild.me

    with remote_call("fetch bot member"):
        return await guild.fetch_member(client.user.id)


async def resolve_text_channel(client: discord.Client, channel_id: str) -> discord.TextChannel:
    """
    Get a guild text channel by id.

    Raises:
        InvalidChannel: Malformed id, unknown channel, or not a text channel
        RemoteOperationError: Any other Discord failure (e.g. missing access)
    """
    snowflake = parse_snowflake(channel_id, InvalidChannel())

    channel = client.get_channel(snowflake)
    if channel is None:
        with remote_call("fetch channel"):
            try:
                channel = await client.fetch_channel(snowflake)
            except discord.NotFound as exc:
                raise InvalidChannel() from exc

    if channel.type != discord.ChannelType.text:
        raise InvalidChannel()
    return channel

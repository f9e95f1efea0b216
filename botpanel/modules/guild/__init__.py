"""
Guild Module - Black Box Interface

Purpose: Read guild, channel and message state and post messages as the bot
Interface: GuildModule.list_guilds(), summarize_with_invites(),
           list_sendable_channels(), fetch_recent_messages(), send_message()
Hidden: Cache vs REST lookups, permission filtering, invite minting
"""

from .guild import GuildModule, summarize_message
from .resolve import parse_snowflake, resolve_guild, resolve_member, resolve_text_channel

__all__ = [
    "GuildModule",
    "parse_snowflake",
    "resolve_guild",
    "resolve_member",
    "resolve_text_channel",
    "summarize_message",
]

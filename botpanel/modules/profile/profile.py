import base64
import binascii
import logging
from typing import Optional, Union

import discord

from ..api.models import ActivityPayload, PresenceStatus
from ..errors import RemoteOperationError, ValidationError
from ..errors.remote import remote_call
from ..guild.resolve import resolve_guild, resolve_member

logger = logging.getLogger(__name__)


def resolve_activity_type(value: Optional[Union[int, str]]) -> discord.ActivityType:
    """
    Map a numeric (0-5) or named activity type onto discord.ActivityType.

    Defaults to playing when no type is given.
    """
    if value is None:
        return discord.ActivityType.playing

    try:
        if isinstance(value, str) and not value.strip().isdigit():
            activity_type = discord.ActivityType[value.strip().lower()]
        else:
            activity_type = discord.ActivityType(int(value))
    except (KeyError, ValueError):
        raise ValidationError(f"Invalid activity type: {value}") from None

    if activity_type is discord.ActivityType.unknown:
        raise ValidationError(f"Invalid activity type: {value}")
    return activity_type


def build_activity(payload: ActivityPayload) -> discord.BaseActivity:
    activity_type = resolve_activity_type(payload.type)

    if activity_type is discord.ActivityType.custom:
        return discord.CustomActivity(name=payload.state or payload.name)
    if activity_type is discord.ActivityType.streaming and payload.url:
        return discord.Streaming(name=payload.name, url=payload.url)
    return discord.Activity(
        type=activity_type, name=payload.name, state=payload.state, url=payload.url
    )


def decode_image(data: Optional[str]) -> bytes:
    """Decode a data URI (``data:image/png;base64,...``) or bare base64 image."""
    if not data or not data.strip():
        raise ValidationError("Avatar image required")

    encoded = data.strip()
    if encoded.startswith("data:"):
        _, _, encoded = encoded.partition(",")

    try:
        image = base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Invalid avatar image") from None

    if not image:
        raise ValidationError("Invalid avatar image")
    return image


class ProfileModule:
    """
    Mutations of the bot's own profile.

    Each operation is a single remote call; failures surface as
    RemoteOperationError carrying Discord's message. No retries.
    """

    async def set_presence(
        self,
        client: discord.Client,
        status: PresenceStatus,
        activity: Optional[ActivityPayload] = None,
    ) -> None:
        """Set online/idle/dnd/invisible status; no activity clears the current one."""
        discord_activity = build_activity(activity) if activity else None

        with remote_call("change presence"):
            await client.change_presence(
                status=discord.Status(status.value), activity=discord_activity
            )

    async def set_nickname(
        self, client: discord.Client, guild_id: str, nickname: Optional[str]
    ) -> None:
        """Set the bot's nickname in one guild. None or empty resets it."""
        guild = await resolve_guild(client, guild_id)
        me = await resolve_member(client, guild)

        with remote_call("change nickname"):
            await me.edit(nick=nickname or None)

    async def set_avatar(self, client: discord.Client, avatar_base64: Optional[str]) -> None:
        image = decode_image(avatar_base64)

        with remote_call("change avatar"):
            try:
                await client.user.edit(avatar=image)
            except ValueError as exc:
                # discord.py refuses unknown image formats before sending anything
                raise RemoteOperationError(str(exc)) from exc

    async def set_username(self, client: discord.Client, username: Optional[str]) -> None:
        if not username or not username.strip():
            raise ValidationError("Username required")

        with remote_call("change username"):
            await client.user.edit(username=username.strip())

    async def leave_guild(self, client: discord.Client, guild_id: str) -> None:
        guild = await resolve_guild(client, guild_id)

        with remote_call("leave guild"):
            await guild.leave()

        logger.info(f"Left guild {guild.id}")

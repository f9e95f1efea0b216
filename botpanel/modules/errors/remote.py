"""Translation of discord.py and transport failures into RemoteOperationError."""

import asyncio
import logging
from contextlib import contextmanager
from typing import Iterator

import aiohttp
import discord

from . import RemoteOperationError

logger = logging.getLogger(__name__)

# Failures below discord.py: dropped connections, DNS errors, request timeouts
TRANSPORT_ERRORS = (aiohttp.ClientError, OSError, asyncio.TimeoutError)


def describe_discord_error(exc: BaseException) -> str:
    """Return the message Discord attached to a failure, falling back to the exception text."""
    if isinstance(exc, discord.HTTPException) and exc.text:
        return exc.text
    return str(exc) or exc.__class__.__name__


@contextmanager
def remote_call(action: str) -> Iterator[None]:
    """
    Run one remote operation and surface any Discord rejection verbatim.

    Usage:
        with remote_call("leave guild"):
            await guild.leave()
    """
    try:
        yield
    except discord.DiscordException as exc:
        message = describe_discord_error(exc)
        logger.warning(f"Discord rejected {action}: {message}")
        raise RemoteOperationError(message) from exc
    except TRANSPORT_ERRORS as exc:
        message = describe_discord_error(exc)
        logger.warning(f"Could not reach Discord to {action}: {message}")
        raise RemoteOperationError(message) from exc

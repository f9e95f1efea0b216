"""
Session Module - Black Box Interface

Purpose: Own the mapping from opaque session id to a live Discord connection
Interface: SessionRegistry.create(), lookup(), destroy(), close_all()
Hidden: Id generation, login handshake, gateway task lifecycle

Replaceable with any session backend that can hold a live client object.
"""

from .connection import BotConnection, build_intents
from .registry import SessionRegistry, build_profile

__all__ = ["BotConnection", "SessionRegistry", "build_intents", "build_profile"]

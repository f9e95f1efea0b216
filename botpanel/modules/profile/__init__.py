"""
Profile Module - Black Box Interface

Purpose: Change how the bot appears (presence, nickname, avatar, username)
         and which guilds it belongs to
Interface: ProfileModule.set_presence(), set_nickname(), set_avatar(),
           set_username(), leave_guild()
Hidden: Activity type mapping, image decoding
"""

from .profile import ProfileModule, build_activity, decode_image, resolve_activity_type

__all__ = ["ProfileModule", "build_activity", "decode_image", "resolve_activity_type"]

"""
botpanel - Discord Bot Control Panel

An HTTP façade that logs a Discord bot in with its token and lets an
operator drive it from the browser.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- session: Session id -> live Discord connection
- guild: Guild, channel and message operations
- profile: Presence, nickname, avatar, username, leaving guilds
- api: Request/response models
- errors: Error taxonomy and HTTP status mapping
"""

__version__ = "1.0.0"

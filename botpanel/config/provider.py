"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import List, Optional, Protocol


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    debug: bool
    cors_origins: List[str]
    static_dir: Optional[str]
    log_level: str


@dataclass
class DiscordConfig:
    """Discord client configuration."""
    ready_timeout: float = 30.0
    message_limit: int = 50
    invite_max_age: int = 86400
    invite_max_uses: int = 0
    invite_base_url: str = "https://discord.gg/"

    def invite_url(self, code: str) -> str:
        """Build a shareable invite link from an invite code."""
        return f"{self.invite_base_url}{code}"


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...

    def get_discord_config(self) -> DiscordConfig:
        """Get Discord client configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        # PORT takes precedence so PaaS-style deployments work unchanged
        port = os.getenv("PORT") or os.getenv("API_PORT", "4000")

        return APIConfig(
            port=int(port),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=os.getenv("API_DEBUG", "false").lower() == "true",
            cors_origins=[
                origin.strip()
                for origin in os.getenv("CORS_ORIGINS", "*").split(",")
                if origin.strip()
            ],
            static_dir=os.getenv("STATIC_DIR", "public") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def get_discord_config(self) -> DiscordConfig:
        """Get Discord client configuration from environment variables."""
        return DiscordConfig(
            ready_timeout=float(os.getenv("DISCORD_READY_TIMEOUT", "30")),
            message_limit=int(os.getenv("DISCORD_MESSAGE_LIMIT", "50")),
            invite_max_age=int(os.getenv("DISCORD_INVITE_MAX_AGE", "86400")),
        )

"""
Relay configuration.

Every field can be overridden by the environment variable of the same name
(case-insensitive) or by a .env file in the working directory.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with defaults for development."""

    # Server
    # Port 3000 is the port the browser client has always targeted.
    relay_host: str = "0.0.0.0"
    relay_port: int = 3000

    # Cross-origin policy
    # Comma-separated list of allowed origins (empty uses default localhost list)
    allowed_origins: str = ""

    # Environment
    environment: str = "development"
    debug: bool = True

    # Relay limits
    relay_max_message_size: int = 64 * 1024  # 64 KB per inbound frame
    relay_max_username_length: int = 64
    # Frames buffered per recipient before deliveries to it start failing
    relay_outbox_size: int = 256
    # Upper bound for a single socket send; a stalled peer is closed after this
    relay_send_timeout: float = 5.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def allowed_origin_list(self) -> list[str]:
        """Configured origins as a list (empty when none are configured)."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    def validate_production_config(self) -> list[str]:
        """
        Check the configuration for settings that would make the relay unsafe
        or unable to deliver. An empty list means the relay may start cleanly.
        """
        problems: list[str] = []

        if self.environment == "production":
            if self.debug:
                problems.append("DEBUG is enabled; set DEBUG=false for production deployments")
            if not self.allowed_origin_list:
                problems.append("ALLOWED_ORIGINS is empty; browsers on any site could reach the relay")

        for name, value in (
            ("RELAY_OUTBOX_SIZE", self.relay_outbox_size),
            ("RELAY_SEND_TIMEOUT", self.relay_send_timeout),
        ):
            if value <= 0:
                problems.append(f"{name} is {value}; it needs to be greater than zero")

        return problems


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()

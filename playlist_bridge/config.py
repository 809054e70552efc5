"""Application settings loaded from environment variables."""

import logging
import os

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Bridge configuration. All values come from environment variables."""

    # Discord
    discord_bot_token: str = Field(default="")

    # Routing
    default_channel_id: str = Field(
        default="",
        validation_alias=AliasChoices("default_channel_id", "test_channel_id"),
    )
    city_channels: str = Field(default="")

    # Links
    frontend_base_url: str = Field(default="https://example.com")

    # Runtime
    environment: str = Field(default="production")

    # HTTP
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    allowed_origins: str = Field(default="")

    # Submission cache
    submission_ttl_seconds: float = Field(default=30 * 60)
    cache_sweep_interval_seconds: float = Field(default=60)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=_env_file(), env_file_encoding="utf-8", populate_by_name=True
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() == "development"

    def get_city_channels(self) -> dict[str, str]:
        """Parse CITY_CHANNELS (``city=id,city=id``) preserving definition order."""
        mapping: dict[str, str] = {}
        for pair in self.city_channels.split(","):
            if not pair.strip():
                continue
            city, sep, channel_id = pair.partition("=")
            if not sep or not city.strip() or not channel_id.strip():
                logger.warning("Ignoring malformed CITY_CHANNELS entry: %r", pair)
                continue
            mapping[city.strip()] = channel_id.strip()
        return mapping

    def get_allowed_origins(self) -> list[str]:
        """Parse ALLOWED_ORIGINS into a list of origins."""
        if not self.allowed_origins.strip():
            return []
        return [o.strip().rstrip("/") for o in self.allowed_origins.split(",") if o.strip()]


settings = Settings()

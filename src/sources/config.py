"""Configuration for the news source registry."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SourcesConfig(BaseSettings):
    """
    Settings for feed source seeding.

    Override via environment variables with the SOURCES_ prefix.
    Example: SOURCES_SEED_FILE=/etc/news/feeds.json
    """

    model_config = SettingsConfigDict(
        env_prefix="SOURCES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    seed_on_init: bool = Field(
        default=True,
        description="Load the seed file during init-db when news_sources is empty",
    )
    seed_file: Path | None = Field(
        default=None,
        description="Seed JSON to load instead of the bundled feed list",
    )
    default_fetch_interval_minutes: int = Field(
        default=60,
        ge=1,
        description="Fetch interval recorded for seeded sources that omit one",
    )

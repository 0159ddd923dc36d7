"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for loading twee stories.

    Values are read from environment variables and from a ``.env`` file
    in the working directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # File input
    twee_extensions: list[str] = ["tw", "twee"]  # without the leading dot
    file_encoding: str = "utf-8"


def configure_logging(settings: Settings | None = None) -> None:
    """Set up root logging for an application embedding the parser."""
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level.upper())

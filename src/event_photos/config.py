"""Application configuration."""

import os

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Settings for the bot, the guest API and Supabase.

    Values come from the process environment first, then from
    ``.env.<ENVIRONMENT>`` and ``.env``.
    """

    telegram_bot_token: str
    telegram_allowed_user_ids: str | None = None
    supabase_url: str
    supabase_service_key: str
    supabase_storage_bucket: str = "event-photos"
    frontend_url: str
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @field_validator("frontend_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def debug_errors(self) -> bool:
        """Whether user-facing failure messages include exception details."""
        return self.environment == "local"


def parse_allowed_user_ids(raw: str | None) -> set[int] | None:
    """Parse a comma separated list of organizer Telegram ids.

    ``None``, an empty string or ``*`` mean anyone may use the bot. Entries that
    are not plain numbers are skipped.
    """
    if raw is None or raw.strip() in {"", "*"}:
        return None
    ids = {int(chunk) for chunk in map(str.strip, raw.split(",")) if chunk.isdigit()}
    return ids or None

"""Runtime settings, read from the environment or a local ``.env`` file."""

from __future__ import annotations

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from session_engine.domain.models import Locale, TriggerOffset
from session_engine.services.triggers import offsets_from_minutes


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SESSION_ENGINE_",
        env_file=".env",
        extra="ignore",
    )

    default_locale: Locale = Locale.AR
    default_duration_minutes: int = Field(default=60, gt=0)
    join_window_minutes: int = Field(default=10, ge=0)
    starting_soon_minutes: int = Field(default=15, gt=0)
    reminder_offsets_minutes: list[int] = Field(default_factory=lambda: [1440, 60, 15])
    # IANA zone for the service clock; the host's local time when unset.
    timezone: str | None = None
    log_level: str = "INFO"

    @field_validator("reminder_offsets_minutes")
    @classmethod
    def _offsets_decreasing(cls, value: list[int]) -> list[int]:
        offsets_from_minutes(value, sort=False)
        return value

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                ZoneInfo(value)
            except ZoneInfoNotFoundError as exc:
                raise ValueError(f"unknown time zone: {value}") from exc
        return value

    @property
    def zone(self) -> ZoneInfo | None:
        return ZoneInfo(self.timezone) if self.timezone else None

    @property
    def trigger_offsets(self) -> list[TriggerOffset]:
        return offsets_from_minutes(self.reminder_offsets_minutes, sort=False)


@lru_cache
def get_settings() -> Settings:
    return Settings()

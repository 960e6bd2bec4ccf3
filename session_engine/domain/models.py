"""Domain models for the session countdown engine."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timezone
from enum import StrEnum
from typing import Any

from dateutil.parser import isoparse
from pydantic import BaseModel, ConfigDict, Field, field_validator

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR

DEFAULT_DURATION_MINUTES = 60


class LifecycleStatus(StrEnum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        """Position in the one-directional lifecycle."""
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = [
    LifecycleStatus.UPCOMING,
    LifecycleStatus.ACTIVE,
    LifecycleStatus.COMPLETED,
]


class Locale(StrEnum):
    AR = "ar"
    EN = "en"


class Urgency(StrEnum):
    DANGER = "danger"
    WARNING = "warning"
    INFO = "info"
    DEFAULT = "default"


class Channel(StrEnum):
    EMAIL = "email"
    IN_APP = "in_app"


class TimelineEntryType(StrEnum):
    SCHEDULED = "scheduled"
    STATUS_CHANGED = "status_changed"
    REMINDER_SENT = "reminder_sent"
    REMINDER_SKIPPED = "reminder_skipped"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _check_reminder_offsets(value: list[int] | None) -> list[int] | None:
    """Reject lead times that could not become distinct trigger offsets."""
    if value is None:
        return value
    if any(m <= 0 for m in value):
        raise ValueError("reminder offsets must be positive")
    if len(set(value)) != len(value):
        raise ValueError("reminder offsets must not repeat")
    return value


# ---------------------------------------------------------------------------
# Engine value objects
# ---------------------------------------------------------------------------


class SessionSchedule(BaseModel):
    """When a session starts and how long it runs.

    Malformed dates/times and non-positive durations are rejected here so the
    engine functions downstream never see them.
    """

    model_config = ConfigDict(frozen=True)

    start_date: date
    start_time: time
    duration_minutes: int = Field(gt=0)

    @classmethod
    def from_record(
        cls,
        record: dict[str, Any],
        default_duration: int = DEFAULT_DURATION_MINUTES,
    ) -> SessionSchedule:
        """Build a schedule from a stored session row.

        Accepts either a combined ISO ``start_time`` or separate ``date`` and
        ``time`` fields. Raises ``ValueError`` for malformed rows.
        """
        duration = record.get("duration")
        if duration is None:
            duration = default_duration

        if "date" in record:
            return cls(
                start_date=record["date"],
                start_time=record.get("time"),
                duration_minutes=duration,
            )

        raw = record.get("start_time")
        if not raw:
            raise ValueError("session record has no start time")
        start = raw if isinstance(raw, datetime) else isoparse(raw)
        return cls(
            start_date=start.date(),
            start_time=start.time(),
            duration_minutes=duration,
        )


class Delta(BaseModel):
    start_delta_ms: int
    end_delta_ms: int


class CountdownBreakdown(BaseModel):
    days: int = Field(ge=0)
    hours: int = Field(ge=0)
    minutes: int = Field(ge=0)
    seconds: int = Field(ge=0)
    total_milliseconds: int = Field(ge=0)

    @classmethod
    def zero(cls) -> CountdownBreakdown:
        return cls(days=0, hours=0, minutes=0, seconds=0, total_milliseconds=0)


class TriggerOffset(BaseModel):
    """A named lead time before session start."""

    model_config = ConfigDict(frozen=True)

    name: str
    duration_ms: int = Field(gt=0)

    @classmethod
    def minutes(cls, minutes: int, name: str | None = None) -> TriggerOffset:
        if name is None:
            if minutes % 60 == 0:
                name = f"{minutes // 60}h"
            else:
                name = f"{minutes}min"
        return cls(name=name, duration_ms=minutes * MS_PER_MINUTE)


class TriggerCrossing(BaseModel):
    offset: TriggerOffset
    crossed: bool


class CountdownSnapshot(BaseModel):
    """Everything derived from one schedule against one clock reading."""

    status: LifecycleStatus
    breakdown: CountdownBreakdown
    triggers: list[TriggerCrossing] = Field(default_factory=list)
    text: str


# ---------------------------------------------------------------------------
# Stored entities
# ---------------------------------------------------------------------------


class ReminderRule(BaseModel):
    offset: TriggerOffset
    channels: list[Channel] = Field(default_factory=lambda: [Channel.IN_APP])
    # Crossings older than this are skipped instead of delivered late.
    grace_ms: int | None = Field(default=None, gt=0)
    title: str = ""
    message: str = ""


class Session(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str
    schedule: SessionSchedule
    status: LifecycleStatus = LifecycleStatus.UPCOMING
    reminder_offsets_minutes: list[int] | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("reminder_offsets_minutes")
    @classmethod
    def _offsets_valid(cls, value: list[int] | None) -> list[int] | None:
        return _check_reminder_offsets(value)


class ReminderLedgerEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    session_id: str
    offset_name: str
    delivered: bool
    recorded_at: datetime


class TimelineEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    session_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class SessionCreate(BaseModel):
    title: str
    start_date: date
    start_time: time
    # Falls back to the configured default duration when omitted.
    duration_minutes: int | None = Field(default=None, gt=0)
    reminder_offsets_minutes: list[int] | None = None

    @field_validator("reminder_offsets_minutes")
    @classmethod
    def _offsets_valid(cls, value: list[int] | None) -> list[int] | None:
        return _check_reminder_offsets(value)


class CountdownView(BaseModel):
    session_id: str
    status: LifecycleStatus
    breakdown: CountdownBreakdown
    text: str
    compact_text: str
    crossed_triggers: list[str] = Field(default_factory=list)
    urgency: Urgency
    can_join: bool


class TickResult(BaseModel):
    time: datetime
    reminders_fired: list[str] = Field(default_factory=list)
    reminders_skipped: list[str] = Field(default_factory=list)
    status_changes: dict[str, LifecycleStatus] = Field(default_factory=dict)

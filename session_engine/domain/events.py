"""Domain events emitted as sessions move through their lifecycle."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from session_engine.domain.models import Channel, LifecycleStatus


class SessionScheduled(BaseModel):
    """Fired when a new Session is stored."""

    session_id: str


class SessionStatusChanged(BaseModel):
    """Fired when the status sweep moves a session forward."""

    session_id: str
    previous: LifecycleStatus
    current: LifecycleStatus
    changed_at: datetime


class ReminderDue(BaseModel):
    """Fired when a trigger offset is crossed and has not been sent yet."""

    session_id: str
    offset_name: str
    channels: list[Channel]
    title: str
    message: str
    due_at: datetime


class ReminderSkipped(BaseModel):
    """Fired when a crossing was observed too late to be worth sending."""

    session_id: str
    offset_name: str
    skipped_at: datetime
    late_by_ms: int

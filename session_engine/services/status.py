"""Service for deriving a session's lifecycle status and urgency."""

from __future__ import annotations

from datetime import datetime, timedelta

from session_engine.domain.models import (
    MS_PER_DAY,
    MS_PER_MINUTE,
    CountdownSnapshot,
    LifecycleStatus,
    SessionSchedule,
    Urgency,
)
from session_engine.services.clock import session_bounds, to_instant

STARTING_SOON_MS = 15 * MS_PER_MINUTE
JOIN_WINDOW_MINUTES = 10


def classify(start_delta_ms: int, end_delta_ms: int) -> LifecycleStatus:
    """Map start/end deltas to a lifecycle status.

    The start instant itself is already active; the end instant is already
    completed.
    """
    if start_delta_ms > 0:
        return LifecycleStatus.UPCOMING
    if end_delta_ms > 0:
        return LifecycleStatus.ACTIVE
    return LifecycleStatus.COMPLETED


def is_within_join_window(
    schedule: SessionSchedule,
    now: datetime,
    window_minutes: int = JOIN_WINDOW_MINUTES,
) -> bool:
    """True from *window_minutes* before start up to the start instant."""
    start, _ = session_bounds(schedule, tzinfo=now.tzinfo)
    return start - timedelta(minutes=window_minutes) <= to_instant(now) <= start


def urgency(
    snapshot: CountdownSnapshot, starting_soon_ms: int = STARTING_SOON_MS
) -> Urgency:
    if snapshot.status != LifecycleStatus.UPCOMING:
        return Urgency.DEFAULT
    remaining = snapshot.breakdown.total_milliseconds
    if remaining <= starting_soon_ms:
        return Urgency.DANGER
    if remaining < MS_PER_DAY:
        return Urgency.WARNING
    return Urgency.INFO

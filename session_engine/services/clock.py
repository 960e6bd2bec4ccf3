"""Time arithmetic between a session schedule and a clock reading."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from session_engine.domain.models import Delta, SessionSchedule

_ONE_MS = timedelta(milliseconds=1)


def session_start(schedule: SessionSchedule, tzinfo=None) -> datetime:
    """Combine the schedule's date and time into a local instant.

    The schedule carries wall-clock fields only; when *tzinfo* is given the
    start is read in that zone.
    """
    return datetime.combine(schedule.start_date, schedule.start_time, tzinfo=tzinfo)


def to_instant(moment: datetime) -> datetime:
    """Return *moment* as a UTC instant.

    Naive values are local times of the host, resolved with the UTC offset in
    force at that moment, so DST changes are accounted for.
    """
    return moment.astimezone(timezone.utc)


def session_bounds(schedule: SessionSchedule, tzinfo=None) -> tuple[datetime, datetime]:
    """UTC start and end instants of the session, read in *tzinfo*."""
    start = to_instant(session_start(schedule, tzinfo=tzinfo))
    return start, start + timedelta(minutes=schedule.duration_minutes)


def compute_delta(schedule: SessionSchedule, now: datetime) -> Delta:
    """Return signed millisecond distances from *now* to start and end.

    Positive means the instant is still ahead of *now*. The schedule is read
    in *now*'s zone and both sides are compared as UTC instants.
    """
    start, end = session_bounds(schedule, tzinfo=now.tzinfo)
    current = to_instant(now)
    return Delta(
        start_delta_ms=(start - current) // _ONE_MS,
        end_delta_ms=(end - current) // _ONE_MS,
    )

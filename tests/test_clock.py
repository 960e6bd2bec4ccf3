"""Tests for schedule parsing and millisecond delta arithmetic."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from session_engine.domain.models import SessionSchedule
from session_engine.services.clock import compute_delta, session_start
from session_engine.services.status import is_within_join_window

_SCHEDULE = SessionSchedule(
    start_date=date(2026, 6, 1), start_time=time(14, 0), duration_minutes=60
)


# ---------------------------------------------------------------------------
# compute_delta
# ---------------------------------------------------------------------------


def test_delta_before_start():
    delta = compute_delta(_SCHEDULE, datetime(2026, 6, 1, 12, 0))
    assert delta.start_delta_ms == 2 * 3_600_000
    assert delta.end_delta_ms == 3 * 3_600_000


def test_delta_is_negative_after_end():
    delta = compute_delta(_SCHEDULE, datetime(2026, 6, 1, 16, 0))
    assert delta.start_delta_ms == -2 * 3_600_000
    assert delta.end_delta_ms == -3_600_000


def test_delta_keeps_millisecond_precision():
    now = datetime(2026, 6, 1, 12, 0, 0, 1000)
    assert compute_delta(_SCHEDULE, now).start_delta_ms == 7_199_999


def test_aware_clock_reads_schedule_in_its_zone():
    now = datetime(2026, 6, 1, 13, 0, tzinfo=timezone.utc)
    assert session_start(_SCHEDULE, tzinfo=timezone.utc).tzinfo is timezone.utc
    assert compute_delta(_SCHEDULE, now).start_delta_ms == 3_600_000


def test_delta_at_exact_start_is_zero():
    delta = compute_delta(_SCHEDULE, datetime(2026, 6, 1, 14, 0))
    assert delta.start_delta_ms == 0
    assert delta.end_delta_ms == 3_600_000


_NEW_YORK = ZoneInfo("America/New_York")


def test_delta_across_spring_forward():
    """01:30 EST to 03:30 EDT on 8 March 2026 is one real hour."""
    schedule = SessionSchedule(
        start_date=date(2026, 3, 8), start_time=time(3, 30), duration_minutes=60
    )
    now = datetime(2026, 3, 8, 1, 30, tzinfo=_NEW_YORK)

    delta = compute_delta(schedule, now)

    assert delta.start_delta_ms == 3_600_000
    assert delta.end_delta_ms == 7_200_000


def test_delta_across_fall_back():
    """00:30 EDT to 02:30 EST on 1 November 2026 is three real hours."""
    schedule = SessionSchedule(
        start_date=date(2026, 11, 1), start_time=time(2, 30), duration_minutes=60
    )
    now = datetime(2026, 11, 1, 0, 30, tzinfo=_NEW_YORK)

    assert compute_delta(schedule, now).start_delta_ms == 3 * 3_600_000


def test_join_window_across_spring_forward():
    schedule = SessionSchedule(
        start_date=date(2026, 3, 8), start_time=time(3, 5), duration_minutes=60
    )
    # Seven real minutes before start, though the wall clock says 67.
    assert is_within_join_window(schedule, datetime(2026, 3, 8, 1, 58, tzinfo=_NEW_YORK))
    assert not is_within_join_window(
        schedule, datetime(2026, 3, 8, 1, 50, tzinfo=_NEW_YORK)
    )


# ---------------------------------------------------------------------------
# SessionSchedule validation
# ---------------------------------------------------------------------------


def test_schedule_rejects_non_positive_duration():
    with pytest.raises(ValidationError):
        SessionSchedule(start_date="2026-06-01", start_time="14:00", duration_minutes=0)


def test_schedule_rejects_malformed_date():
    with pytest.raises(ValidationError):
        SessionSchedule(start_date="2026-02-30", start_time="14:00", duration_minutes=60)


def test_schedule_is_immutable():
    with pytest.raises(ValidationError):
        _SCHEDULE.duration_minutes = 90


def test_from_record_with_separate_fields():
    schedule = SessionSchedule.from_record(
        {"date": "2026-06-01", "time": "14:30", "duration": 45}
    )
    assert schedule.start_date == date(2026, 6, 1)
    assert schedule.start_time == time(14, 30)
    assert schedule.duration_minutes == 45


def test_from_record_with_iso_start_uses_default_duration():
    schedule = SessionSchedule.from_record({"start_time": "2026-06-01T14:30:00"})
    assert schedule.start_time == time(14, 30)
    assert schedule.duration_minutes == 60


def test_from_record_rejects_garbage_start():
    with pytest.raises(ValueError):
        SessionSchedule.from_record({"start_time": "next tuesday-ish"})


def test_from_record_rejects_missing_start():
    with pytest.raises(ValueError):
        SessionSchedule.from_record({"duration": 60})


def test_from_record_rejects_missing_time_field():
    with pytest.raises(ValueError):
        SessionSchedule.from_record({"date": "2026-06-01", "duration": 60})


def test_from_record_uses_given_default_duration():
    schedule = SessionSchedule.from_record(
        {"date": "2026-06-01", "time": "09:00"}, default_duration=45
    )
    assert schedule.duration_minutes == 45

"""One-shot evaluation of a session against a single clock reading."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from session_engine.domain.models import (
    CountdownBreakdown,
    CountdownSnapshot,
    LifecycleStatus,
    Locale,
    SessionSchedule,
    TriggerOffset,
)
from session_engine.services.clock import compute_delta
from session_engine.services.countdown import remaining
from session_engine.services.formatting import format_countdown
from session_engine.services.status import classify
from session_engine.services.triggers import DEFAULT_OFFSETS, evaluate_triggers


def evaluate(
    schedule: SessionSchedule,
    now: datetime,
    offsets: Sequence[TriggerOffset] = DEFAULT_OFFSETS,
    locale: Locale = Locale.AR,
) -> CountdownSnapshot:
    """Derive status, countdown, triggers and text from one clock reading.

    Every component sees the same *now*, so the pieces cannot disagree across
    a second boundary.
    """
    delta = compute_delta(schedule, now)
    status = classify(delta.start_delta_ms, delta.end_delta_ms)
    if status == LifecycleStatus.UPCOMING:
        breakdown = remaining(delta.start_delta_ms)
    else:
        breakdown = CountdownBreakdown.zero()

    return CountdownSnapshot(
        status=status,
        breakdown=breakdown,
        triggers=evaluate_triggers(delta.start_delta_ms, offsets),
        text=format_countdown(breakdown, status, locale),
    )

"""Splitting a millisecond delta into display units."""

from __future__ import annotations

from session_engine.domain.models import (
    MS_PER_DAY,
    MS_PER_HOUR,
    MS_PER_MINUTE,
    MS_PER_SECOND,
    CountdownBreakdown,
)


def decompose(delta_ms: int) -> CountdownBreakdown:
    """Break a non-negative delta into days, hours, minutes and seconds.

    Every unit is floored, so a partial second never shows as a full one.
    """
    return CountdownBreakdown(
        days=delta_ms // MS_PER_DAY,
        hours=(delta_ms % MS_PER_DAY) // MS_PER_HOUR,
        minutes=(delta_ms % MS_PER_HOUR) // MS_PER_MINUTE,
        seconds=(delta_ms % MS_PER_MINUTE) // MS_PER_SECOND,
        total_milliseconds=delta_ms,
    )


def remaining(delta_ms: int) -> CountdownBreakdown:
    """Decompose *delta_ms*, reporting an elapsed delta as zero."""
    return decompose(max(0, delta_ms))

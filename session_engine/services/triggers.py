"""Service for evaluating which reminder lead times have been crossed."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from session_engine.domain.models import TriggerCrossing, TriggerOffset

DEFAULT_OFFSETS = [
    TriggerOffset.minutes(24 * 60),  # 24h
    TriggerOffset.minutes(60),  # 1h
    TriggerOffset.minutes(15),  # 15min
]


def evaluate_triggers(
    start_delta_ms: int, offsets: Iterable[TriggerOffset]
) -> list[TriggerCrossing]:
    """Return one crossing per offset, in the order given.

    An offset is crossed once the session is that close to starting, and only
    while the session has not started yet. Nothing is remembered between calls.
    """
    upcoming = start_delta_ms > 0
    return [
        TriggerCrossing(
            offset=offset,
            crossed=upcoming and start_delta_ms <= offset.duration_ms,
        )
        for offset in offsets
    ]


def crossed_names(crossings: Iterable[TriggerCrossing]) -> list[str]:
    return [c.offset.name for c in crossings if c.crossed]


def offsets_from_minutes(
    minutes: Iterable[int], sort: bool = True
) -> list[TriggerOffset]:
    """Build validated trigger offsets from lead times in minutes.

    With *sort* the lead times are arranged longest first; without it they
    must already be given in that order. Raises ``ValueError`` for
    non-positive or repeated lead times.
    """
    values = list(minutes)
    bad = [m for m in values if m <= 0]
    if bad:
        raise ValueError(f"trigger offsets must be positive: {bad}")
    if sort:
        values = sorted(values, reverse=True)
    offsets = [TriggerOffset.minutes(m) for m in values]
    validate_offsets(offsets)
    return offsets


def validate_offsets(offsets: Sequence[TriggerOffset]) -> None:
    """Raise ``ValueError`` unless offsets are uniquely named and strictly decreasing."""
    names = [o.name for o in offsets]
    if len(set(names)) != len(names):
        raise ValueError(f"duplicate trigger offset names: {names}")
    for longer, shorter in zip(offsets, offsets[1:]):
        if shorter.duration_ms >= longer.duration_ms:
            raise ValueError(
                f"trigger offsets must be strictly decreasing: "
                f"{longer.name} is followed by {shorter.name}"
            )

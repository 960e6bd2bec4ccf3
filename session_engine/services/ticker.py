"""One shared tick that drives every live countdown."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from session_engine.domain.models import (
    CountdownSnapshot,
    LifecycleStatus,
    Locale,
    SessionSchedule,
    TriggerOffset,
)
from session_engine.services.engine import evaluate
from session_engine.services.triggers import DEFAULT_OFFSETS

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[CountdownSnapshot], None]


@dataclass
class _Subscription:
    schedule: SessionSchedule
    callback: SnapshotCallback
    locale: Locale
    offsets: Sequence[TriggerOffset]


class CountdownTicker:
    """Multiplexes many countdown displays onto a single tick.

    Instead of each display polling on its own timer, the owner calls
    :meth:`tick` once per interval and every subscriber receives a snapshot
    computed from that same clock reading. A subscription receives its
    completed snapshot once and is then dropped.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[int, _Subscription] = {}
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._subscriptions)

    def subscribe(
        self,
        schedule: SessionSchedule,
        callback: SnapshotCallback,
        locale: Locale = Locale.AR,
        offsets: Sequence[TriggerOffset] = DEFAULT_OFFSETS,
    ) -> int:
        handle = next(self._ids)
        self._subscriptions[handle] = _Subscription(schedule, callback, locale, offsets)
        return handle

    def unsubscribe(self, handle: int) -> None:
        self._subscriptions.pop(handle, None)

    def tick(self, now: datetime) -> int:
        """Deliver a snapshot to every subscriber; return how many accepted it.

        A failing callback is logged and does not stop the others.
        """
        delivered = 0
        for handle, sub in list(self._subscriptions.items()):
            snapshot = evaluate(sub.schedule, now, sub.offsets, sub.locale)
            if snapshot.status == LifecycleStatus.COMPLETED:
                logger.debug("Countdown %d completed, dropping subscription", handle)
                self._subscriptions.pop(handle, None)
            try:
                sub.callback(snapshot)
            except Exception:
                logger.exception("Countdown subscriber %d failed", handle)
                continue
            delivered += 1
        return delivered

"""Service for moving stored sessions forward through their lifecycle."""

from __future__ import annotations

import logging
from datetime import datetime

from session_engine.domain.bus import EventBus
from session_engine.domain.events import SessionStatusChanged
from session_engine.domain.models import LifecycleStatus
from session_engine.repos.memory import SessionRepository
from session_engine.services.clock import compute_delta
from session_engine.services.status import classify

logger = logging.getLogger(__name__)


def sweep_statuses(
    session_repo: SessionRepository, bus: EventBus, now: datetime
) -> dict[str, LifecycleStatus]:
    """Classify every open session and publish forward transitions.

    A status that would move a session backwards (the clock went back) is
    ignored. Returns the new status of each session that changed.
    """
    changes: dict[str, LifecycleStatus] = {}
    for session in session_repo.list_open():
        delta = compute_delta(session.schedule, now)
        current = classify(delta.start_delta_ms, delta.end_delta_ms)

        if current.rank < session.status.rank:
            logger.warning(
                "Ignoring backwards status for session %s: %s -> %s at %s",
                session.id,
                session.status,
                current,
                now.isoformat(),
            )
            continue
        if current == session.status:
            continue

        previous = session.status
        session_repo.update_status(session.id, current)
        bus.publish(
            SessionStatusChanged(
                session_id=session.id,
                previous=previous,
                current=current,
                changed_at=now,
            )
        )
        changes[session.id] = current

    if changes:
        logger.info("Status sweep at %s moved %d sessions", now.isoformat(), len(changes))
    return changes

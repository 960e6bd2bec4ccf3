"""Domain event handlers — wired up at application startup."""

from __future__ import annotations

import logging

from session_engine.domain.bus import EventBus
from session_engine.domain.events import (
    ReminderDue,
    ReminderSkipped,
    SessionScheduled,
    SessionStatusChanged,
)
from session_engine.domain.models import TimelineEntry, TimelineEntryType
from session_engine.repos.memory import SessionRepository, TimelineRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        session_repo: SessionRepository,
        timeline_repo: TimelineRepository,
    ) -> None:
        self.bus = bus
        self.session_repo = session_repo
        self.timeline_repo = timeline_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(SessionScheduled, self.on_session_scheduled)
        self.bus.subscribe(SessionStatusChanged, self.on_status_changed)
        self.bus.subscribe(ReminderDue, self.on_reminder_due)
        self.bus.subscribe(ReminderSkipped, self.on_reminder_skipped)

    def dispose(self) -> None:
        self.bus.unsubscribe(SessionScheduled, self.on_session_scheduled)
        self.bus.unsubscribe(SessionStatusChanged, self.on_status_changed)
        self.bus.unsubscribe(ReminderDue, self.on_reminder_due)
        self.bus.unsubscribe(ReminderSkipped, self.on_reminder_skipped)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_session_scheduled(self, event: SessionScheduled) -> None:
        stored = self.session_repo.get(event.session_id)
        if stored is None:
            return

        schedule = stored.schedule
        self.timeline_repo.add(
            TimelineEntry(
                session_id=event.session_id,
                type=TimelineEntryType.SCHEDULED,
                payload={
                    "start_date": schedule.start_date.isoformat(),
                    "start_time": schedule.start_time.isoformat(),
                    "duration_minutes": schedule.duration_minutes,
                },
            )
        )

    def on_status_changed(self, event: SessionStatusChanged) -> None:
        if self.session_repo.get(event.session_id) is None:
            return

        logger.info(
            "Session %s moved %s -> %s", event.session_id, event.previous, event.current
        )
        self.timeline_repo.add(
            TimelineEntry(
                session_id=event.session_id,
                timestamp=event.changed_at,
                type=TimelineEntryType.STATUS_CHANGED,
                payload={"from": event.previous, "to": event.current},
            )
        )

    def on_reminder_due(self, event: ReminderDue) -> None:
        if self.session_repo.get(event.session_id) is None:
            return

        # Actual email / in-app delivery belongs to the notification service.
        logger.info(
            "Reminder %s for session %s via %s: %s",
            event.offset_name,
            event.session_id,
            ", ".join(event.channels),
            event.title,
        )
        self.timeline_repo.add(
            TimelineEntry(
                session_id=event.session_id,
                timestamp=event.due_at,
                type=TimelineEntryType.REMINDER_SENT,
                payload={
                    "offset": event.offset_name,
                    "channels": list(event.channels),
                    "message": event.message,
                },
            )
        )

    def on_reminder_skipped(self, event: ReminderSkipped) -> None:
        if self.session_repo.get(event.session_id) is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                session_id=event.session_id,
                timestamp=event.skipped_at,
                type=TimelineEntryType.REMINDER_SKIPPED,
                payload={"offset": event.offset_name, "late_by_ms": event.late_by_ms},
            )
        )

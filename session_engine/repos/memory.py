"""In-memory repositories for sessions, timelines and the reminder ledger."""

from __future__ import annotations

from datetime import datetime

from session_engine.domain.models import (
    LifecycleStatus,
    ReminderLedgerEntry,
    Session,
    TimelineEntry,
)


class SessionRepository:
    """Dict-backed store for Session instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Session] = {}

    def add(self, session: Session) -> None:
        self._store[session.id] = session

    def get(self, session_id: str) -> Session | None:
        return self._store.get(session_id)

    def list_all(self) -> list[Session]:
        return list(self._store.values())

    def list_open(self) -> list[Session]:
        """Sessions that have not been marked completed yet."""
        return [
            s for s in self._store.values() if s.status != LifecycleStatus.COMPLETED
        ]

    def update_status(self, session_id: str, status: LifecycleStatus) -> None:
        session = self._store.get(session_id)
        if session is not None:
            session.status = status


class TimelineRepository:
    """List-backed store for TimelineEntry instances."""

    def __init__(self) -> None:
        self._entries: list[TimelineEntry] = []

    def add(self, entry: TimelineEntry) -> None:
        self._entries.append(entry)

    def list_for_session(self, session_id: str) -> list[TimelineEntry]:
        """Entries for one session, in the order they were recorded."""
        return [e for e in self._entries if e.session_id == session_id]


class ReminderLedger:
    """Record of every (session, offset) pair already sent or skipped."""

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], ReminderLedgerEntry] = {}

    def has(self, session_id: str, offset_name: str) -> bool:
        return (session_id, offset_name) in self._entries

    def record(
        self, session_id: str, offset_name: str, delivered: bool, at: datetime
    ) -> ReminderLedgerEntry:
        entry = ReminderLedgerEntry(
            session_id=session_id,
            offset_name=offset_name,
            delivered=delivered,
            recorded_at=at,
        )
        self._entries.setdefault((session_id, offset_name), entry)
        return self._entries[(session_id, offset_name)]

    def list_for_session(self, session_id: str) -> list[ReminderLedgerEntry]:
        return [e for (sid, _), e in self._entries.items() if sid == session_id]

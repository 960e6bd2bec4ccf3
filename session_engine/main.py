"""FastAPI application — entry point for the session countdown service."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import Body, FastAPI, HTTPException

from session_engine.config import get_settings
from session_engine.domain.bus import EventBus
from session_engine.domain.events import SessionScheduled
from session_engine.domain.handlers import HandlerRegistry
from session_engine.domain.models import (
    MS_PER_MINUTE,
    CountdownView,
    Locale,
    Session,
    SessionCreate,
    SessionSchedule,
    TickResult,
    TimelineEntry,
)
from session_engine.log import configure_logging
from session_engine.repos.memory import (
    ReminderLedger,
    SessionRepository,
    TimelineRepository,
)
from session_engine.services.engine import evaluate
from session_engine.services.reminders import ReminderDispatcher
from session_engine.services.status import is_within_join_window, urgency
from session_engine.services.sweep import sweep_statuses
from session_engine.services.formatting import format_compact
from session_engine.services.triggers import crossed_names, offsets_from_minutes

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title="Session Countdown Service")

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
session_repo = SessionRepository()
timeline_repo = TimelineRepository()
reminder_ledger = ReminderLedger()

handler_registry = HandlerRegistry(
    bus=event_bus,
    session_repo=session_repo,
    timeline_repo=timeline_repo,
)
reminder_dispatcher = ReminderDispatcher(
    bus=event_bus,
    session_repo=session_repo,
    ledger=reminder_ledger,
    default_offsets_minutes=settings.reminder_offsets_minutes,
)


def _now() -> datetime:
    # Schedules are wall-clock times: read "now" in the configured zone, or as
    # naive host-local time so each instant gets its own DST offset.
    zone = settings.zone
    return datetime.now(zone) if zone is not None else datetime.now()


def _store(session: Session) -> Session:
    session_repo.add(session)
    event_bus.publish(SessionScheduled(session_id=session.id))
    return session


def _get_session(session_id: str) -> Session:
    session = session_repo.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


# ── Routes ────────────────────────────────────────────────────────────


@app.post("/sessions", response_model=Session)
def create_session(payload: SessionCreate) -> Session:
    """Store a session and start tracking its countdown."""
    session = Session(
        title=payload.title,
        schedule=SessionSchedule(
            start_date=payload.start_date,
            start_time=payload.start_time,
            duration_minutes=payload.duration_minutes
            or settings.default_duration_minutes,
        ),
        reminder_offsets_minutes=payload.reminder_offsets_minutes,
    )
    return _store(session)


@app.post("/sessions/from-record", response_model=Session)
def import_session(record: dict[str, Any] = Body(...)) -> Session:
    """Store a session from a raw persistence-layer row."""
    try:
        session = Session(
            title=record.get("title") or "Session",
            schedule=SessionSchedule.from_record(
                record, default_duration=settings.default_duration_minutes
            ),
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _store(session)


@app.get("/sessions", response_model=list[Session])
def list_sessions() -> list[Session]:
    return session_repo.list_all()


@app.get("/sessions/{session_id}", response_model=Session)
def get_session(session_id: str) -> Session:
    return _get_session(session_id)


@app.get("/sessions/{session_id}/countdown", response_model=CountdownView)
def get_countdown(
    session_id: str, now: datetime | None = None, locale: Locale | None = None
) -> CountdownView:
    """Evaluate a session against *now* (defaults to the current local time)."""
    session = _get_session(session_id)
    current_time = now or _now()
    if session.reminder_offsets_minutes:
        offsets = offsets_from_minutes(session.reminder_offsets_minutes)
    else:
        offsets = settings.trigger_offsets
    soon_ms = settings.starting_soon_minutes * MS_PER_MINUTE
    snapshot = evaluate(
        session.schedule,
        current_time,
        offsets=offsets,
        locale=locale or settings.default_locale,
    )
    return CountdownView(
        session_id=session.id,
        status=snapshot.status,
        breakdown=snapshot.breakdown,
        text=snapshot.text,
        compact_text=format_compact(
            snapshot.breakdown,
            snapshot.status,
            locale or settings.default_locale,
            soon_ms,
        ),
        crossed_triggers=crossed_names(snapshot.triggers),
        urgency=urgency(snapshot, soon_ms),
        can_join=is_within_join_window(
            session.schedule, current_time, settings.join_window_minutes
        ),
    )


@app.get("/sessions/{session_id}/timeline", response_model=list[TimelineEntry])
def get_timeline(session_id: str) -> list[TimelineEntry]:
    _get_session(session_id)
    return timeline_repo.list_for_session(session_id)


@app.post("/tick", response_model=TickResult)
def tick(now: datetime | None = None) -> TickResult:
    """Advance simulated time: update statuses and fire due reminders.

    Pass *now* as a query param to control the simulated clock.
    """
    current_time = now or _now()
    status_changes = sweep_statuses(session_repo, event_bus, current_time)
    fired, skipped = reminder_dispatcher.run(current_time)
    return TickResult(
        time=current_time,
        reminders_fired=fired,
        reminders_skipped=skipped,
        status_changes=status_changes,
    )

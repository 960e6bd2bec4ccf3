"""End-to-end evaluation scenarios and the shared countdown ticker."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from session_engine.domain.models import (
    CountdownBreakdown,
    LifecycleStatus,
    Locale,
    SessionSchedule,
)
from session_engine.services.engine import evaluate
from session_engine.services.triggers import crossed_names
from session_engine.services.ticker import CountdownTicker

_T = datetime(2026, 6, 1, 12, 0)


def _schedule_at(start: datetime, duration: int = 60) -> SessionSchedule:
    return SessionSchedule(
        start_date=start.date(), start_time=start.time(), duration_minutes=duration
    )


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


def test_starts_in_two_hours():
    schedule = _schedule_at(_T + timedelta(hours=2))
    snapshot = evaluate(schedule, _T + timedelta(milliseconds=1), locale=Locale.EN)

    assert snapshot.status == LifecycleStatus.UPCOMING
    b = snapshot.breakdown
    assert (b.days, b.hours, b.minutes, b.seconds) == (0, 1, 59, 59)
    assert snapshot.text == "Starts in 1 hour 59 minutes 59 seconds"
    assert "day" not in snapshot.text
    assert crossed_names(snapshot.triggers) == ["24h"]


def test_started_ten_minutes_ago():
    schedule = _schedule_at(_T - timedelta(minutes=10))
    snapshot = evaluate(schedule, _T, locale=Locale.EN)

    assert snapshot.status == LifecycleStatus.ACTIVE
    assert snapshot.breakdown == CountdownBreakdown.zero()
    assert snapshot.text == "Session in progress"
    assert crossed_names(snapshot.triggers) == []


def test_started_ninety_minutes_ago():
    schedule = _schedule_at(_T - timedelta(minutes=90))
    snapshot = evaluate(schedule, _T, locale=Locale.AR)

    assert snapshot.status == LifecycleStatus.COMPLETED
    assert snapshot.text == "انتهت الحصة"


def test_default_locale_is_arabic():
    schedule = _schedule_at(_T + timedelta(minutes=5))
    assert evaluate(schedule, _T).text == "تبدأ خلال ٥ دقائق ٠ ثوانٍ"


# ---------------------------------------------------------------------------
# CountdownTicker
# ---------------------------------------------------------------------------


def test_ticker_fans_out_one_clock_reading():
    ticker = CountdownTicker()
    seen: dict[str, list] = {"a": [], "b": []}
    ticker.subscribe(_schedule_at(_T + timedelta(hours=1)), seen["a"].append)
    ticker.subscribe(_schedule_at(_T + timedelta(days=1)), seen["b"].append, locale=Locale.EN)

    assert ticker.tick(_T) == 2
    assert seen["a"][0].breakdown.hours == 1
    assert seen["b"][0].breakdown.days == 1
    assert seen["b"][0].text.startswith("Starts in")


def test_ticker_drops_completed_subscription_after_one_delivery():
    ticker = CountdownTicker()
    snapshots = []
    ticker.subscribe(_schedule_at(_T - timedelta(hours=2)), snapshots.append)

    ticker.tick(_T)
    ticker.tick(_T + timedelta(seconds=1))

    assert len(snapshots) == 1
    assert snapshots[0].status == LifecycleStatus.COMPLETED
    assert len(ticker) == 0


def test_ticker_unsubscribe():
    ticker = CountdownTicker()
    snapshots = []
    handle = ticker.subscribe(_schedule_at(_T + timedelta(hours=1)), snapshots.append)
    ticker.unsubscribe(handle)

    assert ticker.tick(_T) == 0
    assert snapshots == []


def test_ticker_follows_lifecycle():
    ticker = CountdownTicker()
    statuses = []
    ticker.subscribe(
        SessionSchedule(start_date=date(2026, 6, 1), start_time=time(12, 0), duration_minutes=30),
        lambda s: statuses.append(s.status),
    )
    for minutes in (-1, 0, 29, 30, 31):
        ticker.tick(_T + timedelta(minutes=minutes))

    assert statuses == [
        LifecycleStatus.UPCOMING,
        LifecycleStatus.ACTIVE,
        LifecycleStatus.ACTIVE,
        LifecycleStatus.COMPLETED,
    ]


def test_failing_subscriber_does_not_block_others():
    ticker = CountdownTicker()
    snapshots = []

    def broken(snapshot):
        raise RuntimeError("display went away")

    ticker.subscribe(_schedule_at(_T + timedelta(hours=1)), broken)
    ticker.subscribe(_schedule_at(_T + timedelta(hours=2)), snapshots.append)

    assert ticker.tick(_T) == 1
    assert len(snapshots) == 1
    assert len(ticker) == 2


def test_completed_subscription_dropped_even_if_callback_fails():
    ticker = CountdownTicker()

    def broken(snapshot):
        raise RuntimeError("display went away")

    ticker.subscribe(_schedule_at(_T - timedelta(hours=2)), broken)
    ticker.tick(_T)

    assert len(ticker) == 0

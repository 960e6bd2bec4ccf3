"""Service for rendering countdowns as Arabic or English text."""

from __future__ import annotations

from session_engine.domain.models import CountdownBreakdown, LifecycleStatus, Locale
from session_engine.services.status import STARTING_SOON_MS

_ARABIC_ZERO = 0x0660

# Singular/plural pairs only; full Arabic number agreement is not attempted.
_UNITS = {
    Locale.EN: [("day", "days"), ("hour", "hours"), ("minute", "minutes"), ("second", "seconds")],
    Locale.AR: [("يوم", "أيام"), ("ساعة", "ساعات"), ("دقيقة", "دقائق"), ("ثانية", "ثوانٍ")],
}

_PHRASES = {
    Locale.EN: {
        LifecycleStatus.UPCOMING: "Starts in",
        LifecycleStatus.ACTIVE: "Session in progress",
        LifecycleStatus.COMPLETED: "Session ended",
    },
    Locale.AR: {
        LifecycleStatus.UPCOMING: "تبدأ خلال",
        LifecycleStatus.ACTIVE: "الحصة جارية الآن",
        LifecycleStatus.COMPLETED: "انتهت الحصة",
    },
}


_COMPACT = {
    Locale.EN: {
        "soon": "Starts in {m}:{s:02d}",
        "today": "Today - {h}h {m}m",
        "tomorrow": "Tomorrow",
        "days": "In {d} {noun}",
    },
    Locale.AR: {
        "soon": "تبدأ خلال {m}:{s:02d}",
        "today": "اليوم - {h}س {m}د",
        "tomorrow": "غداً",
        "days": "خلال {d} {noun}",
    },
}


def to_arabic_numerals(value: int | str) -> str:
    """Replace every Western digit with its Arabic-Indic counterpart."""
    return "".join(
        chr(_ARABIC_ZERO + int(ch)) if "0" <= ch <= "9" else ch for ch in str(value)
    )


def visible_units(breakdown: CountdownBreakdown) -> list[tuple[int, int]]:
    """Return ``(unit_index, value)`` pairs from the first non-zero unit down.

    Seconds are always included, so a sub-second countdown still renders.
    """
    values = [breakdown.days, breakdown.hours, breakdown.minutes, breakdown.seconds]
    first = next((i for i, v in enumerate(values) if v), len(values) - 1)
    return [(i, values[i]) for i in range(first, len(values))]


def _render_unit(value: int, unit_index: int, locale: Locale) -> str:
    singular, plural = _UNITS[locale][unit_index]
    noun = singular if value == 1 else plural
    number = to_arabic_numerals(value) if locale == Locale.AR else str(value)
    return f"{number} {noun}"


def format_countdown(
    breakdown: CountdownBreakdown,
    status: LifecycleStatus,
    locale: Locale = Locale.AR,
) -> str:
    locale = Locale(locale)
    phrase = _PHRASES[locale][status]
    if status != LifecycleStatus.UPCOMING:
        return phrase

    parts = [_render_unit(v, i, locale) for i, v in visible_units(breakdown)]
    return f"{phrase} {' '.join(parts)}"


def format_compact(
    breakdown: CountdownBreakdown,
    status: LifecycleStatus,
    locale: Locale = Locale.AR,
    starting_soon_ms: int = STARTING_SOON_MS,
) -> str:
    """Short badge text for lists and dashboards.

    ``M:SS`` once the session is starting soon, hours and minutes later the
    same day, then "tomorrow" or a day count.
    """
    locale = Locale(locale)
    if status != LifecycleStatus.UPCOMING:
        return _PHRASES[locale][status]

    templates = _COMPACT[locale]
    if breakdown.total_milliseconds <= starting_soon_ms:
        text = templates["soon"].format(m=breakdown.minutes, s=breakdown.seconds)
    elif breakdown.days == 0:
        text = templates["today"].format(h=breakdown.hours, m=breakdown.minutes)
    elif breakdown.days == 1:
        text = templates["tomorrow"]
    else:
        _, noun = _UNITS[locale][0]
        text = templates["days"].format(d=breakdown.days, noun=noun)
    return to_arabic_numerals(text) if locale == Locale.AR else text

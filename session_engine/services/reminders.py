"""Service for turning crossed trigger offsets into reminder events."""

from __future__ import annotations

import logging
from datetime import datetime

from session_engine.domain.bus import EventBus
from session_engine.domain.events import ReminderDue, ReminderSkipped
from session_engine.domain.models import (
    MS_PER_MINUTE,
    Channel,
    ReminderRule,
    Session,
)
from session_engine.repos.memory import ReminderLedger, SessionRepository
from session_engine.services.clock import compute_delta
from session_engine.services.triggers import evaluate_triggers, offsets_from_minutes

logger = logging.getLogger(__name__)

DEFAULT_OFFSETS_MINUTES = [1440, 60, 15]  # 24 hours, 1 hour, 15 minutes

_KNOWN_RULES = {
    1440: dict(
        channels=[Channel.EMAIL, Channel.IN_APP],
        grace_ms=30 * MS_PER_MINUTE,
        title="تذكير: حصتك غداً",
        message="لديك حصة مجدولة غداً في {time}",
    ),
    60: dict(
        channels=[Channel.EMAIL, Channel.IN_APP],
        grace_ms=15 * MS_PER_MINUTE,
        title="تذكير: حصتك خلال ساعة",
        message="حصتك ستبدأ خلال ساعة واحدة في {time}",
    ),
    15: dict(
        channels=[Channel.IN_APP],
        grace_ms=5 * MS_PER_MINUTE,
        title="حان وقت الحصة!",
        message="حصتك تبدأ خلال 15 دقيقة. يمكنك الانضمام الآن!",
    ),
}


def build_rules(offsets_minutes: list[int]) -> list[ReminderRule]:
    """Build reminder rules for the given lead times, longest first.

    Lead times without a dedicated template get an in-app reminder that is
    delivered however late it is observed.
    """
    rules: list[ReminderRule] = []
    for offset in offsets_from_minutes(offsets_minutes):
        template = _KNOWN_RULES.get(offset.duration_ms // MS_PER_MINUTE, {})
        rules.append(
            ReminderRule(
                offset=offset,
                channels=template.get("channels", [Channel.IN_APP]),
                grace_ms=template.get("grace_ms"),
                title=template.get("title", "تذكير بالحصة"),
                message=template.get("message", "لديك حصة في {time}"),
            )
        )
    return rules


class ReminderDispatcher:
    """Polls stored sessions and publishes each crossed reminder at most once.

    The engine is stateless, so the ledger is the only memory of what has
    already gone out.
    """

    def __init__(
        self,
        bus: EventBus,
        session_repo: SessionRepository,
        ledger: ReminderLedger,
        default_offsets_minutes: list[int] | None = None,
    ) -> None:
        self.bus = bus
        self.session_repo = session_repo
        self.ledger = ledger
        self.default_offsets_minutes = default_offsets_minutes or DEFAULT_OFFSETS_MINUTES

    def rules_for(self, session: Session) -> list[ReminderRule]:
        return build_rules(
            session.reminder_offsets_minutes or self.default_offsets_minutes
        )

    def run(self, now: datetime) -> tuple[list[str], list[str]]:
        """Dispatch due reminders; return ``(fired, skipped)`` ledger keys."""
        fired: list[str] = []
        skipped: list[str] = []

        for session in self.session_repo.list_open():
            rules = self.rules_for(session)
            delta = compute_delta(session.schedule, now)
            crossings = evaluate_triggers(
                delta.start_delta_ms, [r.offset for r in rules]
            )

            for rule, crossing in zip(rules, crossings):
                name = rule.offset.name
                if not crossing.crossed or self.ledger.has(session.id, name):
                    continue

                key = f"{session.id}:{name}"
                late_by = rule.offset.duration_ms - delta.start_delta_ms
                if rule.grace_ms is not None and late_by > rule.grace_ms:
                    self.ledger.record(session.id, name, delivered=False, at=now)
                    logger.info(
                        "Skipping %s reminder for session %s, %d ms late",
                        name,
                        session.id,
                        late_by,
                    )
                    self.bus.publish(
                        ReminderSkipped(
                            session_id=session.id,
                            offset_name=name,
                            skipped_at=now,
                            late_by_ms=late_by,
                        )
                    )
                    skipped.append(key)
                    continue

                self.ledger.record(session.id, name, delivered=True, at=now)
                time_label = session.schedule.start_time.strftime("%H:%M")
                self.bus.publish(
                    ReminderDue(
                        session_id=session.id,
                        offset_name=name,
                        channels=rule.channels,
                        title=rule.title,
                        message=rule.message.format(time=time_label),
                        due_at=now,
                    )
                )
                fired.append(key)

        if fired or skipped:
            logger.info(
                "Reminder run at %s: %d fired, %d skipped",
                now.isoformat(),
                len(fired),
                len(skipped),
            )
        return fired, skipped

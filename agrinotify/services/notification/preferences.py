"""Per-farmer notification preferences and the send/suppress decision."""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from agrinotify.common.clock import LocalClock
from agrinotify.common.logging import logger
from agrinotify.services.notification.models import NOTIFICATION_LEVELS, FarmerPreferences


DEFAULT_PREFERENCES = {
    "sms_enabled": True,
    "push_enabled": True,
    "quiet_hours_enabled": True,
    "quiet_hours_start": "22:00",
    "quiet_hours_end": "06:00",
    "notification_level": "ALL",
    "order_updates": True,
    "payment_alerts": True,
    "educational_content": True,
}
UPDATABLE_FIELDS = frozenset(DEFAULT_PREFERENCES)

CATEGORY_TOGGLES = {
    "order": "order_updates",
    "payment": "payment_alerts",
    "educational": "educational_content",
}


@dataclass(frozen=True)
class ChannelDecision:
    sms: bool
    push: bool


SUPPRESSED = ChannelDecision(sms=False, push=False)


def parse_hhmm(value: str) -> int:
    """`"22:30"` -> minutes since midnight; raises ValueError on bad input."""

    hours, _, minutes = value.partition(":")
    h, m = int(hours), int(minutes)
    if not (0 <= h < 24 and 0 <= m < 60):
        raise ValueError(f"invalid time of day: {value!r}")
    return h * 60 + m


def in_quiet_window(start: str, end: str, now_minutes: int) -> bool:
    """Whether `now_minutes` falls inside `[start, end)`, wrapping past midnight when start > end."""

    start_minutes = parse_hhmm(start)
    end_minutes = parse_hhmm(end)
    if start_minutes > end_minutes:
        return now_minutes >= start_minutes or now_minutes < end_minutes
    return start_minutes <= now_minutes < end_minutes


class PreferencesRepository:
    """Reads, lazily creates and updates `FarmerPreferences` rows."""

    def __init__(self, session_factory, clock: LocalClock | None = None) -> None:
        self.session_factory = session_factory
        self.clock = clock or LocalClock()

    def get_preferences(self, farmer_id: str) -> FarmerPreferences:
        """Return preferences, inserting the defaults on first read."""

        with self.session_factory() as db:
            prefs = db.execute(
                select(FarmerPreferences).where(FarmerPreferences.farmer_id == farmer_id)
            ).scalar_one_or_none()
            if prefs is not None:
                return prefs
            prefs = FarmerPreferences(farmer_id=farmer_id, **DEFAULT_PREFERENCES)
            db.add(prefs)
            try:
                db.commit()
            except IntegrityError:
                # Another request created the row between our read and insert.
                db.rollback()
                return db.execute(
                    select(FarmerPreferences).where(FarmerPreferences.farmer_id == farmer_id)
                ).scalar_one()
            logger.info("preferences_created farmer_id=%s", farmer_id)
            return prefs

    def update_preferences(self, farmer_id: str, **changes) -> FarmerPreferences:
        """Upsert preferences; fields passed as None keep their current value."""

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"unknown preference fields: {sorted(unknown)}")
        changes = {key: value for key, value in changes.items() if value is not None}
        level = changes.get("notification_level")
        if level is not None and level not in NOTIFICATION_LEVELS:
            raise ValueError(f"notification_level must be one of {NOTIFICATION_LEVELS}")
        for key in ("quiet_hours_start", "quiet_hours_end"):
            if key in changes:
                parse_hhmm(changes[key])

        self.get_preferences(farmer_id)
        with self.session_factory() as db:
            prefs = db.execute(
                select(FarmerPreferences).where(FarmerPreferences.farmer_id == farmer_id)
            ).scalar_one()
            for key, value in changes.items():
                setattr(prefs, key, value)
            db.commit()
            db.refresh(prefs)
            logger.info("preferences_updated farmer_id=%s fields=%s", farmer_id, sorted(changes))
            return prefs

    def quiet_hours_active(self, prefs: FarmerPreferences) -> bool:
        if not prefs.quiet_hours_enabled:
            return False
        return in_quiet_window(prefs.quiet_hours_start, prefs.quiet_hours_end, self.clock.minutes_since_midnight())

    def is_quiet_hours_active(self, farmer_id: str) -> bool:
        return self.quiet_hours_active(self.get_preferences(farmer_id))

    def should_send(self, farmer_id: str, is_critical: bool, category: str) -> ChannelDecision:
        """Decide which delivery channels a notification may use.

        SMS is reserved for critical notifications. Quiet hours only hold back
        push, and critical pushes go out regardless.
        """

        prefs = self.get_preferences(farmer_id)
        if prefs.notification_level == "MUTE":
            return SUPPRESSED
        if prefs.notification_level == "CRITICAL" and not is_critical:
            return SUPPRESSED

        toggle = CATEGORY_TOGGLES.get(category)
        category_allowed = getattr(prefs, toggle) if toggle else True
        if not category_allowed and not is_critical:
            return SUPPRESSED

        quiet = self.quiet_hours_active(prefs)
        return ChannelDecision(
            sms=prefs.sms_enabled and is_critical,
            push=prefs.push_enabled and (not quiet or is_critical),
        )

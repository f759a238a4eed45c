"""Farmer-local wall clock used for quiet hours and the daily SMS quota."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo


class LocalClock:
    """Current time in one configured IANA zone.

    `now_fn` returns an aware UTC datetime and exists so tests can pin time.
    """

    def __init__(self, tz_name: str = "Asia/Kolkata", now_fn=None) -> None:
        self.tz = ZoneInfo(tz_name)
        self._now_fn = now_fn or (lambda: datetime.now(timezone.utc))

    def utc_now(self) -> datetime:
        return self._now_fn().astimezone(timezone.utc)

    def local_now(self) -> datetime:
        return self._now_fn().astimezone(self.tz)

    def minutes_since_midnight(self) -> int:
        local = self.local_now()
        return local.hour * 60 + local.minute

    def local_midnight_utc(self) -> datetime:
        """Start of the current local day, expressed in UTC for storage queries."""

        local = self.local_now()
        return local.replace(hour=0, minute=0, second=0, microsecond=0).astimezone(timezone.utc)


class FixedClock(LocalClock):
    """Clock pinned to one instant; handy for scripts and tests."""

    def __init__(self, instant: datetime, tz_name: str = "Asia/Kolkata") -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=ZoneInfo(tz_name))
        self.instant = instant
        super().__init__(tz_name, now_fn=lambda: self.instant)

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=self.tz)
        self.instant = instant

"""
Wall clock for scheduling. Tenant-local time is UTC shifted by a fixed offset in minutes
(no tz database; every tenant is assumed to sit in one fixed offset, UTC+3 by default).
Inject a Clock via get_clock so tests can freeze time.
"""
from datetime import date, datetime, timedelta, timezone


class Clock:
    def now(self) -> datetime:
        """Current time as timezone-aware UTC."""
        return datetime.now(timezone.utc)


class FrozenClock(Clock):
    """Clock pinned to a given instant (naive values are treated as UTC)."""

    def __init__(self, at: datetime) -> None:
        self.at = at if at.tzinfo else at.replace(tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.at

    def advance(self, **kwargs) -> None:
        self.at = self.at + timedelta(**kwargs)


def utc_to_local(moment: datetime, offset_minutes: int) -> datetime:
    """Aware instant to naive tenant-local wall time."""
    return (moment.astimezone(timezone.utc) + timedelta(minutes=offset_minutes)).replace(tzinfo=None)


def local_now(clock: Clock, offset_minutes: int) -> datetime:
    """Tenant-local wall time as a naive datetime."""
    return utc_to_local(clock.now(), offset_minutes)


def local_today(clock: Clock, offset_minutes: int) -> date:
    return local_now(clock, offset_minutes).date()


def minute_of_day(dt: datetime) -> int:
    return dt.hour * 60 + dt.minute


def local_to_utc(day: date, hhmm: str, offset_minutes: int) -> datetime:
    """Tenant-local date + HH:MM to an aware UTC datetime."""
    hour, minute = (int(p) for p in hhmm.split(":")[:2])
    naive = datetime(day.year, day.month, day.day, hour, minute)
    return (naive - timedelta(minutes=offset_minutes)).replace(tzinfo=timezone.utc)


_clock = Clock()


def get_clock() -> Clock:
    """FastAPI dependency; override in tests with a FrozenClock."""
    return _clock

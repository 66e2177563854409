from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_TIME_ZONE, MINUTES_PER_DAY


def parse_iso_datetime(value: str, zone: ZoneInfo) -> datetime:
    """Parse an ISO-8601 string; naive values are taken as wall clock in `zone`."""
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=zone)
    return dt.astimezone(zone)


def minutes_of_day(value: time | datetime) -> int:
    return value.hour * 60 + value.minute


def time_from_minutes(minutes: int) -> time:
    minutes %= MINUTES_PER_DAY
    return time(hour=minutes // 60, minute=minutes % 60)


def at_minutes(day: date, minutes: int, zone: ZoneInfo) -> datetime:
    """Wall-clock instant `minutes` after local midnight of `day` (may roll into later days)."""
    return datetime.combine(day, time(0, 0), tzinfo=zone) + timedelta(minutes=minutes)


def whole_minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from `start` to `end`, floored (negative when `end` is earlier)."""
    return int((end - start).total_seconds() // 60)


class Clock(Protocol):
    """Current instant in the organization's canonical zone."""

    @property
    def zone(self) -> ZoneInfo:
        raise NotImplementedError

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    def __init__(self, zone: ZoneInfo | str = DEFAULT_TIME_ZONE):
        self._zone = zone if isinstance(zone, ZoneInfo) else ZoneInfo(zone)

    @property
    def zone(self) -> ZoneInfo:
        return self._zone

    def now(self) -> datetime:
        return datetime.now(self._zone)


@dataclass
class FixedClock:
    """Clock pinned to one instant; tests move it with `advance`."""

    current: datetime
    zone: ZoneInfo = field(default_factory=lambda: ZoneInfo(DEFAULT_TIME_ZONE))

    def __post_init__(self) -> None:
        if self.current.tzinfo is None:
            self.current = self.current.replace(tzinfo=self.zone)

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import at_minutes, time_from_minutes
from ..core.enums import BreakType


@dataclass(frozen=True)
class BreakWindow:
    """Khung giờ được phép nghỉ, tính từ giờ bắt đầu ca.

    Offsets are minutes from shift start, so they stay monotonic even when the
    clock time wraps past midnight. `anchor_date` is the shift's start date.
    """

    break_type: BreakType
    anchor_date: date
    shift_start_minutes: int
    start_offset: int
    end_offset: int

    @property
    def start_time(self) -> time:
        return time_from_minutes(self.shift_start_minutes + self.start_offset)

    @property
    def end_time(self) -> time:
        return time_from_minutes(self.shift_start_minutes + self.end_offset)

    @property
    def length_minutes(self) -> int:
        return self.end_offset - self.start_offset

    def starts_at(self, zone: ZoneInfo) -> datetime:
        return at_minutes(self.anchor_date, self.shift_start_minutes + self.start_offset, zone)

    def ends_at(self, zone: ZoneInfo) -> datetime:
        return at_minutes(self.anchor_date, self.shift_start_minutes + self.end_offset, zone)

    def overlaps(self, other: "BreakWindow") -> bool:
        return self.start_offset < other.end_offset and other.start_offset < self.end_offset


@dataclass(frozen=True)
class ShiftPosition:
    """Where an instant falls relative to the most recent shift start."""

    anchor_date: date
    minutes_since_start: int
    shift_duration: int

    @property
    def within_shift(self) -> bool:
        return 0 <= self.minutes_since_start <= self.shift_duration


@dataclass(frozen=True)
class BreakSession:
    """Thực thể miền (domain): Một lần nghỉ của agent."""

    session_id: int
    agent_id: int
    break_type: BreakType
    break_date: date
    start_time: datetime
    end_time: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None


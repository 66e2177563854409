from __future__ import annotations

from enum import Enum

from .constants import REPEAT_MIN_GAP_MINUTES


class ShiftKind(str, Enum):
    """Loại ca: ca ngày hoặc ca đêm (qua nửa đêm)."""

    DAY = "Day"
    NIGHT = "Night"


class BreakType(str, Enum):
    """Break types as stored in break_sessions.break_type and notification payloads."""

    MORNING = "Morning"
    LUNCH = "Lunch"
    AFTERNOON = "Afternoon"
    NIGHT_FIRST = "NightFirst"
    NIGHT_MEAL = "NightMeal"
    NIGHT_SECOND = "NightSecond"

    @property
    def shift_kind(self) -> ShiftKind:
        if self in (BreakType.NIGHT_FIRST, BreakType.NIGHT_MEAL, BreakType.NIGHT_SECOND):
            return ShiftKind.NIGHT
        return ShiftKind.DAY

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def duration_minutes(self) -> int:
        """Nominal length of the break itself (not of its window)."""

        return _DURATIONS[self]

    @classmethod
    def for_kind(cls, kind: ShiftKind) -> tuple["BreakType", ...]:
        if kind == ShiftKind.NIGHT:
            return (cls.NIGHT_FIRST, cls.NIGHT_MEAL, cls.NIGHT_SECOND)
        return (cls.MORNING, cls.LUNCH, cls.AFTERNOON)


_DISPLAY_NAMES = {
    BreakType.MORNING: "Morning break",
    BreakType.LUNCH: "Lunch break",
    BreakType.AFTERNOON: "Afternoon break",
    BreakType.NIGHT_FIRST: "First night break",
    BreakType.NIGHT_MEAL: "Night meal break",
    BreakType.NIGHT_SECOND: "Second night break",
}

_DURATIONS = {
    BreakType.MORNING: 15,
    BreakType.LUNCH: 60,
    BreakType.AFTERNOON: 15,
    BreakType.NIGHT_FIRST: 15,
    BreakType.NIGHT_MEAL: 30,
    BreakType.NIGHT_SECOND: 15,
}


class ReminderKind(str, Enum):
    """Notification kinds, in the order they occur within one break window."""

    AVAILABLE_SOON = "available_soon"
    AVAILABLE_NOW = "available_now"
    REMINDER_DUE = "reminder_due"
    ENDING_SOON = "ending_soon"
    MISSED = "missed"

    @property
    def is_repeating(self) -> bool:
        return self in (ReminderKind.REMINDER_DUE, ReminderKind.MISSED)

    @property
    def min_gap_minutes(self) -> int:
        """Minimum gap between two notifications of this kind (0 = one-shot)."""

        return REPEAT_MIN_GAP_MINUTES if self.is_repeating else 0


class BreakPhase(str, Enum):
    """Trạng thái của một loại giờ nghỉ tại một thời điểm (phục vụ màn hình trạng thái)."""

    UNCONFIGURED = "UNCONFIGURED"
    NOT_YET_OPEN = "NOT_YET_OPEN"
    AVAILABLE_SOON = "AVAILABLE_SOON"
    AVAILABLE_NOW = "AVAILABLE_NOW"
    REMINDER_WINDOW = "REMINDER_WINDOW"
    ENDING_SOON = "ENDING_SOON"
    MISSED = "MISSED"
    TAKEN = "TAKEN"
    SHIFT_ENDED = "SHIFT_ENDED"


class DispatchOutcome(str, Enum):
    SENT = "SENT"
    SUPPRESSED = "SUPPRESSED"

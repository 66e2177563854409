from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import Clock, at_minutes, minutes_of_day, whole_minutes_between
from ..core.constants import (
    AVAILABLE_SOON_LEAD_MINUTES,
    ENDING_SOON_LEAD_MINUTES,
    MINUTES_PER_DAY,
    MISSED_INTERVAL_MINUTES,
    REMINDER_INTERVAL_MINUTES,
    REMINDER_TOLERANCE_MINUTES,
    REPEAT_MIN_GAP_MINUTES,
)
from ..core.enums import BreakPhase, BreakType, ReminderKind
from ..shifts.model import ResolvedShift, ShiftResolution
from .calculator import BreakWindowCalculator
from .model import BreakWindow, ShiftPosition


@dataclass(frozen=True)
class BreakEvaluation:
    """One break type evaluated at one instant."""

    window: BreakWindow
    position: ShiftPosition
    due: tuple[ReminderKind, ...] = field(default_factory=tuple)

    @property
    def minutes_until_start(self) -> int:
        return self.window.start_offset - self.position.minutes_since_start

    @property
    def minutes_until_end(self) -> int:
        return self.window.end_offset - self.position.minutes_since_start

    @property
    def minutes_since_window_start(self) -> int:
        return self.position.minutes_since_start - self.window.start_offset

    def slot(self, kind: ReminderKind) -> int:
        """Sub-window index; (agent, type, kind, anchor date, slot) is unique per notification."""
        if kind == ReminderKind.REMINDER_DUE:
            return (self.minutes_since_window_start + REMINDER_TOLERANCE_MINUTES) // REMINDER_INTERVAL_MINUTES
        if kind == ReminderKind.MISSED:
            return -self.minutes_until_end // MISSED_INTERVAL_MINUTES
        return 0


class BreakAvailabilityEvaluator:
    """Pure predicates deciding which break notification applies at an instant.

    Every predicate takes a freshly read `taken` flag: a completed session or
    an in-progress one both count as taken, so a break in progress is never
    reported as missed. Outside the shift span every predicate is false, even
    where a fixed-offset window runs past the shift end.
    """

    def __init__(self, clock: Clock, calculator: Optional[BreakWindowCalculator] = None):
        self._clock = clock
        self._calculator = calculator or BreakWindowCalculator()

    def position(self, shift: ShiftResolution, now: Optional[datetime] = None) -> Optional[ShiftPosition]:
        """Anchor on the most recent shift start at or before `now` (wraparound-aware)."""
        if not isinstance(shift, ResolvedShift):
            return None

        local = self._localize(now)
        current = minutes_of_day(local)
        anchor = local.date()
        if current < shift.start_minutes:
            anchor -= timedelta(days=1)

        since_start = current - shift.start_minutes
        if since_start < 0:
            since_start += MINUTES_PER_DAY

        return ShiftPosition(
            anchor_date=anchor,
            minutes_since_start=since_start,
            shift_duration=shift.duration_minutes,
        )

    def window(self, shift: ShiftResolution, break_type: BreakType, now: Optional[datetime] = None) -> Optional[BreakWindow]:
        pos = self.position(shift, now)
        if pos is None:
            return None
        return self._calculator.window_for(shift, break_type, pos.anchor_date)

    def available_soon(self, shift: ShiftResolution, break_type: BreakType, now: Optional[datetime] = None, *, taken: bool = False) -> bool:
        ctx = self._active(shift, break_type, now, taken)
        if ctx is None:
            return False
        window, pos = ctx
        t = pos.minutes_since_start
        return window.start_offset - AVAILABLE_SOON_LEAD_MINUTES <= t < window.start_offset

    def available_now(self, shift: ShiftResolution, break_type: BreakType, now: Optional[datetime] = None, *, taken: bool = False) -> bool:
        ctx = self._active(shift, break_type, now, taken)
        if ctx is None:
            return False
        window, pos = ctx
        return window.start_offset <= pos.minutes_since_start < window.end_offset

    def reminder_due(
        self,
        shift: ShiftResolution,
        break_type: BreakType,
        now: Optional[datetime] = None,
        *,
        taken: bool = False,
        last_reminder_at: Optional[datetime] = None,
    ) -> bool:
        ctx = self._active(shift, break_type, now, taken)
        if ctx is None:
            return False
        window, pos = ctx
        t = pos.minutes_since_start
        if not window.start_offset < t < window.end_offset:
            return False

        elapsed = t - window.start_offset
        if elapsed < REMINDER_INTERVAL_MINUTES:
            return False

        offset = elapsed % REMINDER_INTERVAL_MINUTES
        if REMINDER_TOLERANCE_MINUTES < offset < REMINDER_INTERVAL_MINUTES - REMINDER_TOLERANCE_MINUTES:
            return False

        if last_reminder_at is not None:
            since_last = whole_minutes_between(last_reminder_at, self._localize(now))
            if since_last < REPEAT_MIN_GAP_MINUTES:
                return False
        return True

    def ending_soon(self, shift: ShiftResolution, break_type: BreakType, now: Optional[datetime] = None, *, taken: bool = False) -> bool:
        ctx = self._active(shift, break_type, now, taken)
        if ctx is None:
            return False
        window, pos = ctx
        return window.end_offset - ENDING_SOON_LEAD_MINUTES <= pos.minutes_since_start < window.end_offset

    def missed(self, shift: ShiftResolution, break_type: BreakType, now: Optional[datetime] = None, *, taken: bool = False) -> bool:
        ctx = self._active(shift, break_type, now, taken)
        if ctx is None:
            return False
        window, pos = ctx
        after_end = pos.minutes_since_start - window.end_offset
        return after_end >= 0 and after_end % MISSED_INTERVAL_MINUTES == 0

    def evaluate(
        self,
        shift: ShiftResolution,
        break_type: BreakType,
        now: Optional[datetime] = None,
        *,
        taken: bool = False,
        last_reminder_at: Optional[datetime] = None,
    ) -> Optional[BreakEvaluation]:
        """Run all five predicates for one break type; None when the break does not apply."""
        now = self._localize(now)
        ctx = self._context(shift, break_type, now)
        if ctx is None:
            return None

        checks = (
            (ReminderKind.AVAILABLE_SOON, self.available_soon(shift, break_type, now, taken=taken)),
            (ReminderKind.AVAILABLE_NOW, self.available_now(shift, break_type, now, taken=taken)),
            (
                ReminderKind.REMINDER_DUE,
                self.reminder_due(shift, break_type, now, taken=taken, last_reminder_at=last_reminder_at),
            ),
            (ReminderKind.ENDING_SOON, self.ending_soon(shift, break_type, now, taken=taken)),
            (ReminderKind.MISSED, self.missed(shift, break_type, now, taken=taken)),
        )
        window, pos = ctx
        return BreakEvaluation(window=window, position=pos, due=tuple(kind for kind, ok in checks if ok))

    def phase(self, shift: ShiftResolution, break_type: BreakType, now: Optional[datetime] = None, *, taken: bool = False) -> BreakPhase:
        now = self._localize(now)
        ctx = self._context(shift, break_type, now)
        if ctx is None:
            return BreakPhase.UNCONFIGURED
        if taken:
            return BreakPhase.TAKEN

        window, pos = ctx
        t = pos.minutes_since_start
        if not pos.within_shift:
            # Last shift ended on an earlier calendar day: today's is still ahead.
            shift_end = at_minutes(pos.anchor_date, shift.start_minutes + pos.shift_duration, self._clock.zone)
            if shift_end.date() < now.date():
                return BreakPhase.NOT_YET_OPEN
            return BreakPhase.SHIFT_ENDED
        if t < window.start_offset - AVAILABLE_SOON_LEAD_MINUTES:
            return BreakPhase.NOT_YET_OPEN
        if t < window.start_offset:
            return BreakPhase.AVAILABLE_SOON
        if t < window.end_offset - ENDING_SOON_LEAD_MINUTES:
            if t - window.start_offset >= REMINDER_INTERVAL_MINUTES:
                return BreakPhase.REMINDER_WINDOW
            return BreakPhase.AVAILABLE_NOW
        if t < window.end_offset:
            return BreakPhase.ENDING_SOON
        return BreakPhase.MISSED

    def _context(self, shift: ShiftResolution, break_type: BreakType, now: Optional[datetime]):
        pos = self.position(shift, now)
        if pos is None:
            return None
        window = self._calculator.window_for(shift, break_type, pos.anchor_date)
        if window is None:
            return None
        return window, pos

    def _active(self, shift: ShiftResolution, break_type: BreakType, now: Optional[datetime], taken: bool):
        """Context for the predicates; None when taken or outside the shift span."""
        if taken:
            return None
        ctx = self._context(shift, break_type, now)
        if ctx is None or not ctx[1].within_shift:
            return None
        return ctx

    def _localize(self, now: Optional[datetime]) -> datetime:
        if now is None:
            return self._clock.now().astimezone(self._clock.zone)
        if now.tzinfo is None:
            return now.replace(tzinfo=self._clock.zone)
        return now.astimezone(self._clock.zone)

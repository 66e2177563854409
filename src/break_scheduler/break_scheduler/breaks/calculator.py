from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.constants import FIRST_BREAK_OFFSETS, MEAL_BREAK_OFFSETS, SECOND_BREAK_OFFSETS
from ..core.enums import BreakType
from ..shifts.model import ResolvedShift, ShiftResolution
from .model import BreakWindow

# Same offsets for day and night shifts; only the break identities differ.
_OFFSETS_BY_TYPE = {
    BreakType.MORNING: FIRST_BREAK_OFFSETS,
    BreakType.LUNCH: MEAL_BREAK_OFFSETS,
    BreakType.AFTERNOON: SECOND_BREAK_OFFSETS,
    BreakType.NIGHT_FIRST: FIRST_BREAK_OFFSETS,
    BreakType.NIGHT_MEAL: MEAL_BREAK_OFFSETS,
    BreakType.NIGHT_SECOND: SECOND_BREAK_OFFSETS,
}


class BreakWindowCalculator:
    """Derives break windows from a resolved shift using fixed offsets.

    Windows are never persisted: a shift change takes effect on the next call.
    Offsets are not clipped to the shift length.
    """

    def windows_for(self, shift: ShiftResolution, anchor_date: date) -> tuple[BreakWindow, ...]:
        if not isinstance(shift, ResolvedShift):
            return ()

        windows = [self._build(shift, break_type, anchor_date) for break_type in BreakType.for_kind(shift.kind)]
        windows.sort(key=lambda w: w.start_offset)
        return tuple(windows)

    def window_for(self, shift: ShiftResolution, break_type: BreakType, anchor_date: date) -> Optional[BreakWindow]:
        if not isinstance(shift, ResolvedShift) or break_type.shift_kind != shift.kind:
            return None
        return self._build(shift, break_type, anchor_date)

    @staticmethod
    def _build(shift: ResolvedShift, break_type: BreakType, anchor_date: date) -> BreakWindow:
        start_offset, end_offset = _OFFSETS_BY_TYPE[break_type]
        return BreakWindow(
            break_type=break_type,
            anchor_date=anchor_date,
            shift_start_minutes=shift.start_minutes,
            start_offset=start_offset,
            end_offset=end_offset,
        )

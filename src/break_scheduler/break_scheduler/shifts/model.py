from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..core.constants import MINUTES_PER_DAY
from ..core.enums import ShiftKind


@dataclass(frozen=True)
class AgentShift:
    """Thực thể miền (domain): Ca làm việc được cấu hình cho một agent."""

    agent_id: int
    shift_text: Optional[str]
    shift_period: Optional[str] = None


@dataclass(frozen=True)
class ResolvedShift:
    """Normalized shift: minutes since midnight in the canonical zone."""

    start_minutes: int
    end_minutes: int

    @property
    def is_overnight(self) -> bool:
        return self.end_minutes <= self.start_minutes

    @property
    def kind(self) -> ShiftKind:
        return ShiftKind.NIGHT if self.is_overnight else ShiftKind.DAY

    @property
    def duration_minutes(self) -> int:
        if self.is_overnight:
            return self.end_minutes + MINUTES_PER_DAY - self.start_minutes
        return self.end_minutes - self.start_minutes


@dataclass(frozen=True)
class Unconfigured:
    """Agent has no shift configured: no breaks apply."""

    def __bool__(self) -> bool:
        return False


UNCONFIGURED = Unconfigured()

ShiftResolution = Union[ResolvedShift, Unconfigured]

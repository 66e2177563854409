from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ..core.enums import BreakType
from .model import BreakSession


class BreakSessionStore(Protocol):
    def has_taken_break(self, agent_id: int, break_type: BreakType, break_date: date) -> bool:
        """True once a session for this agent/type/date has a non-null end time."""

        raise NotImplementedError

    def find_open_session(self, agent_id: int, break_type: BreakType, break_date: date) -> Optional[BreakSession]:
        """The in-progress session (end_time IS NULL), if any."""

        raise NotImplementedError

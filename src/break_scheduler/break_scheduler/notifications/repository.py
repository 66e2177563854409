from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol

from ..core.enums import BreakType, ReminderKind
from .model import NotificationRecord


class NotificationHistoryStore(Protocol):
    def last_sent(
        self,
        agent_id: int,
        break_type: BreakType,
        reminder_kind: ReminderKind,
        anchor_date: date,
    ) -> Optional[datetime]:
        raise NotImplementedError

    def insert_if_absent(self, record: NotificationRecord) -> Optional[int]:
        """Atomic insert keyed on (agent, category, break type, kind, anchor date, slot).

        Returns the new record id, or None when that slot is already taken.
        """

        raise NotImplementedError

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..core.constants import NOTIFICATION_CATEGORY
from ..core.enums import BreakType, ReminderKind


@dataclass(frozen=True)
class DueNotification:
    """A notification the evaluator decided is due this tick (not yet persisted)."""

    agent_id: int
    break_type: BreakType
    reminder_kind: ReminderKind
    title: str
    message: str
    anchor_date: date
    slot: int = 0
    payload: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "break_type": self.break_type.value,
            "reminder_type": self.reminder_kind.value,
            "title": self.title,
            "message": self.message,
            "anchor_date": self.anchor_date.isoformat(),
            "slot": self.slot,
            "payload": dict(self.payload),
        }


@dataclass(frozen=True)
class NotificationRecord:
    """Thực thể miền (domain): Thông báo đã lưu. Append-only, không bao giờ sửa."""

    agent_id: int
    break_type: BreakType
    reminder_kind: ReminderKind
    title: str
    message: str
    anchor_date: date
    created_at: datetime
    slot: int = 0
    payload: dict[str, Any] = field(default_factory=dict)
    category: str = NOTIFICATION_CATEGORY
    record_id: Optional[int] = None

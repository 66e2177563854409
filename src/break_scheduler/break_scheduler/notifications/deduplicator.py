from __future__ import annotations

import logging
from datetime import date, datetime

from ..common.datetime_utils import whole_minutes_between
from ..core.enums import BreakType, ReminderKind
from .repository import NotificationHistoryStore

logger = logging.getLogger(__name__)


class NotificationDeduplicator:
    """Gate in front of the dispatcher.

    One-shot kinds (available_soon, available_now, ending_soon) may be sent
    once per shift day. Repeating kinds (reminder_due, missed) need their
    minimum gap since the previous one. The store's atomic insert remains the
    final word when two ticks race past this check.
    """

    def __init__(self, history: NotificationHistoryStore):
        self._history = history

    def permits(
        self,
        agent_id: int,
        break_type: BreakType,
        reminder_kind: ReminderKind,
        anchor_date: date,
        now: datetime,
    ) -> bool:
        last = self._history.last_sent(agent_id, break_type, reminder_kind, anchor_date)
        if last is None:
            return True

        if not reminder_kind.is_repeating:
            logger.debug(
                "Suppressed %s/%s for agent %s: already sent on %s",
                break_type.value, reminder_kind.value, agent_id, anchor_date,
            )
            return False

        elapsed = whole_minutes_between(last, now)
        if elapsed < reminder_kind.min_gap_minutes:
            logger.debug(
                "Suppressed %s/%s for agent %s: last sent %s minutes ago",
                break_type.value, reminder_kind.value, agent_id, elapsed,
            )
            return False
        return True

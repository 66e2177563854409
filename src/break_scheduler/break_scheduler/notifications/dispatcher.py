from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional, Protocol

from ..common.datetime_utils import Clock
from ..core.enums import BreakType, DispatchOutcome, ReminderKind
from .deduplicator import NotificationDeduplicator
from .model import DueNotification, NotificationRecord
from .repository import NotificationHistoryStore

logger = logging.getLogger(__name__)


class RealtimePublisher(Protocol):
    """Pushes a stored notification to connected clients (socket server, etc.)."""

    def publish(self, record: NotificationRecord) -> None:
        raise NotImplementedError


class NullPublisher:
    def publish(self, record: NotificationRecord) -> None:
        return None


class LoggingPublisher:
    def publish(self, record: NotificationRecord) -> None:
        logger.info(
            "[realtime] user=%s %s: %s",
            record.agent_id, record.title, record.message,
        )


class NotificationDispatcher:
    """Persists break notifications and publishes them.

    Storage failures raise StoreWriteError; the caller skips that
    notification for this tick and the next tick retries it.
    """

    def __init__(
        self,
        history: NotificationHistoryStore,
        clock: Clock,
        *,
        publisher: Optional[RealtimePublisher] = None,
        deduplicator: Optional[NotificationDeduplicator] = None,
    ):
        self._history = history
        self._clock = clock
        self._publisher = publisher or NullPublisher()
        self._dedup = deduplicator or NotificationDeduplicator(history)

    def record(
        self,
        agent_id: int,
        kind: ReminderKind,
        break_type: BreakType,
        message: str,
        *,
        title: str,
        anchor_date: date,
        slot: int = 0,
        payload: Optional[dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> Optional[int]:
        """Persist one notification; returns its id, or None if that slot was already used."""
        body = {"break_type": break_type.value, "reminder_type": kind.value}
        body.update(payload or {})

        record = NotificationRecord(
            agent_id=int(agent_id),
            break_type=break_type,
            reminder_kind=kind,
            title=title,
            message=message,
            anchor_date=anchor_date,
            slot=int(slot),
            payload=body,
            created_at=now or self._clock.now(),
        )
        record_id = self._history.insert_if_absent(record)
        if record_id is None:
            return None

        stored = replace(record, record_id=record_id)
        try:
            self._publisher.publish(stored)
        except Exception:
            # The row is stored; clients still see it on their next fetch.
            logger.exception("Realtime publish failed for notification %s", record_id)
        return record_id

    def dispatch(self, due: DueNotification, *, now: Optional[datetime] = None) -> DispatchOutcome:
        now = now or self._clock.now()
        if not self._dedup.permits(due.agent_id, due.break_type, due.reminder_kind, due.anchor_date, now):
            return DispatchOutcome.SUPPRESSED

        record_id = self.record(
            due.agent_id,
            due.reminder_kind,
            due.break_type,
            due.message,
            title=due.title,
            anchor_date=due.anchor_date,
            slot=due.slot,
            payload=due.payload,
            now=now,
        )
        if record_id is None:
            logger.debug(
                "Suppressed %s/%s for agent %s: slot %s already recorded",
                due.break_type.value, due.reminder_kind.value, due.agent_id, due.slot,
            )
            return DispatchOutcome.SUPPRESSED

        logger.info(
            "Sent %s/%s to agent %s (notification %s)",
            due.break_type.value, due.reminder_kind.value, due.agent_id, record_id,
        )
        return DispatchOutcome.SENT

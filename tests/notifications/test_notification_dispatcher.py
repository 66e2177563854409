from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from src.break_scheduler.break_scheduler.common.datetime_utils import FixedClock
from src.break_scheduler.break_scheduler.core.enums import BreakType, DispatchOutcome, ReminderKind
from src.break_scheduler.break_scheduler.core.exceptions import StoreWriteError
from src.break_scheduler.break_scheduler.notifications import messages
from src.break_scheduler.break_scheduler.notifications.dispatcher import NotificationDispatcher
from src.break_scheduler.break_scheduler.notifications.model import DueNotification

MANILA = ZoneInfo("Asia/Manila")
ANCHOR = date(2025, 3, 10)


class InMemoryHistory:
    """Unique on (agent, category, break type, kind, anchor date, slot), like uq_break_notification."""

    def __init__(self):
        self._lock = threading.Lock()
        self._next_id = 1
        self.records = []

    def last_sent(self, agent_id, break_type, reminder_kind, anchor_date):
        times = [
            r.created_at
            for r in self.records
            if (r.agent_id, r.break_type, r.reminder_kind, r.anchor_date) == (agent_id, break_type, reminder_kind, anchor_date)
        ]
        return max(times) if times else None

    def insert_if_absent(self, record):
        key = (record.agent_id, record.category, record.break_type, record.reminder_kind, record.anchor_date, record.slot)
        with self._lock:
            for r in self.records:
                if (r.agent_id, r.category, r.break_type, r.reminder_kind, r.anchor_date, r.slot) == key:
                    return None
            rid = self._next_id
            self._next_id += 1
            self.records.append(record)
            return rid


class BrokenHistory(InMemoryHistory):
    def insert_if_absent(self, record):
        raise StoreWriteError("notifications: lock wait timeout")


class RecordingPublisher:
    def __init__(self, fail: bool = False):
        self.published = []
        self._fail = fail

    def publish(self, record):
        if self._fail:
            raise RuntimeError("socket server down")
        self.published.append(record)


def _due(kind=ReminderKind.AVAILABLE_NOW, slot=0):
    title, message = messages.render(kind, BreakType.LUNCH, minutes_until_end=180)
    return DueNotification(
        agent_id=7,
        break_type=BreakType.LUNCH,
        reminder_kind=kind,
        title=title,
        message=message,
        anchor_date=ANCHOR,
        slot=slot,
        payload={"minutes_remaining": 180},
    )


def _clock(h=10, m=0):
    return FixedClock(datetime(2025, 3, 10, h, m), zone=MANILA)


def test_record_persists_payload_and_publishes():
    history = InMemoryHistory()
    publisher = RecordingPublisher()
    dispatcher = NotificationDispatcher(history, _clock(), publisher=publisher)

    rid = dispatcher.record(
        7, ReminderKind.AVAILABLE_NOW, BreakType.LUNCH, "Your Lunch break is now available! You can take it now.",
        title="Lunch break is now available", anchor_date=ANCHOR, payload={"minutes_remaining": 180},
    )

    assert rid == 1
    stored = history.records[0]
    assert stored.payload == {"break_type": "Lunch", "reminder_type": "available_now", "minutes_remaining": 180}
    assert stored.category == "break"
    assert stored.created_at == datetime(2025, 3, 10, 10, 0, tzinfo=MANILA)
    assert publisher.published[0].record_id == 1


def test_dispatch_sends_once_then_suppresses():
    history = InMemoryHistory()
    dispatcher = NotificationDispatcher(history, _clock())

    assert dispatcher.dispatch(_due()) == DispatchOutcome.SENT
    assert dispatcher.dispatch(_due()) == DispatchOutcome.SUPPRESSED
    assert len(history.records) == 1


def test_concurrent_dispatch_of_same_slot_sends_once():
    history = InMemoryHistory()
    dispatcher = NotificationDispatcher(history, _clock(10, 30))
    due = _due(ReminderKind.REMINDER_DUE, slot=1)

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(lambda _: dispatcher.dispatch(due), range(16)))

    assert outcomes.count(DispatchOutcome.SENT) == 1
    assert len(history.records) == 1


def test_storage_failure_raises_write_error():
    dispatcher = NotificationDispatcher(BrokenHistory(), _clock())

    with pytest.raises(StoreWriteError):
        dispatcher.dispatch(_due())


def test_publish_failure_keeps_the_record():
    history = InMemoryHistory()
    dispatcher = NotificationDispatcher(history, _clock(), publisher=RecordingPublisher(fail=True))

    assert dispatcher.dispatch(_due()) == DispatchOutcome.SENT
    assert len(history.records) == 1


def test_messages_match_agent_facing_texts():
    assert messages.render(ReminderKind.AVAILABLE_SOON, BreakType.MORNING, minutes_until_start=15) == (
        "Morning break available soon",
        "Your Morning break will be available in 15 minutes",
    )
    assert messages.render(
        ReminderKind.REMINDER_DUE, BreakType.LUNCH, minutes_elapsed=30, window_end_minutes=13 * 60
    ) == (
        "Reminder: Lunch break not taken yet",
        "Your Lunch break has been available for 30 minutes. Remember to take it before 1:00 PM.",
    )
    assert messages.render(ReminderKind.MISSED, BreakType.NIGHT_MEAL)[0] == "You have not taken your Night meal break yet!"

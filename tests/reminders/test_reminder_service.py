from __future__ import annotations

import threading
from datetime import date, datetime
from zoneinfo import ZoneInfo

from src.break_scheduler.break_scheduler.breaks.model import BreakSession
from src.break_scheduler.break_scheduler.common.datetime_utils import FixedClock
from src.break_scheduler.break_scheduler.core.enums import BreakType, ReminderKind
from src.break_scheduler.break_scheduler.core.exceptions import StoreReadError, StoreWriteError
from src.break_scheduler.break_scheduler.notifications.dispatcher import NotificationDispatcher
from src.break_scheduler.break_scheduler.reminders.service import ReminderService
from src.break_scheduler.break_scheduler.shifts.model import AgentShift

MANILA = ZoneInfo("Asia/Manila")
ANCHOR = date(2025, 3, 10)


class InMemoryShifts:
    def __init__(self, shifts: dict[int, str | None], *, broken: set[int] | None = None):
        self.shifts = dict(shifts)
        self.broken = broken or set()

    def list_agent_ids(self):
        return sorted(self.shifts)

    def get_shift(self, agent_id):
        if agent_id in self.broken:
            raise StoreReadError(f"job_info read failed for agent {agent_id}")
        if agent_id not in self.shifts:
            return None
        return AgentShift(agent_id=agent_id, shift_text=self.shifts[agent_id])


class InMemorySessions:
    def __init__(self, *, broken_types: set[BreakType] | None = None):
        self.sessions: list[BreakSession] = []
        self.broken_types = broken_types or set()

    def _check(self, break_type):
        if break_type in self.broken_types:
            raise StoreReadError("break_sessions read failed")

    def has_taken_break(self, agent_id, break_type, break_date):
        self._check(break_type)
        return any(
            s.agent_id == agent_id and s.break_type == break_type and s.break_date == break_date and not s.is_open
            for s in self.sessions
        )

    def find_open_session(self, agent_id, break_type, break_date):
        self._check(break_type)
        for s in self.sessions:
            if s.agent_id == agent_id and s.break_type == break_type and s.break_date == break_date and s.is_open:
                return s
        return None


class InMemoryHistory:
    def __init__(self, *, failing_agents: set[int] | None = None):
        self._lock = threading.Lock()
        self.records = []
        self.failing_agents = failing_agents or set()

    def last_sent(self, agent_id, break_type, reminder_kind, anchor_date):
        times = [
            r.created_at
            for r in list(self.records)
            if (r.agent_id, r.break_type, r.reminder_kind, r.anchor_date) == (agent_id, break_type, reminder_kind, anchor_date)
        ]
        return max(times) if times else None

    def insert_if_absent(self, record):
        if record.agent_id in self.failing_agents:
            raise StoreWriteError("notifications write timed out")
        key = (record.agent_id, record.break_type, record.reminder_kind, record.anchor_date, record.slot)
        with self._lock:
            if any((r.agent_id, r.break_type, r.reminder_kind, r.anchor_date, r.slot) == key for r in self.records):
                return None
            self.records.append(record)
            return len(self.records)

    def kinds(self, agent_id=None):
        return sorted(
            (r.break_type.value, r.reminder_kind.value) for r in self.records if agent_id is None or r.agent_id == agent_id
        )


def _clock(h, m):
    return FixedClock(datetime(2025, 3, 10, h, m), zone=MANILA)


def _service(shifts, clock, *, sessions=None, history=None, **kwargs):
    sessions = sessions or InMemorySessions()
    history = history or InMemoryHistory()
    dispatcher = NotificationDispatcher(history, clock)
    service = ReminderService(shifts, sessions, history, dispatcher, clock, **kwargs)
    return service, sessions, history


def test_run_once_sends_due_notification_and_is_idempotent():
    service, _, history = _service(InMemoryShifts({1: "6:00 AM - 3:00 PM"}), _clock(8, 0))

    assert service.run_once() == 1
    assert service.run_once() == 0
    assert history.kinds() == [("Morning", "available_now")]


def test_evaluate_agent_leaves_out_what_was_already_sent():
    clock = _clock(8, 0)
    service, _, _ = _service(InMemoryShifts({1: "6:00 AM - 3:00 PM"}), clock)

    assert service.run_once() == 1
    clock.advance(minutes=1)

    assert service.evaluate_agent(1) == []
    assert service.run_once() == 0


def test_nothing_is_sent_after_a_short_shift_ends():
    # Afternoon window of a 9-1 shift is 16:45-17:45, after the shift.
    service, _, history = _service(InMemoryShifts({1: "9:00 AM - 1:00 PM"}), _clock(16, 50))

    assert service.evaluate_agent(1) == []
    assert service.run_once() == 0
    assert history.records == []
    phases = {b["break_type"]: b["phase"] for b in service.describe_agent(1)["breaks"]}
    assert phases["Afternoon"] == "SHIFT_ENDED"


def test_unconfigured_invalid_and_unreadable_agents_do_not_block_others():
    shifts = InMemoryShifts(
        {1: "6:00 AM - 3:00 PM", 2: None, 3: "whenever", 4: "6:00 AM - 3:00 PM", 5: "6:00 AM - 3:00 PM"},
        broken={4},
    )
    service, _, history = _service(shifts, _clock(8, 0))

    assert service.run_once() == 2
    assert sorted({r.agent_id for r in history.records}) == [1, 5]


def test_open_session_counts_as_taken():
    clock = _clock(9, 0)
    service, sessions, history = _service(InMemoryShifts({1: "6:00 AM - 3:00 PM"}), clock)
    sessions.sessions.append(
        BreakSession(
            session_id=1, agent_id=1, break_type=BreakType.MORNING, break_date=ANCHOR,
            start_time=datetime(2025, 3, 10, 8, 50, tzinfo=MANILA),
        )
    )

    assert service.is_break_taken(1, BreakType.MORNING, ANCHOR)
    assert service.evaluate_agent(1) == []
    assert service.run_once() == 0


def test_evaluate_agent_lists_due_without_dispatching():
    service, _, history = _service(InMemoryShifts({1: "6:00 AM - 3:00 PM"}), _clock(10, 30))

    due = service.evaluate_agent(1)

    assert sorted((d.break_type, d.reminder_kind) for d in due) == sorted(
        [
            (BreakType.MORNING, ReminderKind.MISSED),
            (BreakType.LUNCH, ReminderKind.AVAILABLE_NOW),
            (BreakType.LUNCH, ReminderKind.REMINDER_DUE),
        ]
    )
    missed = next(d for d in due if d.reminder_kind == ReminderKind.MISSED)
    assert missed.payload["minutes_since_end"] == 90
    assert missed.slot == 3
    assert history.records == []


def test_reminders_repeat_on_schedule_across_ticks():
    clock = _clock(10, 30)
    service, _, history = _service(InMemoryShifts({1: "6:00 AM - 3:00 PM"}), clock)

    assert service.run_once() == 3
    clock.advance(minutes=1)
    assert service.run_once() == 0
    clock.advance(minutes=24)  # 10:55
    assert service.run_once() == 1

    reminders = [r for r in history.records if r.reminder_kind == ReminderKind.REMINDER_DUE]
    assert [r.slot for r in reminders] == [1, 2]
    assert reminders[1].message == (
        "Your Lunch break has been available for 55 minutes. Remember to take it before 1:00 PM."
    )


def test_session_read_failure_skips_only_that_break_type():
    sessions = InMemorySessions(broken_types={BreakType.LUNCH})
    service, _, history = _service(InMemoryShifts({1: "6:00 AM - 3:00 PM"}), _clock(10, 30), sessions=sessions)

    assert service.run_once() == 1
    assert history.kinds() == [("Morning", "missed")]


def test_write_failure_for_one_agent_does_not_stop_the_tick():
    history = InMemoryHistory(failing_agents={1})
    shifts = InMemoryShifts({1: "6:00 AM - 3:00 PM", 2: "6:00 AM - 3:00 PM"})
    service, _, _ = _service(shifts, _clock(8, 0), history=history)

    assert service.run_once() == 1
    assert history.kinds(agent_id=2) == [("Morning", "available_now")]


def test_slow_agent_is_abandoned_after_tick_timeout():
    release = threading.Event()

    class SlowShifts(InMemoryShifts):
        def get_shift(self, agent_id):
            if agent_id == 9:
                release.wait(5)
            return super().get_shift(agent_id)

    shifts = SlowShifts({1: "6:00 AM - 3:00 PM", 9: "6:00 AM - 3:00 PM"})
    service, _, _ = _service(shifts, _clock(8, 0), max_workers=2, tick_timeout=0.2)
    try:
        assert service.run_once() == 1
    finally:
        release.set()


def test_overnight_shift_uses_night_breaks():
    clock = FixedClock(datetime(2025, 3, 11, 0, 0), zone=MANILA)
    service, _, history = _service(InMemoryShifts({1: "10:00 PM - 6:00 AM"}), clock)

    assert service.run_once() == 1
    record = history.records[0]
    assert record.break_type == BreakType.NIGHT_FIRST
    assert record.anchor_date == ANCHOR
    assert record.title == "First night break is now available"


def test_describe_agent_reports_windows_and_phase():
    service, _, _ = _service(InMemoryShifts({1: "6:00 AM - 3:00 PM", 2: None}), _clock(8, 35))

    status = service.describe_agent(1)
    assert status["configured"] is True
    assert status["shift_kind"] == "Day"
    assert status["anchor_date"] == "2025-03-10"
    assert status["breaks"][0] == {
        "break_type": "Morning",
        "name": "Morning break",
        "duration_minutes": 15,
        "start": "8:00 AM",
        "end": "9:00 AM",
        "phase": "REMINDER_WINDOW",
    }
    assert [b["start"] for b in status["breaks"]] == ["8:00 AM", "10:00 AM", "1:45 PM"]

    unconfigured = service.describe_agent(2)
    assert unconfigured["configured"] is False
    assert unconfigured["breaks"] == []

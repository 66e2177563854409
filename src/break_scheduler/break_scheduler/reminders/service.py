from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import date, datetime
from typing import Optional

from ..breaks.evaluator import BreakAvailabilityEvaluator, BreakEvaluation
from ..breaks.repository import BreakSessionStore
from ..common.datetime_utils import Clock
from ..core.constants import DEFAULT_TICK_TIMEOUT_SECONDS, DEFAULT_WORKERS
from ..core.enums import BreakType, DispatchOutcome, ReminderKind
from ..core.exceptions import StoreError, StoreReadError
from ..notifications import messages
from ..notifications.deduplicator import NotificationDeduplicator
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.model import DueNotification
from ..notifications.repository import NotificationHistoryStore
from ..shifts.model import UNCONFIGURED, AgentShift, ResolvedShift, ShiftResolution
from ..shifts.repository import AgentShiftProvider
from ..shifts.resolver import ShiftScheduleResolver, format_clock

logger = logging.getLogger(__name__)


class ReminderService:
    """Use case: evaluate every agent's breaks and dispatch what is due.

    Everything is re-read per call (shift text, break sessions, history), so a
    shift change or a finished break takes effect on the very next tick.
    """

    def __init__(
        self,
        shifts: AgentShiftProvider,
        sessions: BreakSessionStore,
        history: NotificationHistoryStore,
        dispatcher: NotificationDispatcher,
        clock: Clock,
        *,
        resolver: Optional[ShiftScheduleResolver] = None,
        evaluator: Optional[BreakAvailabilityEvaluator] = None,
        deduplicator: Optional[NotificationDeduplicator] = None,
        max_workers: int = DEFAULT_WORKERS,
        tick_timeout: float = DEFAULT_TICK_TIMEOUT_SECONDS,
    ):
        self._shifts = shifts
        self._sessions = sessions
        self._history = history
        self._dispatcher = dispatcher
        self._clock = clock
        self._resolver = resolver or ShiftScheduleResolver()
        self._evaluator = evaluator or BreakAvailabilityEvaluator(clock)
        self._dedup = deduplicator or NotificationDeduplicator(history)
        self._max_workers = max(1, int(max_workers))
        self._tick_timeout = float(tick_timeout)

    def resolve_shift(self, agent_id: int) -> ShiftResolution:
        return self._resolve(agent_id, self._shifts.get_shift(agent_id))

    def _resolve(self, agent_id: int, agent_shift: Optional[AgentShift]) -> ShiftResolution:
        if agent_shift is None or not agent_shift.shift_text:
            logger.debug("Agent %s has no shift configured", agent_id)
            return UNCONFIGURED
        return self._resolver.resolve_or_unconfigured(agent_shift.shift_text, agent_id=agent_id)

    def is_break_taken(self, agent_id: int, break_type: BreakType, anchor_date: date) -> bool:
        # An open session counts as taken too: a break in progress is never "missed".
        if self._sessions.has_taken_break(agent_id, break_type, anchor_date):
            return True
        return self._sessions.find_open_session(agent_id, break_type, anchor_date) is not None

    def evaluate_agent(self, agent_id: int, now: Optional[datetime] = None) -> list[DueNotification]:
        """Notifications due for one agent at `now` (nothing is dispatched).

        Kinds the history already rules out (one-shot kinds sent earlier this
        shift day, repeats inside their gap) are left out.

        A failed shift read propagates as StoreReadError; a failed read for one
        break type only skips that type.
        """
        now = now or self._clock.now()
        shift = self.resolve_shift(agent_id)
        if not isinstance(shift, ResolvedShift):
            return []

        due: list[DueNotification] = []
        for break_type in BreakType.for_kind(shift.kind):
            try:
                due.extend(self._evaluate_break(agent_id, shift, break_type, now))
            except StoreReadError as exc:
                logger.warning("Skipping %s for agent %s this tick: %s", break_type.value, agent_id, exc)
        return due

    def process_agent(self, agent_id: int, now: Optional[datetime] = None) -> int:
        now = now or self._clock.now()
        try:
            due = self.evaluate_agent(agent_id, now)
        except StoreReadError as exc:
            logger.warning("Skipping agent %s this tick: %s", agent_id, exc)
            return 0

        sent = 0
        for item in due:
            try:
                outcome = self._dispatcher.dispatch(item, now=now)
            except StoreError as exc:
                logger.warning(
                    "Could not dispatch %s/%s to agent %s, will retry next tick: %s",
                    item.break_type.value, item.reminder_kind.value, agent_id, exc,
                )
                continue
            if outcome == DispatchOutcome.SENT:
                sent += 1
        return sent

    def run_once(self, now: Optional[datetime] = None) -> int:
        """One full evaluation pass over all agents; returns notifications dispatched."""
        now = now or self._clock.now()
        try:
            agent_ids = list(self._shifts.list_agent_ids())
        except StoreReadError as exc:
            logger.warning("Break reminder pass skipped, cannot list agents: %s", exc)
            return 0

        executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="break-reminders")
        futures = {executor.submit(self.process_agent, agent_id, now): agent_id for agent_id in agent_ids}
        done, not_done = wait(futures, timeout=self._tick_timeout)
        # Stragglers keep running in the background; their results are simply not counted.
        executor.shutdown(wait=False, cancel_futures=True)

        total = 0
        for future in done:
            try:
                total += future.result()
            except Exception:
                logger.exception("Break evaluation failed for agent %s", futures[future])
        for future in not_done:
            logger.warning("Break evaluation for agent %s timed out after %ss", futures[future], self._tick_timeout)

        logger.info(
            "Break reminder pass at %s: %s agents, %s notifications sent",
            now.strftime("%Y-%m-%d %H:%M:%S"), len(agent_ids), total,
        )
        return total

    def describe_agent(self, agent_id: int, now: Optional[datetime] = None) -> dict:
        """Shift, windows and current phase per break, for the status endpoint."""
        now = now or self._clock.now()
        agent_shift = self._shifts.get_shift(agent_id)
        shift = self._resolve(agent_id, agent_shift)
        result = {
            "agent_id": int(agent_id),
            "shift_time": agent_shift.shift_text if agent_shift else None,
            "configured": isinstance(shift, ResolvedShift),
            "breaks": [],
        }
        if not isinstance(shift, ResolvedShift):
            return result

        pos = self._evaluator.position(shift, now)
        result["shift_kind"] = shift.kind.value
        result["anchor_date"] = pos.anchor_date.isoformat()
        for break_type in BreakType.for_kind(shift.kind):
            window = self._evaluator.window(shift, break_type, now)
            taken = self.is_break_taken(agent_id, break_type, pos.anchor_date)
            result["breaks"].append(
                {
                    "break_type": break_type.value,
                    "name": break_type.display_name,
                    "duration_minutes": break_type.duration_minutes,
                    "start": format_clock(shift.start_minutes + window.start_offset),
                    "end": format_clock(shift.start_minutes + window.end_offset),
                    "phase": self._evaluator.phase(shift, break_type, now, taken=taken).value,
                }
            )
        return result

    def _evaluate_break(
        self,
        agent_id: int,
        shift: ResolvedShift,
        break_type: BreakType,
        now: datetime,
    ) -> list[DueNotification]:
        pos = self._evaluator.position(shift, now)
        taken = self.is_break_taken(agent_id, break_type, pos.anchor_date)
        evaluation = self._evaluator.evaluate(shift, break_type, now, taken=taken)
        if evaluation is None or not evaluation.due:
            return []

        if ReminderKind.REMINDER_DUE in evaluation.due:
            last = self._history.last_sent(agent_id, break_type, ReminderKind.REMINDER_DUE, pos.anchor_date)
            if last is not None:
                evaluation = self._evaluator.evaluate(shift, break_type, now, taken=taken, last_reminder_at=last)

        return [
            self._build(agent_id, evaluation, kind)
            for kind in evaluation.due
            if self._dedup.permits(agent_id, break_type, kind, pos.anchor_date, now)
        ]

    @staticmethod
    def _build(agent_id: int, evaluation: BreakEvaluation, kind: ReminderKind) -> DueNotification:
        window = evaluation.window
        window_end = window.shift_start_minutes + window.end_offset
        title, message = messages.render(
            kind,
            window.break_type,
            minutes_until_start=evaluation.minutes_until_start,
            minutes_until_end=evaluation.minutes_until_end,
            minutes_elapsed=evaluation.minutes_since_window_start,
            window_end_minutes=window_end,
        )

        payload: dict = {
            "anchor_date": window.anchor_date.isoformat(),
            "window_start": window.start_time.strftime("%H:%M"),
            "window_end": window.end_time.strftime("%H:%M"),
        }
        if kind == ReminderKind.AVAILABLE_SOON:
            payload["minutes_until_start"] = evaluation.minutes_until_start
        elif kind in (ReminderKind.AVAILABLE_NOW, ReminderKind.REMINDER_DUE, ReminderKind.ENDING_SOON):
            payload["minutes_elapsed"] = evaluation.minutes_since_window_start
            payload["minutes_remaining"] = evaluation.minutes_until_end
        else:
            payload["minutes_since_end"] = -evaluation.minutes_until_end

        return DueNotification(
            agent_id=int(agent_id),
            break_type=window.break_type,
            reminder_kind=kind,
            title=title,
            message=message,
            anchor_date=window.anchor_date,
            slot=evaluation.slot(kind),
            payload=payload,
        )

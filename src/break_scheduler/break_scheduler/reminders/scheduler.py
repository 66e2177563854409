from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from ..core.constants import DEFAULT_TICK_SECONDS, DEFAULT_TIME_ZONE
from .service import ReminderService

logger = logging.getLogger(__name__)

JOB_ID = "check_break_reminders"

# ============================================================
# GLOBAL SAFETY LOCK
# Prevents the scheduler from starting more than once per process
# ============================================================
_scheduler: Optional["BreakReminderScheduler"] = None


class BreakReminderScheduler:
    """Fixed-interval poll loop around ReminderService.run_once.

    Overlapping runs are allowed up to `max_instances`; duplicate sends are
    prevented by the notification store, not by dropping ticks.
    """

    def __init__(
        self,
        service: ReminderService,
        *,
        interval_seconds: int = DEFAULT_TICK_SECONDS,
        timezone: str = DEFAULT_TIME_ZONE,
        max_instances: int = 2,
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        self._service = service
        self._interval_seconds = int(interval_seconds)
        self._max_instances = int(max_instances)
        self._scheduler = scheduler or BackgroundScheduler(timezone=timezone)

    @property
    def running(self) -> bool:
        return bool(self._scheduler.running)

    @property
    def interval_seconds(self) -> int:
        return self._interval_seconds

    def start(self) -> None:
        if self.running:
            logger.info("Break reminder scheduler already running, skipping start")
            return

        self._scheduler.add_job(
            self.tick,
            trigger="interval",
            seconds=self._interval_seconds,
            id=JOB_ID,
            replace_existing=True,
            max_instances=self._max_instances,
            coalesce=True,        # Merge missed runs if the process was suspended
        )
        self._scheduler.start()
        logger.info("Break reminder scheduler started: checking every %s seconds", self._interval_seconds)

    def shutdown(self, *, wait: bool = False) -> None:
        if self.running:
            self._scheduler.shutdown(wait=wait)
            logger.info("Break reminder scheduler stopped")

    def tick(self) -> int:
        """Job body: one pass; never lets an exception kill the schedule."""
        try:
            return self._service.run_once()
        except Exception:
            logger.exception("Break reminder pass failed, next tick will retry")
            return 0


def start_scheduler(service: ReminderService, settings) -> Optional[BreakReminderScheduler]:
    """
    Start the break reminder scheduler safely.

    - Respects ENABLE_SCHEDULER setting
    - Prevents double start (Flask reloader, repeated imports)
    """
    global _scheduler

    if not getattr(settings, "ENABLE_SCHEDULER", False):
        logger.info("Break reminder scheduler disabled via settings (ENABLE_SCHEDULER=0)")
        return None

    if _scheduler is not None:
        logger.info("Break reminder scheduler already initialized, skipping")
        return _scheduler

    _scheduler = BreakReminderScheduler(
        service,
        interval_seconds=int(getattr(settings, "REMINDER_INTERVAL_SECONDS", DEFAULT_TICK_SECONDS)),
        timezone=getattr(settings, "TIME_ZONE", DEFAULT_TIME_ZONE),
        max_instances=int(getattr(settings, "REMINDER_MAX_INSTANCES", 2)),
    )
    _scheduler.start()
    return _scheduler


def stop_scheduler() -> None:
    global _scheduler

    if _scheduler is not None:
        _scheduler.shutdown()
        _scheduler = None

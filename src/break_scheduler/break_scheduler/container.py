from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .breaks.mysql_break_session_repository import MySQLBreakSessionRepository
from .common.datetime_utils import Clock, SystemClock
from .core.constants import DEFAULT_TICK_TIMEOUT_SECONDS, DEFAULT_TIME_ZONE, DEFAULT_WORKERS
from .database.connection import DBConfig, DatabaseConnection
from .notifications.dispatcher import LoggingPublisher, NotificationDispatcher
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .reminders.service import ReminderService
from .shifts.mysql_shift_repository import MySQLShiftRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    clock: Clock

    shifts_repo: MySQLShiftRepository
    sessions_repo: MySQLBreakSessionRepository
    notifications_repo: MySQLNotificationRepository

    dispatcher: NotificationDispatcher
    reminder_service: ReminderService


def build_container(
    *,
    db_config: dict,
    time_zone: str = DEFAULT_TIME_ZONE,
    workers: int = DEFAULT_WORKERS,
    tick_timeout: float = DEFAULT_TICK_TIMEOUT_SECONDS,
    clock: Optional[Clock] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    clock = clock or SystemClock(time_zone)

    shifts_repo = MySQLShiftRepository(conn)
    sessions_repo = MySQLBreakSessionRepository(conn)
    notifications_repo = MySQLNotificationRepository(conn, zone=clock.zone)

    dispatcher = NotificationDispatcher(notifications_repo, clock, publisher=LoggingPublisher())
    reminder_service = ReminderService(
        shifts_repo,
        sessions_repo,
        notifications_repo,
        dispatcher,
        clock,
        max_workers=workers,
        tick_timeout=tick_timeout,
    )

    return Container(
        conn=conn,
        clock=clock,
        shifts_repo=shifts_repo,
        sessions_repo=sessions_repo,
        notifications_repo=notifications_repo,
        dispatcher=dispatcher,
        reminder_service=reminder_service,
    )

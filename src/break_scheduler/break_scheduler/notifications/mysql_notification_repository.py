from __future__ import annotations

import json
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ..core.constants import NOTIFICATION_CATEGORY
from ..core.enums import BreakType, ReminderKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import NotificationRecord
from .repository import NotificationHistoryStore


class MySQLNotificationRepository(NotificationHistoryStore):
    """notifications table; created_at is stored as wall clock in the canonical zone."""

    def __init__(self, conn_factory: DatabaseConnection, *, zone: ZoneInfo):
        self._conn_factory = conn_factory
        self._zone = zone

    def last_sent(
        self,
        agent_id: int,
        break_type: BreakType,
        reminder_kind: ReminderKind,
        anchor_date: date,
    ) -> Optional[datetime]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT MAX(created_at) AS last_sent
                FROM notifications
                WHERE user_id=%s AND category=%s AND break_type=%s AND reminder_type=%s AND anchor_date=%s
                """,
                (
                    int(agent_id),
                    NOTIFICATION_CATEGORY,
                    BreakType(break_type).value,
                    ReminderKind(reminder_kind).value,
                    anchor_date,
                ),
            )
            r = fetchone(cur)
            if not r or r.get("last_sent") is None:
                return None
            return r["last_sent"].replace(tzinfo=self._zone)

    def insert_if_absent(self, record: NotificationRecord) -> Optional[int]:
        created_at = record.created_at.astimezone(self._zone).replace(tzinfo=None)
        with db_cursor(self._conn_factory, write=True) as (_, cur):
            # INSERT IGNORE + uq_break_notification: the dedup check and the insert are one statement.
            cur.execute(
                """
                INSERT IGNORE INTO notifications(
                    user_id, category, type, title, message,
                    break_type, reminder_type, anchor_date, slot, payload, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(record.agent_id),
                    record.category,
                    "info",
                    record.title,
                    record.message,
                    record.break_type.value,
                    record.reminder_kind.value,
                    record.anchor_date,
                    int(record.slot),
                    json.dumps(record.payload),
                    created_at,
                ),
            )
            if cur.rowcount == 0:
                return None
            return int(cur.lastrowid)

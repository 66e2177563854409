from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.enums import BreakType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import BreakSession
from .repository import BreakSessionStore


class MySQLBreakSessionRepository(BreakSessionStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def has_taken_break(self, agent_id: int, break_type: BreakType, break_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS taken
                FROM break_sessions
                WHERE agent_user_id=%s AND break_type=%s AND break_date=%s AND end_time IS NOT NULL
                LIMIT 1
                """,
                (int(agent_id), BreakType(break_type).value, break_date),
            )
            return fetchone(cur) is not None

    def find_open_session(self, agent_id: int, break_type: BreakType, break_date: date) -> Optional[BreakSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, agent_user_id, break_type, break_date, start_time, end_time
                FROM break_sessions
                WHERE agent_user_id=%s AND break_type=%s AND break_date=%s AND end_time IS NULL
                ORDER BY start_time DESC
                LIMIT 1
                """,
                (int(agent_id), BreakType(break_type).value, break_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return BreakSession(
                session_id=int(r["id"]),
                agent_id=int(r["agent_user_id"]),
                break_type=BreakType(r["break_type"]),
                break_date=r["break_date"],
                start_time=r["start_time"],
                end_time=r.get("end_time"),
            )

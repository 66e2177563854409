from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AgentShift
from .repository import AgentShiftProvider


class MySQLShiftRepository(AgentShiftProvider):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_agent_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id
                FROM users
                WHERE user_type='Agent' AND is_active=1
                ORDER BY id
                """
            )
            return [int(r["id"]) for r in fetchall(cur)]

    def get_shift(self, agent_id: int) -> Optional[AgentShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT agent_user_id, shift_period, shift_time
                FROM job_info
                WHERE agent_user_id=%s
                """,
                (int(agent_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AgentShift(
                agent_id=int(r["agent_user_id"]),
                shift_text=r.get("shift_time"),
                shift_period=r.get("shift_period"),
            )

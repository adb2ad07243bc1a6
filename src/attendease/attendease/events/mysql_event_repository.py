from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_count, fetchall, fetchone
from .model import Event
from .repository import EventRepository


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: str) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT event_id, name, description FROM events WHERE event_id=%s", (str(event_id),))
            r = fetchone(cur)
            if not r:
                return None
            return Event(event_id=str(r["event_id"]), name=r["name"], description=r["description"])

    def list_all(self) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT event_id, name, description FROM events ORDER BY name")
            return [
                Event(event_id=str(r["event_id"]), name=r["name"], description=r["description"])
                for r in fetchall(cur)
            ]

    def create(self, *, name: str, description: str) -> str:
        event_id = uuid.uuid4().hex
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO events(event_id, name, description) VALUES(%s,%s,%s)",
                (event_id, name, description),
            )
        return event_id

    def update(self, event_id: str, *, name: str, description: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE events SET name=%s, description=%s WHERE event_id=%s",
                (name, description, str(event_id)),
            )
            if cur.rowcount > 0:
                return True
            # MySQL reports 0 affected rows when nothing changed
            cur.execute("SELECT COUNT(*) AS n FROM events WHERE event_id=%s", (str(event_id),))
            return fetch_count(cur) > 0

    def delete(self, event_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM events WHERE event_id=%s", (str(event_id),))
            return cur.rowcount > 0

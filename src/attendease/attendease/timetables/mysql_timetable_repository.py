from __future__ import annotations

import uuid
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_count, fetchall, fetchone, where_clause
from .model import NewTimetableEntry, TimetableEntry
from .repository import TimetableRepository

# (course, semester) pairs are compared byte for byte, whatever the column collation.
COURSE_EQUALS = "course = %s COLLATE utf8mb4_bin"

_COLUMNS = "entry_id, entry_date, day, time_slot, subject_name, faculty_name, faculty_id, course, semester"


def _row_to_entry(r: Dict[str, Any]) -> TimetableEntry:
    return TimetableEntry(
        entry_id=str(r["entry_id"]),
        day=r["day"],
        time_slot=r["time_slot"],
        subject_name=r["subject_name"],
        faculty_name=r.get("faculty_name") or "",
        faculty_id=r.get("faculty_id") or "",
        course=r["course"],
        semester=int(r["semester"]),
        entry_date=r.get("entry_date"),
    )


def _params(entry: NewTimetableEntry) -> tuple:
    return (
        entry.entry_date,
        entry.day,
        entry.time_slot,
        entry.subject_name,
        entry.faculty_name,
        entry.faculty_id,
        entry.course,
        int(entry.semester),
    )


def _filters(course: Optional[str], semester: Optional[int]) -> tuple[str, list[object]]:
    clauses: list[str] = []
    params: list[object] = []
    if course is not None:
        clauses.append(COURSE_EQUALS)
        params.append(course)
    if semester is not None:
        clauses.append("semester=%s")
        params.append(int(semester))
    return where_clause(clauses), params


class MySQLTimetableRepository(TimetableRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entry_id: str) -> Optional[TimetableEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM timetables WHERE entry_id=%s", (str(entry_id),))
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def list_entries(self, *, course: Optional[str] = None, semester: Optional[int] = None) -> Sequence[TimetableEntry]:
        where, params = _filters(course, semester)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM timetables WHERE {where} ORDER BY entry_date, time_slot",
                tuple(params),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def create(self, entry: NewTimetableEntry) -> str:
        entry_id = uuid.uuid4().hex
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO timetables({_COLUMNS}) VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)",
                (entry_id,) + _params(entry),
            )
        return entry_id

    def insert_many(self, entries: Sequence[NewTimetableEntry]) -> int:
        if not entries:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                f"INSERT INTO timetables({_COLUMNS}) VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)",
                [(uuid.uuid4().hex,) + _params(e) for e in entries],
            )
        return len(entries)

    def update(self, entry_id: str, entry: NewTimetableEntry) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE timetables
                SET entry_date=%s, day=%s, time_slot=%s, subject_name=%s,
                    faculty_name=%s, faculty_id=%s, course=%s, semester=%s
                WHERE entry_id=%s
                """,
                _params(entry) + (str(entry_id),),
            )
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT COUNT(*) AS n FROM timetables WHERE entry_id=%s", (str(entry_id),))
            return fetch_count(cur) > 0

    def delete(self, entry_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM timetables WHERE entry_id=%s", (str(entry_id),))
            return cur.rowcount > 0

    def delete_by_course_semester(self, *, course: str, semester: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM timetables WHERE {COURSE_EQUALS} AND semester=%s", (course, int(semester)))
            return int(cur.rowcount)

    def delete_matching(self, *, course: Optional[str] = None, semester: Optional[int] = None) -> int:
        where, params = _filters(course, semester)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM timetables WHERE {where}", tuple(params))
            return int(cur.rowcount)

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM timetables")
            return fetch_count(cur)

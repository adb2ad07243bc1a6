from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_count, fetchall, like_contains, placeholders, where_clause
from .model import MissedClass, MissedClassRequest, NewMissedClassRequest
from .repository import RequestRepository

_COLUMNS = """
    request_id, student_id, student_name, student_prn, reason, event_id,
    created_at, status, approver_id, approver_name, comment, decided_at
"""


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _load_classes(cur, request_ids: List[str]) -> Dict[str, List[MissedClass]]:
        out: Dict[str, List[MissedClass]] = {rid: [] for rid in request_ids}
        if not request_ids:
            return out
        cur.execute(
            f"""
            SELECT request_id, class_id, subject_name, time_slot, day
            FROM request_missed_classes
            WHERE request_id IN ({placeholders(request_ids)})
            ORDER BY request_id, position
            """,
            tuple(request_ids),
        )
        for r in fetchall(cur):
            out[str(r["request_id"])].append(
                MissedClass(
                    class_id=str(r["class_id"]),
                    subject_name=r["subject_name"],
                    time_slot=r["time_slot"],
                    day=r["day"],
                )
            )
        return out

    def _select(self, where: str, params: Sequence[Any], order: str, limit: Optional[int] = None) -> List[MissedClassRequest]:
        sql = f"SELECT {_COLUMNS} FROM requests WHERE {where} ORDER BY {order}"
        args = list(params)
        if limit is not None:
            sql += " LIMIT %s"
            args.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(args))
            rows = fetchall(cur)
            classes = self._load_classes(cur, [str(r["request_id"]) for r in rows])

        return [
            MissedClassRequest(
                request_id=str(r["request_id"]),
                student_id=str(r["student_id"]),
                student_name=r.get("student_name") or "",
                student_prn=r.get("student_prn"),
                missed_classes=tuple(classes.get(str(r["request_id"]), [])),
                reason=r["reason"],
                created_at=r["created_at"],
                status=RequestStatus(r["status"]),
                approver_id=str(r["approver_id"]),
                approver_name=r.get("approver_name") or "",
                event_id=r.get("event_id"),
                comment=r.get("comment"),
                decided_at=r.get("decided_at"),
            )
            for r in rows
        ]

    def create(self, request: NewMissedClassRequest) -> str:
        request_id = uuid.uuid4().hex
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO requests(
                    request_id, student_id, student_name, student_prn, reason, event_id,
                    created_at, status, approver_id, approver_name
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    request_id,
                    request.student_id,
                    request.student_name,
                    request.student_prn,
                    request.reason,
                    request.event_id,
                    request.created_at,
                    RequestStatus.PENDING.value,
                    request.approver_id,
                    request.approver_name,
                ),
            )
            cur.executemany(
                """
                INSERT INTO request_missed_classes(request_id, position, class_id, subject_name, time_slot, day)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                [
                    (request_id, i, c.class_id, c.subject_name, c.time_slot, c.day)
                    for i, c in enumerate(request.missed_classes)
                ],
            )
        return request_id

    def get_by_id(self, request_id: str) -> Optional[MissedClassRequest]:
        rows = self._select("request_id=%s", [str(request_id)], "created_at")
        return rows[0] if rows else None

    def list_for_student(self, student_id: str, *, limit: Optional[int] = None) -> Sequence[MissedClassRequest]:
        return self._select("student_id=%s", [str(student_id)], "created_at DESC", limit)

    def list_for_approver(
        self,
        approver_id: str,
        *,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[MissedClassRequest]:
        clauses = ["approver_id=%s"]
        params: list[object] = [str(approver_id)]
        if status:
            clauses.append("status=%s")
            params.append(status.value)
        return self._select(where_clause(clauses), params, "created_at ASC")

    def list_all(
        self,
        *,
        status: Optional[RequestStatus] = None,
        term: Optional[str] = None,
        limit: int = 500,
    ) -> Sequence[MissedClassRequest]:
        clauses: list[str] = []
        params: list[object] = []
        if status:
            clauses.append("status=%s")
            params.append(status.value)
        if term:
            pattern = like_contains(term)
            clauses.append(
                """(
                    student_name LIKE %s OR student_prn LIKE %s
                    OR EXISTS (
                        SELECT 1 FROM request_missed_classes m
                        WHERE m.request_id = requests.request_id AND m.subject_name LIKE %s
                    )
                )"""
            )
            params.extend([pattern, pattern, pattern])
        return self._select(where_clause(clauses), params, "created_at DESC", limit)

    def decide(
        self,
        *,
        request_id: str,
        status: RequestStatus,
        comment: Optional[str],
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE requests
                SET status=%s, comment=%s, decided_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, comment, decided_at, str(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def count(self, *, status: Optional[RequestStatus] = None) -> int:
        clauses: list[str] = []
        params: list[object] = []
        if status:
            clauses.append("status=%s")
            params.append(status.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM requests WHERE {where_clause(clauses)}", tuple(params))
            return fetch_count(cur)

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_count, fetchall, fetchone
from .model import PasswordResetToken, User
from .repository import PasswordResetRepository, UserRepository

_USER_COLUMNS = "user_id, name, email, password_hash, role, prn, course, semester, subjects, is_active"


def _join_subjects(subjects: Sequence[str]) -> Optional[str]:
    return ",".join(subjects) if subjects else None


def _row_to_user(row: Dict[str, Any]) -> User:
    subjects = row.get("subjects") or ""
    semester = row.get("semester")
    return User(
        user_id=str(row["user_id"]),
        name=row["name"],
        email=row["email"],
        role=Role(row["role"]),
        password_hash=row.get("password_hash") or "",
        prn=row.get("prn"),
        course=row.get("course"),
        semester=int(semester) if semester is not None else None,
        subjects=tuple(s for s in subjects.split(",") if s),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (str(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        prn: Optional[str] = None,
        course: Optional[str] = None,
        semester: Optional[int] = None,
        subjects: Sequence[str] = (),
    ) -> str:
        user_id = uuid.uuid4().hex
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(user_id, name, email, password_hash, role, prn, course, semester, subjects, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (user_id, name, email, password_hash, role.value, prn, course, semester, _join_subjects(subjects)),
            )
        return user_id

    def update_user(
        self,
        *,
        user_id: str,
        name: str,
        email: str,
        role: Role,
        prn: Optional[str] = None,
        course: Optional[str] = None,
        semester: Optional[int] = None,
        subjects: Sequence[str] = (),
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET name=%s, email=%s, role=%s, prn=%s, course=%s, semester=%s, subjects=%s
                WHERE user_id=%s
                """,
                (name, email, role.value, prn, course, semester, _join_subjects(subjects), str(user_id)),
            )
            # MySQL reports 0 affected rows when nothing changed; check existence instead.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT COUNT(*) AS n FROM users WHERE user_id=%s", (str(user_id),))
            return fetch_count(cur) > 0

    def set_password(self, user_id: str, *, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, str(user_id)))
            return cur.rowcount > 0

    def delete_by_id(self, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (str(user_id),))
            return cur.rowcount > 0

    def list_all(self, *, role: Optional[Role] = None) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            if role is None:
                cur.execute(f"SELECT {_USER_COLUMNS} FROM users ORDER BY name")
            else:
                cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE role=%s ORDER BY name", (role.value,))
            return [_row_to_user(r) for r in fetchall(cur)]

    def count(self, *, role: Optional[Role] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if role is None:
                cur.execute("SELECT COUNT(*) AS n FROM users")
            else:
                cur.execute("SELECT COUNT(*) AS n FROM users WHERE role=%s", (role.value,))
            return fetch_count(cur)


class MySQLPasswordResetRepository(PasswordResetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_token(self, *, token: str, user_id: str, expires_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO password_reset_tokens(token, user_id, expires_at) VALUES(%s,%s,%s)",
                (token, str(user_id), expires_at),
            )

    def get_token(self, token: str) -> Optional[PasswordResetToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT token, user_id, expires_at, used_at FROM password_reset_tokens WHERE token=%s",
                (token,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return PasswordResetToken(
                token=r["token"],
                user_id=str(r["user_id"]),
                expires_at=r["expires_at"],
                used_at=r.get("used_at"),
            )

    def mark_used(self, token: str, *, used_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE password_reset_tokens SET used_at=%s WHERE token=%s AND used_at IS NULL",
                (used_at, token),
            )
            return cur.rowcount > 0

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import mysql.connector
from werkzeug.security import generate_password_hash

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


@dataclass(frozen=True)
class DemoUser:
    name: str
    email: str
    password: str
    role: str
    prn: Optional[str] = None
    course: Optional[str] = None
    semester: Optional[int] = None
    subjects: Optional[str] = None


# Names match the faculty column of the sample timetable in seed.sql.
DEMO_USERS = (
    DemoUser("Admin Demo", "admin@attendease.local", "admin123", "admin"),
    DemoUser("Ravi Kiran", "ravi.kiran@attendease.local", "faculty123", "faculty", subjects="Algorithms,Data Structures"),
    DemoUser("Meera Nair", "meera.nair@attendease.local", "faculty123", "faculty", subjects="Operating Systems"),
    DemoUser(
        "Student Demo",
        "student@attendease.local",
        "student123",
        "student",
        prn="PRN0001",
        course="CS",
        semester=3,
    ),
)


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "attendease_db")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Minimal SQL splitter for schema/seed files (handles ';' inside quotes and -- comments)."""
    buf: list[str] = []
    in_single = False
    in_double = False
    in_comment = False
    escape = False

    for i, ch in enumerate(sql):
        if in_comment:
            if ch == "\n":
                in_comment = False
                buf.append(ch)
            continue

        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\" and (in_single or in_double):
            buf.append(ch)
            escape = True
            continue

        if ch == "-" and not in_single and not in_double and sql[i : i + 2] == "--":
            in_comment = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> None:
    for stmt in iter_sql_statements(sql):
        cur.execute(stmt)


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def _apply_file(db_config: dict, path: str | Path) -> None:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        _exec_sql(cur, sql)
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _apply_file(db_config, schema_path)
    logger.info("Applied schema %s", schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _apply_file(db_config, seed_path)
    logger.info("Applied seed %s", seed_path)


def ensure_demo_users(db_config: dict, users: Iterable[DemoUser] = DEMO_USERS) -> None:
    """Create or refresh the demo accounts with freshly hashed passwords."""
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor(dictionary=True)

        for u in users:
            password_hash = generate_password_hash(u.password)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (u.email,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    """
                    UPDATE users
                    SET name=%s, password_hash=%s, role=%s, prn=%s, course=%s, semester=%s, subjects=%s, is_active=1
                    WHERE email=%s
                    """,
                    (u.name, password_hash, u.role, u.prn, u.course, u.semester, u.subjects, u.email),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (user_id, name, email, password_hash, role, prn, course, semester, subjects)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (uuid.uuid4().hex, u.name, u.email, password_hash, u.role, u.prn, u.course, u.semester, u.subjects),
                )

        # Link seeded timetable rows to the demo faculty by name.
        cur.execute(
            """
            UPDATE timetables t
            JOIN users u ON u.role='faculty' AND LOWER(TRIM(u.name))=LOWER(TRIM(t.faculty_name))
            SET t.faculty_id=u.user_id
            WHERE t.faculty_id IS NULL OR t.faculty_id=''
            """
        )

        conn.commit()
        logger.info("Demo users ready")
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()

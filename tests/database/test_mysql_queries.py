from __future__ import annotations

from pathlib import Path

from src.attendease.attendease.core.enums import RequestStatus
from src.attendease.attendease.database.bootstrap import iter_sql_statements
from src.attendease.attendease.database.mysql_base import like_contains
from src.attendease.attendease.requests.mysql_request_repository import MySQLRequestRepository
from src.attendease.attendease.timetables.mysql_timetable_repository import MySQLTimetableRepository

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


class RecordingCursor:
    def __init__(self, log):
        self._log = log
        self.rowcount = 0

    def execute(self, sql, params=()):
        self._log.append((" ".join(sql.split()), tuple(params)))

    def fetchall(self):
        return []

    def fetchone(self):
        return None

    def close(self):
        pass


class RecordingConnection:
    def __init__(self, log):
        self._log = log

    def cursor(self, dictionary=True):
        return RecordingCursor(self._log)

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        pass


class RecordingFactory:
    def __init__(self):
        self.statements = []

    def connect(self, *, with_database=True):
        return RecordingConnection(self.statements)


def test_like_contains_escapes_wildcards():
    assert like_contains("50%_a\\b") == "%50\\%\\_a\\\\b%"


def test_request_search_runs_in_the_query_before_the_limit():
    factory = RecordingFactory()
    MySQLRequestRepository(factory).list_all(status=RequestStatus.PENDING, term="priya", limit=500)

    sql, params = factory.statements[0]
    assert sql.index("student_name LIKE %s") < sql.index("LIMIT %s")
    assert "m.subject_name LIKE %s" in sql
    assert params == ("Pending", "%priya%", "%priya%", "%priya%", 500)


def test_request_listing_without_term_has_no_search_clause():
    factory = RecordingFactory()
    MySQLRequestRepository(factory).list_all()

    sql, params = factory.statements[0]
    assert "LIKE" not in sql
    assert params == (500,)


def test_replacing_a_pair_compares_course_exactly():
    factory = RecordingFactory()
    MySQLTimetableRepository(factory).delete_by_course_semester(course="cs", semester=3)

    sql, params = factory.statements[0]
    assert sql == "DELETE FROM timetables WHERE course = %s COLLATE utf8mb4_bin AND semester=%s"
    assert params == ("cs", 3)


def test_course_columns_use_binary_collation():
    statements = {
        s.split("(")[0].split()[-1]: s
        for s in iter_sql_statements(SCHEMA.read_text(encoding="utf-8"))
        if s.upper().startswith("CREATE TABLE")
    }

    assert "course       VARCHAR(128) COLLATE utf8mb4_bin NOT NULL" in statements["timetables"]
    assert "course        VARCHAR(128) COLLATE utf8mb4_bin NULL" in statements["users"]

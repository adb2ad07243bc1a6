from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta

import pytest
from werkzeug.security import generate_password_hash

from src.attendease.attendease.core.enums import RequestStatus, Role
from src.attendease.attendease.events.model import Event
from src.attendease.attendease.requests.model import MissedClassRequest
from src.attendease.attendease.timetables.model import TimetableEntry
from src.attendease.attendease.users.model import PasswordResetToken, User
from src.attendease.attendease.users.service import SessionUser


class FakeUsersRepo:
    def __init__(self):
        self._users: dict[str, User] = {}

    def add(self, user: User) -> User:
        self._users[user.user_id] = user
        return user

    def get_by_id(self, user_id):
        return self._users.get(str(user_id))

    def get_by_email(self, email):
        return next((u for u in self._users.values() if u.email == email), None)

    def create_user(self, *, name, email, password_hash, role, prn=None, course=None, semester=None, subjects=()):
        user_id = uuid.uuid4().hex
        self._users[user_id] = User(
            user_id=user_id,
            name=name,
            email=email,
            role=role,
            password_hash=password_hash,
            prn=prn,
            course=course,
            semester=semester,
            subjects=tuple(subjects),
        )
        return user_id

    def update_user(self, *, user_id, name, email, role, prn=None, course=None, semester=None, subjects=()):
        user = self._users.get(str(user_id))
        if not user:
            return False
        self._users[user.user_id] = replace(
            user,
            name=name,
            email=email,
            role=role,
            prn=prn,
            course=course,
            semester=semester,
            subjects=tuple(subjects),
        )
        return True

    def set_password(self, user_id, *, password_hash):
        user = self._users.get(str(user_id))
        if not user:
            return False
        self._users[user.user_id] = replace(user, password_hash=password_hash)
        return True

    def delete_by_id(self, user_id):
        return self._users.pop(str(user_id), None) is not None

    def list_all(self, *, role=None):
        users = [u for u in self._users.values() if role is None or u.role == role]
        return sorted(users, key=lambda u: u.name)

    def count(self, *, role=None):
        return len(self.list_all(role=role))


class FakeResetTokensRepo:
    def __init__(self):
        self.tokens = {}

    def create_token(self, *, token, user_id, expires_at):
        self.tokens[token] = PasswordResetToken(token=token, user_id=user_id, expires_at=expires_at)

    def get_token(self, token):
        return self.tokens.get(token)

    def mark_used(self, token, *, used_at):
        record = self.tokens.get(token)
        if not record or record.used_at is not None:
            return False
        self.tokens[token] = replace(record, used_at=used_at)
        return True


class FakeTimetablesRepo:
    def __init__(self, entries=()):
        self._entries: dict[str, TimetableEntry] = {}
        self.calls: list[tuple] = []
        for e in entries:
            self._entries[e.entry_id] = e

    def _store(self, entry_id, entry):
        self._entries[entry_id] = TimetableEntry(
            entry_id=entry_id,
            day=entry.day,
            time_slot=entry.time_slot,
            subject_name=entry.subject_name,
            faculty_name=entry.faculty_name,
            faculty_id=entry.faculty_id,
            course=entry.course,
            semester=entry.semester,
            entry_date=entry.entry_date,
        )

    def get_by_id(self, entry_id):
        return self._entries.get(str(entry_id))

    def list_entries(self, *, course=None, semester=None):
        return [
            e
            for e in self._entries.values()
            if (course is None or e.course == course) and (semester is None or e.semester == semester)
        ]

    def create(self, entry):
        entry_id = uuid.uuid4().hex
        self._store(entry_id, entry)
        return entry_id

    def insert_many(self, entries):
        self.calls.append(("insert_many", len(entries)))
        for e in entries:
            self._store(uuid.uuid4().hex, e)
        return len(entries)

    def update(self, entry_id, entry):
        if entry_id not in self._entries:
            return False
        self._store(entry_id, entry)
        return True

    def delete(self, entry_id):
        return self._entries.pop(str(entry_id), None) is not None

    def delete_by_course_semester(self, *, course, semester):
        self.calls.append(("delete", course, semester))
        doomed = [k for k, e in self._entries.items() if e.course == course and e.semester == semester]
        for k in doomed:
            del self._entries[k]
        return len(doomed)

    def delete_matching(self, *, course=None, semester=None):
        doomed = [e.entry_id for e in self.list_entries(course=course, semester=semester)]
        for k in doomed:
            del self._entries[k]
        return len(doomed)

    def count(self):
        return len(self._entries)


class FakeEventsRepo:
    def __init__(self, events=()):
        self._events = {e.event_id: e for e in events}

    def get_by_id(self, event_id):
        return self._events.get(str(event_id))

    def list_all(self):
        return sorted(self._events.values(), key=lambda e: e.name)

    def create(self, *, name, description):
        event_id = uuid.uuid4().hex
        self._events[event_id] = Event(event_id=event_id, name=name, description=description)
        return event_id

    def update(self, event_id, *, name, description):
        if event_id not in self._events:
            return False
        self._events[event_id] = Event(event_id=event_id, name=name, description=description)
        return True

    def delete(self, event_id):
        return self._events.pop(str(event_id), None) is not None


class FakeRequestsRepo:
    def __init__(self):
        self._requests: dict[str, MissedClassRequest] = {}
        self.created = []

    def create(self, request):
        request_id = uuid.uuid4().hex
        self.created.append(request)
        self._requests[request_id] = MissedClassRequest(
            request_id=request_id,
            student_id=request.student_id,
            student_name=request.student_name,
            student_prn=request.student_prn,
            missed_classes=request.missed_classes,
            reason=request.reason,
            created_at=request.created_at,
            status=RequestStatus.PENDING,
            approver_id=request.approver_id,
            approver_name=request.approver_name,
            event_id=request.event_id,
        )
        return request_id

    def add(self, request: MissedClassRequest) -> MissedClassRequest:
        self._requests[request.request_id] = request
        return request

    def get_by_id(self, request_id):
        return self._requests.get(str(request_id))

    def list_for_student(self, student_id, *, limit=None):
        rows = sorted(
            (r for r in self._requests.values() if r.student_id == student_id),
            key=lambda r: r.created_at,
            reverse=True,
        )
        return rows[:limit] if limit is not None else rows

    def list_for_approver(self, approver_id, *, status=None):
        rows = [r for r in self._requests.values() if r.approver_id == approver_id and (status is None or r.status == status)]
        return sorted(rows, key=lambda r: r.created_at)

    def list_all(self, *, status=None, term=None, limit=500):
        rows = [r for r in self._requests.values() if status is None or r.status == status]
        if term:
            needle = term.casefold()
            rows = [
                r
                for r in rows
                if needle in r.student_name.casefold()
                or needle in (r.student_prn or "").casefold()
                or any(needle in c.subject_name.casefold() for c in r.missed_classes)
            ]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)[:limit]

    def decide(self, *, request_id, status, comment, decided_at):
        req = self._requests.get(str(request_id))
        if not req or req.status != RequestStatus.PENDING:
            return False
        self._requests[req.request_id] = replace(req, status=status, comment=comment, decided_at=decided_at)
        return True

    def count(self, *, status=None):
        return len([r for r in self._requests.values() if status is None or r.status == status])


def make_user(user_id, name, role, *, email=None, password="secret123", **fields) -> User:
    return User(
        user_id=user_id,
        name=name,
        email=email or f"{user_id}@example.edu",
        role=role,
        password_hash=generate_password_hash(password),
        **fields,
    )


def entry(entry_id, subject, faculty_id="", faculty_name="", *, day="Monday", slot="09:00-10:00", course="CS", semester=3):
    return TimetableEntry(
        entry_id=entry_id,
        day=day,
        time_slot=slot,
        subject_name=subject,
        faculty_name=faculty_name,
        faculty_id=faculty_id,
        course=course,
        semester=semester,
        entry_date=date(2026, 1, 5),
    )


@pytest.fixture
def admin():
    return SessionUser(user_id="a1", name="Admin", email="a1@example.edu", role=Role.ADMIN)


@pytest.fixture
def faculty_bob():
    return SessionUser(user_id="f1", name="Bob", email="f1@example.edu", role=Role.FACULTY)


@pytest.fixture
def faculty_carol():
    return SessionUser(user_id="f2", name="Carol", email="f2@example.edu", role=Role.FACULTY)


@pytest.fixture
def student():
    return SessionUser(
        user_id="s1",
        name="Sam Student",
        email="s1@example.edu",
        role=Role.STUDENT,
        prn="PRN42",
        course="CS",
        semester=3,
    )


@pytest.fixture
def users_repo():
    repo = FakeUsersRepo()
    repo.add(make_user("a1", "Admin", Role.ADMIN))
    repo.add(make_user("f1", "Bob", Role.FACULTY, subjects=("Algorithms",)))
    repo.add(make_user("f2", "Carol", Role.FACULTY, subjects=("Networks",)))
    repo.add(make_user("s1", "Sam Student", Role.STUDENT, prn="PRN42", course="CS", semester=3))
    return repo


@pytest.fixture
def reset_tokens_repo():
    return FakeResetTokensRepo()


@pytest.fixture
def timetables_repo():
    return FakeTimetablesRepo(
        [
            entry("c1", "Algorithms", "f1", "Bob", slot="09:00-10:00"),
            entry("c2", "Networks", "f2", "Carol", slot="10:00-11:00"),
            entry("c3", "Algorithms Lab", "f1", "Bob", day="Tuesday", slot="11:00-12:00"),
            entry("c4", "Library", day="Tuesday", slot="12:00-13:00"),
            entry("x1", "Thermodynamics", "f2", "Carol", course="ME", semester=1),
        ]
    )


@pytest.fixture
def events_repo():
    return FakeEventsRepo([Event(event_id="e1", name="Sports Meet", description="Annual sports meet")])


@pytest.fixture
def requests_repo():
    return FakeRequestsRepo()


class FixedClock:
    def __init__(self, start=datetime(2026, 3, 2, 9, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def make_entry():
    return entry


@pytest.fixture
def make_request():
    def factory(request_id, *, approver_id="f1", approver_name="Bob", status=RequestStatus.PENDING, minutes=0, **fields):
        base = dict(
            request_id=request_id,
            student_id="s1",
            student_name="Sam Student",
            student_prn="PRN42",
            missed_classes=(),
            reason="Fever",
            created_at=datetime(2026, 3, 1, 8, 0, 0) + timedelta(minutes=minutes),
            status=status,
            approver_id=approver_id,
            approver_name=approver_name,
        )
        base.update(fields)
        return MissedClassRequest(**base)

    return factory

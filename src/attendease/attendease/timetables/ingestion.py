"""Timetable CSV ingestion: parse -> normalize -> validate -> resolve faculty.

The batch commit (replace by course/semester, then insert) lives in
TimetableService so it can talk to the repository.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional, Sequence

from ..common.datetime_utils import normalize_weekday, parse_calendar_date, weekday_name
from ..common.validators import coerce_positive_int, require_max_length
from ..core.constants import (
    MAX_COURSE_LENGTH,
    MAX_FACULTY_NAME_LENGTH,
    MAX_SEMESTER,
    MAX_SUBJECT_LENGTH,
    MAX_TIME_SLOT_LENGTH,
)
from ..core.enums import Role, ScheduleMode
from ..core.exceptions import ValidationError
from ..users.model import User
from .model import NewTimetableEntry

logger = logging.getLogger(__name__)

# Canonical field -> accepted source headers, checked in order.
HEADER_SPELLINGS: dict[str, tuple[str, ...]] = {
    "Date": ("Date", "date"),
    "Day": ("Day", "day"),
    "TimeSlot": ("Time Slot", "time slot", "time_slot", "TimeSlot", "timeslot"),
    "Subject": ("Subject", "subject", "subject_name"),
    "Faculty": ("Faculty", "faculty", "faculty_name"),
    "Course": ("Course", "course"),
    "Semester": ("Semester", "semester"),
}


@dataclass(frozen=True)
class ValidatedRow:
    day: str
    time_slot: str
    subject: str
    faculty: str
    course: str
    semester: int
    entry_date: Optional[date] = None

    def resolve(self, faculty_id: str) -> NewTimetableEntry:
        return NewTimetableEntry(
            day=self.day,
            time_slot=self.time_slot,
            subject_name=self.subject,
            faculty_name=self.faculty,
            faculty_id=faculty_id,
            course=self.course,
            semester=self.semester,
            entry_date=self.entry_date,
        )


def parse_csv(data: bytes) -> list[dict[str, Any]]:
    """Parse CSV bytes (header row required) into one dict per data row."""
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError("Could not parse the CSV file: it is not UTF-8 text")

    reader = csv.DictReader(io.StringIO(text, newline=""))
    try:
        rows = list(reader)
    except csv.Error as e:
        raise ValidationError(f"Could not parse the CSV file: {e}")

    if not reader.fieldnames:
        raise ValidationError("Could not parse the CSV file: a header row is required")
    return rows


def normalize_row(row: Any) -> Optional[dict[str, Any]]:
    """Map one raw record onto the canonical keys.

    Returns None for anything that is not a mapping. For each canonical key the
    first accepted spelling that is present with a non-None value wins.
    """
    if not isinstance(row, Mapping):
        return None

    source: dict[str, Any] = {}
    for key, value in row.items():
        if not isinstance(key, str):
            # csv.DictReader files surplus cells under None
            continue
        source.setdefault(key.replace("\ufeff", "").strip(), value)

    normalized: dict[str, Any] = {}
    for canonical, spellings in HEADER_SPELLINGS.items():
        normalized[canonical] = next(
            (source[name] for name in spellings if source.get(name) is not None),
            None,
        )
    return normalized


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _required(row: Mapping[str, Any], key: str, label: str, max_len: Optional[int] = None) -> str:
    value = _text(row.get(key))
    if not value:
        raise ValidationError(f"{label} cannot be empty")
    return require_max_length(value, label, max_len) if max_len else value


def check_row(row: Mapping[str, Any], mode: ScheduleMode) -> ValidatedRow:
    """Validate one normalized row, raising ValidationError with the reason."""
    entry_date: Optional[date] = None
    if mode == ScheduleMode.DATE:
        raw_date = _required(row, "Date", "Date")
        try:
            entry_date = parse_calendar_date(raw_date)
        except ValueError:
            raise ValidationError(f"Date {raw_date!r} is not a valid date")
        day = weekday_name(entry_date)
    else:
        raw_day = _required(row, "Day", "Day")
        day = normalize_weekday(raw_day)
        if not day:
            raise ValidationError(f"Day {raw_day!r} is not a weekday")

    semester = coerce_positive_int(row.get("Semester"), "Semester")
    if semester > MAX_SEMESTER:
        raise ValidationError("Semester is out of range")

    return ValidatedRow(
        day=day,
        time_slot=_required(row, "TimeSlot", "Time Slot", MAX_TIME_SLOT_LENGTH),
        subject=_required(row, "Subject", "Subject", MAX_SUBJECT_LENGTH),
        faculty=require_max_length(_text(row.get("Faculty")), "Faculty", MAX_FACULTY_NAME_LENGTH),
        course=_required(row, "Course", "Course", MAX_COURSE_LENGTH),
        semester=semester,
        entry_date=entry_date,
    )


def validate_row(row: Optional[Mapping[str, Any]], mode: ScheduleMode) -> Optional[ValidatedRow]:
    """Tagged per-row result: a ValidatedRow, or None when the row is rejected."""
    if row is None:
        return None
    try:
        return check_row(row, mode)
    except ValidationError as e:
        logger.debug("Skipping timetable row %r: %s", dict(row), e)
        return None


def validate_rows(rows: Sequence[Any], mode: ScheduleMode) -> tuple[list[ValidatedRow], int]:
    """Normalize and validate every row; returns (valid rows, skipped count)."""
    valid: list[ValidatedRow] = []
    for raw in rows:
        checked = validate_row(normalize_row(raw), mode)
        if checked is not None:
            valid.append(checked)
    return valid, len(rows) - len(valid)


class FacultyDirectory:
    """Faculty name -> id lookup, case-insensitive and trimmed.

    Punctuation is significant: "Dr Ravi Kiran" does not match "Dr. Ravi Kiran".
    """

    def __init__(self, ids_by_name: Optional[Mapping[str, str]] = None):
        self._ids: dict[str, str] = {}
        self._names: dict[str, str] = {}
        for name, faculty_id in (ids_by_name or {}).items():
            self._add(name, faculty_id)

    @classmethod
    def from_users(cls, users: Iterable[User]) -> "FacultyDirectory":
        directory = cls()
        for user in users:
            if user.role == Role.FACULTY:
                directory._add(user.name, user.user_id)
        return directory

    @staticmethod
    def key(name: Optional[str]) -> str:
        return (name or "").strip().casefold()

    def _add(self, name: str, faculty_id: str) -> None:
        key = self.key(name)
        if not key:
            return
        if key in self._ids:
            logger.warning("Duplicate faculty name %r; keeping the first match", name)
            return
        self._ids[key] = str(faculty_id)
        self._names[str(faculty_id)] = name.strip()

    def resolve(self, name: Optional[str]) -> str:
        key = self.key(name)
        if not key:
            return ""
        faculty_id = self._ids.get(key)
        if faculty_id is None:
            logger.warning("Faculty %r not found in directory; leaving session unassigned", name)
            return ""
        return faculty_id

    def name_for(self, faculty_id: str) -> Optional[str]:
        return self._names.get(str(faculty_id))

    def __len__(self) -> int:
        return len(self._ids)


def resolve_rows(rows: Iterable[ValidatedRow], directory: FacultyDirectory) -> list[NewTimetableEntry]:
    return [row.resolve(directory.resolve(row.faculty)) for row in rows]

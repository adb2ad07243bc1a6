from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class TimetableEntry:
    """Domain entity: one scheduled class session.

    Note: faculty_id is "" for unassigned sessions (e.g. a library period).
    entry_date is None when the timetable is keyed by weekday only.
    """

    entry_id: str
    day: str
    time_slot: str
    subject_name: str
    faculty_name: str
    faculty_id: str
    course: str
    semester: int
    entry_date: Optional[date] = None


@dataclass(frozen=True)
class NewTimetableEntry:
    """A validated, faculty-resolved entry that has not been stored yet."""

    day: str
    time_slot: str
    subject_name: str
    faculty_name: str
    faculty_id: str
    course: str
    semester: int
    entry_date: Optional[date] = None

    @property
    def pair(self) -> tuple[str, int]:
        return (self.course, self.semester)


@dataclass(frozen=True)
class UploadResult:
    saved: int
    skipped: int
    replaced: int
    pairs: tuple[tuple[str, int], ...]

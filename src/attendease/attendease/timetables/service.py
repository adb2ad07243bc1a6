from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.validators import coerce_positive_int
from ..core.constants import DEFAULT_MAX_UPLOAD_BYTES, DISPLAY_DAY_ORDER
from ..core.enums import Role, ScheduleMode
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from ..users.service import SessionUser
from .ingestion import FacultyDirectory, check_row, normalize_row, parse_csv, resolve_rows, validate_rows
from .model import NewTimetableEntry, TimetableEntry, UploadResult
from .repository import TimetableRepository

logger = logging.getLogger(__name__)


def _require_admin(actor: SessionUser) -> None:
    if actor.role != Role.ADMIN:
        raise AuthorizationError("You do not have permission to manage timetables")


def distinct_pairs(entries: Sequence[NewTimetableEntry]) -> list[tuple[str, int]]:
    """(course, semester) pairs in first-seen order."""
    seen: dict[tuple[str, int], None] = {}
    for entry in entries:
        seen.setdefault(entry.pair, None)
    return list(seen)


class TimetableService:
    def __init__(
        self,
        timetables: TimetableRepository,
        users: UserRepository,
        *,
        schedule_mode: ScheduleMode = ScheduleMode.DATE,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        self._timetables = timetables
        self._users = users
        self._mode = ScheduleMode(schedule_mode)
        self._max_upload_bytes = int(max_upload_bytes)

    @property
    def schedule_mode(self) -> ScheduleMode:
        return self._mode

    def faculty_directory(self) -> FacultyDirectory:
        # Always fetched fresh so an upload sees the current faculty roster.
        return FacultyDirectory.from_users(self._users.list_all(role=Role.FACULTY))

    # -------- CSV upload --------
    def upload_csv(self, *, actor: SessionUser, data: bytes) -> UploadResult:
        _require_admin(actor)

        if not data:
            raise ValidationError("The uploaded file is empty")
        if len(data) > self._max_upload_bytes:
            raise ValidationError("The uploaded file is too large")

        rows = parse_csv(data)
        valid, skipped = validate_rows(rows, self._mode)
        if not valid:
            if skipped:
                raise ValidationError(
                    f"No valid entries were found to save. {skipped} rows were skipped due to missing or invalid data."
                )
            raise ValidationError("No valid entries were found to save. Please check the file format.")

        entries = resolve_rows(valid, self.faculty_directory())
        replaced, pairs = self.commit_batch(entries)
        logger.info(
            "Timetable upload by %s: saved=%d skipped=%d replaced=%d pairs=%s",
            actor.user_id,
            len(entries),
            skipped,
            replaced,
            pairs,
        )
        return UploadResult(saved=len(entries), skipped=skipped, replaced=replaced, pairs=tuple(pairs))

    def commit_batch(self, entries: Sequence[NewTimetableEntry]) -> tuple[int, list[tuple[str, int]]]:
        """Replace every (course, semester) pair present in the batch, then insert.

        All deletes run before the single insert. Each call is its own
        transaction, so a failure part-way leaves earlier calls committed.
        """
        pairs = distinct_pairs(entries)
        replaced = 0
        for course, semester in pairs:
            replaced += self._timetables.delete_by_course_semester(course=course, semester=semester)
        self._timetables.insert_many(list(entries))
        return replaced, pairs

    # -------- Manual entries --------
    def _build_entry(
        self,
        *,
        entry_date: str,
        day: str,
        time_slot: str,
        subject_name: str,
        faculty_id: str,
        course: str,
        semester,
    ) -> NewTimetableEntry:
        raw = {
            "Date": entry_date,
            "Day": day,
            "Time Slot": time_slot,
            "Subject": subject_name,
            "Course": course,
            "Semester": semester,
        }
        row = check_row(normalize_row(raw), self._mode)

        faculty_id = (faculty_id or "").strip()
        faculty_name = ""
        if faculty_id and faculty_id != "none":
            faculty_name = self.faculty_directory().name_for(faculty_id) or ""
            if not faculty_name:
                raise ValidationError("Selected faculty does not exist")
        else:
            faculty_id = ""

        return NewTimetableEntry(
            day=row.day,
            time_slot=row.time_slot,
            subject_name=row.subject,
            faculty_name=faculty_name,
            faculty_id=faculty_id,
            course=row.course,
            semester=row.semester,
            entry_date=row.entry_date,
        )

    def add_entry(
        self,
        *,
        actor: SessionUser,
        time_slot: str,
        subject_name: str,
        course: str,
        semester,
        entry_date: str = "",
        day: str = "",
        faculty_id: str = "",
    ) -> str:
        _require_admin(actor)
        entry = self._build_entry(
            entry_date=entry_date,
            day=day,
            time_slot=time_slot,
            subject_name=subject_name,
            faculty_id=faculty_id,
            course=course,
            semester=semester,
        )
        return self._timetables.create(entry)

    def update_entry(
        self,
        *,
        actor: SessionUser,
        entry_id: str,
        time_slot: str,
        subject_name: str,
        course: str,
        semester,
        entry_date: str = "",
        day: str = "",
        faculty_id: str = "",
    ) -> None:
        _require_admin(actor)
        if not self._timetables.get_by_id(entry_id):
            raise NotFoundError("Timetable entry does not exist")

        entry = self._build_entry(
            entry_date=entry_date,
            day=day,
            time_slot=time_slot,
            subject_name=subject_name,
            faculty_id=faculty_id,
            course=course,
            semester=semester,
        )
        if not self._timetables.update(entry_id, entry):
            raise ValidationError("Could not save the entry")

    def delete_entry(self, *, actor: SessionUser, entry_id: str) -> None:
        _require_admin(actor)
        if not self._timetables.delete(entry_id):
            raise NotFoundError("Timetable entry does not exist")

    def bulk_delete(self, *, actor: SessionUser, course: Optional[str] = None, semester=None) -> int:
        _require_admin(actor)

        course = (course or "").strip() or None
        sem = coerce_positive_int(semester, "Semester") if semester not in (None, "") else None
        if course is None and sem is None:
            raise ValidationError("Choose a course or a semester to delete")

        removed = self._timetables.delete_matching(course=course, semester=sem)
        logger.info("Bulk delete by %s: course=%s semester=%s removed=%d", actor.user_id, course, sem, removed)
        return removed

    # -------- Queries --------
    def _sort_key(self, entry: TimetableEntry):
        if self._mode == ScheduleMode.DATE and entry.entry_date is not None:
            return (0, entry.entry_date, entry.time_slot)
        day_index = DISPLAY_DAY_ORDER.index(entry.day) if entry.day in DISPLAY_DAY_ORDER else len(DISPLAY_DAY_ORDER)
        return (1, date.min, f"{day_index}|{entry.time_slot}")

    def list_entries(self, *, course: Optional[str] = None, semester: Optional[int] = None) -> list[TimetableEntry]:
        entries = self._timetables.list_entries(course=course, semester=semester)
        return sorted(entries, key=self._sort_key)

    def get_entry(self, entry_id: str) -> TimetableEntry:
        entry = self._timetables.get_by_id(entry_id)
        if not entry:
            raise NotFoundError("Timetable entry does not exist")
        return entry

    def filter_options(self) -> tuple[list[str], list[int]]:
        entries = self._timetables.list_entries()
        courses = sorted({e.course for e in entries if e.course})
        semesters = sorted({e.semester for e in entries})
        return courses, semesters

    def entries_for_student(self, actor: SessionUser) -> list[TimetableEntry]:
        if not actor.course or not actor.semester:
            return []
        return self.list_entries(course=actor.course, semester=actor.semester)

    def week_for_student(self, actor: SessionUser) -> dict[str, list[TimetableEntry]]:
        """Student timetable grouped for display, empty groups omitted.

        Date mode: one group per calendar date ("Monday, 2026-01-05"), in date order.
        Day mode: one group per weekday, Monday first.
        """
        entries = self.entries_for_student(actor)
        if self._mode == ScheduleMode.DATE:
            by_date: dict[str, list[TimetableEntry]] = {}
            for entry in entries:
                label = f"{entry.day}, {entry.entry_date.isoformat()}" if entry.entry_date else entry.day
                by_date.setdefault(label, []).append(entry)
            return by_date

        grouped: dict[str, list[TimetableEntry]] = {}
        for entry in entries:
            grouped.setdefault(entry.day, []).append(entry)
        return {day: grouped[day] for day in DISPLAY_DAY_ORDER if day in grouped}

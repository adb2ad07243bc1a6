from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewTimetableEntry, TimetableEntry


class TimetableRepository(Protocol):
    def get_by_id(self, entry_id: str) -> Optional[TimetableEntry]:
        raise NotImplementedError

    def list_entries(self, *, course: Optional[str] = None, semester: Optional[int] = None) -> Sequence[TimetableEntry]:
        raise NotImplementedError

    def create(self, entry: NewTimetableEntry) -> str:
        """Insert one entry and return the store-assigned id."""

        raise NotImplementedError

    def insert_many(self, entries: Sequence[NewTimetableEntry]) -> int:
        """Insert a whole upload in one batch; returns rows written."""

        raise NotImplementedError

    def update(self, entry_id: str, entry: NewTimetableEntry) -> bool:
        raise NotImplementedError

    def delete(self, entry_id: str) -> bool:
        raise NotImplementedError

    def delete_by_course_semester(self, *, course: str, semester: int) -> int:
        """Delete every entry of exactly this (course, semester) pair."""

        raise NotImplementedError

    def delete_matching(self, *, course: Optional[str] = None, semester: Optional[int] = None) -> int:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

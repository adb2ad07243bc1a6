from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import MissedClassRequest, NewMissedClassRequest


class RequestRepository(Protocol):
    def create(self, request: NewMissedClassRequest) -> str:
        """Store a Pending request with its missed classes; returns the new id."""

        raise NotImplementedError

    def get_by_id(self, request_id: str) -> Optional[MissedClassRequest]:
        raise NotImplementedError

    def list_for_student(self, student_id: str, *, limit: Optional[int] = None) -> Sequence[MissedClassRequest]:
        """Newest first."""

        raise NotImplementedError

    def list_for_approver(
        self,
        approver_id: str,
        *,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[MissedClassRequest]:
        """Oldest first."""

        raise NotImplementedError

    def list_all(
        self,
        *,
        status: Optional[RequestStatus] = None,
        term: Optional[str] = None,
        limit: int = 500,
    ) -> Sequence[MissedClassRequest]:
        """Newest first.

        `term` is a case-insensitive substring of the student name, PRN or any
        missed subject. The limit applies after the search.
        """

        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: str,
        status: RequestStatus,
        comment: Optional[str],
        decided_at: datetime,
    ) -> bool:
        """Move a Pending request to a terminal status. False if it was not Pending."""

        raise NotImplementedError

    def count(self, *, status: Optional[RequestStatus] = None) -> int:
        raise NotImplementedError

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import ADMIN_QUEUE_ID
from ..core.enums import RequestStatus


@dataclass(frozen=True)
class MissedClass:
    """Snapshot of the timetable session a request refers to."""

    class_id: str
    subject_name: str
    time_slot: str
    day: str


@dataclass(frozen=True)
class MissedClassRequest:
    """Domain entity: a student's absence claim, addressed to one approver.

    Note: approver_id is ADMIN_QUEUE_ID when the student typed a name that is
    not a listed faculty member; approver_name then holds the typed name.
    """

    request_id: str
    student_id: str
    student_name: str
    student_prn: Optional[str]
    missed_classes: tuple[MissedClass, ...]
    reason: str
    created_at: datetime
    status: RequestStatus
    approver_id: str
    approver_name: str
    event_id: Optional[str] = None
    comment: Optional[str] = None
    decided_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    @property
    def in_admin_queue(self) -> bool:
        return self.approver_id == ADMIN_QUEUE_ID

    @property
    def subjects(self) -> str:
        return ", ".join(c.subject_name for c in self.missed_classes)


@dataclass(frozen=True)
class NewMissedClassRequest:
    student_id: str
    student_name: str
    student_prn: Optional[str]
    missed_classes: tuple[MissedClass, ...]
    reason: str
    created_at: datetime
    approver_id: str
    approver_name: str
    event_id: Optional[str] = None


@dataclass(frozen=True)
class Approver:
    approver_id: str
    approver_name: str


@dataclass(frozen=True)
class RequestRow:
    """A request plus the display name of the event it cites."""

    request: MissedClassRequest
    event_name: str

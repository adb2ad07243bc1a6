from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import RequestStatus, Role
from ..core.exceptions import AuthorizationError
from ..requests.repository import RequestRepository
from ..timetables.repository import TimetableRepository
from ..users.repository import UserRepository
from ..users.service import SessionUser


@dataclass(frozen=True)
class DashboardStats:
    total_requests: int
    pending_requests: int
    approved_requests: int
    total_users: int
    students: int
    faculty: int
    timetable_entries: int


class StatsService:
    """Counts for the admin dashboard."""

    def __init__(self, requests: RequestRepository, users: UserRepository, timetables: TimetableRepository):
        self._requests = requests
        self._users = users
        self._timetables = timetables

    def dashboard(self, *, actor: SessionUser) -> DashboardStats:
        if actor.role != Role.ADMIN:
            raise AuthorizationError("You do not have permission to view statistics")

        return DashboardStats(
            total_requests=self._requests.count(),
            pending_requests=self._requests.count(status=RequestStatus.PENDING),
            approved_requests=self._requests.count(status=RequestStatus.APPROVED),
            total_users=self._users.count(),
            students=self._users.count(role=Role.STUDENT),
            faculty=self._users.count(role=Role.FACULTY),
            timetable_entries=self._timetables.count(),
        )

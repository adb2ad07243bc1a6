from __future__ import annotations

from typing import Optional, Sequence

from ...core.constants import ADMIN_QUEUE_ID, ADMIN_QUEUE_NAME
from ...timetables.model import TimetableEntry
from ..model import Approver
from .base import RouteGroup, RoutingStrategy


class PerFacultyStrategy(RoutingStrategy):
    """One request per distinct session faculty, in first-seen order.

    Sessions without a faculty go to the admin queue. A picked approver is
    ignored.
    """

    requires_approver = False

    def route(self, *, sessions: Sequence[TimetableEntry], approver: Optional[Approver]) -> list[RouteGroup]:
        approvers: dict[str, Approver] = {}
        grouped: dict[str, list[TimetableEntry]] = {}
        for session in sessions:
            key = session.faculty_id or ADMIN_QUEUE_ID
            if key not in approvers:
                if session.faculty_id:
                    approvers[key] = Approver(approver_id=session.faculty_id, approver_name=session.faculty_name)
                else:
                    approvers[key] = Approver(approver_id=ADMIN_QUEUE_ID, approver_name=ADMIN_QUEUE_NAME)
            grouped.setdefault(key, []).append(session)
        return [RouteGroup(approver=approvers[key], sessions=tuple(items)) for key, items in grouped.items()]

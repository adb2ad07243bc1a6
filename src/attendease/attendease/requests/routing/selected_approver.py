from __future__ import annotations

from typing import Optional, Sequence

from ...core.exceptions import ValidationError
from ...timetables.model import TimetableEntry
from ..model import Approver
from .base import RouteGroup, RoutingStrategy


class SelectedApproverStrategy(RoutingStrategy):
    """The whole submission goes to the approver the student picked."""

    requires_approver = True

    def route(self, *, sessions: Sequence[TimetableEntry], approver: Optional[Approver]) -> list[RouteGroup]:
        if approver is None:
            raise ValidationError("Please select an approver")
        if not sessions:
            return []
        return [RouteGroup(approver=approver, sessions=tuple(sessions))]

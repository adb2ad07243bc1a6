from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from ...timetables.model import TimetableEntry
from ..model import Approver


@dataclass(frozen=True)
class RouteGroup:
    """The sessions that end up in one request, and who decides it."""

    approver: Approver
    sessions: tuple[TimetableEntry, ...]


class RoutingStrategy(ABC):
    """Strategy Pattern: encapsulate how a submission is split into requests."""

    # Whether the student must pick an approver on the form.
    requires_approver: bool = True

    @abstractmethod
    def route(self, *, sessions: Sequence[TimetableEntry], approver: Optional[Approver]) -> list[RouteGroup]:
        raise NotImplementedError

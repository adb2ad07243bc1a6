from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import ADMIN_QUEUE_ID, DEFAULT_LIST_LIMIT, DEFAULT_RECENT_REQUESTS, OTHER_APPROVER
from ..core.enums import RequestStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..events.repository import EventRepository
from ..events.service import EventService
from ..timetables.model import TimetableEntry
from ..timetables.repository import TimetableRepository
from ..users.repository import UserRepository
from ..users.service import SessionUser
from .model import Approver, MissedClass, MissedClassRequest, NewMissedClassRequest, RequestRow
from .repository import RequestRepository
from .routing.base import RoutingStrategy
from .routing.selected_approver import SelectedApproverStrategy

logger = logging.getLogger(__name__)


def _is_blank_choice(value: Optional[str]) -> bool:
    return not (value or "").strip() or (value or "").strip().lower() == "none"


class RequestService:
    """Use cases: submit missed-class requests and decide them."""

    def __init__(
        self,
        requests: RequestRepository,
        timetables: TimetableRepository,
        users: UserRepository,
        events: EventRepository,
        *,
        strategy: Optional[RoutingStrategy] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._requests = requests
        self._timetables = timetables
        self._users = users
        self._events = events
        self._strategy = strategy or SelectedApproverStrategy()
        self._clock = clock

    @property
    def requires_approver(self) -> bool:
        return self._strategy.requires_approver

    # -------- Student --------
    def _student_sessions(self, actor: SessionUser, class_ids: Iterable[str]) -> list[TimetableEntry]:
        if not actor.course or not actor.semester:
            raise ValidationError("Your profile has no course or semester; contact the administrator")

        own = {e.entry_id: e for e in self._timetables.list_entries(course=actor.course, semester=actor.semester)}
        sessions: list[TimetableEntry] = []
        seen: set[str] = set()
        for class_id in class_ids:
            if class_id in seen:
                continue
            seen.add(class_id)
            entry = own.get(class_id)
            if entry is None:
                raise ValidationError("A selected class is not part of your timetable")
            sessions.append(entry)
        return sessions

    def _resolve_approver(self, approver_id: str, other_name: str) -> Optional[Approver]:
        approver_id = (approver_id or "").strip()
        if not approver_id:
            if self._strategy.requires_approver:
                raise ValidationError("Please select an approver")
            return None

        if approver_id == OTHER_APPROVER:
            name = (other_name or "").strip()
            if not name:
                raise ValidationError("Please enter the approver's name")
            return Approver(approver_id=ADMIN_QUEUE_ID, approver_name=name)

        user = self._users.get_by_id(approver_id)
        if not user or user.role != Role.FACULTY:
            raise ValidationError("Selected approver is not a faculty member")
        return Approver(approver_id=user.user_id, approver_name=user.name)

    def submit(
        self,
        *,
        actor: SessionUser,
        class_ids: Sequence[str],
        reason: str,
        approver_id: str = "",
        other_approver_name: str = "",
        event_id: Optional[str] = None,
    ) -> list[str]:
        """Create the request(s) for one submission. Returns the new ids."""
        if actor.role != Role.STUDENT:
            raise AuthorizationError("Only students can submit requests")

        ids = [str(c).strip() for c in class_ids if str(c).strip()]
        if not ids:
            raise ValidationError("Please select at least one missed class")
        reason = require_non_empty(reason, "Reason")
        approver = self._resolve_approver(approver_id, other_approver_name)
        sessions = self._student_sessions(actor, ids)

        event = None if _is_blank_choice(event_id) else str(event_id).strip()
        if event is not None and not self._events.get_by_id(event):
            raise ValidationError("Selected event does not exist")

        groups = self._strategy.route(sessions=sessions, approver=approver)
        created_at = self._clock()
        request_ids: list[str] = []
        for group in groups:
            request_id = self._requests.create(
                NewMissedClassRequest(
                    student_id=actor.user_id,
                    student_name=actor.name,
                    student_prn=actor.prn,
                    missed_classes=tuple(
                        MissedClass(class_id=s.entry_id, subject_name=s.subject_name, time_slot=s.time_slot, day=s.day)
                        for s in group.sessions
                    ),
                    reason=reason,
                    created_at=created_at,
                    approver_id=group.approver.approver_id,
                    approver_name=group.approver.approver_name,
                    event_id=event,
                )
            )
            request_ids.append(request_id)
            logger.info(
                "Request %s by %s: %d classes to %s",
                request_id,
                actor.user_id,
                len(group.sessions),
                group.approver.approver_id,
            )
        return request_ids

    def list_for_student(self, actor: SessionUser) -> list[RequestRow]:
        return self.with_event_names(self._requests.list_for_student(actor.user_id))

    def recent_for_student(self, actor: SessionUser, *, limit: int = DEFAULT_RECENT_REQUESTS) -> list[RequestRow]:
        return self.with_event_names(self._requests.list_for_student(actor.user_id, limit=limit))

    # -------- Approver --------
    @staticmethod
    def _queue_for(actor: SessionUser) -> str:
        if actor.role == Role.FACULTY:
            return actor.user_id
        if actor.role == Role.ADMIN:
            return ADMIN_QUEUE_ID
        raise AuthorizationError("You do not have permission to review requests")

    @staticmethod
    def can_decide(actor: SessionUser, req: MissedClassRequest) -> bool:
        if actor.role == Role.FACULTY:
            return req.approver_id == actor.user_id
        if actor.role == Role.ADMIN:
            return req.in_admin_queue
        return False

    def pending_for_approver(self, actor: SessionUser) -> list[RequestRow]:
        """Pending requests addressed to the actor, oldest first."""
        queue = self._queue_for(actor)
        return self.with_event_names(self._requests.list_for_approver(queue, status=RequestStatus.PENDING))

    def _decide(self, *, actor: SessionUser, request_id: str, status: RequestStatus, comment: Optional[str]) -> None:
        req = self._requests.get_by_id(request_id)
        if not req:
            raise NotFoundError("Request does not exist")
        if not self.can_decide(actor, req):
            raise AuthorizationError("This request is not addressed to you")
        if not req.is_pending:
            raise ValidationError("This request has already been decided")

        ok = self._requests.decide(request_id=req.request_id, status=status, comment=comment, decided_at=self._clock())
        if not ok:
            raise ValidationError("This request has already been decided")
        logger.info("Request %s %s by %s", req.request_id, status.value.lower(), actor.user_id)

    def approve(self, *, actor: SessionUser, request_id: str, comment: str = "") -> None:
        self._decide(
            actor=actor,
            request_id=request_id,
            status=RequestStatus.APPROVED,
            comment=(comment or "").strip() or None,
        )

    def reject(self, *, actor: SessionUser, request_id: str, comment: str) -> None:
        if not (comment or "").strip():
            raise ValidationError("A comment is required when rejecting a request")
        self._decide(actor=actor, request_id=request_id, status=RequestStatus.REJECTED, comment=comment.strip())

    # -------- Admin --------
    @staticmethod
    def parse_status_filter(value: Optional[str]) -> Optional[RequestStatus]:
        v = (value or "").strip()
        if not v or v.lower() == "all":
            return None
        try:
            return RequestStatus(v)
        except ValueError:
            raise ValidationError("Unknown status filter")

    def admin_log(
        self,
        *,
        actor: SessionUser,
        term: str = "",
        status: Optional[str] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[RequestRow]:
        """All requests, newest first, filtered by status and a substring search."""
        if actor.role != Role.ADMIN:
            raise AuthorizationError("You do not have permission to view all requests")

        rows = self._requests.list_all(
            status=self.parse_status_filter(status),
            term=(term or "").strip() or None,
            limit=limit,
        )
        return self.with_event_names(rows)

    # -------- Display --------
    def with_event_names(self, requests: Iterable[MissedClassRequest]) -> list[RequestRow]:
        items = list(requests)
        names = {e.event_id: e.name for e in self._events.list_all()} if items else {}
        return [RequestRow(request=r, event_name=EventService.display_name(r.event_id, names)) for r in items]

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role used for access control."""

    STUDENT = "student"
    FACULTY = "faculty"
    ADMIN = "admin"


class RequestStatus(str, Enum):
    """Lifecycle of a missed-class request. Approved/Rejected are terminal."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ScheduleMode(str, Enum):
    """How timetable rows are keyed: by calendar date or by weekday name."""

    DATE = "date"
    DAY = "day"


class RoutingPolicy(str, Enum):
    """How a submission is split into approval requests."""

    SELECTED_APPROVER = "selected_approver"
    PER_FACULTY = "per_faculty"

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .core.constants import DEFAULT_MAX_UPLOAD_BYTES, DEFAULT_RESET_TOKEN_TTL_MINUTES
from .core.enums import RoutingPolicy, ScheduleMode
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import EventService
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.repository import RequestRepository
from .requests.routing.factory import RoutingStrategyFactory
from .requests.service import RequestService
from .stats.service import StatsService
from .timetables.mysql_timetable_repository import MySQLTimetableRepository
from .timetables.repository import TimetableRepository
from .timetables.service import TimetableService
from .users.mysql_user_repository import MySQLPasswordResetRepository, MySQLUserRepository
from .users.repository import PasswordResetRepository, UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class AppOptions:
    schedule_mode: ScheduleMode = ScheduleMode.DATE
    routing: RoutingPolicy = RoutingPolicy.SELECTED_APPROVER
    allow_self_signup: bool = False
    reset_ttl_minutes: int = DEFAULT_RESET_TOKEN_TTL_MINUTES
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    @classmethod
    def from_settings(cls, settings: Any) -> "AppOptions":
        return cls(
            schedule_mode=ScheduleMode(getattr(settings, "SCHEDULE_MODE", ScheduleMode.DATE.value)),
            routing=RoutingPolicy(getattr(settings, "REQUEST_ROUTING", RoutingPolicy.SELECTED_APPROVER.value)),
            allow_self_signup=bool(getattr(settings, "ALLOW_SELF_SIGNUP", False)),
            reset_ttl_minutes=int(getattr(settings, "RESET_TOKEN_TTL_MINUTES", DEFAULT_RESET_TOKEN_TTL_MINUTES)),
            max_upload_bytes=int(getattr(settings, "MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)),
        )


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    reset_tokens_repo: PasswordResetRepository
    timetables_repo: TimetableRepository
    events_repo: EventRepository
    requests_repo: RequestRepository

    auth_service: AuthService
    user_service: UserService
    timetable_service: TimetableService
    event_service: EventService
    request_service: RequestService
    stats_service: StatsService


def wire(
    *,
    users_repo: UserRepository,
    reset_tokens_repo: PasswordResetRepository,
    timetables_repo: TimetableRepository,
    events_repo: EventRepository,
    requests_repo: RequestRepository,
    options: AppOptions = AppOptions(),
) -> Container:
    """Build the services on top of any set of repositories."""
    return Container(
        users_repo=users_repo,
        reset_tokens_repo=reset_tokens_repo,
        timetables_repo=timetables_repo,
        events_repo=events_repo,
        requests_repo=requests_repo,
        auth_service=AuthService(
            users_repo,
            reset_tokens_repo,
            allow_self_signup=options.allow_self_signup,
            reset_ttl_minutes=options.reset_ttl_minutes,
        ),
        user_service=UserService(users_repo),
        timetable_service=TimetableService(
            timetables_repo,
            users_repo,
            schedule_mode=options.schedule_mode,
            max_upload_bytes=options.max_upload_bytes,
        ),
        event_service=EventService(events_repo),
        request_service=RequestService(
            requests_repo,
            timetables_repo,
            users_repo,
            events_repo,
            strategy=RoutingStrategyFactory(options.routing).create(),
        ),
        stats_service=StatsService(requests_repo, users_repo, timetables_repo),
    )


def build_container(*, db_config: dict, options: AppOptions = AppOptions()) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return wire(
        users_repo=MySQLUserRepository(conn),
        reset_tokens_repo=MySQLPasswordResetRepository(conn),
        timetables_repo=MySQLTimetableRepository(conn),
        events_repo=MySQLEventRepository(conn),
        requests_repo=MySQLRequestRepository(conn),
        options=options,
    )

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional, Sequence, Union

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import coerce_positive_int, require_email, require_min_length, require_non_empty
from ..core.constants import DEFAULT_RESET_TOKEN_TTL_MINUTES, DEFAULT_SIGNUP_ROLE, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import User
from .repository import PasswordResetRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """The caller of a use case, rebuilt from the Flask session on every request."""

    user_id: str
    name: str
    email: str
    role: Role
    prn: Optional[str] = None
    course: Optional[str] = None
    semester: Optional[int] = None

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            role=user.role,
            prn=user.prn,
            course=user.course,
            semester=user.semester,
        )

    def to_session(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "prn": self.prn,
            "course": self.course,
            "semester": self.semester,
        }

    @classmethod
    def from_session(cls, data) -> "SessionUser":
        semester = data.get("semester")
        return cls(
            user_id=str(data["user_id"]),
            name=data.get("name") or "",
            email=data.get("email") or "",
            role=Role(data.get("role")),
            prn=data.get("prn"),
            course=data.get("course"),
            semester=int(semester) if semester is not None else None,
        )


@dataclass(frozen=True)
class RoleFields:
    prn: Optional[str] = None
    course: Optional[str] = None
    semester: Optional[int] = None
    subjects: tuple[str, ...] = ()


def parse_subjects(value: Union[str, Iterable[str], None]) -> tuple[str, ...]:
    """Accept "A, B" or ["A", "B"]; trim, drop blanks, keep first occurrence."""
    if value is None:
        return ()
    items = value.split(",") if isinstance(value, str) else list(value)
    out: list[str] = []
    for item in items:
        s = (item or "").strip()
        if s and s not in out:
            out.append(s)
    return tuple(out)


def clean_role_fields(
    role: Role,
    *,
    prn: Optional[str] = None,
    course: Optional[str] = None,
    semester: Union[str, int, None] = None,
    subjects: Union[str, Iterable[str], None] = None,
) -> RoleFields:
    """Keep only the fields that belong to `role`."""
    if role == Role.STUDENT:
        sem = None
        if semester is not None and str(semester).strip():
            sem = coerce_positive_int(semester, "Semester")
        return RoleFields(
            prn=(prn or "").strip() or None,
            course=(course or "").strip() or None,
            semester=sem,
        )
    if role == Role.FACULTY:
        return RoleFields(subjects=parse_subjects(subjects))
    return RoleFields()


def _display_name_from_email(email: str) -> str:
    local = email.split("@", 1)[0]
    words = [w for w in local.replace(".", " ").replace("_", " ").replace("-", " ").split() if w]
    return " ".join(w.capitalize() for w in words) or email


def _require_admin(actor: SessionUser) -> None:
    if actor.role != Role.ADMIN:
        raise AuthorizationError("You do not have permission to do that")


class AuthService:
    """Use cases: sign in (with optional implicit sign-up) and password reset."""

    def __init__(
        self,
        users: UserRepository,
        reset_tokens: PasswordResetRepository,
        *,
        allow_self_signup: bool = False,
        reset_ttl_minutes: int = DEFAULT_RESET_TOKEN_TTL_MINUTES,
        clock: Callable[[], datetime] = now_local,
    ):
        self._users = users
        self._reset_tokens = reset_tokens
        self._allow_self_signup = bool(allow_self_signup)
        self._reset_ttl = timedelta(minutes=int(reset_ttl_minutes))
        self._clock = clock

    def authenticate(self, email: str, password: str) -> SessionUser:
        if not (email or "").strip() or not password:
            raise AuthenticationError("Please enter both email and password.")

        email = email.strip().lower()
        user = self._users.get_by_email(email)
        if not user and self._allow_self_signup:
            user = self._sign_up(email, password)

        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password. Please try again.")

        try:
            ok = check_password_hash(user.password_hash, password)
        except Exception:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password. Please try again.")

        return SessionUser.from_user(user)

    def _sign_up(self, email: str, password: str) -> User:
        try:
            email = require_email(email)
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        except ValidationError as e:
            raise AuthenticationError(str(e))

        user_id = self._users.create_user(
            name=_display_name_from_email(email),
            email=email,
            password_hash=generate_password_hash(password),
            role=DEFAULT_SIGNUP_ROLE,
        )
        logger.info("Provisioned %s account %s on first login", DEFAULT_SIGNUP_ROLE.value, user_id)
        user = self._users.get_by_id(user_id)
        if not user:
            raise AuthenticationError("Could not create your account")
        return user

    def request_password_reset(self, email: str) -> Optional[str]:
        """Issue a reset token for a known account.

        Returns None for unknown emails so callers can answer the same way
        whether or not the account exists.
        """
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            return None

        token = secrets.token_urlsafe(32)
        self._reset_tokens.create_token(token=token, user_id=user.user_id, expires_at=self._clock() + self._reset_ttl)
        return token

    def reset_password(self, token: str, new_password: str) -> None:
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)

        record = self._reset_tokens.get_token(token or "")
        now = self._clock()
        if not record or record.used_at is not None or record.expires_at < now:
            raise ValidationError("This reset link is invalid or has expired")

        if not self._reset_tokens.mark_used(record.token, used_at=now):
            raise ValidationError("This reset link is invalid or has expired")
        if not self._users.set_password(record.user_id, password_hash=generate_password_hash(new_password)):
            raise NotFoundError("Account no longer exists")
        logger.info("Password reset completed for %s", record.user_id)


class UserService:
    """Use cases: manage the user directory (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def create_account(
        self,
        *,
        actor: SessionUser,
        name: str,
        email: str,
        password: str,
        role: Role,
        prn: Optional[str] = None,
        course: Optional[str] = None,
        semester: Union[str, int, None] = None,
        subjects: Union[str, Iterable[str], None] = None,
    ) -> str:
        _require_admin(actor)

        name = require_non_empty(name, "Name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        if self._users.get_by_email(email):
            raise ValidationError("A user with this email already exists")

        fields = clean_role_fields(role, prn=prn, course=course, semester=semester, subjects=subjects)
        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            prn=fields.prn,
            course=fields.course,
            semester=fields.semester,
            subjects=fields.subjects,
        )
        logger.info("Admin %s created %s account %s", actor.user_id, role.value, user_id)
        return user_id

    def update_account(
        self,
        *,
        actor: SessionUser,
        user_id: str,
        name: str,
        email: str,
        role: Role,
        prn: Optional[str] = None,
        course: Optional[str] = None,
        semester: Union[str, int, None] = None,
        subjects: Union[str, Iterable[str], None] = None,
        password: str = "",
    ) -> None:
        _require_admin(actor)

        existing = self._users.get_by_id(user_id)
        if not existing:
            raise NotFoundError("User does not exist")

        name = require_non_empty(name, "Name")
        email = require_email(email)
        other = self._users.get_by_email(email)
        if other and other.user_id != existing.user_id:
            raise ValidationError("A user with this email already exists")
        if password:
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        fields = clean_role_fields(role, prn=prn, course=course, semester=semester, subjects=subjects)
        ok = self._users.update_user(
            user_id=existing.user_id,
            name=name,
            email=email,
            role=role,
            prn=fields.prn,
            course=fields.course,
            semester=fields.semester,
            subjects=fields.subjects,
        )
        if not ok:
            raise ValidationError("Could not update the user")
        if password:
            self._users.set_password(existing.user_id, password_hash=generate_password_hash(password))

    def delete_user(self, *, actor: SessionUser, user_id: str) -> None:
        """Remove a directory entry. Sign-in credentials are not revoked elsewhere."""
        _require_admin(actor)

        if str(user_id) == actor.user_id:
            raise ValidationError("You cannot delete your own account")
        if not self._users.get_by_id(user_id):
            raise NotFoundError("User does not exist")
        if not self._users.delete_by_id(user_id):
            raise ValidationError("Could not delete the user")

    def get(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User does not exist")
        return user

    def search(self, *, actor: SessionUser, term: str = "", role: Optional[Role] = None) -> Sequence[User]:
        """Filter by role in the store, then by substring of name/email/PRN."""
        _require_admin(actor)

        needle = (term or "").strip().casefold()
        users = self._users.list_all(role=role)
        if not needle:
            return list(users)
        return [
            u
            for u in users
            if needle in u.name.casefold() or needle in u.email.casefold() or needle in (u.prn or "").casefold()
        ]

    def list_faculty(self) -> Sequence[User]:
        return list(self._users.list_all(role=Role.FACULTY))

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a student, faculty or admin account.

    Note: prn/course/semester only carry meaning for students and subjects only
    for faculty; the service clears them for other roles before writing.
    """

    user_id: str
    name: str
    email: str
    role: Role
    password_hash: str = ""
    prn: Optional[str] = None
    course: Optional[str] = None
    semester: Optional[int] = None
    subjects: tuple[str, ...] = ()
    is_active: bool = True


@dataclass(frozen=True)
class PasswordResetToken:
    token: str
    user_id: str
    expires_at: datetime
    used_at: Optional[datetime] = None

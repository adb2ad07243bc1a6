from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import PasswordResetToken, User


class UserRepository(Protocol):
    """Storage port for the user directory.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        prn: Optional[str] = None,
        course: Optional[str] = None,
        semester: Optional[int] = None,
        subjects: Sequence[str] = (),
    ) -> str:
        """Insert a user and return the store-assigned id."""

        raise NotImplementedError

    def update_user(
        self,
        *,
        user_id: str,
        name: str,
        email: str,
        role: Role,
        prn: Optional[str] = None,
        course: Optional[str] = None,
        semester: Optional[int] = None,
        subjects: Sequence[str] = (),
    ) -> bool:
        raise NotImplementedError

    def set_password(self, user_id: str, *, password_hash: str) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: str) -> bool:
        raise NotImplementedError

    def list_all(self, *, role: Optional[Role] = None) -> Sequence[User]:
        raise NotImplementedError

    def count(self, *, role: Optional[Role] = None) -> int:
        raise NotImplementedError


class PasswordResetRepository(Protocol):
    def create_token(self, *, token: str, user_id: str, expires_at: datetime) -> None:
        raise NotImplementedError

    def get_token(self, token: str) -> Optional[PasswordResetToken]:
        raise NotImplementedError

    def mark_used(self, token: str, *, used_at: datetime) -> bool:
        """Mark an unused token as used; False if it was already used."""

        raise NotImplementedError

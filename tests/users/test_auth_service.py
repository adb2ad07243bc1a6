from __future__ import annotations

from datetime import timedelta

import pytest
from werkzeug.security import check_password_hash

from src.attendease.attendease.core.enums import Role
from src.attendease.attendease.core.exceptions import AuthenticationError, ValidationError
from src.attendease.attendease.users.service import AuthService, SessionUser


@pytest.fixture
def auth(users_repo, reset_tokens_repo, clock):
    return AuthService(users_repo, reset_tokens_repo, reset_ttl_minutes=30, clock=clock)


def test_authenticate_returns_session_user(auth):
    s_user = auth.authenticate(" S1@example.edu ", "secret123")
    assert s_user.user_id == "s1"
    assert s_user.role == Role.STUDENT
    assert s_user.course == "CS"
    assert s_user.semester == 3


@pytest.mark.parametrize(
    "email,password,message",
    [
        ("", "secret123", "Please enter both email and password."),
        ("s1@example.edu", "", "Please enter both email and password."),
        ("s1@example.edu", "wrong", "Invalid email or password. Please try again."),
        ("ghost@example.edu", "secret123", "Invalid email or password. Please try again."),
    ],
)
def test_authenticate_failures(auth, email, password, message):
    with pytest.raises(AuthenticationError) as exc:
        auth.authenticate(email, password)
    assert str(exc.value) == message


def test_self_signup_provisions_student_on_first_login(users_repo, reset_tokens_repo):
    auth = AuthService(users_repo, reset_tokens_repo, allow_self_signup=True)

    s_user = auth.authenticate("new.person@example.edu", "longenough")
    assert s_user.role == Role.STUDENT
    assert s_user.name == "New Person"
    assert auth.authenticate("new.person@example.edu", "longenough").user_id == s_user.user_id

    with pytest.raises(AuthenticationError):
        auth.authenticate("short@example.edu", "123")


def test_session_round_trip():
    s_user = SessionUser(user_id="s1", name="Sam", email="s@x.edu", role=Role.STUDENT, course="CS", semester=3)
    assert SessionUser.from_session(s_user.to_session()) == s_user


def test_password_reset_flow(auth, users_repo, reset_tokens_repo, clock):
    assert auth.request_password_reset("ghost@example.edu") is None

    token = auth.request_password_reset("s1@example.edu")
    assert token in reset_tokens_repo.tokens
    assert reset_tokens_repo.tokens[token].expires_at == clock.now + timedelta(minutes=30)

    auth.reset_password(token, "brand-new-pass")
    assert check_password_hash(users_repo.get_by_id("s1").password_hash, "brand-new-pass")

    # tokens are single use
    with pytest.raises(ValidationError):
        auth.reset_password(token, "another-pass")


def test_expired_or_unknown_reset_token_is_rejected(auth, clock):
    token = auth.request_password_reset("s1@example.edu")
    clock.advance(minutes=31)
    with pytest.raises(ValidationError):
        auth.reset_password(token, "brand-new-pass")
    with pytest.raises(ValidationError):
        auth.reset_password("nope", "brand-new-pass")


def test_reset_enforces_password_length(auth):
    token = auth.request_password_reset("s1@example.edu")
    with pytest.raises(ValidationError):
        auth.reset_password(token, "123")

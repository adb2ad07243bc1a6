from __future__ import annotations

import pytest

from src.attendease.attendease.core.enums import Role
from src.attendease.attendease.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.attendease.attendease.users.service import UserService, clean_role_fields, parse_subjects


@pytest.fixture
def service(users_repo):
    return UserService(users_repo)


def test_create_student_keeps_only_student_fields(service, admin, users_repo):
    user_id = service.create_account(
        actor=admin,
        name=" Priya ",
        email="Priya@Example.edu",
        password="secret123",
        role=Role.STUDENT,
        prn="PRN77",
        course="CS",
        semester="5",
        subjects="Should, Be, Dropped",
    )
    user = users_repo.get_by_id(user_id)
    assert user.name == "Priya"
    assert user.email == "priya@example.edu"
    assert (user.prn, user.course, user.semester) == ("PRN77", "CS", 5)
    assert user.subjects == ()
    assert user.password_hash != "secret123"


def test_create_faculty_clears_student_fields(service, admin, users_repo):
    user_id = service.create_account(
        actor=admin,
        name="Dana",
        email="dana@example.edu",
        password="secret123",
        role=Role.FACULTY,
        prn="X",
        course="CS",
        semester=2,
        subjects="Compilers, Graphics, Compilers",
    )
    user = users_repo.get_by_id(user_id)
    assert user.subjects == ("Compilers", "Graphics")
    assert (user.prn, user.course, user.semester) == (None, None, None)


@pytest.mark.parametrize(
    "overrides",
    [
        dict(name="  "),
        dict(email="not-an-email"),
        dict(email="f1@example.edu"),
        dict(password="123"),
    ],
)
def test_create_validation(service, admin, overrides):
    kwargs = dict(name="Dana", email="dana@example.edu", password="secret123", role=Role.FACULTY)
    kwargs.update(overrides)
    with pytest.raises(ValidationError):
        service.create_account(actor=admin, **kwargs)


def test_non_admin_cannot_manage_users(service, faculty_bob):
    with pytest.raises(AuthorizationError):
        service.create_account(actor=faculty_bob, name="X", email="x@example.edu", password="secret123", role=Role.ADMIN)
    with pytest.raises(AuthorizationError):
        service.search(actor=faculty_bob)


def test_update_changes_role_and_optionally_password(service, admin, users_repo):
    old_hash = users_repo.get_by_id("s1").password_hash
    service.update_account(
        actor=admin, user_id="s1", name="Sam", email="s1@example.edu", role=Role.FACULTY, subjects="Physics"
    )
    user = users_repo.get_by_id("s1")
    assert user.role == Role.FACULTY
    assert user.prn is None
    assert user.password_hash == old_hash

    service.update_account(
        actor=admin, user_id="s1", name="Sam", email="s1@example.edu", role=Role.FACULTY, password="changed123"
    )
    assert users_repo.get_by_id("s1").password_hash != old_hash

    with pytest.raises(ValidationError):
        service.update_account(actor=admin, user_id="s1", name="Sam", email="f1@example.edu", role=Role.FACULTY)
    with pytest.raises(NotFoundError):
        service.update_account(actor=admin, user_id="ghost", name="G", email="g@example.edu", role=Role.STUDENT)


def test_delete_user_but_not_self(service, admin, users_repo):
    with pytest.raises(ValidationError):
        service.delete_user(actor=admin, user_id="a1")

    service.delete_user(actor=admin, user_id="s1")
    assert users_repo.get_by_id("s1") is None
    with pytest.raises(NotFoundError):
        service.delete_user(actor=admin, user_id="s1")


def test_search_by_term_and_role(service, admin):
    assert [u.user_id for u in service.search(actor=admin, term="prn42")] == ["s1"]
    assert [u.user_id for u in service.search(actor=admin, role=Role.FACULTY)] == ["f1", "f2"]
    assert [u.user_id for u in service.search(actor=admin, term="CAROL", role=Role.FACULTY)] == ["f2"]
    assert [u.user_id for u in service.list_faculty()] == ["f1", "f2"]


def test_role_field_helpers():
    assert parse_subjects(None) == ()
    assert parse_subjects(["A", " ", "B"]) == ("A", "B")
    assert clean_role_fields(Role.ADMIN, prn="X", subjects="A").prn is None
    with pytest.raises(ValidationError):
        clean_role_fields(Role.STUDENT, semester="zero")

from __future__ import annotations

import io

import pytest

from src.attendease.attendease.container import AppOptions, wire
from src.attendease.attendease.core.enums import RequestStatus, ScheduleMode
from src.attendease.attendease.main import create_app


@pytest.fixture
def container(users_repo, reset_tokens_repo, timetables_repo, events_repo, requests_repo):
    return wire(
        users_repo=users_repo,
        reset_tokens_repo=reset_tokens_repo,
        timetables_repo=timetables_repo,
        events_repo=events_repo,
        requests_repo=requests_repo,
        options=AppOptions(schedule_mode=ScheduleMode.DAY),
    )


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


def login_as(client, actor):
    with client.session_transaction() as sess:
        sess["user"] = actor.to_session()


def test_login_page_and_protected_redirect(client):
    assert client.get("/").status_code == 200
    assert client.get("/login").status_code == 200

    resp = client.get("/student/dashboard")
    assert resp.status_code == 302
    assert "/login" in resp.headers["Location"] or resp.headers["Location"].endswith("/")


def test_login_redirects_by_role(client):
    resp = client.post("/login", data={"email": "f1@example.edu", "password": "secret123"})
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/faculty/dashboard")

    assert client.get("/dashboard").headers["Location"].endswith("/faculty/dashboard")


def test_bad_login_flashes_message(client):
    resp = client.post("/login", data={"email": "f1@example.edu", "password": "nope"}, follow_redirects=True)
    assert resp.status_code == 200
    assert b"Invalid email or password" in resp.data


def test_wrong_role_gets_403(client, student):
    login_as(client, student)
    assert client.get("/admin/users").status_code == 403
    assert client.get("/faculty/dashboard").status_code == 403


def test_student_dashboard_and_submission(client, student, requests_repo):
    login_as(client, student)
    page = client.get("/student/dashboard")
    assert page.status_code == 200
    assert b"Algorithms" in page.data
    assert b"Sports Meet" in page.data

    resp = client.post(
        "/student/dashboard",
        data={"class_ids": ["c1", "c2"], "reason": "Fever", "approver_id": "f1", "event_id": ""},
    )
    assert resp.status_code == 302
    assert len(requests_repo.created) == 1

    history = client.get("/student/my-requests")
    assert b"Fever" in history.data


def test_faculty_reject_without_comment_is_refused(client, faculty_bob, requests_repo, make_request):
    requests_repo.add(make_request("r1"))
    login_as(client, faculty_bob)

    assert b"Sam Student" in client.get("/faculty/dashboard").data

    resp = client.post("/faculty/requests/r1/reject", data={"comment": " "}, follow_redirects=True)
    assert b"A comment is required" in resp.data
    assert requests_repo.get_by_id("r1").status == RequestStatus.PENDING

    client.post("/faculty/requests/r1/approve", data={"comment": ""})
    assert requests_repo.get_by_id("r1").status == RequestStatus.APPROVED


def test_admin_pages_render(client, admin):
    login_as(client, admin)
    for url in ("/admin/dashboard", "/admin/requests", "/admin/users", "/admin/events", "/admin/timetables"):
        assert client.get(url).status_code == 200, url


def test_admin_csv_upload(client, admin, timetables_repo):
    login_as(client, admin)
    data = b"Day,Time Slot,Subject,Faculty,Course,Semester\nMonday,9-10,Robotics,Carol,ME,4\n"
    resp = client.post(
        "/admin/timetables/upload",
        data={"file": (io.BytesIO(data), "me4.csv")},
        content_type="multipart/form-data",
        follow_redirects=True,
    )
    assert b"Saved 1 timetable entries." in resp.data
    [stored] = timetables_repo.list_entries(course="ME", semester=4)
    assert stored.faculty_id == "f2"


def test_oversized_upload_flashes_and_returns_to_timetables(client, admin, timetables_repo):
    client.application.config["MAX_CONTENT_LENGTH"] = 1024
    login_as(client, admin)
    resp = client.post(
        "/admin/timetables/upload",
        data={"file": (io.BytesIO(b"Day,Time Slot\n" + b"x" * 4096), "big.csv")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/admin/timetables")

    page = client.get("/admin/timetables")
    assert b"The uploaded file is too large" in page.data
    assert timetables_repo.calls == []


def test_forgot_password_answers_the_same_for_unknown_email(client, reset_tokens_repo):
    for email in ("s1@example.edu", "ghost@example.edu"):
        resp = client.post("/forgot-password", data={"email": email}, follow_redirects=True)
        assert b"If an account exists" in resp.data
    assert len(reset_tokens_repo.tokens) == 1

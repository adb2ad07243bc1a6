"""Flask helpers shared by the controllers."""

from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import flash, redirect, render_template, session, url_for

from ..core.enums import Role
from ..users.service import SessionUser

ROLE_LANDING = {
    Role.ADMIN: "admin_dashboard",
    Role.FACULTY: "faculty_dashboard",
    Role.STUDENT: "student_dashboard",
}


def current_actor() -> Optional[SessionUser]:
    data = session.get("user")
    if not data:
        return None
    try:
        return SessionUser.from_session(data)
    except (KeyError, ValueError, TypeError):
        session.clear()
        return None


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_actor() is None:
            flash("Please sign in to continue.", "warning")
            return redirect(url_for("login"))
        return view(*args, **kwargs)

    return wrapper


def role_required(*roles: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            actor = current_actor()
            if actor is None:
                flash("Please sign in to continue.", "warning")
                return redirect(url_for("login"))
            if actor.role not in roles:
                return render_template("403.html", current_user=actor), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def landing_endpoint(actor: SessionUser) -> str:
    return ROLE_LANDING[actor.role]

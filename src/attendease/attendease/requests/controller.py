from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.web import current_actor, landing_endpoint, role_required
from ..core.constants import OTHER_APPROVER
from ..core.enums import RequestStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.request_service

    # -------- Student --------
    @app.route("/student/dashboard", methods=["GET", "POST"], endpoint="student_dashboard")
    @role_required(Role.STUDENT)
    def student_dashboard():
        actor = current_actor()

        if request.method == "POST":
            try:
                ids = service.submit(
                    actor=actor,
                    class_ids=request.form.getlist("class_ids"),
                    reason=request.form.get("reason", ""),
                    approver_id=request.form.get("approver_id", ""),
                    other_approver_name=request.form.get("other_approver_name", ""),
                    event_id=request.form.get("event_id"),
                )
                if len(ids) == 1:
                    flash("Your request has been submitted.", "success")
                else:
                    flash(f"Your absence was split into {len(ids)} requests, one per approver.", "success")
                return redirect(url_for("student_dashboard"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Request submission failed")
                flash("Could not submit the request.", "danger")

        return render_template(
            "student/dashboard.html",
            week=container.timetable_service.week_for_student(actor),
            events=container.event_service.list_events(),
            faculty=container.user_service.list_faculty(),
            rows=service.recent_for_student(actor),
            requires_approver=service.requires_approver,
            other_approver=OTHER_APPROVER,
            current_user=actor,
            active_page="student_dashboard",
        )

    @app.route("/student/my-requests", methods=["GET"], endpoint="my_requests")
    @role_required(Role.STUDENT)
    def my_requests():
        actor = current_actor()
        return render_template(
            "student/my_requests.html",
            rows=service.list_for_student(actor),
            current_user=actor,
            active_page="my_requests",
        )

    # -------- Approvers --------
    @app.route("/faculty/dashboard", methods=["GET"], endpoint="faculty_dashboard")
    @role_required(Role.FACULTY)
    def faculty_dashboard():
        actor = current_actor()
        return render_template(
            "faculty/dashboard.html",
            rows=service.pending_for_approver(actor),
            current_user=actor,
            active_page="faculty_dashboard",
        )

    @app.route("/faculty/requests/<request_id>/approve", methods=["POST"], endpoint="approve_request")
    @role_required(Role.FACULTY, Role.ADMIN)
    def approve_request(request_id: str):
        actor = current_actor()
        try:
            service.approve(actor=actor, request_id=request_id, comment=request.form.get("comment", ""))
            flash("Request approved.", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Approving request %s failed", request_id)
            flash("Could not update the request.", "danger")
        return redirect(url_for(landing_endpoint(actor)))

    @app.route("/faculty/requests/<request_id>/reject", methods=["POST"], endpoint="reject_request")
    @role_required(Role.FACULTY, Role.ADMIN)
    def reject_request(request_id: str):
        actor = current_actor()
        try:
            service.reject(actor=actor, request_id=request_id, comment=request.form.get("comment", ""))
            flash("Request rejected.", "info")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Rejecting request %s failed", request_id)
            flash("Could not update the request.", "danger")
        return redirect(url_for(landing_endpoint(actor)))

    # -------- Admin --------
    @app.route("/admin/dashboard", methods=["GET"], endpoint="admin_dashboard")
    @role_required(Role.ADMIN)
    def admin_dashboard():
        actor = current_actor()
        return render_template(
            "admin/dashboard.html",
            stats=container.stats_service.dashboard(actor=actor),
            rows=service.pending_for_approver(actor),
            current_user=actor,
            active_page="admin_dashboard",
        )

    @app.route("/admin/requests", methods=["GET"], endpoint="admin_requests")
    @role_required(Role.ADMIN)
    def admin_requests():
        actor = current_actor()
        term = request.args.get("q", "")
        status = request.args.get("status", "all")
        rows = []
        try:
            rows = service.admin_log(actor=actor, term=term, status=status)
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        return render_template(
            "admin/requests.html",
            rows=rows,
            term=term,
            status_filter=status,
            statuses=[s.value for s in RequestStatus],
            current_user=actor,
            active_page="admin_requests",
        )

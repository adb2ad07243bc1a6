from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.web import current_actor, role_required
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.event_service

    @app.route("/admin/events", methods=["GET"], endpoint="admin_events")
    @role_required(Role.ADMIN)
    def admin_events():
        return render_template(
            "admin/events.html",
            events=service.list_events(),
            current_user=current_actor(),
            active_page="admin_events",
        )

    @app.route("/admin/events/add", methods=["POST"], endpoint="add_event")
    @role_required(Role.ADMIN)
    def add_event():
        try:
            service.create_event(
                actor=current_actor(),
                name=request.form.get("name", ""),
                description=request.form.get("description", ""),
            )
            flash("Event added.", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Adding event failed")
            flash("Could not add the event.", "danger")

        return redirect(url_for("admin_events"))

    @app.route("/admin/events/<event_id>/edit", methods=["GET", "POST"], endpoint="edit_event")
    @role_required(Role.ADMIN)
    def edit_event(event_id: str):
        if request.method == "POST":
            try:
                service.update_event(
                    actor=current_actor(),
                    event_id=event_id,
                    name=request.form.get("name", ""),
                    description=request.form.get("description", ""),
                )
                flash("Event updated.", "success")
                return redirect(url_for("admin_events"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Updating event failed")
                flash("Could not update the event.", "danger")

        try:
            event = service.get(event_id)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("admin_events"))
        return render_template(
            "admin/edit_event.html",
            event=event,
            current_user=current_actor(),
            active_page="admin_events",
        )

    @app.route("/admin/events/<event_id>/delete", methods=["POST"], endpoint="delete_event")
    @role_required(Role.ADMIN)
    def delete_event(event_id: str):
        try:
            service.delete_event(actor=current_actor(), event_id=event_id)
            flash("Event deleted.", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Deleting event failed")
            flash("Could not delete the event.", "danger")

        return redirect(url_for("admin_events"))

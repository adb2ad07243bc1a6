from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for
from werkzeug.exceptions import RequestEntityTooLarge

from ..common.validators import coerce_positive_int
from ..common.web import current_actor, role_required
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..container import Container


def _entry_form() -> dict:
    return {
        "entry_date": request.form.get("entry_date", ""),
        "day": request.form.get("day", ""),
        "time_slot": request.form.get("time_slot", ""),
        "subject_name": request.form.get("subject_name", ""),
        "faculty_id": request.form.get("faculty_id", ""),
        "course": request.form.get("course", ""),
        "semester": request.form.get("semester", ""),
    }


def register(app: Flask, container: Container) -> None:
    service = container.timetable_service

    @app.errorhandler(RequestEntityTooLarge)
    def upload_too_large(_e):
        flash("The uploaded file is too large", "danger")
        return redirect(url_for("admin_timetables"))

    @app.route("/admin/timetables", methods=["GET"], endpoint="admin_timetables")
    @role_required(Role.ADMIN)
    def admin_timetables():
        course = request.args.get("course", "").strip() or None
        semester_s = request.args.get("semester", "").strip()
        entries = []
        try:
            semester = coerce_positive_int(semester_s, "Semester") if semester_s else None
            entries = service.list_entries(course=course, semester=semester)
        except ValidationError as e:
            flash(str(e), "danger")

        courses, semesters = service.filter_options()
        return render_template(
            "admin/timetables.html",
            entries=entries,
            courses=courses,
            semesters=semesters,
            faculty=container.user_service.list_faculty(),
            course_filter=course or "",
            semester_filter=semester_s,
            schedule_mode=service.schedule_mode.value,
            current_user=current_actor(),
            active_page="admin_timetables",
        )

    @app.route("/admin/timetables/upload", methods=["POST"], endpoint="upload_timetable")
    @role_required(Role.ADMIN)
    def upload_timetable():
        upload = request.files.get("file")
        try:
            if upload is None or not upload.filename:
                raise ValidationError("Please choose a CSV file to upload")
            if not upload.filename.lower().endswith(".csv"):
                raise ValidationError("Only .csv files are supported")

            result = service.upload_csv(actor=current_actor(), data=upload.read())
            message = f"Saved {result.saved} timetable entries."
            if result.skipped:
                message += f" {result.skipped} rows were skipped due to missing or invalid data."
            flash(message, "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Timetable upload failed")
            flash("Could not save the timetable.", "danger")

        return redirect(url_for("admin_timetables"))

    @app.route("/admin/timetables/add", methods=["POST"], endpoint="add_timetable_entry")
    @role_required(Role.ADMIN)
    def add_timetable_entry():
        try:
            service.add_entry(actor=current_actor(), **_entry_form())
            flash("Timetable entry added.", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Adding timetable entry failed")
            flash("Could not add the entry.", "danger")

        return redirect(url_for("admin_timetables"))

    @app.route("/admin/timetables/<entry_id>/edit", methods=["GET", "POST"], endpoint="edit_timetable_entry")
    @role_required(Role.ADMIN)
    def edit_timetable_entry(entry_id: str):
        if request.method == "POST":
            try:
                service.update_entry(actor=current_actor(), entry_id=entry_id, **_entry_form())
                flash("Timetable entry updated.", "success")
                return redirect(url_for("admin_timetables"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Updating timetable entry failed")
                flash("Could not update the entry.", "danger")

        try:
            entry = service.get_entry(entry_id)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("admin_timetables"))
        return render_template(
            "admin/edit_timetable.html",
            entry=entry,
            faculty=container.user_service.list_faculty(),
            schedule_mode=service.schedule_mode.value,
            current_user=current_actor(),
            active_page="admin_timetables",
        )

    @app.route("/admin/timetables/<entry_id>/delete", methods=["POST"], endpoint="delete_timetable_entry")
    @role_required(Role.ADMIN)
    def delete_timetable_entry(entry_id: str):
        try:
            service.delete_entry(actor=current_actor(), entry_id=entry_id)
            flash("Timetable entry deleted.", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Deleting timetable entry failed")
            flash("Could not delete the entry.", "danger")

        return redirect(url_for("admin_timetables"))

    @app.route("/admin/timetables/bulk-delete", methods=["POST"], endpoint="bulk_delete_timetable")
    @role_required(Role.ADMIN)
    def bulk_delete_timetable():
        try:
            removed = service.bulk_delete(
                actor=current_actor(),
                course=request.form.get("course", ""),
                semester=request.form.get("semester", ""),
            )
            flash(f"Deleted {removed} timetable entries.", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Bulk delete failed")
            flash("Could not delete the entries.", "danger")

        return redirect(url_for("admin_timetables"))

from __future__ import annotations

from datetime import timedelta

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.web import current_actor, landing_endpoint, login_required, role_required
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from ..container import Container


def _role_from_form(value: str) -> Role:
    try:
        return Role((value or "").strip().lower())
    except ValueError:
        raise ValidationError("Role is not valid")


def register(app: Flask, container: Container) -> None:
    @app.route("/", methods=["GET", "POST"], endpoint="login")
    @app.route("/login", methods=["GET", "POST"])
    def login():
        actor = current_actor()
        if actor is not None:
            return redirect(url_for(landing_endpoint(actor)))

        if request.method == "POST":
            email = request.form.get("email", "")
            password = request.form.get("password", "")
            remember = request.form.get("remember_me")

            try:
                s_user = container.auth_service.authenticate(email, password)

                session.clear()
                session.permanent = bool(remember)
                app.permanent_session_lifetime = timedelta(days=7)
                session["user"] = s_user.to_session()

                flash(f"Welcome, {s_user.name}!", "success")
                return redirect(url_for(landing_endpoint(s_user)))
            except AuthenticationError as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Login failed")
                flash("Could not sign in. Please try again later.", "danger")

        return render_template("login.html")

    @app.route("/logout", endpoint="logout")
    def logout():
        session.clear()
        flash("You have been signed out.", "info")
        return redirect(url_for("login"))

    @app.route("/dashboard", endpoint="dashboard")
    @login_required
    def dashboard():
        return redirect(url_for(landing_endpoint(current_actor())))

    @app.route("/forgot-password", methods=["GET", "POST"], endpoint="forgot_password")
    def forgot_password():
        if request.method == "POST":
            try:
                token = container.auth_service.request_password_reset(request.form.get("email", ""))
                if token:
                    # No mail transport: the link goes to the log.
                    link = url_for("reset_password", token=token, _external=True)
                    app.logger.info("Password reset link: %s", link)
                flash("If an account exists for that email, a reset link has been sent.", "info")
                return redirect(url_for("login"))
            except Exception:
                app.logger.exception("Password reset request failed")
                flash("Could not start the password reset. Please try again later.", "danger")

        return render_template("forgot_password.html")

    @app.route("/reset-password/<token>", methods=["GET", "POST"], endpoint="reset_password")
    def reset_password(token: str):
        if request.method == "POST":
            password = request.form.get("password", "")
            confirm = request.form.get("confirm_password", "")
            try:
                if password != confirm:
                    raise ValidationError("Passwords do not match")
                container.auth_service.reset_password(token, password)
                flash("Your password has been reset. Please sign in.", "success")
                return redirect(url_for("login"))
            except ValidationError as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Password reset failed")
                flash("Could not reset the password. Please try again later.", "danger")

        return render_template("reset_password.html", token=token)

    # -------- Admin: user directory --------
    @app.route("/admin/users", endpoint="admin_users")
    @role_required(Role.ADMIN)
    def admin_users():
        actor = current_actor()
        term = request.args.get("q", "")
        role_s = request.args.get("role", "all")
        users = []
        try:
            role = None if role_s in ("", "all") else _role_from_form(role_s)
            users = container.user_service.search(actor=actor, term=term, role=role)
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        return render_template(
            "admin/users.html",
            users=users,
            term=term,
            role_filter=role_s,
            roles=list(Role),
            current_user=actor,
            active_page="admin_users",
        )

    @app.route("/admin/users/add", methods=["POST"], endpoint="add_user")
    @role_required(Role.ADMIN)
    def add_user():
        try:
            container.user_service.create_account(
                actor=current_actor(),
                name=request.form.get("name", ""),
                email=request.form.get("email", ""),
                password=request.form.get("password", ""),
                role=_role_from_form(request.form.get("role", "student")),
                prn=request.form.get("prn"),
                course=request.form.get("course"),
                semester=request.form.get("semester"),
                subjects=request.form.get("subjects"),
            )
            flash("User added.", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Adding user failed")
            flash("Could not add the user.", "danger")

        return redirect(url_for("admin_users"))

    @app.route("/admin/users/<user_id>/edit", methods=["GET", "POST"], endpoint="edit_user")
    @role_required(Role.ADMIN)
    def edit_user(user_id: str):
        if request.method == "POST":
            try:
                container.user_service.update_account(
                    actor=current_actor(),
                    user_id=user_id,
                    name=request.form.get("name", ""),
                    email=request.form.get("email", ""),
                    role=_role_from_form(request.form.get("role", "")),
                    prn=request.form.get("prn"),
                    course=request.form.get("course"),
                    semester=request.form.get("semester"),
                    subjects=request.form.get("subjects"),
                    password=request.form.get("password", ""),
                )
                flash("User updated.", "success")
                return redirect(url_for("admin_users"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Updating user failed")
                flash("Could not update the user.", "danger")

        try:
            user = container.user_service.get(user_id)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("admin_users"))
        return render_template(
            "admin/edit_user.html",
            user=user,
            roles=list(Role),
            current_user=current_actor(),
            active_page="admin_users",
        )

    @app.route("/admin/users/<user_id>/delete", methods=["POST"], endpoint="delete_user")
    @role_required(Role.ADMIN)
    def delete_user(user_id: str):
        try:
            container.user_service.delete_user(actor=current_actor(), user_id=user_id)
            flash("User deleted.", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Deleting user failed")
            flash("Could not delete the user.", "danger")

        return redirect(url_for("admin_users"))

from __future__ import annotations

from datetime import datetime, timezone

from flask import Flask, g, jsonify, redirect, session, url_for

from ..attendance.presentation import user_to_dict
from ..container import Container
from ..web import login_required, request_payload


def register(app: Flask, container: Container) -> None:
    @app.route("/health-check", methods=["GET"], endpoint="health_check")
    def health_check():
        return jsonify({"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()})

    @app.route("/register", methods=["POST"], endpoint="register")
    def register_user():
        payload = request_payload()
        user = container.user_service.create_account(
            full_name=payload.get("name", ""),
            email=payload.get("email", ""),
            password=payload.get("password", ""),
            role=payload.get("role", "student"),
            teacher_id=payload.get("teacher_id") or None,
            student_code=payload.get("student_id"),
        )
        session.clear()
        session["user_id"] = user.user_id
        return jsonify({"success": True, "user": user_to_dict(user)}), 201

    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        payload = request_payload()
        user = container.auth_service.authenticate(payload.get("email", ""), payload.get("password", ""))

        session.clear()
        session.permanent = bool(payload.get("remember"))
        session["user_id"] = user.user_id

        app.logger.info("User %s logged in", user.user_id)
        return jsonify({"success": True, "user": user_to_dict(user)})

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify(user_to_dict(g.actor))

    @app.route("/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required
    def dashboard():
        return redirect(url_for("attendance_index"))

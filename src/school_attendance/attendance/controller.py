from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..container import Container
from ..web import login_required, request_payload
from .model import TeacherView
from .presentation import (
    page_to_dict,
    record_to_dict,
    student_history_to_dict,
    student_view_to_dict,
    teacher_view_to_dict,
)

PATCHABLE_FIELDS = ("status", "notes")


def _target_user_id(payload: dict):
    # Older clients send user_id=0 for "myself"; the service only knows None.
    value = payload.get("user_id")
    if value in (0, "0", ""):
        return None
    return value


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/attendance", methods=["GET"], endpoint="attendance_index")
    @login_required
    def attendance_index():
        view = service.dashboard_snapshot(
            g.actor,
            request.args.get("date"),
            page=request.args.get("page", 1, type=int),
        )
        if isinstance(view, TeacherView):
            return jsonify(teacher_view_to_dict(view))
        return jsonify(student_view_to_dict(view))

    @app.route("/attendance", methods=["POST"], endpoint="attendance_store")
    @login_required
    def attendance_store():
        payload = request_payload()
        record = service.mark_attendance(
            g.actor,
            work_date=payload.get("date"),
            status=payload.get("status"),
            notes=payload.get("notes"),
            target_user_id=_target_user_id(payload),
        )
        return jsonify({"success": True, "message": "Attendance marked successfully.", "record": record_to_dict(record)})

    @app.route("/attendance/<int:attendance_id>", methods=["PATCH"], endpoint="attendance_update")
    @login_required
    def attendance_update(attendance_id: int):
        payload = request_payload()
        patch = {k: payload[k] for k in PATCHABLE_FIELDS if k in payload}
        record = service.update_attendance(g.actor, attendance_id, patch)
        return jsonify(
            {"success": True, "message": "Attendance updated successfully.", "record": record_to_dict(record)}
        )

    @app.route("/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_destroy")
    @login_required
    def attendance_destroy(attendance_id: int):
        service.delete_attendance(g.actor, attendance_id)
        return jsonify({"success": True, "message": "Attendance record deleted successfully."})

    @app.route("/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        target = request.args.get("user_id", g.actor.user_id, type=int)
        page = service.list_attendance(g.actor, target, page=request.args.get("page", 1, type=int))
        return jsonify(page_to_dict(page))

    @app.route("/attendance/student/<int:user_id>", methods=["GET"], endpoint="attendance_student_show")
    @login_required
    def attendance_student_show(user_id: int):
        history = service.student_history(g.actor, user_id, page=request.args.get("page", 1, type=int))
        return jsonify(student_history_to_dict(history))

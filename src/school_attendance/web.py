"""Request helpers shared by the Flask controllers."""

from __future__ import annotations

from functools import wraps

from flask import Flask, current_app, g, jsonify, request, session
from werkzeug.exceptions import InternalServerError

from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from .attendance.policy import FORBIDDEN_MESSAGE

CONTAINER_KEY = "school_attendance"


def get_container():
    return current_app.extensions[CONTAINER_KEY]


def request_payload() -> dict:
    """JSON body, falling back to form fields."""

    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def login_required(view):
    """Resolve the session user on every request and expose it as ``g.actor``."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        actor = get_container().auth_service.get_active_user(session.get("user_id"))
        if actor is None:
            session.clear()
            return jsonify({"success": False, "message": "Unauthenticated."}), 401
        g.actor = actor
        return view(*args, **kwargs)

    return wrapper


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation_error(e: ValidationError):
        return jsonify({"success": False, "message": str(e), "errors": e.errors}), 422

    @app.errorhandler(AuthenticationError)
    def _authentication_error(e: AuthenticationError):
        return jsonify({"success": False, "message": str(e)}), 401

    @app.errorhandler(AuthorizationError)
    def _authorization_error(_e: AuthorizationError):
        return jsonify({"success": False, "message": FORBIDDEN_MESSAGE}), 403

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return jsonify({"success": False, "message": str(e)}), 404

    @app.errorhandler(ConflictError)
    def _conflict(_e: ConflictError):
        return jsonify({"success": False, "message": "The record was changed by another request, please retry."}), 409

    @app.errorhandler(InternalServerError)
    def _server_error(_e: InternalServerError):
        # Flask has already logged the original exception with its traceback.
        return jsonify({"success": False, "message": "Server error."}), 500

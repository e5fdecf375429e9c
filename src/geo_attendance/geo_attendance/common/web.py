"""Shared Flask helpers: caller identity, JSON errors, query parsing."""

from __future__ import annotations

import logging
from datetime import datetime
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session

from ..core.enums import ErrorKind, Role
from ..core.exceptions import (
    AttendanceError,
    AuthorizationError,
    InfrastructureError,
    ValidationError,
)
from .datetime_utils import parse_iso_datetime

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.SESSION_NOT_FOUND: 404,
    ErrorKind.STUDENT_NOT_FOUND: 404,
    ErrorKind.CLASS_NOT_FOUND: 404,
    ErrorKind.SESSION_INACTIVE: 410,
    ErrorKind.SESSION_EXPIRED: 410,
    ErrorKind.EXPIRED_SESSION: 410,
    ErrorKind.INVALID_SESSION_STATE: 410,
    ErrorKind.INACTIVE_STUDENT: 403,
    ErrorKind.ROLE_NOT_PERMITTED: 403,
    ErrorKind.NOT_ENROLLED: 403,
    ErrorKind.DUPLICATE_ATTENDANCE: 409,
    ErrorKind.ALREADY_ENROLLED: 409,
    ErrorKind.CLASS_LOCATION_NOT_CONFIGURED: 409,
    ErrorKind.OUT_OF_RANGE: 422,
    ErrorKind.INVALID_LOCATION: 422,
    ErrorKind.INVALID_SUBMISSION: 422,
    ErrorKind.INVALID_CHECKIN_CODE: 422,
}


def status_for(kind: Optional[ErrorKind]) -> int:
    if kind is None:
        return 200
    return STATUS_BY_KIND.get(kind, 400)


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Optional[Role]:
    try:
        return Role(session.get("role"))
    except ValueError:
        return None


def login_required(view):
    """The identity provider is expected to have put user_id/role in the session."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def capability_required(capability: str):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            role = current_role()
            if role is None or not getattr(role, capability):
                raise AuthorizationError("Your account role cannot perform this action")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def optional_datetime_arg(name: str) -> Optional[datetime]:
    value = request.args.get(name)
    if not value:
        return None
    try:
        return parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 date or datetime") from None


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AttendanceError)
    def _attendance_error(e: AttendanceError):
        body = {"success": False, "errorKind": e.kind.value, "message": e.message}
        return jsonify(body), status_for(e.kind)

    @app.errorhandler(ValidationError)
    def _validation_error(e: ValidationError):
        return jsonify({"success": False, "message": str(e)}), 400

    @app.errorhandler(AuthorizationError)
    def _authorization_error(e: AuthorizationError):
        return jsonify({"success": False, "message": str(e)}), 403

    @app.errorhandler(InfrastructureError)
    def _infrastructure_error(e: InfrastructureError):
        logger.error("Infrastructure failure on %s: %s", request.path, e)
        return jsonify({"success": False, "retryable": True, "message": "Service temporarily unavailable. Please try again."}), 503

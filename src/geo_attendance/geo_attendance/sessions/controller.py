from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.validators import require_between, require_positive
from ..common.web import capability_required, current_role, current_user_id, json_body, login_required
from ..container import Container
from ..core.constants import DEFAULT_EXTEND_MINUTES, MAX_API_SESSION_MINUTES, MIN_API_SESSION_MINUTES
from ..core.exceptions import SessionNotFoundError
from .checkin_code import render_qr_png


def register(app: Flask, container: Container) -> None:
    sessions = container.session_service

    def _authorize(class_id: int) -> None:
        sessions.ensure_can_manage(class_id, user_id=current_user_id(), role=current_role())

    def _load_managed(session_id: int):
        s = sessions.get(session_id)
        if s is None:
            raise SessionNotFoundError()
        _authorize(s.class_id)
        return s

    @app.route("/api/classes/<int:class_id>/sessions", methods=["POST"], endpoint="create_session")
    @capability_required("can_manage_sessions")
    def create_session(class_id: int):
        _authorize(class_id)
        data = request.get_json(silent=True) or {}
        duration = require_between(
            data.get("durationMinutes", sessions.default_minutes),
            "durationMinutes",
            MIN_API_SESSION_MINUTES,
            MAX_API_SESSION_MINUTES,
        )
        s = sessions.create_for_class(class_id, duration)
        return jsonify({
            "success": True,
            "session": sessions.summarize(s).to_dict(),
            "checkIn": sessions.get_shareable_data(s).to_dict(),
        }), 201

    @app.route("/api/classes/<int:class_id>/sessions/active", methods=["GET"], endpoint="active_session")
    @capability_required("can_manage_sessions")
    def active_session(class_id: int):
        _authorize(class_id)
        s = sessions.find_active_by_class(class_id)
        return jsonify({"success": True, "session": sessions.summarize(s).to_dict() if s else None})

    @app.route("/api/sessions/<string:token>", methods=["GET"], endpoint="session_checkin_data")
    @login_required
    def session_checkin_data(token: str):
        payload = sessions.get_shareable_data(token)
        return jsonify({"success": True, "checkIn": payload.to_dict()})

    @app.route("/api/sessions/<string:token>/qr.png", methods=["GET"], endpoint="session_qr_image")
    @capability_required("can_manage_sessions")
    def session_qr_image(token: str):
        payload = sessions.get_shareable_data(token)
        _authorize(payload.class_id)
        return send_file(io.BytesIO(render_qr_png(payload)), mimetype="image/png")

    @app.route("/api/sessions/<int:session_id>/extend", methods=["POST"], endpoint="extend_session")
    @capability_required("can_manage_sessions")
    def extend_session(session_id: int):
        data = json_body() if request.data else {}
        extra = require_positive(data.get("minutes", DEFAULT_EXTEND_MINUTES), "minutes")
        updated = sessions.extend(_load_managed(session_id), extra)
        return jsonify({"success": True, "session": sessions.summarize(updated).to_dict()})

    @app.route("/api/sessions/<int:session_id>/deactivate", methods=["POST"], endpoint="deactivate_session")
    @capability_required("can_manage_sessions")
    def deactivate_session(session_id: int):
        updated = sessions.deactivate(_load_managed(session_id))
        return jsonify({"success": True, "session": sessions.summarize(updated).to_dict()})

    @app.route("/api/sessions/cleanup", methods=["POST"], endpoint="cleanup_sessions")
    @capability_required("can_manage_sessions")
    def cleanup_sessions():
        return jsonify({"success": True, "deactivated": sessions.cleanup_expired()})

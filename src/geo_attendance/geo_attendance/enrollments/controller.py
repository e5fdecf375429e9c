from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import capability_required, current_role, current_user_id, json_body, login_required
from ..container import Container
from ..core.exceptions import ValidationError
from .model import Enrollment


def _to_dict(e: Enrollment) -> dict:
    return {
        "id": e.enrollment_id,
        "studentId": e.student_id,
        "classId": e.class_id,
        "isActive": e.is_active,
        "enrolledAt": e.enrolled_at.isoformat(),
    }


def register(app: Flask, container: Container) -> None:
    enrollments = container.enrollment_service
    sessions = container.session_service

    @app.route("/api/enrollments", methods=["POST"], endpoint="enroll")
    @capability_required("can_enroll")
    def enroll():
        data = json_body()
        try:
            class_id = int(data["classId"])
        except (KeyError, TypeError, ValueError):
            raise ValidationError("classId is required") from None
        enrollment = enrollments.enroll(current_user_id(), class_id)
        return jsonify({"success": True, "message": "Successfully enrolled in class", "enrollment": _to_dict(enrollment)}), 201

    @app.route("/api/enrollments/<int:class_id>/status", methods=["GET"], endpoint="enrollment_status")
    @login_required
    def enrollment_status(class_id: int):
        return jsonify({"success": True, "enrolled": enrollments.is_enrolled(current_user_id(), class_id)})

    @app.route("/api/enrollments", methods=["GET"], endpoint="my_enrollments")
    @login_required
    def my_enrollments():
        include_inactive = request.args.get("includeInactive") == "true"
        rows = enrollments.list_for_student(current_user_id(), include_inactive=include_inactive)
        return jsonify({"success": True, "enrollments": [_to_dict(e) for e in rows]})

    @app.route("/api/classes/<int:class_id>/students/<int:student_id>/deactivate", methods=["POST"], endpoint="deactivate_enrollment")
    @capability_required("can_manage_sessions")
    def deactivate_enrollment(class_id: int, student_id: int):
        sessions.ensure_can_manage(class_id, user_id=current_user_id(), role=current_role())
        return jsonify({"success": True, "enrollment": _to_dict(enrollments.deactivate(student_id, class_id))})

    @app.route("/api/classes/<int:class_id>/students/<int:student_id>/reactivate", methods=["POST"], endpoint="reactivate_enrollment")
    @capability_required("can_manage_sessions")
    def reactivate_enrollment(class_id: int, student_id: int):
        sessions.ensure_can_manage(class_id, user_id=current_user_id(), role=current_role())
        return jsonify({"success": True, "enrollment": _to_dict(enrollments.reactivate(student_id, class_id))})

    @app.route("/api/classes/<int:class_id>/enrollments/count", methods=["GET"], endpoint="class_enrollment_count")
    @capability_required("can_view_reports")
    def class_enrollment_count(class_id: int):
        include_inactive = request.args.get("includeInactive") == "true"
        return jsonify({"success": True, "count": enrollments.count_for_class(class_id, include_inactive=include_inactive)})

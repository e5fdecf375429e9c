from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import capability_required, current_user_id, json_body, status_for
from ..container import Container
from ..core.exceptions import InvalidCheckInCodeError, ValidationError
from ..sessions.checkin_code import decode_qr_image, extract_token
from .model import AttendanceSubmission, StudentLocation


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service

    def _location_from(data) -> StudentLocation:
        try:
            return StudentLocation(lat=float(data["lat"]), lng=float(data["lng"]))
        except (KeyError, TypeError, ValueError):
            raise ValidationError("lat and lng are required numbers") from None

    def _respond(submission: AttendanceSubmission):
        result = attendance.submit(submission)
        return jsonify(result.to_dict()), (201 if result.success else status_for(result.error_kind))

    @app.route("/api/attendance", methods=["POST"], endpoint="submit_attendance")
    @capability_required("can_mark_attendance")
    def submit_attendance():
        data = json_body()
        token = extract_token(str(data.get("code") or data.get("sessionToken") or ""))
        submission = AttendanceSubmission(
            student_id=current_user_id(),
            student_location=_location_from(data.get("studentLocation") or data),
            session_token=token,
            max_distance_meters=container.max_distance_meters,
        )
        return _respond(submission)

    @app.route("/api/attendance/image", methods=["POST"], endpoint="submit_attendance_image")
    @capability_required("can_mark_attendance")
    def submit_attendance_image():
        """Accept a photographed check-in code plus the student's position as form fields."""

        if "image" not in request.files:
            raise InvalidCheckInCodeError("Image file is missing")

        token = extract_token(decode_qr_image(request.files["image"].stream))
        submission = AttendanceSubmission(
            student_id=current_user_id(),
            student_location=_location_from(request.form),
            session_token=token,
            max_distance_meters=container.max_distance_meters,
        )
        return _respond(submission)

    @app.route("/api/attendance/eligibility", methods=["POST"], endpoint="attendance_eligibility")
    @capability_required("can_mark_attendance")
    def attendance_eligibility():
        data = json_body()
        token = extract_token(str(data.get("code") or data.get("sessionToken") or ""))
        result = attendance.check_eligibility(student_id=current_user_id(), session_token=token)
        return jsonify(result.to_dict()), (200 if result.success else status_for(result.error_kind))

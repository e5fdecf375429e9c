from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import capability_required, current_role, current_user_id, login_required, optional_datetime_arg
from ..container import Container
from ..core.exceptions import AuthorizationError
from .model import ClassStatsRow, StudentSummary


def _row_to_dict(r: ClassStatsRow) -> dict:
    return {
        "studentId": r.student_id,
        "studentName": r.student_name,
        "attendanceCount": r.attendance_count,
        "firstAttendance": r.first_attendance.isoformat() if r.first_attendance else None,
        "lastAttendance": r.last_attendance.isoformat() if r.last_attendance else None,
    }


def _summary_to_dict(s: StudentSummary) -> dict:
    return {
        "studentId": s.student_id,
        "totalAttendance": s.total_attendance,
        "uniqueClasses": s.unique_classes,
        "attendanceByMonth": s.by_month,
        "earliest": s.earliest.isoformat() if s.earliest else None,
        "latest": s.latest.isoformat() if s.latest else None,
    }


def register(app: Flask, container: Container) -> None:
    stats = container.stats_service

    def _require_self_or_reporter(student_id: int) -> None:
        role = current_role()
        if student_id != current_user_id() and not (role and role.can_view_reports):
            raise AuthorizationError("You can only view your own attendance")

    @app.route("/api/stats/students/<int:student_id>", methods=["GET"], endpoint="stats_by_student")
    @login_required
    def stats_by_student(student_id: int):
        _require_self_or_reporter(student_id)
        records = stats.by_student(student_id, start=optional_datetime_arg("start"), end=optional_datetime_arg("end"))
        return jsonify({"success": True, "records": [r.to_dict() for r in records]})

    @app.route("/api/stats/students/<int:student_id>/summary", methods=["GET"], endpoint="stats_student_summary")
    @login_required
    def stats_student_summary(student_id: int):
        _require_self_or_reporter(student_id)
        summary = stats.student_summary(student_id, start=optional_datetime_arg("start"), end=optional_datetime_arg("end"))
        return jsonify({"success": True, "summary": _summary_to_dict(summary)})

    @app.route("/api/stats/sessions/<int:session_id>", methods=["GET"], endpoint="stats_by_session")
    @capability_required("can_view_reports")
    def stats_by_session(session_id: int):
        return jsonify({"success": True, "records": [r.to_dict() for r in stats.by_session(session_id)]})

    @app.route("/api/stats/classes/<int:class_id>", methods=["GET"], endpoint="stats_by_class")
    @capability_required("can_view_reports")
    def stats_by_class(class_id: int):
        records = stats.by_class(class_id, start=optional_datetime_arg("start"), end=optional_datetime_arg("end"))
        return jsonify({"success": True, "records": [r.to_dict() for r in records]})

    @app.route("/api/stats/classes/<int:class_id>/summary", methods=["GET"], endpoint="stats_class_summary")
    @capability_required("can_view_reports")
    def stats_class_summary(class_id: int):
        start = optional_datetime_arg("start")
        end = optional_datetime_arg("end")
        rate = stats.class_attendance_rate(class_id, start=start, end=end)
        rows = stats.class_stats(class_id, start=start, end=end)
        return jsonify({
            "success": True,
            "students": [_row_to_dict(r) for r in rows],
            "totalSessions": rate.total_sessions,
            "enrolledStudents": rate.enrolled_students,
            "totalRecords": rate.total_records,
            "attendanceRate": rate.attendance_rate,
        })

from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import format_instant, parse_instant, parse_period_bound
from ..common.http import current_actor, json_body, ok, optional_int
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .model import AttendanceRecord


def attendance_to_json(a: AttendanceRecord) -> dict:
    return {
        "id": a.attendance_id,
        "shiftId": a.shift_id,
        "userId": a.user_id,
        "companyId": a.company_id,
        "clockIn": format_instant(a.clock_in),
        "clockOut": format_instant(a.clock_out),
        "breakDuration": a.break_duration,
        "totalHours": a.total_hours,
        "status": a.status.value,
        "approvedBy": a.approved_by,
        "approvedAt": format_instant(a.approved_at),
        "notes": a.notes,
        "version": a.version,
    }


def _parse_status(value) -> AttendanceStatus | None:
    if value is None or value == "":
        return None
    try:
        return AttendanceStatus(str(value).upper())
    except ValueError:
        raise ValidationError(f"Unknown attendance status: {value}")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance", methods=["POST"], endpoint="api_attendance_create")
    def clock_in():
        data = json_body()
        if data.get("shiftId") is None:
            raise ValidationError("shiftId is required")
        record = container.attendance_service.clock_in(
            current_actor(),
            shift_id=data["shiftId"],
            user_id=data.get("userId"),
            clock_in=parse_instant(data.get("clockIn"), "clockIn"),
            clock_out=parse_instant(data["clockOut"], "clockOut") if data.get("clockOut") else None,
            break_duration=data.get("breakDuration"),
            notes=data.get("notes"),
        )
        return ok(attendance_to_json(record), message="Attendance record created successfully", status=201)

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance_list")
    def list_attendance():
        args = request.args
        rows = container.attendance_service.list(
            current_actor(),
            user_id=optional_int(args.get("userId"), "userId"),
            shift_id=optional_int(args.get("shiftId"), "shiftId"),
            status=_parse_status(args.get("status")),
            start=parse_period_bound(args["startDate"], "startDate", end=False) if args.get("startDate") else None,
            end=parse_period_bound(args["endDate"], "endDate", end=True) if args.get("endDate") else None,
        )
        return ok([attendance_to_json(r) for r in rows])

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="api_attendance_get")
    def get_attendance(attendance_id: int):
        return ok(attendance_to_json(container.attendance_service.get(current_actor(), attendance_id)))

    @app.route("/api/attendance/<int:attendance_id>", methods=["PATCH"], endpoint="api_attendance_update")
    def update_attendance(attendance_id: int):
        data = json_body()
        record = container.attendance_service.update(
            current_actor(),
            attendance_id,
            clock_out=parse_instant(data["clockOut"], "clockOut") if data.get("clockOut") else None,
            break_duration=data.get("breakDuration"),
            notes=data.get("notes"),
            status=_parse_status(data.get("status")),
            expected_version=optional_int(data.get("version"), "version"),
        )
        return ok(attendance_to_json(record), message="Attendance record updated successfully")

    @app.route("/api/attendance/<int:attendance_id>/approve", methods=["POST"], endpoint="api_attendance_approve")
    def approve_attendance(attendance_id: int):
        record = container.attendance_service.approve(current_actor(), attendance_id)
        return ok(attendance_to_json(record), message="Attendance approved")

    @app.route("/api/attendance/<int:attendance_id>/reject", methods=["POST"], endpoint="api_attendance_reject")
    def reject_attendance(attendance_id: int):
        record = container.attendance_service.reject(current_actor(), attendance_id)
        return ok(attendance_to_json(record), message="Attendance rejected")

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="api_attendance_delete")
    def delete_attendance(attendance_id: int):
        container.attendance_service.delete(current_actor(), attendance_id)
        return ok(message="Attendance record deleted successfully")

from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import format_instant, parse_instant, parse_period_bound
from ..common.http import current_actor, json_body, ok, optional_int
from ..core.enums import ShiftStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .model import Shift, ShiftUpdate


def shift_to_json(s: Shift) -> dict:
    return {
        "id": s.shift_id,
        "rosterId": s.roster_id,
        "title": s.title,
        "description": s.description,
        "startTime": format_instant(s.start_time),
        "endTime": format_instant(s.end_time),
        "status": s.status.value,
        "assignedUserId": s.assigned_user_id,
        "location": s.location,
        "notes": s.notes,
        "version": s.version,
    }


def _parse_status(value) -> ShiftStatus | None:
    if value is None or value == "":
        return None
    try:
        return ShiftStatus(str(value).upper())
    except ValueError:
        raise ValidationError(f"Unknown shift status: {value}")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/shifts", methods=["POST"], endpoint="api_shifts_create")
    def create_shift():
        data = json_body()
        if data.get("rosterId") is None:
            raise ValidationError("rosterId is required")
        shift = container.shift_service.create(
            current_actor(),
            roster_id=data["rosterId"],
            start_time=parse_instant(data.get("startTime"), "startTime"),
            end_time=parse_instant(data.get("endTime"), "endTime"),
            assigned_user_id=data.get("assignedUserId"),
            title=data.get("title") or "",
            description=data.get("description"),
            location=data.get("location"),
            notes=data.get("notes"),
        )
        return ok(shift_to_json(shift), message="Shift created", status=201)

    @app.route("/api/shifts", methods=["GET"], endpoint="api_shifts_list")
    def list_shifts():
        args = request.args
        rows = container.shift_service.list(
            current_actor(),
            roster_id=optional_int(args.get("rosterId"), "rosterId"),
            assigned_user_id=optional_int(args.get("assignedUserId"), "assignedUserId"),
            status=_parse_status(args.get("status")),
            start=parse_period_bound(args["startDate"], "startDate", end=False) if args.get("startDate") else None,
            end=parse_period_bound(args["endDate"], "endDate", end=True) if args.get("endDate") else None,
        )
        return ok([shift_to_json(s) for s in rows])

    @app.route("/api/shifts/<int:shift_id>", methods=["GET"], endpoint="api_shifts_get")
    def get_shift(shift_id: int):
        return ok(shift_to_json(container.shift_service.get(current_actor(), shift_id)))

    @app.route("/api/shifts/<int:shift_id>", methods=["PATCH"], endpoint="api_shifts_update")
    def update_shift(shift_id: int):
        data = json_body()
        changes = ShiftUpdate(
            start_time=parse_instant(data["startTime"], "startTime") if data.get("startTime") else None,
            end_time=parse_instant(data["endTime"], "endTime") if data.get("endTime") else None,
            assigned_user_id=data.get("assignedUserId"),
            status=_parse_status(data.get("status")),
            title=data.get("title"),
            description=data.get("description"),
            location=data.get("location"),
            notes=data.get("notes"),
        )
        shift = container.shift_service.update(
            current_actor(),
            shift_id,
            changes,
            expected_version=optional_int(data.get("version"), "version"),
        )
        return ok(shift_to_json(shift), message="Shift updated")

    @app.route("/api/shifts/<int:shift_id>", methods=["DELETE"], endpoint="api_shifts_delete")
    def delete_shift(shift_id: int):
        container.shift_service.delete(current_actor(), shift_id)
        return ok(message="Shift deleted successfully")

    @app.route("/api/shifts/<int:shift_id>/assign", methods=["POST"], endpoint="api_shifts_assign")
    def assign_shift(shift_id: int):
        data = json_body()
        if data.get("userId") is None:
            raise ValidationError("userId is required")
        shift = container.shift_service.assign(
            current_actor(),
            shift_id,
            data["userId"],
            expected_version=optional_int(data.get("version"), "version"),
        )
        return ok(shift_to_json(shift), message="Shift assigned")

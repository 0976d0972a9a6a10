from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import format_instant, parse_period_bound
from ..common.http import current_actor, json_body, ok, optional_int
from ..core.enums import PayrollStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .model import PayrollRecord


def payroll_to_json(p: PayrollRecord) -> dict:
    return {
        "id": p.payroll_id,
        "userId": p.user_id,
        "companyId": p.company_id,
        "periodStart": format_instant(p.period_start),
        "periodEnd": format_instant(p.period_end),
        "regularHours": p.regular_hours,
        "overtimeHours": p.overtime_hours,
        "hourlyRate": p.hourly_rate,
        "regularPay": p.regular_pay,
        "overtimePay": p.overtime_pay,
        "bonuses": p.bonuses,
        "deductions": p.deductions,
        "netPay": p.net_pay,
        "status": p.status.value,
        "approvedBy": p.approved_by,
        "approvedAt": format_instant(p.approved_at),
        "paidAt": format_instant(p.paid_at),
        "notes": p.notes,
        "version": p.version,
    }


def _parse_status(value) -> PayrollStatus | None:
    if value is None or value == "":
        return None
    try:
        return PayrollStatus(str(value).upper())
    except ValueError:
        raise ValidationError(f"Unknown payroll status: {value}")


def _period(data: dict) -> tuple:
    return (
        parse_period_bound(data.get("periodStart"), "periodStart", end=False),
        parse_period_bound(data.get("periodEnd"), "periodEnd", end=True),
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payroll", methods=["POST"], endpoint="api_payroll_create")
    def create_payroll():
        data = json_body()
        for key in ("userId", "companyId", "regularHours", "hourlyRate"):
            if data.get(key) is None:
                raise ValidationError(f"{key} is required")
        period_start, period_end = _period(data)
        record = container.payroll_service.create(
            current_actor(),
            user_id=data["userId"],
            company_id=data["companyId"],
            period_start=period_start,
            period_end=period_end,
            regular_hours=data["regularHours"],
            hourly_rate=data["hourlyRate"],
            overtime_hours=data.get("overtimeHours"),
            bonuses=data.get("bonuses"),
            deductions=data.get("deductions"),
            notes=data.get("notes"),
        )
        return ok(payroll_to_json(record), message="Payroll record created successfully", status=201)

    @app.route("/api/payroll/generate", methods=["POST"], endpoint="api_payroll_generate")
    def generate_payroll():
        data = json_body()
        if data.get("userId") is None:
            raise ValidationError("userId is required")
        period_start, period_end = _period(data)
        record = container.payroll_service.generate(
            current_actor(),
            user_id=data["userId"],
            period_start=period_start,
            period_end=period_end,
        )
        return ok(payroll_to_json(record), message="Payroll generated successfully", status=201)

    @app.route("/api/payroll", methods=["GET"], endpoint="api_payroll_list")
    def list_payroll():
        args = request.args
        rows = container.payroll_service.list(
            current_actor(),
            user_id=optional_int(args.get("userId"), "userId"),
            status=_parse_status(args.get("status")),
            period_from=parse_period_bound(args["periodStart"], "periodStart", end=False) if args.get("periodStart") else None,
            period_to=parse_period_bound(args["periodEnd"], "periodEnd", end=True) if args.get("periodEnd") else None,
        )
        return ok([payroll_to_json(r) for r in rows])

    @app.route("/api/payroll/<int:payroll_id>", methods=["GET"], endpoint="api_payroll_get")
    def get_payroll(payroll_id: int):
        return ok(payroll_to_json(container.payroll_service.get(current_actor(), payroll_id)))

    @app.route("/api/payroll/<int:payroll_id>", methods=["PATCH"], endpoint="api_payroll_update")
    def update_payroll(payroll_id: int):
        data = json_body()
        record = container.payroll_service.update(
            current_actor(),
            payroll_id,
            regular_hours=data.get("regularHours"),
            overtime_hours=data.get("overtimeHours"),
            bonuses=data.get("bonuses"),
            deductions=data.get("deductions"),
            notes=data.get("notes"),
            status=_parse_status(data.get("status")),
            expected_version=optional_int(data.get("version"), "version"),
        )
        return ok(payroll_to_json(record), message="Payroll record updated successfully")

    @app.route("/api/payroll/<int:payroll_id>/approve", methods=["POST"], endpoint="api_payroll_approve")
    def approve_payroll(payroll_id: int):
        data = json_body()
        record = container.payroll_service.approve(
            current_actor(), payroll_id, expected_version=optional_int(data.get("version"), "version")
        )
        return ok(payroll_to_json(record), message="Payroll approved")

    @app.route("/api/payroll/<int:payroll_id>", methods=["DELETE"], endpoint="api_payroll_delete")
    def delete_payroll(payroll_id: int):
        container.payroll_service.delete(current_actor(), payroll_id)
        return ok(message="Payroll record deleted successfully")

"""Flask glue shared by every controller: principal, envelope, JSON, errors."""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any, Optional

from flask import Flask, jsonify, request, session
from flask.json.provider import DefaultJSONProvider
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConcurrentModificationError,
    DomainError,
    NotFoundError,
    ShiftConflictError,
    ValidationError,
)
from ..core.policy import Actor

logger = logging.getLogger(__name__)


class DecimalJSONProvider(DefaultJSONProvider):
    """Reads JSON numbers with a fraction as Decimal and writes Decimal as a string."""

    def loads(self, s, **kwargs):
        kwargs.setdefault("parse_float", Decimal)
        return json.loads(s, **kwargs)

    @staticmethod
    def default(o):
        if isinstance(o, Decimal):
            return str(o)
        return DefaultJSONProvider.default(o)


def current_actor() -> Actor:
    if "user_id" not in session:
        raise AuthenticationError("Not authenticated")
    try:
        role = Role(str(session.get("role", "")).upper())
    except ValueError:
        raise AuthenticationError("Session role is not recognised")
    company_id = session.get("company_id")
    return Actor(
        user_id=int(session["user_id"]),
        role=role,
        company_id=int(company_id) if company_id is not None else None,
    )


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def optional_int(value: Any, field_name: str) -> Optional[int]:
    """Integer from a JSON field or query arg; blank means absent."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if isinstance(value, (float, Decimal)) and value != number:
        raise ValidationError(f"{field_name} must be an integer")
    return number


def optional_bool(value: Any, field_name: str) -> Optional[bool]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("true", "1"):
        return True
    if text in ("false", "0"):
        return False
    raise ValidationError(f"{field_name} must be true or false")


def ok(data: Any = None, *, message: Optional[str] = None, status: int = 200):
    payload: dict[str, Any] = {"success": True}
    if message:
        payload["message"] = message
    if data is not None:
        payload["data"] = data
    return jsonify(payload), status


def fail(error: str, status: int, **details):
    payload: dict[str, Any] = {"success": False, "error": error}
    payload.update(details)
    return jsonify(payload), status


def status_for(exc: DomainError) -> int:
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, AuthorizationError):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, (ShiftConflictError, ConcurrentModificationError)):
        return 409
    # ValidationError and the remaining ConflictError kinds are client errors.
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ShiftConflictError)
    def _shift_conflict(exc: ShiftConflictError):
        return fail(
            "Shift conflict",
            409,
            code=exc.code,
            message=str(exc),
            conflictingShiftIds=exc.conflicting_shift_ids,
        )

    @app.errorhandler(DomainError)
    def _domain_error(exc: DomainError):
        status = status_for(exc)
        message = "Already published" if exc.code == "ALREADY_PUBLISHED" else str(exc)
        return fail(message, status, code=exc.code)

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return fail(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(exc: Exception):
        logger.exception("unhandled_error", extra={"path": request.path, "method": request.method})
        return fail("Internal server error", 500)

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def require_positive_id(value: object, field_name: str) -> int:
    try:
        result = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid id")
    if isinstance(value, bool) or result <= 0:
        raise ValidationError(f"{field_name} is not a valid id")
    return result


def to_decimal(value: object, field_name: str) -> Decimal:
    """Coerce an exchanged numeric value into Decimal.

    Accepts Decimal, int and numeric strings. Binary floats are refused:
    money and hours must never pass through IEEE doubles.
    """

    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError(f"{field_name} must be a decimal string or integer, not a float")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValidationError(f"{field_name} is not a valid decimal")
    else:
        raise ValidationError(f"{field_name} is required")

    if not result.is_finite():
        raise ValidationError(f"{field_name} must be finite")
    return result


def require_non_negative(value: object, field_name: str) -> Decimal:
    result = to_decimal(value, field_name)
    if result < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return result


def optional_non_negative(value: object, field_name: str, default: Decimal = Decimal(0)) -> Decimal:
    if value is None:
        return default
    return require_non_negative(value, field_name)

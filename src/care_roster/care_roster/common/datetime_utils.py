from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal

from ..core.constants import HOURS_QUANTUM, SECONDS_PER_HOUR
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_utc() -> datetime:
    """Current instant as naive UTC.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_instant(value: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones are taken as UTC already."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_instant(value: object, field_name: str) -> datetime:
    if isinstance(value, datetime):
        return normalize_instant(value)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required (ISO-8601 instant)")

    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return normalize_instant(datetime.fromisoformat(raw))
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid ISO-8601 instant")


def parse_period_bound(value: object, field_name: str, *, end: bool) -> datetime:
    """Like parse_instant, but a bare date covers the whole day.

    ``2025-03-31`` as a period end means 2025-03-31T23:59:59.999999.
    """

    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.max if end else time.min)
    if isinstance(value, str) and len(value.strip()) == 10:
        try:
            day = parse_iso_date(value.strip())
        except ValueError:
            raise ValidationError(f"{field_name} is not a valid date")
        return datetime.combine(day, time.max if end else time.min)
    return parse_instant(value, field_name)


def hours_between(start: datetime, end: datetime) -> Decimal:
    """Exact elapsed hours, quantized to HOURS_QUANTUM."""
    delta = end - start
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    hours = Decimal(micros) / Decimal(1_000_000) / SECONDS_PER_HOUR
    return hours.quantize(HOURS_QUANTUM)


def iso_week(value: datetime) -> tuple[int, int]:
    """(ISO year, ISO week number) used for weekly overtime aggregation."""
    iso = value.isocalendar()
    return (iso[0], iso[1])


def format_instant(value: datetime | None) -> str | None:
    return value.isoformat() if value else None

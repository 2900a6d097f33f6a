from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation

from docengine.services.exceptions import ConfigurationError, ValidationError

_PERIOD_RE = re.compile(r"\d{4}-(0[1-9]|1[0-2])")

ONE_HUNDRED = Decimal("100")


def to_decimal(value: object, field: str = "value") -> Decimal:
    """Convert *value* to a finite Decimal.

    Floats go through ``str()`` so that ``0.1`` becomes ``Decimal("0.1")``.
    Raises ValidationError for anything that is not a finite number.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field}: numeric value expected, got {value!r}", field)
    if isinstance(value, float):
        value = str(value)
    try:
        d = Decimal(value)  # type: ignore[arg-type]
        if not d.is_finite():
            raise InvalidOperation
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field}: invalid numeric value {value!r}", field) from None
    return d


def validate_quantity(value: object) -> Decimal:
    """Quantity must be strictly positive."""
    d = to_decimal(value, "quantity")
    if d <= 0:
        raise ValidationError(f"quantity must be greater than zero, got {d}", "quantity")
    return d


def validate_unit_price(value: object) -> Decimal:
    """Unit price cannot be negative."""
    d = to_decimal(value, "unit_price")
    if d < 0:
        raise ValidationError(f"unit_price cannot be negative, got {d}", "unit_price")
    return d


def validate_rate(value: object, field: str = "rate") -> Decimal:
    """Validate a percentage rate (0-100) used in strategy configuration."""
    try:
        d = to_decimal(value, field)
    except ValidationError as exc:
        raise ConfigurationError(exc.message) from None
    if d < 0 or d > ONE_HUNDRED:
        raise ConfigurationError(f"{field} must be between 0 and 100, got {d}")
    return d


def validate_non_negative(value: object, field: str) -> Decimal:
    """Validate a configured amount that cannot be negative."""
    try:
        d = to_decimal(value, field)
    except ValidationError as exc:
        raise ConfigurationError(exc.message) from None
    if d < 0:
        raise ConfigurationError(f"{field} cannot be negative, got {d}")
    return d


def validate_period(value: str) -> str:
    """Validate a numbering period key (YYYY-MM)."""
    if not _PERIOD_RE.fullmatch(value):
        raise ValidationError(f"Invalid period '{value}'. Use YYYY-MM.", "period")
    return value


def period_of(day: date) -> str:
    """Return the year-month period key for *day*."""
    return f"{day.year:04d}-{day.month:02d}"

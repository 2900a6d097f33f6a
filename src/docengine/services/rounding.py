from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal

from docengine.models.rounding import (
    IndonesianRounding,
    NoRounding,
    RoundingMode,
    RoundUp,
    StandardRounding,
)
from docengine.services.exceptions import ConfigurationError

_ONE = Decimal("1")


def _to_multiple(amount: Decimal, unit: Decimal, rounding: str) -> Decimal:
    return (amount / unit).quantize(_ONE, rounding=rounding) * unit


def round_amount(amount: Decimal, mode: RoundingMode) -> Decimal:
    """Round *amount* under *mode*.

    Half-up ties round away from zero (Decimal's ROUND_HALF_UP); RoundUp
    always moves toward positive infinity. Every mode is idempotent.
    """
    match mode:
        case NoRounding():
            return amount
        case StandardRounding(decimals=decimals):
            return amount.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
        case IndonesianRounding(unit=unit):
            return _to_multiple(amount, unit, ROUND_HALF_UP)
        case RoundUp(unit=unit):
            return _to_multiple(amount, unit, ROUND_CEILING)
        case _:
            raise ConfigurationError(f"Unsupported rounding mode: {mode!r}")


def describe_rounding(mode: RoundingMode) -> str:
    """Human-readable name of a rounding mode."""
    match mode:
        case NoRounding():
            return "None"
        case StandardRounding(decimals=decimals):
            return f"Standard ({decimals} decimals)"
        case IndonesianRounding(unit=unit):
            return f"Indonesian (nearest {unit:,f})".replace(",", ".")
        case RoundUp(unit=unit):
            return f"Round Up (multiple of {unit:f})"
        case _:
            raise ConfigurationError(f"Unsupported rounding mode: {mode!r}")

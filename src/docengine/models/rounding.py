from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from docengine.services.exceptions import ConfigurationError, ValidationError
from docengine.utils.validators import to_decimal


def _positive_unit(value: object) -> Decimal:
    try:
        unit = to_decimal(value, "unit")
    except ValidationError as exc:
        raise ConfigurationError(exc.message) from None
    if unit <= 0:
        raise ConfigurationError(f"Rounding unit must be positive, got {unit}")
    return unit


@dataclass(frozen=True)
class NoRounding:
    """Keep full precision."""


@dataclass(frozen=True)
class StandardRounding:
    """Half-up rounding to a number of decimal places."""

    decimals: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.decimals, int) or isinstance(self.decimals, bool) or self.decimals < 0:
            raise ConfigurationError(f"decimals must be a non-negative integer, got {self.decimals!r}")


@dataclass(frozen=True)
class IndonesianRounding:
    """Half-up rounding to the nearest multiple of *unit* (Rp 100 by default)."""

    unit: Decimal = Decimal("100")

    def __post_init__(self) -> None:
        object.__setattr__(self, "unit", _positive_unit(self.unit))


@dataclass(frozen=True)
class RoundUp:
    """Round toward positive infinity to the next multiple of *unit*."""

    unit: Decimal = Decimal("1")

    def __post_init__(self) -> None:
        object.__setattr__(self, "unit", _positive_unit(self.unit))


RoundingMode = NoRounding | StandardRounding | IndonesianRounding | RoundUp


def rounding_from_dict(d: dict | None) -> RoundingMode:
    """Build a rounding mode from a config mapping such as ``{"mode": "indonesian", "unit": 100}``."""
    if not d:
        return NoRounding()
    mode = str(d.get("mode", "none")).lower()
    match mode:
        case "none":
            return NoRounding()
        case "standard":
            return StandardRounding(decimals=int(d.get("decimals", 0)))
        case "indonesian":
            return IndonesianRounding(unit=d.get("unit", 100))
        case "round_up" | "roundup" | "up":
            return RoundUp(unit=d.get("unit", 1))
        case _:
            raise ConfigurationError(f"Unknown rounding mode: '{mode}'")

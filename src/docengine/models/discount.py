from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from docengine.services.exceptions import ConfigurationError, ValidationError
from docengine.utils.tiers import validate_breakpoints
from docengine.utils.validators import to_decimal, validate_non_negative, validate_rate

TIER_BASES = frozenset({"quantity", "amount"})


@dataclass(frozen=True)
class Breakpoint:
    """One row of a tier table: from *threshold* upward, *rate* percent applies."""

    threshold: Decimal
    rate: Decimal

    def __post_init__(self) -> None:
        try:
            threshold = to_decimal(self.threshold, "threshold")
        except ValidationError as exc:
            raise ConfigurationError(exc.message) from None
        if threshold < 0:
            raise ConfigurationError(f"threshold cannot be negative, got {threshold}")
        object.__setattr__(self, "threshold", threshold)
        object.__setattr__(self, "rate", validate_rate(self.rate))

    @classmethod
    def from_dict(cls, d: dict) -> Breakpoint:
        return cls(threshold=d["threshold"], rate=d["rate"])


@dataclass(frozen=True)
class NoDiscount:
    pass


@dataclass(frozen=True)
class AmountDiscount:
    """Fixed amount off the line subtotal, capped at the subtotal."""

    value: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", validate_non_negative(self.value, "discount value"))


@dataclass(frozen=True)
class PercentDiscount:
    rate: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "rate", validate_rate(self.rate))


@dataclass(frozen=True)
class TieredDiscount:
    """Rate picked from a breakpoint table.

    With ``basis="quantity"`` the thresholds are compared to the line
    quantity; with ``basis="amount"`` they are compared to the subtotal.
    """

    tiers: tuple[Breakpoint, ...]
    basis: str = "quantity"

    def __post_init__(self) -> None:
        if self.basis not in TIER_BASES:
            raise ConfigurationError(f"Unknown tier basis: '{self.basis}'")
        object.__setattr__(self, "tiers", validate_breakpoints(tuple(self.tiers), "discount tiers"))


DiscountConfig = NoDiscount | AmountDiscount | PercentDiscount | TieredDiscount


def discount_from_dict(d: dict | None) -> DiscountConfig:
    """Build a discount config from a mapping like ``{"type": "percent", "value": 10}``."""
    if not d:
        return NoDiscount()
    kind = str(d.get("type", "none")).lower()
    match kind:
        case "none":
            return NoDiscount()
        case "amount":
            return AmountDiscount(value=d["value"])
        case "percent":
            return PercentDiscount(rate=d.get("rate", d.get("value")))
        case "tiered":
            return TieredDiscount(
                tiers=tuple(Breakpoint.from_dict(t) for t in d.get("tiers", [])),
                basis=d.get("basis", "quantity"),
            )
        case _:
            raise ConfigurationError(f"Unknown discount type: '{kind}'")

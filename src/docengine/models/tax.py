from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from docengine.services.exceptions import ConfigurationError
from docengine.utils.formatters import format_percent
from docengine.utils.validators import validate_rate

PPN_RATE = Decimal("11")


@dataclass(frozen=True)
class NoTax:
    name: str = "No Tax"


@dataclass(frozen=True)
class ExclusiveTax:
    """Tax added on top of the taxable base (e.g. PPN 11%)."""

    rate: Decimal = PPN_RATE
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "rate", validate_rate(self.rate))
        if not self.name:
            object.__setattr__(self, "name", f"PPN {format_percent(self.rate)}")


@dataclass(frozen=True)
class InclusiveTax:
    """Tax already embedded in the taxable base; backed out, never added."""

    rate: Decimal = PPN_RATE
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "rate", validate_rate(self.rate))
        if not self.name:
            object.__setattr__(self, "name", f"Inclusive Tax {format_percent(self.rate)}")


TaxConfig = NoTax | ExclusiveTax | InclusiveTax


def tax_from_dict(d: dict | None) -> TaxConfig:
    """Build a tax config from a mapping like ``{"type": "exclusive", "rate": 11}``."""
    if not d:
        return NoTax()
    kind = str(d.get("type", "none")).lower()
    name = d.get("name", "")
    match kind:
        case "none":
            return NoTax()
        case "exclusive":
            return ExclusiveTax(rate=d.get("rate", PPN_RATE), name=name)
        case "inclusive":
            return InclusiveTax(rate=d.get("rate", PPN_RATE), name=name)
        case _:
            raise ConfigurationError(f"Unknown tax type: '{kind}'")

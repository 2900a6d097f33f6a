from __future__ import annotations

from decimal import Decimal

from docengine.models.tax import ExclusiveTax, InclusiveTax, NoTax, TaxConfig
from docengine.services.exceptions import ConfigurationError
from docengine.utils.validators import ONE_HUNDRED

_ZERO = Decimal("0")
_ONE = Decimal("1")


def apply_tax(base: Decimal, config: TaxConfig) -> Decimal:
    """Return the tax amount for *base*.

    Exclusive tax is charged on top of *base*; inclusive tax is backed out of
    *base*, which is then treated as tax-included.
    """
    if base <= 0:
        return _ZERO
    match config:
        case NoTax():
            return _ZERO
        case ExclusiveTax(rate=rate):
            return base * rate / ONE_HUNDRED
        case InclusiveTax(rate=rate):
            return base - base / (_ONE + rate / ONE_HUNDRED)
        case _:
            raise ConfigurationError(f"Unsupported tax config: {config!r}")


def is_inclusive(config: TaxConfig) -> bool:
    return isinstance(config, InclusiveTax)

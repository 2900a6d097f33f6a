from __future__ import annotations

from decimal import Decimal

from docengine.models.discount import (
    AmountDiscount,
    DiscountConfig,
    NoDiscount,
    PercentDiscount,
    TieredDiscount,
)
from docengine.services.exceptions import ConfigurationError, ValidationError
from docengine.utils.tiers import select_breakpoint
from docengine.utils.validators import ONE_HUNDRED

_ZERO = Decimal("0")


def apply_discount(
    base: Decimal,
    config: DiscountConfig,
    *,
    quantity: Decimal | None = None,
) -> Decimal:
    """Return the discount amount for *base*, always within ``[0, base]``.

    *quantity* is the basis for quantity-tiered discounts; the other
    strategies ignore it.
    """
    if base <= 0:
        return _ZERO
    match config:
        case NoDiscount():
            amount = _ZERO
        case AmountDiscount(value=value):
            amount = value
        case PercentDiscount(rate=rate):
            amount = base * rate / ONE_HUNDRED
        case TieredDiscount(tiers=tiers, basis=basis):
            if basis == "quantity":
                if quantity is None:
                    raise ValidationError(
                        "quantity is required for a quantity-tiered discount", "quantity"
                    )
                value = quantity
            else:
                value = base
            tier = select_breakpoint(tiers, value)
            amount = base * tier.rate / ONE_HUNDRED if tier is not None else _ZERO
        case _:
            raise ConfigurationError(f"Unsupported discount config: {config!r}")
    return min(max(amount, _ZERO), base)

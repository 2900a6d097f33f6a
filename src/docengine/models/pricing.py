from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from docengine.models.discount import Breakpoint
from docengine.services.exceptions import ConfigurationError
from docengine.utils.validators import validate_quantity, validate_unit_price

# Volume tables share the breakpoint shape and tie-break rule of tiered discounts.
VolumeTier = Breakpoint


class PricingStrategy(str, Enum):
    """Pricing strategies, in the order they are tried."""

    CONTRACT = "contract"
    VOLUME = "volume"
    STANDARD = "standard"


DEFAULT_PRIORITY = (PricingStrategy.CONTRACT, PricingStrategy.VOLUME, PricingStrategy.STANDARD)


@dataclass(frozen=True)
class ContractPrice:
    """A negotiated unit price for one customer and product.

    The validity window is inclusive on both ends; None means open-ended.
    """

    customer_id: str
    product_id: str
    price: Decimal
    valid_from: date | None = None
    valid_until: date | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "price", validate_unit_price(self.price))
        if self.valid_from and self.valid_until and self.valid_until < self.valid_from:
            raise ConfigurationError(
                f"Contract {self.customer_id}/{self.product_id}: "
                f"valid_until {self.valid_until} precedes valid_from {self.valid_from}"
            )

    def is_valid_on(self, day: date) -> bool:
        if self.valid_from and day < self.valid_from:
            return False
        if self.valid_until and day > self.valid_until:
            return False
        return True

    @classmethod
    def from_dict(cls, d: dict) -> ContractPrice:
        return cls(
            customer_id=str(d["customer_id"]),
            product_id=str(d["product_id"]),
            price=d["price"],
            valid_from=_as_date(d.get("valid_from")),
            valid_until=_as_date(d.get("valid_until")),
        )


@dataclass(frozen=True)
class PriceRequest:
    product_id: str
    quantity: Decimal
    customer_id: str | None = None
    on: date | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", validate_quantity(self.quantity))


@dataclass(frozen=True)
class PriceResolution:
    """Resolved unit price and the strategy that supplied it."""

    unit_price: Decimal
    strategy: PricingStrategy
    rule: str
    base_price: Decimal | None = None
    discount: Decimal = Decimal("0")
    discount_percent: Decimal = Decimal("0")
    tier: VolumeTier | None = field(default=None, compare=False)


def _as_date(value: object) -> date | None:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ConfigurationError(f"Invalid date '{value}'. Use YYYY-MM-DD.") from None

"""Unit price resolution.

Strategies are tried in priority order (contract, volume, standard) and the
first applicable one wins. The resolution records which strategy supplied
the price so that documents can be audited.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from decimal import Decimal

from docengine.models.pricing import (
    DEFAULT_PRIORITY,
    ContractPrice,
    PriceRequest,
    PriceResolution,
    PricingStrategy,
    VolumeTier,
)
from docengine.services.exceptions import ConfigurationError, PricingError
from docengine.utils.formatters import format_idr, format_percent
from docengine.utils.tiers import select_breakpoint, validate_breakpoints
from docengine.utils.validators import ONE_HUNDRED, validate_unit_price

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


class PricingService:
    def __init__(
        self,
        catalog: Mapping[str, object],
        contracts: Iterable[ContractPrice] = (),
        volume_tiers: Mapping[str, Sequence[VolumeTier]] | None = None,
        priority: Sequence[PricingStrategy] = DEFAULT_PRIORITY,
    ) -> None:
        if PricingStrategy.STANDARD not in priority:
            raise ConfigurationError("The standard strategy must be part of the priority order")
        if len(set(priority)) != len(priority):
            raise ConfigurationError("Pricing priority lists a strategy twice")
        self._catalog = {str(k): validate_unit_price(v) for k, v in catalog.items()}
        self._contracts = tuple(contracts)
        self._volume = {
            str(product): validate_breakpoints(tuple(tiers), f"volume tiers for {product}")
            for product, tiers in (volume_tiers or {}).items()
        }
        self._priority = tuple(priority)

    @classmethod
    def from_dict(cls, d: dict) -> PricingService:
        """Build a service from a price book mapping (see ``pricing.yaml``)."""
        try:
            priority = tuple(PricingStrategy(p) for p in d.get("priority", DEFAULT_PRIORITY))
        except ValueError as exc:
            raise ConfigurationError(f"Unknown pricing strategy in priority: {exc}") from None
        return cls(
            catalog=d.get("catalog", {}),
            contracts=[ContractPrice.from_dict(c) for c in d.get("contracts", [])],
            volume_tiers={
                product: [VolumeTier.from_dict(t) for t in tiers]
                for product, tiers in d.get("volume", {}).items()
            },
            priority=priority,
        )

    def catalog_price(self, product_id: str) -> Decimal | None:
        return self._catalog.get(product_id)

    def contract_for(
        self, customer_id: str | None, product_id: str, on: date | None = None
    ) -> ContractPrice | None:
        """Return the contract valid for *customer_id* and *product_id* on a day."""
        if not customer_id:
            return None
        day = on or date.today()
        return next(
            (
                c
                for c in self._contracts
                if c.customer_id == customer_id
                and c.product_id == product_id
                and c.is_valid_on(day)
            ),
            None,
        )

    def resolve(self, request: PriceRequest) -> PriceResolution:
        """Return the price from the first applicable strategy.

        Raises PricingError when no strategy applies (no contract and no
        catalog price).
        """
        for strategy in self._priority:
            resolution = self._try(strategy, request)
            if resolution is not None:
                logger.debug(
                    "Price resolved for %s x%s: %s via %s",
                    request.product_id,
                    request.quantity,
                    resolution.unit_price,
                    strategy.value,
                )
                return resolution
        raise PricingError(
            f"No price available for product '{request.product_id}'", request.product_id
        )

    def price(
        self,
        product_id: str,
        quantity: object,
        customer_id: str | None = None,
        on: date | None = None,
    ) -> PriceResolution:
        return self.resolve(
            PriceRequest(product_id=product_id, quantity=quantity, customer_id=customer_id, on=on)
        )

    def applicable(self, request: PriceRequest) -> list[PriceResolution]:
        """Every applicable strategy with what it would charge, in priority order."""
        results = (self._try(s, request) for s in self._priority)
        return [r for r in results if r is not None]

    def _try(self, strategy: PricingStrategy, request: PriceRequest) -> PriceResolution | None:
        base = self._catalog.get(request.product_id)
        match strategy:
            case PricingStrategy.CONTRACT:
                contract = self.contract_for(request.customer_id, request.product_id, request.on)
                if contract is None:
                    return None
                return _with_discount(
                    contract.price,
                    strategy,
                    base,
                    f"Contract price {format_idr(contract.price)} for {contract.customer_id}",
                )
            case PricingStrategy.VOLUME:
                tiers = self._volume.get(request.product_id)
                if base is None or not tiers:
                    return None
                tier = select_breakpoint(tiers, request.quantity)
                if tier is None:
                    return None
                discount = base * tier.rate / ONE_HUNDRED
                return PriceResolution(
                    unit_price=base - discount,
                    strategy=strategy,
                    rule=f"Volume {tier.threshold}+ ({format_percent(tier.rate)} off)",
                    base_price=base,
                    discount=discount,
                    discount_percent=tier.rate,
                    tier=tier,
                )
            case PricingStrategy.STANDARD:
                if base is None:
                    return None
                return PriceResolution(
                    unit_price=base, strategy=strategy, rule="Standard price", base_price=base
                )
            case _:
                raise ConfigurationError(f"Unsupported pricing strategy: {strategy!r}")


def _with_discount(
    price: Decimal, strategy: PricingStrategy, base: Decimal | None, rule: str
) -> PriceResolution:
    """Resolution for a fixed price, reporting its saving against the catalog price."""
    if base is None or base <= 0:
        return PriceResolution(unit_price=price, strategy=strategy, rule=rule, base_price=base)
    discount = max(base - price, _ZERO)
    return PriceResolution(
        unit_price=price,
        strategy=strategy,
        rule=rule,
        base_price=base,
        discount=discount,
        discount_percent=discount / base * ONE_HUNDRED,
    )

"""Breakpoint tables shared by tiered discounts and volume pricing.

A table is a tuple of breakpoints sorted strictly ascending by threshold.
The applicable breakpoint for a value is the one with the greatest threshold
less than or equal to that value; a value exactly at a threshold uses that
threshold's tier.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Sequence
from decimal import Decimal
from typing import Protocol, TypeVar

from docengine.services.exceptions import ConfigurationError


class _HasThreshold(Protocol):
    @property
    def threshold(self) -> Decimal: ...


T = TypeVar("T", bound=_HasThreshold)


def validate_breakpoints(tiers: Sequence[T], name: str = "tiers") -> tuple[T, ...]:
    """Return *tiers* as a tuple, rejecting empty, unsorted or duplicate tables."""
    if not tiers:
        raise ConfigurationError(f"{name}: at least one breakpoint is required")
    for prev, cur in zip(tiers, tiers[1:]):
        if cur.threshold == prev.threshold:
            raise ConfigurationError(f"{name}: duplicate threshold {cur.threshold}")
        if cur.threshold < prev.threshold:
            raise ConfigurationError(
                f"{name}: thresholds must be sorted ascending "
                f"({prev.threshold} comes before {cur.threshold})"
            )
    return tuple(tiers)


def select_breakpoint(tiers: Sequence[T], value: Decimal) -> T | None:
    """Return the breakpoint applicable to *value*, or None below the first threshold."""
    thresholds = [t.threshold for t in tiers]
    idx = bisect_right(thresholds, value) - 1
    if idx < 0:
        return None
    return tiers[idx]

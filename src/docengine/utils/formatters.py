from __future__ import annotations

from decimal import Decimal


def format_idr(value: Decimal | str | int, decimals: int = 0) -> str:
    """Format an amount as Rp X.XXX.XXX (Indonesian separators)."""
    d = Decimal(value)
    formatted = f"{d:,.{decimals}f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"Rp {formatted}"


def format_percent(value: Decimal | str | int) -> str:
    """Format a percentage, dropping insignificant trailing zeros (11.00 -> 11%)."""
    d = Decimal(value)
    text = f"{d:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text}%"

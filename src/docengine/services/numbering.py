"""Document number generation.

Numbers are append-only: a counter is never decremented and a number is
never handed out twice for the same sequence. The service is not
thread-safe; callers that share a sequence must serialize ``next_number``
calls themselves (one writer per sequence, or an external lock/transaction).
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from datetime import date

from docengine.models.numbering import NumberingPolicy, NumberingSequence, ParsedNumber
from docengine.services.exceptions import ConfigurationError, ValidationError
from docengine.utils.validators import period_of

logger = logging.getLogger(__name__)


def default_sequences() -> dict[str, NumberingSequence]:
    """Fresh sequences for the built-in document types."""
    return {
        "quotation": NumberingSequence("quotation", "QUO"),
        "invoice": NumberingSequence("invoice", "INV"),
        "purchase_order": NumberingSequence("purchase_order", "PO"),
    }


def format_number(sequence: NumberingSequence) -> str:
    """Render the sequence's current counter as a document number."""
    parts = [sequence.prefix] if sequence.prefix else []
    if sequence.policy is NumberingPolicy.MONTHLY_RESET:
        parts.append(sequence.period or "")
    parts.append(str(sequence.counter).zfill(sequence.padding))
    if sequence.suffix:
        parts.append(sequence.suffix)
    return sequence.separator.join(parts)


def _advance(sequence: NumberingSequence, on: date | None) -> NumberingSequence:
    match sequence.policy:
        case NumberingPolicy.SEQUENTIAL:
            return replace(sequence, counter=sequence.counter + 1)
        case NumberingPolicy.MONTHLY_RESET:
            period = period_of(on or date.today())
            if sequence.period is None or period > sequence.period:
                return replace(sequence, counter=1, period=period)
            if period < sequence.period:
                raise ValidationError(
                    f"{sequence.document_type}: period {period} precedes the sequence "
                    f"period {sequence.period}; numbers would be reused",
                    "period",
                )
            return replace(sequence, counter=sequence.counter + 1)
        case _:
            raise ConfigurationError(f"Unsupported numbering policy: {sequence.policy!r}")


def next_number(
    sequence: NumberingSequence, on: date | None = None
) -> tuple[str, NumberingSequence]:
    """Issue the next number and return it with the updated sequence.

    *on* selects the period for monthly-reset sequences (default: today).
    """
    updated = _advance(sequence, on)
    number = format_number(updated)
    logger.info("Issued %s number %s", sequence.document_type, number)
    return number, updated


def preview(sequence: NumberingSequence, on: date | None = None) -> str:
    """Return the next number without advancing the sequence."""
    return format_number(_advance(sequence, on))


def parse_number(sequence: NumberingSequence, number: str) -> ParsedNumber | None:
    """Split a number produced by *sequence* into its parts, or None if it does not match."""
    sep = re.escape(sequence.separator)
    prefix = re.escape(sequence.prefix) + sep if sequence.prefix else ""
    if sequence.policy is NumberingPolicy.MONTHLY_RESET:
        pattern = rf"{prefix}(?P<period>\d{{4}}-\d{{2}}){sep}(?P<counter>\d+)"
    else:
        pattern = rf"{prefix}(?P<counter>\d+)"
    if sequence.suffix:
        pattern += sep + re.escape(sequence.suffix)
    m = re.fullmatch(pattern, number)
    if m is None:
        return None
    return ParsedNumber(
        prefix=sequence.prefix,
        counter=int(m.group("counter")),
        period=m.groupdict().get("period"),
        suffix=sequence.suffix or None,
    )

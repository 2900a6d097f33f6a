from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from docengine.services.exceptions import ConfigurationError
from docengine.utils.validators import validate_period


class NumberingPolicy(str, Enum):
    SEQUENTIAL = "sequential"
    MONTHLY_RESET = "monthly_reset"


@dataclass(frozen=True)
class NumberingSequence:
    """Counter state of one document type's numbering.

    Owned by the caller: the numbering service returns an updated copy and
    never keeps sequences of its own.
    """

    document_type: str
    prefix: str
    policy: NumberingPolicy = NumberingPolicy.SEQUENTIAL
    counter: int = 0
    period: str | None = None  # YYYY-MM, monthly reset only
    padding: int = 4
    separator: str = "-"
    suffix: str = ""

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "policy", NumberingPolicy(self.policy))
        except ValueError:
            raise ConfigurationError(
                f"{self.document_type}: unknown numbering policy '{self.policy}'"
            ) from None
        if self.counter < 0:
            raise ConfigurationError(f"{self.document_type}: counter cannot be negative")
        if self.padding < 1:
            raise ConfigurationError(f"{self.document_type}: padding must be at least 1")
        if self.period is not None:
            validate_period(self.period)

    @classmethod
    def from_dict(cls, document_type: str, d: dict) -> NumberingSequence:
        """Create a sequence from a config/persistence mapping."""
        period = d.get("period")
        return cls(
            document_type=document_type,
            prefix=str(d.get("prefix", "")),
            policy=d.get("policy", NumberingPolicy.SEQUENTIAL),
            counter=int(d.get("counter", 0)),
            period=str(period) if period is not None else None,
            padding=int(d.get("padding", 4)),
            separator=str(d.get("separator", "-")),
            suffix=str(d.get("suffix", "")),
        )

    def to_dict(self) -> dict:
        return {
            "prefix": self.prefix,
            "policy": self.policy.value,
            "counter": self.counter,
            "period": self.period,
            "padding": self.padding,
            "separator": self.separator,
            "suffix": self.suffix,
        }


@dataclass(frozen=True)
class ParsedNumber:
    prefix: str
    counter: int
    period: str | None = None
    suffix: str | None = None

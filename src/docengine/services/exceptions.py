from __future__ import annotations


class EngineError(Exception):
    """Base class for every error raised or returned by the engine."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(EngineError, ValueError):
    """Caller input is malformed (quantity, price, ids, indexes, periods)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ConfigurationError(EngineError, ValueError):
    """Strategy parameters or workflow definitions are malformed."""


class PricingError(EngineError, LookupError):
    """No pricing strategy could supply a unit price."""

    def __init__(self, message: str, product_id: str | None = None) -> None:
        super().__init__(message)
        self.product_id = product_id


class WorkflowError(EngineError):
    """A workflow event could not be applied to an instance."""

    def __init__(self, message: str, state: str, event: str) -> None:
        super().__init__(message)
        self.state = state
        self.event = event


class InvalidTransition(WorkflowError):
    """The event is not legal from the instance's current state."""


class GuardRejected(WorkflowError):
    """The event is legal but a business condition blocked it."""

    def __init__(self, reason: str, state: str, event: str) -> None:
        super().__init__(reason, state, event)
        self.reason = reason

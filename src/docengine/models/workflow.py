from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

from docengine.services.exceptions import ConfigurationError

Document = Mapping[str, Any]


@dataclass(frozen=True)
class WorkflowEvent:
    """A named event with its payload, as seen by guards and effects."""

    name: str
    payload: Mapping[str, Any] = field(default_factory=dict, hash=False)
    actor: str | None = None
    reason: str | None = None
    at: datetime = field(default_factory=lambda: datetime.now(UTC))


Guard = Callable[[Document, WorkflowEvent], bool]
Effect = Callable[[Document, WorkflowEvent], Mapping[str, Any]]


@dataclass(frozen=True)
class StateSpec:
    name: str
    label: str
    is_terminal: bool = False
    is_editable: bool = False
    description: str = ""


@dataclass(frozen=True)
class Transition:
    """``source --event--> target``, optionally guarded and with a side effect.

    *effect* returns a patch merged into the document snapshot. A
    *creates_revision* transition forks a new revision of the document
    instead of moving the current one.
    """

    source: str
    event: str
    target: str
    guard: Guard | None = None
    guard_message: str = ""
    effect: Effect | None = None
    creates_revision: bool = False


@dataclass(frozen=True)
class WorkflowDefinition:
    """States and transition table of one document type.

    Structural invariants are checked on construction: the initial state
    exists, every transition connects known states, terminal states have no
    outgoing transitions and every other state has at least one.
    """

    name: str
    initial: str
    states: tuple[StateSpec, ...]
    transitions: tuple[Transition, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "states", tuple(self.states))
        object.__setattr__(self, "transitions", tuple(self.transitions))
        self._validate()

    def _validate(self) -> None:
        names = [s.name for s in self.states]
        if len(set(names)) != len(names):
            raise ConfigurationError(f"{self.name}: duplicate state names")
        if self.initial not in names:
            raise ConfigurationError(f"{self.name}: unknown initial state '{self.initial}'")
        terminal = {s.name for s in self.states if s.is_terminal}
        for t in self.transitions:
            for endpoint in (t.source, t.target):
                if endpoint not in names:
                    raise ConfigurationError(
                        f"{self.name}: transition '{t.event}' references unknown state '{endpoint}'"
                    )
            if t.source in terminal:
                raise ConfigurationError(
                    f"{self.name}: terminal state '{t.source}' cannot have transition '{t.event}'"
                )
        sources = {t.source for t in self.transitions}
        for name in names:
            if name not in terminal and name not in sources:
                raise ConfigurationError(
                    f"{self.name}: non-terminal state '{name}' has no outgoing transition"
                )

    def state(self, name: str) -> StateSpec:
        for spec in self.states:
            if spec.name == name:
                return spec
        raise ConfigurationError(f"{self.name}: unknown state '{name}'")

    def transitions_from(self, state: str, event: str | None = None) -> list[Transition]:
        """Transitions leaving *state*, in declaration order, optionally for one event."""
        return [
            t
            for t in self.transitions
            if t.source == state and (event is None or t.event == event)
        ]

    def events_from(self, state: str) -> list[str]:
        return list(dict.fromkeys(t.event for t in self.transitions_from(state)))


@dataclass(frozen=True)
class HistoryEntry:
    state: str
    at: datetime
    event: str | None = None
    from_state: str | None = None
    actor: str | None = None
    reason: str | None = None


@dataclass(frozen=True)
class WorkflowInstance:
    """Current state, document snapshot and append-only history of one document."""

    definition: WorkflowDefinition
    state: str
    document: Document = field(default_factory=dict, hash=False)
    history: tuple[HistoryEntry, ...] = ()
    revision: int = 1

    def __post_init__(self) -> None:
        self.definition.state(self.state)
        object.__setattr__(self, "document", MappingProxyType(dict(self.document)))
        object.__setattr__(self, "history", tuple(self.history))

    @property
    def spec(self) -> StateSpec:
        return self.definition.state(self.state)

    @property
    def is_terminal(self) -> bool:
        return self.spec.is_terminal

    @property
    def is_editable(self) -> bool:
        return self.spec.is_editable

"""Generic guarded state machine shared by every document workflow.

The engine knows nothing about quotations, invoices or purchase orders:
each document type supplies a ``WorkflowDefinition`` (states, transitions,
guards, effects) and the engine applies events to ``WorkflowInstance``
values. Instances are immutable; a transition returns a new one.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any

from docengine.models.workflow import (
    HistoryEntry,
    Transition,
    WorkflowDefinition,
    WorkflowEvent,
    WorkflowInstance,
)
from docengine.services.exceptions import (
    EngineError,
    GuardRejected,
    InvalidTransition,
    WorkflowError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of ``transition``: the new instance, or the unchanged one plus an error."""

    instance: WorkflowInstance
    error: WorkflowError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> WorkflowInstance:
        """Return the new instance, raising the error if the transition failed."""
        if self.error is not None:
            raise self.error
        return self.instance


def start(
    definition: WorkflowDefinition,
    document: Mapping[str, Any] | None = None,
    *,
    actor: str | None = None,
    at: datetime | None = None,
) -> WorkflowInstance:
    """Create an instance in the definition's initial state."""
    entry = HistoryEntry(state=definition.initial, at=at or datetime.now(UTC), actor=actor)
    return WorkflowInstance(
        definition=definition,
        state=definition.initial,
        document=document or {},
        history=(entry,),
    )


def _select(
    instance: WorkflowInstance, event: WorkflowEvent
) -> Transition | WorkflowError:
    """Pick the transition for *event*, or the error explaining why none applies."""
    state = instance.state
    if instance.is_terminal:
        return InvalidTransition(
            f"No transition '{event.name}' from terminal state '{state}'", state, event.name
        )
    candidates = instance.definition.transitions_from(state, event.name)
    if not candidates:
        return InvalidTransition(
            f"No transition '{event.name}' from state '{state}'", state, event.name
        )
    for candidate in candidates:
        if candidate.guard is None:
            return candidate
        try:
            allowed = candidate.guard(instance.document, event)
        except EngineError as exc:
            return GuardRejected(exc.message, state, event.name)
        if allowed:
            return candidate
    reason = candidates[0].guard_message or f"Guard blocked transition '{event.name}'"
    return GuardRejected(reason, state, event.name)


def transition(
    instance: WorkflowInstance,
    event: str,
    payload: Mapping[str, Any] | None = None,
    *,
    actor: str | None = None,
    reason: str | None = None,
    at: datetime | None = None,
) -> TransitionResult:
    """Apply *event* to *instance*.

    Failures are returned, not raised: ``InvalidTransition`` when the event
    is not legal from the current state (always the case for terminal
    states), ``GuardRejected`` with a readable reason when a guard blocks it
    or cannot read the document.
    """
    ev = WorkflowEvent(
        name=event,
        payload=dict(payload or {}),
        actor=actor,
        reason=reason,
        at=at or datetime.now(UTC),
    )
    chosen = _select(instance, ev)
    if isinstance(chosen, WorkflowError):
        logger.warning(
            "%s %s rejected in state %s: %s",
            instance.definition.name,
            event,
            instance.state,
            chosen.message,
        )
        return TransitionResult(instance=instance, error=chosen)

    document = dict(instance.document)
    if chosen.effect is not None:
        document.update(chosen.effect(instance.document, ev))
    entry = HistoryEntry(
        state=chosen.target,
        at=ev.at,
        event=event,
        from_state=instance.state,
        actor=actor,
        reason=reason,
    )

    if chosen.creates_revision:
        document["revision_of"] = instance.revision
        new = WorkflowInstance(
            definition=instance.definition,
            state=chosen.target,
            document=document,
            history=(entry,),
            revision=instance.revision + 1,
        )
    else:
        new = replace(
            instance,
            state=chosen.target,
            document=document,
            history=instance.history + (entry,),
        )

    logger.info(
        "%s transition completed: %s -> %s on %s (revision %d)",
        instance.definition.name,
        instance.state,
        chosen.target,
        event,
        new.revision,
    )
    return TransitionResult(instance=new)


def can_transition(
    instance: WorkflowInstance,
    event: str,
    payload: Mapping[str, Any] | None = None,
    *,
    at: datetime | None = None,
) -> bool:
    """True if *event* exists from the current state and a guard lets it through."""
    ev = WorkflowEvent(name=event, payload=dict(payload or {}), at=at or datetime.now(UTC))
    return not isinstance(_select(instance, ev), WorkflowError)


def available_events(instance: WorkflowInstance) -> list[str]:
    """Events defined from the current state, regardless of guards."""
    return instance.definition.events_from(instance.state)


def to_mermaid(definition: WorkflowDefinition, current: str | None = None) -> str:
    """Render *definition* as a Mermaid state diagram."""
    lines = ["stateDiagram-v2"]
    for spec in definition.states:
        lines.append(f"    {spec.name} : {spec.label}")
    lines.append(f"    [*] --> {definition.initial}")
    for t in definition.transitions:
        lines.append(f"    {t.source} --> {t.target} : {t.event}")
    for spec in definition.states:
        if spec.is_terminal:
            lines.append(f"    {spec.name} --> [*]")
    if current is not None:
        definition.state(current)
        lines.append("")
        lines.append("    classDef current fill:#f97316,color:#fff")
        lines.append(f"    class {current} current")
    return "\n".join(lines)

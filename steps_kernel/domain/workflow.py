"""
Canonical workflow types (``steps_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for workflow state machines.  Used by every module
(requests, procurement, docsign, leave) so that Guard, Transition and
Workflow are defined once.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``services/`` or outer layers.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* ``terminal_states`` have no outgoing transitions.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Contract: frozen, descriptive only.  ``field`` names the input the guard
    inspects so a failed guard can be reported as a validation error on
    that field.
    Non-goals: does not evaluate the condition -- the GuardExecutor does.
    """
    name: str
    description: str
    field: str | None = None


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow.

    ``creates_record`` marks a transition whose effect includes creating a
    linked downstream record (e.g. a purchase order on approval).
    """
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None
    creates_record: bool = False


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a document lifecycle."""
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow '{self.name}': initial state "
                f"'{self.initial_state}' is not a declared state"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow '{self.name}': transition {t.action} "
                    f"{t.from_state}->{t.to_state} references an unknown state"
                )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"Workflow '{self.name}': terminal state "
                    f"'{t.from_state}' has outgoing transition '{t.action}'"
                )

    def actions_from(self, state: str) -> tuple[str, ...]:
        """Actions available from ``state``, in declaration order."""
        return tuple(t.action for t in self.transitions if t.from_state == state)


@dataclass(frozen=True)
class TransitionResult:
    """Result of executing a workflow transition."""

    success: bool
    new_state: str | None = None
    creates_record: bool = False
    failed_guard: Guard | None = None
    reason: str = ""

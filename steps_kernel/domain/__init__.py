"""Pure domain value objects -- no I/O."""

from steps_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from steps_kernel.domain.workflow import Guard, Transition, TransitionResult, Workflow

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "Guard",
    "Transition",
    "TransitionResult",
    "Workflow",
]

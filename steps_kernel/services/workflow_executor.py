"""
steps_kernel.services.workflow_executor -- Workflow transition execution.

Responsibility:
    Looks up the transition for (current state, action) in a declarative
    ``Workflow``, evaluates its guard, and reports the outcome.  Pure with
    respect to persistence: the caller applies the new state.

Invariants enforced:
    - A missing transition is reported before any guard is evaluated, so an
      action from a terminal state is always an invalid transition, never a
      validation failure.
    - Every outcome emits one ``WORKFLOW_TRANSITION`` trace record.
"""

from __future__ import annotations

import time
from typing import Any, Callable

from steps_kernel.domain.workflow import Guard, Transition, TransitionResult, Workflow
from steps_kernel.exceptions import InvalidTransitionError, ValidationError
from steps_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.workflow_executor")

TRACE_TYPE_WORKFLOW_TRANSITION = "WORKFLOW_TRANSITION"
OUTCOME_SUCCESS = "success"
OUTCOME_GUARD_FAILED = "guard_failed"
OUTCOME_NO_TRANSITION = "no_transition"


def _emit_workflow_trace(
    workflow_name: str,
    action: str,
    entity_type: str,
    entity_id: str,
    from_state: str,
    outcome: str,
    reason: str,
    duration_ms: float,
    to_state: str | None = None,
) -> None:
    """Emit a structured workflow transition record."""
    record: dict[str, Any] = {
        "trace_type": TRACE_TYPE_WORKFLOW_TRANSITION,
        "workflow": workflow_name,
        "action": action,
        "entity_type": entity_type,
        "entity_id": str(entity_id),
        "from_state": from_state,
        "outcome": outcome,
        "reason": reason,
        "duration_ms": round(duration_ms, 3),
    }
    if to_state is not None:
        record["to_state"] = to_state
    for key, val in LogContext.get_all().items():
        record.setdefault(key, val)
    logger.info("workflow_transition", extra=record)


def _non_blank(key: str) -> Callable[[Any], bool]:
    def check(context: Any) -> bool:
        value = context.get(key) if isinstance(context, dict) else getattr(context, key, None)
        return value is not None and str(value).strip() != ""

    return check


class GuardExecutor:
    """Evaluates workflow guards against context.

    Guards are declared on transitions (name + description).  This executor
    holds the evaluation logic per guard name.  An unregistered guard fails
    closed.
    """

    def __init__(self) -> None:
        self._evaluators: dict[str, Callable[[Any], bool]] = {}

    def register(self, guard_name: str, evaluator: Callable[[Any], bool]) -> None:
        """Register an evaluator for a guard by name."""
        self._evaluators[guard_name] = evaluator

    def evaluate(self, guard: Guard, context: Any = None) -> bool:
        """Evaluate a guard against context. Returns True if guard passes."""
        fn = self._evaluators.get(guard.name)
        if fn is None:
            logger.warning("guard_no_evaluator", extra={"guard_name": guard.name})
            return False
        return bool(fn(context if context is not None else {}))


def default_guard_executor() -> GuardExecutor:
    """Return a GuardExecutor with the built-in evaluators registered."""
    ex = GuardExecutor()
    ex.register("vendor_selected", _non_blank("vendor"))
    ex.register("reason_provided", _non_blank("reason"))
    ex.register("comments_provided", _non_blank("comments"))
    return ex


class WorkflowExecutor:
    """Executes workflow transitions with guard evaluation."""

    def __init__(self, guard_executor: GuardExecutor | None = None) -> None:
        self._guard_executor = guard_executor or default_guard_executor()

    def execute_transition(
        self,
        workflow: Workflow,
        entity_type: str,
        entity_id: str,
        current_state: str,
        action: str,
        context: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """Resolve ``action`` from ``current_state``.

        Returns a TransitionResult; never raises for a disallowed action.
        """
        t0 = time.monotonic()

        transition = self._find_transition(workflow, current_state, action)
        if transition is None:
            reason = (
                f"No transition from '{current_state}' via action '{action}' "
                f"in workflow '{workflow.name}'"
            )
            _emit_workflow_trace(
                workflow_name=workflow.name,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                from_state=current_state,
                outcome=OUTCOME_NO_TRANSITION,
                reason=reason,
                duration_ms=(time.monotonic() - t0) * 1000,
            )
            return TransitionResult(success=False, reason=reason)

        guard = transition.guard
        if guard is not None and not self._guard_executor.evaluate(guard, context):
            reason = f"Guard not satisfied: {guard.name}"
            _emit_workflow_trace(
                workflow_name=workflow.name,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                from_state=current_state,
                outcome=OUTCOME_GUARD_FAILED,
                reason=reason,
                duration_ms=(time.monotonic() - t0) * 1000,
            )
            return TransitionResult(success=False, failed_guard=guard, reason=reason)

        _emit_workflow_trace(
            workflow_name=workflow.name,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            from_state=current_state,
            to_state=transition.to_state,
            outcome=OUTCOME_SUCCESS,
            reason="Transition allowed",
            duration_ms=(time.monotonic() - t0) * 1000,
        )
        return TransitionResult(
            success=True,
            new_state=transition.to_state,
            creates_record=transition.creates_record,
            reason="Transition allowed",
        )

    def require_transition(
        self,
        workflow: Workflow,
        entity_type: str,
        entity_id: str,
        current_state: str,
        action: str,
        context: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """Like ``execute_transition`` but raises on failure.

        Raises:
            InvalidTransitionError: no transition for (state, action).
            ValidationError: the transition's guard failed.
        """
        result = self.execute_transition(
            workflow, entity_type, entity_id, current_state, action, context,
        )
        if result.success:
            return result
        if result.failed_guard is not None:
            guard = result.failed_guard
            raise ValidationError(guard.field or guard.name, guard.description)
        raise InvalidTransitionError(
            entity_type=entity_type,
            entity_id=str(entity_id),
            current_state=current_state,
            action=action,
        )

    @staticmethod
    def _find_transition(
        workflow: Workflow,
        current_state: str,
        action: str,
    ) -> Transition | None:
        for t in workflow.transitions:
            if t.from_state == current_state and t.action == action:
                return t
        return None

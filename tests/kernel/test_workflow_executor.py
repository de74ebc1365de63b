"""
Tests for workflow value objects and the WorkflowExecutor.

Validates:
- Workflow definition checks (unknown states, terminal outgoing transitions)
- Missing transitions reported before guards
- Guard evaluation, including fail-closed unregistered guards
- WORKFLOW_TRANSITION trace records
"""

import pytest

from steps_kernel.domain.workflow import Guard, Transition, Workflow
from steps_kernel.exceptions import InvalidTransitionError, ValidationError
from steps_kernel.services.workflow_executor import (
    GuardExecutor,
    WorkflowExecutor,
    default_guard_executor,
)
from steps_modules.requests.workflows import (
    ADVANCE_WORKFLOW,
    MATERIAL_REQUEST_WORKFLOW,
)


class TestWorkflowDefinition:
    def test_unknown_initial_state_rejected(self):
        with pytest.raises(ValueError, match="initial state"):
            Workflow(
                name="w", description="", initial_state="nowhere",
                states=("a",), transitions=(),
            )

    def test_transition_to_unknown_state_rejected(self):
        with pytest.raises(ValueError, match="unknown state"):
            Workflow(
                name="w", description="", initial_state="a",
                states=("a",), transitions=(Transition("a", "b", action="go"),),
            )

    def test_terminal_state_with_outgoing_transition_rejected(self):
        with pytest.raises(ValueError, match="terminal state"):
            Workflow(
                name="w", description="", initial_state="a",
                states=("a", "b"),
                transitions=(Transition("b", "a", action="reopen"),),
                terminal_states=("b",),
            )

    def test_actions_from(self):
        assert MATERIAL_REQUEST_WORKFLOW.actions_from("pending") == ("approve", "reject")
        assert MATERIAL_REQUEST_WORKFLOW.actions_from("approved") == ()


class TestExecuteTransition:
    def test_material_approve_with_vendor(self):
        result = WorkflowExecutor().execute_transition(
            MATERIAL_REQUEST_WORKFLOW, "material", "MR-1", "pending", "approve",
            {"vendor": "VendorX"},
        )
        assert result.success
        assert result.new_state == "approved"
        assert result.creates_record

    def test_material_approve_blank_vendor_fails_guard(self):
        result = WorkflowExecutor().execute_transition(
            MATERIAL_REQUEST_WORKFLOW, "material", "MR-1", "pending", "approve",
            {"vendor": "   "},
        )
        assert not result.success
        assert result.failed_guard.name == "vendor_selected"

    def test_advance_approve_needs_no_vendor(self):
        result = WorkflowExecutor().execute_transition(
            ADVANCE_WORKFLOW, "advance", "ADV-1", "pending", "approve",
        )
        assert result.success
        assert not result.creates_record

    def test_terminal_state_has_no_transition(self):
        result = WorkflowExecutor().execute_transition(
            MATERIAL_REQUEST_WORKFLOW, "material", "MR-1", "approved", "reject",
            {"reason": "late"},
        )
        assert not result.success
        assert result.failed_guard is None

    def test_unregistered_guard_fails_closed(self):
        guard = Guard(name="never_registered", description="x")
        workflow = Workflow(
            name="w", description="", initial_state="a", states=("a", "b"),
            transitions=(Transition("a", "b", action="go", guard=guard),),
        )
        result = WorkflowExecutor(GuardExecutor()).execute_transition(
            workflow, "thing", "1", "a", "go",
        )
        assert not result.success

    def test_custom_guard_registration(self):
        executor = default_guard_executor()
        executor.register("vendor_selected", lambda ctx: ctx.get("vendor") == "Approved Ltd")
        result = WorkflowExecutor(executor).execute_transition(
            MATERIAL_REQUEST_WORKFLOW, "material", "MR-1", "pending", "approve",
            {"vendor": "Other"},
        )
        assert not result.success


class TestRequireTransition:
    def test_missing_transition_checked_before_guard(self):
        """A terminal state with a blank vendor is an invalid transition, not a validation error."""
        with pytest.raises(InvalidTransitionError) as exc_info:
            WorkflowExecutor().require_transition(
                MATERIAL_REQUEST_WORKFLOW, "material", "MR-1", "rejected", "approve",
                {"vendor": ""},
            )
        assert exc_info.value.current_state == "rejected"

    def test_failed_guard_raises_validation_on_field(self):
        with pytest.raises(ValidationError) as exc_info:
            WorkflowExecutor().require_transition(
                MATERIAL_REQUEST_WORKFLOW, "material", "MR-1", "pending", "reject",
                {"reason": ""},
            )
        assert exc_info.value.field == "reason"


class TestTrace:
    def test_every_outcome_emits_trace(self, captured_logs):
        executor = WorkflowExecutor()
        executor.execute_transition(
            ADVANCE_WORKFLOW, "advance", "ADV-1", "pending", "approve",
        )
        executor.execute_transition(
            ADVANCE_WORKFLOW, "advance", "ADV-1", "approved", "approve",
        )
        traces = [r for r in captured_logs() if r.get("trace_type") == "WORKFLOW_TRANSITION"]
        assert [t["outcome"] for t in traces] == ["success", "no_transition"]
        assert traces[0]["to_state"] == "approved"
        assert traces[0]["workflow"] == "advance_request"

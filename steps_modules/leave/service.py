"""
Leave Module Service (``steps_modules.leave.service``).

Responsibility
--------------
Submission and two-stage approval of leave requests.  ``approve`` and
``reject`` act on whichever stage the request is waiting in; the
declarative ``LEAVE_WORKFLOW`` decides the next state.

Failure modes
-------------
* ``to_date`` before ``from_date``, ``days`` below 1 or beyond the date
  range, blank employee or manager  -> ``ValidationError``.
* Rejection without comments  -> ``ValidationError``.
* Acting on a decided request  -> ``InvalidTransitionError``.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from steps_kernel.domain.clock import Clock
from steps_kernel.exceptions import NotFoundError, ValidationError
from steps_kernel.logging_config import get_logger
from steps_kernel.services.base import BaseService
from steps_kernel.services.workflow_executor import WorkflowExecutor
from steps_modules.leave.models import LeaveRequest, LeaveStatus, LeaveType
from steps_modules.leave.orm import LeaveRequestModel
from steps_modules.leave.workflows import LEAVE_WORKFLOW

logger = get_logger("modules.leave.service")


class LeaveService(BaseService):
    """
    Leave request submission and approval.

    Transaction boundary: this service commits on success, rolls back on failure.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        actor_id: UUID | None = None,
        workflow_executor: WorkflowExecutor | None = None,
    ):
        super().__init__(session, clock, actor_id)
        self._executor = workflow_executor or WorkflowExecutor()

    def _get_model(self, leave_id: UUID) -> LeaveRequestModel:
        model = self.session.get(LeaveRequestModel, leave_id)
        if model is None:
            raise NotFoundError("leave_request", str(leave_id))
        return model

    def get(self, leave_id: UUID) -> LeaveRequest:
        return self._get_model(leave_id).to_dto()

    def list_for_manager(self, manager_id: str, status: LeaveStatus | None = None) -> list[LeaveRequest]:
        stmt = select(LeaveRequestModel).where(LeaveRequestModel.manager_id == manager_id)
        if status is not None:
            stmt = stmt.where(LeaveRequestModel.status == status.value)
        stmt = stmt.order_by(LeaveRequestModel.request_date.desc())
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def list_for_employee(self, employee_id: str) -> list[LeaveRequest]:
        stmt = (
            select(LeaveRequestModel)
            .where(LeaveRequestModel.employee_id == employee_id)
            .order_by(LeaveRequestModel.request_date.desc())
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def submit(
        self,
        employee_id: str,
        employee_name: str,
        leave_type: LeaveType | str,
        from_date: date,
        to_date: date,
        days: int,
        manager_id: str,
        manager_name: str,
        department: str = "",
        reason: str = "",
    ) -> LeaveRequest:
        """Create a leave request waiting for the manager."""
        try:
            leave_type = LeaveType(leave_type)
        except ValueError as exc:
            raise ValidationError("leave_type", f"unknown leave type {leave_type!r}") from exc
        if to_date < from_date:
            raise ValidationError("to_date", "end date is before start date")
        if days < 1:
            raise ValidationError("days", "at least one day of leave is required")
        span = (to_date - from_date).days + 1
        if days > span:
            raise ValidationError("days", f"{days} days requested for a {span}-day period")
        for name, value in (
            ("employee_id", employee_id),
            ("employee_name", employee_name),
            ("manager_id", manager_id),
            ("manager_name", manager_name),
        ):
            if not value or not value.strip():
                raise ValidationError(name, f"{name} is required")

        leave = LeaveRequest(
            id=uuid4(),
            employee_id=employee_id,
            employee_name=employee_name,
            department=department,
            leave_type=leave_type,
            from_date=from_date,
            to_date=to_date,
            days=days,
            manager_id=manager_id,
            manager_name=manager_name,
            request_date=self._clock.today(),
            reason=reason,
        )
        with self._transaction("leave_submit", employee_id=employee_id, days=days):
            self.session.add(LeaveRequestModel.from_dto(leave, self._actor_id))
            self.session.flush()
        return leave

    def _decide(self, leave_id: UUID, action: str, comments: str | None) -> LeaveRequest:
        with self._transaction(f"leave_{action}", leave_id=str(leave_id)):
            model = self._get_model(leave_id)
            stage = model.to_dto().awaiting
            result = self._executor.require_transition(
                LEAVE_WORKFLOW, "leave_request", str(leave_id), model.status, action,
                {"comments": comments},
            )
            now = self._clock.now()
            if stage == "manager":
                model.manager_comments = comments or None
                model.manager_decided_at = now
            else:
                model.hr_comments = comments or None
                model.hr_decided_at = now
            model.status = result.new_state
            model.updated_by_id = self._actor_id
            self.session.flush()
            dto = model.to_dto()
        logger.info(
            "leave_decided",
            extra={"leave_id": str(leave_id), "stage": stage, "new_status": dto.status.value},
        )
        return dto

    def approve(self, leave_id: UUID, comments: str = "") -> LeaveRequest:
        """Approve at the current stage: manager sends it to HR, HR approves it."""
        return self._decide(leave_id, "approve", comments)

    def reject(self, leave_id: UUID, comments: str) -> LeaveRequest:
        """Reject at the current stage. Comments are required."""
        return self._decide(leave_id, "reject", comments)

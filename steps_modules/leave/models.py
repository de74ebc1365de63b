"""
Leave Domain Models.

Leave requests approved in two stages: first the employee's manager, then HR.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID

from steps_kernel.logging_config import get_logger

logger = get_logger("modules.leave.models")


class LeaveType(str, Enum):
    ANNUAL = "annual"
    SICK = "sick"
    PERSONAL = "personal"
    UNPAID = "unpaid"


class LeaveStatus(str, Enum):
    """Leave lifecycle. APPROVED, REJECTED_MANAGER and REJECTED are terminal."""
    PENDING_MANAGER = "pending_manager"
    PENDING_HR = "pending_hr"
    APPROVED = "approved"
    REJECTED_MANAGER = "rejected_manager"
    REJECTED = "rejected"


@dataclass(frozen=True)
class LeaveRequest:
    id: UUID
    employee_id: str
    employee_name: str
    department: str
    leave_type: LeaveType
    from_date: date
    to_date: date
    days: int
    manager_id: str
    manager_name: str
    request_date: date
    reason: str = ""
    status: LeaveStatus = LeaveStatus.PENDING_MANAGER
    manager_comments: str | None = None
    manager_decided_at: datetime | None = None
    hr_comments: str | None = None
    hr_decided_at: datetime | None = None

    @property
    def awaiting(self) -> str | None:
        """Which approver acts next: ``manager``, ``hr`` or None once decided."""
        if self.status is LeaveStatus.PENDING_MANAGER:
            return "manager"
        if self.status is LeaveStatus.PENDING_HR:
            return "hr"
        return None

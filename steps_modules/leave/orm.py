"""
SQLAlchemy ORM persistence models for the Leave module.

Invariants enforced
-------------------
* Enum fields stored as String(50).
* Decided requests are kept; nothing here deletes a leave request.
"""

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import Date, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from steps_kernel.db.base import TrackedBase


class LeaveRequestModel(TrackedBase):
    """
    A leave request.

    Maps to the ``LeaveRequest`` DTO in ``steps_modules.leave.models``.
    """

    __tablename__ = "leave_requests"

    __table_args__ = (
        Index("idx_leave_employee_status", "employee_id", "status"),
        Index("idx_leave_manager_status", "manager_id", "status"),
    )

    employee_id: Mapped[str] = mapped_column(String(100), nullable=False)
    employee_name: Mapped[str] = mapped_column(String(200), nullable=False)
    department: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    leave_type: Mapped[str] = mapped_column(String(50), nullable=False)
    from_date: Mapped[date] = mapped_column(Date, nullable=False)
    to_date: Mapped[date] = mapped_column(Date, nullable=False)
    days: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(2000), nullable=False, default="")
    manager_id: Mapped[str] = mapped_column(String(100), nullable=False)
    manager_name: Mapped[str] = mapped_column(String(200), nullable=False)
    request_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="pending_manager")
    manager_comments: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    manager_decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    hr_comments: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    hr_decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def to_dto(self):
        from steps_modules.leave.models import LeaveRequest, LeaveStatus, LeaveType

        return LeaveRequest(
            id=self.id,
            employee_id=self.employee_id,
            employee_name=self.employee_name,
            department=self.department,
            leave_type=LeaveType(self.leave_type),
            from_date=self.from_date,
            to_date=self.to_date,
            days=self.days,
            manager_id=self.manager_id,
            manager_name=self.manager_name,
            request_date=self.request_date,
            reason=self.reason,
            status=LeaveStatus(self.status),
            manager_comments=self.manager_comments,
            manager_decided_at=self.manager_decided_at,
            hr_comments=self.hr_comments,
            hr_decided_at=self.hr_decided_at,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "LeaveRequestModel":
        return cls(
            id=dto.id,
            employee_id=dto.employee_id,
            employee_name=dto.employee_name,
            department=dto.department,
            leave_type=dto.leave_type.value,
            from_date=dto.from_date,
            to_date=dto.to_date,
            days=dto.days,
            manager_id=dto.manager_id,
            manager_name=dto.manager_name,
            request_date=dto.request_date,
            reason=dto.reason,
            status=dto.status.value,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<LeaveRequestModel {self.id} {self.employee_id} [{self.status}]>"

"""
SQLAlchemy ORM persistence models for the Requests module.

Responsibility
--------------
Persist material requests, advances and retirements in one table, with the
kind-specific payload in nullable columns, plus their ordered line items.

Invariants enforced
-------------------
* ``request_id`` (the business id) is unique.
* ``advance_id`` is unique when set: an advance is retired at most once.
* Quantities and amounts are ``Decimal`` (Numeric(38,9)) -- NEVER float.
  Non-numeric form input is stored as zero.
* Rejected requests are kept; nothing in this module deletes a request.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Boolean, Date, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from steps_kernel.db.base import TrackedBase

# ---------------------------------------------------------------------------
# RequestModel
# ---------------------------------------------------------------------------


class RequestModel(TrackedBase):
    """
    A material / advance / retirement request.

    Maps to the ``Request`` DTO in ``steps_modules.requests.models``.
    """

    __tablename__ = "workflow_requests"

    __table_args__ = (
        UniqueConstraint("request_id", name="uq_request_id"),
        UniqueConstraint("advance_id", name="uq_request_advance_retirement"),
        Index("idx_request_kind_status", "kind", "status"),
        Index("idx_request_requested_by", "requested_by"),
    )

    request_id: Mapped[str] = mapped_column(String(50), nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    requested_by: Mapped[str] = mapped_column(String(200), nullable=False)
    department: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    approver: Mapped[str] = mapped_column(String(200), nullable=False)
    request_type: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    request_date: Mapped[date] = mapped_column(Date, nullable=False)
    message: Mapped[str] = mapped_column(String(4000), nullable=False, default="")
    attachments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    rejection_reason: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Material payload
    linked_vendor: Mapped[str | None] = mapped_column(String(200), nullable=True)
    purchase_order_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # Advance payload
    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    purpose: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    repayment_period: Mapped[str | None] = mapped_column(String(100), nullable=True)
    has_retirement: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Retirement payload
    advance_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    month_year: Mapped[str | None] = mapped_column(String(20), nullable=True)
    previous_closing_balance: Mapped[Decimal | None] = mapped_column(nullable=True)
    inflow_amount: Mapped[Decimal | None] = mapped_column(nullable=True)

    lines: Mapped[list["RequestLineModel"]] = relationship(
        "RequestLineModel",
        back_populates="request",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="RequestLineModel.line_number",
    )

    def to_dto(self):
        from steps_modules.requests.models import (
            AdvanceDetails,
            MaterialDetails,
            Request,
            RequestKind,
            RequestStatus,
            RetirementDetails,
        )

        kind = RequestKind(self.kind)
        if kind is RequestKind.MATERIAL:
            details = MaterialDetails(
                linked_vendor=self.linked_vendor,
                purchase_order_number=self.purchase_order_number,
            )
        elif kind is RequestKind.ADVANCE:
            details = AdvanceDetails(
                currency=self.currency or "NGN",
                purpose=self.purpose or "",
                repayment_period=self.repayment_period,
                has_retirement=self.has_retirement,
            )
        else:
            details = RetirementDetails(
                advance_id=self.advance_id or "",
                month_year=self.month_year or "",
                previous_closing_balance=self.previous_closing_balance or Decimal("0"),
                inflow_amount=self.inflow_amount or Decimal("0"),
            )

        return Request(
            id=self.request_id,
            kind=kind,
            requested_by=self.requested_by,
            department=self.department,
            approver=self.approver,
            request_date=self.request_date,
            details=details,
            request_type=self.request_type,
            status=RequestStatus(self.status),
            line_items=tuple(line.to_dto() for line in self.lines),
            message=self.message,
            attachments=tuple(self.attachments or ()),
            rejection_reason=self.rejection_reason,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "RequestModel":
        model = cls(
            request_id=dto.id,
            kind=dto.kind.value,
            requested_by=dto.requested_by,
            department=dto.department,
            approver=dto.approver,
            request_type=dto.request_type,
            request_date=dto.request_date,
            attachments=list(dto.attachments),
            created_by_id=created_by_id,
        )
        model.apply_mutable(dto)
        model.lines = [
            RequestLineModel.from_dto(line, line_number, created_by_id)
            for line_number, line in enumerate(dto.line_items, start=1)
        ]
        return model

    def apply_mutable(self, dto) -> None:
        """Copy the fields the workflow may change onto this row."""
        from steps_modules.requests.models import (
            AdvanceDetails,
            MaterialDetails,
            RetirementDetails,
        )

        self.status = dto.status.value
        self.message = dto.message
        self.rejection_reason = dto.rejection_reason
        details = dto.details
        if isinstance(details, MaterialDetails):
            self.linked_vendor = details.linked_vendor
            self.purchase_order_number = details.purchase_order_number
        elif isinstance(details, AdvanceDetails):
            self.currency = details.currency
            self.purpose = details.purpose
            self.repayment_period = details.repayment_period
            self.has_retirement = details.has_retirement
        elif isinstance(details, RetirementDetails):
            self.advance_id = details.advance_id
            self.month_year = details.month_year
            self.previous_closing_balance = details.previous_closing_balance
            self.inflow_amount = details.inflow_amount

    def __repr__(self) -> str:
        return f"<RequestModel {self.request_id} {self.kind} [{self.status}]>"


# ---------------------------------------------------------------------------
# RequestLineModel
# ---------------------------------------------------------------------------


class RequestLineModel(TrackedBase):
    """A line item on a request. (request_pk, line_number) is unique."""

    __tablename__ = "workflow_request_lines"

    __table_args__ = (
        UniqueConstraint("request_pk", "line_number", name="uq_request_line_number"),
        Index("idx_request_line_request", "request_pk"),
    )

    request_pk: Mapped[UUID] = mapped_column(
        ForeignKey("workflow_requests.id"), nullable=False,
    )
    line_number: Mapped[int]
    item_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    quantity: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    quantity_type: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    description: Mapped[str] = mapped_column(String(1000), nullable=False, default="")

    request: Mapped["RequestModel"] = relationship(
        "RequestModel",
        back_populates="lines",
    )

    def to_dto(self):
        from steps_modules.requests.models import LineItem

        return LineItem(
            item_name=self.item_name,
            quantity=self.quantity,
            quantity_type=self.quantity_type,
            amount=self.amount,
            description=self.description,
        )

    @classmethod
    def from_dto(cls, dto, line_number: int, created_by_id: UUID) -> "RequestLineModel":
        from steps_modules.requests.models import to_decimal

        return cls(
            line_number=line_number,
            item_name=dto.item_name,
            quantity=to_decimal(dto.quantity),
            quantity_type=dto.quantity_type,
            amount=to_decimal(dto.amount),
            description=dto.description,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<RequestLineModel {self.line_number} {self.item_name}>"

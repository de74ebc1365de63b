"""
SQLAlchemy ORM persistence models for the Procurement module.

Responsibility
--------------
Persist purchase orders and their lines.  Every PO created by the request
workflow carries the business id of the originating material request.

Invariants enforced
-------------------
* ``po_number`` is unique.
* ``material_request_id`` is unique when set: one PO per material request.
* Quantities and prices are ``Decimal`` (Numeric(38,9)) -- NEVER float.
* Enum fields stored as String(50).
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Date, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from steps_kernel.db.base import TrackedBase

# ---------------------------------------------------------------------------
# PurchaseOrderModel
# ---------------------------------------------------------------------------


class PurchaseOrderModel(TrackedBase):
    """
    A purchase order.

    Maps to the ``PurchaseOrder`` DTO in ``steps_modules.procurement.models``.
    """

    __tablename__ = "procurement_purchase_orders"

    __table_args__ = (
        UniqueConstraint("po_number", name="uq_po_number"),
        UniqueConstraint("material_request_id", name="uq_po_material_request"),
        Index("idx_po_status", "status"),
        Index("idx_po_vendor", "vendor"),
    )

    po_number: Mapped[str] = mapped_column(String(50), nullable=False)
    vendor: Mapped[str] = mapped_column(String(200), nullable=False)
    requester: Mapped[str] = mapped_column(String(200), nullable=False)
    approver: Mapped[str] = mapped_column(String(200), nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="draft")
    message: Mapped[str] = mapped_column(String(4000), nullable=False, default="")
    attachments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    material_request_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    delivery_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    review_notes: Mapped[str | None] = mapped_column(String(4000), nullable=True)
    paid_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    lines: Mapped[list["PurchaseOrderLineModel"]] = relationship(
        "PurchaseOrderLineModel",
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PurchaseOrderLineModel.line_number",
    )

    def to_dto(self):
        from steps_modules.procurement.models import POStatus, PurchaseOrder

        return PurchaseOrder(
            id=self.id,
            po_number=self.po_number,
            vendor=self.vendor,
            requester=self.requester,
            approver=self.approver,
            order_date=self.order_date,
            status=POStatus(self.status),
            lines=tuple(line.to_dto() for line in self.lines),
            message=self.message,
            attachments=tuple(self.attachments or ()),
            material_request_id=self.material_request_id,
            delivery_date=self.delivery_date,
            review_notes=self.review_notes,
            paid_date=self.paid_date,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "PurchaseOrderModel":
        model = cls(
            id=dto.id,
            po_number=dto.po_number,
            vendor=dto.vendor,
            requester=dto.requester,
            approver=dto.approver,
            order_date=dto.order_date,
            status=dto.status.value,
            message=dto.message,
            attachments=list(dto.attachments),
            material_request_id=dto.material_request_id,
            delivery_date=dto.delivery_date,
            review_notes=dto.review_notes,
            paid_date=dto.paid_date,
            created_by_id=created_by_id,
        )
        model.replace_lines(dto.lines, created_by_id)
        return model

    def replace_lines(self, lines, created_by_id: UUID) -> None:
        self.lines = [
            PurchaseOrderLineModel.from_dto(line, line_number, created_by_id)
            for line_number, line in enumerate(lines, start=1)
        ]

    def __repr__(self) -> str:
        return f"<PurchaseOrderModel {self.po_number} [{self.status}]>"


# ---------------------------------------------------------------------------
# PurchaseOrderLineModel
# ---------------------------------------------------------------------------


class PurchaseOrderLineModel(TrackedBase):
    """A line item on a purchase order."""

    __tablename__ = "procurement_purchase_order_lines"

    __table_args__ = (
        UniqueConstraint("purchase_order_id", "line_number", name="uq_po_line_number"),
        Index("idx_po_line_order", "purchase_order_id"),
    )

    purchase_order_id: Mapped[UUID] = mapped_column(
        ForeignKey("procurement_purchase_orders.id"), nullable=False,
    )
    line_number: Mapped[int]
    item_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    quantity: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="pcs")
    unit_price: Mapped[Decimal] = mapped_column(default=Decimal("0"))

    purchase_order: Mapped["PurchaseOrderModel"] = relationship(
        "PurchaseOrderModel",
        back_populates="lines",
    )

    def to_dto(self):
        from steps_modules.procurement.models import PurchaseOrderLine

        return PurchaseOrderLine(
            item_name=self.item_name,
            description=self.description,
            quantity=self.quantity,
            unit=self.unit,
            unit_price=self.unit_price,
        )

    @classmethod
    def from_dto(cls, dto, line_number: int, created_by_id: UUID) -> "PurchaseOrderLineModel":
        return cls(
            line_number=line_number,
            item_name=dto.item_name,
            description=dto.description,
            quantity=dto.quantity,
            unit=dto.unit,
            unit_price=dto.unit_price,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<PurchaseOrderLineModel {self.line_number} {self.item_name}>"

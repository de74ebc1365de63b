"""
Procurement Domain Models.

Purchase orders raised when a material request is approved.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from steps_kernel.logging_config import get_logger

logger = get_logger("modules.procurement.models")


class POStatus(str, Enum):
    """Purchase order lifecycle states."""
    DRAFT = "draft"
    PAYMENT_PENDING = "payment_pending"
    PAID = "paid"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PurchaseOrderLine:
    """A line item on a purchase order."""
    item_name: str
    description: str = ""
    quantity: Decimal = Decimal("0")
    unit: str = "pcs"
    unit_price: Decimal = Decimal("0")

    def __post_init__(self):
        if self.quantity < 0 or self.unit_price < 0:
            logger.warning(
                "po_line_negative_value",
                extra={
                    "item_name": self.item_name,
                    "quantity": str(self.quantity),
                    "unit_price": str(self.unit_price),
                },
            )
            raise ValueError(
                f"PO line '{self.item_name}' has negative quantity or price"
            )

    @property
    def total(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class PurchaseOrder:
    """A purchase order."""
    id: UUID
    po_number: str
    vendor: str
    requester: str
    approver: str
    order_date: date
    status: POStatus = POStatus.DRAFT
    lines: tuple[PurchaseOrderLine, ...] = field(default_factory=tuple)
    message: str = ""
    attachments: tuple[str, ...] = field(default_factory=tuple)
    material_request_id: str | None = None
    delivery_date: date | None = None
    review_notes: str | None = None
    paid_date: date | None = None

    @property
    def total_amount(self) -> Decimal:
        return sum((line.total for line in self.lines), Decimal("0"))

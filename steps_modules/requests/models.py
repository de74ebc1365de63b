"""
Request Domain Models.

The nouns of the approval workflow: material requests, cash advances and
advance retirements.  All three share one shape (actors, line items,
status); the kind-specific data lives in a tagged ``details`` payload.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any


class RequestKind(str, Enum):
    """Closed set of request kinds."""
    MATERIAL = "material"
    ADVANCE = "advance"
    RETIREMENT = "retirement"


class RequestStatus(str, Enum):
    """Request lifecycle states. APPROVED and REJECTED are terminal."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def to_decimal(value: Any) -> Decimal:
    """Coerce a form value to Decimal; missing or non-numeric input is zero."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal("0")
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return result if result.is_finite() else Decimal("0")


@dataclass(frozen=True)
class LineItem:
    """One requested item.

    ``quantity`` and ``amount`` keep whatever the form supplied; use
    ``line_total()`` for arithmetic.
    """
    item_name: str = ""
    quantity: Decimal | str | None = None
    quantity_type: str = ""
    amount: Decimal | str | None = None
    description: str = ""

    def line_total(self) -> Decimal:
        return to_decimal(self.quantity) * to_decimal(self.amount)

    def is_complete(self) -> bool:
        """A line is submittable when it has a name, a quantity and a unit."""
        return bool(
            str(self.item_name).strip()
            and str(self.quantity if self.quantity is not None else "").strip()
            and str(self.quantity_type).strip()
        )


@dataclass(frozen=True)
class MaterialDetails:
    """Material-request payload. Both fields are set once, at approval."""
    linked_vendor: str | None = None
    purchase_order_number: str | None = None


@dataclass(frozen=True)
class AdvanceDetails:
    """Cash-advance payload."""
    currency: str = "NGN"
    purpose: str = ""
    repayment_period: str | None = None
    has_retirement: bool = False


@dataclass(frozen=True)
class RetirementDetails:
    """Retirement payload, referencing the advance being retired."""
    advance_id: str
    month_year: str = ""
    previous_closing_balance: Decimal = Decimal("0")
    inflow_amount: Decimal = Decimal("0")


RequestDetails = MaterialDetails | AdvanceDetails | RetirementDetails

DETAILS_BY_KIND: dict[RequestKind, type] = {
    RequestKind.MATERIAL: MaterialDetails,
    RequestKind.ADVANCE: AdvanceDetails,
    RequestKind.RETIREMENT: RetirementDetails,
}


@dataclass(frozen=True)
class Request:
    """A material / advance / retirement request."""
    id: str
    kind: RequestKind
    requested_by: str
    department: str
    approver: str
    request_date: date
    details: RequestDetails
    request_type: str = ""
    status: RequestStatus = RequestStatus.PENDING
    line_items: tuple[LineItem, ...] = field(default_factory=tuple)
    message: str = ""
    attachments: tuple[str, ...] = field(default_factory=tuple)
    rejection_reason: str | None = None

    def __post_init__(self):
        expected = DETAILS_BY_KIND[self.kind]
        if not isinstance(self.details, expected):
            raise ValueError(
                f"{self.kind.value} request requires {expected.__name__}, "
                f"got {type(self.details).__name__}"
            )

    def total_amount(self) -> Decimal:
        """Sum of quantity * amount over all lines, recomputed on every call."""
        return sum((line.line_total() for line in self.line_items), Decimal("0"))

    @property
    def is_terminal(self) -> bool:
        return self.status is not RequestStatus.PENDING


@dataclass(frozen=True)
class RequestFilter:
    """Filter for ``RequestStore.list``. ``None`` matches everything."""
    status: RequestStatus | None = None
    kind: RequestKind | None = None
    requested_by: str | None = None
    approver: str | None = None

"""
DocSign Domain Models.

Signature documents: an uploaded PDF, the recipients who must sign it and
the fields placed on its pages for them.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from uuid import UUID

from steps_kernel.logging_config import get_logger

logger = get_logger("modules.docsign.models")


class SigningMode(str, Enum):
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class DocumentStatus(str, Enum):
    """Document lifecycle. COMPLETED and DECLINED are terminal."""
    PENDING = "Pending"
    COMPLETED = "Completed"
    DECLINED = "Declined"


class RecipientStatus(str, Enum):
    PENDING = "pending"
    SIGNED = "signed"
    DECLINED = "declined"


class ReminderFrequency(str, Enum):
    NONE = "no"
    DAILY = "daily"
    EVERY_TWO_DAYS = "2days"
    WEEKLY = "weekly"


class FieldType(str, Enum):
    SIGNATURE = "signature"
    INITIALS = "initials"
    DATE_SIGNED = "dateSigned"
    TEXTBOX = "textbox"
    CHECKBOX = "checkbox"
    FULL_NAME = "fullName"


FIELD_LABELS: dict[FieldType, str] = {
    FieldType.SIGNATURE: "Signature",
    FieldType.INITIALS: "Initials",
    FieldType.DATE_SIGNED: "Date Signed",
    FieldType.TEXTBOX: "Textbox",
    FieldType.CHECKBOX: "Checkbox",
    FieldType.FULL_NAME: "Full Name",
}

REQUIRED_BY_DEFAULT = frozenset({FieldType.SIGNATURE, FieldType.INITIALS})


@dataclass(frozen=True)
class Position:
    """Top-left corner as a percentage of the page (0-100 on each axis)."""
    x: float
    y: float

    def __post_init__(self):
        if not (0 <= self.x <= 100 and 0 <= self.y <= 100):
            raise ValueError(f"position ({self.x}, {self.y}) is outside the page")


@dataclass(frozen=True)
class Size:
    """Field size in pixels."""
    width: int
    height: int


@dataclass(frozen=True)
class Recipient:
    id: int
    name: str = ""
    email: str = ""
    order: int = 1
    color: str = "blue"
    status: RecipientStatus = RecipientStatus.PENDING
    signed_at: datetime | None = None
    decline_reason: str | None = None

    @property
    def is_valid(self) -> bool:
        """A recipient can receive a request once both name and email are filled in."""
        return bool(self.name.strip() and self.email.strip())

    @property
    def display_name(self) -> str:
        return self.name or f"Signer {self.order}"


@dataclass(frozen=True)
class SignatureField:
    id: str
    type: FieldType
    page: int
    position: Position
    size: Size
    required: bool
    assigned_to: int
    label: str = ""


@dataclass(frozen=True)
class SignatureDocument:
    """A sent signature request. Frozen snapshot of the composer at send time."""
    id: UUID
    file_name: str
    file_size: int
    uploaded_by: str
    subject: str
    recipients: tuple[Recipient, ...]
    fields: tuple[SignatureField, ...] = field(default_factory=tuple)
    message: str = ""
    signing_mode: SigningMode = SigningMode.SEQUENTIAL
    due_date: date | None = None
    reminder_frequency: ReminderFrequency = ReminderFrequency.NONE
    status: DocumentStatus = DocumentStatus.PENDING
    completed_at: datetime | None = None

    def __post_init__(self):
        ids = {r.id for r in self.recipients}
        for f in self.fields:
            if f.assigned_to not in ids:
                raise ValueError(
                    f"field {f.id} is assigned to unknown recipient {f.assigned_to}"
                )

    def recipient(self, recipient_id: int) -> Recipient | None:
        return next((r for r in self.recipients if r.id == recipient_id), None)

    def pending_recipients(self) -> tuple[Recipient, ...]:
        return tuple(
            sorted(
                (r for r in self.recipients if r.status is RecipientStatus.PENDING),
                key=lambda r: r.order,
            )
        )

    @property
    def all_signed(self) -> bool:
        return all(r.status is RecipientStatus.SIGNED for r in self.recipients)

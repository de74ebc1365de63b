"""
SQLAlchemy ORM persistence models for the DocSign module.

Responsibility
--------------
Persist sent signature documents.  Recipients and fields are small,
always read with their document and never queried on their own, so they
are stored as JSON arrays on the document row.

Invariants enforced
-------------------
* Every stored field references a recipient id present in the same row
  (checked by ``SignatureDocument`` when the row is read back).
* Enum fields stored as String(50).
"""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, BigInteger, Date, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from steps_kernel.db.base import TrackedBase


def _recipient_to_json(r) -> dict[str, Any]:
    return {
        "id": r.id,
        "name": r.name,
        "email": r.email,
        "order": r.order,
        "color": r.color,
        "status": r.status.value,
        "signed_at": r.signed_at.isoformat() if r.signed_at else None,
        "decline_reason": r.decline_reason,
    }


def _recipient_from_json(data: dict[str, Any]):
    from steps_modules.docsign.models import Recipient, RecipientStatus

    return Recipient(
        id=data["id"],
        name=data["name"],
        email=data["email"],
        order=data["order"],
        color=data["color"],
        status=RecipientStatus(data["status"]),
        signed_at=datetime.fromisoformat(data["signed_at"]) if data.get("signed_at") else None,
        decline_reason=data.get("decline_reason"),
    )


def _field_to_json(f) -> dict[str, Any]:
    return {
        "id": f.id,
        "type": f.type.value,
        "page": f.page,
        "x": f.position.x,
        "y": f.position.y,
        "width": f.size.width,
        "height": f.size.height,
        "required": f.required,
        "assigned_to": f.assigned_to,
        "label": f.label,
    }


def _field_from_json(data: dict[str, Any]):
    from steps_modules.docsign.models import FieldType, Position, SignatureField, Size

    return SignatureField(
        id=data["id"],
        type=FieldType(data["type"]),
        page=data["page"],
        position=Position(data["x"], data["y"]),
        size=Size(data["width"], data["height"]),
        required=data["required"],
        assigned_to=data["assigned_to"],
        label=data.get("label", ""),
    )


class SignatureDocumentModel(TrackedBase):
    """
    A sent signature request.

    Maps to the ``SignatureDocument`` DTO in ``steps_modules.docsign.models``.
    """

    __tablename__ = "docsign_documents"

    __table_args__ = (
        Index("idx_docsign_uploaded_by_status", "uploaded_by", "status"),
    )

    file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    uploaded_by: Mapped[str] = mapped_column(String(200), nullable=False)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    message: Mapped[str] = mapped_column(String(4000), nullable=False, default="")
    signing_mode: Mapped[str] = mapped_column(String(50), nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    reminder_frequency: Mapped[str] = mapped_column(String(50), nullable=False, default="no")
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Pending")
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    recipients: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    fields: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    def to_dto(self):
        from steps_modules.docsign.models import (
            DocumentStatus,
            ReminderFrequency,
            SignatureDocument,
            SigningMode,
        )

        return SignatureDocument(
            id=self.id,
            file_name=self.file_name,
            file_size=self.file_size,
            uploaded_by=self.uploaded_by,
            subject=self.subject,
            recipients=tuple(_recipient_from_json(r) for r in self.recipients),
            fields=tuple(_field_from_json(f) for f in self.fields),
            message=self.message,
            signing_mode=SigningMode(self.signing_mode),
            due_date=self.due_date,
            reminder_frequency=ReminderFrequency(self.reminder_frequency),
            status=DocumentStatus(self.status),
            completed_at=self.completed_at,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "SignatureDocumentModel":
        model = cls(
            id=dto.id,
            file_name=dto.file_name,
            file_size=dto.file_size,
            uploaded_by=dto.uploaded_by,
            subject=dto.subject,
            message=dto.message,
            signing_mode=dto.signing_mode.value,
            due_date=dto.due_date,
            reminder_frequency=dto.reminder_frequency.value,
            created_by_id=created_by_id,
        )
        model.apply_state(dto)
        model.fields = [_field_to_json(f) for f in dto.fields]
        return model

    def apply_state(self, dto) -> None:
        """Copy the signing progress (status, recipients) onto this row."""
        self.status = dto.status.value
        self.completed_at = dto.completed_at
        # Reassign the whole list so the JSON column is flagged dirty
        self.recipients = [_recipient_to_json(r) for r in dto.recipients]

    def __repr__(self) -> str:
        return f"<SignatureDocumentModel {self.id} {self.file_name} [{self.status}]>"

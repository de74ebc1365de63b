"""
Signature request composer (``steps_modules.docsign.composer``).

Local editing state for a signature request before it is sent: the
uploaded document, the ordered list of recipients and the fields placed on
the document's pages.  Nothing here touches the database;
``build_document()`` freezes the state into a ``SignatureDocument`` that
``DocSignService.send_request`` persists.

Invariants enforced
-------------------
* Recipient ids are never reused; ``order`` values stay contiguous from 1.
* Every field is assigned to a recipient that exists in the composer.
  Removing a recipient moves its fields to the first remaining recipient,
  or deletes them when no recipient remains.
* The sent snapshot only contains recipients with both name and email.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from uuid import uuid4

from steps_config.schema import DocSignConfig
from steps_kernel.exceptions import NotFoundError, ValidationError
from steps_kernel.logging_config import get_logger
from steps_modules.docsign.models import (
    FIELD_LABELS,
    REQUIRED_BY_DEFAULT,
    FieldType,
    Position,
    Recipient,
    ReminderFrequency,
    SignatureDocument,
    SignatureField,
    SigningMode,
    Size,
)

logger = get_logger("modules.docsign.composer")


def _position(x: float, y: float) -> Position:
    try:
        return Position(float(x), float(y))
    except ValueError as exc:
        raise ValidationError("position", str(exc)) from exc


class SignatureComposer:
    """Editable signature request. Starts with one empty recipient."""

    def __init__(self, config: DocSignConfig | None = None):
        self._config = config or DocSignConfig()
        self._recipients: list[Recipient] = [
            Recipient(id=1, order=1, color=self._config.palette[0]),
        ]
        self._fields: list[SignatureField] = []
        self._field_seq = 0

        self.file_name: str | None = None
        self.file_size: int = 0
        self.subject: str = ""
        self.message: str = ""
        self.signing_mode: SigningMode = SigningMode.SEQUENTIAL
        self.due_date: date | None = None
        self.reminder_frequency: ReminderFrequency = ReminderFrequency.NONE

    @property
    def recipients(self) -> tuple[Recipient, ...]:
        return tuple(self._recipients)

    @property
    def fields(self) -> tuple[SignatureField, ...]:
        return tuple(self._fields)

    # -------------------------------------------------------------------------
    # Recipients
    # -------------------------------------------------------------------------

    def _recipient_index(self, recipient_id: int) -> int | None:
        for i, r in enumerate(self._recipients):
            if r.id == recipient_id:
                return i
        return None

    def _color_for(self, order: int) -> str:
        palette = self._config.palette
        return palette[(order - 1) % len(palette)]

    def add_recipient(self, name: str = "", email: str = "") -> Recipient:
        """Append a recipient with the next order and the next palette color."""
        next_id = max((r.id for r in self._recipients), default=0) + 1
        order = len(self._recipients) + 1
        recipient = Recipient(
            id=next_id, name=name, email=email, order=order, color=self._color_for(order),
        )
        self._recipients.append(recipient)
        return recipient

    def update_recipient(
        self,
        recipient_id: int,
        name: str | None = None,
        email: str | None = None,
    ) -> Recipient:
        i = self._recipient_index(recipient_id)
        if i is None:
            raise NotFoundError("recipient", str(recipient_id))
        changes = {k: v for k, v in (("name", name), ("email", email)) if v is not None}
        self._recipients[i] = replace(self._recipients[i], **changes)
        return self._recipients[i]

    def remove_recipient(self, recipient_id: int) -> None:
        """Remove a recipient, renumber the rest, and re-home its fields."""
        i = self._recipient_index(recipient_id)
        if i is None:
            raise NotFoundError("recipient", str(recipient_id))
        del self._recipients[i]
        self._recipients = [
            replace(r, order=n) for n, r in enumerate(self._recipients, start=1)
        ]

        orphaned = [f for f in self._fields if f.assigned_to == recipient_id]
        if not orphaned:
            return
        if self._recipients:
            heir = self._recipients[0].id
            self._fields = [
                replace(f, assigned_to=heir) if f.assigned_to == recipient_id else f
                for f in self._fields
            ]
        else:
            self._fields = [f for f in self._fields if f.assigned_to != recipient_id]
        logger.debug(
            "docsign_fields_rehomed",
            extra={"removed_recipient": recipient_id, "field_count": len(orphaned)},
        )

    # -------------------------------------------------------------------------
    # Document
    # -------------------------------------------------------------------------

    def upload_document(self, file_name: str, size: int, content_type: str) -> None:
        """Attach the PDF to be signed."""
        if content_type not in self._config.allowed_content_types:
            raise ValidationError("file", "Please upload a PDF file")
        if size > self._config.max_upload_bytes:
            limit_mb = self._config.max_upload_bytes // (1024 * 1024)
            raise ValidationError("file", f"File size must be less than {limit_mb}MB")
        self.file_name = file_name
        self.file_size = size
        if not self.subject.strip():
            self.subject = f"Please sign: {file_name}"

    # -------------------------------------------------------------------------
    # Fields
    # -------------------------------------------------------------------------

    def _field_index(self, field_id: str) -> int:
        for i, f in enumerate(self._fields):
            if f.id == field_id:
                return i
        raise NotFoundError("field", field_id)

    def _size_for(self, field_type: FieldType) -> Size:
        fs = self._config.field_sizes.get(field_type.value, self._config.default_field_size)
        return Size(fs.width, fs.height)

    def place_field(
        self,
        field_type: FieldType | str,
        page: int,
        position: tuple[float, float],
        assigned_to: int | None = None,
    ) -> SignatureField:
        """Drop a field on a page, assigned to the first recipient by default."""
        field_type = FieldType(field_type)
        if page < 1:
            raise ValidationError("page", "page numbers start at 1")
        if assigned_to is None:
            if not self._recipients:
                raise ValidationError("assigned_to", "add a recipient before placing fields")
            assigned_to = self._recipients[0].id
        elif self._recipient_index(assigned_to) is None:
            raise ValidationError("assigned_to", f"unknown recipient {assigned_to}")

        self._field_seq += 1
        placed = SignatureField(
            id=f"field-{self._field_seq}",
            type=field_type,
            page=page,
            position=_position(*position),
            size=self._size_for(field_type),
            required=field_type in REQUIRED_BY_DEFAULT,
            assigned_to=assigned_to,
            label=FIELD_LABELS[field_type],
        )
        self._fields.append(placed)
        return placed

    def reassign_field(self, field_id: str, recipient_id: int) -> SignatureField:
        """Assign a field to another recipient; unknown recipients are ignored."""
        i = self._field_index(field_id)
        if self._recipient_index(recipient_id) is not None:
            self._fields[i] = replace(self._fields[i], assigned_to=recipient_id)
        return self._fields[i]

    def reposition_field(
        self, field_id: str, page: int, position: tuple[float, float],
    ) -> SignatureField:
        i = self._field_index(field_id)
        if page < 1:
            raise ValidationError("page", "page numbers start at 1")
        self._fields[i] = replace(self._fields[i], page=page, position=_position(*position))
        return self._fields[i]

    def remove_field(self, field_id: str) -> None:
        del self._fields[self._field_index(field_id)]

    def toggle_required(self, field_id: str) -> SignatureField:
        i = self._field_index(field_id)
        self._fields[i] = replace(self._fields[i], required=not self._fields[i].required)
        return self._fields[i]

    # -------------------------------------------------------------------------
    # Send
    # -------------------------------------------------------------------------

    def build_document(self, uploaded_by: str) -> SignatureDocument:
        """Freeze the composer into a sendable document.

        Raises:
            ValidationError: no document uploaded, no recipient with both
                name and email, or a blank subject.
        """
        if self.file_name is None:
            raise ValidationError("file", "Please upload a document")
        valid = [r for r in self._recipients if r.is_valid]
        if not valid:
            raise ValidationError("recipients", "Please add at least one recipient with name and email")
        if not self.subject.strip():
            raise ValidationError("subject", "Please enter a subject")

        recipients = tuple(replace(r, order=n) for n, r in enumerate(valid, start=1))
        kept_ids = {r.id for r in recipients}
        fields = tuple(
            f if f.assigned_to in kept_ids else replace(f, assigned_to=recipients[0].id)
            for f in self._fields
        )
        return SignatureDocument(
            id=uuid4(),
            file_name=self.file_name,
            file_size=self.file_size,
            uploaded_by=uploaded_by,
            subject=self.subject.strip(),
            recipients=recipients,
            fields=fields,
            message=self.message,
            signing_mode=self.signing_mode,
            due_date=self.due_date,
            reminder_frequency=self.reminder_frequency,
        )

"""
DocSign Module (``steps_modules.docsign``).

Responsibility
--------------
Composing signature requests (uploaded PDF, ordered recipients, fields
placed on pages) and tracking each recipient's decision once sent.
"""

from steps_modules.docsign.composer import SignatureComposer
from steps_modules.docsign.models import (
    DocumentStatus,
    FieldType,
    Position,
    Recipient,
    RecipientStatus,
    ReminderFrequency,
    SignatureDocument,
    SignatureField,
    SigningMode,
    Size,
)
from steps_modules.docsign.workflows import DOCUMENT_WORKFLOW, RECIPIENT_WORKFLOW

__all__ = [
    "SignatureComposer",
    "SignatureDocument",
    "SignatureField",
    "Recipient",
    "RecipientStatus",
    "DocumentStatus",
    "FieldType",
    "Position",
    "Size",
    "SigningMode",
    "ReminderFrequency",
    "DOCUMENT_WORKFLOW",
    "RECIPIENT_WORKFLOW",
]

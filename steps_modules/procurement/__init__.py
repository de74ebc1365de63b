"""
Procurement Module (``steps_modules.procurement``).

Responsibility
--------------
Purchase orders raised when a material request is approved, and their
review and payment afterwards.
"""

from steps_modules.procurement.models import POStatus, PurchaseOrder, PurchaseOrderLine
from steps_modules.procurement.workflows import PURCHASE_ORDER_WORKFLOW

__all__ = [
    "POStatus",
    "PurchaseOrder",
    "PurchaseOrderLine",
    "PURCHASE_ORDER_WORKFLOW",
]

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from hotel_inventory.schemas.response import CamelModel


class PurchaseOrderStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"


class Priority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class SupplierSnapshot(CamelModel):
    """Supplier details copied onto the order at creation time."""
    id: Optional[str] = None
    name: str
    contact_person: str = ""
    email: str = ""
    phone: str = ""


class PurchaseOrderLine(CamelModel):
    item_id: Optional[str] = None
    inventory_item_id: Optional[str] = None
    item_name: str = ""
    unit: str = ""
    quantity: float = Field(..., gt=0)
    unit_cost: float = Field(0, ge=0)


class PurchaseOrderCreate(CamelModel):
    order_number: Optional[str] = Field(None, description="Generated as PO-{year}-{seq} when omitted.")
    supplier: SupplierSnapshot
    items: List[PurchaseOrderLine] = Field(..., min_length=1)
    priority: Priority = Priority.NORMAL
    expected_delivery: Optional[datetime] = None
    notes: str = ""


class PurchaseOrderUpdate(CamelModel):
    supplier: Optional[SupplierSnapshot] = None
    items: Optional[List[PurchaseOrderLine]] = None
    priority: Optional[Priority] = None
    expected_delivery: Optional[datetime] = None
    notes: Optional[str] = None


class StatusChangeRequest(CamelModel):
    status: PurchaseOrderStatus
    reason: str = ""


class EmailRequest(CamelModel):
    custom_subject: Optional[str] = None
    custom_content: Optional[str] = None
    message: Optional[str] = Field(None, description="Free-text note appended to the email.")

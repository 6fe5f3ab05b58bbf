from datetime import datetime
from typing import Optional

from pydantic import Field

from hotel_inventory.schemas.response import CamelModel


class InventoryItemCreate(CamelModel):
    """Schema for registering a new stock item."""
    name: str = Field(..., min_length=1, description="Display name (e.g., Luxury Shampoo Bottles).")
    description: str = Field("", description="Free-text description.")
    category: str = Field(..., description="menu-items, toiletries, cleaning-supplies, equipment, ...")
    type: str = Field("consumable", description="consumable or asset.")
    unit: str = Field("pcs", description="Unit of measure (kg, bottles, pieces, ...).")
    current_stock: float = Field(0, ge=0)
    restock_threshold: float = Field(0, ge=0, description="At or below this level the item is low stock.")
    max_stock: Optional[float] = Field(None, ge=0)
    location: str = ""
    supplier: str = Field("", description="Supplier name or id.")
    cost: float = Field(0, ge=0, description="Unit cost.")
    expiration_date: Optional[datetime] = None
    is_active: bool = True


class InventoryItemUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    unit: Optional[str] = None
    restock_threshold: Optional[float] = Field(None, ge=0)
    max_stock: Optional[float] = Field(None, ge=0)
    location: Optional[str] = None
    supplier: Optional[str] = None
    cost: Optional[float] = Field(None, ge=0)
    expiration_date: Optional[datetime] = None
    is_active: Optional[bool] = None


class StockChangeRequest(CamelModel):
    """
    Signed stock movement. With ``batch_number`` the movement targets that batch;
    without it, batched items are drawn down first-expiry-first-out.
    """
    change: float = Field(..., description="Positive for stock-in, negative for stock-out.")
    reason: str = Field("adjustment", description="restock, consumption, damage, po-receipt, ...")
    notes: str = ""
    type: Optional[str] = Field(None, description="Overrides the derived stock-in/stock-out type.")
    batch_number: Optional[str] = None
    expiration_date: Optional[datetime] = None

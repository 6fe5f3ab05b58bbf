from datetime import datetime
from typing import List, Optional

from pydantic import Field

from hotel_inventory.schemas.response import CamelModel


class ReceiveLineInput(CamelModel):
    """Operator edits for one order line; omitted fields keep their defaults."""
    line_id: int = Field(..., ge=0, description="Index of the line on the purchase order.")
    is_checked: Optional[bool] = None
    received_quantity: Optional[float] = Field(None, ge=0)
    batch_number: Optional[str] = None
    expiration_date: Optional[datetime] = None


class ReceiveRequest(CamelModel):
    lines: List[ReceiveLineInput] = Field(default_factory=list)

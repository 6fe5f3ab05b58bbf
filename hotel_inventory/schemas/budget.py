from typing import Any

from pydantic import Field

from hotel_inventory.schemas.response import CamelModel


class BudgetUpsert(CamelModel):
    # Left untyped so a non-numeric amount reaches the service's own validation (400)
    amount: Any = Field(..., description="Monthly budget, numeric and >= 0.")
    notes: str = ""

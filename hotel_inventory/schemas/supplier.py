from typing import List, Optional

from pydantic import Field

from hotel_inventory.schemas.response import CamelModel


class SupplierCreate(CamelModel):
    name: str = Field(..., min_length=1)
    contact_person: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    categories: List[str] = Field(default_factory=list)


class SupplierUpdate(CamelModel):
    name: Optional[str] = None
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    categories: Optional[List[str]] = None
    is_active: Optional[bool] = None

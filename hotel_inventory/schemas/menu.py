from typing import List, Optional

from pydantic import Field

from hotel_inventory.schemas.response import CamelModel


class RequiredIngredient(CamelModel):
    ingredient_id: str
    quantity_required: float = Field(..., gt=0)
    unit: str = ""
    is_critical: bool = True


class MenuItemCreate(CamelModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    category: str = Field(..., description="beverage, appetizer, main-course, dessert, ...")
    is_available: bool = True
    preparation_time: int = Field(0, ge=0, description="Minutes.")
    price: Optional[float] = Field(None, ge=0)
    required_ingredients: List[RequiredIngredient] = Field(default_factory=list)


class MenuItemUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    preparation_time: Optional[int] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    required_ingredients: Optional[List[RequiredIngredient]] = None


class AvailabilityUpdate(CamelModel):
    is_available: bool

import logging
from typing import Any, Dict, List

from hotel_inventory.core.dates import parse_datetime, utcnow
from hotel_inventory.services.base import CollectionService, matches
from hotel_inventory.services.inventory_service import InventoryService
from hotel_inventory.store.base import DocumentStore
from hotel_inventory.store.fixtures import DEFAULT_MENU_ITEMS

log = logging.getLogger(__name__)


def _ingredient_problem(ingredient: Dict[str, Any], now) -> str:
    """'out-of-stock', 'expired', 'low-stock' or '' for one inventory item."""
    if ingredient is None or (ingredient.get("currentStock") or 0) <= 0:
        return "out-of-stock"
    expiry = parse_datetime(ingredient.get("expirationDate"))
    if expiry is not None and expiry < now:
        return "expired"
    if (ingredient.get("currentStock") or 0) <= (ingredient.get("restockThreshold") or 0):
        return "low-stock"
    return ""


class MenuService(CollectionService):
    collection = "menu"
    label = "Menu item"

    def __init__(self, store: DocumentStore, inventory: InventoryService):
        super().__init__(store)
        self.inventory = inventory

    async def update_availability(self, item_id: str, is_available: bool) -> Dict[str, Any]:
        return await self.update(item_id, {"isAvailable": bool(is_available)})

    async def get_by_availability(self, is_available: bool) -> List[Dict[str, Any]]:
        return [m for m in await self.get_all() if bool(m.get("isAvailable")) == is_available]

    async def get_available_items(self) -> List[Dict[str, Any]]:
        return await self.get_by_availability(True)

    async def get_unavailable_items(self) -> List[Dict[str, Any]]:
        return await self.get_by_availability(False)

    async def get_by_category(self, category: str) -> List[Dict[str, Any]]:
        return [m for m in await self.get_all() if m.get("category") == category]

    async def search(self, query: str) -> List[Dict[str, Any]]:
        return [
            m for m in await self.get_all()
            if matches(query, m.get("name"), m.get("description"), m.get("category"))
        ]

    async def initialize_default_menu_items(self) -> int:
        """Seeds the default dishes when the menu is empty. Returns how many were created."""
        if await self.get_all():
            return 0
        for dish in DEFAULT_MENU_ITEMS:
            await self.create(dish)
        log.info(f"Initialised {len(DEFAULT_MENU_ITEMS)} default menu items")
        return len(DEFAULT_MENU_ITEMS)

    async def _ingredients(self) -> Dict[str, Dict[str, Any]]:
        return {item["id"]: item for item in await self.inventory.get_all()}

    async def refresh_availability(self) -> List[Dict[str, Any]]:
        """
        A dish is available only while every critical ingredient is in stock and
        not expired. Writes only the dishes whose flag changes and returns them.
        """
        now = utcnow()
        ingredients = await self._ingredients()
        changed = []
        for dish in await self.get_all():
            available = True
            for req in dish.get("requiredIngredients") or []:
                if not req.get("isCritical"):
                    continue
                problem = _ingredient_problem(ingredients.get(req.get("ingredientId")), now)
                if problem in ("out-of-stock", "expired"):
                    available = False
                    break
            if bool(dish.get("isAvailable")) != available:
                changed.append(await self.update_availability(dish["id"], available))
        return changed

    async def get_affected_items(self) -> Dict[str, List[Dict[str, Any]]]:
        """Dishes grouped by the ingredient problem that affects them."""
        now = utcnow()
        ingredients = await self._ingredients()
        groups = {"out-of-stock": [], "low-stock": [], "expired": []}
        for dish in await self.get_all():
            for req in dish.get("requiredIngredients") or []:
                ingredient_id = req.get("ingredientId")
                ingredient = ingredients.get(ingredient_id)
                problem = _ingredient_problem(ingredient, now)
                if not problem:
                    continue
                groups[problem].append({
                    "menuItemId": dish["id"],
                    "menuItemName": dish.get("name"),
                    "ingredientId": ingredient_id,
                    "ingredientName": (ingredient or {}).get("name"),
                    "currentStock": (ingredient or {}).get("currentStock", 0),
                    "isCritical": bool(req.get("isCritical")),
                })
        return groups

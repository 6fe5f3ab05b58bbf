import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from hotel_inventory.core.dates import parse_datetime, utcnow, utcnow_iso
from hotel_inventory.core.errors import NotFoundError, ValidationError
from hotel_inventory.store.base import DocumentStore, join_path

log = logging.getLogger(__name__)

BUDGETS_COLLECTION = "budgets"


def budget_key(year: int, month: int) -> str:
    return f"{int(year)}-{int(month):02d}"


def _check_period(year, month):
    try:
        year, month = int(year), int(month)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid budget period {year}-{month}")
    if not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month}")
    return year, month


def _check_amount(value, field="amount") -> float:
    if isinstance(value, bool):
        raise ValidationError(f"Budget {field} must be a number")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Budget {field} must be a number, got {value!r}")
    if math.isnan(amount) or math.isinf(amount):
        raise ValidationError(f"Budget {field} must be a finite number")
    if amount < 0:
        raise ValidationError(f"Budget {field} cannot be negative")
    return amount


def calculate_remaining(budget: Dict[str, Any]) -> float:
    """Never negative; use calculate_over_budget for the deficit."""
    return max(0, (budget.get("amount") or 0) - (budget.get("spent") or 0))


def calculate_over_budget(budget: Dict[str, Any]) -> float:
    return max(0, (budget.get("spent") or 0) - (budget.get("amount") or 0))


def calculate_percentage_used(budget: Dict[str, Any]) -> int:
    amount = budget.get("amount") or 0
    if amount == 0:
        return 0
    return round((budget.get("spent") or 0) / amount * 100)


def calculate_monthly_spending(orders: Iterable[Dict[str, Any]], year: int, month: int) -> float:
    """Sum of totalAmount over orders created in the given month."""
    total = 0
    for order in orders:
        created = parse_datetime(order.get("createdAt"))
        if created is not None and created.year == year and created.month == month:
            total += order.get("totalAmount") or 0
    return total


def with_figures(budget: Dict[str, Any]) -> Dict[str, Any]:
    return {
        **budget,
        "remaining": calculate_remaining(budget),
        "overBudget": calculate_over_budget(budget),
        "percentageUsed": calculate_percentage_used(budget),
    }


class BudgetService:
    """Monthly procurement budgets keyed ``YYYY-MM``."""

    budget_key = staticmethod(budget_key)
    calculate_remaining = staticmethod(calculate_remaining)
    calculate_over_budget = staticmethod(calculate_over_budget)
    calculate_percentage_used = staticmethod(calculate_percentage_used)
    calculate_monthly_spending = staticmethod(calculate_monthly_spending)

    def __init__(self, store: DocumentStore):
        self.store = store

    def _path(self, year: int, month: int) -> str:
        return join_path(BUDGETS_COLLECTION, budget_key(year, month))

    async def _get(self, year: int, month: int) -> Optional[Dict[str, Any]]:
        doc = await self.store.get(self._path(year, month))
        if doc is None:
            return None
        return {**doc, "id": budget_key(year, month)}

    async def get_budget_by_month(self, year: int, month: int) -> Dict[str, Any]:
        """Stored budget, or a zero placeholder (not persisted) when none exists."""
        year, month = _check_period(year, month)
        budget = await self._get(year, month)
        if budget is not None:
            return budget
        return {"id": budget_key(year, month), "year": year, "month": month, "amount": 0, "spent": 0, "notes": ""}

    async def get_current_month_budget(self) -> Dict[str, Any]:
        now = utcnow()
        return await self.get_budget_by_month(now.year, now.month)

    async def set_budget(
        self, year: int, month: int, amount, notes: str = "", updated_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        year, month = _check_period(year, month)
        amount = _check_amount(amount)

        now = utcnow_iso()
        patch = {
            "year": year,
            "month": month,
            "amount": amount,
            "notes": notes or "",
            "updatedAt": now,
            "updatedBy": updated_by,
        }
        if await self._get(year, month) is None:
            patch.update(spent=0, createdAt=now)
        await self.store.update(self._path(year, month), patch)
        return await self._get(year, month)

    async def update_budget_spent(self, year: int, month: int, spent) -> Dict[str, Any]:
        year, month = _check_period(year, month)
        spent = _check_amount(spent, field="spent")
        if await self._get(year, month) is None:
            raise NotFoundError(f"No budget set for {budget_key(year, month)}")
        await self.store.update(self._path(year, month), {"spent": spent, "updatedAt": utcnow_iso()})
        return await self._get(year, month)

    async def get_all_budgets(self) -> List[Dict[str, Any]]:
        budgets = await self.store.get_children(BUDGETS_COLLECTION)
        budgets.sort(key=lambda b: (b.get("year") or 0, b.get("month") or 0), reverse=True)
        return budgets

    async def get_budgets_by_year(self, year: int) -> List[Dict[str, Any]]:
        return [b for b in await self.get_all_budgets() if b.get("year") == int(year)]

    async def delete_budget(self, year: int, month: int) -> bool:
        year, month = _check_period(year, month)
        if await self._get(year, month) is None:
            raise NotFoundError(f"No budget set for {budget_key(year, month)}")
        await self.store.remove(self._path(year, month))
        return True

    async def recalculate_spent(
        self, year: int, month: int, orders: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """Stores the month's purchase-order spending as ``spent``, creating a zero budget if needed."""
        year, month = _check_period(year, month)
        if orders is None:
            orders = await self.store.get_children("purchaseOrders")
        spent = calculate_monthly_spending(orders, year, month)
        if await self._get(year, month) is None:
            await self.set_budget(year, month, 0)
        log.info(f"Recalculated spending for {budget_key(year, month)}: {spent}")
        return await self.update_budget_spent(year, month, spent)

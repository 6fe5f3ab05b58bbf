import pytest

from hotel_inventory.core.errors import NotFoundError, ValidationError
from hotel_inventory.services.budget_service import (
    BudgetService,
    calculate_monthly_spending,
    calculate_over_budget,
    calculate_percentage_used,
    calculate_remaining,
    with_figures,
)


class TestBudgetFigures:
    @pytest.mark.parametrize("spent", [0, 10, 500])
    def test_zero_budget_reports_zero_percent(self, spent):
        assert calculate_percentage_used({"amount": 0, "spent": spent}) == 0

    def test_percentage_rounds(self):
        assert calculate_percentage_used({"amount": 3000, "spent": 1000}) == 33

    def test_remaining_is_clamped_and_overspend_reported(self):
        budget = {"amount": 100, "spent": 150}

        assert calculate_remaining(budget) == 0
        assert calculate_over_budget(budget) == 50
        assert with_figures(budget)["percentageUsed"] == 150

    def test_monthly_spending_counts_orders_created_in_month(self):
        orders = [
            {"createdAt": "2024-01-20T00:00:00+00:00", "totalAmount": 100},
            {"createdAt": "2024-01-31T23:00:00Z", "totalAmount": 50},
            {"createdAt": "2024-02-01T00:00:00+00:00", "totalAmount": 999},
            {"createdAt": None, "totalAmount": 7},
        ]

        assert calculate_monthly_spending(orders, 2024, 1) == 150

    def test_helpers_available_on_service(self):
        assert BudgetService.budget_key(2024, 3) == "2024-03"
        assert BudgetService.calculate_remaining({"amount": 10, "spent": 4}) == 6


class TestBudgetService:
    @pytest.mark.asyncio
    async def test_missing_month_is_zero_placeholder(self, services):
        budget = await services.budgets.get_budget_by_month(2024, 3)

        assert budget == {"id": "2024-03", "year": 2024, "month": 3, "amount": 0, "spent": 0, "notes": ""}
        assert await services.store.get("budgets/2024-03") is None

    @pytest.mark.asyncio
    async def test_set_budget_then_update_keeps_spent(self, services):
        budgets = services.budgets
        created = await budgets.set_budget(2024, 3, 5000, "Q1 kitchen", updated_by="ic-1")
        await budgets.update_budget_spent(2024, 3, 1200)
        updated = await budgets.set_budget(2024, 3, "6000")

        assert created["spent"] == 0
        assert created["createdAt"]
        assert updated["amount"] == 6000
        assert updated["spent"] == 1200
        assert updated["createdAt"] == created["createdAt"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["abc", -1, None, True, float("nan")])
    async def test_invalid_amount_rejected_before_write(self, services, amount):
        with pytest.raises(ValidationError):
            await services.budgets.set_budget(2024, 3, amount)
        assert await services.store.get("budgets/2024-03") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("month", [0, 13])
    async def test_invalid_month(self, services, month):
        with pytest.raises(ValidationError):
            await services.budgets.get_budget_by_month(2024, month)

    @pytest.mark.asyncio
    async def test_spent_on_missing_budget(self, services):
        with pytest.raises(NotFoundError):
            await services.budgets.update_budget_spent(2024, 3, 100)

    @pytest.mark.asyncio
    async def test_listing_newest_first(self, services):
        budgets = services.budgets
        await budgets.set_budget(2023, 12, 100)
        await budgets.set_budget(2024, 2, 100)
        await budgets.set_budget(2024, 1, 100)

        assert [b["id"] for b in await budgets.get_all_budgets()] == ["2024-02", "2024-01", "2023-12"]
        assert [b["id"] for b in await budgets.get_budgets_by_year(2024)] == ["2024-02", "2024-01"]

    @pytest.mark.asyncio
    async def test_delete_budget(self, services):
        await services.budgets.set_budget(2024, 3, 100)

        assert await services.budgets.delete_budget(2024, 3) is True
        with pytest.raises(NotFoundError):
            await services.budgets.delete_budget(2024, 3)

    @pytest.mark.asyncio
    async def test_recalculate_from_orders(self, seeded_services):
        budget = await seeded_services.budgets.recalculate_spent(2024, 1)

        # every fixture order was created in January 2024
        assert budget["spent"] == 63750 + 45000 + 18000 + 12500
        assert budget["amount"] == 0

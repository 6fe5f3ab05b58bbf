import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path

from hotel_inventory.api.deps import Identity, allow, get_services
from hotel_inventory.core.policy import Action, Resource
from hotel_inventory.schemas.budget import BudgetUpsert
from hotel_inventory.schemas.response import SuccessResponse
from hotel_inventory.services.budget_service import with_figures
from hotel_inventory.services.registry import Services

router = APIRouter()
log = logging.getLogger("uvicorn")

can_read = allow(Action.READ, Resource.BUDGET)
can_write = allow(Action.UPDATE, Resource.BUDGET)

Year = Annotated[int, Path(ge=2000, le=2100)]
Month = Annotated[int, Path(ge=1, le=12)]


@router.get("/", response_model=SuccessResponse)
async def list_budgets_endpoint(services: Services = Depends(get_services), _: Identity = Depends(can_read)):
    """All budgets, newest month first, each with remaining / overBudget / percentageUsed."""
    return SuccessResponse(data=[with_figures(b) for b in await services.budgets.get_all_budgets()])


@router.get("/current", response_model=SuccessResponse)
async def current_budget_endpoint(services: Services = Depends(get_services), _: Identity = Depends(can_read)):
    return SuccessResponse(data=with_figures(await services.budgets.get_current_month_budget()))


@router.get("/{year}", response_model=SuccessResponse)
async def budgets_by_year_endpoint(
    year: Year,
    services: Services = Depends(get_services),
    _: Identity = Depends(can_read),
):
    return SuccessResponse(data=[with_figures(b) for b in await services.budgets.get_budgets_by_year(year)])


@router.get("/{year}/{month}", response_model=SuccessResponse)
async def get_budget_endpoint(
    year: Year,
    month: Month,
    services: Services = Depends(get_services),
    _: Identity = Depends(can_read),
):
    return SuccessResponse(data=with_figures(await services.budgets.get_budget_by_month(year, month)))


@router.put("/{year}/{month}", response_model=SuccessResponse)
async def set_budget_endpoint(
    year: Year,
    month: Month,
    payload: BudgetUpsert,
    services: Services = Depends(get_services),
    identity: Identity = Depends(can_write),
):
    budget = await services.budgets.set_budget(
        year, month, payload.amount, payload.notes, updated_by=identity.user_id,
    )
    log.info(f"Budget {year}-{month:02d} set to {budget['amount']} by {identity.user_id}.")
    return SuccessResponse(data=with_figures(budget))


@router.delete("/{year}/{month}", response_model=SuccessResponse)
async def delete_budget_endpoint(
    year: Year,
    month: Month,
    services: Services = Depends(get_services),
    _: Identity = Depends(allow(Action.DELETE, Resource.BUDGET)),
):
    await services.budgets.delete_budget(year, month)
    return SuccessResponse(data={"id": services.budgets.budget_key(year, month), "deleted": True})


@router.post("/{year}/{month}/recalculate", response_model=SuccessResponse)
async def recalculate_budget_endpoint(
    year: Year,
    month: Month,
    services: Services = Depends(get_services),
    _: Identity = Depends(can_write),
):
    """Sets ``spent`` from the purchase orders created in that month."""
    return SuccessResponse(data=with_figures(await services.budgets.recalculate_spent(year, month)))

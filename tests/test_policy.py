import pytest

from hotel_inventory.core.errors import PermissionDeniedError
from hotel_inventory.core.policy import Action, Resource, Role, authorize, is_allowed

CONTROLLER = Role.INVENTORY_CONTROLLER
KITCHEN = Role.KITCHEN_STAFF
PURCHASING = Role.PURCHASING_OFFICER


class TestPolicy:
    @pytest.mark.parametrize("role, action, resource, expected", [
        (CONTROLLER, Action.APPROVE, Resource.PURCHASE_ORDER, True),
        (PURCHASING, Action.APPROVE, Resource.PURCHASE_ORDER, False),
        (KITCHEN, Action.APPROVE, Resource.PURCHASE_ORDER, False),
        (PURCHASING, Action.RECEIVE, Resource.PURCHASE_ORDER, True),
        (KITCHEN, Action.RECEIVE, Resource.PURCHASE_ORDER, False),
        (PURCHASING, Action.CREATE, Resource.PURCHASE_ORDER, True),
        (KITCHEN, Action.UPDATE, Resource.MENU, True),
        (PURCHASING, Action.UPDATE, Resource.MENU, False),
        (KITCHEN, Action.READ, Resource.SUPPLIER, False),
        (PURCHASING, Action.UPDATE, Resource.BUDGET, False),
        (CONTROLLER, Action.READ, Resource.ACTIVITY, True),
        (KITCHEN, Action.UPDATE, Resource.INVENTORY, True),
    ])
    def test_decisions(self, role, action, resource, expected):
        assert is_allowed(role, action, resource) is expected

    def test_plain_strings_accepted(self):
        assert is_allowed("inventory-controller", "approve", "purchase-order")

    @pytest.mark.parametrize("role", [None, "", "admin"])
    def test_unknown_roles_denied(self, role):
        assert not is_allowed(role, Action.READ, Resource.INVENTORY)

    def test_authorize_raises(self):
        with pytest.raises(PermissionDeniedError) as exc_info:
            authorize("kitchen-staff", Action.SHIP, Resource.PURCHASE_ORDER)

        assert exc_info.value.details == {"role": "kitchen-staff"}

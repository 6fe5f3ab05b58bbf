"""Role-based authorization.

A single decision function, ``is_allowed(role, action, resource)``, answers every
access question in the service. Routers and services call it (or ``authorize``,
which raises) instead of comparing role strings inline.
"""
from enum import Enum
from typing import Dict, FrozenSet, Tuple

from hotel_inventory.core.errors import PermissionDeniedError


class Role(str, Enum):
    INVENTORY_CONTROLLER = "inventory-controller"
    KITCHEN_STAFF = "kitchen-staff"
    PURCHASING_OFFICER = "purchasing-officer"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"
    REJECT = "reject"
    SHIP = "ship"          # approved -> in-transit
    RECEIVE = "receive"    # in-transit -> delivered
    EMAIL = "email"


class Resource(str, Enum):
    INVENTORY = "inventory"
    PURCHASE_ORDER = "purchase-order"
    MENU = "menu"
    SUPPLIER = "supplier"
    BUDGET = "budget"
    ACTIVITY = "activity"


ALL_ROLES: FrozenSet[Role] = frozenset(Role)
_CONTROLLER = frozenset({Role.INVENTORY_CONTROLLER})
_PROCUREMENT = frozenset({Role.INVENTORY_CONTROLLER, Role.PURCHASING_OFFICER})
_KITCHEN = frozenset({Role.INVENTORY_CONTROLLER, Role.KITCHEN_STAFF})

# Anything not listed here is denied.
POLICY: Dict[Tuple[Resource, Action], FrozenSet[Role]] = {
    (Resource.INVENTORY, Action.READ): ALL_ROLES,
    (Resource.INVENTORY, Action.CREATE): _CONTROLLER,
    (Resource.INVENTORY, Action.UPDATE): ALL_ROLES,
    (Resource.INVENTORY, Action.DELETE): _CONTROLLER,

    (Resource.PURCHASE_ORDER, Action.READ): ALL_ROLES,
    (Resource.PURCHASE_ORDER, Action.CREATE): _PROCUREMENT,
    (Resource.PURCHASE_ORDER, Action.UPDATE): _PROCUREMENT,
    (Resource.PURCHASE_ORDER, Action.DELETE): _CONTROLLER,
    (Resource.PURCHASE_ORDER, Action.APPROVE): _CONTROLLER,
    (Resource.PURCHASE_ORDER, Action.REJECT): _CONTROLLER,
    (Resource.PURCHASE_ORDER, Action.SHIP): _CONTROLLER,
    (Resource.PURCHASE_ORDER, Action.RECEIVE): _PROCUREMENT,
    (Resource.PURCHASE_ORDER, Action.EMAIL): _PROCUREMENT,

    (Resource.MENU, Action.READ): ALL_ROLES,
    (Resource.MENU, Action.CREATE): _KITCHEN,
    (Resource.MENU, Action.UPDATE): _KITCHEN,
    (Resource.MENU, Action.DELETE): _KITCHEN,

    (Resource.SUPPLIER, Action.READ): _PROCUREMENT,
    (Resource.SUPPLIER, Action.CREATE): _PROCUREMENT,
    (Resource.SUPPLIER, Action.UPDATE): _PROCUREMENT,
    (Resource.SUPPLIER, Action.DELETE): _CONTROLLER,
    (Resource.SUPPLIER, Action.APPROVE): _CONTROLLER,

    (Resource.BUDGET, Action.READ): _PROCUREMENT,
    (Resource.BUDGET, Action.UPDATE): _CONTROLLER,
    (Resource.BUDGET, Action.DELETE): _CONTROLLER,

    (Resource.ACTIVITY, Action.READ): _CONTROLLER,
}


def _coerce(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return None


def is_allowed(role, action, resource) -> bool:
    """Returns True when ``role`` may perform ``action`` on ``resource``."""
    role = _coerce(Role, role)
    action = _coerce(Action, action)
    resource = _coerce(Resource, resource)
    if role is None or action is None or resource is None:
        return False
    return role in POLICY.get((resource, action), frozenset())


def authorize(role, action, resource) -> None:
    """Raises PermissionDeniedError unless ``is_allowed``."""
    if not is_allowed(role, action, resource):
        raise PermissionDeniedError(
            f"Role '{role}' may not {getattr(action, 'value', action)} "
            f"{getattr(resource, 'value', resource)}",
            details={"role": str(getattr(role, "value", role))},
        )

from typing import Optional

from fastapi import Header, Request

from hotel_inventory.core.policy import Action, Resource, authorize
from hotel_inventory.services.registry import Services


class Identity:
    """Operator identity taken from the X-User-Role / X-User-Id request headers."""

    def __init__(self, role: Optional[str], user_id: Optional[str]):
        self.role = role
        self.user_id = user_id

    def require(self, action: Action, resource: Resource) -> "Identity":
        authorize(self.role, action, resource)
        return self


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_identity(
    x_user_role: Optional[str] = Header(None),
    x_user_id: Optional[str] = Header(None),
) -> Identity:
    return Identity(x_user_role, x_user_id or x_user_role)


def allow(action: Action, resource: Resource):
    """Dependency factory: resolves the caller's identity and checks it against the policy."""

    def dependency(
        x_user_role: Optional[str] = Header(None),
        x_user_id: Optional[str] = Header(None),
    ) -> Identity:
        return get_identity(x_user_role, x_user_id).require(action, resource)

    return dependency

from typing import Any, Dict, Optional
from fastapi import status


class InventoryAppError(Exception):
    """Base class for errors raised by the domain services."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "server_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class StoreError(InventoryAppError):
    """Document store failure (network, auth or backend). Callers inspect the message."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "store_error"


class NotFoundError(StoreError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"


class ValidationError(InventoryAppError):
    """Bad input, rejected before any store call."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "validation_error"


class PermissionDeniedError(InventoryAppError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "permission_denied"


class InvalidTransitionError(InventoryAppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "invalid_transition"


class ReceivingError(InventoryAppError):
    """A purchase-order receipt failed part way. Details list applied/compensated lines."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "receiving_error"


class EmailDeliveryError(InventoryAppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "email_error"


class StockRollbackError(StoreError):
    """A failed stock movement could not be undone; its batch write is still in the store."""

    error_code = "stock_rollback_error"

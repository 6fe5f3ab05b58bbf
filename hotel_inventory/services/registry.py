from typing import Optional

from hotel_inventory.services.activity_service import ActivityLogService
from hotel_inventory.services.budget_service import BudgetService
from hotel_inventory.services.email_service import EmailClient, EmailService
from hotel_inventory.services.inventory_service import InventoryService
from hotel_inventory.services.menu_service import MenuService
from hotel_inventory.services.purchase_order_service import PurchaseOrderService
from hotel_inventory.services.receiving_service import ReceivingService
from hotel_inventory.services.supplier_service import SupplierService
from hotel_inventory.store.base import DocumentStore


class Services:
    """Every domain service, wired to one store. Built once per application."""

    def __init__(self, store: DocumentStore, email_client: Optional[EmailClient] = None):
        self.store = store
        self.activity = ActivityLogService(store)
        self.inventory = InventoryService(store, self.activity)
        self.purchase_orders = PurchaseOrderService(store, self.activity)
        self.receiving = ReceivingService(self.inventory, self.purchase_orders)
        self.menu = MenuService(store, self.inventory)
        self.budgets = BudgetService(store)
        self.suppliers = SupplierService(store)
        self.email = EmailService(
            email_client or EmailClient(), self.purchase_orders, self.suppliers, self.activity,
        )


def build_services(store: DocumentStore, email_client: Optional[EmailClient] = None) -> Services:
    return Services(store, email_client)

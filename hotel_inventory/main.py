import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status

from hotel_inventory.api.v1.activity import router as activity_router
from hotel_inventory.api.v1.budgets import router as budgets_router
from hotel_inventory.api.v1.inventory import router as inventory_router
from hotel_inventory.api.v1.menu import router as menu_router
from hotel_inventory.api.v1.purchase_orders import router as purchase_orders_router
from hotel_inventory.api.v1.subscriptions import router as subscriptions_router
from hotel_inventory.api.v1.suppliers import router as suppliers_router
from hotel_inventory.core.config import LOG_LEVEL, PROJECT_NAME, VERSION
from hotel_inventory.core.db import open_store
from hotel_inventory.core.exception_handlers import setup_exception_handlers
from hotel_inventory.services.email_service import EmailClient
from hotel_inventory.services.registry import build_services
from hotel_inventory.store.base import DocumentStore

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger(__name__)


def create_app(store: Optional[DocumentStore] = None, email_client: Optional[EmailClient] = None) -> FastAPI:
    """
    Builds the application. With no ``store`` the lifespan opens one from
    configuration (and closes it on shutdown); a passed-in store is used as-is.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Handles startup and shutdown events."""
        log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
        owned = None
        if getattr(app.state, "services", None) is None:
            owned = await open_store()
            app.state.services = build_services(owned, email_client)
            await app.state.services.menu.initialize_default_menu_items()
        log.info(f"Using {app.state.services.store.name} document store.")
        yield
        if owned is not None:
            await owned.close()
        log.info(f"{PROJECT_NAME} stopped.")

    app = FastAPI(
        title=PROJECT_NAME,
        version=VERSION,
        lifespan=lifespan,
        # Configure API documentation and paths
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.services = build_services(store, email_client) if store is not None else None

    # Include routers for modular API structure
    app.include_router(inventory_router, prefix="/api/v1/inventory", tags=["Inventory"])
    app.include_router(purchase_orders_router, prefix="/api/v1/purchase-orders", tags=["Purchase Orders"])
    app.include_router(menu_router, prefix="/api/v1/menu", tags=["Menu"])
    app.include_router(suppliers_router, prefix="/api/v1/suppliers", tags=["Suppliers"])
    app.include_router(budgets_router, prefix="/api/v1/budgets", tags=["Budgets"])
    app.include_router(activity_router, prefix="/api/v1/activity", tags=["Activity Log"])
    app.include_router(subscriptions_router, tags=["Live Updates"])

    setup_exception_handlers(app)

    @app.get("/health", status_code=status.HTTP_200_OK)
    async def health_check(request: Request):
        """Simple health check endpoint."""
        services = request.app.state.services
        return {
            "status": "ok",
            "app_name": PROJECT_NAME,
            "store": services.store.name if services else None,
        }

    return app


app = create_app()

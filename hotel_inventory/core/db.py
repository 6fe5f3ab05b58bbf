from tortoise import Tortoise
from hotel_inventory.core.config import DB_URL, SEED_FIXTURES
import logging
from logging import INFO

# Set logging level for Tortoise ORM
logging.getLogger('tortoise').setLevel(INFO)
log = logging.getLogger(__name__)

# Define all models modules for the ORM
MODELS_MODULES = [
    "hotel_inventory.models.document",
]


async def init_db(db_url: str = None):
    """Initializes the Tortoise ORM connection and generates schemas."""
    db_url = db_url or DB_URL
    try:
        await Tortoise.init(
            db_url=db_url,
            modules={"models": MODELS_MODULES},
        )
        # Generate the database schema (create tables)
        await Tortoise.generate_schemas(safe=True)
        log.info("Database connection established and schemas generated.")
    except Exception as e:
        log.error(f"Could not connect to database at {db_url}. Error: {e}")
        raise


async def close_db():
    """Closes all database connections."""
    await Tortoise.close_connections()
    log.info("Database connections closed.")


async def open_store(db_url: str = None, seed_fixtures: bool = SEED_FIXTURES):
    """
    Picks the store implementation once, at startup.

    A database URL selects the Tortoise store. Without one, or when the database
    cannot be initialised, the in-memory store is used instead (optionally seeded
    with the fixture set). The fallback is logged, never surfaced to clients.
    """
    from hotel_inventory.store import MemoryDocumentStore, TortoiseDocumentStore
    from hotel_inventory.store.fixtures import fixture_seed

    db_url = db_url or DB_URL
    if db_url:
        try:
            await init_db(db_url)
            return TortoiseDocumentStore()
        except Exception as e:
            log.warning(f"Falling back to in-memory store: {e}")
    return MemoryDocumentStore(seed=fixture_seed() if seed_fixtures else None)

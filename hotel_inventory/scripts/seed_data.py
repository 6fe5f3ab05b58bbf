# scripts/seed_data.py
import asyncio
import logging

from tortoise import Tortoise

from hotel_inventory.core.db import DB_URL, init_db
from hotel_inventory.store.base import DocumentStore
from hotel_inventory.store.fixtures import fixture_seed
from hotel_inventory.store.tortoise_store import TortoiseDocumentStore

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger(__name__)


async def seed(store: DocumentStore, overwrite: bool = False) -> int:
    """Writes every fixture document that is not stored yet. Returns how many were written."""
    written = 0
    for collection, docs in fixture_seed().items():
        for doc_id, doc in docs.items():
            path = f"{collection}/{doc_id}"
            # Idempotent unless asked to overwrite
            if not overwrite and await store.get(path) is not None:
                continue
            await store.set(path, doc)
            written += 1
        log.info(f"Seeded {collection}.")
    return written


async def main():
    if not DB_URL:
        raise SystemExit("DATABASE_URL is not set; nothing to seed.")
    await init_db()
    written = await seed(TortoiseDocumentStore())
    log.info(f"Fixture documents written: {written}")
    await Tortoise.close_connections()


if __name__ == "__main__":
    asyncio.run(main())

import pytest

from hotel_inventory.services.registry import build_services
from hotel_inventory.store.fixtures import fixture_seed
from hotel_inventory.store.memory import MemoryDocumentStore


@pytest.fixture
def store():
    """Empty in-memory store."""
    return MemoryDocumentStore()


@pytest.fixture
def seeded_store():
    """In-memory store loaded with the fixture inventory, orders, suppliers and menu."""
    return MemoryDocumentStore(seed=fixture_seed())


@pytest.fixture
def services(store):
    return build_services(store)


@pytest.fixture
def seeded_services(seeded_store):
    return build_services(seeded_store)

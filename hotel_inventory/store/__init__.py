from .base import DocumentStore, join_path, new_key, utcnow_iso
from .memory import MemoryDocumentStore
from .tortoise_store import TortoiseDocumentStore

__all__ = [
    "DocumentStore",
    "MemoryDocumentStore",
    "TortoiseDocumentStore",
    "join_path",
    "new_key",
    "utcnow_iso",
]

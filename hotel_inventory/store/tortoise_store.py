import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

from tortoise.exceptions import BaseORMException
from tortoise.expressions import Q
from tortoise.transactions import in_transaction

from hotel_inventory.core.errors import StoreError
from hotel_inventory.events.change_feed import ChangeFeed
from hotel_inventory.models.document import Document
from hotel_inventory.store.base import DocumentStore, normalize_path

log = logging.getLogger(__name__)


@contextmanager
def _translate_errors(operation: str, path: str):
    try:
        yield
    except (BaseORMException, OSError) as e:
        log.error(f"Store {operation} failed for '{path}': {e}")
        raise StoreError(
            f"Store {operation} failed for '{path}': {e}",
            details={"operation": operation, "path": path},
        ) from e


def _split(path: str) -> Tuple[str, str]:
    parent, _, key = path.rpartition("/")
    return parent, key


def _flatten(path: str, value: Dict[str, Any]) -> List[Tuple[str, Dict[str, Any]]]:
    """One row per dict node; a node's own data excludes its dict-valued children."""
    own = {k: v for k, v in value.items() if not isinstance(v, dict)}
    rows = [(path, own)]
    for k, v in value.items():
        if isinstance(v, dict):
            rows.extend(_flatten(f"{path}/{k}", v))
    return rows


def _assemble(base: str, rows: List[Document]) -> Dict[str, Any]:
    root: Dict[str, Any] = {}
    for row in sorted(rows, key=lambda r: r.path.count("/")):
        if row.path == base:
            root.update(row.data or {})
            continue
        node = root
        for segment in row.path[len(base) + 1:].split("/"):
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        node.update(row.data or {})
    return root


def _subtree(path: str) -> Q:
    return Q(path=path) | Q(path__startswith=f"{path}/")


class TortoiseDocumentStore(DocumentStore):
    """
    Remote store: every node is a row of the ``documents`` table.
    Requires Tortoise to be initialised (see ``hotel_inventory.core.db.init_db``).
    """

    name = "tortoise"

    def __init__(self, feed: Optional[ChangeFeed] = None):
        super().__init__(feed)

    async def _load_subtree(self, path: str, conn=None) -> List[Document]:
        query = Document.filter(_subtree(path))
        if conn is not None:
            query = query.using_db(conn)
        rows = await query
        # startswith is a LIKE scan; '_' in keys must not act as a wildcard
        return [r for r in rows if r.path == path or r.path.startswith(f"{path}/")]

    async def _delete_subtree(self, path: str, conn) -> int:
        rows = await self._load_subtree(path, conn)
        if rows:
            await Document.filter(path__in=[r.path for r in rows]).using_db(conn).delete()
        return len(rows)

    async def _ensure_ancestors(self, path: str, conn) -> None:
        segments = path.split("/")
        for i in range(1, len(segments)):
            ancestor = "/".join(segments[:i])
            if await Document.filter(path=ancestor).using_db(conn).exists():
                continue
            parent, key = _split(ancestor)
            await Document.create(path=ancestor, parent=parent, key=key, data={}, using_db=conn)

    async def _write_rows(self, path: str, value: Dict[str, Any], conn) -> None:
        docs = []
        for row_path, data in _flatten(path, value):
            parent, key = _split(row_path)
            docs.append(Document(path=row_path, parent=parent, key=key, data=data))
        await Document.bulk_create(docs, using_db=conn)

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        path = normalize_path(path)
        with _translate_errors("read", path):
            rows = await self._load_subtree(path)
        if not rows:
            return None
        tree = _assemble(path, rows)
        return tree or None

    async def set(self, path: str, value: Dict[str, Any]) -> None:
        path = normalize_path(path)
        with _translate_errors("write", path):
            async with in_transaction() as conn:
                await self._delete_subtree(path, conn)
                await self._ensure_ancestors(path, conn)
                await self._write_rows(path, value, conn)
        await self._notify(path)

    async def update(self, path: str, patch: Dict[str, Any]) -> None:
        path = normalize_path(path)
        with _translate_errors("update", path):
            async with in_transaction() as conn:
                await self._ensure_ancestors(path, conn)
                row = await Document.filter(path=path).using_db(conn).first()
                if row is None:
                    parent, key = _split(path)
                    row = await Document.create(
                        path=path, parent=parent, key=key, data={}, using_db=conn
                    )
                data = dict(row.data or {})
                for key, value in patch.items():
                    child_path = f"{path}/{key}"
                    if isinstance(value, dict):
                        data.pop(key, None)
                        await self._delete_subtree(child_path, conn)
                        await self._write_rows(child_path, value, conn)
                    elif value is None:
                        data.pop(key, None)
                        await self._delete_subtree(child_path, conn)
                    else:
                        data[key] = value
                row.data = data
                await row.save(using_db=conn)
        await self._notify(path)

    async def remove(self, path: str) -> None:
        path = normalize_path(path)
        with _translate_errors("delete", path):
            async with in_transaction() as conn:
                deleted = await self._delete_subtree(path, conn)
        if deleted:
            await self._notify(path)

    async def close(self) -> None:
        from hotel_inventory.core.db import close_db

        await close_db()

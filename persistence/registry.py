from __future__ import annotations

import threading
from pathlib import Path

from .document_store import DocumentStore


class StoreRegistry:
    """
    Hands out one DocumentStore per normalized file path, so every caller
    touching the same file shares its in-memory collection and write lock.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._stores: dict[str, DocumentStore] = {}

    def store_for(self, path: Path) -> DocumentStore:
        key = str(Path(path).resolve())
        with self._guard:
            store = self._stores.get(key)
            if store is None:
                store = DocumentStore(Path(path))
                self._stores[key] = store
            return store

    def forget(self, path: Path) -> None:
        with self._guard:
            self._stores.pop(str(Path(path).resolve()), None)

    def clear(self) -> None:
        with self._guard:
            self._stores.clear()


GLOBAL_STORES = StoreRegistry()


def create_store(path: Path, *, registry: StoreRegistry | None = None) -> DocumentStore:
    """Bind to the collection file at `path`, loading it or creating it empty."""
    return (registry or GLOBAL_STORES).store_for(path)

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .criteria import Criteria
from .document_store import DocumentStore
from .interfaces import AsyncDocumentCollection
from .paths import PLANTS, POTS, USERS, collection_path
from .registry import StoreRegistry, create_store
from .results import DeleteResult, Document, DocumentId, LookupResult


class AsyncDocumentStore(AsyncDocumentCollection):
    """
    Async wrapper around a disk-backed DocumentStore.
    Uses asyncio.to_thread to avoid blocking the event loop on file I/O.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    @property
    def store(self) -> DocumentStore:
        return self._store

    async def find(self, doc_id: DocumentId) -> LookupResult:
        return await asyncio.to_thread(self._store.find, doc_id)

    async def find_one_by(self, criteria: Criteria | Mapping[str, Any] | None) -> LookupResult:
        return await asyncio.to_thread(self._store.find_one_by, criteria)

    async def find_by(self, criteria: Criteria | Mapping[str, Any] | None = None) -> list[Document]:
        return await asyncio.to_thread(self._store.find_by, criteria)

    async def find_all(self) -> list[Document]:
        return await asyncio.to_thread(self._store.find_all)

    async def save(self, document: Mapping[str, Any]) -> Document:
        return await asyncio.to_thread(self._store.save, document)

    async def delete(self, doc_id: DocumentId) -> DeleteResult:
        return await asyncio.to_thread(self._store.delete, doc_id)


@dataclass(frozen=True)
class Collections:
    """The three independent collections the API is built on."""

    users: AsyncDocumentStore
    pots: AsyncDocumentStore
    plants: AsyncDocumentStore


def open_collections(data_dir: Path, *, registry: StoreRegistry | None = None) -> Collections:
    """
    Open (or create) users.json, pots.json and plants.json under data_dir.

    Raises InvalidStateError if any existing file is corrupt.
    """

    def _open(name: str) -> AsyncDocumentStore:
        return AsyncDocumentStore(create_store(collection_path(data_dir, name), registry=registry))

    return Collections(users=_open(USERS), pots=_open(POTS), plants=_open(PLANTS))

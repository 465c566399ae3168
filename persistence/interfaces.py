from __future__ import annotations

from typing import Any, Mapping, Protocol

from .criteria import Criteria
from .results import DeleteResult, Document, DocumentId, LookupResult


class DocumentCollection(Protocol):
    """
    The operations a collection exposes to request handlers. Callers never
    touch the backing file directly.
    """

    def find(self, doc_id: DocumentId) -> LookupResult:
        ...

    def find_one_by(self, criteria: Criteria | Mapping[str, Any] | None) -> LookupResult:
        ...

    def find_by(self, criteria: Criteria | Mapping[str, Any] | None = None) -> list[Document]:
        ...

    def find_all(self) -> list[Document]:
        ...

    def save(self, document: Mapping[str, Any]) -> Document:
        """Insert (no id) or replace (existing id) and persist before returning."""
        ...

    def delete(self, doc_id: DocumentId) -> DeleteResult:
        ...


class AsyncDocumentCollection(Protocol):
    async def find(self, doc_id: DocumentId) -> LookupResult: ...
    async def find_one_by(self, criteria: Criteria | Mapping[str, Any] | None) -> LookupResult: ...
    async def find_by(self, criteria: Criteria | Mapping[str, Any] | None = None) -> list[Document]: ...
    async def find_all(self) -> list[Document]: ...
    async def save(self, document: Mapping[str, Any]) -> Document: ...
    async def delete(self, doc_id: DocumentId) -> DeleteResult: ...

from __future__ import annotations

import copy
import logging
import threading
from pathlib import Path
from typing import Any, Mapping, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, model_validator

from json_store import atomic_write_json, read_json

from .criteria import Criteria, values_equal
from .errors import InvalidDocumentError, InvalidStateError, PersistenceError, UnknownDocumentError
from .interfaces import DocumentCollection
from .results import Deleted, DeleteResult, Document, DocumentId, Found, LookupResult, NotFound

logger = logging.getLogger(__name__)

ID_FIELD = "id"


def _is_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_field_names(value: Any, where: str = "document") -> None:
    """JSON object keys are always strings; anything else would not survive a reload."""
    if isinstance(value, Mapping):
        for key, item in value.items():
            if not isinstance(key, str):
                raise InvalidDocumentError(f"field names must be strings, got {key!r} in {where}")
            _check_field_names(item, where=f"{where}.{key}")
    elif isinstance(value, (list, tuple)):
        for item in value:
            _check_field_names(item, where=where)


class CollectionDoc(BaseModel):
    """
    Mirrors the on-disk collection file:
      { "documents": [ {"id": 1, ...}, ... ], "next_id": 2 }
    """

    model_config = ConfigDict(extra="forbid")

    documents: list[dict[str, Any]]
    next_id: StrictInt = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _check_ids(self) -> "CollectionDoc":
        seen: set[int] = set()
        for doc in self.documents:
            doc_id = doc.get(ID_FIELD)
            if not _is_id(doc_id):
                raise ValueError(f"document without an integer id: {doc_id!r}")
            if doc_id in seen:
                raise ValueError(f"duplicate id {doc_id}")
            seen.add(doc_id)
        # A hand-edited file may lag behind its own ids; never hand out one in use.
        if seen and self.next_id <= max(seen):
            self.next_id = max(seen) + 1
        return self

    @classmethod
    def from_disk_doc(cls, doc: Any) -> "CollectionDoc":
        # Legacy format: a bare array of documents.
        if isinstance(doc, list):
            return cls.model_validate({"documents": doc})
        return cls.model_validate(doc)


class _Snapshot(NamedTuple):
    documents: tuple[Document, ...]
    next_id: int


class DocumentStore(DocumentCollection):
    """
    One ordered collection of JSON documents persisted to a single file.

    Every mutation writes the whole collection atomically and only then
    publishes it in memory, so readers never get ahead of the file. Mutations
    are serialized by a per-store lock; reads use the published snapshot,
    which is never modified in place.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._lock = threading.Lock()
        self._snapshot = self._open()

    @property
    def path(self) -> Path:
        return self._path

    def __len__(self) -> int:
        return len(self._snapshot.documents)

    def _open(self) -> _Snapshot:
        try:
            raw = read_json(self._path)
            # read_json maps both a blank file and a literal JSON null to None.
            if raw is None and self._path.exists() and self._path.read_text(encoding="utf-8").strip():
                raise InvalidStateError(self._path, "collection file holds JSON null")
        except (OSError, ValueError) as e:
            raise InvalidStateError(self._path, f"cannot read collection: {e}") from e

        if raw is None:
            snapshot = _Snapshot(documents=(), next_id=1)
            if not self._path.exists():
                self._write(snapshot)
                logger.info("DOCUMENT STORE: created empty collection at %s", self._path)
            return snapshot

        try:
            parsed = CollectionDoc.from_disk_doc(raw)
        except ValidationError as e:
            raise InvalidStateError(self._path, f"not a valid collection: {e}") from e

        logger.info("DOCUMENT STORE: loaded %d documents from %s", len(parsed.documents), self._path)
        return _Snapshot(documents=tuple(parsed.documents), next_id=parsed.next_id)

    def _write(self, snapshot: _Snapshot) -> None:
        payload = {"documents": list(snapshot.documents), "next_id": snapshot.next_id}
        try:
            atomic_write_json(self._path, payload)
        except (OSError, TypeError, ValueError) as e:
            logger.error("DOCUMENT STORE: failed to write %s: %r", self._path, e)
            raise PersistenceError(self._path, repr(e)) from e

    @staticmethod
    def _index_of(documents: tuple[Document, ...], doc_id: Any) -> int | None:
        for i, doc in enumerate(documents):
            if values_equal(doc[ID_FIELD], doc_id):
                return i
        return None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def find(self, doc_id: DocumentId) -> LookupResult:
        documents = self._snapshot.documents
        i = self._index_of(documents, doc_id)
        if i is None:
            return NotFound(doc_id)
        return Found(copy.deepcopy(documents[i]))

    def find_one_by(self, criteria: Criteria | Mapping[str, Any] | None) -> LookupResult:
        crit = Criteria.parse(criteria)
        for doc in self._snapshot.documents:
            if crit.matches(doc):
                return Found(copy.deepcopy(doc))
        return NotFound()

    def find_by(self, criteria: Criteria | Mapping[str, Any] | None = None) -> list[Document]:
        crit = Criteria.parse(criteria)
        return [copy.deepcopy(d) for d in self._snapshot.documents if crit.matches(d)]

    def find_all(self) -> list[Document]:
        return copy.deepcopy(list(self._snapshot.documents))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def save(self, document: Mapping[str, Any]) -> Document:
        """
        Insert (no id) or replace in place (existing id), then persist.

        The caller's mapping is left untouched; the stored copy is returned.
        """
        _check_field_names(document)
        body = {k: copy.deepcopy(v) for k, v in document.items() if k != ID_FIELD}
        doc_id = document.get(ID_FIELD)

        with self._lock:
            current = self._snapshot
            if doc_id is None:
                stored = {ID_FIELD: current.next_id, **body}
                updated = _Snapshot(current.documents + (stored,), current.next_id + 1)
            else:
                i = self._index_of(current.documents, doc_id)
                if i is None:
                    raise UnknownDocumentError(doc_id)
                stored = {ID_FIELD: current.documents[i][ID_FIELD], **body}
                docs = current.documents[:i] + (stored,) + current.documents[i + 1 :]
                updated = _Snapshot(docs, current.next_id)

            self._write(updated)
            self._snapshot = updated

        return copy.deepcopy(stored)

    def delete(self, doc_id: DocumentId) -> DeleteResult:
        with self._lock:
            current = self._snapshot
            i = self._index_of(current.documents, doc_id)
            if i is None:
                return NotFound(doc_id)
            updated = _Snapshot(current.documents[:i] + current.documents[i + 1 :], current.next_id)
            self._write(updated)
            self._snapshot = updated
        return Deleted(doc_id)

from __future__ import annotations

from pathlib import Path
from typing import Any


class StoreError(Exception):
    """Base class for document store failures."""


class InvalidStateError(StoreError):
    """The backing file exists but does not hold a valid collection."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class PersistenceError(StoreError):
    """A mutation could not be made durable; the store kept its previous state."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"failed to write {path}: {reason}")
        self.path = path
        self.reason = reason


class UnknownDocumentError(StoreError):
    """save() was given an id the collection does not contain."""

    def __init__(self, doc_id: Any):
        super().__init__(f"no document with id {doc_id!r}")
        self.id = doc_id


class InvalidCriteriaError(StoreError, ValueError):
    pass


class InvalidDocumentError(StoreError, ValueError):
    """save() was given a document that cannot round-trip through JSON."""

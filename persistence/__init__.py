from __future__ import annotations

from .criteria import Criteria
from .document_store import DocumentStore
from .errors import (
    InvalidCriteriaError,
    InvalidDocumentError,
    InvalidStateError,
    PersistenceError,
    StoreError,
    UnknownDocumentError,
)
from .registry import StoreRegistry, create_store
from .repositories import AsyncDocumentStore, Collections, open_collections
from .results import Deleted, Document, Found, NotFound

__all__ = [
    "Criteria",
    "DocumentStore",
    "create_store",
    "StoreRegistry",
    "AsyncDocumentStore",
    "Collections",
    "open_collections",
    "Document",
    "Found",
    "NotFound",
    "Deleted",
    "StoreError",
    "InvalidStateError",
    "PersistenceError",
    "UnknownDocumentError",
    "InvalidCriteriaError",
    "InvalidDocumentError",
]

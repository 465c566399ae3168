from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

Document = dict[str, Any]
DocumentId = int


@dataclass(frozen=True)
class Found:
    document: Document

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class NotFound:
    id: DocumentId | None = None

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class Deleted:
    id: DocumentId

    def __bool__(self) -> bool:
        return True


LookupResult = Union[Found, NotFound]
DeleteResult = Union[Deleted, NotFound]

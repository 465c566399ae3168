from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .errors import InvalidCriteriaError

OR_KEY = "$or"

_MISSING = object()


def values_equal(actual: Any, expected: Any) -> bool:
    """
    Strict equality for stored values.

    bool is a subclass of int in Python, so True == 1 would otherwise match.
    """
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    return actual == expected


def _field_matches(doc: Mapping[str, Any], key: str, expected: Any) -> bool:
    actual = doc.get(key, _MISSING)
    if actual is _MISSING:
        return expected is None
    return values_equal(actual, expected)


def _all_match(doc: Mapping[str, Any], conditions: Mapping[str, Any]) -> bool:
    return all(_field_matches(doc, k, v) for k, v in conditions.items())


def _plain_conditions(raw: Any, *, where: str) -> dict[str, Any]:
    if not isinstance(raw, Mapping):
        raise InvalidCriteriaError(f"{where} must be a mapping, got {type(raw).__name__}")
    out: dict[str, Any] = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            raise InvalidCriteriaError(f"field names must be strings, got {key!r}")
        if key.startswith("$"):
            raise InvalidCriteriaError(f"unsupported operator {key!r} in {where}")
        out[key] = value
    return out


@dataclass(frozen=True)
class Criteria:
    """
    Query predicate: every entry of `fields` must match, and when `any_of`
    is set at least one of its sub-mappings must match entirely.

    Build from the mapping form with Criteria.parse:
      {"email": "x@example.com"}
      {"$or": [{"first_name": "Ana"}, {"last_name": "Ana"}]}
    """

    fields: Mapping[str, Any] = field(default_factory=dict)
    any_of: tuple[Mapping[str, Any], ...] | None = None

    @classmethod
    def parse(cls, raw: "Criteria | Mapping[str, Any] | None") -> "Criteria":
        if raw is None:
            return cls()
        if isinstance(raw, Criteria):
            return raw
        if not isinstance(raw, Mapping):
            raise InvalidCriteriaError(f"criteria must be a mapping, got {type(raw).__name__}")

        any_of: tuple[Mapping[str, Any], ...] | None = None
        if OR_KEY in raw:
            branches = raw[OR_KEY]
            if not isinstance(branches, (list, tuple)) or not branches:
                raise InvalidCriteriaError(f"{OR_KEY} must be a non-empty list of mappings")
            any_of = tuple(_plain_conditions(b, where=f"{OR_KEY} branch") for b in branches)

        rest = {k: v for k, v in raw.items() if k != OR_KEY}
        return cls(fields=_plain_conditions(rest, where="criteria"), any_of=any_of)

    @property
    def is_empty(self) -> bool:
        return not self.fields and self.any_of is None

    def matches(self, doc: Mapping[str, Any]) -> bool:
        if not _all_match(doc, self.fields):
            return False
        if self.any_of is None:
            return True
        return any(_all_match(doc, branch) for branch in self.any_of)

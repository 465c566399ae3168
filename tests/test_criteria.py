from __future__ import annotations

import pytest

from persistence.criteria import Criteria, values_equal
from persistence.errors import InvalidCriteriaError


def test_parse_none_and_empty_match_everything():
    assert Criteria.parse(None).is_empty
    assert Criteria.parse({}).is_empty
    assert Criteria.parse({}).matches({"id": 1, "anything": "goes"})


def test_parse_is_idempotent_for_criteria_instances():
    crit = Criteria(fields={"a": 1})

    assert Criteria.parse(crit) is crit


def test_parse_splits_fields_and_or_branches():
    crit = Criteria.parse({"userId": 3, "$or": [{"name": "fern"}, {"name": "moss"}]})

    assert dict(crit.fields) == {"userId": 3}
    assert crit.any_of == ({"name": "fern"}, {"name": "moss"})


def test_fields_and_or_are_combined_with_and():
    crit = Criteria.parse({"userId": 3, "$or": [{"name": "fern"}, {"name": "moss"}]})

    assert crit.matches({"userId": 3, "name": "moss"})
    assert not crit.matches({"userId": 4, "name": "moss"})
    assert not crit.matches({"userId": 3, "name": "ivy"})


def test_or_branch_needs_all_of_its_fields():
    crit = Criteria.parse({"$or": [{"a": 1, "b": 2}, {"c": 3}]})

    assert crit.matches({"a": 1, "b": 2})
    assert crit.matches({"c": 3})
    assert not crit.matches({"a": 1, "b": 5})


def test_absent_field_matches_only_none():
    assert not Criteria.parse({"email": "x"}).matches({"id": 1})
    assert Criteria.parse({"email": None}).matches({"id": 1})
    assert Criteria.parse({"email": None}).matches({"id": 1, "email": None})
    assert not Criteria.parse({"email": None}).matches({"id": 1, "email": ""})


def test_values_equal_is_strict_about_bools():
    assert values_equal(1, 1)
    assert values_equal(1, 1.0)
    assert values_equal(True, True)
    assert not values_equal(True, 1)
    assert not values_equal(0, False)
    assert not values_equal("1", 1)


@pytest.mark.parametrize(
    "raw",
    [
        {"$or": []},
        {"$or": {"a": 1}},
        {"$or": [{"a": 1}, "b"]},
        {"$or": [{"$or": [{"a": 1}]}]},
        {"$and": [{"a": 1}]},
        {"$gt": 1},
        ["a", 1],
    ],
)
def test_invalid_criteria_raise(raw):
    with pytest.raises(InvalidCriteriaError):
        Criteria.parse(raw)


def test_invalid_criteria_is_a_value_error():
    with pytest.raises(ValueError):
        Criteria.parse({"$or": []})

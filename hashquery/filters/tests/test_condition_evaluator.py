"""Tests for single-record condition evaluation and AND/OR composition."""

from datetime import date
from types import MappingProxyType

import pytest

from hashquery.filters import apply_entries, evaluate, filter_records, is_empty, to_text, values_equal
from hashquery.models import ConditionEntry, ConditionKind, ValueRange


class TestEvaluate:
    """Test suite for evaluate()."""

    @pytest.fixture
    def record(self):
        return MappingProxyType({
            "id": 1,
            "title": "Intro to Python",
            "views": 150,
            "score": 4.5,
            "featured": True,
            "tags": ["python", "web"],
            "published_at": date(2024, 1, 15),
            "subtitle": None,
            "summary": "",
        })

    def test_literal_equality(self, record):
        assert evaluate(record, "id", 1)
        assert not evaluate(record, "id", 2)
        assert evaluate(record, "subtitle", None)
        assert evaluate(record, "missing", None)

    def test_contains_coerces_to_text(self, record):
        assert evaluate(record, "title", {"contains": "Python"})
        assert not evaluate(record, "title", {"contains": "python"})
        assert evaluate(record, "views", {"contains": "15"})
        assert evaluate(record, "tags", {"contains": "web"})

    def test_contains_on_null_reads_empty_string(self, record):
        assert not evaluate(record, "subtitle", {"contains": "x"})
        assert evaluate(record, "subtitle", {"contains": ""})

    def test_boolean_text(self, record):
        assert evaluate(record, "featured", {"contains": "true"})
        assert to_text(False) == "false"
        assert to_text(None) == ""

    def test_starts_and_ends_with(self, record):
        assert evaluate(record, "title", {"starts_with": "Intro"})
        assert evaluate(record, "title", {"ends_with": "Python"})
        assert not evaluate(record, "title", {"ends_with": "Intro"})

    def test_ordering_comparisons(self, record):
        assert evaluate(record, "views", {"greater_than": 100})
        assert not evaluate(record, "views", {"greater_than": 150})
        assert evaluate(record, "views", {"greater_than_or_equal": 150})
        assert evaluate(record, "views", {"less_than": 151})
        assert evaluate(record, "views", {"less_than_or_equal": 150})
        assert evaluate(record, "published_at", {"greater_than": date(2024, 1, 1)})

    def test_ordering_on_null_is_false(self, record):
        assert not evaluate(record, "subtitle", {"greater_than": 0})
        assert not evaluate(record, "subtitle", {"less_than": 0})

    def test_ordering_on_incomparable_types_is_false(self, record):
        assert not evaluate(record, "title", {"greater_than": 5})
        assert not evaluate(record, "views", {"less_than": "abc"})

    def test_from_to_range(self, record):
        assert evaluate(record, "views", {"from": 100, "to": 150})
        assert not evaluate(record, "views", {"from": 151, "to": 200})
        assert evaluate(record, "views", {"from": 150})
        assert evaluate(record, "views", {"to": 150})
        assert not evaluate(record, "subtitle", {"from": 0})

    def test_in_and_not_in(self, record):
        assert evaluate(record, "id", {"in": [1, 2]})
        assert evaluate(record, "id", {"in": 1})
        assert not evaluate(record, "id", {"in": [2, 3]})
        assert evaluate(record, "id", {"not_in": [2, 3]})
        assert not evaluate(record, "id", {"not_in": 1})

    def test_not(self, record):
        assert evaluate(record, "id", {"not": 2})
        assert not evaluate(record, "id", {"not": 1})

    def test_booleans_do_not_equal_numbers(self, record):
        assert not evaluate(record, "featured", 1)
        assert not evaluate(record, "featured", {"in": [1]})
        assert evaluate(record, "featured", {"not_in": [1, 0]})
        assert evaluate(record, "featured", {"not": 1})
        assert not evaluate(record, "featured", [1, 0])
        assert not evaluate(record, "featured", range(0, 2))
        assert not evaluate({"flags": [True]}, "flags", [1])
        assert evaluate(record, "featured", True)
        assert evaluate(record, "featured", {"in": [True]})
        assert evaluate(record, "score", 4.5)
        assert evaluate({"n": 1}, "n", 1.0)

    def test_values_equal(self):
        assert values_equal(1, 1.0)
        assert values_equal(False, False)
        assert not values_equal(True, 1)
        assert not values_equal(0, False)
        assert not values_equal(None, False)

    def test_exists(self, record):
        assert evaluate(record, "title", {"exists": True})
        assert evaluate(record, "subtitle", {"exists": False})
        assert not evaluate(record, "missing", {"exists": True})

    def test_empty(self, record):
        assert evaluate(record, "subtitle", {"empty": True})
        assert evaluate(record, "summary", {"empty": True})
        assert evaluate(record, "title", {"empty": False})
        assert not evaluate(record, "tags", {"empty": True})
        assert evaluate({"tags": []}, "tags", {"empty": True})

    def test_operator_priority(self, record):
        # "contains" is checked before "greater_than"
        assert evaluate(record, "views", {"greater_than": 1000, "contains": "150"})

    def test_dict_without_operators_is_equality(self):
        record = {"meta": {"kind": "post"}}
        assert evaluate(record, "meta", {"kind": "post"})
        assert not evaluate(record, "meta", {"kind": "page"})

    def test_list_spec(self, record):
        assert evaluate(record, "tags", ["python", "web"])
        assert not evaluate(record, "tags", ["web", "python"])
        assert evaluate(record, "id", [1, 5])
        assert not evaluate(record, "id", [2, 5])

    def test_range_spec(self, record):
        assert evaluate(record, "views", range(100, 200))
        assert not evaluate(record, "views", range(0, 150))
        assert evaluate(record, "published_at", ValueRange(date(2024, 1, 1), date(2024, 1, 31)))
        assert not evaluate(record, "title", ValueRange(1, 10))
        assert not evaluate(record, "subtitle", ValueRange(1, 10))

    def test_exclusive_value_range(self):
        assert 9 in ValueRange(1, 10, exclusive=True)
        assert 10 not in ValueRange(1, 10, exclusive=True)
        assert 10 in ValueRange(1, 10)

    def test_is_empty(self):
        assert is_empty(None)
        assert is_empty("")
        assert is_empty({})
        assert is_empty(())
        assert not is_empty(0)
        assert not is_empty(False)


class TestComposition:
    """Test suite for AND/OR composition of condition entries."""

    @pytest.fixture
    def records(self):
        return [
            {"id": 1, "featured": True},
            {"id": 2, "featured": False, "views": 200},
            {"id": 3, "featured": True},
        ]

    def test_no_entries_returns_everything(self, records):
        assert apply_entries(records, ()) == records

    def test_and_entries_narrow(self, records):
        entries = (ConditionEntry(ConditionKind.AND, {"featured": True}),)
        assert [r["id"] for r in apply_entries(records, entries)] == [1, 3]

    def test_or_entry_widens_from_full_dataset(self, records):
        entries = (
            ConditionEntry(ConditionKind.AND, {"featured": True}),
            ConditionEntry(ConditionKind.OR, {"views": {"greater_than": 150}}),
        )
        assert [r["id"] for r in apply_entries(records, entries)] == [1, 3, 2]

    def test_or_matches_ignore_later_and_entries(self, records):
        entries = (
            ConditionEntry(ConditionKind.OR, {"id": 2}),
            ConditionEntry(ConditionKind.AND, {"featured": True}),
        )
        assert [r["id"] for r in apply_entries(records, entries)] == [1, 3, 2]

    def test_union_is_deduplicated(self, records):
        entries = (
            ConditionEntry(ConditionKind.AND, {"featured": True}),
            ConditionEntry(ConditionKind.OR, {"id": 1}),
            ConditionEntry(ConditionKind.OR, {"id": {"in": [1, 2]}}),
        )
        assert [r["id"] for r in apply_entries(records, entries)] == [1, 3, 2]

    def test_and_group_applies_to_current_result(self, records):
        group = (
            ConditionEntry(ConditionKind.AND, {"id": {"greater_than": 1}}),
        )
        entries = (
            ConditionEntry(ConditionKind.AND, {"featured": True}),
            ConditionEntry(ConditionKind.AND_GROUP, group),
        )
        assert [r["id"] for r in apply_entries(records, entries)] == [3]

    def test_or_group_evaluates_against_full_dataset(self, records):
        group = (
            ConditionEntry(ConditionKind.AND, {"featured": False}),
        )
        entries = (
            ConditionEntry(ConditionKind.AND, {"id": 1}),
            ConditionEntry(ConditionKind.OR_GROUP, group),
        )
        assert [r["id"] for r in apply_entries(records, entries)] == [1, 2]

    def test_or_inside_and_group_uses_group_input(self, records):
        group = (
            ConditionEntry(ConditionKind.AND, {"id": 3}),
            ConditionEntry(ConditionKind.OR, {"id": 2}),
        )
        entries = (
            ConditionEntry(ConditionKind.AND, {"featured": True}),
            ConditionEntry(ConditionKind.AND_GROUP, group),
        )
        # id 2 is not featured, so it is not part of the group's input
        assert [r["id"] for r in apply_entries(records, entries)] == [3]

    def test_filter_records_keeps_input_order(self, records):
        assert [r["id"] for r in filter_records(records, {"featured": True})] == [1, 3]

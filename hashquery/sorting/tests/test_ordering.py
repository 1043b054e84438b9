"""Tests for ordering and offset/limit windowing."""

from datetime import date, datetime, timezone

import pytest

from hashquery.sorting import apply_ordering, apply_window, order_and_window, sort_key


class TestOrdering:
    """Test suite for apply_ordering()."""

    @pytest.fixture
    def sample_data(self):
        return [
            {"id": 1, "views": 100, "published_at": date(2024, 1, 1)},
            {"id": 2, "views": None, "published_at": date(2024, 2, 1)},
            {"id": 3, "views": 300, "published_at": None},
            {"id": 4, "views": 50},
            {"id": 5, "views": None, "published_at": date(2023, 12, 1)},
        ]

    def ids(self, records):
        return [record["id"] for record in records]

    def test_ascending_nulls_last(self, sample_data):
        assert self.ids(apply_ordering(sample_data, "views")) == [4, 1, 3, 2, 5]

    def test_descending_nulls_still_last(self, sample_data):
        assert self.ids(apply_ordering(sample_data, "views", desc=True)) == [3, 1, 4, 2, 5]

    def test_missing_field_counts_as_null(self, sample_data):
        assert self.ids(apply_ordering(sample_data, "published_at")) == [5, 1, 2, 3, 4]

    def test_does_not_mutate_input(self, sample_data):
        before = list(sample_data)
        apply_ordering(sample_data, "views", desc=True)
        assert sample_data == before

    def test_mixed_types_never_raise(self):
        records = [
            {"id": 1, "value": "b"},
            {"id": 2, "value": 3},
            {"id": 3, "value": date(2024, 1, 1)},
            {"id": 4, "value": True},
            {"id": 5, "value": 1.5},
            {"id": 6, "value": "a"},
            {"id": 7, "value": None},
        ]
        assert self.ids(apply_ordering(records, "value")) == [5, 2, 6, 1, 3, 4, 7]

    def test_dates_and_datetimes_compare_together(self):
        records = [
            {"id": 1, "at": datetime(2024, 1, 1, 12, 0)},
            {"id": 2, "at": date(2024, 1, 1)},
            {"id": 3, "at": datetime(2023, 12, 31, 23, 0, tzinfo=timezone.utc)},
        ]
        assert self.ids(apply_ordering(records, "at")) == [3, 2, 1]

    def test_sort_key_ranks(self):
        assert sort_key(1)[0] < sort_key("a")[0] < sort_key(date(2024, 1, 1))[0] < sort_key(False)[0]


class TestWindow:
    """Test suite for apply_window()."""

    @pytest.fixture
    def records(self):
        return [{"id": i} for i in range(1, 6)]

    def test_offset_then_limit(self, records):
        assert [r["id"] for r in apply_window(records, offset=1, limit=2)] == [2, 3]

    def test_negative_offset_is_zero(self, records):
        assert apply_window(records, offset=-3) == records

    def test_offset_past_end_is_empty(self, records):
        assert apply_window(records, offset=10) == []

    def test_zero_and_negative_limit_are_empty(self, records):
        assert apply_window(records, limit=0) == []
        assert apply_window(records, limit=-1) == []

    def test_limit_beyond_remaining(self, records):
        assert apply_window(records, offset=3, limit=10) == records[3:]

    def test_unset_limit_is_unlimited(self, records):
        assert apply_window(records) == records

    def test_order_then_window(self, records):
        result = order_and_window(records, order_field="id", order_desc=True, offset=1, limit=2)
        assert [r["id"] for r in result] == [4, 3]

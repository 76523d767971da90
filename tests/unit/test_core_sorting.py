import copy

import pytest

from auth0_manager.core.errors import InvalidArgument
from auth0_manager.core.sorting import get_path, sort_records


@pytest.fixture
def unsorted():
    return [
        {"a": 1, "b": 4, "c": {"d": 4}},
        {"a": 3, "b": 1, "c": {"d": 1}},
        {"a": 3, "b": 2, "c": {"d": 2}},
        {"a": 2, "b": 4, "c": {"d": 4}},
    ]


class TestGetPath:
    RECORD = {"a": {"b": [{"c": "foo"}, {"c": "bar"}]}, "x": 0}

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("x", 0),
            ("a.b[1].c", "bar"),
            ("a.b.0.c", None),
            ("a.b[5].c", None),
            ("a.missing.c", None),
            ("x.y", None),
        ],
    )
    def test_lookup(self, path, expected):
        assert get_path(self.RECORD, path) == expected

    def test_default(self):
        assert get_path(self.RECORD, "nope", "fallback") == "fallback"


class TestSortRecords:
    def test_simple_sort(self, unsorted):
        assert sort_records(unsorted, {"a": 1, "b": 1}) == [
            {"a": 1, "b": 4, "c": {"d": 4}},
            {"a": 2, "b": 4, "c": {"d": 4}},
            {"a": 3, "b": 1, "c": {"d": 1}},
            {"a": 3, "b": 2, "c": {"d": 2}},
        ]

    def test_mixed_directions(self, unsorted):
        assert sort_records(unsorted, {"a": 1, "b": -1}) == [
            {"a": 1, "b": 4, "c": {"d": 4}},
            {"a": 2, "b": 4, "c": {"d": 4}},
            {"a": 3, "b": 2, "c": {"d": 2}},
            {"a": 3, "b": 1, "c": {"d": 1}},
        ]

    def test_nested_key_descending(self, unsorted):
        assert sort_records(unsorted, {"a": 1, "c.d": -1}) == [
            {"a": 1, "b": 4, "c": {"d": 4}},
            {"a": 2, "b": 4, "c": {"d": 4}},
            {"a": 3, "b": 2, "c": {"d": 2}},
            {"a": 3, "b": 1, "c": {"d": 1}},
        ]

    def test_does_not_mutate_input(self, unsorted):
        before = copy.deepcopy(unsorted)
        result = sort_records(unsorted, {"a": -1})
        assert unsorted == before
        assert result is not unsorted

    def test_stable_for_ties(self):
        records = [{"k": 1, "id": i} for i in range(5)]
        assert [r["id"] for r in sort_records(records, {"k": -1})] == [0, 1, 2, 3, 4]

    @pytest.mark.parametrize("direction", [1, -1])
    def test_missing_values_go_last(self, direction):
        records = [{"id": 1}, {"id": 2, "v": 5}, {"id": 3, "v": None}, {"id": 4, "v": 1}]
        ids = [r["id"] for r in sort_records(records, {"v": direction})]
        assert ids[2:] == [1, 3]

    def test_string_direction(self, unsorted):
        assert sort_records(unsorted, {"b": "-1"})[0]["b"] == 4

    def test_numbers_sort_before_strings(self):
        records = [{"v": "b"}, {"v": 2}, {"v": "a"}, {"v": 1}]
        assert [r["v"] for r in sort_records(records, {"v": 1})] == [1, 2, "a", "b"]

    @pytest.mark.parametrize("direction", ["desc", 0, True, None])
    def test_bad_direction_is_invalid_argument(self, unsorted, direction):
        with pytest.raises(InvalidArgument):
            sort_records(unsorted, {"a": 1, "b": direction})

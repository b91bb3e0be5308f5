"""
Tests for ORDER BY evaluation.
"""

from triplequery.sparql import OrderCondition, Variable
from triplequery.sparql.ordering import sort_rows


def asc(name):
    return OrderCondition(Variable(name))


def desc(name):
    return OrderCondition(Variable(name), descending=True)


class TestSortRows:
    def test_no_conditions_returns_copy(self):
        rows = [{"a": "2"}, {"a": "1"}]
        result = sort_rows(rows, [])
        assert result == rows
        assert result is not rows

    def test_numeric_ascending(self):
        rows = [{"y": "1965"}, {"y": "900"}, {"y": "1951"}]
        assert [r["y"] for r in sort_rows(rows, [asc("y")])] == ["900", "1951", "1965"]

    def test_descending(self):
        rows = [{"y": "1965"}, {"y": "900"}, {"y": "1951"}]
        assert [r["y"] for r in sort_rows(rows, [desc("y")])] == ["1965", "1951", "900"]

    def test_text_ascending(self):
        rows = [{"t": "Neuromancer"}, {"t": "Dune"}, {"t": "Foundation"}]
        assert [r["t"] for r in sort_rows(rows, [asc("t")])] == ["Dune", "Foundation", "Neuromancer"]

    def test_stable_on_ties(self):
        rows = [
            {"g": "SF", "t": "first"},
            {"g": "Fantasy", "t": "x"},
            {"g": "SF", "t": "second"},
            {"g": "SF", "t": "third"},
        ]
        result = sort_rows(rows, [asc("g")])
        assert [r["t"] for r in result if r["g"] == "SF"] == ["first", "second", "third"]

    def test_later_keys_break_ties(self):
        rows = [
            {"g": "b", "y": "2"},
            {"g": "a", "y": "1"},
            {"g": "b", "y": "1"},
            {"g": "a", "y": "2"},
        ]
        result = sort_rows(rows, [asc("g"), desc("y")])
        assert [(r["g"], r["y"]) for r in result] == [("a", "2"), ("a", "1"), ("b", "2"), ("b", "1")]

    def test_absent_values_sort_first(self):
        rows = [{"y": "2"}, {"y": None}, {"y": "1"}]
        assert [r["y"] for r in sort_rows(rows, [asc("y")])] == [None, "1", "2"]
        assert [r["y"] for r in sort_rows(rows, [desc("y")])] == ["2", "1", None]

    def test_missing_key_treated_as_absent(self):
        rows = [{"y": "1"}, {}]
        assert sort_rows(rows, [asc("y")]) == [{}, {"y": "1"}]

    def test_input_not_modified(self):
        rows = [{"y": "2"}, {"y": "1"}]
        sort_rows(rows, [asc("y")])
        assert rows == [{"y": "2"}, {"y": "1"}]

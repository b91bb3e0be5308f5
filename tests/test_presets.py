"""Tests for the preset query catalogue."""
import pytest

from triplequery.errors import PresetNotFoundError
from triplequery.presets import (
    ALL_CATEGORIES,
    PRESET_QUERIES,
    get_preset,
    list_categories,
    list_presets,
)
from triplequery.sparql import SelectQuery, parse_query


class TestPresetCatalogue:
    def test_ids(self):
        assert [p.query_id for p in PRESET_QUERIES] == ["all-books", "sci-fi-books", "classic-books"]

    def test_categories(self):
        assert list_categories() == [ALL_CATEGORIES, "General", "Genre", "Time Period"]

    def test_list_all(self):
        assert list_presets() == list(PRESET_QUERIES)
        assert list_presets("All") == list(PRESET_QUERIES)

    def test_list_by_category(self):
        assert [p.query_id for p in list_presets("Genre")] == ["sci-fi-books"]

    def test_list_unknown_category(self):
        assert list_presets("Poetry") == []

    def test_get_preset(self):
        preset = get_preset("classic-books")
        assert preset.name == "Classic Books"
        assert preset.category == "Time Period"

    def test_get_unknown_preset(self):
        with pytest.raises(PresetNotFoundError, match="Preset query not found: nope"):
            get_preset("nope")

    def test_preset_not_found_is_key_error(self):
        with pytest.raises(KeyError):
            get_preset("nope")

    def test_to_dict(self):
        data = get_preset("all-books").to_dict()
        assert set(data) == {"id", "name", "description", "category", "query"}
        assert data["id"] == "all-books"

    @pytest.mark.parametrize("preset", PRESET_QUERIES, ids=lambda p: p.query_id)
    def test_presets_parse(self, preset):
        query = parse_query(preset.sparql)
        assert isinstance(query, SelectQuery)
        assert query.order_by

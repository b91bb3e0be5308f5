"""
Preset queries over the bundled books dataset.

Each preset is a named, categorized SELECT query that can be listed,
filtered by category and run by id.
"""
from __future__ import annotations

from dataclasses import dataclass

from triplequery.errors import PresetNotFoundError

ALL_CATEGORIES = "All"

PREFIXES = """
PREFIX rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#>
PREFIX : <http://example.org/books/>
"""


@dataclass(frozen=True)
class PresetQuery:
    """A canned SPARQL query with display metadata."""
    query_id: str
    name: str
    description: str
    category: str
    sparql: str

    def to_dict(self) -> dict:
        return {
            "id": self.query_id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "query": self.sparql,
        }


PRESET_QUERIES: tuple[PresetQuery, ...] = (
    PresetQuery(
        query_id="all-books",
        name="All Books",
        description="List all books in the database",
        category="General",
        sparql=f"""{PREFIXES}
SELECT ?title ?author ?genre ?publishedYear ?coverImage
WHERE {{
  ?book a :Book ;
        :title ?title ;
        :author ?author ;
        :genre ?genre ;
        :publishedYear ?publishedYear ;
        :coverImage ?coverImage .
}}
ORDER BY ?title""",
    ),
    PresetQuery(
        query_id="sci-fi-books",
        name="Science Fiction Books",
        description="Find all science fiction books",
        category="Genre",
        sparql=f"""{PREFIXES}
SELECT ?title ?author ?publishedYear ?coverImage
WHERE {{
  ?book a :Book ;
        :title ?title ;
        :author ?author ;
        :publishedYear ?publishedYear ;
        :coverImage ?coverImage ;
        :genre "Science Fiction" .
}}
ORDER BY ?publishedYear""",
    ),
    PresetQuery(
        query_id="classic-books",
        name="Classic Books",
        description="Books published before 1950",
        category="Time Period",
        sparql=f"""{PREFIXES}
SELECT ?title ?author ?publishedYear ?genre ?coverImage
WHERE {{
  ?book a :Book ;
        :title ?title ;
        :author ?author ;
        :publishedYear ?publishedYear ;
        :genre ?genre ;
        :coverImage ?coverImage .
  FILTER (?publishedYear < 1950)
}}
ORDER BY ?publishedYear""",
    ),
)


def list_categories() -> list[str]:
    """Category names in first-seen order, preceded by "All"."""
    categories = [ALL_CATEGORIES]
    for preset in PRESET_QUERIES:
        if preset.category not in categories:
            categories.append(preset.category)
    return categories


def list_presets(category: str | None = None) -> list[PresetQuery]:
    """All presets, or only those in ``category`` ("All" means no filter)."""
    if category is None or category == ALL_CATEGORIES:
        return list(PRESET_QUERIES)
    return [p for p in PRESET_QUERIES if p.category == category]


def get_preset(query_id: str) -> PresetQuery:
    """Look up a preset by id."""
    for preset in PRESET_QUERIES:
        if preset.query_id == query_id:
            return preset
    raise PresetNotFoundError(f"Preset query not found: {query_id}")

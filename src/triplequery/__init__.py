"""
triplequery: SPARQL SELECT queries over an in-memory fact store powered by Polars.

Loads a Turtle dataset once and answers basic graph pattern queries with
comparison filters and ordering.
"""

__version__ = "0.1.0"

from triplequery.store import FactStore, LoadState
from triplequery.models import Fact
from triplequery.config import EngineConfig
from triplequery.engine import QueryEngine, bundled_dataset
from triplequery.sparql import parse_query, SPARQLExecutor
from triplequery.sparql.executor import QueryResult, execute_sparql
from triplequery.formats import iter_turtle, parse_turtle
from triplequery.presets import PresetQuery, get_preset, list_categories, list_presets
from triplequery.errors import (
    TripleQueryError,
    NotLoadedError,
    DataLoadError,
    TurtleSyntaxError,
    QueryError,
    QuerySyntaxError,
    UnsupportedQueryFormError,
    UnsupportedPatternError,
    UnboundFilterVariableError,
    UnsupportedOperatorError,
    UnsupportedExpressionError,
    MalformedTermError,
    PresetNotFoundError,
)

__all__ = [
    "FactStore",
    "LoadState",
    "Fact",
    "EngineConfig",
    "QueryEngine",
    "bundled_dataset",
    "parse_query",
    "SPARQLExecutor",
    "QueryResult",
    "execute_sparql",
    "iter_turtle",
    "parse_turtle",
    # Presets
    "PresetQuery",
    "get_preset",
    "list_categories",
    "list_presets",
    # Errors
    "TripleQueryError",
    "NotLoadedError",
    "DataLoadError",
    "TurtleSyntaxError",
    "QueryError",
    "QuerySyntaxError",
    "UnsupportedQueryFormError",
    "UnsupportedPatternError",
    "UnboundFilterVariableError",
    "UnsupportedOperatorError",
    "UnsupportedExpressionError",
    "MalformedTermError",
    "PresetNotFoundError",
]

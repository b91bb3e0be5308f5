"""
Query engine facade.

Owns the fact store and the parser, loads the dataset once, and runs
queries through the executor pipeline. Every query entry point checks the
load state first, so "no data yet" is always an error and never an empty
result.
"""

import logging
from importlib import resources
from io import StringIO
from pathlib import Path
from typing import Iterable, Optional, Union

from triplequery.config import EngineConfig
from triplequery.errors import QueryError
from triplequery.formats.turtle import iter_turtle
from triplequery.models import Fact
from triplequery.presets import get_preset
from triplequery.sparql.executor import OutputRow, QueryResult, SPARQLExecutor
from triplequery.sparql.parser import SPARQLParser
from triplequery.store import FactStore, LoadState

logger = logging.getLogger(__name__)


def bundled_dataset() -> str:
    """Turtle text of the sample books dataset shipped with the package."""
    return (resources.files("triplequery") / "data" / "books.ttl").read_text(encoding="utf-8")


class QueryEngine:
    """
    Runs SELECT queries against an in-memory dataset.

    Example:
        engine = QueryEngine()
        engine.load_data()
        rows = engine.execute_query("SELECT ?s WHERE { ?s ?p ?o }")
    """

    def __init__(
        self,
        store: Optional[FactStore] = None,
        config: Optional[EngineConfig] = None,
        parser: Optional[SPARQLParser] = None,
    ):
        self.config = config or EngineConfig()
        self.store = store if store is not None else FactStore()
        self.parser = parser or SPARQLParser()
        self.executor = SPARQLExecutor(self.store)

    @property
    def state(self) -> LoadState:
        return self.store.state

    @property
    def is_loaded(self) -> bool:
        return self.store.is_ready

    # =========================================================================
    # Loading
    # =========================================================================

    def load_data(self, source: Union[str, Path, StringIO, None] = None) -> int:
        """
        Load Turtle data into the store.

        Args:
            source: Turtle text, a file path or a StringIO. Defaults to the
                configured data file, then the bundled books dataset.

        Returns:
            Number of facts loaded (0 if data was already loaded)

        Raises:
            DataLoadError: if the data cannot be read or parsed
        """
        if source is None:
            source = self.config.data_path or bundled_dataset()
        return self.store.load(iter_turtle(source))

    def load_facts(self, facts: Iterable[Fact]) -> int:
        """Load already-parsed facts into the store."""
        return self.store.load(facts)

    # =========================================================================
    # Queries
    # =========================================================================

    def run(self, query_string: str) -> QueryResult:
        """
        Parse and execute a query.

        Raises:
            NotLoadedError: if data loading has not completed
            QueryError: if the query cannot be parsed or executed
        """
        self.store.require_ready()

        try:
            query = self.parser.parse(query_string)
            result = self.executor.execute(query)
        except QueryError as e:
            logger.error(f"Query execution error: {e}")
            raise

        if self.config.max_results is not None and len(result.rows) > self.config.max_results:
            result.rows = result.rows[:self.config.max_results]
        return result

    def execute_query(self, query_string: str) -> list[OutputRow]:
        """Execute a query and return its output rows."""
        return self.run(query_string).rows

    def run_preset(self, query_id: str) -> QueryResult:
        """Execute a preset query by id."""
        return self.run(get_preset(query_id).sparql)

    def values_for_predicate(self, predicate: str) -> list[str]:
        """
        Distinct object values observed for a predicate.

        Raises:
            NotLoadedError: if data loading has not completed
        """
        self.store.require_ready()
        return self.store.values_for_predicate(predicate)

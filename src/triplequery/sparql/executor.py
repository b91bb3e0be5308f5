"""
SPARQL Query Executor.

Runs a parsed SELECT query against a FactStore as a linear pipeline:

    WHERE entries -> triple patterns + filters
    triple patterns -> binding rows (incremental nested-loop join)
    filters -> surviving rows
    projection -> output rows
    ORDER BY -> sorted rows
    DISTINCT / OFFSET / LIMIT -> final rows

Every stage allocates fresh rows and only reads the store, so executors
over the same READY store can run side by side.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional, Sequence

import polars as pl

from triplequery.errors import QueryError, UnsupportedPatternError, UnsupportedQueryFormError
from triplequery.models import Fact
from triplequery.query_context import QueryStats
from triplequery.sparql.ast import (
    BasicGraphPattern, Filter, Query, SelectQuery, TriplePattern, WhereClause,
)
from triplequery.sparql.filters import apply_filters
from triplequery.sparql.ordering import sort_rows
from triplequery.sparql.parser import parse_query
from triplequery.sparql.terms import ResolvedTerm, resolve_term
from triplequery.store import FactStore

logger = logging.getLogger(__name__)

Bindings = Mapping[str, str]
OutputRow = dict[str, Optional[str]]


@dataclass
class QueryResult:
    """Rows produced by a SELECT query, with the stats of the run."""
    variables: list[str]
    rows: list[OutputRow]
    stats: QueryStats = field(default_factory=QueryStats)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[OutputRow]:
        return iter(self.rows)

    def to_dataframe(self) -> pl.DataFrame:
        """Convert the rows to a Polars DataFrame (one string column per variable)."""
        return pl.DataFrame(
            {name: [row[name] for row in self.rows] for name in self.variables},
            schema={name: pl.Utf8 for name in self.variables},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "select",
            "variables": self.variables,
            "count": len(self.rows),
            "results": self.rows,
            "stats": self.stats.to_dict(),
        }


def extract_patterns_and_filters(where: WhereClause) -> tuple[list[TriplePattern], list[Filter]]:
    """
    Split the WHERE entries into triple patterns and filters, keeping order.

    Raises:
        UnsupportedPatternError: for any entry other than a basic graph
            pattern or a FILTER
    """
    patterns: list[TriplePattern] = []
    filters: list[Filter] = []

    for element in where.elements:
        if isinstance(element, BasicGraphPattern):
            patterns.extend(element.triples)
        elif isinstance(element, Filter):
            filters.append(element)
        else:
            raise UnsupportedPatternError(f"Unsupported pattern type: {type(element).__name__}")

    return patterns, filters


def project_results(rows: Sequence[Bindings], variables: Sequence[str]) -> list[OutputRow]:
    """One output row per binding row; variables that were never bound map to None."""
    return [{name: row.get(name) for name in variables} for row in rows]


def _lookup_value(term: ResolvedTerm, row: Bindings) -> Optional[str]:
    """Value to filter the store on: a constant, a bound variable, or None (wildcard)."""
    if term.is_variable:
        return row.get(term.value)
    return term.value


def _extend_binding(
    row: Bindings,
    terms: tuple[ResolvedTerm, ResolvedTerm, ResolvedTerm],
    fact: Fact,
) -> Optional[dict[str, str]]:
    """Bind the pattern's variables to the fact, or None if a binding conflicts."""
    extended = dict(row)
    for term, value in zip(terms, (fact.subject, fact.predicate, fact.object)):
        if not term.is_variable:
            continue
        existing = extended.get(term.value)
        if existing is not None and existing != value:
            return None
        extended[term.value] = value
    return extended


class SPARQLExecutor:
    """
    Executes SELECT queries against a FactStore.

    Patterns are joined strictly in the order they are written; there is
    no reordering by selectivity.
    """

    def __init__(self, store: FactStore):
        """
        Initialize executor with a fact store.

        Args:
            store: The FactStore to query
        """
        self.store = store

    def execute(self, query: Query) -> QueryResult:
        """
        Execute a parsed query.

        Args:
            query: Parsed Query AST

        Returns:
            QueryResult with one row per solution

        Raises:
            UnsupportedQueryFormError: if the query is not a SELECT
            QueryError: for any unsupported pattern, filter or term
        """
        if not isinstance(query, SelectQuery):
            raise UnsupportedQueryFormError(
                f"Only SELECT queries are supported (got {query.query_type})."
            )

        stats = QueryStats()
        stats.start()
        try:
            result = self._execute_select(query, stats)
        except QueryError as e:
            stats.fail(e)
            raise
        stats.complete(len(result.rows))
        logger.debug(f"SELECT finished: {stats.to_dict()}")
        return result

    def _execute_select(self, query: SelectQuery, stats: QueryStats) -> QueryResult:
        patterns, filters = extract_patterns_and_filters(query.where)
        stats.pattern_count = len(patterns)
        stats.filter_count = len(filters)

        bindings = self.match_patterns(patterns, query.prefixes, stats)
        bindings = apply_filters(bindings, filters)

        if query.is_select_all():
            variables = [v.name for v in query.where.get_all_variables()]
        else:
            variables = [v.name for v in query.variables]

        rows = project_results(bindings, variables)
        rows = sort_rows(rows, query.order_by)
        rows = self._apply_modifiers(rows, query)

        return QueryResult(variables=variables, rows=rows, stats=stats)

    def match_patterns(
        self,
        patterns: Sequence[TriplePattern],
        prefixes: Optional[dict[str, str]] = None,
        stats: Optional[QueryStats] = None,
    ) -> list[Bindings]:
        """
        Join triple patterns against the store.

        Starts from a single empty row. For each pattern, every current row
        is extended by each matching fact; rows whose existing bindings
        disagree with the fact are dropped. An empty pattern list yields
        one empty row.

        Args:
            patterns: Triple patterns in query order
            prefixes: Prefix map used to expand prefixed names
            stats: Optional stats collector

        Returns:
            Binding rows consistent with every pattern
        """
        bindings: list[Bindings] = [{}]

        for pattern in patterns:
            if not bindings:
                break

            terms = (
                resolve_term(pattern.subject, prefixes),
                resolve_term(pattern.predicate, prefixes),
                resolve_term(pattern.object, prefixes),
            )

            new_bindings: list[Bindings] = []
            for row in bindings:
                facts = self.store.match(
                    _lookup_value(terms[0], row),
                    _lookup_value(terms[1], row),
                    _lookup_value(terms[2], row),
                )
                if stats is not None:
                    stats.rows_scanned += len(facts)
                for fact in facts:
                    extended = _extend_binding(row, terms, fact)
                    if extended is not None:
                        new_bindings.append(extended)

            bindings = new_bindings
            if stats is not None:
                stats.rows_joined += len(bindings)

        return bindings

    @staticmethod
    def _apply_modifiers(rows: list[OutputRow], query: SelectQuery) -> list[OutputRow]:
        """Apply DISTINCT, OFFSET and LIMIT."""
        if query.distinct:
            seen = set()
            unique_rows = []
            for row in rows:
                key = tuple(row.items())
                if key not in seen:
                    seen.add(key)
                    unique_rows.append(row)
            rows = unique_rows

        if query.offset:
            rows = rows[query.offset:]

        if query.limit is not None:
            rows = rows[:query.limit]

        return rows


def execute_sparql(store: FactStore, query_string: str) -> QueryResult:
    """
    Convenience function to parse and execute a SPARQL query.

    Args:
        store: A READY FactStore
        query_string: SPARQL query string

    Returns:
        QueryResult

    Raises:
        NotLoadedError: if the store has not finished loading
    """
    store.require_ready()
    query = parse_query(query_string)
    executor = SPARQLExecutor(store)
    return executor.execute(query)

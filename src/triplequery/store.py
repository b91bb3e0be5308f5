"""
In-memory fact store backed by a Polars DataFrame.

Facts are buffered while loading and flushed into a single string-column
DataFrame, so lookups are plain lazy column filters. The store owns the
load lifecycle: it starts UNINITIALIZED, is filled exactly once while
LOADING, and is read-only once READY.
"""

import logging
import threading
from enum import Enum
from typing import Any, Iterable, Optional

import polars as pl

from triplequery.errors import DataLoadError, FactStoreError, NotLoadedError
from triplequery.models import Fact

logger = logging.getLogger(__name__)


FACT_SCHEMA = {
    "subject": pl.Utf8,
    "predicate": pl.Utf8,
    "object": pl.Utf8,
    "datatype": pl.Utf8,
    "language": pl.Utf8,
}


class LoadState(Enum):
    """Lifecycle of the dataset held by a FactStore."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class FactStore:
    """
    Holds all facts and answers pattern-shaped lookups.

    Lookups preserve insertion order. Once ``load`` has completed the
    store is shared read-only, so concurrent queries need no locking.
    """

    def __init__(self):
        self._df = self._create_empty_dataframe()
        self._pending: list[Fact] = []
        self._state = LoadState.UNINITIALIZED
        self._lock = threading.Lock()

    @staticmethod
    def _create_empty_dataframe() -> pl.DataFrame:
        """Create the schema for the fact DataFrame."""
        return pl.DataFrame(schema=FACT_SCHEMA)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is LoadState.READY

    def require_ready(self) -> None:
        """Raise NotLoadedError unless loading has completed."""
        if self._state is not LoadState.READY:
            raise NotLoadedError()

    def load(self, facts: Iterable[Fact]) -> int:
        """
        Load facts from a stream and mark the store ready.

        Loading is idempotent: on a READY store this is a no-op. If the
        stream raises, everything buffered so far is discarded and the
        store returns to UNINITIALIZED so the load can be retried.

        Args:
            facts: Iterable yielding Fact objects

        Returns:
            Number of facts added (0 if the store was already loaded)

        Raises:
            DataLoadError: if the stream fails or a load is already running
        """
        with self._lock:
            if self._state is LoadState.READY:
                logger.info("Data has already been loaded.")
                return 0
            if self._state is LoadState.LOADING:
                raise DataLoadError("A data load is already in progress.")
            self._state = LoadState.LOADING

        count = 0
        try:
            for fact in facts:
                self.add_fact(fact)
                count += 1
            self._flush()
        except Exception as e:
            self._reset()
            logger.error(f"Data loading failed after {count} facts: {e}")
            if isinstance(e, DataLoadError):
                raise
            raise DataLoadError(f"Failed to load facts: {e}") from e

        with self._lock:
            self._state = LoadState.READY
        logger.info(f"Data loading complete: {count} facts.")
        return count

    def _reset(self) -> None:
        with self._lock:
            self._df = self._create_empty_dataframe()
            self._pending = []
            self._state = LoadState.UNINITIALIZED

    # =========================================================================
    # Writes
    # =========================================================================

    def add_fact(self, fact: Fact) -> None:
        """
        Append a fact (no de-duplication).

        Raises:
            FactStoreError: if the store is already READY
        """
        if self._state is LoadState.READY:
            raise FactStoreError("The fact store is read-only once loaded.")
        self._pending.append(fact)

    def _flush(self) -> int:
        """Concatenate buffered facts onto the DataFrame in one step."""
        if not self._pending:
            return 0
        pending = self._pending
        batch = pl.DataFrame(
            {
                "subject": [f.subject for f in pending],
                "predicate": [f.predicate for f in pending],
                "object": [f.object for f in pending],
                "datatype": [f.datatype for f in pending],
                "language": [f.language for f in pending],
            },
            schema=FACT_SCHEMA,
        )
        self._df = pl.concat([self._df, batch], how="vertical")
        self._pending = []
        return len(pending)

    # =========================================================================
    # Reads
    # =========================================================================

    @property
    def frame(self) -> pl.DataFrame:
        """All stored facts as a DataFrame, in insertion order."""
        self._flush()
        return self._df

    def match(
        self,
        subject: Optional[str] = None,
        predicate: Optional[str] = None,
        obj: Optional[str] = None,
    ) -> list[Fact]:
        """
        Return every fact equal to the given components.

        A component left as None is a wildcard. Results keep insertion order.
        """
        df = self.frame.lazy()

        if subject is not None:
            df = df.filter(pl.col("subject") == subject)
        if predicate is not None:
            df = df.filter(pl.col("predicate") == predicate)
        if obj is not None:
            df = df.filter(pl.col("object") == obj)

        return [Fact(**row) for row in df.collect().iter_rows(named=True)]

    def values_for_predicate(self, predicate: str) -> list[str]:
        """Distinct object values observed for a predicate, in first-seen order."""
        return (
            self.frame.lazy()
            .filter(pl.col("predicate") == predicate)
            .select("object")
            .unique(maintain_order=True)
            .collect()
            .to_series()
            .to_list()
        )

    def stats(self) -> dict[str, Any]:
        """Get statistics about the fact store."""
        df = self.frame
        return {
            "state": self._state.value,
            "total_facts": df.height,
            "unique_subjects": df.select("subject").n_unique() if df.height else 0,
            "unique_predicates": df.select("predicate").n_unique() if df.height else 0,
        }

    def __len__(self) -> int:
        return self.frame.height

    def __repr__(self) -> str:
        return f"FactStore(state={self._state.value}, facts={len(self)})"

"""
Per-query execution statistics.

Provides:
- Query state tracking
- Counters collected by the executor (patterns, filters, facts scanned)
- Timing
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum, auto
from typing import Optional
import time


class QueryState(IntEnum):
    """Query execution states."""
    PENDING = auto()     # Created but not started
    RUNNING = auto()     # Currently executing
    COMPLETED = auto()   # Finished successfully
    FAILED = auto()      # Failed with error


@dataclass
class QueryStats:
    """Statistics for query execution."""
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    state: QueryState = QueryState.PENDING
    rows_scanned: int = 0
    rows_joined: int = 0
    rows_returned: int = 0
    pattern_count: int = 0
    filter_count: int = 0
    error: Optional[str] = None

    def start(self) -> None:
        self.start_time = time.perf_counter()
        self.state = QueryState.RUNNING

    def complete(self, rows_returned: int) -> None:
        self.end_time = time.perf_counter()
        self.rows_returned = rows_returned
        self.state = QueryState.COMPLETED

    def fail(self, error: BaseException) -> None:
        self.end_time = time.perf_counter()
        self.error = str(error)
        self.state = QueryState.FAILED

    @property
    def duration_ms(self) -> float:
        """Query duration in milliseconds."""
        if self.start_time is None:
            return 0.0
        end = self.end_time or time.perf_counter()
        return (end - self.start_time) * 1000

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "duration_ms": self.duration_ms,
            "state": self.state.name,
            "rows_scanned": self.rows_scanned,
            "rows_joined": self.rows_joined,
            "rows_returned": self.rows_returned,
            "pattern_count": self.pattern_count,
            "filter_count": self.filter_count,
            "error": self.error,
        }

"""
Exception hierarchy for triplequery.

Every failure aborts the current call; nothing is reported as an empty
result set. Query-time failures derive from QueryError so callers can
distinguish "the query is wrong" from "the data is not there yet".
"""


class TripleQueryError(Exception):
    """Base class for all triplequery errors."""
    pass


# =============================================================================
# Data lifecycle
# =============================================================================

class NotLoadedError(TripleQueryError):
    """Raised when a query is submitted before fact loading completes."""

    def __init__(self, message: str = "Data not loaded. Please load data before executing queries."):
        super().__init__(message)


class DataLoadError(TripleQueryError):
    """Raised when loading facts fails or a load is already running."""
    pass


class TurtleSyntaxError(DataLoadError):
    """Raised when fact text cannot be parsed."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, col {column})"
        super().__init__(message)


class FactStoreError(TripleQueryError):
    """Raised on an invalid write to the fact store."""
    pass


# =============================================================================
# Query errors
# =============================================================================

class QueryError(TripleQueryError):
    """Base class for errors raised while parsing or executing a query."""
    pass


class QuerySyntaxError(QueryError):
    """The query text was rejected by the parser; carries its message verbatim."""
    pass


class UnsupportedQueryFormError(QueryError):
    """The parsed query is not a SELECT."""
    pass


class UnsupportedPatternError(QueryError):
    """A WHERE entry is neither a basic graph pattern nor a filter."""
    pass


class UnboundFilterVariableError(QueryError):
    """A filter references a variable with no value in the current row."""

    def __init__(self, variable: str):
        self.variable = variable
        super().__init__(f"Variable ?{variable} is unbound in FILTER.")


class UnsupportedOperatorError(QueryError):
    """A filter uses an operator outside the binary comparison set."""

    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"Unsupported operator in FILTER: {operator}")


class UnsupportedExpressionError(QueryError):
    """A filter expression is not a binary comparison of variables and literals."""
    pass


class MalformedTermError(QueryError):
    """A pattern term does not match any recognized term kind."""
    pass


# =============================================================================
# Presets and configuration
# =============================================================================

class PresetNotFoundError(TripleQueryError, KeyError):
    """No preset query is registered under the requested id."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class ConfigValidationError(TripleQueryError):
    """Configuration validation error."""
    pass

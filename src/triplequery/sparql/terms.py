"""
Term resolution for triple patterns.

Normalizes each position of a pattern into a ResolvedTerm: either an
unbound variable or a concrete value to match against the fact store.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from triplequery.errors import MalformedTermError
from triplequery.sparql.ast import IRI, Literal, Variable


class TermKind(Enum):
    """Kinds of term a pattern position can hold."""
    VARIABLE = "variable"
    IDENTIFIER = "identifier"
    LITERAL = "literal"


@dataclass(frozen=True)
class ResolvedTerm:
    """A pattern term normalized for matching."""
    kind: TermKind
    value: str
    datatype: Optional[str] = None
    language: Optional[str] = None

    @property
    def is_variable(self) -> bool:
        return self.kind is TermKind.VARIABLE


def resolve_term(term: Any, prefixes: Optional[dict[str, str]] = None) -> ResolvedTerm:
    """
    Resolve a pattern term.

    Variables resolve to their name, IRIs to their expanded identifier and
    literals to their lexical value.

    Raises:
        MalformedTermError: for any other term shape (blank nodes included)
    """
    if isinstance(term, Variable):
        return ResolvedTerm(TermKind.VARIABLE, term.name)
    if isinstance(term, IRI):
        return ResolvedTerm(TermKind.IDENTIFIER, term.expand(prefixes or {}))
    if isinstance(term, Literal):
        return ResolvedTerm(
            TermKind.LITERAL,
            str(term.value),
            datatype=term.datatype,
            language=term.language,
        )
    raise MalformedTermError(f"Unsupported term type: {term!r}")

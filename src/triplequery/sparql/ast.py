"""
Abstract Syntax Tree (AST) nodes for SPARQL queries.

These classes represent the parsed structure of a query: the query form,
the projected variables, the ordered WHERE entries and the solution
modifiers. The executor only runs SELECT queries built from basic graph
patterns and FILTERs; the other node types exist so that the parser can
represent what it reads and the executor can reject it with a clear error.
"""

from dataclasses import dataclass, field
from typing import Union, Optional
from enum import Enum


class ComparisonOp(Enum):
    """Comparison operators supported in FILTER expressions."""
    EQ = "="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    @classmethod
    def from_str(cls, op: str) -> "ComparisonOp":
        mapping = {
            "=": cls.EQ, "==": cls.EQ,
            "!=": cls.NE, "<>": cls.NE,
            "<": cls.LT, "<=": cls.LE,
            ">": cls.GT, ">=": cls.GE,
        }
        return mapping[op]


class LogicalOp(Enum):
    """Logical operators for combining FILTER expressions."""
    AND = "&&"
    OR = "||"
    NOT = "!"


# =============================================================================
# Term Types (subjects, predicates, objects)
# =============================================================================

@dataclass(frozen=True)
class Variable:
    """
    A SPARQL variable (e.g., ?name, $person).

    Variables are bound during query execution to values from matching facts.
    """
    name: str

    def __str__(self) -> str:
        return f"?{self.name}"


@dataclass(frozen=True)
class IRI:
    """
    An Internationalized Resource Identifier.

    Either a full IRI (<http://...>) or a prefixed name (books:title). For
    prefixed names ``value`` keeps the raw ``prefix:local`` text and
    ``prefixed`` is set, so expansion happens against the query's prefixes.
    """
    value: str
    prefixed: bool = False

    @property
    def prefix(self) -> Optional[str]:
        if not self.prefixed:
            return None
        return self.value.split(":", 1)[0]

    def expand(self, prefixes: dict[str, str]) -> str:
        """Return the full IRI, resolving a prefixed name against ``prefixes``."""
        if not self.prefixed:
            return self.value
        prefix, local = self.value.split(":", 1)
        if prefix in prefixes:
            return prefixes[prefix] + local
        return self.value

    def __str__(self) -> str:
        if self.prefixed:
            return self.value
        return f"<{self.value}>"


@dataclass(frozen=True)
class Literal:
    """
    An RDF Literal value.

    ``value`` is always the lexical form; an optional language tag (@en) or
    datatype (^^xsd:integer) may accompany it.
    """
    value: str
    language: Optional[str] = None
    datatype: Optional[str] = None

    def __str__(self) -> str:
        base = f'"{self.value}"'
        if self.language:
            return f"{base}@{self.language}"
        if self.datatype:
            return f"{base}^^<{self.datatype}>"
        return base


@dataclass(frozen=True)
class BlankNode:
    """A blank node (anonymous resource)."""
    label: str

    def __str__(self) -> str:
        return f"_:{self.label}"


# Type alias for any term that can appear in a triple pattern
Term = Union[Variable, IRI, Literal, BlankNode]


# =============================================================================
# Triple Patterns
# =============================================================================

@dataclass(frozen=True)
class TriplePattern:
    """
    A triple pattern matching facts in the store.

    Each position can be a variable (for matching) or a concrete term (for filtering).
    """
    subject: Term
    predicate: Term
    object: Term

    def __str__(self) -> str:
        return f"{self.subject} {self.predicate} {self.object} ."

    def get_variables(self) -> list[Variable]:
        """Return the distinct variables in this pattern, in position order."""
        found: list[Variable] = []
        for term in (self.subject, self.predicate, self.object):
            if isinstance(term, Variable) and term not in found:
                found.append(term)
        return found


# =============================================================================
# Filter Expressions
# =============================================================================

@dataclass
class BinaryOperation:
    """
    A binary operator applied to two operands (e.g., ?year < 1950).

    ``operator`` is the operator text as written. Comparisons are the only
    operators the executor evaluates; arithmetic operators are represented
    so they can be rejected.
    """
    operator: str
    left: Union[Variable, Literal, IRI, "BinaryOperation", "FunctionCall", "LogicalExpression"]
    right: Union[Variable, Literal, IRI, "BinaryOperation", "FunctionCall", "LogicalExpression"]

    @property
    def comparison(self) -> Optional[ComparisonOp]:
        """The comparison operator, or None for a non-comparison operator."""
        try:
            return ComparisonOp.from_str(self.operator)
        except KeyError:
            return None

    def __str__(self) -> str:
        return f"{self.left} {self.operator} {self.right}"


@dataclass
class LogicalExpression:
    """A logical combination of expressions (AND, OR, NOT)."""
    operator: LogicalOp
    operands: list[Union["BinaryOperation", "LogicalExpression", "FunctionCall"]]

    def __str__(self) -> str:
        if self.operator == LogicalOp.NOT:
            return f"!({self.operands[0]})"
        op_str = " && " if self.operator == LogicalOp.AND else " || "
        return f"({op_str.join(str(o) for o in self.operands)})"


@dataclass
class FunctionCall:
    """A SPARQL function call (e.g., BOUND(?x), STR(?y))."""
    name: str
    arguments: list[Union[Variable, Literal, IRI, "BinaryOperation", "FunctionCall"]]

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.name}({args})"


Expression = Union[BinaryOperation, LogicalExpression, FunctionCall, Variable, Literal, IRI]


@dataclass
class Filter:
    """A FILTER clause constraining query results."""
    expression: Expression

    def __str__(self) -> str:
        return f"FILTER({self.expression})"


# =============================================================================
# Graph Patterns
# =============================================================================

@dataclass
class BasicGraphPattern:
    """A run of consecutive triple patterns inside a group."""
    triples: list[TriplePattern] = field(default_factory=list)

    def __str__(self) -> str:
        return "\n".join(f"  {t}" for t in self.triples)


@dataclass
class GroupPattern:
    """A nested ``{ ... }`` group."""
    where: "WhereClause"

    def __str__(self) -> str:
        return "{ ... }"


@dataclass
class OptionalPattern:
    """An ``OPTIONAL { ... }`` block."""
    where: "WhereClause"

    def __str__(self) -> str:
        return "OPTIONAL { ... }"


@dataclass
class UnionPattern:
    """Two or more groups joined with UNION."""
    alternatives: list["WhereClause"]

    def __str__(self) -> str:
        return " UNION ".join("{ ... }" for _ in self.alternatives)


WhereElement = Union[BasicGraphPattern, Filter, GroupPattern, OptionalPattern, UnionPattern]


@dataclass
class WhereClause:
    """
    The WHERE clause: graph patterns and filters in the order they appear.

    Consecutive triple patterns are grouped into one BasicGraphPattern; a
    FILTER or a nested block starts a new entry.
    """
    elements: list[WhereElement] = field(default_factory=list)

    @property
    def patterns(self) -> list[TriplePattern]:
        """All triple patterns from the top-level basic graph patterns."""
        result = []
        for element in self.elements:
            if isinstance(element, BasicGraphPattern):
                result.extend(element.triples)
        return result

    @property
    def filters(self) -> list[Filter]:
        """All top-level filters."""
        return [e for e in self.elements if isinstance(e, Filter)]

    def get_all_variables(self) -> list[Variable]:
        """Return pattern variables in order of first appearance."""
        found: list[Variable] = []
        for pattern in self.patterns:
            for var in pattern.get_variables():
                if var not in found:
                    found.append(var)
        return found


# =============================================================================
# Query Structure
# =============================================================================

@dataclass(frozen=True)
class OrderCondition:
    """One ORDER BY key: a variable plus a direction."""
    variable: Variable
    descending: bool = False

    def __str__(self) -> str:
        if self.descending:
            return f"DESC({self.variable})"
        return str(self.variable)


@dataclass
class Query:
    """Base class for all SPARQL query types."""
    prefixes: dict[str, str] = field(default_factory=dict)

    @property
    def query_type(self) -> str:
        return "UNKNOWN"


@dataclass
class SelectQuery(Query):
    """
    A SELECT query returning variable bindings.

    SELECT ?s ?p ?o
    WHERE { ?s ?p ?o }
    """
    variables: list[Variable] = field(default_factory=list)  # Empty list means SELECT *
    where: WhereClause = field(default_factory=WhereClause)
    distinct: bool = False
    limit: Optional[int] = None
    offset: Optional[int] = None
    order_by: list[OrderCondition] = field(default_factory=list)

    @property
    def query_type(self) -> str:
        return "SELECT"

    def is_select_all(self) -> bool:
        """Check if this is a SELECT * query."""
        return len(self.variables) == 0

    def __str__(self) -> str:
        parts = []

        for prefix, uri in self.prefixes.items():
            parts.append(f"PREFIX {prefix}: <{uri}>")

        distinct_str = "DISTINCT " if self.distinct else ""
        if self.is_select_all():
            parts.append(f"SELECT {distinct_str}*")
        else:
            vars_str = " ".join(str(v) for v in self.variables)
            parts.append(f"SELECT {distinct_str}{vars_str}")

        parts.append("WHERE {")
        for element in self.where.elements:
            if isinstance(element, BasicGraphPattern):
                parts.append(str(element))
            else:
                parts.append(f"  {element}")
        parts.append("}")

        if self.order_by:
            parts.append(f"ORDER BY {' '.join(str(c) for c in self.order_by)}")

        if self.limit is not None:
            parts.append(f"LIMIT {self.limit}")

        if self.offset:
            parts.append(f"OFFSET {self.offset}")

        return "\n".join(parts)


@dataclass
class AskQuery(Query):
    """An ASK query returning boolean."""
    where: WhereClause = field(default_factory=WhereClause)

    @property
    def query_type(self) -> str:
        return "ASK"

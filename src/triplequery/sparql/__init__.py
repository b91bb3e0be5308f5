"""
SPARQL query support: AST, parser and executor.
"""

from triplequery.sparql.ast import (
    Query,
    SelectQuery,
    AskQuery,
    TriplePattern,
    BasicGraphPattern,
    GroupPattern,
    OptionalPattern,
    UnionPattern,
    Variable,
    IRI,
    Literal,
    BlankNode,
    Filter,
    BinaryOperation,
    LogicalExpression,
    FunctionCall,
    ComparisonOp,
    LogicalOp,
    OrderCondition,
    WhereClause,
)
from triplequery.sparql.parser import SPARQLParser, parse_query
from triplequery.sparql.executor import QueryResult, SPARQLExecutor, execute_sparql

__all__ = [
    "Query",
    "SelectQuery",
    "AskQuery",
    "TriplePattern",
    "BasicGraphPattern",
    "GroupPattern",
    "OptionalPattern",
    "UnionPattern",
    "Variable",
    "IRI",
    "Literal",
    "BlankNode",
    "Filter",
    "BinaryOperation",
    "LogicalExpression",
    "FunctionCall",
    "ComparisonOp",
    "LogicalOp",
    "OrderCondition",
    "WhereClause",
    "SPARQLParser",
    "parse_query",
    "QueryResult",
    "SPARQLExecutor",
    "execute_sparql",
]

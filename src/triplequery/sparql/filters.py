"""
FILTER evaluation over binding rows.

Only binary comparisons between variables and literals are evaluated.
Values that look like numerals compare numerically; everything else
compares as text. Any other expression shape is an error, never a silent
true or false.
"""

import re
from typing import Any, Callable, Iterable, Mapping, Union

from triplequery.errors import (
    UnboundFilterVariableError,
    UnsupportedExpressionError,
    UnsupportedOperatorError,
)
from triplequery.sparql.ast import (
    BinaryOperation, ComparisonOp, Filter, Literal, Variable,
)

Bindings = Mapping[str, str]

_NUMERAL = re.compile(r"\s*[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)\s*")
_INTEGER = re.compile(r"\s*[+-]?\d+\s*")

_COMPARATORS: dict[ComparisonOp, Callable[[Any, Any], bool]] = {
    ComparisonOp.EQ: lambda l, r: l == r,
    ComparisonOp.NE: lambda l, r: l != r,
    ComparisonOp.LT: lambda l, r: l < r,
    ComparisonOp.LE: lambda l, r: l <= r,
    ComparisonOp.GT: lambda l, r: l > r,
    ComparisonOp.GE: lambda l, r: l >= r,
}


def is_numeral(value: str) -> bool:
    """Check whether a value is a plain decimal numeral (e.g. "1950", "-2.5e3")."""
    return _NUMERAL.fullmatch(value) is not None


def coerce_value(value: str) -> Union[int, float, str]:
    """
    Return the numeric value of a numeral, or the text unchanged.

    Integer numerals become ints so large values compare exactly.
    """
    if _INTEGER.fullmatch(value):
        return int(value)
    if is_numeral(value):
        return float(value)
    return value


def coerce_pair(left: str, right: str) -> tuple[Any, Any]:
    """
    Coerce two values for comparison.

    Both become numbers when both are numerals; otherwise both stay text.
    """
    a = coerce_value(left)
    b = coerce_value(right)
    if not isinstance(a, str) and not isinstance(b, str):
        return a, b
    return left, right


def compare_values(left: str, right: str) -> int:
    """Three-way comparison with numeral-or-text coercion."""
    a, b = coerce_pair(left, right)
    return (a > b) - (a < b)


def _evaluate_operand(term: Any, row: Bindings) -> str:
    if isinstance(term, Variable):
        value = row.get(term.name)
        if value is None:
            raise UnboundFilterVariableError(term.name)
        return value
    if isinstance(term, Literal):
        return str(term.value)
    raise UnsupportedExpressionError(f"Unsupported term type in FILTER: {term}")


def evaluate_filter(expression: Any, row: Bindings) -> bool:
    """
    Evaluate a FILTER expression against one binding row.

    Args:
        expression: A Filter or its inner expression
        row: Variable bindings of the candidate solution

    Returns:
        Whether the row satisfies the comparison

    Raises:
        UnboundFilterVariableError: a variable operand has no value in the row
        UnsupportedOperatorError: the operator is not a comparison
        UnsupportedExpressionError: the expression is not a binary comparison
    """
    if isinstance(expression, Filter):
        expression = expression.expression

    if not isinstance(expression, BinaryOperation):
        raise UnsupportedExpressionError(
            f"Unsupported FILTER expression type: {type(expression).__name__}"
        )

    op = expression.comparison
    if op is None:
        raise UnsupportedOperatorError(expression.operator)

    left = _evaluate_operand(expression.left, row)
    right = _evaluate_operand(expression.right, row)
    a, b = coerce_pair(left, right)
    return _COMPARATORS[op](a, b)


def apply_filters(rows: Iterable[Bindings], filters: list[Any]) -> list[Bindings]:
    """Keep the rows for which every filter holds."""
    if not filters:
        return list(rows)
    return [row for row in rows if all(evaluate_filter(f, row) for f in filters)]

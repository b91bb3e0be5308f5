"""ORDER BY evaluation for projected result rows."""

from functools import cmp_to_key
from typing import Any, Optional, Sequence

from triplequery.sparql.ast import OrderCondition
from triplequery.sparql.filters import compare_values


def _compare_optional(a: Optional[str], b: Optional[str]) -> int:
    # Unbound values sort before every bound value
    if a is None or b is None:
        return (a is not None) - (b is not None)
    return compare_values(a, b)


def sort_rows(rows: Sequence[dict[str, Any]], conditions: Sequence[OrderCondition]) -> list[dict[str, Any]]:
    """
    Sort output rows by the ORDER BY conditions.

    Keys are compared left-to-right; later keys only break ties. Each
    DESC key reverses its own comparison. The sort is stable, so rows that
    tie on every key keep their input order.

    Args:
        rows: Projected output rows
        conditions: Order conditions in query order

    Returns:
        A new list; the input is not modified
    """
    if not conditions:
        return list(rows)

    def compare_rows(left: dict[str, Any], right: dict[str, Any]) -> int:
        for condition in conditions:
            name = condition.variable.name
            result = _compare_optional(left.get(name), right.get(name))
            if result:
                return -result if condition.descending else result
        return 0

    return sorted(rows, key=cmp_to_key(compare_rows))

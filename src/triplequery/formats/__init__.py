"""
Fact serialization formats.

Supported formats:
- Turtle (.ttl)
"""

from triplequery.formats.turtle import TurtleParser, iter_turtle, parse_turtle

__all__ = [
    "TurtleParser",
    "iter_turtle",
    "parse_turtle",
]

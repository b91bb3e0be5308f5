"""
Core data models for stored facts.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Fact:
    """
    A stored (subject, predicate, object) triple.

    Identifiers are full IRIs, blank nodes are ``_:label`` and literals are
    kept as their lexical form. ``datatype`` and ``language`` describe an
    object literal; they are carried along but never used for matching.
    """
    subject: str
    predicate: str
    object: str
    datatype: Optional[str] = None
    language: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "predicate": self.predicate,
            "object": self.object,
            "datatype": self.datatype,
            "language": self.language,
        }

    def __str__(self) -> str:
        return f"{self.subject} {self.predicate} {self.object} ."

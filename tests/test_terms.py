"""
Tests for pattern term resolution.
"""

import pytest

from triplequery.errors import MalformedTermError
from triplequery.namespaces import XSD_INTEGER
from triplequery.sparql import BlankNode, IRI, Literal, Variable
from triplequery.sparql.terms import TermKind, resolve_term


class TestResolveTerm:
    def test_variable(self):
        term = resolve_term(Variable("title"))
        assert term.kind == TermKind.VARIABLE
        assert term.value == "title"
        assert term.is_variable

    def test_full_iri(self):
        term = resolve_term(IRI("http://example.org/books/title"))
        assert term.kind == TermKind.IDENTIFIER
        assert term.value == "http://example.org/books/title"
        assert not term.is_variable

    def test_prefixed_iri(self):
        term = resolve_term(IRI(":title", prefixed=True), {"": "http://example.org/books/"})
        assert term.value == "http://example.org/books/title"

    def test_literal(self):
        term = resolve_term(Literal("1965", datatype=XSD_INTEGER))
        assert term.kind == TermKind.LITERAL
        assert term.value == "1965"
        assert term.datatype == XSD_INTEGER

    def test_language_literal(self):
        term = resolve_term(Literal("Dune", language="en"))
        assert term.value == "Dune"
        assert term.language == "en"

    def test_blank_node_rejected(self):
        with pytest.raises(MalformedTermError):
            resolve_term(BlankNode("b0"))

    def test_unknown_shape_rejected(self):
        with pytest.raises(MalformedTermError, match="Unsupported term type"):
            resolve_term({"type": "uri", "value": "http://example.org/"})

"""
Tests for the Turtle parser.
"""

from io import StringIO

import pytest

from triplequery.errors import DataLoadError, TurtleSyntaxError
from triplequery.formats import TurtleParser, iter_turtle, parse_turtle
from triplequery.namespaces import RDF_TYPE, XSD_BOOLEAN, XSD_DECIMAL, XSD_INTEGER


EX = "http://example.org/"


class TestTurtleParser:
    """Tests for Turtle parsing into facts."""

    def test_simple_triple(self):
        facts = parse_turtle("<http://example.org/a> <http://example.org/p> <http://example.org/b> .")
        assert len(facts) == 1
        assert facts[0].subject == f"{EX}a"
        assert facts[0].predicate == f"{EX}p"
        assert facts[0].object == f"{EX}b"

    def test_prefixes_expand(self):
        facts = parse_turtle("""
        @prefix ex: <http://example.org/> .
        PREFIX foaf: <http://xmlns.com/foaf/0.1/>
        ex:alice foaf:name "Alice" .
        """)
        assert facts[0].subject == f"{EX}alice"
        assert facts[0].predicate == "http://xmlns.com/foaf/0.1/name"
        assert facts[0].object == "Alice"

    def test_empty_prefix(self):
        facts = parse_turtle("""
        @prefix : <http://example.org/books/> .
        :book1 :title "Dune" .
        """)
        assert facts[0].subject == "http://example.org/books/book1"

    def test_a_is_rdf_type(self):
        facts = parse_turtle("""
        @prefix ex: <http://example.org/> .
        ex:dune a ex:Book .
        """)
        assert facts[0].predicate == RDF_TYPE
        assert facts[0].object == f"{EX}Book"

    def test_predicate_and_object_lists(self):
        facts = parse_turtle("""
        @prefix ex: <http://example.org/> .
        ex:dune ex:title "Dune" ;
                ex:tag "sf", "classic" ;
        .
        """)
        assert [(f.predicate, f.object) for f in facts] == [
            (f"{EX}title", "Dune"),
            (f"{EX}tag", "sf"),
            (f"{EX}tag", "classic"),
        ]

    def test_numeric_and_boolean_shorthand(self):
        facts = parse_turtle("""
        @prefix ex: <http://example.org/> .
        ex:x ex:year 1965 ; ex:price 9.99 ; ex:inPrint true .
        """)
        assert [(f.object, f.datatype) for f in facts] == [
            ("1965", XSD_INTEGER),
            ("9.99", XSD_DECIMAL),
            ("true", XSD_BOOLEAN),
        ]

    def test_language_and_datatype(self):
        facts = parse_turtle("""
        @prefix ex: <http://example.org/> .
        @prefix xsd: <http://www.w3.org/2001/XMLSchema#> .
        ex:x ex:label "Dune"@en ; ex:year "1965"^^xsd:gYear .
        """)
        assert facts[0].object == "Dune"
        assert facts[0].language == "en"
        assert facts[1].object == "1965"
        assert facts[1].datatype == "http://www.w3.org/2001/XMLSchema#gYear"

    def test_base_resolves_relative_iris(self):
        facts = parse_turtle("""
        @base <http://example.org/> .
        <alice> <knows> <bob> .
        """)
        assert facts[0].subject == f"{EX}alice"
        assert facts[0].object == f"{EX}bob"

    def test_blank_nodes(self):
        facts = parse_turtle("""
        @prefix ex: <http://example.org/> .
        _:b1 ex:name "Anon" .
        ex:x ex:author [ ex:name "Someone" ] .
        """)
        assert facts[0].subject == "_:b1"
        assert facts[1].predicate == f"{EX}author"
        anon = facts[1].object
        assert anon.startswith("_:")
        assert facts[2].subject == anon
        assert facts[2].object == "Someone"

    def test_comments_ignored(self):
        facts = parse_turtle("""
        # leading comment
        @prefix ex: <http://example.org/> .
        ex:a ex:p "x" . # trailing comment
        """)
        assert len(facts) == 1

    def test_string_and_stringio_sources(self):
        text = '<http://example.org/a> <http://example.org/p> "x" .'
        assert parse_turtle(StringIO(text)) == parse_turtle(text)

    def test_path_source(self, tmp_path):
        path = tmp_path / "data.ttl"
        path.write_text('<http://example.org/a> <http://example.org/p> "x" .', encoding="utf-8")
        assert len(parse_turtle(path)) == 1

    def test_iter_turtle_is_lazy(self):
        facts = iter_turtle('<http://example.org/a> <http://example.org/p> "x" .')
        assert next(facts).object == "x"

    def test_string_escapes_decoded(self):
        facts = parse_turtle(r'''
        @prefix ex: <http://example.org/> .
        ex:x ex:name "caf\u00e9" ;
             ex:note "tab\there \"quoted\" back\\slash" ;
             ex:emoji 'smile \U0001F600' ;
             ex:body """two\nlines""" .
        ''')
        assert facts[0].object == "café"
        assert facts[1].object == 'tab\there "quoted" back\\slash'
        assert facts[2].object == "smile \U0001F600"
        assert facts[3].object == "two\nlines"

    def test_parser_reusable(self):
        parser = TurtleParser()
        assert len(parser.parse('<http://e.org/a> <http://e.org/p> "1" .')) == 1
        assert len(parser.parse('<http://e.org/a> <http://e.org/p> "2" .')) == 1


class TestTurtleErrors:
    def test_syntax_error_has_position(self):
        with pytest.raises(TurtleSyntaxError) as exc_info:
            parse_turtle('<http://example.org/a> <http://example.org/p> .')
        assert exc_info.value.line == 1
        assert "line 1" in str(exc_info.value)

    def test_unknown_prefix(self):
        with pytest.raises(TurtleSyntaxError, match="Unknown prefix: ex"):
            parse_turtle('ex:a ex:p "x" .')

    def test_syntax_error_is_load_error(self):
        with pytest.raises(DataLoadError):
            parse_turtle("this is not turtle")

    def test_invalid_escape(self):
        with pytest.raises(TurtleSyntaxError, match="Invalid escape sequence"):
            parse_turtle(r'<http://e.org/a> <http://e.org/p> "bad \q" .')

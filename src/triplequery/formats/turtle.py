"""
Turtle Parser.

Parses the commonly used subset of Turtle into Fact objects:

  turtleDoc ::= statement*
  statement ::= directive | triples '.'
  directive ::= '@prefix' PNAME_NS IRIREF '.' | 'PREFIX' PNAME_NS IRIREF
              | '@base' IRIREF '.' | 'BASE' IRIREF
  triples   ::= subject predicateObjectList

with ``;`` / ``,`` lists, ``a``, blank node labels, ``[]`` and
``[ ... ]`` anonymous nodes, quoted strings, language tags, datatypes and
numeric/boolean shorthand. RDF collections ``( ... )`` are not supported.

Reference: https://www.w3.org/TR/turtle/
"""

from dataclasses import dataclass, field
from io import StringIO
from itertools import count
from pathlib import Path
from typing import Iterator, List, Optional, Union
from urllib.parse import urljoin

import pyparsing as pp
from pyparsing import (
    CaselessKeyword, DelimitedList, Group, Keyword, Literal as Lit,
    Optional as Opt, Regex, Suppress, ZeroOrMore,
)

from triplequery.errors import TurtleSyntaxError
from triplequery.lexical import quoted_string
from triplequery.models import Fact
from triplequery.namespaces import (
    RDF_TYPE, XSD_BOOLEAN, XSD_DECIMAL, XSD_DOUBLE, XSD_INTEGER,
)
from triplequery.sparql.ast import BlankNode, IRI


@dataclass
class _RawLiteral:
    """A literal whose datatype may still be a prefixed name."""
    value: str
    language: Optional[str] = None
    datatype: Optional[IRI] = None


@dataclass
class _AnonNode:
    """An anonymous ``[ ... ]`` node with its own predicate-object list."""
    groups: list = field(default_factory=list)


class TurtleParser:
    """
    Parser for Turtle documents.

    ``iter_facts`` yields one Fact at a time in document order. Prefix and
    base directives apply to the statements that follow them.
    """

    def __init__(self):
        self._build_grammar()
        self._blank_ids = count()

    def _build_grammar(self):
        """Build the pyparsing grammar for Turtle."""

        pp.ParserElement.enable_packrat()

        DOT = Suppress(Lit("."))
        SEMI = Suppress(Lit(";"))
        LBRACKET = Suppress(Lit("["))
        RBRACKET = Suppress(Lit("]"))

        # =================================================================
        # Terms
        # =================================================================

        iriref = Regex(r'<[^<>"{}|^`\\\s]*>').set_parse_action(lambda t: IRI(t[0][1:-1]))
        pname_ns = Regex(r'(?:[A-Za-z][A-Za-z0-9_-]*)?:')
        prefixed_name = Regex(
            r'(?:[A-Za-z][A-Za-z0-9_-]*)?:(?:[A-Za-z0-9_](?:[A-Za-z0-9_.-]*[A-Za-z0-9_-])?)?'
        ).set_parse_action(lambda t: IRI(t[0], prefixed=True))
        iri = iriref | prefixed_name

        blank_node = Regex(
            r'_:[A-Za-z0-9_](?:[A-Za-z0-9_.-]*[A-Za-z0-9_-])?'
        ).set_parse_action(lambda t: BlankNode(t[0][2:]))

        string_literal = quoted_string()
        lang_tag = Regex(r'@[A-Za-z]+(?:-[A-Za-z0-9]+)*')
        datatype = Suppress(Lit("^^")) + iri

        def make_literal(tokens):
            value = tokens[0]
            if len(tokens) > 1:
                if isinstance(tokens[1], IRI):
                    return _RawLiteral(value, datatype=tokens[1])
                return _RawLiteral(value, language=tokens[1][1:])
            return _RawLiteral(value)

        rdf_literal = (string_literal + Opt(lang_tag | datatype)).set_parse_action(make_literal)

        def typed(datatype_iri):
            def action(tokens):
                return _RawLiteral(tokens[0], datatype=IRI(datatype_iri))
            return action

        double_literal = Regex(
            r'[+-]?(?:\d+\.\d*[eE][+-]?\d+|\.\d+[eE][+-]?\d+|\d+[eE][+-]?\d+)'
        ).set_parse_action(typed(XSD_DOUBLE))
        decimal_literal = Regex(r'[+-]?\d*\.\d+').set_parse_action(typed(XSD_DECIMAL))
        integer_literal = Regex(r'[+-]?\d+').set_parse_action(typed(XSD_INTEGER))
        boolean_literal = (Keyword("true") | Keyword("false")).set_parse_action(
            lambda t: _RawLiteral(t[0], datatype=IRI(XSD_BOOLEAN))
        )
        literal = rdf_literal | double_literal | decimal_literal | integer_literal | boolean_literal

        # =================================================================
        # Triples
        # =================================================================

        predicate_object_list = pp.Forward()

        anon = (LBRACKET + Opt(predicate_object_list) + RBRACKET).set_parse_action(
            lambda t: _AnonNode(groups=list(t))
        )

        rdf_type = Keyword("a").set_parse_action(lambda t: IRI(RDF_TYPE))
        verb = iri | rdf_type
        obj = iri | blank_node | anon | literal
        object_list = Group(DelimitedList(obj, delim=","))
        predicate_object = Group(verb + object_list)
        predicate_object_list <<= predicate_object + ZeroOrMore(SEMI + Opt(predicate_object))

        subject = iri | blank_node | anon
        triples = (subject + Opt(predicate_object_list) + DOT).set_parse_action(
            lambda t: ("triples", t[0], list(t[1:]))
        )

        # =================================================================
        # Directives
        # =================================================================

        prefix_id = (Suppress(Lit("@prefix")) + pname_ns + iriref + DOT) | (
            Suppress(CaselessKeyword("PREFIX")) + pname_ns + iriref
        )
        prefix_id.set_parse_action(lambda t: ("prefix", t[0][:-1], t[1].value))

        base = (Suppress(Lit("@base")) + iriref + DOT) | (
            Suppress(CaselessKeyword("BASE")) + iriref
        )
        base.set_parse_action(lambda t: ("base", t[0].value))

        statement = prefix_id | base | triples

        self.document = ZeroOrMore(statement)
        self.document.ignore(Lit("#") + pp.rest_of_line)

    def iter_facts(self, source: Union[str, Path, StringIO]) -> Iterator[Fact]:
        """
        Parse Turtle content and yield facts in document order.

        Args:
            source: Turtle content as string, file path, or StringIO

        Yields:
            Fact objects

        Raises:
            TurtleSyntaxError: if the content is not valid Turtle
        """
        if isinstance(source, Path):
            text = source.read_text(encoding="utf-8")
        elif isinstance(source, StringIO):
            text = source.read()
        else:
            text = source

        try:
            statements = self.document.parse_string(text, parse_all=True)
        except pp.ParseBaseException as e:
            raise TurtleSyntaxError(e.msg, line=e.lineno, column=e.col) from e

        prefixes: dict[str, str] = {}
        base_iri: Optional[str] = None

        for statement in statements:
            kind = statement[0]
            if kind == "prefix":
                prefixes[statement[1]] = self._resolve_relative(statement[2], base_iri)
            elif kind == "base":
                base_iri = self._resolve_relative(statement[1], base_iri)
            else:
                subject = self._node_value(statement[1], prefixes, base_iri)
                if isinstance(statement[1], _AnonNode):
                    yield from self._emit(subject, statement[1].groups, prefixes, base_iri)
                yield from self._emit(subject, statement[2], prefixes, base_iri)

    def parse(self, source: Union[str, Path, StringIO]) -> List[Fact]:
        """Parse Turtle content into a list of facts."""
        return list(self.iter_facts(source))

    # =========================================================================
    # Term expansion
    # =========================================================================

    @staticmethod
    def _resolve_relative(value: str, base_iri: Optional[str]) -> str:
        if base_iri and ":" not in value.split("/", 1)[0]:
            return urljoin(base_iri, value)
        return value

    def _expand_iri(self, iri: IRI, prefixes: dict[str, str], base_iri: Optional[str]) -> str:
        if iri.prefixed:
            if iri.prefix not in prefixes:
                raise TurtleSyntaxError(f"Unknown prefix: {iri.prefix}")
            return iri.expand(prefixes)
        return self._resolve_relative(iri.value, base_iri)

    def _node_value(self, node, prefixes: dict[str, str], base_iri: Optional[str]) -> str:
        if isinstance(node, IRI):
            return self._expand_iri(node, prefixes, base_iri)
        if isinstance(node, BlankNode):
            return f"_:{node.label}"
        if isinstance(node, _AnonNode):
            return f"_:anon{next(self._blank_ids)}"
        raise TurtleSyntaxError(f"Unexpected node: {node!r}")

    def _emit(
        self,
        subject: str,
        groups: list,
        prefixes: dict[str, str],
        base_iri: Optional[str],
    ) -> Iterator[Fact]:
        for group in groups:
            predicate = self._expand_iri(group[0], prefixes, base_iri)
            for obj in group[1]:
                if isinstance(obj, _RawLiteral):
                    datatype = self._expand_iri(obj.datatype, prefixes, base_iri) if obj.datatype else None
                    yield Fact(subject, predicate, obj.value, datatype=datatype, language=obj.language)
                    continue
                value = self._node_value(obj, prefixes, base_iri)
                yield Fact(subject, predicate, value)
                if isinstance(obj, _AnonNode):
                    yield from self._emit(value, obj.groups, prefixes, base_iri)


def iter_turtle(source: Union[str, Path, StringIO]) -> Iterator[Fact]:
    """Yield the facts of a Turtle document one at a time."""
    return TurtleParser().iter_facts(source)


def parse_turtle(source: Union[str, Path, StringIO]) -> List[Fact]:
    """
    Parse Turtle content into facts.

    Args:
        source: Turtle content as string, file path, or StringIO

    Returns:
        List of Fact objects in document order
    """
    return TurtleParser().parse(source)

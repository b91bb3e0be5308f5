"""
SPARQL Parser using pyparsing.

Parses the subset of SPARQL 1.1 that the engine understands, plus the
constructs it deliberately rejects (ASK, OPTIONAL, UNION, nested groups,
logical and arithmetic filter expressions) so those are reported as
unsupported instead of as syntax errors.
"""

from typing import Iterator, Optional
import pyparsing as pp
from pyparsing import (
    Keyword, Literal as Lit, Word, Regex,
    Suppress, Group, Optional as Opt, ZeroOrMore, OneOrMore,
    Forward, alphas, alphanums, pyparsing_common,
    CaselessKeyword, Combine, DelimitedList, one_of,
)

from triplequery.errors import QuerySyntaxError
from triplequery.lexical import quoted_string
from triplequery.namespaces import (
    RDF_TYPE, XSD_BOOLEAN, XSD_DECIMAL, XSD_DOUBLE, XSD_INTEGER,
)
from triplequery.sparql.ast import (
    Query, SelectQuery, AskQuery,
    TriplePattern, BasicGraphPattern, GroupPattern, OptionalPattern, UnionPattern,
    Variable, IRI, Literal, BlankNode,
    Filter, BinaryOperation, LogicalExpression, FunctionCall,
    LogicalOp, OrderCondition, WhereClause,
)


class SPARQLParser:
    """
    Parser for SPARQL queries.

    Supports:
    - PREFIX declarations and prefixed names
    - SELECT [DISTINCT] with a variable list or *
    - Triple patterns with ``;`` / ``,`` abbreviations and ``a`` for rdf:type
    - FILTER expressions with comparisons, arithmetic, logic and functions
    - OPTIONAL, UNION and nested groups
    - ORDER BY, LIMIT, OFFSET
    - ASK
    """

    def __init__(self):
        self._build_grammar()

    def _build_grammar(self):
        """Build the pyparsing grammar."""

        # Enable packrat parsing for performance
        pp.ParserElement.enable_packrat()

        # =================================================================
        # Lexical tokens
        # =================================================================

        SELECT = CaselessKeyword("SELECT")
        ASK = CaselessKeyword("ASK")
        WHERE = CaselessKeyword("WHERE")
        FILTER = CaselessKeyword("FILTER")
        PREFIX = CaselessKeyword("PREFIX")
        DISTINCT = CaselessKeyword("DISTINCT")
        OPTIONAL = CaselessKeyword("OPTIONAL")
        UNION = CaselessKeyword("UNION")
        LIMIT = CaselessKeyword("LIMIT")
        OFFSET = CaselessKeyword("OFFSET")
        ORDER = CaselessKeyword("ORDER")
        BY = CaselessKeyword("BY")
        ASC = CaselessKeyword("ASC")
        DESC = CaselessKeyword("DESC")
        AND = Lit("&&")
        OR = Lit("||")
        NOT = Lit("!")
        A = Keyword("a")

        LBRACE = Suppress(Lit("{"))
        RBRACE = Suppress(Lit("}"))
        LPAREN = Suppress(Lit("("))
        RPAREN = Suppress(Lit(")"))
        DOT = Suppress(Lit("."))
        SEMI = Suppress(Lit(";"))
        STAR = Lit("*")

        comp_op = (
            Lit("<=") | Lit(">=") | Lit("!=") | Lit("<>") | Lit("==") |
            Lit("=") | Lit("<") | Lit(">")
        )
        mult_op = one_of("* /")
        add_op = one_of("+ -")

        # =================================================================
        # Terms
        # =================================================================

        # Variable: ?name or $name
        def make_variable(tokens):
            return Variable(tokens[0][1:])

        variable = Combine(
            (Lit("?") | Lit("$")) + Word(alphas + "_", alphanums + "_")
        ).set_parse_action(make_variable)

        # IRI: <http://...>
        def make_full_iri(tokens):
            return IRI(tokens[0][1:-1])

        full_iri = Regex(r'<[^<>"{}|^`\\\s]*>').set_parse_action(make_full_iri)

        # Prefixed name: prefix:local (a trailing '.' belongs to the triple)
        pname_ns = Combine(Opt(Word(alphas, alphanums + "_-")) + Lit(":"))

        def make_prefixed_name(tokens):
            return IRI(tokens[0], prefixed=True)

        prefixed_name = Regex(
            r'(?:[A-Za-z][A-Za-z0-9_-]*)?:(?:[A-Za-z0-9_](?:[A-Za-z0-9_.-]*[A-Za-z0-9_-])?)?'
        ).set_parse_action(make_prefixed_name)

        iri = full_iri | prefixed_name

        # Literals
        string_literal = quoted_string()

        # Language tag: @en, @en-US
        lang_tag = Regex(r'@[A-Za-z]+(?:-[A-Za-z0-9]+)*')

        # Datatype: ^^<type> or ^^prefix:type
        datatype = Suppress(Lit("^^")) + iri

        def make_literal(tokens):
            value = tokens[0]
            lang = None
            dtype = None
            if len(tokens) > 1:
                if isinstance(tokens[1], str) and tokens[1].startswith("@"):
                    lang = tokens[1][1:]
                elif isinstance(tokens[1], IRI):
                    dtype = tokens[1].value
            return Literal(value, language=lang, datatype=dtype)

        literal = (string_literal + Opt(lang_tag | datatype)).set_parse_action(make_literal)

        # Numeric literals keep their lexical form
        def typed(datatype_iri):
            def action(tokens):
                return Literal(tokens[0], datatype=datatype_iri)
            return action

        double_literal = Regex(
            r'[+-]?(?:\d+\.\d*[eE][+-]?\d+|\.\d+[eE][+-]?\d+|\d+[eE][+-]?\d+)'
        ).set_parse_action(typed(XSD_DOUBLE))
        decimal_literal = Regex(r'[+-]?\d*\.\d+').set_parse_action(typed(XSD_DECIMAL))
        integer_literal = Regex(r'[+-]?\d+').set_parse_action(typed(XSD_INTEGER))
        numeric_literal = double_literal | decimal_literal | integer_literal

        boolean_literal = (
            CaselessKeyword("true") | CaselessKeyword("false")
        ).set_parse_action(lambda tokens: Literal(tokens[0].lower(), datatype=XSD_BOOLEAN))

        # Blank node
        def make_blank_node(tokens):
            return BlankNode(tokens[0][2:])

        blank_node = Combine(
            Lit("_:") + Word(alphanums + "_")
        ).set_parse_action(make_blank_node)

        graph_term = variable | iri | literal | numeric_literal | boolean_literal | blank_node

        # =================================================================
        # Triple Patterns
        # =================================================================

        rdf_type = A.copy().set_parse_action(lambda tokens: IRI(RDF_TYPE))
        verb = variable | iri | rdf_type

        object_list = Group(DelimitedList(graph_term, delim=","))
        predicate_object = Group(verb + object_list)
        predicate_object_list = (
            predicate_object + ZeroOrMore(SEMI + Opt(predicate_object))
        )

        def make_triple_patterns(tokens):
            subject = tokens[0]
            patterns = []
            for group in tokens[1:]:
                predicate = group[0]
                for obj in group[1]:
                    patterns.append(TriplePattern(subject=subject, predicate=predicate, object=obj))
            return patterns

        triples_same_subject = (
            graph_term + predicate_object_list
        ).set_parse_action(make_triple_patterns)

        triples_block = triples_same_subject + Opt(DOT)

        # =================================================================
        # FILTER Expressions
        # =================================================================

        expression = Forward()

        func_name = Word(alphas, alphanums + "_")

        def make_function_call(tokens):
            return FunctionCall(name=str(tokens[0]).upper(), arguments=list(tokens[1:]))

        function_call = (
            func_name + LPAREN + Opt(DelimitedList(expression)) + RPAREN
        ).set_parse_action(make_function_call)

        primary_expr = (
            function_call |
            variable |
            literal |
            numeric_literal |
            boolean_literal |
            iri |
            (LPAREN + expression + RPAREN)
        )

        # Left-associative chains of binary operators
        def make_binary_chain(tokens):
            tokens = list(tokens)
            result = tokens[0]
            for i in range(1, len(tokens), 2):
                result = BinaryOperation(operator=tokens[i], left=result, right=tokens[i + 1])
            return result

        multiplicative_expr = (
            primary_expr + ZeroOrMore(mult_op + primary_expr)
        ).set_parse_action(make_binary_chain)

        additive_expr = (
            multiplicative_expr + ZeroOrMore(add_op + multiplicative_expr)
        ).set_parse_action(make_binary_chain)

        comparison_expr = (
            additive_expr + Opt(comp_op + additive_expr)
        ).set_parse_action(make_binary_chain)

        def make_not(tokens):
            if len(tokens) == 2:
                return LogicalExpression(LogicalOp.NOT, [tokens[1]])
            return tokens[0]

        not_expr = (Opt(NOT) + comparison_expr).set_parse_action(make_not)

        def make_logical(op):
            def action(tokens):
                tokens = list(tokens)
                if len(tokens) == 1:
                    return tokens[0]
                return LogicalExpression(op, tokens)
            return action

        and_expr = (
            not_expr + ZeroOrMore(Suppress(AND) + not_expr)
        ).set_parse_action(make_logical(LogicalOp.AND))

        expression <<= (
            and_expr + ZeroOrMore(Suppress(OR) + and_expr)
        ).set_parse_action(make_logical(LogicalOp.OR))

        def make_filter(tokens):
            return Filter(expression=tokens[0])

        filter_clause = (
            Suppress(FILTER) + ((LPAREN + expression + RPAREN) | function_call) + Opt(DOT)
        ).set_parse_action(make_filter)

        # =================================================================
        # Group Graph Patterns
        # =================================================================

        group_pattern = Forward()

        def make_optional(tokens):
            return OptionalPattern(where=tokens[0])

        optional_pattern = (
            Suppress(OPTIONAL) + group_pattern + Opt(DOT)
        ).set_parse_action(make_optional)

        def make_group_or_union(tokens):
            if len(tokens) == 1:
                return GroupPattern(where=tokens[0])
            return UnionPattern(alternatives=list(tokens))

        group_or_union = (
            group_pattern + ZeroOrMore(Suppress(UNION) + group_pattern) + Opt(DOT)
        ).set_parse_action(make_group_or_union)

        where_pattern = filter_clause | optional_pattern | group_or_union | triples_block

        def make_where_clause(tokens):
            elements = []
            for token in tokens:
                if isinstance(token, TriplePattern):
                    if elements and isinstance(elements[-1], BasicGraphPattern):
                        elements[-1].triples.append(token)
                    else:
                        elements.append(BasicGraphPattern(triples=[token]))
                else:
                    elements.append(token)
            return WhereClause(elements=elements)

        group_pattern <<= (
            LBRACE + ZeroOrMore(where_pattern) + RBRACE
        ).set_parse_action(make_where_clause)

        # =================================================================
        # PREFIX Declarations
        # =================================================================

        def make_prefix(tokens):
            prefix = tokens[0][:-1]  # Remove trailing colon
            uri = tokens[1].value
            return (prefix, uri)

        prefix_decl = (
            Suppress(PREFIX) + pname_ns + full_iri
        ).set_parse_action(make_prefix)

        prologue = Group(ZeroOrMore(prefix_decl))("prefixes")

        # =================================================================
        # Solution modifiers
        # =================================================================

        def make_order(descending):
            def action(tokens):
                return OrderCondition(variable=tokens[0], descending=descending)
            return action

        order_condition = (
            (Suppress(DESC) + LPAREN + variable + RPAREN).set_parse_action(make_order(True)) |
            (Suppress(ASC) + LPAREN + variable + RPAREN).set_parse_action(make_order(False)) |
            variable.copy().add_parse_action(make_order(False))
        )

        order_clause = Suppress(ORDER) + Suppress(BY) + Group(OneOrMore(order_condition))("order_by")

        limit_clause = Suppress(LIMIT) + pyparsing_common.integer("limit")
        offset_clause = Suppress(OFFSET) + pyparsing_common.integer("offset")
        limit_offset = (limit_clause + Opt(offset_clause)) | (offset_clause + Opt(limit_clause))

        # =================================================================
        # SELECT Query
        # =================================================================

        select_vars = STAR.set_parse_action(lambda tokens: []) | OneOrMore(variable)

        def make_select_query(tokens):
            return SelectQuery(
                variables=list(tokens.variables),
                where=_find_where(tokens),
                distinct=bool(tokens.distinct),
                limit=tokens.limit if tokens.limit != "" else None,
                offset=tokens.offset if tokens.offset != "" else None,
                order_by=list(tokens.order_by) if tokens.order_by else [],
            )

        select_query = (
            Suppress(SELECT) +
            Opt(DISTINCT)("distinct") +
            Group(select_vars)("variables") +
            Opt(Suppress(WHERE)) +
            group_pattern +
            Opt(order_clause) +
            Opt(limit_offset)
        ).set_parse_action(make_select_query)

        # =================================================================
        # ASK Query
        # =================================================================

        def make_ask_query(tokens):
            return AskQuery(where=_find_where(tokens))

        ask_query = (
            Suppress(ASK) + Opt(Suppress(WHERE)) + group_pattern
        ).set_parse_action(make_ask_query)

        # =================================================================
        # Top-level Query
        # =================================================================

        def make_query(tokens):
            query = tokens[-1]
            query.prefixes = dict(list(tokens.prefixes))
            return query

        self.query = (prologue + (select_query | ask_query)).set_parse_action(make_query)

        # Ignore comments
        self.query.ignore(Lit("#") + pp.rest_of_line)

    def parse(self, query_string: str) -> Query:
        """
        Parse a SPARQL query string into an AST.

        Args:
            query_string: The SPARQL query to parse

        Returns:
            Parsed Query AST

        Raises:
            QuerySyntaxError: If the query is malformed or uses an
                undeclared prefix
        """
        try:
            result = self.query.parse_string(query_string, parse_all=True)
        except pp.ParseBaseException as e:
            raise QuerySyntaxError(str(e)) from e
        query = result[0]
        _check_prefixes(query)
        return query


def _find_where(tokens) -> WhereClause:
    """The WhereClause among a query's top-level tokens."""
    for token in tokens:
        if isinstance(token, WhereClause):
            return token
    return WhereClause()


def _iter_where_iris(where: WhereClause) -> Iterator[IRI]:
    for element in where.elements:
        if isinstance(element, BasicGraphPattern):
            for pattern in element.triples:
                for term in (pattern.subject, pattern.predicate, pattern.object):
                    if isinstance(term, IRI):
                        yield term
        elif isinstance(element, Filter):
            yield from _iter_expression_iris(element.expression)
        elif isinstance(element, (GroupPattern, OptionalPattern)):
            yield from _iter_where_iris(element.where)
        elif isinstance(element, UnionPattern):
            for alternative in element.alternatives:
                yield from _iter_where_iris(alternative)


def _iter_expression_iris(expression) -> Iterator[IRI]:
    if isinstance(expression, IRI):
        yield expression
    elif isinstance(expression, BinaryOperation):
        yield from _iter_expression_iris(expression.left)
        yield from _iter_expression_iris(expression.right)
    elif isinstance(expression, LogicalExpression):
        for operand in expression.operands:
            yield from _iter_expression_iris(operand)
    elif isinstance(expression, FunctionCall):
        for argument in expression.arguments:
            yield from _iter_expression_iris(argument)


def _check_prefixes(query: Query) -> None:
    """Reject prefixed names whose prefix was never declared."""
    where = getattr(query, "where", None)
    if where is None:
        return
    for iri in _iter_where_iris(where):
        if iri.prefixed and iri.prefix not in query.prefixes:
            raise QuerySyntaxError(f"Unknown prefix: {iri.prefix}")


# Module-level parser instance for convenience
_parser: Optional[SPARQLParser] = None


def parse_query(query_string: str) -> Query:
    """
    Parse a SPARQL query string.

    This is a convenience function that uses a cached parser instance.

    Args:
        query_string: The SPARQL query to parse

    Returns:
        Parsed Query AST
    """
    global _parser
    if _parser is None:
        _parser = SPARQLParser()
    return _parser.parse(query_string)

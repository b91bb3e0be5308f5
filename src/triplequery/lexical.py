"""
Quoted string lexing shared by the Turtle and SPARQL grammars.

Both languages use the same four quote styles and the same escapes:
ECHAR (``\\t \\b \\n \\r \\f \\" \\' \\\\``) and UCHAR (``\\uXXXX``,
``\\UXXXXXXXX``).
"""

import re

import pyparsing as pp
from pyparsing import QuotedString

_ECHAR = {
    "t": "\t",
    "b": "\b",
    "n": "\n",
    "r": "\r",
    "f": "\f",
    '"': '"',
    "'": "'",
    "\\": "\\",
}

_ESCAPE = re.compile(r"\\(?:u([0-9A-Fa-f]{4})|U([0-9A-Fa-f]{8})|(.))", re.DOTALL)


def unescape_string(text: str) -> str:
    """
    Decode ECHAR and UCHAR escapes in the body of a quoted string.

    Raises:
        ValueError: on an unknown escape or a code point out of range
    """
    def replace(match: re.Match) -> str:
        short, long, char = match.groups()
        if short or long:
            code_point = int(short or long, 16)
            if code_point > 0x10FFFF:
                raise ValueError(f"Invalid code point in escape: \\U{long}")
            return chr(code_point)
        if char in _ECHAR:
            return _ECHAR[char]
        raise ValueError(f"Invalid escape sequence: \\{char}")

    return _ESCAPE.sub(replace, text)


def _quoted(delimiter: str, multiline: bool = False) -> pp.ParserElement:
    def action(s, loc, tokens):
        body = tokens[0][len(delimiter):-len(delimiter)]
        try:
            return unescape_string(body)
        except ValueError as e:
            raise pp.ParseFatalException(s, loc, str(e))

    return QuotedString(
        delimiter, esc_char="\\", multiline=multiline, unquote_results=False,
    ).set_parse_action(action)


def quoted_string() -> pp.ParserElement:
    """Grammar element for a quoted string; yields the decoded text."""
    return (
        _quoted('"""', multiline=True) |
        _quoted("'''", multiline=True) |
        _quoted('"') |
        _quoted("'")
    )

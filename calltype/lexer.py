# filename: calltype/lexer.py

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .errors import InvalidSyntax


class TokenKind(str, Enum):
    NAME = "name"
    NUMBER = "number"
    STRING = "string"
    LPAR = "("
    RPAR = ")"
    LSQB = "["
    RSQB = "]"
    COMMA = ","
    DOT = "."
    VBAR = "|"
    ARROW = "->"
    STAR = "*"
    DOUBLESTAR = "**"
    ELLIPSIS = "..."
    MINUS = "-"
    END = "end"


@dataclass(frozen=True, slots=True)
class Span:
    start: int
    end: int
    line: int = 1
    column: int = 1

    def cover(self, other: "Span") -> "Span":
        if other.start < self.start:
            return other.cover(self)
        return Span(self.start, max(self.end, other.end), self.line, self.column)


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    text: str
    span: Span

    def is_keyword(self, word: str) -> bool:
        return self.kind == TokenKind.NAME and self.text == word


_STRING_PREFIX = r"(?:[rR][bB]|[bB][rR]|[rRbBuU])?"

# Order matters: longer operators first, strings before names (prefixes).
_PATTERNS: tuple[tuple[str, str], ...] = (
    ("SKIP", r"[ \t\f\r\n]+|\\\r?\n"),
    (
        "STRING",
        _STRING_PREFIX
        + r"""(?:'''(?:\\.|[^\\])*?'''|\"\"\"(?:\\.|[^\\])*?\"\"\""""
        + r"""|'(?:\\.|[^\\'\n])*'|"(?:\\.|[^\\"\n])*")""",
    ),
    (
        "NUMBER",
        r"0[xX][0-9a-fA-F_]+|0[oO][0-7_]+|0[bB][01_]+"
        r"|\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?\d+)?",
    ),
    ("NAME", r"[^\W\d]\w*"),
    ("ELLIPSIS", r"\.\.\."),
    ("ARROW", r"->"),
    ("DOUBLESTAR", r"\*\*"),
    ("STAR", r"\*"),
    ("LPAR", r"\("),
    ("RPAR", r"\)"),
    ("LSQB", r"\["),
    ("RSQB", r"\]"),
    ("COMMA", r","),
    ("DOT", r"\."),
    ("VBAR", r"\|"),
    ("MINUS", r"-"),
    ("BADSTRING", r"['\"]"),
)

_TOKEN_RE = re.compile(
    "|".join(f"(?P<{name}>{pattern})" for name, pattern in _PATTERNS), re.DOTALL
)


def tokenize(source: str) -> list[Token]:
    """Split an annotation into tokens, ending with a single END token."""
    if not isinstance(source, str):
        raise TypeError(f"tokenize expects str, got {type(source)!r}")

    tokens: list[Token] = []
    pos = 0
    line = 1
    line_start = 0
    while pos < len(source):
        m = _TOKEN_RE.match(source, pos)
        column = pos - line_start + 1
        if m is None:
            raise InvalidSyntax(
                f"unexpected character {source[pos]!r}",
                Span(pos, pos + 1, line, column),
                source=source,
            )
        kind = m.lastgroup
        text = m.group()
        assert kind is not None
        if kind == "BADSTRING":
            raise InvalidSyntax(
                "unterminated string literal",
                Span(pos, len(source), line, column),
                source=source,
            )
        if kind != "SKIP":
            tokens.append(Token(TokenKind[kind], text, Span(pos, m.end(), line, column)))
        newlines = text.count("\n")
        if newlines:
            line += newlines
            line_start = pos + text.rindex("\n") + 1
        pos = m.end()

    tokens.append(Token(TokenKind.END, "", Span(pos, pos, line, pos - line_start + 1)))
    return tokens

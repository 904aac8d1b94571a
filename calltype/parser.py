# filename: calltype/parser.py

from __future__ import annotations

import ast
import contextlib
import keyword
import logging
import math
import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from .errors import (
    DanglingArrow,
    InvalidSyntax,
    InvalidTrailingComma,
    MalformedArgumentList,
    MisplacedParameterSpecification,
    MissingReturnArrow,
    NestingTooDeep,
    UnexpectedWildcardAsElementType,
    UnparenthesizedArrow,
)
from .lexer import Span, Token, TokenKind, tokenize
from .nodes import (
    AnyArguments,
    CallableType,
    CallableTypeExpr,
    Concatenation,
    Constant,
    Name,
    ParamSpecRef,
    PositionalArguments,
    Subscript,
    TypeExpr,
    TypeList,
    Union,
    Unpack,
    Wildcard,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 100

_KEYWORD_CONSTANTS = {"None": None, "True": True, "False": False}

# Tokens that can never start a return type.
_RETURN_TERMINATORS = frozenset(
    {TokenKind.END, TokenKind.RPAR, TokenKind.RSQB, TokenKind.COMMA}
)


def max_depth_from_env() -> int:
    raw = os.environ.get("CALLTYPE_MAX_DEPTH", "")
    if raw == "":
        return DEFAULT_MAX_DEPTH
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"CALLTYPE_MAX_DEPTH must be an int, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"CALLTYPE_MAX_DEPTH must be > 0, got {value}")
    return value


def parse_type(source: str, *, max_depth: int | None = None) -> TypeExpr:
    """Parse a complete type annotation."""
    tokens = tokenize(source)
    tree, pos = parse_tokens(tokens, 0, max_depth=max_depth, source=source)
    tok = tokens[pos]
    if tok.kind != TokenKind.END:
        raise InvalidSyntax(
            f"unexpected {tok.text!r} after type expression", tok.span, source=source
        )
    logger.debug("parsed %r (%d tokens)", source, len(tokens))
    return tree


def parse_tokens(
    tokens: Sequence[Token],
    pos: int = 0,
    *,
    max_depth: int | None = None,
    source: str | None = None,
) -> tuple[TypeExpr, int]:
    """
    Parse one type expression starting at `tokens[pos]`.

    Returns the tree and the index of the first token that was not consumed,
    so a surrounding parser can continue from there.
    """
    if not tokens or tokens[-1].kind != TokenKind.END:
        raise ValueError("token stream must end with an END token")
    if not 0 <= pos < len(tokens):
        raise ValueError(f"pos out of range: {pos}")
    if max_depth is None:
        max_depth = max_depth_from_env()
    if max_depth <= 0:
        raise ValueError(f"max_depth must be > 0, got {max_depth}")

    parser = _Parser(tokens=tokens, pos=pos, max_depth=max_depth, source=source)
    try:
        tree = parser.type_expr()
    except RecursionError:
        raise NestingTooDeep(
            f"type expression is nested too deeply for the interpreter (limit {max_depth})",
            parser._peek().span,
            source=source,
        ) from None
    return tree, parser.pos


@dataclass(slots=True)
class _Parser:
    tokens: Sequence[Token]
    pos: int
    max_depth: int
    source: str | None = None
    depth: int = 0
    _closers: dict[int, int | None] = field(default_factory=dict)

    # Token access

    def _peek(self, offset: int = 0) -> Token:
        idx = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[idx]

    def _at(self, kind: TokenKind) -> bool:
        return self._peek().kind == kind

    def _advance(self) -> Token:
        tok = self._peek()
        if tok.kind != TokenKind.END:
            self.pos += 1
        return tok

    def _expect(self, kind: TokenKind, what: str) -> Token:
        tok = self._peek()
        if tok.kind != kind:
            got = "end of input" if tok.kind == TokenKind.END else repr(tok.text)
            raise InvalidSyntax(f"expected {what}, got {got}", tok.span, source=self.source)
        return self._advance()

    def _expect_name(self, what: str) -> Token:
        tok = self._expect(TokenKind.NAME, what)
        if keyword.iskeyword(tok.text):
            raise InvalidSyntax(
                f"keyword {tok.text!r} is not a valid name", tok.span, source=self.source
            )
        return tok

    def _span_from(self, start: Token) -> Span:
        return start.span.cover(self.tokens[max(self.pos - 1, 0)].span)

    @contextlib.contextmanager
    def _nested(self) -> Iterator[None]:
        self.depth += 1
        try:
            if self.depth > self.max_depth:
                raise NestingTooDeep(
                    f"type expression is nested deeper than {self.max_depth} levels",
                    self._peek().span,
                    source=self.source,
                )
            yield
        finally:
            self.depth -= 1

    def _closing_index(self, pos: int) -> int | None:
        if pos in self._closers:
            return self._closers[pos]
        found: int | None = None
        depth = 0
        for i in range(pos, len(self.tokens)):
            kind = self.tokens[i].kind
            if kind in (TokenKind.LPAR, TokenKind.LSQB):
                depth += 1
            elif kind in (TokenKind.RPAR, TokenKind.RSQB):
                depth -= 1
                if depth == 0:
                    found = i if kind == TokenKind.RPAR else None
                    break
            elif kind == TokenKind.END:
                break
        self._closers[pos] = found
        return found

    def _arrow_follows(self, pos: int) -> bool:
        """True if the parenthesized group starting at `pos` is followed by '->'."""
        idx = self._closing_index(pos)
        return (
            idx is not None
            and idx + 1 < len(self.tokens)
            and self.tokens[idx + 1].kind == TokenKind.ARROW
        )

    # Grammar

    def type_expr(self) -> TypeExpr:
        with self._nested():
            tok = self._peek()
            if tok.is_keyword("async") or (
                tok.kind == TokenKind.LPAR and self._arrow_follows(self.pos)
            ):
                return self._arrow_type()
            expr = self._union()
            if self._at(TokenKind.ARROW):
                raise DanglingArrow(
                    "'->' must follow a parenthesized argument list",
                    self._peek().span,
                    source=self.source,
                )
            return expr

    def _arrow_type(self) -> CallableType:
        start = self._peek()
        is_async = False
        if start.is_keyword("async"):
            self._advance()
            is_async = True
            if not self._at(TokenKind.LPAR):
                tok = self._peek()
                raise InvalidSyntax(
                    "expected '(' after 'async'", tok.span, source=self.source
                )

        arguments, _ = self._argument_list()
        if not self._at(TokenKind.ARROW):
            raise MissingReturnArrow(
                "argument list must be followed by '->' and a return type",
                self._span_from(start),
                source=self.source,
            )
        arrow = self._advance()
        if self._peek().kind in _RETURN_TERMINATORS:
            raise DanglingArrow(
                "'->' must be followed by a return type", arrow.span, source=self.source
            )
        returns = self.type_expr()
        return CallableType(arguments, returns, is_async, span=self._span_from(start))

    def _argument_list(self) -> tuple[CallableTypeExpr, bool]:
        """Parse `( ... )`. Returns the argument form and whether it had a trailing comma."""
        lpar = self._expect(TokenKind.LPAR, "'('")

        if self._at(TokenKind.RPAR):
            self._advance()
            return PositionalArguments((), span=self._span_from(lpar)), False

        if self._at(TokenKind.COMMA):
            raise InvalidTrailingComma(
                "trailing comma is not allowed in an empty argument list",
                self._peek().span,
                source=self.source,
            )

        if self._at(TokenKind.ELLIPSIS):
            wildcard = self._advance()
            trailing = False
            if self._at(TokenKind.COMMA):
                self._advance()
                trailing = True
            if not self._at(TokenKind.RPAR):
                raise MalformedArgumentList(
                    "'...' must be the only entry in an argument list",
                    wildcard.span,
                    source=self.source,
                )
            self._advance()
            return AnyArguments(span=self._span_from(lpar)), trailing

        entries: list[TypeExpr] = []
        param_spec: ParamSpecRef | None = None
        unpack: Unpack | None = None
        trailing = False
        while True:
            tok = self._peek()
            if tok.kind == TokenKind.DOUBLESTAR:
                ref = self._param_spec()
                if param_spec is not None:
                    raise MisplacedParameterSpecification(
                        "only one '**' parameter specification is allowed",
                        tok.span,
                        source=self.source,
                    )
                if unpack is not None:
                    raise MalformedArgumentList(
                        "an unpacked entry cannot be combined with a '**' parameter specification",
                        unpack.span or tok.span,
                        source=self.source,
                    )
                param_spec = ref
            elif param_spec is not None:
                raise MisplacedParameterSpecification(
                    "'**' parameter specification must be the last entry",
                    param_spec.span or tok.span,
                    source=self.source,
                )
            elif tok.kind == TokenKind.ELLIPSIS:
                raise UnexpectedWildcardAsElementType(
                    "'...' cannot be used as an argument type; "
                    "write '(...) -> R' to accept any arguments",
                    tok.span,
                    source=self.source,
                )
            elif tok.kind == TokenKind.STAR:
                entry = self._unpack()
                if unpack is not None:
                    raise MalformedArgumentList(
                        "only one unpacked entry is allowed in an argument list",
                        tok.span,
                        source=self.source,
                    )
                unpack = entry
                entries.append(entry)
            else:
                entries.append(self.type_expr())

            if not self._at(TokenKind.COMMA):
                break
            self._advance()
            if self._at(TokenKind.RPAR):
                trailing = True
                break

        self._expect(TokenKind.RPAR, "',' or ')'")
        span = self._span_from(lpar)
        if param_spec is not None:
            return Concatenation(tuple(entries), param_spec, span=span), trailing
        return PositionalArguments(tuple(entries), span=span), trailing

    def _param_spec(self) -> ParamSpecRef:
        star = self._advance()
        if not self._at(TokenKind.NAME):
            tok = self._peek()
            raise InvalidSyntax(
                "expected a parameter specification name after '**'",
                tok.span,
                source=self.source,
            )
        name = self._dotted_name()
        return ParamSpecRef(name, span=self._span_from(star))

    def _unpack(self) -> Unpack:
        with self._nested():
            star = self._advance()
            if self._at(TokenKind.STAR) or self._at(TokenKind.DOUBLESTAR):
                raise InvalidSyntax(
                    "unexpected '*' after '*'", self._peek().span, source=self.source
                )
            value = self._primary()
            return Unpack(value, span=self._span_from(star))

    def _union(self) -> TypeExpr:
        start = self._peek()
        left = self._primary()
        while self._at(TokenKind.VBAR):
            self._advance()
            right = self._primary()
            left = Union(left, right, span=self._span_from(start))
        return left

    def _primary(self) -> TypeExpr:
        tok = self._peek()
        node: TypeExpr
        if tok.kind == TokenKind.NAME:
            if tok.text == "async":
                raise UnparenthesizedArrow(
                    "an arrow type used as an operand must be parenthesized",
                    tok.span,
                    source=self.source,
                )
            if tok.text in _KEYWORD_CONSTANTS:
                self._advance()
                node = Constant(_KEYWORD_CONSTANTS[tok.text], span=tok.span)
            else:
                node = self._dotted_name()
        elif tok.kind in (TokenKind.NUMBER, TokenKind.STRING):
            self._advance()
            node = Constant(self._literal(tok), span=tok.span)
        elif tok.kind == TokenKind.MINUS:
            self._advance()
            num = self._expect(TokenKind.NUMBER, "a number after '-'")
            node = Constant(-self._literal(num), span=self._span_from(tok))
        elif tok.kind == TokenKind.LPAR:
            if self._arrow_follows(self.pos):
                raise UnparenthesizedArrow(
                    "an arrow type used as an operand must be parenthesized",
                    tok.span,
                    source=self.source,
                )
            node = self._group()
        elif tok.kind == TokenKind.LSQB:
            node = self._type_list()
        elif tok.kind == TokenKind.ELLIPSIS:
            raise UnexpectedWildcardAsElementType(
                "'...' is not a valid type here", tok.span, source=self.source
            )
        elif tok.kind == TokenKind.STAR:
            raise InvalidSyntax(
                "unpacked types are only allowed in argument lists, type lists and subscripts",
                tok.span,
                source=self.source,
            )
        elif tok.kind == TokenKind.DOUBLESTAR:
            raise MisplacedParameterSpecification(
                "'**' parameter specification is only allowed in an argument list",
                tok.span,
                source=self.source,
            )
        elif tok.kind == TokenKind.ARROW:
            raise DanglingArrow(
                "'->' must follow a parenthesized argument list",
                tok.span,
                source=self.source,
            )
        elif tok.kind == TokenKind.END:
            raise InvalidSyntax(
                "expected a type expression, got end of input",
                tok.span,
                source=self.source,
            )
        else:
            raise InvalidSyntax(
                f"expected a type expression, got {tok.text!r}",
                tok.span,
                source=self.source,
            )

        while self._at(TokenKind.LSQB):
            node = self._subscript(node, tok)
        return node

    def _group(self) -> TypeExpr:
        start = self._peek()
        arguments, trailing = self._argument_list()
        if (
            isinstance(arguments, PositionalArguments)
            and len(arguments.types) == 1
            and not trailing
            and not isinstance(arguments.types[0], Unpack)
        ):
            return arguments.types[0]
        raise MissingReturnArrow(
            "parenthesized argument list must be followed by '->' and a return type",
            self._span_from(start),
            source=self.source,
        )

    def _type_list(self) -> TypeList:
        lsqb = self._advance()
        if self._at(TokenKind.RSQB):
            self._advance()
            return TypeList((), span=self._span_from(lsqb))
        if self._at(TokenKind.COMMA):
            raise InvalidTrailingComma(
                "trailing comma is not allowed in an empty type list",
                self._peek().span,
                source=self.source,
            )

        items: list[TypeExpr] = []
        seen_unpack = False
        while True:
            tok = self._peek()
            if tok.kind == TokenKind.STAR:
                if seen_unpack:
                    raise MalformedArgumentList(
                        "only one unpacked entry is allowed in a type list",
                        tok.span,
                        source=self.source,
                    )
                seen_unpack = True
                items.append(self._unpack())
            elif tok.kind == TokenKind.ELLIPSIS:
                raise UnexpectedWildcardAsElementType(
                    "'...' cannot be used as a type list entry",
                    tok.span,
                    source=self.source,
                )
            else:
                items.append(self.type_expr())
            if not self._at(TokenKind.COMMA):
                break
            self._advance()
            if self._at(TokenKind.RSQB):
                break

        self._expect(TokenKind.RSQB, "',' or ']'")
        return TypeList(tuple(items), span=self._span_from(lsqb))

    def _subscript(self, value: TypeExpr, start: Token) -> Subscript:
        lsqb = self._advance()
        if self._at(TokenKind.RSQB):
            raise InvalidSyntax("empty subscript", lsqb.span, source=self.source)

        items: list[TypeExpr] = []
        while True:
            items.append(self._subscript_element())
            if not self._at(TokenKind.COMMA):
                break
            self._advance()
            if self._at(TokenKind.RSQB):
                break

        self._expect(TokenKind.RSQB, "',' or ']'")
        return Subscript(value, tuple(items), span=self._span_from(start))

    def _subscript_element(self) -> TypeExpr:
        tok = self._peek()
        if tok.kind == TokenKind.ELLIPSIS:
            self._advance()
            return Wildcard(span=tok.span)
        if tok.kind == TokenKind.STAR:
            return self._unpack()
        if (
            tok.kind == TokenKind.LPAR
            and self._peek(1).kind == TokenKind.RPAR
            and self._peek(2).kind != TokenKind.ARROW
        ):
            # tuple[()]
            self._advance()
            self._advance()
            return Constant((), span=self._span_from(tok))
        return self.type_expr()

    def _dotted_name(self) -> Name:
        first = self._expect_name("a name")
        parts = [first.text]
        while self._at(TokenKind.DOT):
            self._advance()
            parts.append(self._expect_name("a name after '.'").text)
        return Name(".".join(parts), span=self._span_from(first))

    def _literal(self, tok: Token) -> str | bytes | int | float:
        try:
            value = ast.literal_eval(tok.text)
        except (ValueError, SyntaxError):
            raise InvalidSyntax(
                f"invalid literal {tok.text!r}", tok.span, source=self.source
            ) from None
        if not isinstance(value, (str, bytes, int, float)):
            raise InvalidSyntax(
                f"unsupported literal {tok.text!r}", tok.span, source=self.source
            )
        if isinstance(value, float) and not math.isfinite(value):
            raise InvalidSyntax(
                f"literal {tok.text!r} overflows to {value!r}", tok.span, source=self.source
            )
        return value

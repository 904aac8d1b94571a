# filename: calltype/errors.py

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .lexer import Span


class ErrorKind(str, Enum):
    MALFORMED_ARGUMENT_LIST = "malformed-argument-list"
    INVALID_TRAILING_COMMA = "invalid-trailing-comma"
    MISPLACED_PARAMETER_SPECIFICATION = "misplaced-parameter-specification"
    UNEXPECTED_WILDCARD = "unexpected-wildcard"
    MISSING_RETURN_ARROW = "missing-return-arrow"
    DANGLING_ARROW = "dangling-arrow"
    UNPARENTHESIZED_ARROW = "unparenthesized-arrow"
    NESTING_TOO_DEEP = "nesting-too-deep"
    INVALID_SYNTAX = "invalid-syntax"


class TypeSyntaxError(SyntaxError):
    """A type annotation that the recognizer rejects.

    `span` points at the offending token. When the source text is known the
    standard `SyntaxError` fields (`lineno`, `offset`, `text`, ...) are filled
    in too, so tracebacks print a caret under the token.
    """

    kind: ErrorKind = ErrorKind.INVALID_SYNTAX

    def __init__(
        self,
        message: str,
        span: Span,
        *,
        source: str | None = None,
        filename: str = "<annotation>",
    ) -> None:
        text = None
        end_offset = span.column + max(span.end - span.start, 1)
        if source is not None:
            lines = source.splitlines() or [""]
            if span.line - 1 < len(lines):
                text = lines[span.line - 1]
        super().__init__(
            message, (filename, span.line, span.column, text, span.line, end_offset)
        )
        self.span = span

    def describe(self) -> str:
        return f"{self.span.line}:{self.span.column}: {self.kind.value}: {self.msg}"


class MalformedArgumentList(TypeSyntaxError):
    kind = ErrorKind.MALFORMED_ARGUMENT_LIST


class InvalidTrailingComma(TypeSyntaxError):
    kind = ErrorKind.INVALID_TRAILING_COMMA


class MisplacedParameterSpecification(TypeSyntaxError):
    kind = ErrorKind.MISPLACED_PARAMETER_SPECIFICATION


class UnexpectedWildcardAsElementType(TypeSyntaxError):
    kind = ErrorKind.UNEXPECTED_WILDCARD


class MissingReturnArrow(TypeSyntaxError):
    kind = ErrorKind.MISSING_RETURN_ARROW


class DanglingArrow(TypeSyntaxError):
    kind = ErrorKind.DANGLING_ARROW


class UnparenthesizedArrow(TypeSyntaxError):
    kind = ErrorKind.UNPARENTHESIZED_ARROW


class NestingTooDeep(TypeSyntaxError):
    kind = ErrorKind.NESTING_TOO_DEEP


class InvalidSyntax(TypeSyntaxError):
    kind = ErrorKind.INVALID_SYNTAX

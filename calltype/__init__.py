# filename: calltype/__init__.py

from __future__ import annotations

from .errors import (
    DanglingArrow,
    ErrorKind,
    InvalidSyntax,
    InvalidTrailingComma,
    MalformedArgumentList,
    MisplacedParameterSpecification,
    MissingReturnArrow,
    NestingTooDeep,
    TypeSyntaxError,
    UnexpectedWildcardAsElementType,
    UnparenthesizedArrow,
)
from .evaluate import evaluate, get_annotations
from .introspect import INTROSPECTION_VERSION, CallableSignature, iter_callables, signature
from .lexer import Span, Token, TokenKind, tokenize
from .lower import CanonicalNames, lower
from .nodes import (
    AnyArguments,
    CallableType,
    Concatenation,
    Constant,
    Name,
    ParamSpecRef,
    PositionalArguments,
    Subscript,
    TypeList,
    Union,
    Unpack,
    Wildcard,
    validate_tree,
)
from .parser import parse_tokens, parse_type
from .render import render

__all__ = [
    "AnyArguments",
    "CallableSignature",
    "CallableType",
    "CanonicalNames",
    "Concatenation",
    "Constant",
    "DanglingArrow",
    "ErrorKind",
    "INTROSPECTION_VERSION",
    "InvalidSyntax",
    "InvalidTrailingComma",
    "MalformedArgumentList",
    "MisplacedParameterSpecification",
    "MissingReturnArrow",
    "Name",
    "NestingTooDeep",
    "ParamSpecRef",
    "PositionalArguments",
    "Span",
    "Subscript",
    "Token",
    "TokenKind",
    "TypeList",
    "TypeSyntaxError",
    "UnexpectedWildcardAsElementType",
    "Union",
    "Unpack",
    "UnparenthesizedArrow",
    "Wildcard",
    "evaluate",
    "get_annotations",
    "iter_callables",
    "lower",
    "parse_tokens",
    "parse_type",
    "render",
    "signature",
    "tokenize",
    "validate_tree",
]

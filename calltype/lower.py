# filename: calltype/lower.py

from __future__ import annotations

import logging
from dataclasses import dataclass

from .nodes import (
    AnyArguments,
    CallableType,
    CallableTypeExpr,
    Concatenation,
    Name,
    PositionalArguments,
    Subscript,
    TypeExpr,
    TypeList,
    Union,
    Unpack,
    Wildcard,
    validate_tree,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CanonicalNames:
    """Spelling of the generic forms produced by `lower`."""

    callable: str = "Callable"
    concatenate: str = "Concatenate"
    awaitable: str = "Awaitable"

    @classmethod
    def qualified(cls, module: str = "typing") -> "CanonicalNames":
        return cls(
            callable=f"{module}.Callable",
            concatenate=f"{module}.Concatenate",
            awaitable=f"{module}.Awaitable",
        )


DEFAULT_NAMES = CanonicalNames()


def lower(tree: TypeExpr, names: CanonicalNames = DEFAULT_NAMES) -> TypeExpr:
    """
    Rewrite every arrow type in `tree` into the indexed generic form.

    `(int, str) -> bool` becomes `Callable[[int, str], bool]`, `(**P) -> R`
    becomes `Callable[P, R]`, `(int, **P) -> R` becomes
    `Callable[Concatenate[int, P], R]` and `async (...) -> R` wraps the return
    type in `Awaitable[R]`. The result contains no arrow nodes.
    """
    if not isinstance(names, CanonicalNames):
        raise TypeError(f"names must be CanonicalNames, got {type(names)!r}")
    validate_tree(tree)
    out = _lower(tree, names)
    logger.debug("lowered %r", out)
    return out


def _lower(node: TypeExpr, names: CanonicalNames) -> TypeExpr:
    if isinstance(node, CallableType):
        returns = _lower(node.returns, names)
        if node.is_async:
            returns = Subscript(Name(names.awaitable), (returns,), span=node.returns.span)
        arguments = _lower_arguments(node.arguments, names)
        return Subscript(Name(names.callable), (arguments, returns), span=node.span)

    if isinstance(node, Subscript):
        return Subscript(
            _lower(node.value, names),
            tuple(_lower(item, names) for item in node.index),
            span=node.span,
        )

    if isinstance(node, Union):
        return Union(_lower(node.left, names), _lower(node.right, names), span=node.span)

    if isinstance(node, TypeList):
        return TypeList(tuple(_lower(item, names) for item in node.items), span=node.span)

    if isinstance(node, Unpack):
        return Unpack(_lower(node.value, names), span=node.span)

    return node


def _lower_arguments(args: CallableTypeExpr, names: CanonicalNames) -> TypeExpr:
    if isinstance(args, AnyArguments):
        return Wildcard(span=args.span)

    if isinstance(args, PositionalArguments):
        return TypeList(tuple(_lower(t, names) for t in args.types), span=args.span)

    if isinstance(args, Concatenation):
        spec = Name(args.param_spec.name.id, span=args.param_spec.span)
        if not args.prefix:
            return spec
        prefix = tuple(_lower(t, names) for t in args.prefix)
        return Subscript(Name(names.concatenate), (*prefix, spec), span=args.span)

    raise TypeError(f"unknown argument list: {type(args)!r}")

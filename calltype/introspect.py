# filename: calltype/introspect.py

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

from .analysis import walk
from .nodes import (
    AnyArguments,
    CallableType,
    Concatenation,
    PositionalArguments,
    TypeExpr,
    validate_tree,
)
from .render import render

# Bump when a field is added, removed or changes meaning.
INTROSPECTION_VERSION = 1

ArgumentKind: TypeAlias = Literal["any", "positional", "concatenate"]


@dataclass(frozen=True, slots=True)
class CallableSignature:
    """Stable, queryable view of one arrow type.

    `parameters` holds the positional parameter types (the prefix for the
    "concatenate" kind, empty for "any"), `param_spec` the name of the
    trailing `**P` entry.
    """

    kind: ArgumentKind
    parameters: tuple[TypeExpr, ...]
    param_spec: str | None
    returns: TypeExpr
    is_async: bool
    version: int = INTROSPECTION_VERSION

    @property
    def accepts_any_arguments(self) -> bool:
        return self.kind == "any"

    @property
    def arity(self) -> int | None:
        """Number of fixed positional parameters, None when open-ended."""
        if self.kind != "positional":
            return None
        return len(self.parameters)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "kind": self.kind,
            "parameters": [render(p) for p in self.parameters],
            "param_spec": self.param_spec,
            "returns": render(self.returns),
            "is_async": self.is_async,
        }


def signature(node: CallableType) -> CallableSignature:
    if not isinstance(node, CallableType):
        raise TypeError(f"signature() expects a CallableType, got {type(node)!r}")
    validate_tree(node)

    args = node.arguments
    if isinstance(args, AnyArguments):
        return CallableSignature("any", (), None, node.returns, node.is_async)
    if isinstance(args, PositionalArguments):
        return CallableSignature("positional", args.types, None, node.returns, node.is_async)
    if isinstance(args, Concatenation):
        return CallableSignature(
            "concatenate",
            args.prefix,
            args.param_spec.name.id,
            node.returns,
            node.is_async,
        )
    raise TypeError(f"unknown argument list: {type(args)!r}")


def iter_callables(tree: TypeExpr) -> Iterator[CallableType]:
    """Every arrow type in `tree`, outermost first."""
    for node in walk(tree):
        if isinstance(node, CallableType):
            yield node


def describe(tree: TypeExpr) -> list[dict[str, Any]]:
    return [signature(node).to_dict() for node in iter_callables(tree)]

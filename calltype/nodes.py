# filename: calltype/nodes.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeAlias, Union as _U

from .lexer import Span

ConstantValue: TypeAlias = _U[str, bytes, int, float, bool, None, tuple[()]]


@dataclass(frozen=True, slots=True)
class Name:
    id: str
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Constant:
    # Equality goes through `_key` so that 1, 1.0 and True stay distinct.
    value: ConstantValue = field(compare=False)
    span: Span | None = field(default=None, compare=False, repr=False)
    _key: tuple[type, Any] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_key", (type(self.value), self.value))


@dataclass(frozen=True, slots=True)
class Wildcard:
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class TypeList:
    items: tuple["TypeExpr", ...]
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Subscript:
    value: "TypeExpr"
    index: tuple["TypeExpr", ...]
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Union:
    left: "TypeExpr"
    right: "TypeExpr"
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Unpack:
    value: "TypeExpr"
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class ParamSpecRef:
    name: Name
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class AnyArguments:
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class PositionalArguments:
    types: tuple["TypeExpr", ...]
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Concatenation:
    prefix: tuple["TypeExpr", ...]
    param_spec: ParamSpecRef
    span: Span | None = field(default=None, compare=False, repr=False)


CallableTypeExpr: TypeAlias = _U[AnyArguments, PositionalArguments, Concatenation]


@dataclass(frozen=True, slots=True)
class CallableType:
    arguments: CallableTypeExpr
    returns: "TypeExpr"
    is_async: bool = False
    span: Span | None = field(default=None, compare=False, repr=False)


TypeExpr: TypeAlias = _U[
    Name,
    Constant,
    Wildcard,
    TypeList,
    Subscript,
    Union,
    Unpack,
    ParamSpecRef,
    CallableType,
]

TYPE_EXPR_NODES = (
    Name,
    Constant,
    Wildcard,
    TypeList,
    Subscript,
    Union,
    Unpack,
    ParamSpecRef,
    CallableType,
)
ARGUMENT_NODES = (AnyArguments, PositionalArguments, Concatenation)


def children(node: Any) -> tuple[Any, ...]:
    """Direct child nodes, in source order."""
    if isinstance(node, TypeList):
        return node.items
    if isinstance(node, Subscript):
        return (node.value, *node.index)
    if isinstance(node, Union):
        return (node.left, node.right)
    if isinstance(node, Unpack):
        return (node.value,)
    if isinstance(node, ParamSpecRef):
        return (node.name,)
    if isinstance(node, PositionalArguments):
        return node.types
    if isinstance(node, Concatenation):
        return (*node.prefix, node.param_spec)
    if isinstance(node, CallableType):
        return (node.arguments, node.returns)
    return ()


def validate_tree(tree: Any, *, fragment: bool = False) -> None:
    """Check the structural invariants of a type tree.

    The recognizer only ever produces valid trees; this guards trees built by
    hand before they reach `lower` or `render`.
    """

    def require(cond: bool, msg: str) -> None:
        if not cond:
            raise ValueError(f"invalid type tree: {msg}")

    def check_type(node: Any, *, where: str, allow_unpack: bool = False) -> None:
        require(
            isinstance(node, TYPE_EXPR_NODES),
            f"{where} must be a type expression, got {type(node)!r}",
        )
        require(not isinstance(node, Wildcard), f"'...' is not a valid {where}")
        require(
            allow_unpack or not isinstance(node, Unpack),
            f"unpacked entry is not a valid {where}",
        )
        require(
            not isinstance(node, ParamSpecRef),
            f"'**' parameter specification is not a valid {where}",
        )
        visit(node)

    def check_entries(items: tuple[Any, ...], *, where: str) -> None:
        require(isinstance(items, tuple), f"{where} must be a tuple")
        unpacks = sum(1 for item in items if isinstance(item, Unpack))
        require(unpacks <= 1, f"{where} has more than one unpacked entry")
        for item in items:
            check_type(item, where=f"{where} entry", allow_unpack=True)

    def visit(node: Any) -> None:
        if isinstance(node, Name):
            require(
                isinstance(node.id, str)
                and bool(node.id)
                and all(part.isidentifier() for part in node.id.split(".")),
                f"bad name: {node.id!r}",
            )
            return

        if isinstance(node, Constant):
            require(
                node.value is None
                or node.value == ()
                or isinstance(node.value, (str, bytes, int, float)),
                f"unsupported constant: {node.value!r}",
            )
            return

        if isinstance(node, Wildcard):
            return

        if isinstance(node, TypeList):
            check_entries(node.items, where="type list")
            return

        if isinstance(node, Subscript):
            check_type(node.value, where="subscript value")
            require(isinstance(node.index, tuple), "subscript index must be a tuple")
            require(len(node.index) > 0, "subscript index must not be empty")
            for item in node.index:
                require(
                    isinstance(item, TYPE_EXPR_NODES),
                    f"subscript element must be a type expression, got {type(item)!r}",
                )
                require(
                    not isinstance(item, ParamSpecRef),
                    "'**' parameter specification is not a valid subscript element",
                )
                visit(item)
            return

        if isinstance(node, Union):
            check_type(node.left, where="union operand")
            check_type(node.right, where="union operand")
            return

        if isinstance(node, Unpack):
            check_type(node.value, where="unpack operand")
            return

        if isinstance(node, ParamSpecRef):
            require(isinstance(node.name, Name), "parameter specification must be a Name")
            visit(node.name)
            return

        if isinstance(node, CallableType):
            require(isinstance(node.is_async, bool), "is_async must be a bool")
            args = node.arguments
            if isinstance(args, AnyArguments):
                pass
            elif isinstance(args, PositionalArguments):
                check_entries(args.types, where="argument list")
            elif isinstance(args, Concatenation):
                check_entries(args.prefix, where="argument list")
                require(
                    not any(isinstance(t, Unpack) for t in args.prefix),
                    "unpacked entry cannot precede a parameter specification",
                )
                require(
                    isinstance(args.param_spec, ParamSpecRef),
                    "concatenation must end in a ParamSpecRef",
                )
                visit(args.param_spec)
            else:
                require(False, f"unknown argument list: {type(args)!r}")
            check_type(node.returns, where="return type")
            return

        require(False, f"unknown node: {type(node)!r}")

    # A fragment may also be a single subscript element or argument entry.
    if fragment and isinstance(tree, (Wildcard, Unpack, ParamSpecRef)):
        visit(tree)
        return
    check_type(tree, where="type expression")

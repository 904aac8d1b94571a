# filename: calltype/render.py

from __future__ import annotations

from typing import Any

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
    validate_tree,
)


def render(tree: TypeExpr) -> str:
    """Render a tree as annotation source text.

    Arrow types stay in arrow form; lower the tree first to get the generic
    spelling. Parentheses are only emitted where re-parsing needs them.
    """
    validate_tree(tree, fragment=True)
    return _render(tree)


def _const_literal(v: Any) -> str:
    if v is None or isinstance(v, bool):
        return str(v)
    if v == ():
        return "()"
    if isinstance(v, (str, bytes, int, float)):
        return repr(v)
    raise TypeError(f"unsupported constant: {type(v)!r}")


def _operand(node: TypeExpr, *, tight: bool = False) -> str:
    # `tight` operands bind closer than `|`: subscript values and unpacks.
    if isinstance(node, CallableType) or (tight and isinstance(node, Union)):
        return f"({_render(node)})"
    return _render(node)


def _render(node: TypeExpr) -> str:
    if isinstance(node, Name):
        return node.id

    if isinstance(node, Constant):
        return _const_literal(node.value)

    if isinstance(node, Wildcard):
        return "..."

    if isinstance(node, TypeList):
        return "[" + ", ".join(_render(item) for item in node.items) + "]"

    if isinstance(node, Subscript):
        index = ", ".join(_render(item) for item in node.index)
        return f"{_operand(node.value, tight=True)}[{index}]"

    if isinstance(node, Union):
        right = _operand(node.right)
        if isinstance(node.right, Union):
            right = f"({right})"
        return f"{_operand(node.left)} | {right}"

    if isinstance(node, Unpack):
        return f"*{_operand(node.value, tight=True)}"

    if isinstance(node, ParamSpecRef):
        return f"**{node.name.id}"

    if isinstance(node, CallableType):
        prefix = "async " if node.is_async else ""
        return f"{prefix}({_render_arguments(node.arguments)}) -> {_render(node.returns)}"

    raise TypeError(f"unsupported node: {type(node)!r}")


def _render_arguments(args: CallableTypeExpr) -> str:
    if isinstance(args, AnyArguments):
        return "..."
    if isinstance(args, PositionalArguments):
        return ", ".join(_render(t) for t in args.types)
    if isinstance(args, Concatenation):
        return ", ".join([*(_render(t) for t in args.prefix), _render(args.param_spec)])
    raise TypeError(f"unsupported argument list: {type(args)!r}")

# filename: calltype/evaluate.py

from __future__ import annotations

import builtins
import inspect
import logging
import sys
import types
import typing
from collections import ChainMap
from collections.abc import Mapping
from typing import Any

from .analysis import referenced_names
from .lower import DEFAULT_NAMES, CanonicalNames, lower
from .nodes import (
    Constant,
    Name,
    Subscript,
    TypeExpr,
    TypeList,
    Union,
    Unpack,
    Wildcard,
)
from .parser import parse_type

logger = logging.getLogger(__name__)

_DEFAULT_SCOPE: dict[str, Any] = {
    **vars(builtins),
    "typing": typing,
    "Callable": typing.Callable,
    "Concatenate": typing.Concatenate,
    "Awaitable": typing.Awaitable,
}


def evaluate(
    tree: TypeExpr,
    globalns: Mapping[str, Any] | None = None,
    localns: Mapping[str, Any] | None = None,
    *,
    names: CanonicalNames = DEFAULT_NAMES,
) -> Any:
    """
    Build the runtime `typing` object for a type tree.

    The tree is lowered first, so `(int) -> str` evaluates to exactly what
    `typing.Callable[[int], str]` evaluates to. Names resolve in `localns`,
    then `globalns`, then builtins and the canonical `typing` forms.
    """
    canonical = lower(tree, names)
    scope = ChainMap(dict(localns or {}), dict(globalns or {}), _DEFAULT_SCOPE)

    missing = sorted(
        {name.split(".")[0] for name in referenced_names(canonical)} - set(scope)
    )
    if missing:
        raise NameError(
            "undefined name(s) in type expression: " + ", ".join(map(repr, missing))
        )
    return _eval(canonical, scope)


def _eval(node: TypeExpr, scope: Mapping[str, Any]) -> Any:
    if isinstance(node, Name):
        head, *rest = node.id.split(".")
        obj = scope[head]
        for attr in rest:
            obj = getattr(obj, attr)
        return obj

    if isinstance(node, Constant):
        return node.value

    if isinstance(node, Wildcard):
        return Ellipsis

    if isinstance(node, TypeList):
        return [_eval(item, scope) for item in node.items]

    if isinstance(node, Subscript):
        value = _eval(node.value, scope)
        items = tuple(_eval(item, scope) for item in node.index)
        return value[items[0] if len(items) == 1 else items]

    if isinstance(node, Union):
        return typing.Union[_eval(node.left, scope), _eval(node.right, scope)]

    if isinstance(node, Unpack):
        return typing.Unpack[_eval(node.value, scope)]

    raise TypeError(f"cannot evaluate {type(node).__name__} nodes")


def get_annotations(
    obj: Any,
    *,
    globalns: Mapping[str, Any] | None = None,
    localns: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Like `inspect.get_annotations`, with string annotations read as arrow syntax.

    Annotations stringified by `from __future__ import annotations` keep the
    quotes of an already quoted annotation; those are unwrapped once.
    """
    raw = inspect.get_annotations(obj)
    if globalns is None:
        globalns = _globals_of(obj)

    out: dict[str, Any] = {}
    for name, ann in raw.items():
        if not isinstance(ann, str):
            out[name] = ann
            continue
        tree = parse_type(ann)
        if isinstance(tree, Constant) and isinstance(tree.value, str):
            tree = parse_type(tree.value)
        out[name] = evaluate(tree, globalns, localns)
        logger.debug("annotation %s: %r -> %r", name, ann, out[name])
    return out


def _globals_of(obj: Any) -> Mapping[str, Any]:
    if isinstance(obj, types.ModuleType):
        return vars(obj)
    if isinstance(obj, type):
        module = sys.modules.get(obj.__module__)
        return vars(module) if module is not None else {}
    fn = inspect.unwrap(obj) if callable(obj) else obj
    return getattr(fn, "__globals__", {})

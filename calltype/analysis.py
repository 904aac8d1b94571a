# filename: calltype/analysis.py

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from .nodes import Name, ParamSpecRef, children


def walk(tree: Any) -> Iterator[Any]:
    stack = [tree]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(children(node)))


def referenced_names(tree: Any) -> frozenset[str]:
    return frozenset(node.id for node in walk(tree) if isinstance(node, Name))


def param_spec_names(tree: Any) -> frozenset[str]:
    return frozenset(node.name.id for node in walk(tree) if isinstance(node, ParamSpecRef))

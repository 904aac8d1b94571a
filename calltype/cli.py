# filename: calltype/cli.py

from __future__ import annotations

import argparse
import ast
import json
import logging
import pathlib
import sys
from collections.abc import Iterator

from .errors import TypeSyntaxError
from .introspect import describe
from .lower import DEFAULT_NAMES, CanonicalNames, lower
from .parser import parse_type
from .render import render

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="calltype",
        description="Parse and check arrow-style callable type annotations.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_parse = sub.add_parser("parse", help="parse one annotation and print it")
    p_parse.add_argument("expr", help="annotation text, e.g. '(int, str) -> bool'")
    mode = p_parse.add_mutually_exclusive_group()
    mode.add_argument(
        "--canonical", action="store_true", help="print the Callable[...] spelling"
    )
    mode.add_argument(
        "--describe", action="store_true", help="print every arrow type as JSON"
    )
    p_parse.add_argument(
        "--qualified",
        action="store_true",
        help="spell canonical forms as typing.Callable etc.",
    )
    p_parse.add_argument("--max-depth", type=int, default=None)

    p_check = sub.add_parser("check", help="check string annotations in Python files")
    p_check.add_argument("paths", nargs="+", type=pathlib.Path)
    p_check.add_argument("--max-depth", type=int, default=None)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "parse":
        return _cmd_parse(args)
    return _cmd_check(args)


def format_error(path: str, err: TypeSyntaxError) -> str:
    lines = [f"{path}:{err.describe()}"]
    if err.text is not None:
        width = max(min(err.span.end - err.span.start, len(err.text) - err.span.column + 1), 1)
        lines.append(f"    {err.text}")
        lines.append("    " + " " * (err.span.column - 1) + "^" * width)
    return "\n".join(lines)


def _cmd_parse(args: argparse.Namespace) -> int:
    try:
        tree = parse_type(args.expr, max_depth=args.max_depth)
    except TypeSyntaxError as e:
        print(format_error("<expr>", e), file=sys.stderr)
        return 1

    if args.describe:
        print(json.dumps(describe(tree), indent=2))
    elif args.canonical:
        names = CanonicalNames.qualified() if args.qualified else DEFAULT_NAMES
        print(render(lower(tree, names)))
    else:
        print(render(tree))
    return 0


def _iter_sources(paths: list[pathlib.Path]) -> Iterator[pathlib.Path]:
    for path in paths:
        if path.is_dir():
            yield from sorted(path.rglob("*.py"))
        else:
            yield path


def _string_annotations(module: ast.Module) -> Iterator[ast.Constant]:
    for node in ast.walk(module):
        if isinstance(node, ast.arg):
            ann = node.annotation
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            ann = node.returns
        elif isinstance(node, ast.AnnAssign):
            ann = node.annotation
        else:
            continue
        if isinstance(ann, ast.Constant) and isinstance(ann.value, str):
            yield ann


def _cmd_check(args: argparse.Namespace) -> int:
    errors = 0
    checked = 0
    for path in _iter_sources(args.paths):
        try:
            module = ast.parse(path.read_bytes(), filename=str(path))
        except (OSError, SyntaxError, ValueError) as e:
            print(f"{path}: cannot read module: {e}", file=sys.stderr)
            errors += 1
            continue

        for ann in _string_annotations(module):
            if "->" not in ann.value:
                continue
            checked += 1
            try:
                parse_type(ann.value, max_depth=args.max_depth)
            except TypeSyntaxError as e:
                errors += 1
                print(
                    f"{path}:{ann.lineno}:{ann.col_offset + 1}: {e.kind.value}: {e.msg} "
                    f"(annotation column {e.span.column})",
                    file=sys.stderr,
                )
        logger.debug("checked %s", path)

    if errors:
        print(f"{errors} error(s), {checked} arrow annotation(s) checked", file=sys.stderr)
        return 1
    print(f"ok: {checked} arrow annotation(s) checked")
    return 0

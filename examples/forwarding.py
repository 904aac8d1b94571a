# filename: examples/forwarding.py

from __future__ import annotations

import argparse
import asyncio
import functools
import json
from typing import ParamSpec

import calltype
from calltype.introspect import describe

P = ParamSpec("P")


def retrying(fn: "async (**P) -> str", attempts: int) -> "async (**P) -> str":
    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        last: Exception | None = None
        for _ in range(attempts):
            try:
                return await fn(*args, **kwargs)
            except ConnectionError as e:
                last = e
        assert last is not None
        raise last

    return wrapper


def with_prefix(fn: "(str, **P) -> str", prefix: str) -> "(**P) -> str":
    def wrapper(*args, **kwargs):
        return fn(prefix, *args, **kwargs)

    return wrapper


async def fetch(url: str, *, timeout: float = 1.0) -> str:
    await asyncio.sleep(0)
    return f"GET {url} ({timeout}s)"


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="arrow callable annotations on ParamSpec forwarding helpers"
    )
    parser.add_argument("--url", default="https://example.invalid/")
    parser.add_argument("--attempts", type=int, default=3)
    parser.add_argument("--json", action="store_true", help="dump introspection as JSON")
    args = parser.parse_args(argv)

    if args.attempts <= 0:
        raise SystemExit("--attempts must be > 0")

    for fn in (retrying, with_prefix):
        print(f"{fn.__name__}:")
        for name, value in calltype.get_annotations(fn).items():
            print(f"  {name}: {value!r}")

    raw = "(str, **P) -> str"
    tree = calltype.parse_type(raw)
    print(f"{raw}  =>  {calltype.render(calltype.lower(tree))}")
    if args.json:
        print(json.dumps(describe(tree), indent=2))

    result = asyncio.run(retrying(fetch, args.attempts)(args.url, timeout=0.5))
    print(result)


if __name__ == "__main__":
    main()

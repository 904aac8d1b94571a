# filename: tests/test_cli.py

from __future__ import annotations

import contextlib
import io
import json
import pathlib
import tempfile
import unittest

from calltype.cli import main


def _run(argv: list[str]) -> tuple[int, str, str]:
    out = io.StringIO()
    err = io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        code = main(argv)
    return code, out.getvalue(), err.getvalue()


class TestParseCommand(unittest.TestCase):
    def test_renders_normalized(self) -> None:
        code, out, _ = _run(["parse", "(int, str,) -> bool"])
        self.assertEqual(code, 0)
        self.assertEqual(out, "(int, str) -> bool\n")

    def test_canonical(self) -> None:
        code, out, _ = _run(["parse", "--canonical", "async (int) -> str"])
        self.assertEqual(code, 0)
        self.assertEqual(out, "Callable[[int], Awaitable[str]]\n")

    def test_canonical_qualified(self) -> None:
        _, out, _ = _run(["parse", "--canonical", "--qualified", "(**P) -> None"])
        self.assertEqual(out, "typing.Callable[P, None]\n")

    def test_describe(self) -> None:
        code, out, _ = _run(["parse", "--describe", "(int) -> str"])
        self.assertEqual(code, 0)
        self.assertEqual(
            json.loads(out),
            [
                {
                    "version": 1,
                    "kind": "positional",
                    "parameters": ["int"],
                    "param_spec": None,
                    "returns": "str",
                    "is_async": False,
                }
            ],
        )

    def test_syntax_error(self) -> None:
        code, out, err = _run(["parse", "(int, ...) -> bool"])
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("<expr>:1:7: unexpected-wildcard:", err)
        self.assertIn("\n          ^^^", err)


class TestCheckCommand(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = pathlib.Path(self._tmp.name)
        (self.root / "good.py").write_text(
            'def f(cb: "(int) -> str") -> "(...) -> None":\n    pass\n',
            encoding="utf-8",
        )

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_clean_file(self) -> None:
        code, out, _ = _run(["check", str(self.root / "good.py")])
        self.assertEqual(code, 0)
        self.assertEqual(out, "ok: 2 arrow annotation(s) checked\n")

    def test_reports_errors_with_location(self) -> None:
        (self.root / "bad.py").write_text(
            'import os\nx: "(,) -> bool"\n', encoding="utf-8"
        )
        code, out, err = _run(["check", str(self.root)])
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("bad.py:2:4: invalid-trailing-comma:", err)
        self.assertIn("1 error(s), 3 arrow annotation(s) checked", err)

    def test_honors_coding_declaration(self) -> None:
        (self.root / "latin.py").write_bytes(
            b"# -*- coding: latin-1 -*-\n# caf\xe9\nx: \"(int) -> str\"\n"
        )
        code, out, _ = _run(["check", str(self.root / "latin.py")])
        self.assertEqual(code, 0)
        self.assertEqual(out, "ok: 1 arrow annotation(s) checked\n")

    def test_undecodable_module_is_reported(self) -> None:
        (self.root / "bytes.py").write_bytes(b"# caf\xe9\nx: \"(int) -> str\"\n")
        (self.root / "nul.py").write_bytes(b"x = 1\x00\n")
        code, out, err = _run(["check", str(self.root)])
        self.assertEqual(code, 1)
        self.assertIn("bytes.py: cannot read module", err)
        self.assertIn("nul.py: cannot read module", err)
        self.assertIn("2 error(s), 2 arrow annotation(s) checked", err)
        self.assertEqual(out, "")

    def test_unreadable_module(self) -> None:
        (self.root / "broken.py").write_text("def f(:\n", encoding="utf-8")
        code, _, err = _run(["check", str(self.root / "broken.py")])
        self.assertEqual(code, 1)
        self.assertIn("cannot read module", err)


if __name__ == "__main__":
    unittest.main()

# filename: tests/test_parser_errors.py

from __future__ import annotations

import unittest

from calltype import (
    DanglingArrow,
    ErrorKind,
    InvalidSyntax,
    InvalidTrailingComma,
    MalformedArgumentList,
    MisplacedParameterSpecification,
    MissingReturnArrow,
    TypeSyntaxError,
    UnexpectedWildcardAsElementType,
    UnparenthesizedArrow,
    parse_type,
)


class _ErrorCase(unittest.TestCase):
    def assertRejected(
        self, source: str, exc: type[TypeSyntaxError], offending: str | None = None
    ) -> TypeSyntaxError:
        with self.assertRaises(exc) as cm:
            parse_type(source)
        err = cm.exception
        if offending is not None:
            self.assertEqual(source[err.span.start : err.span.end], offending)
        return err


class TestWildcard(_ErrorCase):
    def test_wildcard_after_entries_references_wildcard(self) -> None:
        err = self.assertRejected("(int, ...) -> bool", UnexpectedWildcardAsElementType, "...")
        self.assertEqual(err.kind, ErrorKind.UNEXPECTED_WILDCARD)
        self.assertIn("'...'", err.msg)

    def test_wildcard_followed_by_entries(self) -> None:
        err = self.assertRejected("(..., int) -> bool", MalformedArgumentList, "...")
        self.assertEqual(err.kind, ErrorKind.MALFORMED_ARGUMENT_LIST)

    def test_wildcard_with_param_spec(self) -> None:
        self.assertRejected("(..., **P) -> bool", MalformedArgumentList, "...")

    def test_starred_wildcard(self) -> None:
        self.assertRejected("(*...) -> int", UnexpectedWildcardAsElementType, "...")
        self.assertRejected("(**...) -> int", InvalidSyntax, "...")

    def test_wildcard_as_return_type(self) -> None:
        self.assertRejected("(int) -> ...", UnexpectedWildcardAsElementType, "...")

    def test_wildcard_in_type_list(self) -> None:
        self.assertRejected("Callable[[int, ...], str]", UnexpectedWildcardAsElementType, "...")


class TestTrailingComma(_ErrorCase):
    def test_empty_list_with_comma(self) -> None:
        err = self.assertRejected("(,) -> bool", InvalidTrailingComma, ",")
        self.assertEqual(err.kind, ErrorKind.INVALID_TRAILING_COMMA)

    def test_double_comma(self) -> None:
        self.assertRejected("(int,,) -> bool", InvalidSyntax, ",")


class TestParameterSpecification(_ErrorCase):
    def test_not_last(self) -> None:
        err = self.assertRejected("(**P, int) -> bool", MisplacedParameterSpecification, "**P")
        self.assertEqual(err.kind, ErrorKind.MISPLACED_PARAMETER_SPECIFICATION)

    def test_in_the_middle(self) -> None:
        self.assertRejected("(int, **P, str) -> bool", MisplacedParameterSpecification, "**P")

    def test_twice(self) -> None:
        self.assertRejected("(**P, **Q) -> bool", MisplacedParameterSpecification, "**")

    def test_outside_argument_list(self) -> None:
        self.assertRejected("list[**P]", MisplacedParameterSpecification, "**")
        self.assertRejected("(int) -> **P", MisplacedParameterSpecification, "**")

    def test_missing_name(self) -> None:
        self.assertRejected("(**) -> bool", InvalidSyntax, ")")


class TestUnpack(_ErrorCase):
    def test_two_unpacks(self) -> None:
        self.assertRejected("(*Ts, *Us) -> None", MalformedArgumentList, "*")

    def test_unpack_with_param_spec(self) -> None:
        self.assertRejected("(*Ts, **P) -> None", MalformedArgumentList, "*Ts")

    def test_unpack_outside_list(self) -> None:
        self.assertRejected("(int) -> *Ts", InvalidSyntax, "*")


class TestArrows(_ErrorCase):
    def test_missing_return_arrow(self) -> None:
        for source in ["(int, str)", "()", "(int,)", "(...)", "(**P)", "async (int)"]:
            with self.subTest(source=source):
                err = self.assertRejected(source, MissingReturnArrow)
                self.assertEqual(err.kind, ErrorKind.MISSING_RETURN_ARROW)

    def test_missing_return_arrow_in_argument(self) -> None:
        self.assertRejected("((int, str)) -> None", MissingReturnArrow, "(int, str)")

    def test_arrow_without_argument_list(self) -> None:
        err = self.assertRejected("int -> str", DanglingArrow, "->")
        self.assertEqual(err.kind, ErrorKind.DANGLING_ARROW)
        self.assertRejected("-> int", DanglingArrow, "->")

    def test_arrow_without_return_type(self) -> None:
        self.assertRejected("(int) ->", DanglingArrow, "->")
        self.assertRejected("dict[str, (int) ->]", DanglingArrow, "->")

    def test_chained_arrow_needs_argument_list(self) -> None:
        err = self.assertRejected("(int) -> str -> bool", DanglingArrow, "->")
        self.assertEqual(err.span.start, 13)

    def test_arrow_operand_requires_parentheses(self) -> None:
        err = self.assertRejected("(int) -> bool | () -> bool", UnparenthesizedArrow, "(")
        self.assertEqual(err.span.start, 16)
        self.assertEqual(err.kind, ErrorKind.UNPARENTHESIZED_ARROW)
        self.assertRejected("int | async () -> str", UnparenthesizedArrow, "async")
        self.assertRejected("int | (str) -> None", UnparenthesizedArrow, "(")

    def test_async_requires_argument_list(self) -> None:
        self.assertRejected("async int", InvalidSyntax, "int")


class TestMalformed(_ErrorCase):
    def test_unclosed(self) -> None:
        self.assertRejected("list[int", InvalidSyntax)
        self.assertRejected("(int", InvalidSyntax)

    def test_empty_subscript(self) -> None:
        self.assertRejected("list[]", InvalidSyntax, "[")

    def test_empty_input(self) -> None:
        self.assertRejected("", InvalidSyntax)

    def test_non_finite_literal(self) -> None:
        self.assertRejected("Literal[1e999]", InvalidSyntax, "1e999")
        self.assertRejected("Literal[-1e999]", InvalidSyntax, "1e999")


class TestErrorDetails(unittest.TestCase):
    def test_is_a_syntax_error_with_location(self) -> None:
        source = "(int, ...) -> bool"
        with self.assertRaises(SyntaxError) as cm:
            parse_type(source)
        err = cm.exception
        self.assertEqual(err.lineno, 1)
        self.assertEqual(err.offset, 7)
        self.assertEqual(err.text, source)

    def test_multiline_location(self) -> None:
        with self.assertRaises(UnexpectedWildcardAsElementType) as cm:
            parse_type("(int,\n ...) -> bool")
        err = cm.exception
        self.assertEqual(err.lineno, 2)
        self.assertEqual(err.offset, 2)
        self.assertEqual(err.text, " ...) -> bool")

    def test_describe(self) -> None:
        with self.assertRaises(TypeSyntaxError) as cm:
            parse_type("(,) -> bool")
        self.assertTrue(cm.exception.describe().startswith("1:2: invalid-trailing-comma: "))


if __name__ == "__main__":
    unittest.main()

"""Unit tests for input parsing and validation helpers."""

from __future__ import annotations

import math
import unittest

from startup_valuator.exceptions import InvalidNumericInputError, ValidationError
from startup_valuator.validation import (
    non_negative,
    optional_number,
    optional_text,
    parse_number,
    require_field,
)


class RequireFieldTests(unittest.TestCase):
    def test_returns_value_when_present_and_correct_type(self) -> None:
        self.assertEqual(require_field({"a": "hello"}, "a", str), "hello")

    def test_raises_when_key_missing(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            require_field({}, "id", str)
        self.assertIn("id", str(ctx.exception))

    def test_raises_on_type_mismatch_tuple(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            require_field({"a": [1]}, "a", (str, int))
        self.assertIn("list", str(ctx.exception))


class ParseNumberTests(unittest.TestCase):
    def test_plain_numbers(self) -> None:
        self.assertEqual(parse_number(42, "x"), 42.0)
        self.assertEqual(parse_number(-3.5, "x"), -3.5)

    def test_numeric_strings(self) -> None:
        self.assertEqual(parse_number("3234", "x"), 3234.0)
        self.assertEqual(parse_number(" 1,250,000 ", "x"), 1_250_000.0)
        self.assertEqual(parse_number("$500", "x"), 500.0)
        self.assertEqual(parse_number("35%", "x"), 35.0)

    def test_rejects_text(self) -> None:
        with self.assertRaises(InvalidNumericInputError):
            parse_number("about ten", "x")

    def test_rejects_empty_string(self) -> None:
        with self.assertRaises(InvalidNumericInputError):
            parse_number("   ", "x")

    def test_rejects_bool(self) -> None:
        with self.assertRaises(InvalidNumericInputError):
            parse_number(True, "x")

    def test_rejects_non_finite(self) -> None:
        with self.assertRaises(InvalidNumericInputError):
            parse_number("nan", "x")
        with self.assertRaises(InvalidNumericInputError):
            parse_number(float("inf"), "x")

    def test_invalid_numeric_is_a_validation_error(self) -> None:
        self.assertTrue(issubclass(InvalidNumericInputError, ValidationError))


class OptionalFieldTests(unittest.TestCase):
    def test_absent_number_is_none(self) -> None:
        self.assertIsNone(optional_number({}, "revenue"))
        self.assertIsNone(optional_number({"revenue": None}, "revenue"))

    def test_malformed_number_raises(self) -> None:
        with self.assertRaises(ValidationError):
            optional_number({"revenue": "lots"}, "revenue")

    def test_text_type_checked(self) -> None:
        self.assertEqual(optional_text({"stage": "Seed"}, "stage"), "Seed")
        with self.assertRaises(ValidationError):
            optional_text({"stage": 3}, "stage")


class NonNegativeTests(unittest.TestCase):
    def test_clamps(self) -> None:
        self.assertEqual(non_negative(-1.0), 0.0)
        self.assertEqual(non_negative(math.nan), 0.0)
        self.assertEqual(non_negative(math.inf), 0.0)
        self.assertEqual(non_negative(12.5), 12.5)


if __name__ == "__main__":
    unittest.main()

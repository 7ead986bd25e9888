"""
Typed value parser tests (integer, double and boolean grammars).

Scope
- Integer grammar: decimal, x-hex and b-binary forms, sign handling and the
  exact signed 64-bit boundaries.
- Double grammar: optional integer/fraction parts, exponents and the inf/0.0
  behavior for exponents beyond float range.
- Boolean words and the short integer fallback.
- Fault types, messages and 1-based offsets.

Conventions
- Test method names follow CamelCase per project convention.
- Parsers are called directly; Value-level behavior lives in test_results.
"""

from __future__ import annotations

import math
import sys
import unittest
from unittest import TestCase

from argosy import (
    DataTypeLimitError,
    EmptyValueError,
    MalformedValueError,
    MissingDigitsError,
    UnexpectedInputError,
)
from argosy.conversions import INT64_MAX, to_bool, to_double, to_integer

INT64_MIN = -INT64_MAX - 1


class TestInteger(TestCase):
    """to_integer()"""

    def testDecimal(self):
        self.assertEqual(to_integer("42"), 42)
        self.assertEqual(to_integer("+42"), 42)
        self.assertEqual(to_integer("-42"), -42)
        self.assertEqual(to_integer("007"), 7)

    def testSurroundingBlanksIgnored(self):
        self.assertEqual(to_integer("  12\t"), 12)

    def testHexadecimal(self):
        self.assertEqual(to_integer("x1F"), 31)
        self.assertEqual(to_integer("XfF"), 255)
        self.assertEqual(to_integer("-x10"), -16)

    def testBinary(self):
        self.assertEqual(to_integer("b101"), 5)
        self.assertEqual(to_integer("-B11"), -3)

    def testBoundaries(self):
        cases = {
            "9223372036854775807": INT64_MAX,
            "-9223372036854775808": INT64_MIN,
            "x7fffffffffffffff": INT64_MAX,
            "-x8000000000000000": INT64_MIN,
            "b" + "1" * 63: INT64_MAX,
            "-b1" + "0" * 63: INT64_MIN,
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(to_integer(raw), expected)

    def testBeyondBoundaries(self):
        for raw in ("9223372036854775808", "-9223372036854775809", "x8000000000000000", "-x8000000000000001"):
            with self.subTest(raw=raw):
                with self.assertRaises(DataTypeLimitError):
                    to_integer(raw)

    def testEmpty(self):
        for raw in ("", "   "):
            with self.subTest(raw=raw):
                with self.assertRaises(EmptyValueError):
                    to_integer(raw)

    def testMissingDigits(self):
        for raw in ("+", "-", "x", "-b"):
            with self.subTest(raw=raw):
                with self.assertRaises(MissingDigitsError):
                    to_integer(raw)

    def testMalformedOffsetCountsLeadingBlanks(self):
        with self.assertRaises(MalformedValueError) as context:
            to_integer(" 12z", "option '-n'")
        self.assertEqual(context.exception.message, "unexpected character 'z' at offset 4 of option '-n'")
        self.assertEqual(context.exception.options["offset"], 4)

    def testDigitsOutsideBase(self):
        for raw in ("b102", "x1g", "1a", "1.0", "١٢"):
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedValueError):
                    to_integer(raw)


class TestDouble(TestCase):
    """to_double()"""

    def testForms(self):
        cases = {
            "1": 1.0,
            "1.5": 1.5,
            "-2.5": -2.5,
            ".5": 0.5,
            "5.": 5.0,
            "1.25e1": 12.5,
            "-2.5E2": -250.0,
            "25e-1": 2.5,
            "+3e+0": 3.0,
            " 0.5 ": 0.5,
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(to_double(raw), expected)

    def testReturnsFloat(self):
        self.assertIsInstance(to_double("3"), float)

    def testHugeExponent(self):
        self.assertEqual(to_double("1e400"), math.inf)
        self.assertEqual(to_double("-1e400"), -math.inf)
        self.assertEqual(to_double("1e-400"), 0.0)

    def testScalingRoundsOnce(self):
        self.assertEqual(to_double("1e-320"), 1e-320)
        self.assertEqual(to_double("4.9e-324"), 4.9e-324)
        self.assertEqual(to_double("0.1e309"), 1e308)
        self.assertEqual(to_double("1.7976931348623157e308"), sys.float_info.max)
        self.assertEqual(to_double("-17976931348623157e292"), -sys.float_info.max)
        self.assertEqual(to_double("0.3e1"), 3.0)

    def testJustOutsideFloatRange(self):
        self.assertEqual(to_double("1e309"), math.inf)
        self.assertEqual(to_double("2e-324"), 0.0)

    def testZeroWithHugeExponent(self):
        self.assertEqual(to_double("0e400"), 0.0)

    def testExcessFractionDigitsDropped(self):
        self.assertAlmostEqual(to_double("0." + "3" * 40), 1 / 3)

    def testIntegralOverflow(self):
        with self.assertRaises(DataTypeLimitError):
            to_double("99999999999999999999")

    def testEmpty(self):
        with self.assertRaises(EmptyValueError):
            to_double(" ")

    def testMissingDigits(self):
        for raw in (".", "-", "e5", "1e", "1e+"):
            with self.subTest(raw=raw):
                with self.assertRaises(MissingDigitsError):
                    to_double(raw)

    def testMalformed(self):
        cases = {"1.5x": 4, "x1": 1, "1e5.": 4, "1ex": 3, "1..2": 3}
        for raw, offset in cases.items():
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedValueError) as context:
                    to_double(raw)
                self.assertEqual(context.exception.options["offset"], offset)


class TestBool(TestCase):
    """to_bool()"""

    def testWords(self):
        for raw in ("true", "T", "on", "YES", "y", " True "):
            with self.subTest(raw=raw):
                self.assertIs(to_bool(raw), True)
        for raw in ("false", "F", "Off", "no", "N"):
            with self.subTest(raw=raw):
                self.assertIs(to_bool(raw), False)

    def testShortIntegers(self):
        self.assertIs(to_bool("1"), True)
        self.assertIs(to_bool("0"), False)
        self.assertIs(to_bool("-2"), True)
        self.assertIs(to_bool("x0"), False)
        self.assertIs(to_bool("99999"), True)

    def testLongIntegersRejected(self):
        with self.assertRaises(UnexpectedInputError):
            to_bool("100000")

    def testUnexpectedInput(self):
        with self.assertRaises(UnexpectedInputError) as context:
            to_bool("maybe", "option '--bool'")
        self.assertEqual(context.exception.message, "unexpected input 'maybe' for option '--bool', expected a boolean")

    def testEmpty(self):
        with self.assertRaises(UnexpectedInputError):
            to_bool("")


if __name__ == '__main__':
    unittest.main()

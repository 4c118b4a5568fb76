# python
"""
Results and faults behavioral tests.

Scope
- ParseError / ParseErrorType: messages, stable codes, host remapping.
- Parsed / NotParsed envelopes: invariants, truthiness, unwrap().
- Fault rendering through rich and trigger() in raise/shell modes.

Conventions
- Test method names follow CamelCase per project convention.
"""

import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

from clibind import (
    InvalidValueError,
    MissingRequiredError,
    NotParsed,
    ParseError,
    ParseErrorType,
    ParseException,
    ParseFailure,
    ParseResult,
    Parsed,
    ResultType,
    UnknownOptionError,
    trigger,
)

MISSING = ParseError(ParseErrorType.MISSING_REQUIRED, "--token", "Required option '--token' is missing.")
INVALID = ParseError(ParseErrorType.INVALID_VALUE, "--port", "Failed to convert value 'abc' for option: --port")


def render(renderable):
    stream = io.StringIO()
    Console(file=stream, width=120, color_system=None).print(renderable)
    return stream.getvalue()


class TestParseError(TestCase):
    def testStrIsMessage(self):
        self.assertEqual(str(MISSING), "Required option '--token' is missing.")

    def testStableCodes(self):
        self.assertEqual(int(ParseErrorType.MISSING_REQUIRED), 11201)
        self.assertEqual(int(ParseErrorType.INVALID_VALUE), 11202)
        self.assertEqual(int(ParseErrorType.UNKNOWN_OPTION), 11203)
        self.assertEqual(ParseErrorType.UNKNOWN_OPTION.title, "unknown option")

    def testNormalizeUsesHostCodes(self):
        self.assertEqual(ParseErrorType.INVALID_VALUE.normalize(), "11202")
        main = sys.modules["__main__"]
        with mock.patch.object(main, "__codes__", {ParseErrorType.INVALID_VALUE: "E-VALUE"}, create=True):
            self.assertEqual(ParseErrorType.INVALID_VALUE.normalize(), "E-VALUE")
            self.assertEqual(ParseErrorType.MISSING_REQUIRED.normalize(), "11201")


class TestEnvelope(TestCase):
    def testParsed(self):
        result = Parsed({"a": 1})
        self.assertTrue(result)
        self.assertIs(result.result, ResultType.PARSED)
        self.assertEqual(result.value, {"a": 1})
        self.assertEqual(result.errors, ())
        self.assertEqual(result.error_message, "")
        self.assertEqual(result.unwrap(), {"a": 1})
        self.assertIsNone(result.descriptor)

    def testNotParsed(self):
        result = NotParsed([INVALID, MISSING])
        self.assertFalse(result)
        self.assertIs(result.result, ResultType.NOT_PARSED)
        self.assertIsNone(result.value)
        self.assertEqual(result.errors, (INVALID, MISSING))
        self.assertEqual(result.error_message, INVALID.message + "\n" + MISSING.message)

    def testNotParsedRequiresErrors(self):
        with self.assertRaises(ValueError):
            NotParsed([])
        with self.assertRaises(TypeError):
            NotParsed(["boom"])

    def testBaseIsAbstract(self):
        with self.assertRaises(TypeError):
            ParseResult()

    def testUnwrapRaisesFailure(self):
        with self.assertRaises(ParseFailure) as context:
            NotParsed([INVALID, MISSING]).unwrap()
        failure = context.exception
        self.assertEqual(failure.errors, (INVALID, MISSING))
        self.assertIsInstance(failure.exceptions[0], InvalidValueError)
        self.assertIsInstance(failure.exceptions[1], MissingRequiredError)
        self.assertEqual(str(failure).splitlines(), [INVALID.message, MISSING.message])


class TestFaults(TestCase):
    def testFromErrorPicksSubclass(self):
        unknown = ParseError(ParseErrorType.UNKNOWN_OPTION, "--bogus", "Unknown option: --bogus")
        self.assertIsInstance(ParseException.from_error(unknown), UnknownOptionError)
        self.assertIs(ParseException.from_error(MISSING).code, ParseErrorType.MISSING_REQUIRED)
        self.assertEqual(str(ParseException.from_error(MISSING)), MISSING.message)

    def testExceptionRequiresParseError(self):
        with self.assertRaises(TypeError):
            ParseException("message")

    def testRenderException(self):
        main = sys.modules["__main__"]
        with mock.patch.object(main, "__prog__", "demo", create=True):
            output = render(ParseException.from_error(INVALID))
        self.assertIn("[ demo — 11202 | invalid value ]", output)
        self.assertIn(INVALID.message, output)
        self.assertIn("--port", output)

    def testRenderHintOverride(self):
        output = render(ParseException.from_error(MISSING, hint="export APP_TOKEN"))
        self.assertIn("export APP_TOKEN", output)

    def testRenderFailureHeader(self):
        main = sys.modules["__main__"]
        with mock.patch.object(main, "__prog__", "demo", create=True):
            output = render(NotParsed([INVALID, MISSING]))
        self.assertIn("[ demo — 2 errors ]", output)
        self.assertIn("11201", output)
        self.assertIn("11202", output)
        self.assertIn(MISSING.message, output)

    def testRenderFancyPanel(self):
        output = render(NotParsed([MISSING]).failure(fancy=True))
        self.assertIn("1 error", output)
        self.assertIn(MISSING.message, output)

    def testTriggerRaisesOutsideShell(self):
        with self.assertRaises(MissingRequiredError):
            trigger(ParseException.from_error(MISSING), shell=False)

    def testTriggerExitsInShell(self):
        stream = io.StringIO()
        with mock.patch("clibind.faults.console", Console(file=stream, width=120, color_system=None)):
            with self.assertRaises(SystemExit) as context:
                trigger(NotParsed([MISSING]).failure(), shell=True)
            trigger(ParseException.from_error(INVALID), shell=True, deferred=True)
        self.assertEqual(context.exception.code, 2)
        self.assertIn(MISSING.message, stream.getvalue())
        self.assertIn(INVALID.message, stream.getvalue())

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))


if __name__ == "__main__":
    unittest.main()

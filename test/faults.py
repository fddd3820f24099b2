# python
"""
Faults behavioral tests.

Scope
- FaultCode normalization (including the __main__.__codes__ override).
- ParseFault: message, options, code, replacement, rich rendering.
- ParseExit: grouping, derive(), rendering with a usage line.
- trigger(): raise vs. shell mode, contract checks.

Conventions
- Test method names follow CamelCase per project convention.
- Rendered output is captured with a rich Console writing to a StringIO.
"""

import contextlib
import copy
import io
import sys
import unittest
from unittest import TestCase

from rich.console import Console

from argscope import (
    FaultCode,
    HelpRequest,
    InvalidValueError,
    MissingValueError,
    ParseExit,
    ParseFault,
    Schema,
    trigger,
)


def capture(renderable):
    buffer = io.StringIO()
    Console(file=buffer, width=100, color_system=None).print(renderable)
    return buffer.getvalue()


def fault():
    return InvalidValueError(
        "the value 'trace' is not valid for argument 'level'",
        title="invalid value",
        code=FaultCode.INVALID_VALUE,
        hint="expected one of: debug, info",
    )


class TestFaultCode(TestCase):
    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.INVALID_VALUE.normalize(), "11301")

    def testNormalizeUsesMainOverrides(self):
        main = sys.modules["__main__"]
        missing = not hasattr(main, "__codes__")
        previous = getattr(main, "__codes__", None)
        main.__codes__ = {FaultCode.INVALID_VALUE: "E-VALUE"}
        try:
            self.assertEqual(FaultCode.INVALID_VALUE.normalize(), "E-VALUE")
            self.assertEqual(FaultCode.MISSING_VALUE.normalize(), "11201")
        finally:
            if missing:
                del main.__codes__
            else:
                main.__codes__ = previous


class TestParseFault(TestCase):
    def testMessageAndOptions(self):
        error = fault()
        self.assertEqual(str(error), "the value 'trace' is not valid for argument 'level'")
        self.assertIs(error.code, FaultCode.INVALID_VALUE)
        self.assertEqual(error.options["hint"], "expected one of: debug, info")
        self.assertEqual(repr(error), "InvalidValueError(\"the value 'trace' is not valid for argument 'level'\")")

    def testOptionsReadOnly(self):
        with self.assertRaises(TypeError):
            fault().options["hint"] = "other"

    def testReplaceMergesOptions(self):
        error = fault()
        replaced = copy.replace(error, shell=True)
        self.assertIsInstance(replaced, InvalidValueError)
        self.assertEqual(str(replaced), str(error))
        self.assertTrue(replaced.options["shell"])
        self.assertNotIn("shell", error.options)

    def testRender(self):
        output = capture(copy.replace(fault(), colorful=False, prog="fubar"))
        self.assertIn("fubar", output)
        self.assertIn("11301", output)
        self.assertIn("Invalid Value", output)
        self.assertIn("the value 'trace' is not valid", output)
        self.assertIn("expected one of: debug, info", output)

    def testRenderFancy(self):
        output = capture(copy.replace(fault(), colorful=False, fancy=True, prog="fubar"))
        self.assertIn("Invalid Value", output)
        self.assertIn("expected one of: debug, info", output)


class TestParseExit(TestCase):
    def setUp(self):
        self.faults = [fault(), MissingValueError("no value was specified for required argument 'FOO'",
                                                  title="missing argument", code=FaultCode.MISSING_REQUIRED)]

    def testGroup(self):
        group = ParseExit(self.faults)
        self.assertIsInstance(group, ExceptionGroup)
        self.assertEqual(list(group.exceptions), self.faults)

    def testSplitKeepsOptions(self):
        group = ParseExit(self.faults, prog="fubar")
        matched, rest = group.split(InvalidValueError)
        self.assertIsInstance(matched, ParseExit)
        self.assertEqual(len(matched.exceptions), 1)
        self.assertEqual(matched.options["prog"], "fubar")

    def testRenderWithUsage(self):
        schema = Schema()
        schema.add_positional("foo")
        output = capture(ParseExit(self.faults, schema=schema, prog="fubar", colorful=False))
        self.assertIn("Bad Arguments", output)
        self.assertIn("the value 'trace' is not valid", output)
        self.assertIn("no value was specified for required argument 'FOO'", output)
        self.assertIn("usage: fubar FOO", output)


class TestTrigger(TestCase):
    def testRaisesOutsideShell(self):
        with self.assertRaises(InvalidValueError) as context:
            trigger(fault(), prog="fubar")
        self.assertEqual(context.exception.options["prog"], "fubar")

    def testShellExits(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            trigger(fault(), shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("expected one of: debug, info", stderr.getvalue())

    def testHelpRequestRaised(self):
        schema = Schema(title="Fubar")
        with self.assertRaises(HelpRequest) as context:
            trigger(HelpRequest(schema), colorful=False)
        self.assertIs(context.exception.schema, schema)
        self.assertFalse(context.exception.options["colorful"])

    def testContract(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain exception"))

    def testBaseFaultIsException(self):
        self.assertTrue(issubclass(ParseFault, Exception))


if __name__ == "__main__":
    unittest.main()

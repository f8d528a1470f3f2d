"""
Faults module behavioral tests (codes, copying, triggering, rendering).

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import io
import unittest
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console
from rich.panel import Panel

from argotag import faults
from argotag.faults import (
    ArgumentException,
    ArgumentWarning,
    EmptyValueWarning,
    FaultCode,
    InvalidValueError,
    MissingRequiredError,
    ScanException,
    TagException,
    TagSyntaxError,
    getdoc,
    trigger,
)


def render(renderable):
    console = Console(file=io.StringIO(), width=100)
    console.print(renderable)
    return console.file.getvalue()


def capture(stream):
    return patch.object(faults, "console", Console(file=stream, width=100))


class TestFaultCode(TestCase):

    def testCodesAreUnique(self):
        self.assertEqual(len({code.value for code in FaultCode}), len(FaultCode))

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.INVALID_VALUE.normalize(), "23101")

    def testNormalizeHonorsHostCodes(self):
        main = __import__("__main__")
        with patch.object(main, "__codes__", {FaultCode.INVALID_VALUE: "E-VALUE"}, create=True):
            self.assertEqual(FaultCode.INVALID_VALUE.normalize(), "E-VALUE")

    def testGetdoc(self):
        main = __import__("__main__")
        self.assertIsNone(getdoc(FaultCode.MISSING_VALUE))
        with patch.object(main, "__docs__", {FaultCode.MISSING_VALUE: "pass a value"}, create=True):
            self.assertEqual(getdoc(FaultCode.MISSING_VALUE), "pass a value")
        with self.assertRaises(TypeError):
            getdoc(23102)


class TestFaults(TestCase):

    def testHierarchy(self):
        self.assertTrue(issubclass(TagSyntaxError, TagException))
        self.assertTrue(issubclass(InvalidValueError, ScanException))
        self.assertTrue(issubclass(TagException, ArgumentException))
        self.assertTrue(issubclass(ArgumentException, Exception))
        self.assertTrue(issubclass(EmptyValueWarning, ArgumentWarning))
        self.assertTrue(issubclass(ArgumentWarning, Warning))

    def testMessageAndOptions(self):
        fault = InvalidValueError("bad value", code=FaultCode.INVALID_VALUE, name="-c")
        self.assertEqual(str(fault), "bad value")
        self.assertEqual(fault.message, "bad value")
        self.assertEqual(fault.options["name"], "-c")
        with self.assertRaises(TypeError):
            fault.options["name"] = "-d"

    def testReplaceMergesOptions(self):
        fault = InvalidValueError("bad value", name="-c")
        replaced = copy.replace(fault, shell=False, name="-d")
        self.assertIsInstance(replaced, InvalidValueError)
        self.assertEqual(replaced.message, "bad value")
        self.assertEqual(dict(replaced.options), {"name": "-d", "shell": False})
        self.assertEqual(fault.options["name"], "-c")


class TestTrigger(TestCase):

    def testRaisesOutsideShell(self):
        with self.assertRaises(MissingRequiredError) as context:
            trigger(MissingRequiredError("missing", code=FaultCode.MISSING_REQUIRED))
        self.assertEqual(str(context.exception), "missing")

    def testWarnsOutsideShell(self):
        with self.assertWarns(EmptyValueWarning):
            trigger(EmptyValueWarning("empty", code=FaultCode.EMPTY_VALUE), stacklevel=2)

    def testShellPrintsAndExits(self):
        stream = io.StringIO()
        with capture(stream):
            with self.assertRaises(SystemExit) as context:
                trigger(MissingRequiredError("missing things", title="missing", code=FaultCode.MISSING_REQUIRED), shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("missing things", stream.getvalue())

    def testShellWarningPrints(self):
        stream = io.StringIO()
        with capture(stream):
            trigger(EmptyValueWarning("empty value", title="empty", code=FaultCode.EMPTY_VALUE), shell=True, colorful=False)
        self.assertIn("empty value", stream.getvalue())

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))


class TestRendering(TestCase):

    def testHeaderMessageAndHint(self):
        fault = InvalidValueError(
            "invalid value",
            title="invalid value",
            code=FaultCode.INVALID_VALUE,
            hint="pass a number",
            colorful=False,
        )
        output = render(fault)
        self.assertIn("23101", output)
        self.assertIn("Invalid Value", output)
        self.assertIn("pass a number", output)

    def testProgramFromHost(self):
        main = __import__("__main__")
        with patch.object(main, "__prog__", "mytool", create=True):
            output = render(InvalidValueError("x", code=FaultCode.INVALID_VALUE, colorful=False))
        self.assertIn("mytool", output)

    def testFancyIsPanel(self):
        fault = InvalidValueError("x", title="t", code=FaultCode.INVALID_VALUE, fancy=True)
        self.assertIsInstance(fault.__rich__(), Panel)


if __name__ == "__main__":
    unittest.main()

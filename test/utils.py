# python
"""
Utility helpers tests.

Scope
- Unset sentinel and coalesce().
- mirror() copies, the rename() decorator.
- Wording helpers: pluralize(), quantify(), ordinal().
- Key and command-line helpers: normalize(), split().

Conventions
- Test method names follow CamelCase per project convention.
"""

import copy
import unittest
from unittest import TestCase

from argscope.utils import (
    Unset,
    UnsetType,
    coalesce,
    mirror,
    normalize,
    ordinal,
    pluralize,
    quantify,
    rename,
    split,
)


class TestUnset(TestCase):
    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)

    def testFalseyButNotNone(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertEqual(repr(Unset), "Unset")

    def testUnionWithTypes(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", Unset | str)
        self.assertNotIsInstance(None, str | Unset)

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)


class TestMirror(TestCase):
    def setUp(self):
        class Holder:
            values = mirror("values")
            choices = mirror("choices")

            def __init__(self):
                self._values = ["a", "b"]
                self._choices = ("a", "b")

        self.holder = Holder()

    def testListIsCopied(self):
        self.holder.values.append("c")
        self.assertEqual(self.holder.values, ["a", "b"])

    def testTupleStaysTuple(self):
        self.assertEqual(self.holder.choices, ("a", "b"))

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            self.holder.values = []

    def testNameMustBeString(self):
        with self.assertRaises(TypeError):
            mirror(1)


class TestRename(TestCase):
    def testDecorator(self):
        @rename("named")
        def function():
            pass

        self.assertEqual(function.__name__, "named")
        self.assertEqual(function.__qualname__, "named")

    def testNameMustBeString(self):
        with self.assertRaises(TypeError):
            rename(lambda: None)


class TestWording(TestCase):
    def testPluralize(self):
        self.assertEqual(pluralize("argument"), "arguments")
        self.assertEqual(pluralize("positional argument"), "positional arguments")
        self.assertEqual(pluralize("entry"), "entries")
        self.assertEqual(pluralize("key"), "keys")
        self.assertEqual(pluralize("index"), "indices")
        self.assertEqual(pluralize("Value"), "Values")

    def testQuantify(self):
        self.assertEqual(quantify(1, "value"), "1 value")
        self.assertEqual(quantify(0, "value"), "0 values")
        self.assertEqual(quantify(3, "rest value"), "3 rest values")

    def testOrdinal(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(112), "112th")
        self.assertEqual(ordinal(23), "23rd")


class TestKeys(TestCase):
    def testNormalize(self):
        self.assertEqual(normalize("--Output-Dir"), "output_dir")
        self.assertEqual(normalize(" verbose "), "verbose")
        self.assertEqual(normalize("-v"), "v")

    def testSplit(self):
        self.assertEqual(split('copy "My Documents" dest'), ["copy", "My Documents", "dest"])
        self.assertEqual(split("-b 'gold bar'"), ["-b", "gold bar"])
        self.assertEqual(split(""), [])

    def testSplitErrors(self):
        with self.assertRaises(ValueError):
            split('"open')
        with self.assertRaises(TypeError):
            split(["a"])


if __name__ == "__main__":
    unittest.main()

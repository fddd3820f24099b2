# python
"""
Classifier (tokenizer) behavioral tests.

Scope
- Token forms: help requests, short keys and clusters, long keys, negation,
  '--', Windows-style '/x' and '/key', plain values.
- Pending slot rules: filled by the next plain value, closed with None by a
  later key or help token and at the end of the tokens; last write wins.
- Positional values carry the slot (argument or command) they went to.
- Positional queue: slots given by key are skipped, commands collapse the
  working schema and splice their positional arguments in front.
- Sensitive masking of the echoed tokens.

Conventions
- Test method names follow CamelCase per project convention.
- Buckets are compared by key (keyword_values is keyed by argument objects).
"""

import unittest
from unittest import TestCase

from argscope import (
    FaultCode,
    InvalidNegationError,
    MisplacedTerminatorError,
    NoSuchArgumentError,
    Schema,
)
from argscope.tokenizer import Classifier


def build():
    schema = Schema(title="Fubar")
    schema.add_positional("foo", "Foo arg")
    schema.add_keyword("bar", "Bar arg", short_key="b")
    schema.add_flag("baz", "Baz arg", short_key="z")
    schema.add_rest("files", "Files", required=False)
    return schema


def keyed(keywords):
    return {argument.key: value for argument, value in keywords.items()}


def values(positional):
    return [value for slot, value in positional]


def slots(positional):
    return [slot and slot.key for slot, value in positional]


class TestClassification(TestCase):
    def setUp(self):
        self.schema = build()
        self.classifier = Classifier(self.schema)

    def classify(self, tokens):
        positional, keywords, rest = self.classifier.classify(tokens)
        return values(positional), keyed(keywords), rest

    def testEndToEndBuckets(self):
        positional, keywords, rest = self.classify("-b gold Here bar --no-baz bold".split())
        self.assertEqual(positional, ["Here"])
        self.assertEqual(keywords, {"bar": "gold", "baz": False})
        self.assertEqual(rest, ["bar", "bold"])
        self.assertEqual(self.classifier.faults, [])

    def testFlagSetByLongKey(self):
        self.assertEqual(self.classify(["--baz"])[1], {"baz": True})

    def testKeywordNegation(self):
        self.assertEqual(self.classify(["--no-bar"])[1], {"bar": False})

    def testAlternativeNegationPrefixes(self):
        self.assertEqual(self.classify(["--non-baz"])[1], {"baz": False})
        self.assertEqual(self.classify(["--not-baz"])[1], {"baz": False})

    def testLastWriteWins(self):
        self.assertEqual(self.classify(["-b", "one", "--bar", "two"])[1], {"bar": "two"})

    def testPendingClosedByNextKey(self):
        self.assertEqual(self.classify(["--bar", "--baz"])[1], {"bar": None, "baz": True})

    def testPendingClosedAtEnd(self):
        self.assertEqual(self.classify(["Here", "--bar"])[1], {"bar": None})

    def testTerminatorRoutesRemainderToRest(self):
        positional, keywords, rest = self.classify(["Here", "--", "-b", "--baz", "x"])
        self.assertEqual(positional, ["Here"])
        self.assertEqual(keywords, {})
        self.assertEqual(rest, ["-b", "--baz", "x"])

    def testTerminatorClosesPending(self):
        positional, keywords, rest = self.classify(["-b", "--", "x"])
        self.assertEqual(keywords, {"bar": None})
        self.assertEqual(rest, ["x"])

    def testTerminatorAfterRestValuesIsFault(self):
        positional, keywords, rest = self.classify(["Here", "extra", "--", "more"])
        self.assertEqual(rest, ["extra", "more"])
        self.assertEqual(len(self.classifier.faults), 1)
        fault = self.classifier.faults[0]
        self.assertIsInstance(fault, MisplacedTerminatorError)
        self.assertIs(fault.code, FaultCode.MISPLACED_TERMINATOR)
        self.assertEqual(str(fault), "too many positional arguments supplied before -- token")

    def testNegatingPositionalIsFault(self):
        positional, keywords, rest = self.classify(["--no-foo"])
        self.assertEqual(keywords, {})
        self.assertEqual(len(self.classifier.faults), 1)
        self.assertIsInstance(self.classifier.faults[0], InvalidNegationError)

    def testPositionalGivenByKeySkipsSlot(self):
        positional, keywords, rest = self.classify(["--foo", "x", "y"])
        self.assertEqual(positional, [])
        self.assertEqual(keywords, {"foo": "x"})
        self.assertEqual(rest, ["y"])

    def testSlotRecordedPerValue(self):
        positional, keywords, rest = self.classifier.classify(["Here", "--foo", "There"])
        self.assertEqual(positional, [(self.schema["foo"], "Here")])
        self.assertEqual(keyed(keywords), {"foo": "There"})
        self.assertEqual(rest, [])

    def testPendingRestCollectsValue(self):
        positional, keywords, rest = self.classify(["--files", "a", "Here", "b"])
        self.assertEqual(positional, ["Here"])
        self.assertEqual(rest, ["a", "b"])

    def testWindowsStyleKeys(self):
        positional, keywords, rest = self.classify(["/b", "gold", "/baz", "Here"])
        self.assertEqual(positional, ["Here"])
        self.assertEqual(keywords, {"bar": "gold", "baz": True})

    def testPathsArePlainValues(self):
        positional, keywords, rest = self.classify(["/tmp/file", "-"])
        self.assertEqual(positional, ["/tmp/file"])
        self.assertEqual(rest, ["-"])

    def testUnknownKeyAborts(self):
        with self.assertRaises(NoSuchArgumentError):
            self.classify(["Here", "--nope"])
        with self.assertRaises(NoSuchArgumentError):
            self.classify(["-q"])


class TestHelpTokens(TestCase):
    def testHelpForms(self):
        for tokens in (["--help"], ["-?"], ["/?"], ["help"], ["HELP", "x"], ["x", "--help"]):
            with self.subTest(tokens=tokens):
                classifier = Classifier(build())
                classifier.classify(tokens)
                self.assertTrue(classifier.show_help)

    def testHelpClosesPending(self):
        classifier = Classifier(build())
        positional, keywords, rest = classifier.classify(["-b", "--help", "gold"])
        self.assertTrue(classifier.show_help)
        self.assertEqual(keyed(keywords), {"bar": None})
        self.assertEqual(values(positional), ["gold"])
        self.assertEqual(slots(positional), ["foo"])

    def testHelpWordOnlyFirst(self):
        classifier = Classifier(build())
        positional, keywords, rest = classifier.classify(["x", "help"])
        self.assertFalse(classifier.show_help)
        self.assertEqual(values(positional), ["x"])
        self.assertEqual(rest, ["help"])


class TestShortClusters(TestCase):
    def setUp(self):
        self.schema = Schema()
        self.schema.add_flag("all", short_key="a")
        self.schema.add_flag("brief", short_key="b")
        self.schema.add_keyword("color", short_key="c")
        self.schema.add_rest("files", required=False)

    def testFlagsBundled(self):
        positional, keywords, rest = Classifier(self.schema).classify(["-abc", "red"])
        self.assertEqual(keyed(keywords), {"all": True, "brief": True, "color": "red"})
        self.assertEqual(rest, [])

    def testPendingClosedInsideCluster(self):
        positional, keywords, rest = Classifier(self.schema).classify(["-ca", "red"])
        self.assertEqual(keyed(keywords), {"color": None, "all": True})
        self.assertEqual(rest, ["red"])


class TestOverflow(TestCase):
    def testOverflowKeptPositionalWithoutRest(self):
        schema = Schema()
        schema.add_positional("foo")
        positional, keywords, rest = Classifier(schema).classify(["a", "b", "c"])
        self.assertEqual(values(positional), ["a", "b", "c"])
        self.assertEqual(slots(positional), ["foo", None, None])
        self.assertEqual(rest, [])

    def testDeclaredPrefixedKeyWinsOverNegation(self):
        schema = Schema()
        schema.add_flag("cache")
        schema.add_flag("no-cache")
        positional, keywords, rest = Classifier(schema).classify(["--no-cache"])
        self.assertEqual(keyed(keywords), {"no_cache": True})


class TestCommands(TestCase):
    def setUp(self):
        self.schema = Schema()
        self.action = self.schema.add_command("action", "What to do")
        self.schema.add_positional("target", default=".")
        self.copy = self.action.command("copy", "Copy files")
        self.copy.schema.add_positional("source")
        self.copy.schema.add_flag("force", short_key="f")
        self.action.command("list", "List files")

    def testCommandCollapsesWorkingSchema(self):
        classifier = Classifier(self.schema)
        positional, keywords, rest = classifier.classify(["copy", "-f", "src", "dst"])
        self.assertEqual(values(positional), ["copy", "src", "dst"])
        self.assertEqual(slots(positional), ["action", "source", "target"])
        self.assertIs(positional[0][0], self.copy)
        self.assertEqual(keyed(keywords), {"force": True})
        self.assertIn("source", classifier.schema)
        self.assertIsNot(classifier.schema, self.schema)

    def testDeclaredSchemaUntouched(self):
        Classifier(self.schema).classify(["copy", "src"])
        self.assertNotIn("source", self.schema)
        self.assertIs(self.schema["action"], self.action)

    def testNestedKeysUnknownBeforeCollapse(self):
        with self.assertRaises(NoSuchArgumentError):
            Classifier(self.schema).classify(["-f", "copy"])

    def testCommandGivenByKey(self):
        classifier = Classifier(self.schema)
        positional, keywords, rest = classifier.classify(["--action", "copy", "src"])
        self.assertEqual(values(positional), ["src"])
        self.assertEqual(slots(positional), ["source"])
        self.assertEqual(list(keywords.values()), ["copy"])
        self.assertIs(next(iter(keywords)), self.copy)

    def testUnknownCommandLeftToResolver(self):
        classifier = Classifier(self.schema)
        positional, keywords, rest = classifier.classify(["move"])
        self.assertEqual(positional, [(self.action, "move")])
        self.assertIs(classifier.schema, self.schema)


class TestMasking(TestCase):
    def setUp(self):
        self.schema = Schema()
        self.schema.add_positional("user")
        self.schema.add_positional("pin", sensitive=True)
        self.schema.add_keyword("password", short_key="p", sensitive=True)

    def testSensitiveValuesMasked(self):
        classifier = Classifier(self.schema)
        positional, keywords, rest = classifier.classify(["-p", "secret", "alice", "1234"])
        self.assertEqual(classifier.tokens, ["-p", "******", "alice", "******"])
        self.assertEqual(values(positional), ["alice", "1234"])
        self.assertEqual(keyed(keywords), {"password": "secret"})

    def testCommandTokensEchoed(self):
        schema = Schema()
        action = schema.add_command("action")
        login = action.command("login")
        login.schema.add_positional("token", sensitive=True)
        classifier = Classifier(schema)
        positional, keywords, rest = classifier.classify(["login", "abc"])
        self.assertEqual(classifier.tokens, ["login", "******"])
        self.assertEqual(slots(positional), ["action", "token"])


if __name__ == "__main__":
    unittest.main()

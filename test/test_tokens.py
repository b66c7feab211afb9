"""
CLI tokenizer tests (argv -> positionals + flag map).

Scope
- Validate each grammar rule and the order in which rules apply.
- Validate the stop marker and last-write-wins flag semantics.
- Validate help token filtering.
"""
import unittest
from unittest import TestCase

from taskonaut.tokens import ParsedArgv, strip_help, tokenize


class TestTokenize(TestCase):
    """Per-token classification."""

    def testPositionalOnly(self):
        self.assertEqual(tokenize(["a", "b"]), ParsedArgv(["a", "b"], {}))

    def testLongWithEquals(self):
        self.assertEqual(tokenize(["--name=World"]).flags, {"name": "World"})
        self.assertEqual(tokenize(["--name="]).flags, {"name": ""})
        self.assertEqual(tokenize(["--query=a=b"]).flags, {"query": "a=b"})

    def testNegation(self):
        self.assertEqual(tokenize(["--no-color"]).flags, {"color": False})

    def testLongConsumesNextValue(self):
        parsed = tokenize(["--name", "World", "rest"])
        self.assertEqual(parsed.flags, {"name": "World"})
        self.assertEqual(parsed.positional, ["rest"])

    def testLongBeforeFlagIsBoolean(self):
        parsed = tokenize(["--verbose", "--name", "x"])
        self.assertEqual(parsed.flags, {"verbose": True, "name": "x"})

    def testTrailingLongIsBoolean(self):
        self.assertEqual(tokenize(["--verbose"]).flags, {"verbose": True})

    def testShortWithEqualsUsesOneCharacter(self):
        self.assertEqual(tokenize(["-n=5"]).flags, {"n": "5"})
        self.assertEqual(tokenize(["-abc=5"]).flags, {"a": "5"})

    def testShortConsumesNextValue(self):
        parsed = tokenize(["-n", "World", "-c", "3"])
        self.assertEqual(parsed.flags, {"n": "World", "c": "3"})
        self.assertEqual(parsed.positional, [])

    def testShortBeforeFlagIsBoolean(self):
        self.assertEqual(tokenize(["-v", "-n", "x"]).flags, {"v": True, "n": "x"})

    def testOddDashTokensArePositional(self):
        self.assertEqual(tokenize(["-", "-abc"]).positional, ["-", "-abc"])

    def testStopMarker(self):
        parsed = tokenize(["--a=1", "--", "--b", "-c", "--no-d", "x"])
        self.assertEqual(parsed.flags, {"a": "1"})
        self.assertEqual(parsed.positional, ["--b", "-c", "--no-d", "x"])

    def testStopMarkerIsNotEmitted(self):
        self.assertEqual(tokenize(["--"]).positional, [])

    def testLastWriteWins(self):
        self.assertEqual(tokenize(["--n=1", "--n=2"]).flags, {"n": "2"})
        self.assertEqual(tokenize(["--color", "--no-color"]).flags, {"color": False})

    def testNegationKeepsPositional(self):
        parsed = tokenize(["--no-verbose", "x"])
        self.assertEqual(parsed.flags, {"verbose": False})
        self.assertEqual(parsed.positional, ["x"])


class TestStripHelp(TestCase):
    """Help tokens are detected and filtered anywhere in argv."""

    def testDetectsAndFilters(self):
        self.assertEqual(strip_help(["a", "-h", "b", "--help"]), (True, ["a", "b"]))

    def testNoHelp(self):
        self.assertEqual(strip_help(["a"]), (False, ["a"]))


if __name__ == "__main__":
    unittest.main()

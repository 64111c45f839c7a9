"""
Utilities tests (sentinel, helpers, glue prefix hook).

Conventions
- Test method names follow CamelCase per project convention.
- Host hooks are patched on the __main__ module and restored afterwards.
"""

from __future__ import annotations

import sys
import unittest
from unittest import TestCase
from unittest.mock import patch

from argotree import Command, Flag
from argotree.utils import Unset, UnsetType, coalesce, rename, mirror, ordinal, glue, GLUE


class TestUnset(TestCase):
    """Sentinel semantics."""

    def testUnsetIsFalseySingleton(self):
        self.assertFalse(Unset)
        self.assertIs(UnsetType(), Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnsetCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})

    def testCoalesceOnlyReplacesUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertEqual(coalesce("", "fallback"), "")
        self.assertEqual(coalesce(0, 5), 0)
        self.assertIsNone(coalesce(Unset))


class TestHelpers(TestCase):
    """rename, mirror and ordinal."""

    def testRenameDirectAndDecorator(self):
        def target():
            pass

        self.assertEqual(rename(target, "renamed").__name__, "renamed")

        @rename("decorated")
        def other():
            pass

        self.assertEqual(other.__qualname__, "decorated")

    def testRenameRejectsBadArity(self):
        with self.assertRaises(TypeError):
            rename()

    def testMirrorExposesCopies(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = ["a"]

        holder = Holder()
        holder.items.append("b")
        self.assertEqual(holder.items, ["a"])
        with self.assertRaises(AttributeError):
            holder.items = []

    def testMirrorCopiesNestedSequences(self):
        class Holder:
            rows = mirror("rows")
            owner = mirror("owner")

            def __init__(self):
                self._rows = [["a"], ("b",)]
                self._owner = self

        holder = Holder()
        holder.rows[0].append("c")
        self.assertEqual(holder.rows, [["a"], ["b"]])
        self.assertIs(holder.owner, holder)

    def testOrdinalWords(self):
        self.assertEqual(ordinal(0), "first")
        self.assertEqual(ordinal(2), "third")
        self.assertEqual(ordinal(9), "tenth")

    def testOrdinalSuffixes(self):
        self.assertEqual(ordinal(10), "11th")
        self.assertEqual(ordinal(11), "12th")
        self.assertEqual(ordinal(20), "21st")
        self.assertEqual(ordinal(21), "22nd")
        self.assertEqual(ordinal(22), "23rd")
        self.assertEqual(ordinal(110), "111th")


class TestGlue(TestCase):
    """Process-wide glue prefix."""

    def testDefaultGlue(self):
        self.assertEqual(glue(), GLUE)
        self.assertEqual(GLUE, "-")

    def testHostGlueOverride(self):
        with patch.object(sys.modules["__main__"], "__glue__", "+", create=True):
            self.assertEqual(glue(), "+")
            self.assertEqual(Flag("+v").glue_char, "v")
            self.assertIsNone(Flag("-v").glue_char)

    def testHostGlueMustBeOneCharacter(self):
        with patch.object(sys.modules["__main__"], "__glue__", "--", create=True):
            with self.assertRaises(ValueError):
                glue()

    def testHostGlueDrivesParsing(self):
        verbose, extra = Flag("+v"), Flag("+x")
        root = Command(Flag("prog")).add(verbose).add(extra)
        with patch.object(sys.modules["__main__"], "__glue__", "+", create=True):
            self.assertEqual(root.parse(["prog", "+vx"]), 2)
        self.assertTrue(verbose.is_set and extra.is_set)


if __name__ == "__main__":
    unittest.main()

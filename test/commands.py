"""
Commands module behavioral tests (parsing, validation, faults, runners).

Scope
- Validate the group dispatch priority and the recursive descent into
  sub-commands, including tokens handed back to a parent.
- Validate mutual exclusion of optional sub-commands and option_required.
- Validate gluing of short flags and positional assignment order.
- Validate validation of activated children and the faults it raises.
- Validate invoke()/__invoke__ in library and shell modes.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Command, ArgumentGroup, Flag, Value, KeyValue, invoke).
"""

from __future__ import annotations

import contextlib
import io
import unittest
from unittest import TestCase

from argotree import ArgumentGroup, Command, Flag, Value, KeyValue, command, invoke
from argotree.faults import (
    UnrecognizedArgumentError,
    ArgumentAlreadySetError,
    ArgumentRequiresValueError,
    AmbiguousValueError,
    ExcessiveCommandError,
    MissingArgumentError,
)


def pyramid():
    """Build the construction-site tree used by several scenarios."""
    arguments = {
        "verbose": Flag("--verbose", "Print verbose messages.", aliases=["-v"]),
        "init": Flag("init", "Initialize pyramid construction site."),
        "build": Flag("build", "Build a pyramid."),
        "pname": KeyValue("pname", "name", "Pyramid name.", default="Cheops"),
        "pstones": KeyValue("pstones", "number", "Stone count.", required=True),
    }
    root = Command(Flag("prog", required=True), option_required=True)
    root.add(arguments["verbose"])
    group = ArgumentGroup("pyramid_options").add(arguments["pname"]).add(arguments["pstones"])
    init = root.subcommand(arguments["init"]).add_group(group)
    build = root.subcommand(arguments["build"])
    return root, init, build, arguments


class TestParseScenarios(TestCase):
    """End-to-end parses over a nested tree."""

    def testInitWithStonesAndVerbose(self):
        root, init, _, arguments = pyramid()
        consumed = root.parse(["prog", "init", "pstones", "500", "-v"])
        self.assertEqual(consumed, 5)
        self.assertIs(root.group(0).selected, init)
        self.assertEqual(arguments["pstones"].value, "500")
        self.assertEqual(arguments["pname"].value, "Cheops")
        self.assertTrue(arguments["verbose"].is_set)

    def testFlagBeforeSubcommand(self):
        root, _, build, arguments = pyramid()
        self.assertEqual(root.parse(["prog", "--verbose", "build"]), 3)
        self.assertIs(root.group(0).selected, build)
        self.assertTrue(arguments["verbose"].is_set)

    def testBothOptionalChildrenAreExcessive(self):
        root, _, _, _ = pyramid()
        with self.assertRaises(ExcessiveCommandError):
            root.parse(["prog", "init", "pstones", "1", "build"])

    def testNoChildWithOptionRequiredIsMissing(self):
        root, _, _, _ = pyramid()
        with self.assertRaises(MissingArgumentError) as context:
            root.parse(["prog", "-v"])
        self.assertIn("\"init|build\"", context.exception.message)

    def testActivatedChildIsValidated(self):
        root, _, _, arguments = pyramid()
        with self.assertRaises(MissingArgumentError) as context:
            root.parse(["prog", "init"])
        self.assertIn("pstones=<number>", context.exception.message)

    def testChildHandingBackTokenIsStillValidated(self):
        root, _, _, _ = pyramid()
        with self.assertRaises(MissingArgumentError):
            root.parse(["prog", "init", "-v"])

    def testUnknownTokenAfterChild(self):
        root, _, _, _ = pyramid()
        with self.assertRaises(UnrecognizedArgumentError) as context:
            root.parse(["prog", "init", "pstones", "1", "bogus"])
        self.assertEqual(context.exception.index, 4)
        self.assertIn("fifth position", context.exception.message)

    def testWrongDiscriminatorIsUnrecognizedAtZero(self):
        root, _, _, _ = pyramid()
        with self.assertRaises(UnrecognizedArgumentError) as context:
            root.parse(["tool", "build"])
        self.assertEqual(context.exception.index, 0)

    def testEmptyStreamIsUnrecognizedAtZero(self):
        root, _, _, _ = pyramid()
        with self.assertRaises(UnrecognizedArgumentError) as context:
            root.parse([])
        self.assertEqual(context.exception.index, 0)

    def testRepeatedChildIsAlreadySet(self):
        root, _, _, _ = pyramid()
        with self.assertRaises(ArgumentAlreadySetError):
            root.parse(["prog", "build", "build"])

    def testParseRejectsPlainString(self):
        root, _, _, _ = pyramid()
        with self.assertRaises(TypeError):
            root.parse("prog build")


class TestGroupDispatch(TestCase):
    """Priority order and matching rules inside one group."""

    def setUp(self):
        self.verbose = Flag("--verbose", aliases=["-v"])
        self.extra = Flag("-x")
        self.opt = KeyValue("--opt", "n", default="d")
        self.first = Value("first")
        self.second = Value("second")
        self.root = Command(Flag("prog"))
        for argument in (self.verbose, self.extra, self.opt, self.first, self.second):
            self.root.add(argument)

    def testKeyValueFormsAreEquivalent(self):
        other = Command(Flag("prog")).add(opt := KeyValue("--opt", "n"))
        self.assertEqual(self.root.parse(["prog", "--opt=5"]), 2)
        self.assertEqual(other.parse(["prog", "--opt", "5"]), 3)
        self.assertEqual(self.opt.value, opt.value)

    def testKeyValueFollowedByFlagIsAmbiguous(self):
        with self.assertRaises(AmbiguousValueError):
            self.root.parse(["prog", "--opt", "-v"])

    def testKeyValueWithoutValueRequiresOne(self):
        with self.assertRaises(ArgumentRequiresValueError):
            self.root.parse(["prog", "--opt"])

    def testExplicitEmptyKeyValue(self):
        self.root.parse(["prog", "--opt="])
        self.assertEqual(self.opt.value, "")

    def testGluedFlagsSetEveryFlag(self):
        self.assertEqual(self.root.parse(["prog", "-vx"]), 2)
        self.assertTrue(self.verbose.is_set)
        self.assertTrue(self.extra.is_set)

    def testGluedTokenWithUnknownCharIsUnrecognized(self):
        with self.assertRaises(UnrecognizedArgumentError) as context:
            self.root.parse(["prog", "-vy"])
        self.assertEqual(context.exception.index, 1)
        self.assertFalse(self.verbose.is_set)

    def testGluedRepeatedCharIsAlreadySet(self):
        with self.assertRaises(ArgumentAlreadySetError):
            self.root.parse(["prog", "-vv"])

    def testGluedAndSeparateFlagCollide(self):
        with self.assertRaises(ArgumentAlreadySetError):
            self.root.parse(["prog", "-v", "-vx"])

    def testPositionalsFillInDeclarationOrder(self):
        self.assertEqual(self.root.parse(["prog", "one", "two"]), 3)
        self.assertEqual((self.first.value, self.second.value), ("one", "two"))

    def testSurplusPositionalIsUnrecognized(self):
        with self.assertRaises(UnrecognizedArgumentError) as context:
            self.root.parse(["prog", "one", "two", "three"])
        self.assertEqual(context.exception.index, 3)

    def testGluePrefixedTokenIsNeverPositional(self):
        with self.assertRaises(UnrecognizedArgumentError) as context:
            self.root.parse(["prog", "-5"])
        self.assertEqual(context.exception.index, 1)
        self.assertFalse(self.first.is_set)

    def testKeyValueWinsOverPositional(self):
        self.root.parse(["prog", "--opt", "5", "one"])
        self.assertEqual(self.opt.value, "5")
        self.assertEqual(self.first.value, "one")

    def testRequiredPositionalMissing(self):
        root = Command(Flag("prog")).add(Value("file", required=True))
        with self.assertRaises(MissingArgumentError):
            root.parse(["prog"])

    def testLaterGroupsAreTried(self):
        late = Flag("--late")
        root = Command(Flag("prog")).add_group(ArgumentGroup("extra").add(late))
        self.assertEqual(root.parse(["prog", "--late"]), 2)
        self.assertTrue(late.is_set)


class TestSubcommands(TestCase):
    """Required children, nested children and discriminator variants."""

    def testRequiredChildMissing(self):
        root = Command(Flag("prog"))
        root.subcommand(Flag("run", required=True))
        with self.assertRaises(MissingArgumentError):
            root.parse(["prog"])

    def testRequiredChildDoesNotSelect(self):
        root = Command(Flag("prog"))
        root.subcommand(Flag("run", required=True))
        root.parse(["prog", "run"])
        self.assertIsNone(root.group(0).selected)

    def testKeyValueDiscriminator(self):
        employ = KeyValue("employ", "amount", default="1000")
        root = Command(Flag("prog"))
        root.subcommand(employ)
        self.assertEqual(root.parse(["prog", "employ", "12"]), 3)
        self.assertEqual(employ.value, "12")

    def testNestedChildrenResumeInEveryAncestor(self):
        top, deep = Flag("--top"), Flag("--deep")
        root = Command(Flag("prog")).add(top)
        middle = root.subcommand(Flag("middle"))
        middle.subcommand(Flag("leaf")).add(deep)
        self.assertEqual(root.parse(["prog", "middle", "leaf", "--deep", "--top"]), 5)
        self.assertTrue(top.is_set)
        self.assertTrue(deep.is_set)

    def testSiblingFlagOfChildIsNotVisibleToParent(self):
        root = Command(Flag("prog"))
        root.subcommand(Flag("run")).add(Flag("--fast"))
        with self.assertRaises(UnrecognizedArgumentError) as context:
            root.parse(["prog", "--fast", "run"])
        self.assertEqual(context.exception.index, 1)

    def testSharedNamedGroup(self):
        shared = ArgumentGroup("common").add(jobs := KeyValue("--jobs", "n", default="1"))
        root = Command(Flag("prog"))
        root.subcommand(Flag("build")).add_group(shared)
        root.subcommand(Flag("test")).add_group(shared)
        root.parse(["prog", "test", "--jobs=4"])
        self.assertEqual(jobs.value, "4")


class TestNamedGroupExclusion(TestCase):
    """Optional children exclude each other only inside their own group."""

    def setUp(self):
        self.root = Command(Flag("prog"))
        self.status = self.root.subcommand(Flag("status"))
        self.actions = ArgumentGroup("actions", option_required=True)
        self.start = self.actions.command(Flag("start"))
        self.stop = self.actions.command(Flag("stop"))
        self.root.add_group(self.actions)

    def testTwoChildrenOfNamedGroupAreExcessive(self):
        with self.assertRaises(ExcessiveCommandError) as context:
            self.root.parse(["prog", "start", "stop"])
        self.assertIn("\"start\" and \"stop\"", context.exception.message)

    def testChildrenOfDifferentGroupsCombine(self):
        self.assertEqual(self.root.parse(["prog", "status", "start"]), 3)
        self.assertIs(self.root.group(0).selected, self.status)
        self.assertIs(self.root.group(1).selected, self.start)

    def testNamedGroupOptionRequired(self):
        with self.assertRaises(MissingArgumentError) as context:
            self.root.parse(["prog", "status"])
        self.assertIn("\"start|stop\"", context.exception.message)
        self.assertIs(self.root.group(0).selected, self.status)


class TestInvoke(TestCase):
    """Runner behavior in library and shell modes."""

    def testInvokeSplitsStrings(self):
        verbose = Flag("-v")
        root = command(Flag("prog")).add(verbose)
        self.assertEqual(invoke(root, "prog -v"), 2)
        self.assertTrue(verbose.is_set)

    def testInvokeAcceptsIterables(self):
        root = command(Flag("prog")).add(Value("file"))
        self.assertEqual(invoke(root, ("prog", "a b")), 2)

    def testInvokeRaisesInLibraryMode(self):
        root = command(Flag("prog"))
        with self.assertRaises(UnrecognizedArgumentError) as context:
            invoke(root, "prog nope")
        self.assertFalse(context.exception.options["shell"])

    def testInvokeExitsInShellMode(self):
        root = command(Flag("prog"), shell=True).add(Flag("-v"))
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            with self.assertRaises(SystemExit) as context:
                invoke(root, "prog nope")
        self.assertEqual(context.exception.code, 1)
        self.assertIn("unrecognized argument \"nope\" at second position", stderr.getvalue())
        self.assertIn("Usage: prog [-v]", stderr.getvalue())

    def testInvokeRejectsNonInvocable(self):
        with self.assertRaises(TypeError):
            invoke(object())

    def testInvokeRejectsBadPrompt(self):
        with self.assertRaises(TypeError):
            invoke(command(Flag("prog")), 3)
        with self.assertRaises(TypeError):
            invoke(command(Flag("prog")), ["prog", 3])


if __name__ == "__main__":
    unittest.main()

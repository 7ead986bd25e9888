"""
Classifier loop behavioral tests (scope, precedence, finalization).

Scope
- Token classification precedence: stop token, pending value, command,
  option (exact then fused), switch, argument, unmatched.
- Scope narrowing when commands match; argument binding order.
- Finalization faults: missing option value, required argument missing.
- Implicit help switch, multiple occurrences, input normalization.

Conventions
- Test method names follow CamelCase per project convention.
- Tokens always start with a program name unless skip_first=False.
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from argosy import (
    Alias,
    Argument,
    Command,
    MalformedInputError,
    MultipleOccurrencesError,
    OptionValueExpectedError,
    Option,
    Parser,
    RequiredArgumentMissingError,
    Switch,
)


class TestScenarios(TestCase):
    """End-to-end scenarios over a small two-command declaration."""

    def setUp(self):
        self.parser = Parser("prog", "scenario parser")
        self.verbose = Switch(Alias.insensitive("--verbose"), "-v", "/v")
        self.input = Option("--input", "-i", metavar="file")
        self.value = Option(Alias.insensitive("--value"), "-V", "/V", metavar="int")
        self.first = Argument("and")
        self.a = Command(Alias.insensitive("commandA"), "cmdA")
        self.b = Command(Alias.insensitive("commandB"), "B")
        self.a.add(self.input)
        self.b.add(self.value, self.first)
        self.parser.add(self.a, self.b, self.verbose)

    def testCommandWithOptionAndRepeatedSwitch(self):
        result = self.parser.parse(["prog", "cmdA", "-i", "f.txt", "-v", "-v"])
        self.assertTrue(result.success)
        self.assertFalse(result.show_help)
        self.assertIsNone(result.error)
        self.assertEqual(result.commands, (self.a,))
        self.assertTrue(result.has_command(self.a))
        self.assertFalse(result.has_command(self.b))
        self.assertEqual(result.option_value(self.input).text, "f.txt")
        self.assertEqual(result.switch_count(self.verbose), 2)

    def testIntegerOptionAndArgument(self):
        result = self.parser.parse(["prog", "B", "/V", "42", "and"])
        self.assertTrue(result.success)
        self.assertEqual(result.option_value(self.value).as_integer(), 42)
        self.assertEqual(result.argument(self.first).text, "and")
        self.assertTrue(result.success)

    def testOptionWithoutValueFails(self):
        result = self.parser.parse(["prog", "B", "-V"])
        self.assertFalse(result.success)
        self.assertTrue(result.show_help)
        self.assertEqual(result.error, "value of option expected, but no more arguments: --value")
        self.assertIsInstance(result.fault, OptionValueExpectedError)

    def testRequiredArgumentMissing(self):
        result = self.parser.parse(["prog", "B", "-V", "1"])
        self.assertFalse(result.success)
        self.assertEqual(result.error, "required argument missing: and")
        self.assertIsInstance(result.fault, RequiredArgumentMissingError)

    def testCopiedNodeCorrelatesWithResult(self):
        result = self.parser.parse(["prog", "-v", "/v", "--VERBOSE"])
        self.assertEqual(result.switch_count(copy.copy(self.verbose)), 3)
        self.assertEqual(result.switch_count(Switch("-v")), 0)

    def testIdempotentParse(self):
        tokens = ["prog", "B", "/V", "42", "-v", "and", "extra"]
        self.assertEqual(self.parser.parse(tokens), self.parser.parse(tokens))


class TestPrecedence(TestCase):
    """First applicable rule wins for every token."""

    def testPendingOptionSwallowsSwitchLookalike(self):
        option, switch = Option("-o"), Switch("-v")
        parser = Parser("prog").add(option, switch)
        result = parser.parse(["prog", "-o", "-v"])
        self.assertTrue(result.success)
        self.assertEqual(result.option_value(option).text, "-v")
        self.assertEqual(result.switch_count(switch), 0)

    def testPendingOptionSwallowsCommandName(self):
        option, command = Option("-o"), Command("run")
        parser = Parser("prog").add(option, command)
        result = parser.parse(["prog", "-o", "run"])
        self.assertEqual(result.commands, ())
        self.assertEqual(result.option_value(option).text, "run")

    def testCommandBeatsOption(self):
        command, option = Command("-x"), Option("-x")
        parser = Parser("prog").add(command, option)
        result = parser.parse(["prog", "-x"])
        self.assertTrue(result.success)
        self.assertEqual(result.commands, (command,))

    def testOptionBeatsSwitch(self):
        option, switch = Option("-v"), Switch("-v")
        parser = Parser("prog").add(option, switch)
        result = parser.parse(["prog", "-v", "1"])
        self.assertEqual(result.option_value(option).text, "1")
        self.assertEqual(result.switch_count(switch), 0)

    def testSwitchBeatsArgument(self):
        switch, argument = Switch("-v"), Argument("name", required=False)
        parser = Parser("prog").add(switch, argument)
        result = parser.parse(["prog", "-v"])
        self.assertEqual(result.switch_count(switch), 1)
        self.assertFalse(result.argument(argument))

    def testFirstDeclaredOptionWins(self):
        first, second = Option("-o"), Option(Alias.insensitive("-O"))
        parser = Parser("prog").add(first, second)
        result = parser.parse(["prog", "-o", "1"])
        self.assertEqual(result.option_count(first), 1)
        self.assertEqual(result.option_count(second), 0)


class TestStopToken(TestCase):
    """Everything after "--" is unmatched, whatever it spells."""

    def setUp(self):
        self.option = Option("-o")
        self.switch = Switch("-v")
        self.command = Command("run")
        self.parser = Parser("prog", error_on_unmatched=False)
        self.parser.add(self.option, self.switch, self.command)

    def testRemainingTokensAreUnmatched(self):
        result = self.parser.parse(["prog", "-v", "--", "run", "-v", "-o", "1"])
        self.assertTrue(result.success)
        self.assertEqual(result.commands, ())
        self.assertEqual(result.switch_count(self.switch), 1)
        self.assertEqual([value.text for value in result.unmatched], ["run", "-v", "-o", "1"])
        self.assertEqual([value.position for value in result.unmatched], [3, 4, 5, 6])

    def testStopTokenAloneLeavesNothing(self):
        result = self.parser.parse(["prog", "--"])
        self.assertTrue(result.success)
        self.assertFalse(result.has_unmatched)

    def testStopTokenBeatsPendingOption(self):
        result = self.parser.parse(["prog", "-o", "--", "x"])
        self.assertFalse(result.success)
        self.assertIsInstance(result.fault, OptionValueExpectedError)

    def testUnmatchedAfterStopTokenFailsByDefault(self):
        self.parser.set_error_on_unmatched(True)
        self.assertFalse(self.parser.parse(["prog", "--", "run"]).success)


class TestOptionValues(TestCase):
    """Separate and fused option values, kept verbatim."""

    def setUp(self):
        self.option = Option("--opt", "-o")
        self.parser = Parser("prog").add(self.option)

    def testFusedSeparators(self):
        for token in ("-o=abc", "-o:abc", "-o abc", "--opt=abc", "--opt:abc", "--opt abc"):
            with self.subTest(token=token):
                result = self.parser.parse(["prog", token])
                self.assertTrue(result.success)
                value = result.option_value(self.option)
                self.assertEqual(value.text, "abc")
                self.assertEqual(value.token, token)
                self.assertEqual(value.position, 1)
                self.assertIs(value.source, self.option)

    def testFusedValueKeepsSeparatorsInside(self):
        result = self.parser.parse(["prog", "-o=a=b:c"])
        self.assertEqual(result.option_value(self.option).text, "a=b:c")

    def testEmptyFusedValueIsPresent(self):
        result = self.parser.parse(["prog", "--opt="])
        value = result.option_value(self.option)
        self.assertTrue(value)
        self.assertEqual(value.text, "")

    def testValuesAreNotTrimmed(self):
        result = self.parser.parse(["prog", "-o", "  spaced  "])
        self.assertEqual(result.option_value(self.option).text, "  spaced  ")

    def testValuesInInputOrder(self):
        result = self.parser.parse(["prog", "-o", "1", "-o=2", "--opt", "3"])
        self.assertEqual([value.text for value in result.option_values(self.option)], ["1", "2", "3"])
        self.assertEqual(result.option_count(self.option), 3)
        self.assertEqual(result.option_value(self.option).text, "1")
        self.assertTrue(result.success)

    def testMultipleOccurrencesRejectedOnDemand(self):
        result = self.parser.parse(["prog", "-o", "1", "-o", "2"])
        self.assertTrue(result.success)
        value = result.option_value(self.option, error_if_multiple=True)
        self.assertFalse(value)
        self.assertIsNone(value.as_integer())
        self.assertFalse(result.success)
        self.assertEqual(result.error, "option was specified multiple times in the command line: --opt")
        self.assertIsInstance(result.fault, MultipleOccurrencesError)

    def testSingleOccurrenceAcceptedOnDemand(self):
        result = self.parser.parse(["prog", "-o", "1"])
        self.assertEqual(result.option_value(self.option, error_if_multiple=True).text, "1")
        self.assertTrue(result.success)

    def testAbsentOptionGivesMissingValue(self):
        result = self.parser.parse(["prog"])
        value = result.option_value(self.option)
        self.assertFalse(value)
        self.assertIsNone(value.position)
        self.assertIsNone(value.as_double())
        self.assertTrue(result.success)


class TestScope(TestCase):
    """Commands narrow the visible commands and widen everything else."""

    def setUp(self):
        self.verbose = Switch("-v")
        self.level = Option("-l")
        self.sub = Command("sub")
        self.a = Command("a").add(self.level, self.sub)
        self.b = Command("b")
        self.parser = Parser("prog", error_on_unmatched=False).add(self.a, self.b, self.verbose)

    def testSiblingIsUnreachableAfterMatch(self):
        result = self.parser.parse(["prog", "a", "b"])
        self.assertEqual(result.commands, (self.a,))
        self.assertEqual([value.text for value in result.unmatched], ["b"])

    def testNestedCommandsRecordedInOrder(self):
        result = self.parser.parse(["prog", "a", "sub", "-v"])
        self.assertEqual(result.commands, (self.a, self.sub))
        self.assertEqual(result.switch_count(self.verbose), 1)

    def testCommandOptionsInvisibleBeforeMatch(self):
        result = self.parser.parse(["prog", "-l", "1", "a", "-l", "2"])
        self.assertEqual([value.text for value in result.option_values(self.level)], ["2"])
        self.assertEqual([value.text for value in result.unmatched], ["-l", "1"])

    def testNestedCommandNotReachableFromRoot(self):
        result = self.parser.parse(["prog", "sub"])
        self.assertEqual(result.commands, ())
        self.assertTrue(result.has_unmatched)


class TestArguments(TestCase):
    """Arguments bind in declaration order, one token each."""

    def testBindInDeclarationOrder(self):
        first, second = Argument("first"), Argument("second", required=False)
        parser = Parser("prog").add(first, second)
        result = parser.parse(["prog", "x", "y"])
        self.assertEqual(result.argument(first).text, "x")
        self.assertEqual(result.argument(second).text, "y")
        self.assertEqual([value.source for value in result.arguments], [first, second])

    def testOptionalBeforeRequiredIsFilledFirst(self):
        first, second = Argument("first", required=False), Argument("second")
        parser = Parser("prog").add(first, second)
        result = parser.parse(["prog", "x"])
        self.assertFalse(result.success)
        self.assertEqual(result.argument(first).text, "x")
        self.assertFalse(result.argument(second))
        self.assertEqual(result.error, "required argument missing: second")

    def testCommandArgumentsQueueAfterRootArguments(self):
        root, nested = Argument("root"), Argument("nested")
        command = Command("cmd").add(nested)
        parser = Parser("prog").add(root, command)
        result = parser.parse(["prog", "cmd", "x", "y"])
        self.assertTrue(result.success)
        self.assertEqual(result.argument(root).text, "x")
        self.assertEqual(result.argument(nested).text, "y")

    def testUnmatchedFaultOutranksMissingArgument(self):
        argument = Argument("name")
        option = Option("-o")
        parser = Parser("prog").add(option, argument)
        result = parser.parse(["prog", "-o"])
        self.assertIsInstance(result.fault, OptionValueExpectedError)


class TestImplicitHelp(TestCase):
    """The implicit help switch raises the help flag without failing."""

    def testHelpAliases(self):
        parser = Parser("prog")
        for token in ("--help", "-h", "/h", "-?", "/?"):
            with self.subTest(token=token):
                result = parser.parse(["prog", token])
                self.assertTrue(result.success)
                self.assertTrue(result.show_help)
                self.assertEqual(result.switches, ())

    def testHelpVisibleInsideCommands(self):
        command = Command("cmd")
        parser = Parser("prog").add(command)
        result = parser.parse(["prog", "cmd", "-h"])
        self.assertTrue(result.show_help)
        self.assertEqual(result.commands, (command,))

    def testHelpCanBeDisabled(self):
        parser = Parser("prog", implicit_help=False)
        result = parser.parse(["prog", "--help"])
        self.assertFalse(result.success)
        self.assertEqual([value.text for value in result.unmatched], ["--help"])

        parser.enable_implicit_help()
        self.assertTrue(parser.parse(["prog", "--help"]).show_help)

    def testHelpIsCaseSensitive(self):
        parser = Parser("prog", error_on_unmatched=False)
        self.assertFalse(parser.parse(["prog", "--HELP"]).show_help)


class TestInput(TestCase):
    """Token list normalization."""

    def testSkipFirstDisabled(self):
        switch = Switch("-v")
        parser = Parser("prog").add(switch)
        result = parser.parse(["-v", "-v"], skip_first=False)
        self.assertEqual(result.switch_count(switch), 2)

    def testShellString(self):
        option = Option("-o")
        parser = Parser("prog").add(option)
        result = parser.parse("prog -o 'a b'")
        self.assertEqual(result.option_value(option).text, "a b")

    def testTuplesAndGeneratorsAccepted(self):
        switch = Switch("-v")
        parser = Parser("prog").add(switch)
        self.assertEqual(parser.parse(("prog", "-v")).switch_count(switch), 1)
        self.assertEqual(parser.parse(token for token in ("prog", "-v")).switch_count(switch), 1)

    def testEmptyInput(self):
        self.assertTrue(Parser("prog").parse([]).success)

    def testUnbalancedQuotesRecorded(self):
        parser = Parser("prog").add(Option("-o"))
        result = parser.parse('prog -o "unterminated')
        self.assertFalse(result.success)
        self.assertTrue(result.show_help)
        self.assertIsInstance(result.fault, MalformedInputError)
        self.assertEqual(result.error, "command line cannot be split: no closing quotation")
        self.assertEqual(result.options, ())

    def testNonStringTokenRejected(self):
        with self.assertRaises(TypeError):
            Parser("prog").parse(["prog", 1])

    def testNonIterableRejected(self):
        with self.assertRaises(TypeError):
            Parser("prog").parse(42)


class TestChain(TestCase):
    """Path lookup from the root to a nested command."""

    def testChainToNestedCommand(self):
        leaf = Command("leaf")
        middle = Command("middle").add(leaf)
        other = Command("other")
        parser = Parser("prog").add(other, middle)
        self.assertEqual(parser.chain(leaf), (middle, leaf))
        self.assertEqual(parser.chain(other), (other,))

    def testChainToUnknownCommand(self):
        self.assertEqual(Parser("prog").chain(Command("ghost")), ())


if __name__ == '__main__':
    unittest.main()

"""
Help extension tests (--help claiming, help layout, error reports, exit policy).

Conventions
- Test method names follow CamelCase per project convention.
- Every test parses against test/cli.yml; output goes to a plain, colorless buffer.
"""

from __future__ import annotations

import io
import os
import unittest
from unittest import TestCase

from rich.console import Console

from clix import (
    Abort,
    Command,
    Event,
    HelpExt,
    HelpRequest,
    Option,
    Terminal,
    argument_display_name,
    load_cli_def,
    option_display_name,
)

DEFINITION = os.path.join(os.path.dirname(os.path.abspath(__file__)), "cli.yml")


class HelpTestCase(TestCase):
    def setUp(self):
        self.terminal = Terminal(Console(file=io.StringIO(), color_system=None, width=100), colorful=False)
        self.cli = load_cli_def(DEFINITION)

    def run_cli(self, *tokens, long="help", alias=("h", "?"), **options):
        ext = HelpExt(long, alias, terminal=self.terminal, **options)
        result = load_cli_def(DEFINITION).use(ext).parse_args(["cli", *tokens])
        return result, result.exec()

    @property
    def output(self):
        return self.terminal.console.file.getvalue()


class TestHelpRequests(HelpTestCase):
    def testShortFlag(self):
        result, error = self.run_cli("up", "-h")
        self.assertIsInstance(error, HelpRequest)
        self.assertEqual(result.stack[-1].errors, [])
        self.assertIn("clix test command line", self.output)
        self.assertIn("usage: test up [OPTIONS] OBJECT ...", self.output)
        self.assertIn("arguments:", self.output)
        self.assertIn("the object to bring up", self.output)
        self.assertIn("-s,--server=SERVER", self.output)
        self.assertIn("-a,--flaga", self.output)
        self.assertNotIn("--flaga=", self.output)

    def testAliases(self):
        for token in ("--help", "-?"):
            with self.subTest(token=token):
                self.setUp()
                _, error = self.run_cli(token)
                self.assertIsInstance(error, HelpRequest)
                self.assertIn("usage: test [OPTIONS] SUBCOMMAND ...", self.output)

    def testRootCommands(self):
        self.run_cli("-h")
        self.assertIn("commands:", self.output)
        self.assertIn("defs|d", self.output)
        self.assertIn("bring things down", self.output)
        self.assertNotIn("--flaga", self.output)

    def testRemainingTokensAreNotParsed(self):
        result, _ = self.run_cli("up", "-h", "--unknown", "a1")
        self.assertEqual(result.unparsed, ["--unknown", "a1"])
        self.assertEqual(result.stack[-1].errors, [])

    def testCustomNames(self):
        _, error = self.run_cli("up", "--usage", "a1", long="usage", alias=())
        self.assertIsInstance(error, HelpRequest)
        result, _ = self.run_cli("up", "-h", "a1", long="usage", alias=())
        self.assertEqual([str(fault) for fault in result.stack[-1].errors], ["unknown option: h"])

    def testOptionalArguments(self):
        self.run_cli("defs", "-h")
        self.assertIn("[STR] [INT] [NUM] [DICT] [SLICE] ...", self.output)


class TestErrorReports(HelpTestCase):
    def testNoErrors(self):
        _, error = self.run_cli("up", "a1")
        self.assertIsNone(error)
        self.assertEqual(self.output, "")

    def testVariableErrors(self):
        _, error = self.run_cli("up", "--bad", "-x", "a1")
        self.assertIsInstance(error, HelpRequest)
        self.assertIn("unknown option: bad", self.output)
        self.assertIn("unknown option: x", self.output)
        self.assertIn("[ cli |", self.output)
        self.assertNotIn("usage:", self.output)

    def testMissingValues(self):
        _, error = self.run_cli("reqs")
        self.assertIsInstance(error, HelpRequest)
        self.assertIn("expect value REQ1 after --req1", self.output)

    def testUnknownCommand(self):
        result, error = self.run_cli("sideways")
        self.assertTrue(result.missing_command)
        self.assertIsInstance(error, HelpRequest)
        self.assertIn("unknown command: sideways", self.output)
        self.assertIn("usage: test [OPTIONS] SUBCOMMAND ...", self.output)
        self.assertNotIn("clix test command line", self.output)

    def testForeignAbort(self):
        failure = RuntimeError("boom")
        parser = self.cli.use(HelpExt(terminal=self.terminal)).parser()
        parser.add_parse_ext(Event.CMD_START, lambda event, context: Abort(failure))
        self.assertIs(parser.parse_args(["cli", "up"]).exec(), failure)
        self.assertIn("boom", self.output)

    def testForeignAbortIgnored(self):
        parser = self.cli.use(HelpExt(terminal=self.terminal, any_error=False)).parser()
        parser.add_parse_ext(Event.CMD_START, lambda event, context: Abort(RuntimeError("boom")))
        parser.parse_args(["cli", "up"]).exec()
        self.assertEqual(self.output, "")


class TestExitPolicy(HelpTestCase):
    def testExitCode(self):
        with self.assertRaises(SystemExit) as context:
            self.run_cli("-h", exit_code=2)
        self.assertEqual(context.exception.code, 2)

    def testExitOnErrors(self):
        with self.assertRaises(SystemExit) as context:
            self.run_cli("up", exit_code=1)
        self.assertEqual(context.exception.code, 1)

    def testBooleanIsNotAnExitCode(self):
        _, error = self.run_cli("-h", exit_code=True)
        self.assertIsInstance(error, HelpRequest)

    def testNoExitWithoutErrors(self):
        _, error = self.run_cli("up", "a1", exit_code=3)
        self.assertIsNone(error)


class TestDisplayNames(TestCase):
    def setUp(self):
        self.root = Command(
            "cmd",
            options=[
                Option("server", alias=["s"]),
                Option("verbose", alias=["v", "loud"], type="bool"),
                Option("f", alias=["F"]),
                Option("port", type="int", tags={"value-name": "num"}),
            ],
            arguments=[Option("src", required=True), Option("dst")],
        ).normalize()

    def testOptions(self):
        self.assertEqual(
            [option_display_name(option) for option in self.root.options],
            ["-s,--server=SERVER", "-v,--loud|--verbose", "-F|-f F", "--port=NUM"],
        )

    def testArguments(self):
        self.assertEqual([argument_display_name(argument) for argument in self.root.arguments], ["SRC", "[DST]"])


class TestConstruction(TestCase):
    def testInvalidArguments(self):
        with self.assertRaises(TypeError):
            HelpExt("")
        with self.assertRaises(TypeError):
            HelpExt(terminal="stderr")

    def testNames(self):
        self.assertEqual(HelpExt().names, ("help", "h", "?"))
        self.assertEqual(HelpExt("usage", "u").names, ("usage", "u"))


if __name__ == "__main__":
    unittest.main()

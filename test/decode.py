"""
Definition decoding tests (YAML documents, mappings, CliDef).

Scope
- Validate bare command documents and top-level "cli" definitions.
- Validate that decoded trees are normalized and schema problems surface as SchemaExit.
- Validate structural type checks on malformed documents.

Conventions
- Test method names follow CamelCase per project convention.
- Documents are written inline with textwrap.dedent.
"""

from __future__ import annotations

import io
import os
import tempfile
import unittest
from textwrap import dedent
from unittest import TestCase

import yaml

from clix import (
    CliDef,
    Command,
    SchemaExit,
    ValueKind,
    command_from_mapping,
    decode_cli_def,
    decode_command,
    load_cli_def,
    option_from_mapping,
)


class TestDecodeCommand(TestCase):
    def testFullDocument(self):
        command = decode_command(dedent("""
            name: tool
            alias: t
            description: a tool
            example: tool run
            tags: {group: main}
            options:
              - name: verbose
                alias: [v]
                type: bool
              - name: port
                alias: p
                type: int
                default: 8080
                tags: {value-name: num}
            arguments:
              - name: target
                required: true
            commands:
              - name: run
                options:
                  - name: env
                    type: map
        """))
        self.assertTrue(command.normalized)
        self.assertEqual(command.name, "tool")
        self.assertEqual(command.alias, ["t"])
        self.assertEqual(command.example, "tool run")
        self.assertEqual(command.tag_string("group"), "main")
        self.assertIs(command.find_option("v").kind, ValueKind.BOOL)
        self.assertEqual(command.find_option("p").value_name, "num")
        self.assertEqual(command.default_vars()["port"], 8080)
        self.assertTrue(command.find_argument("target").required)
        self.assertIs(command.find_command("run").find_option("env").kind, ValueKind.MAP)

    def testScalarFieldsAsText(self):
        command = decode_command(dedent("""
            name: tool
            options:
              - name: 1024
                type: int
                description: 42
        """))
        option = command.options[0]
        self.assertEqual(option.name, "1024")
        self.assertEqual(option.description, "42")

    def testStream(self):
        command = decode_command(io.StringIO("name: tool\n"))
        self.assertEqual(command.name, "tool")

    def testUnknownKeysIgnored(self):
        command = decode_command("name: tool\ncolor: blue\n")
        self.assertEqual(command.name, "tool")

    def testSchemaProblems(self):
        with self.assertRaises(SchemaExit) as context:
            decode_command(dedent("""
                name: cmd
                options:
                  - name: opt
                    type: wrong-type
            """))
        self.assertEqual([error.path for error in context.exception.exceptions], ["cmd[opt]"])

    def testMalformedDocuments(self):
        for source in ("- a\n- b\n", "name: [a]\n", "options: {a: b}\n", "alias: [1]\n", "options: [a]\n"):
            with self.subTest(source=source):
                with self.assertRaises(TypeError):
                    decode_command(source)

    def testSyntaxErrors(self):
        with self.assertRaises(yaml.YAMLError):
            decode_command("name: [tool\n")

    def testRejectsNonText(self):
        with self.assertRaises(TypeError):
            decode_command(42)


class TestMappings(TestCase):
    def testOptionFromMapping(self):
        option = option_from_mapping({"name": "tags", "type": "string", "list": True, "default": ["a"]})
        self.assertEqual(option.name, "tags")
        self.assertTrue(option.list)
        self.assertEqual(option.default, ["a"])

    def testErrorLocation(self):
        with self.assertRaisesRegex(TypeError, r"command\.options\[1\]"):
            command_from_mapping({"name": "tool", "options": [{"name": "a"}, {"name": "b", "required": "yes"}]})

    def testUnnormalized(self):
        command = command_from_mapping({"name": "tool"})
        self.assertIsInstance(command, Command)
        self.assertFalse(command.normalized)


class TestCliDef(TestCase):
    def testDecode(self):
        definition = decode_cli_def(dedent("""
            cli:
              name: tool
              commands:
                - name: up
        """))
        self.assertEqual(definition.cli.name, "tool")
        self.assertTrue(definition.cli.normalized)
        result = definition.parse_args(["prog", "up"])
        self.assertEqual([pcmd.command.name for pcmd in result.stack], ["tool", "up"])

    def testWithoutCli(self):
        definition = decode_cli_def("other: 1\n")
        self.assertIsNone(definition.cli)
        with self.assertRaises(ValueError):
            definition.parser()

    def testEmptyDocument(self):
        self.assertIsNone(decode_cli_def("").cli)

    def testRegistrarsApplyToEveryParser(self):
        registered = []

        class Registrar:
            def register(self, parser):
                registered.append(parser)

        definition = CliDef(Command("tool").normalize()).use(Registrar())
        first, second = definition.parser(), definition.parser()
        self.assertEqual(registered, [first, second])

    def testInvalidArguments(self):
        with self.assertRaises(TypeError):
            CliDef("tool")
        with self.assertRaises(TypeError):
            CliDef().use(object())

    def testLoadFile(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "cli.yml")
            with open(path, "w", encoding="utf-8") as stream:
                stream.write("cli:\n  name: tool\n")
            self.assertEqual(load_cli_def(path).cli.name, "tool")


if __name__ == "__main__":
    unittest.main()

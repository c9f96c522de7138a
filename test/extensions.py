"""
Dispatcher tests (registration, ordering, short-circuit results).

Conventions
- Test method names follow CamelCase per project convention.
- Contexts are created against a stub parser exposing the attributes they read.
"""

from __future__ import annotations

import unittest
from types import SimpleNamespace
from unittest import TestCase

from clix import Command
from clix.extensions import CONTINUE, STOP, Abort, Dispatcher, Event, Flow, ParseContext, call_exec_ext
from clix.results import ParsedCmd, ParseResult


def stub_parser():
    result = ParseResult()
    result.stack.extend([ParsedCmd(Command("root").normalize()), ParsedCmd(Command("leaf").normalize())])
    return SimpleNamespace(result=result, current=result.stack[-1])


class TestDispatcher(TestCase):
    def setUp(self):
        self.dispatcher = Dispatcher()
        self.context = ParseContext(stub_parser())

    def testRunsInRegistrationOrder(self):
        calls = []
        self.dispatcher.add(Event.CMD_START, lambda event, context: calls.append(1))
        self.dispatcher.add("cmd.start", lambda event, context: calls.append(2))
        self.assertIs(self.dispatcher.fire(Event.CMD_START, self.context), CONTINUE)
        self.assertEqual(calls, [1, 2])
        self.assertEqual(len(self.dispatcher), 2)

    def testEventsAreIndependent(self):
        calls = []
        self.dispatcher.add(Event.OPT_ASSIGN, lambda event, context: calls.append(event))
        self.dispatcher.fire(Event.OPT_RESOLVE, self.context)
        self.assertEqual(calls, [])
        self.assertEqual(self.dispatcher.observers(Event.OPT_ASSIGN)[0].__name__, "<lambda>")

    def testStop(self):
        calls = []
        self.dispatcher.add(Event.VAR_ASSIGNED, lambda event, context: STOP)
        self.dispatcher.add(Event.VAR_ASSIGNED, lambda event, context: calls.append(event))
        self.assertIs(self.dispatcher.fire(Event.VAR_ASSIGNED, self.context), Flow.STOP)
        self.assertEqual(calls, [])

    def testAbort(self):
        error = RuntimeError("halt")
        self.dispatcher.add(Event.OPT_RESOLVE, lambda event, context: Abort(error))
        self.dispatcher.add(Event.OPT_RESOLVE, lambda event, context: self.fail("not reached"))
        outcome = self.dispatcher.fire(Event.OPT_RESOLVE, self.context)
        self.assertEqual(outcome, Abort(error))
        self.assertIs(outcome.error, error)

    def testObjectObserver(self):
        class Observer:
            def __init__(self):
                self.events = []

            def handle_parse_event(self, event, context):
                self.events.append(event)
                return CONTINUE

        observer = Observer()
        self.dispatcher.add(Event.CMD_START, observer)
        self.dispatcher.fire(Event.CMD_START, self.context)
        self.assertEqual(observer.events, [Event.CMD_START])

    def testInvalidRegistrations(self):
        with self.assertRaises(ValueError):
            self.dispatcher.add("cmd.stop", lambda event, context: None)
        with self.assertRaises(TypeError):
            self.dispatcher.add(Event.CMD_START, object())

    def testInvalidResult(self):
        self.dispatcher.add(Event.CMD_START, lambda event, context: True)
        with self.assertRaises(TypeError):
            self.dispatcher.fire(Event.CMD_START, self.context)


class TestAbort(TestCase):
    def testRequiresException(self):
        with self.assertRaises(TypeError):
            Abort("message")

    def testFinal(self):
        with self.assertRaises(TypeError):
            class Derived(Abort):  # NOQA: F-841
                pass


class TestParseContext(TestCase):
    def setUp(self):
        self.parser = stub_parser()
        self.context = ParseContext(self.parser, option_at=1, name="flag", value="v")

    def testStackAccess(self):
        self.assertEqual(len(self.context.cmd_stack), 2)
        self.assertIs(self.context.current_cmd, self.parser.current)
        self.assertIs(self.context.cmd_at(0), self.parser.result.stack[0])
        self.assertIsNone(self.context.cmd_at(2))
        self.assertIsNone(self.context.cmd_at(-1))

    def testSetVars(self):
        self.context.set_var("a", 1).set_var_at(0, "b", 2).set_var_at(5, "c", 3)
        self.assertEqual(self.parser.current.vars, {"a": 1})
        self.assertEqual(self.parser.result.stack[0].vars, {"b": 2})

    def testDefaults(self):
        context = ParseContext(self.parser)
        self.assertEqual(context.option_at, -1)
        self.assertIsNone(context.option)
        self.assertIsNone(context.value)
        self.assertFalse(context.negate)
        self.assertFalse(context.ignore)


class TestExecCall(TestCase):
    def testCallableAndMethod(self):
        calls = []

        class Ext:
            def execute_cmd(self, context):
                calls.append(("method", context))

        call_exec_ext(lambda context: calls.append(("callable", context)), "ctx")
        call_exec_ext(Ext(), "ctx")
        self.assertEqual(calls, [("callable", "ctx"), ("method", "ctx")])

    def testRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            call_exec_ext(object(), None)


if __name__ == "__main__":
    unittest.main()

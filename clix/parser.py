"""
clix parser: the token-driven state machine producing a ParseResult.

States
- PRE: nothing consumed; the first token is the program name and pushes the root
- CMD: classifying tokens (long option, short cluster, subcommand, positional, "--")
- VAL: a short option waits for its value in the next token
- END: after "--"; every token is a positional argument and is kept in unparsed
- ERR: after an unknown subcommand; tokens are drained into unparsed ("--" → ERR_END)
- ERR_END: terminal drain; every token goes into unparsed

Token rules (state CMD)
- "--"               → END
- "--name[=value]"   → option looked up from the top frame down to the root;
                       "--no-name" negates a boolean; "--=x" is an undefined option
- "-abc", "-fVALUE"  → short cluster: booleans are set, the first value-taking option
                       takes the rest of the token or, when nothing is left, the next one
- "name"             → subcommand (name or alias) when the top frame has subcommands,
                       positional argument otherwise

Observers can abort at any event (see clix.extensions); the parser then stops the
token at hand and drains every remaining token into unparsed.

Example
    from clix import Parser

    result = Parser(root).parse_args(["tool", "--server=host", "up", "object"])
    if result.has_errors():
        ...
"""
import logging
import sys
from enum import Enum

from .coercion import ValueKind
from .extensions import Abort, Dispatcher, Event, ParseContext
from .faults import TooFewArgumentsError, VarError
from .results import ParsedCmd, ParseResult
from .schema import Command

logger = logging.getLogger(__name__)


class State(Enum):
    PRE = "pre"
    CMD = "cmd"
    VAL = "val"
    END = "end"
    ERR = "err"
    ERR_END = "err-end"


class Parser:
    """
    single-use parser bound to a (normalized) root command.
    """

    def __init__(self, command, /):
        if not isinstance(command, Command):
            raise TypeError("Parser() argument must be a Command")
        if not command.normalized:
            command.normalize()
        self.command = command
        self.result = ParseResult()
        self.state = State.PRE
        self.current = None
        self._dispatcher = Dispatcher()
        self._pending = None
        self._used = False

    def __repr__(self):
        return "Parser(%r, state=%s)" % (self.command.name, self.state.name)

    def use(self, *registrars):
        for registrar in registrars:
            if not callable(getattr(registrar, "register", None)):
                raise TypeError("use() arguments must implement register(parser)")
            registrar.register(self)
        return self

    def add_parse_ext(self, event, observer, /):
        self._dispatcher.add(event, observer)
        return self

    def add_exec_ext(self, ext, /):
        self.result.add_ext(ext)
        return self

    @property
    def aborted(self):
        return self.state is State.ERR_END and self.result.error is not None

    def _fire(self, event, context):
        outcome = self._dispatcher.fire(event, context)
        if isinstance(outcome, Abort):
            logger.info("parse aborted on %s: %s", event, outcome.error)
            self.result.error = outcome.error
            self.state = State.ERR_END
            return False
        return True

    def _context(self, **fields):
        return ParseContext(self, **fields)

    def _find_option(self, name):
        stack = self.result.stack
        for at in range(len(stack) - 1, -1, -1):
            if (option := stack[at].command.find_option(name)) is not None:
                return option, at
        return None, -1

    def _push_command(self, pcmd):
        stack = self.result.stack
        stack.append(pcmd)
        self.current = pcmd
        at = len(stack) - 1
        logger.debug("pushed command %r at %d", pcmd.command.name, at)
        if not self._fire(Event.CMD_START, self._context(option_at=at)):
            return
        for name, value in list(pcmd.vars.items()):
            context = self._context(option_at=at, option=pcmd.command.find_var(name), name=name, assigned=value)
            if not self._fire(Event.VAR_ASSIGNED, context):
                return

    def _assign(self, at, option, text, negate=False):
        context = self._context(option_at=at, option=option, name=option.name, value=text, negate=negate)
        if not self._fire(Event.OPT_ASSIGN, context) or context.value is None:
            return
        try:
            context.assigned = self.result.stack[at].assign(option, context.value, context.negate)
        except VarError:
            return
        self._fire(Event.VAR_ASSIGNED, context)

    def _push_arg(self, token):
        pcmd = self.current
        index = len(pcmd.args)
        pcmd.args.append(token)
        if index < len(pcmd.command.arguments):
            pcmd.parsed_argc += 1
            self._assign(len(self.result.stack) - 1, pcmd.command.arguments[index], token)

    def _resolve_unknown_option(self, name, value):
        context = self._context(name=name, value=value)
        self._fire(Event.OPT_RESOLVE, context)
        if not context.ignore:
            self.current.undefined(name)

    def _resolve_unknown_command(self, token):
        logger.info("unknown subcommand %r under %r", token, self.current.command.name)
        self.result.missing_command = True
        self.result.unparsed = [token]
        self.state = State.ERR

    def _parse_long(self, token):
        name, equal, value = token[2:].partition("=")
        if equal and not name:
            self.current.undefined(token)
            return
        value = value if equal else None

        option, at = self._find_option(name)
        negate = False
        if option is None and name.startswith("no-"):
            option, at = self._find_option(name[3:])
            if option is not None and option.kind is ValueKind.BOOL:
                name, negate = name[3:], True
            else:
                option = None

        if option is None:
            self._resolve_unknown_option(name, value)
        elif value is not None:
            self._assign(at, option, value, negate)
        elif option.kind is ValueKind.BOOL:
            self._assign(at, option, "true", negate)
        else:
            self.result.stack[at].missing_value(name, option)

    def _parse_short(self, token):
        body = token[1:]
        for index, name in enumerate(body):
            value = body[index + 1:] or None
            option, at = self._find_option(name)
            if option is None:
                self._resolve_unknown_option(name, value)
            elif option.kind is ValueKind.BOOL:
                self._assign(at, option, "true")
            elif value is not None:
                self._assign(at, option, value)
                break
            else:
                self._pending = option, name, at
                self.state = State.VAL
            if self.state is State.ERR_END:
                break

    def _parse_token(self, token):
        match self.state:
            case State.PRE:
                self.result.program = token
                self.state = State.CMD
                self._push_command(ParsedCmd(self.command))
            case State.CMD if token == "--":
                self.state = State.END
            case State.CMD if token.startswith("--"):
                self._parse_long(token)
            case State.CMD if token.startswith("-"):
                self._parse_short(token)
            case State.CMD if self.current.has_subcommands:
                if (pcmd := self.current.start_subcommand(token)) is not None:
                    self._push_command(pcmd)
                else:
                    self._resolve_unknown_command(token)
            case State.CMD:
                self._push_arg(token)
            case State.VAL:
                option, _, at = self._pending
                # leave VAL first so an abort raised by the assignment is kept
                self.state = State.CMD
                self._assign(at, option, token)
            case State.END:
                self._push_arg(token)
                self.result.unparsed.append(token)
            case State.ERR if token == "--":
                self.state = State.ERR_END
            case State.ERR | State.ERR_END:
                self.result.unparsed.append(token)

    def _parse_end(self):
        if self.state is State.PRE:
            return TooFewArgumentsError()
        if self.state is State.VAL:
            option, name, at = self._pending
            self.result.stack[at].missing_value(name, option)
        for pcmd in self.result.stack:
            pcmd.verify_required_options()
        if self.state in (State.CMD, State.END):
            self.current.verify_required_arguments()
        return self.result.error

    def parse_args(self, tokens, /):
        """
        parse tokens (the first one is the program name) and return the ParseResult.

        parse problems are recorded on the result, never raised.
        """
        if isinstance(tokens, str):
            raise TypeError("parse_args() argument must be a sequence of strings, not a string")
        if self._used:
            raise RuntimeError("parse_args() called twice on the same parser")
        self._used = True
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("parse_args() argument must contain only strings")
            self._parse_token(token)
        self.result.error = self._parse_end()
        logger.debug("parse finished in state %s: %r", self.state.name, self.result)
        return self.result

    def parse(self):
        return self.parse_args(sys.argv)


__all__ = (
    "State",
    "Parser",
)

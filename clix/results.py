"""
clix results: live command matches, the parse result, and execution contexts.

Scope
- ParsedCmd: one stack-resident match of a Command. It owns a private copy of the
  command's default variables, the raw positional tokens it received, and the
  variable errors recorded against it (deduplicated by name, definition and kind).
- ParseResult: the command stack (root first), unparsed tokens, the missing
  subcommand flag and the terminal error, plus the execution-extension chain.
- ExecContext: what an execution extension sees while the chain runs.

Assignment semantics (ParsedCmd.assign)
- the token text is coerced with the option's kind; a failure records an
  invalid-value error, raises it, and leaves the stored value untouched
- maps merge into the stored mapping, later keys winning
- booleans are negated after coercion when requested (--no-flag)
- list options append to a copy of the stored list
"""
import logging

from .coercion import ValueKind
from .extensions import call_exec_ext
from .faults import VarError, VarErrorKind

logger = logging.getLogger(__name__)


class ParsedCmd:
    def __init__(self, command, /):
        self.command = command
        self.args = []
        self.parsed_argc = 0
        self.vars = command.default_vars()
        self.errors = []

    def __repr__(self):
        return "ParsedCmd(%r, args=%r, vars=%r, errors=%d)" % (self.command.name, self.args, self.vars, len(self.errors))

    def __rich_repr__(self):
        yield self.command.name
        yield "args", self.args, []
        yield "vars", self.vars
        yield "errors", self.errors, []

    @property
    def has_subcommands(self):
        return len(self.command.commands) > 0

    def start_subcommand(self, name, /):
        """
        new ParsedCmd for the subcommand matching name (or alias), None when there is none.
        """
        if (command := self.command.find_command(name)) is not None:
            return ParsedCmd(command)
        return None

    def record(self, error, /):
        """
        append a VarError unless an identical one (same name, definition and kind) exists.
        """
        if not isinstance(error, VarError):
            raise TypeError("record() argument must be a VarError")
        for existing in self.errors:
            if existing.key == error.key:
                return existing
        self.errors.append(error)
        return error

    def undefined(self, name, /):
        return self.record(VarError(VarErrorKind.UNDEFINED, name))

    def missing_value(self, name, option, /):
        return self.record(VarError(VarErrorKind.MISSING_VALUE, name, definition=option))

    def invalid_value(self, option, text, /):
        return self.record(VarError(VarErrorKind.INVALID_VALUE, option.name, value=text, definition=option))

    def assign(self, option, text, /, negate=False):
        """
        coerce text for option and store it; returns the stored value.

        raises the recorded VarError when the text does not coerce.
        """
        try:
            value = option.parse_text(text)
        except ValueError:
            raise self.invalid_value(option, text) from None

        if option.kind is ValueKind.MAP:
            stored = self.vars.get(option.name)
            value = {**(stored if isinstance(stored, dict) else {}), **value}
        else:
            if option.kind is ValueKind.BOOL and negate:
                value = not value
            if option.list:
                stored = self.vars.get(option.name)
                value = [*(stored if isinstance(stored, list) else []), value]

        self.vars[option.name] = value
        return value

    def verify_required_options(self):
        for option in self.command.options:
            if option.required and option.name not in self.vars:
                self.missing_value(option.name, option)

    def verify_required_arguments(self):
        """
        back-fill declared arguments beyond the tokens received.

        required ones record a missing value and take an empty placeholder; the
        others take their default rendered as text.
        """
        for index, argument in enumerate(self.command.arguments):
            if index < len(self.args):
                continue
            if argument.required:
                self.missing_value(argument.name, argument)
                self.args.append("")
            else:
                self.args.append(argument.default_as_string())


class ParseResult:
    def __init__(self):
        self.program = ""
        self.stack = []
        self.unparsed = []
        self.missing_command = False
        self.error = None
        self._exts = []

    def __repr__(self):
        return "ParseResult(program=%r, stack=%r, unparsed=%r, missing_command=%r, error=%r)" % (
            self.program,
            [pcmd.command.name for pcmd in self.stack],
            self.unparsed,
            self.missing_command,
            self.error,
        )

    def __rich_repr__(self):
        yield "program", self.program
        yield "stack", self.stack
        yield "unparsed", self.unparsed, []
        yield "missing_command", self.missing_command, False
        yield "error", self.error, None

    @property
    def cmd(self):
        return self.stack[-1] if self.stack else None

    def add_ext(self, ext, /):
        if not callable(ext) and not callable(getattr(ext, "execute_cmd", None)):
            raise TypeError("add_ext() argument must be callable or implement execute_cmd")
        self._exts.append(ext)
        return self

    def has_errors(self):
        if self.error is not None or self.missing_command:
            return True
        return any(pcmd.errors for pcmd in self.stack)

    def exec(self):
        """
        run the execution extensions in registration order.

        the chain stops as soon as one extension marks completion; returns the
        terminal error (possibly replaced by the completing extension).
        """
        context = ExecContext(self)
        for ext in self._exts:
            if context.completed:
                break
            call_exec_ext(ext, context)
        return self.error


class ExecContext:
    def __init__(self, result, /):
        self.result = result
        self._completed = False

    @property
    def completed(self):
        return self._completed

    @property
    def cmd(self):
        return self.result.cmd

    def cmd_at(self, at, /):
        if 0 <= at < len(self.result.stack):
            return self.result.stack[at]
        return None

    def has_errors(self):
        return self.result.has_errors()

    def done(self, error=None, /):
        """
        mark execution complete; a given error replaces the terminal error.
        """
        if error is not None:
            self.result.error = error
        self._completed = True
        logger.debug("execution completed with error %r", self.result.error)


__all__ = (
    "ParsedCmd",
    "ParseResult",
    "ExecContext",
)

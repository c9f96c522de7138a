"""
clix faults: the error taxonomy of schemas, parses and extensions, and its rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault clix records.
  Codes are grouped by domain to keep copy consistent and make logs/searches predictable.
- CommandException: base type carrying a message plus read-only options (hint, ...)
  and able to render itself through a Terminal.
- Schema faults: SchemaError for a single definitional problem, SchemaExit to
  aggregate all of them (schema normalization reports every violation at once).
- Parse faults: VarError (undefined / missing value / invalid value) recorded on a
  ParsedCmd, UnknownCommandError and TooFewArgumentsError for structural problems.
- HelpRequest: the signal the help extension aborts a parse with.

Policy
- Schema faults are raised. Parse faults are recorded, never raised out of a parse;
  the only exception is ParsedCmd.assign(), which records and then raises so that the
  caller can tell a failed assignment apart.
- Rendering is opt-in: collaborators call Terminal.report(fault) (or fault.render(terminal)).
"""
from enum import IntEnum
from types import MappingProxyType
from typing import final

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x): UNKNOWN_COMMAND
    - variables (1111x/1112x): UNDEFINED_OPTION, MISSING_VALUE, INVALID_VALUE
    - invocation (1113x): TOO_FEW_ARGUMENTS
    - extension signals (1310x): HELP_REQUESTED
    - schema definition (2110x/2111x): EMPTY_NAME, SHORT_NAME_ALIAS, DUPLICATED_NAME,
      INVALID_TYPE, INVALID_DEFAULT
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND = 11101

    # --- variable errors (11xxx) ---
    UNDEFINED_OPTION = 11112
    MISSING_VALUE = 11117
    INVALID_VALUE = 11124

    # --- invocation errors (11xxx) ---
    TOO_FEW_ARGUMENTS = 11131

    # --- extension signals (13xxx) ---
    HELP_REQUESTED = 13101

    # --- schema definition errors (21xxx) ---
    EMPTY_NAME = 21101
    SHORT_NAME_ALIAS = 21102
    DUPLICATED_NAME = 21103
    INVALID_TYPE = 21111
    INVALID_DEFAULT = 21112


def _header(terminal, prog, code, title):
    return Text.assemble(
        "[ ",
        terminal.text(prog, "prog-name"),
        " | ",
        terminal.text(terminal.label(code), "code"),
        " | ",
        terminal.text(title.title(), "error-title"),
        " ]"
    )


class CommandException(Exception):
    code = FaultCode.INVALID_VALUE
    title = "error"

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError("%s() argument must be a string" % type(self).__name__)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        return Text(str(self))

    def render(self, terminal, /, *, prog=Unset):
        """
        build a rich renderable for this fault using the terminal palette.

        layout
        - header: [ <prog> | <code> | <Title> ] (prog given, else the "prog" option, else "clix")
        - body: the message, then "→ hint" when a hint option is present
        - fancy terminals wrap the body in a panel titled by the header
        """
        header = _header(terminal, coalesce(prog, self.options.get("prog", "clix")), self.code, self.title)
        message = terminal.text(str(self), "error-message")
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(terminal.text(" → ", "hint-arrow"), terminal.text(hint, "hint")))
        if terminal.fancy:
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)


class SchemaError(CommandException):
    """
    a single definitional problem found while normalizing a command tree.

    path is the slash-joined command path, with "[option]" appended for problems
    that belong to one option or argument.
    """
    title = "command definition error"

    def __init__(self, path, reason, /, *, code=FaultCode.EMPTY_NAME, **options):
        self.path = path
        self.reason = reason
        self.code = FaultCode(code)
        super().__init__("Command Definition Error: %s: %s" % (path, reason), **options)


@final
class SchemaExit(ExceptionGroup[SchemaError]):
    """
    every SchemaError collected while normalizing one command tree.
    """

    def __new__(cls, exceptions, /):
        return super().__new__(cls, "invalid command definition", tuple(exceptions))

    def __init__(self, exceptions, /):
        super().__init__("invalid command definition", tuple(exceptions))

    def render(self, terminal, /, **options):
        header = Text.assemble("[ ", terminal.text(self.message.title(), "error-title"), " ]")
        renders = [exception.render(terminal, **options) for exception in self.exceptions]
        if terminal.fancy:
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)

    def __init_subclass__(cls, **options):
        raise TypeError("type 'SchemaExit' is not an acceptable base type")


class VarErrorKind(IntEnum):
    UNDEFINED = 0
    MISSING_VALUE = 1
    INVALID_VALUE = 2


def _switch(name):
    return ("--" if len(name) > 1 else "-") + name


class VarError(CommandException):
    """
    a per-variable parse error recorded on the ParsedCmd it belongs to.

    attributes
    - kind: VarErrorKind
    - name: the name as referenced (the typed token name for undefined and missing
      values, the option's own name for invalid values)
    - value: the raw text that failed to coerce (invalid values only), else None
    - definition: the Option involved, None when nothing was resolved
    """
    title = "invalid variable"

    def __init__(self, kind, name, /, value=None, definition=None, **options):
        self.kind = VarErrorKind(kind)
        self.name = name
        self.value = value
        self.definition = definition
        super().__init__(self._describe(), **options)

    @property
    def key(self):
        """
        identity used to deduplicate errors on a ParsedCmd.
        """
        return self.name, id(self.definition) if self.definition is not None else None, self.kind

    @property
    def code(self):
        return {
            VarErrorKind.UNDEFINED: FaultCode.UNDEFINED_OPTION,
            VarErrorKind.MISSING_VALUE: FaultCode.MISSING_VALUE,
            VarErrorKind.INVALID_VALUE: FaultCode.INVALID_VALUE,
        }[self.kind]

    @property
    def title(self):
        return {
            VarErrorKind.UNDEFINED: "unknown option",
            VarErrorKind.MISSING_VALUE: "missing value",
            VarErrorKind.INVALID_VALUE: "invalid value",
        }[self.kind]

    def _describe(self):
        definition = self.definition
        match self.kind:
            case VarErrorKind.UNDEFINED:
                return "unknown option: %s" % self.name
            case VarErrorKind.MISSING_VALUE if definition is not None and definition.is_arg:
                return "expect argument %s" % definition.value_name.upper()
            case VarErrorKind.MISSING_VALUE if definition is not None:
                return "expect value %s after %s" % (definition.value_name.upper(), _switch(self.name))
            case VarErrorKind.MISSING_VALUE:
                return "expect value after %s" % _switch(self.name)
            case VarErrorKind.INVALID_VALUE:
                if definition is not None and definition.is_arg:
                    message = "invalid value for argument %s" % definition.value_name.upper()
                else:
                    message = "invalid value for %s" % _switch(self.name)
                if self.value is not None:
                    message += ": %s" % self.value
                return message

    def __repr__(self):
        return "%s(%s, %r, value=%r)" % (type(self).__name__, self.kind.name, self.name, self.value)


class UnknownCommandError(CommandException):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"

    def __init__(self, name, /, **options):
        self.name = name
        super().__init__("unknown command: %s" % name, **options)


class TooFewArgumentsError(CommandException):
    code = FaultCode.TOO_FEW_ARGUMENTS
    title = "too few arguments"

    def __init__(self, message="too few arguments", /, **options):
        super().__init__(message, **options)


class HelpRequest(CommandException):
    code = FaultCode.HELP_REQUESTED
    title = "help requested"

    def __init__(self, message="help requested", /, **options):
        super().__init__(message, **options)


__all__ = (
    "FaultCode",
    "CommandException",
    "SchemaError",
    "SchemaExit",
    "VarErrorKind",
    "VarError",
    "UnknownCommandError",
    "TooFewArgumentsError",
    "HelpRequest",
)

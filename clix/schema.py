"""
clix schema model: commands, options and positional arguments.

What this module provides
- Option: one named, typed value slot. The same class describes flags (listed under a
  command's options) and positional arguments (listed under its arguments).
- Command: a node of the command tree, with options, ordered arguments and subcommands.
- Command.normalize(): validates the whole tree, resolves types, assigns argument
  positions, builds the lookup tables and computes default variables. Every violation
  found is collected and raised at once as SchemaExit.

Normalization rules
- Names: an empty command/option name is an error. A one-character option name may
  not carry multi-character aliases (short names are aliases of long names).
- Uniqueness: names and aliases must be unique across a command's options and
  arguments together, and across its subcommands.
- Types: string|str|text|"" → string, integer|int → integer, number → number,
  boolean|bool → boolean, map|dict → map (maps are never lists). A "/subtype"
  suffix is split off and kept in Option.subtype.
- Arguments: positions count from 1 and the list modifier is silently cleared.
- Defaults: required → no default; explicit default → coerced; list → [];
  otherwise the zero value of the kind.

Once normalized, a schema is shared read-only by every parse; each parse receives
its own deep copy of the default variables.

Example
    from clix import Command, Option

    root = Command(
        "tool",
        options=[Option("server", alias=["s"], default="127.0.0.1:8080")],
        commands=[Command("up", arguments=[Option("object", required=True)])],
    ).normalize()
"""
import logging

from .coercion import ValueKind, clone, format_value, parse_default, parse_text, zero_value
from .faults import FaultCode, SchemaError, SchemaExit
from .utils import Unset, coalesce, freeze

logger = logging.getLogger(__name__)

_NAME_EMPTY = "name should not be empty"
_NAME_DUPLICATED = "name/alias duplicated"
_NAME_TOO_SHORT = "name should be long name, short name comes in alias"


def _names(values, what):
    if isinstance(values, str):
        values = [values]
    values = list(values)
    if not all(isinstance(value, str) for value in values):
        raise TypeError("%s alias must be a string or a list of strings" % what)
    return values


def _tags(tags, what):
    tags = dict(coalesce(tags, {}))
    if not all(isinstance(key, str) for key in tags):
        raise TypeError("%s tags must be keyed by strings" % what)
    return tags


def _tag(tags, name, types, default):
    value = tags.get(name, default)
    return value if isinstance(value, types) else default


class Option:
    """
    a named value slot of a command: an option (flag) or a positional argument.

    declared fields
    - name, alias, description, example, type ("type" or "type/subtype"),
      required, default (None means no default), list, tags

    derived by normalization
    - kind: ValueKind resolved from type
    - subtype: text after the first '/' of the declared type
    - is_arg: True for positional arguments
    - position: 1-based position of an argument (0 for options)
    """

    def __init__(
            self,
            name="",
            /,
            *,
            alias=(),
            description="",
            example="",
            type="",
            required=False,
            default=None,
            list=False,
            tags=Unset,
    ):
        if not isinstance(name, str):
            raise TypeError("Option() name must be a string")
        if not isinstance(type, str):
            raise TypeError("Option() type must be a string")
        self.name = name
        self.alias = _names(alias, "option")
        self.description = description
        self.example = example
        self.type = type
        self.required = bool(required)
        self.default = default
        self.list = bool(list)
        self.tags = _tags(tags, "option")

        self.kind = None
        self.subtype = ""
        self.is_arg = False
        self.position = 0

    def __repr__(self):
        kind = self.kind.value if self.kind is not None else self.type or "string"
        return "%s(%r, type=%r%s)" % (
            "Argument" if self.is_arg else "Option",
            self.name,
            kind + ("[]" if self.list else ""),
            ", required=True" if self.required else "",
        )

    def __rich_repr__(self):
        yield self.name
        yield "alias", self.alias, []
        yield "type", self.kind.value if self.kind is not None else self.type
        yield "required", self.required, False
        yield "default", self.default, None
        yield "list", self.list, False

    @property
    def names(self):
        return tuple([self.name, *self.alias])

    @property
    def expects_value(self):
        """
        arguments always take a value; options do unless they are booleans.
        """
        return self.is_arg or self.kind is not ValueKind.BOOL

    @property
    def value_name(self):
        """
        placeholder used in help and messages (tag "value-name", else the name).
        """
        return _tag(self.tags, "value-name", str, self.name) or self.name

    def tag_string(self, name, /, default=None):
        return _tag(self.tags, name, str, default)

    def tag_bool(self, name, /, default=None):
        return _tag(self.tags, name, bool, default)

    def parse_text(self, text, /):
        """
        coerce token text according to this option's kind (ValueError on failure).
        """
        return parse_text(self.kind, text)

    def default_as_string(self):
        if self.default is None or self.list or self.kind is ValueKind.MAP:
            return ""
        return format_value(self.default)

    def _error(self, path, reason, code):
        return SchemaError("%s[%s]" % (path, self.name), reason, code=code)

    def _normalize_type(self, path):
        type, slash, subtype = self.type.partition("/")
        if slash and type:
            self.type, self.subtype = type, subtype
        try:
            self.kind = ValueKind.resolve(self.type)
        except ValueError as exception:
            return self._error(path, str(exception), FaultCode.INVALID_TYPE)
        if self.kind is ValueKind.MAP:
            self.list = False
        return None

    def _normalize_as_option(self, path):
        if not self.name:
            return self._error(path, _NAME_EMPTY, FaultCode.EMPTY_NAME)
        if len(self.name) == 1 and any(len(alias) > 1 for alias in self.alias):
            return self._error(path, _NAME_TOO_SHORT, FaultCode.SHORT_NAME_ALIAS)
        return self._normalize_type(path)

    def _normalize_as_argument(self, path, index):
        if error := self._normalize_type(path):
            return error
        self.is_arg = True
        self.list = False
        self.position = index + 1
        return None

    def _default_var(self, path, defaults):
        if self.required:
            return None
        if self.default is not None:
            try:
                value = parse_default(self.kind, self.default, self.list)
            except (TypeError, ValueError) as exception:
                return self._error(path, "invalid default value: %s" % exception, FaultCode.INVALID_DEFAULT)
        elif self.list:
            value = []
        else:
            value = zero_value(self.kind)
        defaults[self.name] = value
        return None


def _index_option(path, table, other, option):
    for name in option.names:
        if not name:
            continue
        if name in table or name in other:
            return option._error(path, _NAME_DUPLICATED, FaultCode.DUPLICATED_NAME)
        table[name] = option
    return None


def _index_command(path, table, command):
    for name in (command.name, *command.alias):
        if not name:
            continue
        if name in table:
            return SchemaError("%s/%s" % (path, command.name), _NAME_DUPLICATED, code=FaultCode.DUPLICATED_NAME)
        table[name] = command
    return None


class Command:
    """
    a node of the command tree.

    declared fields
    - name, alias, description, example, tags
    - options: Options matched by name (--name, -n)
    - arguments: Options matched by position
    - commands: subcommands

    after normalize()
    - option_map / argument_map / command_map: read-only name-and-alias lookup tables
    - default_vars(): a fresh deep copy of the default variables
    """

    def __init__(
            self,
            name="",
            /,
            *,
            alias=(),
            description="",
            example="",
            options=(),
            arguments=(),
            commands=(),
            tags=Unset,
    ):
        if not isinstance(name, str):
            raise TypeError("Command() name must be a string")
        self.name = name
        self.alias = _names(alias, "command")
        self.description = description
        self.example = example
        self.options = list(options)
        self.arguments = list(arguments)
        self.commands = list(commands)
        self.tags = _tags(tags, "command")

        for option in (*self.options, *self.arguments):
            if not isinstance(option, Option):
                raise TypeError("Command() options and arguments must be Option instances")
        for command in self.commands:
            if not isinstance(command, Command):
                raise TypeError("Command() commands must be Command instances")

        self._options = {}
        self._arguments = {}
        self._commands = {}
        self._defaults = {}
        self._normalized = False

    def __repr__(self):
        return "Command(%r, options=%d, arguments=%d, commands=%d)" % (
            self.name,
            len(self.options),
            len(self.arguments),
            len(self.commands),
        )

    def __rich_repr__(self):
        yield self.name
        yield "alias", self.alias, []
        yield "options", self.options, []
        yield "arguments", self.arguments, []
        yield "commands", self.commands, []

    @property
    def normalized(self):
        return self._normalized

    @property
    def option_map(self):
        return freeze(self._options)

    @property
    def argument_map(self):
        return freeze(self._arguments)

    @property
    def command_map(self):
        return freeze(self._commands)

    def find_command(self, name, /):
        return self._commands.get(name)

    def find_option(self, name, /):
        return self._options.get(name)

    def find_argument(self, name, /):
        return self._arguments.get(name)

    def find_var(self, name, /):
        """
        option by name or alias, falling back to arguments.
        """
        option = self.find_option(name)
        if option is None:
            option = self.find_argument(name)
        return option

    def tag_string(self, name, /, default=None):
        return _tag(self.tags, name, str, default)

    def tag_bool(self, name, /, default=None):
        return _tag(self.tags, name, bool, default)

    def default_vars(self):
        """
        fresh deep copy of the default variables (maps and lists are never shared).
        """
        return {name: clone(value) for name, value in self._defaults.items()}

    def _normalize(self, path):
        if not self.name:
            return [SchemaError(path, _NAME_EMPTY, code=FaultCode.EMPTY_NAME)]
        path = "%s/%s" % (path, self.name) if path else self.name

        self._options = {}
        self._arguments = {}
        self._commands = {}
        self._defaults = {}
        errors = []

        # Each failing step skips the remaining steps for that item only.
        for option in self.options:
            if error := option._normalize_as_option(path) or _index_option(path, self._options, self._arguments, option):
                errors.append(error)
            elif error := option._default_var(path, self._defaults):
                errors.append(error)

        for index, argument in enumerate(self.arguments):
            if error := argument._normalize_as_argument(path, index) or _index_option(path, self._arguments, self._options, argument):
                errors.append(error)
            elif error := argument._default_var(path, self._defaults):
                errors.append(error)

        for command in self.commands:
            if failures := command._normalize(path):
                errors.extend(failures)
            elif error := _index_command(path, self._commands, command):
                errors.append(error)

        self._normalized = not errors
        return errors

    def normalize(self):
        """
        validate and index the whole tree rooted at this command.

        returns self on success; raises SchemaExit listing every violation otherwise.
        """
        if errors := self._normalize(""):
            logger.debug("command %r failed normalization with %d error(s)", self.name, len(errors))
            raise SchemaExit(errors)
        logger.debug("command %r normalized", self.name)
        return self


__all__ = (
    "Option",
    "Command",
)

"""
clix bind: copying parsed variables into caller objects.

A Binding ties one model object to a command path ("" for the root, "up",
"remote add", ... without the root name) and holds explicit field entries:

    ext = BindExt()
    ext.bind(settings).field("server")
    ext.bind(UpCommand(), "up").field("flaga", "flags.a").field("object", convert=str.upper)

Each field maps a variable name to a dotted path on the model; every path segment is
an item key on mappings and an attribute otherwise. convert, when given, is applied
to the value before it is stored.

Updates (var.assigned)
- the value goes to every binding whose path is the path of the frame declaring the
  variable or lies below it, so root variables reach every binding
- the option tag "bind" renames the variable looked up ("-" or false disables it)

Execution
- the binding registered for exactly the active command path runs model.execute(args)
  when the parse has no errors; an exception becomes the terminal error, success
  completes execution.
"""
import logging
from collections.abc import MutableMapping

from .extensions import Event
from .utils import Unset

logger = logging.getLogger(__name__)

BIND_TAG = "bind"


def _stack_key(stack):
    # root frame excluded
    return " ".join(pcmd.command.name for pcmd in stack[1:])


def _setter(path, convert):
    *parents, last = path.split(".")

    def setter(model, value):
        target = model
        for segment in parents:
            target = target[segment] if isinstance(target, MutableMapping) else getattr(target, segment)
        if convert is not None:
            value = convert(value)
        if isinstance(target, MutableMapping):
            target[last] = value
        else:
            setattr(target, last, value)

    return setter


class Binding:
    """
    one model bound to a command path, with its field registry.
    """

    def __init__(self, model, commands=(), /):
        self.model = model
        self.commands = tuple(commands)
        self._fields = {}

    def __repr__(self):
        return "Binding(%r, %r, fields=%r)" % (self.model, self.key, tuple(self._fields))

    @property
    def key(self):
        return " ".join(self.commands)

    @property
    def fields(self):
        return tuple(self._fields)

    @property
    def executable(self):
        return callable(getattr(self.model, "execute", None))

    def field(self, name, /, path=Unset, convert=Unset):
        """
        register variable name → dotted path (defaults to the name with "-" as "_").
        """
        if not isinstance(name, str) or not name:
            raise TypeError("field() argument must be a non-empty string")
        path = name.replace("-", "_") if path is Unset else path
        if not isinstance(path, str) or not all(path.split(".")):
            raise ValueError("field() path must be a dotted name, not %r" % path)
        if convert is not Unset and not callable(convert):
            raise TypeError("field() convert must be callable")
        self._fields[name] = _setter(path, None if convert is Unset else convert)
        return self

    def update(self, option, name, value, /):
        if option is None:
            return False
        name = option.name
        if option.tag_bool(BIND_TAG) is False:
            return False
        if rename := option.tag_string(BIND_TAG):
            if rename == "-":
                return False
            name = rename
        if (setter := self._fields.get(name)) is None:
            return False
        setter(self.model, value)
        return True

    def execute(self, args, /):
        return self.model.execute(args)


class BindExt:
    def __init__(self):
        self._bindings = {}

    def __repr__(self):
        return "BindExt(%r)" % tuple(self._bindings)

    def bind(self, model, /, *commands):
        """
        bind model to the command path given by commands; returns the new Binding.
        """
        if not all(isinstance(command, str) for command in commands):
            raise TypeError("bind() command path must be made of strings")
        binding = Binding(model, commands)
        self._bindings[binding.key] = binding
        return binding

    def binding(self, *commands):
        return self._bindings.get(" ".join(commands))

    def register(self, parser, /):
        parser.add_parse_ext(Event.VAR_ASSIGNED, self)
        parser.add_exec_ext(self)

    def handle_parse_event(self, event, context, /):
        if event is not Event.VAR_ASSIGNED:
            return None
        stack = context.cmd_stack
        prefix = _stack_key(stack[:context.option_at + 1] if context.option_at >= 0 else stack)
        for key, binding in self._bindings.items():
            if not prefix or key == prefix or key.startswith(prefix + " "):
                binding.update(context.option, context.name, context.assigned)
        return None

    def execute_cmd(self, context, /):
        binding = self._bindings.get(_stack_key(context.result.stack))
        if binding is None or not binding.executable or context.has_errors():
            return
        try:
            binding.execute(context.cmd.args)
        except Exception as exception:
            logger.info("bound command %r failed: %s", binding.key, exception)
            context.result.error = exception
        else:
            context.done()


__all__ = (
    "BIND_TAG",
    "Binding",
    "BindExt",
)

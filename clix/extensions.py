"""
clix extensions: the parse-event dispatcher and the contexts observers receive.

Events (fired by the parser, in this order of appearance)
- cmd.start     a command was pushed on the stack and its defaults materialized
                (fired before its defaults are announced one by one)
- var.assigned  a variable just received a value (default or live assignment);
                context.assigned holds the stored value
- opt.assign    a resolved option is about to be coerced and stored; observers may
                rewrite context.value, flip context.negate, or set context.value to
                None to suppress the assignment
- opt.resolve   an option name failed lookup; an observer claims it by setting
                context.ignore, which suppresses the undefined-option error

Observers
- a callable observer(event, context), or an object with
  handle_parse_event(event, context)
- observers of one event run in registration order; each returns a dispatch result:
  • None or CONTINUE: go on with the next observer
  • STOP: skip the remaining observers of this event, no error
  • Abort(error): skip the remaining observers, record error as the terminal error and
    move the parser to its terminal draining state

Execution extensions
- a callable ext(context), or an object with execute_cmd(context); they run after
  parsing through ParseResult.exec() and receive an ExecContext.

Registrars
- objects with register(parser) that hook observers and/or execution extensions
  (see Parser.use and CliDef.use).
"""
from collections import defaultdict
from enum import Enum, StrEnum
from typing import final


class Event(StrEnum):
    CMD_START = "cmd.start"
    OPT_RESOLVE = "opt.resolve"
    OPT_ASSIGN = "opt.assign"
    VAR_ASSIGNED = "var.assigned"


class Flow(Enum):
    CONTINUE = "continue"
    STOP = "stop"


CONTINUE = Flow.CONTINUE
STOP = Flow.STOP


@final
class Abort:
    """
    dispatch result that stops the parse with a terminal error.
    """
    __slots__ = ("error",)

    def __init__(self, error, /):
        if not isinstance(error, BaseException):
            raise TypeError("Abort() argument must be an exception")
        self.error = error

    def __repr__(self):
        return "Abort(%r)" % self.error

    def __eq__(self, other):
        if not isinstance(other, Abort):
            return NotImplemented
        return self.error is other.error

    def __hash__(self):
        return hash((Abort, id(self.error)))

    def __init_subclass__(cls, **options):
        raise TypeError("type 'Abort' is not an acceptable base type")


def _handler(observer, method):
    handler = getattr(observer, method, None)
    if callable(handler):
        return handler
    if callable(observer):
        return observer
    return None


def call_exec_ext(ext, context, /):
    handler = _handler(ext, "execute_cmd")
    if handler is None:
        raise TypeError("execution extensions must be callable or implement execute_cmd")
    handler(context)


class Dispatcher:
    """
    ordered, per-event observer lists with short-circuit results.
    """

    def __init__(self):
        self._observers = defaultdict(list)

    def __len__(self):
        return sum(map(len, self._observers.values()))

    def observers(self, event, /):
        return tuple(self._observers[Event(event)])

    def add(self, event, observer, /):
        try:
            event = Event(event)
        except ValueError:
            raise ValueError("unknown parse event: %r" % event) from None
        if _handler(observer, "handle_parse_event") is None:
            raise TypeError("parse observers must be callable or implement handle_parse_event")
        self._observers[event].append(observer)
        return self

    def fire(self, event, context, /):
        """
        run the observers of event; returns CONTINUE, STOP or the Abort that ended the run.
        """
        event = Event(event)
        for observer in self._observers[event]:
            match outcome := _handler(observer, "handle_parse_event")(event, context):
                case None | Flow.CONTINUE:
                    continue
                case Flow.STOP | Abort():
                    return outcome
                case _:
                    raise TypeError(
                        "parse observers must return None, CONTINUE, STOP or Abort(error), not %r" % outcome
                    )
        return CONTINUE


class ParseContext:
    """
    mutable view handed to parse observers.

    fields
    - option_at: stack index of the frame the option belongs to (the pushed frame for cmd.start)
    - option: the Option involved, None when unresolved or not applicable
    - name: option/variable name involved
    - value: pending token text (opt.assign / opt.resolve); None means no value
    - negate: boolean negation requested (--no-flag)
    - assigned: the value just stored (var.assigned)
    - ignore: set by an opt.resolve observer to claim an unknown option
    """

    def __init__(self, parser, /, *, option_at=-1, option=None, name="", value=None, negate=False, assigned=None):
        self._parser = parser
        self.option_at = option_at
        self.option = option
        self.name = name
        self.value = value
        self.negate = negate
        self.assigned = assigned
        self.ignore = False

    def __repr__(self):
        return "ParseContext(option_at=%r, name=%r, value=%r, negate=%r, assigned=%r, ignore=%r)" % (
            self.option_at,
            self.name,
            self.value,
            self.negate,
            self.assigned,
            self.ignore,
        )

    @property
    def cmd_stack(self):
        return tuple(self._parser.result.stack)

    @property
    def current_cmd(self):
        return self._parser.current

    def cmd_at(self, at, /):
        stack = self._parser.result.stack
        if 0 <= at < len(stack):
            return stack[at]
        return None

    def set_var_at(self, at, name, value, /):
        if (pcmd := self.cmd_at(at)) is not None:
            pcmd.vars[name] = value
        return self

    def set_var(self, name, value, /):
        self.current_cmd.vars[name] = value
        return self


__all__ = (
    "Event",
    "Flow",
    "CONTINUE",
    "STOP",
    "Abort",
    "Dispatcher",
    "ParseContext",
    "call_exec_ext",
)

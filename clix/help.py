"""
clix help: the --help extension and the default help/error renderer.

Hooks
- opt.resolve: the first unresolved --help, -h or -? (names configurable) is claimed:
  the error is suppressed, the frame it appeared in is remembered and the parse is
  aborted with HelpRequest.
- execution: shows help for the remembered frame, or reports the parse problems
  (terminal error, unknown subcommand followed by the help of the last frame,
  variable errors) and completes execution with HelpRequest.

Rendering
- render_banner / render_usage / render_commands / render_arguments / render_options /
  render_errors each return a rich renderable; subclasses override any of them.
- Output goes to the Terminal given at construction (a stderr Terminal otherwise).
  With a fancy terminal, help is wrapped in a panel titled "[ PROG HELP ]".

Exit policy
- The process exits only when exit_code is an integer; by default the extension
  returns and the caller reads HelpRequest from ParseResult.exec().

Example
    from clix import HelpExt, Terminal, load_cli_def

    definition = load_cli_def("cli.yml").use(HelpExt(exit_code=2))
    definition.parse().exec()
"""
import logging
import sys

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .extensions import Abort, Event
from .faults import CommandException, HelpRequest, UnknownCommandError
from .terminal import Terminal
from .utils import Unset

logger = logging.getLogger(__name__)

DEFAULT_LONG = "help"
DEFAULT_ALIAS = ("h", "?")

_PADDING = 2


def option_display_name(option, /):
    """
    "-s,--server=SERVER" style name column for an option.

    single-letter names read "-f VALUE"; booleans carry no placeholder.
    """
    shorts = ["-" + alias for alias in option.alias if len(alias) == 1]
    longs = ["--" + alias for alias in option.alias if len(alias) > 1]
    placeholder = option.value_name.upper()
    if len(option.name) == 1:
        display = "|".join([*shorts, "-" + option.name])
        if option.expects_value:
            display += " " + placeholder
        return display
    display = "|".join(shorts) + "," if shorts else ""
    display += "|".join([*longs, "--" + option.name])
    if option.expects_value:
        display += "=" + placeholder
    return display


def argument_display_name(argument, /):
    """
    upper-cased placeholder, bracketed when the argument is optional.
    """
    name = argument.value_name.upper()
    return name if argument.required else "[%s]" % name


class HelpExt:
    """
    parse observer and execution extension providing --help and error reports.

    parameters
    - long / alias: option names claimed for help
    - terminal: Terminal used for rendering (a stderr Terminal when omitted)
    - exit_code: when an integer, sys.exit(exit_code) after help or errors are shown
    - any_error: also report a terminal error raised by another observer
    """

    def __init__(self, long=DEFAULT_LONG, alias=DEFAULT_ALIAS, /, *, terminal=Unset, exit_code=None, any_error=True):
        if not isinstance(long, str) or not long:
            raise TypeError("HelpExt() argument must be a non-empty string")
        if terminal is not Unset and not isinstance(terminal, Terminal):
            raise TypeError("HelpExt() terminal must be a Terminal")
        self.long = long
        self.alias = tuple([alias] if isinstance(alias, str) else alias)
        self.terminal = terminal if terminal is not Unset else Terminal()
        self.exit_code = exit_code
        self.any_error = bool(any_error)
        self.help_at = -1

    def __repr__(self):
        return "HelpExt(%r, %r, exit_code=%r)" % (self.long, self.alias, self.exit_code)

    @property
    def names(self):
        return (self.long, *self.alias)

    def register(self, parser, /):
        parser.add_parse_ext(Event.OPT_RESOLVE, self)
        parser.add_exec_ext(self)
        self.help_at = -1

    def handle_parse_event(self, event, context, /):
        if event is not Event.OPT_RESOLVE or self.help_at >= 0 or not context.name:
            return None
        if context.name not in self.names:
            return None
        self.help_at = len(context.cmd_stack) - 1
        context.ignore = True
        logger.debug("help requested at frame %d", self.help_at)
        return Abort(HelpRequest())

    def execute_cmd(self, context, /):
        result = context.result
        error = result.error
        if isinstance(error, HelpRequest) and self.help_at >= 0:
            self.display_help(result.program, result.stack, self.help_at, banner=True)
            context.done()
            self.exit()
            return
        if error is not None:
            if not isinstance(error, HelpRequest) and self.any_error:
                self.display_errors(result.program, [error])
                self.exit()
            return

        if result.missing_command:
            self.display_errors(result.program, [UnknownCommandError(result.unparsed[0])])
            self.display_help(result.program, result.stack, len(result.stack) - 1, banner=False)
        else:
            errors = [fault for pcmd in result.stack for fault in pcmd.errors]
            if not errors:
                return
            self.display_errors(result.program, errors)
        context.done(HelpRequest())
        self.exit()

    def exit(self):
        if isinstance(self.exit_code, int) and not isinstance(self.exit_code, bool):
            sys.exit(self.exit_code)

    def display_help(self, program, stack, at, /, banner=True):
        renders = []
        frames = stack[:at + 1]
        command = frames[-1].command

        if banner and (description := stack[0].command.description):
            renders.append(self.render_banner([description]))

        usage = [pcmd.command.name for pcmd in frames]
        if any(pcmd.command.options for pcmd in frames):
            usage.append("[OPTIONS]")
        if command.commands:
            usage.append("SUBCOMMAND")
        else:
            usage.extend(map(argument_display_name, command.arguments))
        usage.append("...")
        renders.append(self.render_usage(usage))

        if command.commands:
            renders.append(self.render_commands(command.commands))
        elif command.arguments:
            renders.append(self.render_arguments(command.arguments))

        if options := [option for pcmd in frames for option in pcmd.command.options]:
            renders.append(self.render_options(options))

        renderable = Group(*renders)
        if self.terminal.fancy:
            renderable = Panel(
                renderable,
                title=self.terminal.text("[ %s HELP ]" % (stack[0].command.name or program).upper(), "panel-title"),
                title_align="left",
            )
        self.terminal.print(renderable)

    def display_errors(self, program, errors, /):
        if errors:
            self.terminal.print(self.render_errors(program, errors))

    def render_banner(self, lines, /):
        return Text("\n").join(self.terminal.text(line, "description-section") for line in lines).append("\n")

    def render_usage(self, words, /):
        terminal = self.terminal
        usage = Text()
        usage.append(terminal.text("usage", "usage-label")).append(": ")
        if words:
            usage.append(terminal.text(words[0], "program-name"))
        for word in words[1:]:
            usage.append(" ").append(terminal.text(word, "usage-section"))
        return usage.append("\n")

    def render_commands(self, commands, /):
        rows = []
        for command in commands:
            name = self.terminal.text("|".join([command.name, *command.alias]), "children")
            rows.append((name, command.description, command.example, "children-description"))
        return self._section("commands", rows)

    def render_arguments(self, arguments, /):
        rows = []
        for argument in arguments:
            name = self.terminal.text(argument.value_name, "metavar")
            rows.append((name, argument.description, argument.example, "argument-description"))
        return self._section("arguments", rows)

    def render_options(self, options, /):
        rows = []
        for option in options:
            style = "option-name" if option.expects_value else "flag-name"
            name = self.terminal.text(option_display_name(option), style)
            rows.append((name, option.description, option.example, "argument-description"))
        return self._section("options", rows)

    def render_errors(self, program, errors, /):
        faults = []
        for error in errors:
            if not isinstance(error, CommandException):
                error = CommandException(str(error) or type(error).__name__)
            faults.append(error.render(self.terminal, prog=program or "clix"))
        return Group(*faults)

    def _section(self, label, rows):
        # two columns: names padded to the widest one, descriptions wrapped in a hanging indent
        terminal = self.terminal
        width = terminal.console.width - 4 * terminal.fancy
        indent = _PADDING + max(len(name) for name, *_ in rows) + 2
        section = Text()
        section.append(terminal.text(label, "group-label")).append(":\n")
        for name, description, example, style in rows:
            line = Text(" " * _PADDING).append(name)
            if description:
                line.append(" " * (indent - len(line)))
                wrapped = terminal.text(description, style).wrap(terminal.console, max(width - indent, 10))
                for index, segment in enumerate(wrapped):
                    if index:
                        line.append("\n").append(" " * indent)
                    line.append(segment)
            section.append(line).append("\n")
            if example:
                dot = terminal.text(" • ", "examples-dot")
                section.append(" " * indent).append(dot).append(terminal.text("e.g. " + example.strip(), "example"))
                section.append("\n")
        return section


__all__ = (
    "DEFAULT_LONG",
    "DEFAULT_ALIAS",
    "option_display_name",
    "argument_display_name",
    "HelpExt",
)

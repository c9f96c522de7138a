"""
clix ask: interactive re-prompting for missing and invalid values.

AskExt is an execution extension. When the parse finished without a terminal error
or an unknown subcommand and the terminal is interactive, every missing-value and
invalid-value error is turned into a question:

    Option --flag=FLAG expects a value
    Enter --flag=FLAG: _

Answers go through ParsedCmd.assign(), so they are coerced exactly like tokens.
Empty lines are skipped, an answer that does not coerce is reported and asked
again, and the end of the input keeps the original error. Undefined options are
never asked for.

Register AskExt before HelpExt so that answered errors are no longer reported.
"""
import logging

from rich.text import Text

from .faults import VarError, VarErrorKind
from .help import argument_display_name, option_display_name
from .terminal import Terminal
from .utils import Unset

logger = logging.getLogger(__name__)


class AskExt:
    def __init__(self, terminal=Unset, /):
        if terminal is not Unset and not isinstance(terminal, Terminal):
            raise TypeError("AskExt() argument must be a Terminal")
        self.terminal = terminal if terminal is not Unset else Terminal()

    def __repr__(self):
        return "AskExt(%r)" % self.terminal

    def register(self, parser, /):
        parser.add_exec_ext(self)

    def execute_cmd(self, context, /):
        result = context.result
        if result.error is not None or result.missing_command or not self.terminal.interactive:
            return
        for pcmd in result.stack:
            if not pcmd.errors:
                continue
            kept = []
            for error in list(pcmd.errors):
                if error.kind is VarErrorKind.UNDEFINED or error.definition is None:
                    kept.append(error)
                elif not self.ask(pcmd, error):
                    kept.append(error)
            pcmd.errors = kept

    def describe(self, error, /):
        terminal = self.terminal
        definition = error.definition
        if definition.is_arg:
            label, name = "Argument ", argument_display_name(definition)
        else:
            label, name = "Option ", option_display_name(definition)
        if error.kind is VarErrorKind.MISSING_VALUE:
            message = "expects a value"
        else:
            message = "has an invalid value: %s" % error.value
        return Text.assemble(
            terminal.text(label, "ask-label"),
            terminal.text(name, "ask-name"),
            " ",
            terminal.text(message, "ask-message"),
        )

    def ask(self, pcmd, error, /):
        """
        prompt until the answer is assigned; False when the input ends first.
        """
        terminal = self.terminal
        definition = error.definition
        terminal.print(self.describe(error))
        if definition.description:
            terminal.print(Text("\n").append(terminal.text(definition.description, "argument-description")).append("\n"))

        name = definition.value_name.upper() if definition.is_arg else option_display_name(definition)
        prompt = Text.assemble(terminal.text("Enter ", "ask-prompt"), terminal.text(name, "ask-name"), ": ")
        while True:
            try:
                line = terminal.read_line(prompt)
            except EOFError:
                terminal.print()
                return False
            if not line:
                continue
            try:
                definition.parse_text(line)
            except ValueError:
                # reported only; the error being answered stays the recorded one
                retry = VarError(VarErrorKind.INVALID_VALUE, definition.name, value=line, definition=definition)
                terminal.print(terminal.text(str(retry), "error-message"))
                continue
            pcmd.assign(definition, line)
            if definition.is_arg and definition.position <= len(pcmd.args):
                pcmd.args[definition.position - 1] = line
            logger.debug("answered %r for %r", line, definition.name)
            return True


__all__ = (
    "AskExt",
)

"""
clix terminal: the explicit output configuration shared by rendering collaborators.

Scope
- Terminal bundles what the help, ask and fault renderers need to talk to a user:
  a rich Console, a style palette, switches for color and panel chrome, fault-code
  labels, and a line reader.
- The parser core never prints; only collaborators that receive a Terminal do.
  Build one Terminal when the program starts and hand it to every extension that
  renders, instead of relying on a module-level console.

Palette
- DEFAULT_STYLES lists every key the bundled renderers use. Pass styles={...} to
  override any entry; unknown keys resolve to "" (no style).
- When colorful is False, styles are suppressed entirely.

Example
    from rich.console import Console
    from clix import Terminal, HelpExt

    terminal = Terminal(Console(stderr=True), colorful=True, fancy=False)
    definition.use(HelpExt(terminal=terminal, exit_code=2))
"""
from collections import defaultdict
from types import MappingProxyType

from rich.console import Console
from rich.text import Text

from .utils import Unset, coalesce

DEFAULT_STYLES = MappingProxyType({
    # === Faults ===
    "prog-name": "bold #E6E6F0",  # near-white program name
    "code": "bold #00E5FF",  # neon cyan fault code
    "error-title": "bold #FF4DA6",  # friendly pinky title
    "error-message": "#C8C8D0",  # soft light gray message
    "hint-arrow": "#9CE19C dim",  # gentle green arrow
    "hint": "italic #9CE19C",  # gentle green hint text

    # === Help: head sections ===
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "usage-section": "bold #36C5F0",
    "description-section": "italic #A3A3A3",

    # === Help: groups / names ===
    "group-label": "bold #FFFFFF",
    "argument-description": "#9CA3AF",
    "option-name": "bold #00E6FF",
    "flag-name": "bold #22C55E",
    "metavar": "bold #FFD600",
    "children": "bold #36C5F0",
    "children-description": "#9CA3AF",
    "examples-dot": "#22C55E dim",
    "example": "#E5E7EB",
    "panel-title": "bold #FF4D94",

    # === Ask ===
    "ask-label": "bold #FF4DA6",
    "ask-name": "bold #FFD600",
    "ask-message": "#C8C8D0",
    "ask-prompt": "bold #22C55E",
})


class Terminal:
    """
    output configuration passed to rendering collaborators.

    parameters
    - console: rich Console used for every print (defaults to a stderr console).
    - stdin: text stream to read answers from; when omitted, Console.input reads
      from the process standard input.
    - colorful: apply the palette (False renders plain text).
    - fancy: wrap renders in panels.
    - interactive: force (True/False) whether prompting is allowed; when omitted,
      the console's own terminal detection decides.
    - styles: palette overrides (merged over DEFAULT_STYLES).
    - codes: optional mapping of FaultCode → label shown instead of the number.
    """

    def __init__(
            self,
            console=Unset,
            /,
            *,
            stdin=Unset,
            colorful=True,
            fancy=False,
            interactive=Unset,
            styles=Unset,
            codes=Unset,
    ):
        if console is not Unset and not isinstance(console, Console):
            raise TypeError("Terminal() argument must be a rich console")
        self.console = console if console is not Unset else Console(stderr=True)
        self.stdin = coalesce(stdin)
        self.colorful = bool(colorful)
        self.fancy = bool(fancy)
        self.styles = defaultdict(str, DEFAULT_STYLES | dict(coalesce(styles, {})))
        self.codes = MappingProxyType(dict(coalesce(codes, {})))
        self._interactive = interactive

    @property
    def interactive(self):
        if self._interactive is Unset:
            return self.console.is_terminal
        return bool(self._interactive)

    def styler(self, style, /):
        return self.styles[style] if self.colorful else ""

    def text(self, fragment, style="", /):
        # Normalize to Rich Text. In non-colorful mode, strip styles; preserve existing Text spans.
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if self.colorful else Text(fragment.plain)
        if not self.colorful:
            return Text(str(fragment))
        return Text(str(fragment), self.styler(style))

    def label(self, code, /):
        return str(self.codes.get(code, int(code)))

    def print(self, *objects, **options):
        self.console.print(*objects, **options)

    def report(self, *faults, **options):
        """
        render faults (objects implementing render(terminal)) to the console.

        keyword options (prog=...) are forwarded to each render call.
        """
        for fault in faults:
            if not callable(getattr(fault, "render", None)):
                raise TypeError("report() arguments must implement a render method")
            self.console.print(fault.render(self, **options))

    def read_line(self, prompt="", /):
        """
        read one line of input after printing the prompt.

        raises EOFError when the input is exhausted; the trailing newline is removed.
        """
        line = self.console.input(prompt, stream=self.stdin)
        if self.stdin is None:
            return line
        if not line:
            raise EOFError
        return line.rstrip("\r\n")


__all__ = (
    "DEFAULT_STYLES",
    "Terminal",
)

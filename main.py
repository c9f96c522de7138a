from rich.pretty import pprint

from clix import *

DEFINITION = """
cli:
  name: demo
  description: clix demo command line
  options:
    - name: server
      alias: s
      default: "127.0.0.1:8080"
      description: server address
  commands:
    - name: up
      description: bring an object up
      example: demo up -a web
      options:
        - name: all
          alias: a
          type: bool
          description: bring every replica up
      arguments:
        - name: object
          required: true
          description: the object to bring up
"""


class Up:
    def __init__(self):
        self.server = None
        self.all = False

    def execute(self, args):
        pprint(self)
        pprint(args)


if __name__ == '__main__':
    terminal = Terminal()
    binder = BindExt()
    binder.bind(Up(), "up").field("server").field("all")

    definition = decode_cli_def(DEFINITION).use(AskExt(terminal), HelpExt(terminal=terminal, exit_code=2), binder)
    result = definition.parse()
    pprint(result)
    result.exec()

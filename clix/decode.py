"""
clix decode: building command trees from YAML documents and plain mappings.

Document shape (keys outside this set are ignored)
    cli:
      name: tool
      alias: [t]                  # a single string is accepted too
      description: ...
      example: ...
      tags: {key: value}
      options:
        - name: server
          alias: s
          type: string            # type or type/subtype
          required: false
          default: 127.0.0.1:8080
          list: false
          description: ...
          example: ...
          tags: {value-name: addr}
      arguments: [...]            # same fields as options
      commands: [...]             # same fields as cli

decode_command() reads a bare command document (no "cli:" key); decode_cli_def()
and load_cli_def() read a top-level definition. Every decoded tree is normalized,
so schema problems surface as SchemaExit; malformed structures raise TypeError
and YAML syntax errors propagate as yaml.YAMLError.
"""
import logging
from collections.abc import Mapping

import yaml

from .parser import Parser
from .schema import Command, Option

logger = logging.getLogger(__name__)

_OPTION_FIELDS = ("description", "example", "type")


def _field(data, key, types, default, where):
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, types):
        raise TypeError("%s field %r has an invalid type: %s" % (where, key, type(value).__name__))
    return value


def _alias(data, where):
    alias = _field(data, "alias", (str, list), [], where)
    if isinstance(alias, str):
        return [alias]
    if not all(isinstance(name, str) for name in alias):
        raise TypeError("%s field 'alias' must only contain strings" % where)
    return alias


def _mapping(data, where):
    if not isinstance(data, Mapping):
        raise TypeError("%s must be a mapping, not %s" % (where, type(data).__name__))
    return data


def _list(data, key, where):
    items = _field(data, key, list, [], where)
    return ["%s.%s[%d]" % (where, key, index) for index in range(len(items))], items


def option_from_mapping(data, /, where="option"):
    data = _mapping(data, where)
    options = {key: str(_field(data, key, (str, int, float), "", where)) for key in _OPTION_FIELDS}
    return Option(
        str(_field(data, "name", (str, int), "", where)),
        alias=_alias(data, where),
        required=bool(_field(data, "required", bool, False, where)),
        default=data.get("default"),
        list=bool(_field(data, "list", bool, False, where)),
        tags=_field(data, "tags", Mapping, {}, where),
        **options,
    )


def command_from_mapping(data, /, where="command"):
    """
    build an (unnormalized) Command tree from a plain mapping.
    """
    data = _mapping(data, where)
    places, options = _list(data, "options", where)
    options = [option_from_mapping(item, place) for place, item in zip(places, options)]
    places, arguments = _list(data, "arguments", where)
    arguments = [option_from_mapping(item, place) for place, item in zip(places, arguments)]
    places, commands = _list(data, "commands", where)
    commands = [command_from_mapping(item, place) for place, item in zip(places, commands)]
    return Command(
        str(_field(data, "name", (str, int), "", where)),
        alias=_alias(data, where),
        description=str(_field(data, "description", str, "", where)),
        example=str(_field(data, "example", str, "", where)),
        options=options,
        arguments=arguments,
        commands=commands,
        tags=_field(data, "tags", Mapping, {}, where),
    )


def _coalesce_document(document):
    return {} if document is None else document


def _load(source):
    if not isinstance(source, (str, bytes)) and not callable(getattr(source, "read", None)):
        raise TypeError("decode() argument must be YAML text or a readable stream")
    return yaml.safe_load(source)


def decode_command(source, /):
    """
    decode and normalize a command document.
    """
    command = command_from_mapping(_coalesce_document(_load(source)))
    logger.debug("decoded command %r", command.name)
    return command.normalize()


class CliDef:
    """
    top-level command-line definition: the root command plus registrars applied to
    every parser it creates.
    """

    def __init__(self, cli=None, /):
        if cli is not None and not isinstance(cli, Command):
            raise TypeError("CliDef() argument must be a Command or None")
        self.cli = cli
        self._registrars = []

    def __repr__(self):
        return "CliDef(%r)" % self.cli

    def normalize(self):
        if self.cli is not None:
            self.cli.normalize()
        return self

    def use(self, *registrars):
        for registrar in registrars:
            if not callable(getattr(registrar, "register", None)):
                raise TypeError("use() arguments must implement register(parser)")
        self._registrars.extend(registrars)
        return self

    def parser(self):
        if self.cli is None:
            raise ValueError("parser() requires a definition with a 'cli' command")
        return Parser(self.cli).use(*self._registrars)

    def parse_args(self, tokens, /):
        return self.parser().parse_args(tokens)

    def parse(self):
        return self.parser().parse()


def decode_cli_def(source, /):
    """
    decode and normalize a top-level definition (the root command sits under "cli").
    """
    document = _mapping(_coalesce_document(_load(source)), "definition")
    cli = document.get("cli")
    definition = CliDef(command_from_mapping(cli, "cli") if cli is not None else None)
    logger.debug("decoded definition %r", definition)
    return definition.normalize()


def load_cli_def(path, /):
    logger.debug("loading definition from %s", path)
    with open(path, encoding="utf-8") as stream:
        return decode_cli_def(stream)


__all__ = (
    "option_from_mapping",
    "command_from_mapping",
    "decode_command",
    "CliDef",
    "decode_cli_def",
    "load_cli_def",
)

"""
clix value coercion: turn raw tokens and schema defaults into typed values.

Scope
- ValueKind: the closed set of value kinds an option can hold, and the table of
  declared type names that resolve to each of them.
- parse_*: pure converters from token text to a typed value. Every failure is a
  ValueError; callers decide whether that is an invalid-value error (parsing) or
  an invalid default (schema normalization).
- parse_scalar / parse_default: coercion of pre-typed defaults coming from a schema
  file (a YAML float for a number option, a mapping for a map option, ...).
- zero_value / clone / format_value: the small helpers the schema and the result
  aggregator rely on to materialize, copy and print values.

Text forms
- boolean: 1 t T TRUE true True / 0 f F FALSE false False
- integer: optional sign, base from prefix (0x, 0o, 0b, legacy leading 0 for octal),
  underscores between digits, 64-bit signed range
- number: decimal or exponent notation, inf/nan, hexadecimal floats (0x1p-2)
- map: "key=value" → {"key": "value"}, "key" → {"key": True}, "=..." is an error
"""
import decimal
import math
import re
from collections.abc import Mapping, Sequence
from enum import Enum

_TRUE = frozenset(("1", "t", "T", "TRUE", "true", "True"))
_FALSE = frozenset(("0", "f", "F", "FALSE", "false", "False"))

_INT_MIN = -(1 << 63)
_INT_MAX = (1 << 63) - 1


class ValueKind(Enum):
    """
    value kinds an option may hold once its declared type is resolved.
    """
    STRING = "string"
    BOOL = "boolean"
    INT = "integer"
    FLOAT = "number"
    MAP = "map"

    @classmethod
    def resolve(cls, type, /):
        """
        resolve a declared type name (without its '/subtype' suffix).

        raises ValueError("invalid type: <type>") for unknown names.
        """
        try:
            return _TYPE_NAMES[type]
        except (KeyError, TypeError):
            raise ValueError("invalid type: %s" % type) from None


_TYPE_NAMES = {
    "": ValueKind.STRING,
    "string": ValueKind.STRING,
    "str": ValueKind.STRING,
    "text": ValueKind.STRING,
    "integer": ValueKind.INT,
    "int": ValueKind.INT,
    "number": ValueKind.FLOAT,
    "boolean": ValueKind.BOOL,
    "bool": ValueKind.BOOL,
    "map": ValueKind.MAP,
    "dict": ValueKind.MAP,
}


def parse_bool(text, /):
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError("invalid syntax for boolean: %r" % text)


def parse_int(text, /):
    if not text or text != text.strip():
        raise ValueError("invalid syntax for integer: %r" % text)
    try:
        # legacy octal ("0755") is not accepted by int(..., 0)
        if re.fullmatch(r"[+-]?0[0-7_]+", text):
            value = int(text, 8)
        else:
            value = int(text, 0)
    except ValueError:
        raise ValueError("invalid syntax for integer: %r" % text) from None
    if not _INT_MIN <= value <= _INT_MAX:
        raise ValueError("value out of range for integer: %r" % text)
    return value


_INFINITY = re.compile(r"[+-]?(inf|infinity)", re.IGNORECASE)


def parse_float(text, /):
    if not text or text != text.strip():
        raise ValueError("invalid syntax for number: %r" % text)
    try:
        if re.match(r"[+-]?0[xX]", text):
            # hexadecimal mantissas need a binary exponent
            if not re.search(r"[pP][+-]?\d+$", text):
                raise ValueError(text)
            value = float.fromhex(text)
        else:
            value = float(text)
    except ValueError:
        raise ValueError("invalid syntax for number: %r" % text) from None
    except OverflowError:
        raise ValueError("value out of range for number: %r" % text) from None
    if math.isinf(value) and not _INFINITY.fullmatch(text):
        raise ValueError("value out of range for number: %r" % text)
    return value


def parse_map(text, /):
    key, sep, value = text.partition("=")
    if not sep:
        return {text: True}
    if not key:
        raise ValueError("name should not be empty")
    return {key: value}


_PARSERS = {
    ValueKind.STRING: str,
    ValueKind.BOOL: parse_bool,
    ValueKind.INT: parse_int,
    ValueKind.FLOAT: parse_float,
    ValueKind.MAP: parse_map,
}


def parse_text(kind, text, /):
    """
    convert token text into a value of the given kind (ValueError on failure).
    """
    return _PARSERS[ValueKind(kind)](text)


def _scalar(value):
    return isinstance(value, (str, bool, int, float, complex))


def _invalid(value):
    return TypeError("invalid type: %s" % type(value).__name__)


def parse_scalar(kind, value, /):
    """
    coerce a single pre-typed default into the given kind.

    rules
    - a value already of the target kind passes through (booleans are never integers here)
    - STRING: any scalar, rendered with format_value()
    - BOOL: text (parse_bool) or an integer (non-zero is true)
    - INT: text (parse_int) or an integer
    - FLOAT: text (parse_float), a float, or an integer
    - MAP: "key=value" text or a mapping (keys rendered as text)
    anything else raises TypeError("invalid type: <python type>").
    """
    match ValueKind(kind):
        case ValueKind.STRING:
            if isinstance(value, str):
                return value
            if _scalar(value):
                return format_value(value)
        case ValueKind.BOOL:
            if isinstance(value, bool):
                return value
            if isinstance(value, str):
                return parse_bool(value)
            if isinstance(value, int):
                return value != 0
        case ValueKind.INT:
            if isinstance(value, bool):
                raise _invalid(value)
            if isinstance(value, int):
                return value
            if isinstance(value, str):
                return parse_int(value)
        case ValueKind.FLOAT:
            if isinstance(value, bool):
                raise _invalid(value)
            if isinstance(value, float):
                return value
            if isinstance(value, int):
                return float(value)
            if isinstance(value, str):
                return parse_float(value)
        case ValueKind.MAP:
            if isinstance(value, str):
                return parse_map(value)
            if isinstance(value, Mapping):
                return {format_value(key): item for key, item in value.items()}
    raise _invalid(value)


def parse_default(kind, value, multiple=False, /):
    """
    coerce a schema default; list options accept a scalar (wrapped) or a sequence.
    """
    if not multiple:
        return parse_scalar(kind, value)
    if _scalar(value):
        return [parse_scalar(kind, value)]
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [parse_scalar(kind, item) for item in value]
    raise _invalid(value)


def zero_value(kind, /):
    match ValueKind(kind):
        case ValueKind.STRING:
            return ""
        case ValueKind.BOOL:
            return False
        case ValueKind.INT:
            return 0
        case ValueKind.FLOAT:
            return 0.0
        case ValueKind.MAP:
            return {}


def clone(value, /):
    """
    deep clone with explicit kind dispatch: mapping copy, sequence copy, scalar as-is.
    """
    if isinstance(value, Mapping):
        return {key: clone(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [clone(item) for item in value]
    return value


def _format_float(value):
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    number = decimal.Decimal(repr(value)).normalize()
    sign, digits, exponent = number.as_tuple()
    adjusted = number.adjusted()
    if -4 <= adjusted < 6:
        return format(number, "f")
    mantissa = str(digits[0])
    if len(digits) > 1:
        mantissa += "." + "".join(map(str, digits[1:]))
    return "%s%se%s%02d" % ("-" if sign else "", mantissa, "-" if adjusted < 0 else "+", abs(adjusted))


def format_value(value, /):
    """
    textual form of a scalar, as shown for string defaults and default arguments.

    - booleans print as "true"/"false"
    - floats print in their shortest form, switching to exponent notation
      below 1e-4 and from 1e6 up (3.14, 100, 1e+06, 1.5e-05)
    - anything else goes through str()
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    return str(value)


__all__ = (
    "ValueKind",
    "parse_bool",
    "parse_int",
    "parse_float",
    "parse_map",
    "parse_text",
    "parse_scalar",
    "parse_default",
    "zero_value",
    "clone",
    "format_value",
)

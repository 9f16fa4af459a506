"""
Value kinds: the per-type half of the flag engine.

A Kind bundles everything type-specific about a flag value, so one generic engine
(see flags.py) serves every type:
- typename: the name shown in messages and help ("int32", "duration", ...).
- parse(text) -> value: raise ValueError/OverflowError for text that is not a value.
- format(value) -> str: rendering used for acceptable-value lists and help.
- empty: placeholder parsed in place of trimmed-empty input (Unset: parse "" as-is).
- trim: whether raw input is stripped before parsing (strings are taken verbatim).
- fold(value) -> hashable: membership key used by acceptable-value sets.
- coerce(value) -> value: normalize defaults and acceptable values given in code
  (float32 rounding, datetime to Instant, text to addresses).
- ranged: whether the kind supports acceptable-value sets at all.
- validate_empty: whether the zero value committed for trimmed-empty input goes through
  validation (ip and cidr commit it unchecked).

Contextual kinds (time) render acceptable values per failure, using what the input
looked like, instead of once when the range is configured.

Integers follow base-10 rules with an optional sign (signed kinds only) and a range
check per bit width. Floats reject digit separators; float32 values are rounded to
single precision and overflow is an error. Bools accept 1/t/T/TRUE/true/True and
0/f/F/FALSE/false/False.
"""
import ipaddress
import math
import re
import struct
from datetime import datetime, timedelta

from .cidr import CIDR, parse_cidr
from .durations import format_duration, parse_duration
from .layouts import Instant, render, resolve
from .utils import Unset

_INTEGER = re.compile(r"[+-]?[0-9]+")
_UNSIGNED = re.compile(r"[0-9]+")
_TRUE = frozenset(("1", "t", "T", "TRUE", "true", "True"))
_FALSE = frozenset(("0", "f", "F", "FALSE", "false", "False"))


class Kind:
    """
    Type-specific parsing and rendering for one flag value type.
    """
    contextual = False

    def __init__(
            self,
            typename,
            parse,
            /,
            format=str,
            *,
            empty=Unset,
            trim=True,
            fold=None,
            coerce=None,
            ranged=True,
            validate_empty=True
    ):
        self.typename = typename
        self.parse = parse
        self.format = format
        self.empty = empty
        self.trim = trim
        self.fold = fold if fold is not None else _identity
        self.coerce = coerce if coerce is not None else _identity
        self.ranged = ranged
        self.validate_empty = validate_empty

    def prepare(self, text, /):
        """
        Normalize raw input before parsing: trim, then substitute the empty placeholder.
        """
        if self.trim:
            text = text.strip()
        if not text and self.empty is not Unset:
            return self.empty
        return text

    def render(self, choices, text, /):
        """
        Render acceptable values for a failure on `text` (contextual kinds only).
        """
        return [self.format(choice) for choice in choices]

    def __repr__(self):
        return f"Kind({self.typename!r})"


class TimeKind(Kind):
    """
    Time values, resolved through the ordered layout candidates.

    Acceptable values are echoed in the layout the offending input matched, so the
    message reads like what the user typed.
    """
    contextual = True

    def __init__(self):
        super().__init__("time", self._parse, str, coerce=self._coerce)

    @staticmethod
    def _parse(text, /):
        if not text:
            return Instant()
        return resolve(text)[0]

    @staticmethod
    def _coerce(value, /):
        if isinstance(value, datetime):
            return Instant.from_datetime(value)
        if isinstance(value, str):
            return TimeKind._parse(value.strip())
        return Instant(*value)

    def render(self, choices, text, /):
        if not text.strip():
            return [str(choice) for choice in choices]
        _, layout = resolve(text)
        return [render(choice, layout) for choice in choices]


def integer(bits, /, signed=True):
    """
    Build a base-10 integer parser for a bit width.
    """
    if signed:
        low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1
    else:
        low, high = 0, 2 ** bits - 1
    pattern = _INTEGER if signed else _UNSIGNED

    def parse(text, /):
        if not pattern.fullmatch(text):
            raise ValueError(f"invalid syntax {text!r}")
        if not low <= (value := int(text)) <= high:
            raise OverflowError(f"{text!r} is out of range")
        return value

    parse.__name__ = parse.__qualname__ = f"parse_{'int' if signed else 'uint'}{bits}"
    return parse


def parse_float(text, /):
    if "_" in text or not text.isascii():
        raise ValueError(f"invalid syntax {text!r}")
    value = float(text)
    if math.isinf(value) and "inf" not in text.lower():
        raise OverflowError(f"{text!r} is out of range")
    return value


def parse_float32(text, /):
    value = parse_float(text)
    # struct refuses finite values that do not fit in single precision.
    return struct.unpack("<f", struct.pack("<f", value))[0]


def format_float(value, /):
    text = repr(value)
    return text[:-2] if text.endswith(".0") else text


def format_float32(value, /):
    if math.isinf(value) or math.isnan(value):
        return format_float(value)
    for precision in range(1, 10):
        text = f"{value:.{precision}g}"
        if struct.unpack("<f", struct.pack("<f", float(text)))[0] == value:
            return format_float(float(text))
    return format_float(value)


def parse_bool(text, /):
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"invalid syntax {text!r}")


def format_bool(value, /):
    return "true" if value else "false"


def parse_ip(text, /):
    if not text:
        return None
    # Zoned IPv6 addresses ("fe80::1%eth0") are not plain addresses.
    if "%" in text:
        raise ValueError(f"{text!r} does not appear to be an IPv4 or IPv6 address")
    return ipaddress.ip_address(text)


def parse_cidr_value(text, /):
    if not text:
        return CIDR()
    return parse_cidr(text)


def _identity(value, /):
    return value


def _packed(value, /):
    return value.packed if value is not None else b""


def _coerce_float32(value, /):
    return parse_float32(repr(float(value)))


def _coerce_ip(value, /):
    if value is None or isinstance(value, ipaddress.IPv4Address | ipaddress.IPv6Address):
        return value
    return parse_ip(str(value).strip())


def _coerce_cidr(value, /):
    if isinstance(value, CIDR):
        return value
    return parse_cidr_value(str(value).strip())


def _coerce_duration(value, /):
    if isinstance(value, timedelta):
        return value
    return parse_duration(str(value).strip())


BOOL = Kind("bool", parse_bool, format_bool, empty="false", coerce=bool, ranged=False)
BYTE = Kind("byte", integer(8, signed=False), empty="0")
INT8 = Kind("int8", integer(8), empty="0")
INT16 = Kind("int16", integer(16), empty="0")
INT32 = Kind("int32", integer(32), empty="0")
INT64 = Kind("int64", integer(64), empty="0")
INT = Kind("int", integer(64), empty="0")
UINT8 = Kind("uint8", integer(8, signed=False), empty="0")
UINT16 = Kind("uint16", integer(16, signed=False), empty="0")
UINT32 = Kind("uint32", integer(32, signed=False), empty="0")
UINT64 = Kind("uint64", integer(64, signed=False), empty="0")
UINT = Kind("uint", integer(64, signed=False), empty="0")
FLOAT32 = Kind("float32", parse_float32, format_float32, empty="0.0", coerce=_coerce_float32)
FLOAT64 = Kind("float64", parse_float, format_float, empty="0.0", coerce=float)
STRING = Kind("string", str, str, trim=False)
DURATION = Kind("duration", parse_duration, format_duration, empty="0s", coerce=_coerce_duration)
TIME = TimeKind()
IP = Kind("ip", parse_ip, str, fold=_packed, coerce=_coerce_ip, validate_empty=False)
CIDR_ = Kind("cidr", parse_cidr_value, str, fold=str, coerce=_coerce_cidr, validate_empty=False)
COUNTER = Kind("counter", integer(8, signed=False), empty="0", ranged=False)


__all__ = (
    "Kind",
    "TimeKind",
    "integer",
    "parse_float",
    "parse_float32",
    "format_float",
    "format_float32",
    "parse_bool",
    "format_bool",
    "parse_ip",
    "BOOL",
    "BYTE",
    "INT8",
    "INT16",
    "INT32",
    "INT64",
    "INT",
    "UINT8",
    "UINT16",
    "UINT32",
    "UINT64",
    "UINT",
    "FLOAT32",
    "FLOAT64",
    "STRING",
    "DURATION",
    "TIME",
    "IP",
    "CIDR_",
    "COUNTER",
)

"""
Duration strings, as used on command lines.

A duration string is a possibly signed sequence of decimal numbers, each with an
optional fraction and a unit suffix, such as "300ms", "-1.5h" or "2h45m".
Valid units are "ns", "us" (or "µs"/"μs"), "ms", "s", "m", "h". A bare "0" is
accepted as zero.

Values are datetime.timedelta objects; nanosecond inputs are rounded to the
nearest microsecond. Durations beyond ±(2**63 - 1) nanoseconds are rejected.

format_duration() is the inverse used in messages: "1h30m0s", "2.5s", "300ms", "0s".
"""
import re
from datetime import timedelta
from fractions import Fraction

_UNITS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek small letter mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60_000_000_000,
    "h": 3_600_000_000_000,
}

_COMPONENT = re.compile(r"(\d*)(?:\.(\d*))?([^\d.]+)")
_LIMIT = 2 ** 63 - 1


def parse_duration(text, /):
    """
    Parse a duration string into a timedelta.

    Raises ValueError on malformed input, unknown units or overflow.
    """
    original = text
    sign = 1
    if text[:1] in ("-", "+"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration {original!r}")

    total = Fraction(0)
    position = 0
    while position < len(text):
        match = _COMPONENT.match(text, position)
        if not match:
            raise ValueError(f"invalid duration {original!r}")
        whole, fraction, unit = match.groups()
        if not whole and not fraction:
            raise ValueError(f"invalid duration {original!r}")
        # The unit runs up to the next digit or dot.
        if unit not in _UNITS:
            raise ValueError(f"unknown unit {unit!r} in duration {original!r}")
        number = Fraction(int(whole or "0"))
        if fraction:
            number += Fraction(int(fraction), 10 ** len(fraction))
        total += number * _UNITS[unit]
        position = match.end()

    if total > _LIMIT:
        raise ValueError(f"invalid duration {original!r}")
    return timedelta(microseconds=round(sign * total / 1_000))


def _nanoseconds(value, /):
    return ((value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds) * 1_000


def _fraction(value, digits, /):
    """
    Render value / 10**digits with trailing zeros trimmed ("1.5", "2").
    """
    whole, rest = divmod(value, 10 ** digits)
    if not rest:
        return str(whole)
    return f"{whole}.{str(rest).rjust(digits, '0').rstrip('0')}"


def format_duration(value, /):
    """
    Render a timedelta the way it would be typed: "1h2m3.5s", "1.5ms", "0s".
    """
    nanoseconds = _nanoseconds(value)
    if nanoseconds == 0:
        return "0s"
    sign = "-" if nanoseconds < 0 else ""
    nanoseconds = abs(nanoseconds)

    if nanoseconds < 1_000:
        return f"{sign}{nanoseconds}ns"
    if nanoseconds < 1_000_000:
        return f"{sign}{_fraction(nanoseconds, 3)}µs"
    if nanoseconds < 1_000_000_000:
        return f"{sign}{_fraction(nanoseconds, 6)}ms"

    hours, nanoseconds = divmod(nanoseconds, 3_600_000_000_000)
    minutes, nanoseconds = divmod(nanoseconds, 60_000_000_000)
    seconds = _fraction(nanoseconds, 9) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return f"{sign}{seconds}"


__all__ = (
    "parse_duration",
    "format_duration",
)

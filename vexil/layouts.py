r"""
Time layout resolution: parse free-form date/time text without a declared layout.

Overview
- Instant
  • A UTC point in time with nanosecond precision whose year may be 0 (neither is
    expressible with datetime). Missing year means year 0; missing date means
    January 1 of year 0. Converts to and from datetime where possible.

- LAYOUTS
  • The ordered tuple of candidate layouts. resolve() tries them in order and the
    first layout matching the whole input wins; there is no scoring. The order is a
    contract: changing it changes which layout an input resolves to.

- resolve(text) -> (Instant, layout)
  • The returned layout is the one the input matched, with %p swapped for %P when
    the input used a lower-case meridiem, so render() reproduces the user's style.

- render(instant, layout) -> str
  • Format an instant with a layout (used to echo acceptable values in the style
    the user typed).

Directives
- %d  day of month, two digits
- %m  month, two digits
- %Y  year, four digits
- %b  month abbreviation (Jan..Dec), matched case-insensitively
- %H  hour 0-23, one or two digits
- %I  hour 00-12, two digits (requires %p or %P); 00 reads like 12
- %M  minute, two digits
- %S  second, two digits
- %f  fractional seconds: "." followed by 1 to 9 digits; renders trimmed, omitted at zero
- %p  AM/PM, matched case-insensitively, renders upper-case
- %P  am/pm, matched case-insensitively, renders lower-case
- %%  a literal "%"

Candidate order
1. full date and time: "%d-%m-%YT", "%d-%m-%Y ", "%d/%m/%YT", "%d/%m/%Y " followed by
   each time form below
2. date only: "%d-%m-%Y", "%d/%m/%Y"
3. timestamp: "%b %d " followed by each time form
4. time only: each time form

Time forms, most specific first
    "%I:%M:%S%f %p", "%I:%M:%S%f%p", "%I:%M:%S %p", "%I:%M:%S%p", "%H:%M:%S%f", "%H:%M:%S"

Partial matches are never accepted: "14:22:20AM" fails every layout (14 is not a
12-hour hour, and the 24-hour forms do not allow a meridiem).

Examples
    >>> resolve("27/08/1980T14:22:20.027081980")
    (Instant(year=1980, month=8, day=27, hour=14, minute=22, second=20, nanosecond=27081980), '%d/%m/%YT%H:%M:%S%f')
    >>> resolve("02:22:20 pm")[1]
    '%I:%M:%S %P'
"""
import calendar
import functools
import re
from datetime import datetime, timezone
from typing import NamedTuple

from rich.text import Text

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_DAYS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

_DIRECTIVES = {
    "d": r"(?P<day>\d{2})",
    "m": r"(?P<month>\d{2})",
    "Y": r"(?P<year>\d{4})",
    "b": r"(?P<abbr>[A-Za-z]{3})",
    "H": r"(?P<hour>\d{1,2})",
    "I": r"(?P<hour12>\d{2})",
    "M": r"(?P<minute>\d{2})",
    "S": r"(?P<second>\d{2})",
    "f": r"\.(?P<fraction>\d{1,9})",
    "p": r"(?P<meridiem>[AaPp][Mm])",
    "P": r"(?P<meridiem>[AaPp][Mm])",
}


class Instant(NamedTuple):
    """
    A UTC point in time with nanosecond precision.

    Field order makes tuple comparison chronological. The default Instant() is the
    zero instant, 0000-01-01T00:00:00Z.
    """
    year: int = 0
    month: int = 1
    day: int = 1
    hour: int = 0
    minute: int = 0
    second: int = 0
    nanosecond: int = 0

    @classmethod
    def from_datetime(cls, value, /):
        """
        Convert a datetime; aware values are normalized to UTC, naive ones are taken as UTC.
        """
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return cls(
            value.year,
            value.month,
            value.day,
            value.hour,
            value.minute,
            value.second,
            value.microsecond * 1_000
        )

    def to_datetime(self):
        """
        Convert to an aware UTC datetime (nanoseconds truncated to microseconds).

        Raises ValueError for year 0, which datetime cannot represent.
        """
        return datetime(
            self.year,
            self.month,
            self.day,
            self.hour,
            self.minute,
            self.second,
            self.nanosecond // 1_000,
            tzinfo=timezone.utc
        )

    def __str__(self):
        fraction = f".{self.nanosecond:09d}".rstrip("0") if self.nanosecond else ""
        return (
            f"{self.year:04d}-{self.month:02d}-{self.day:02d}"
            f"T{self.hour:02d}:{self.minute:02d}:{self.second:02d}{fraction}Z"
        )

    def __rich__(self):
        return Text(str(self), style="green")


def _layouts():
    times = (
        "%I:%M:%S%f %p",
        "%I:%M:%S%f%p",
        "%I:%M:%S %p",
        "%I:%M:%S%p",
        "%H:%M:%S%f",
        "%H:%M:%S",
    )
    dates = ("%d-%m-%YT", "%d-%m-%Y ", "%d/%m/%YT", "%d/%m/%Y ")
    return (
        *(date + time for date in dates for time in times),
        "%d-%m-%Y",
        "%d/%m/%Y",
        *("%b %d " + time for time in times),
        *times,
    )


LAYOUTS = _layouts()
"""
Candidate layouts in resolution order (see the module documentation).
"""


@functools.cache
def _compile(layout, /):
    """
    Translate a layout into an anchored regular expression.
    """
    parts = []
    index = 0
    while index < len(layout):
        char = layout[index]
        if char == "%" and index + 1 < len(layout):
            directive = layout[index + 1]
            if directive == "%":
                parts.append("%")
            elif directive in _DIRECTIVES:
                parts.append(_DIRECTIVES[directive])
            else:
                raise ValueError(f"unknown layout directive %{directive} in {layout!r}")
            index += 2
            continue
        parts.append(re.escape(char))
        index += 1
    return re.compile("".join(parts), re.ASCII)


def _days_in(year, month, /):
    if month == 2 and calendar.isleap(year):
        return 29
    return _DAYS[month - 1]


def _build(match, /):
    """
    Turn a layout match into an Instant, enforcing field ranges.
    """
    fields = match.groupdict()
    year = int(fields.get("year") or 0)
    month = 1
    if fields.get("month") is not None:
        month = int(fields["month"])
    elif fields.get("abbr") is not None:
        try:
            month = [name.lower() for name in _MONTHS].index(fields["abbr"].lower()) + 1
        except ValueError:
            raise ValueError(f"unknown month {fields['abbr']!r}") from None
    if not 1 <= month <= 12:
        raise ValueError("month out of range")

    day = int(fields.get("day") or 1)
    if not 1 <= day <= _days_in(year, month):
        raise ValueError("day out of range")

    if fields.get("hour12") is not None:
        hour = int(fields["hour12"])
        if not 0 <= hour <= 12:
            raise ValueError("hour out of range")
        hour %= 12
        if fields["meridiem"].lower() == "pm":
            hour += 12
    else:
        hour = int(fields.get("hour") or 0)
        if not 0 <= hour <= 23:
            raise ValueError("hour out of range")

    minute = int(fields.get("minute") or 0)
    second = int(fields.get("second") or 0)
    if not 0 <= minute <= 59 or not 0 <= second <= 59:
        raise ValueError("minute or second out of range")

    nanosecond = int((fields.get("fraction") or "0").ljust(9, "0"))
    return Instant(year, month, day, hour, minute, second, nanosecond)


def parse(text, layout, /):
    """
    Parse text with one specific layout.

    Raises ValueError when the text does not match the whole layout or a field is
    out of range.
    """
    if not (match := _compile(layout).fullmatch(text)):
        raise ValueError(f"{text!r} does not match layout {layout!r}")
    return _build(match)


def resolve(text, /, layouts=LAYOUTS):
    """
    Parse text with the first matching candidate layout.

    Returns
    - (Instant, layout): the layout is the matched candidate, with %p replaced by %P
      when the input's meridiem was written in lower case.

    Raises
    - ValueError when no candidate layout accepts the whole input.
    """
    text = text.strip()
    for layout in layouts:
        if not (match := _compile(layout).fullmatch(text)):
            continue
        try:
            instant = _build(match)
        except ValueError:
            continue
        if (meridiem := match.groupdict().get("meridiem")) is not None and meridiem.islower():
            layout = layout.replace("%p", "%P")
        return instant, layout
    raise ValueError(f"{text!r} does not match any known time layout")


def render(instant, layout, /):
    """
    Format an instant with a layout.
    """
    parts = []
    index = 0
    while index < len(layout):
        char = layout[index]
        if char == "%" and index + 1 < len(layout):
            match layout[index + 1]:
                case "d":
                    parts.append(f"{instant.day:02d}")
                case "m":
                    parts.append(f"{instant.month:02d}")
                case "Y":
                    parts.append(f"{instant.year:04d}")
                case "b":
                    parts.append(_MONTHS[instant.month - 1])
                case "H":
                    parts.append(f"{instant.hour:02d}")
                case "I":
                    parts.append(f"{(instant.hour % 12) or 12:02d}")
                case "M":
                    parts.append(f"{instant.minute:02d}")
                case "S":
                    parts.append(f"{instant.second:02d}")
                case "f":
                    if instant.nanosecond:
                        parts.append(f".{instant.nanosecond:09d}".rstrip("0"))
                case "p":
                    parts.append("PM" if instant.hour >= 12 else "AM")
                case "P":
                    parts.append("pm" if instant.hour >= 12 else "am")
                case "%":
                    parts.append("%")
                case directive:
                    raise ValueError(f"unknown layout directive %{directive} in {layout!r}")
            index += 2
            continue
        parts.append(char)
        index += 1
    return "".join(parts)


__all__ = (
    "Instant",
    "LAYOUTS",
    "parse",
    "resolve",
    "render",
)

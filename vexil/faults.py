"""
Vexil faults (flag errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every flag error. Codes are
  grouped by domain so messages and log searches stay predictable.
- FlagError: base type carrying a message plus read-only options; knows how to
  render itself with rich.
- InvalidValueError / OutOfRangeError: raised by Flag.set() when a raw value cannot be
  parsed, or parses but is not one of the acceptable values.
- InvalidFlagError / EmptyFlagNameError / UnknownFlagError: identity errors surfaced by
  registries built on top of the flag engine.
- report(): print any fault to the stderr console.

Propagation
- Flags raise; they never print, log, or exit. Validation callback errors are not
  faults at all: they propagate exactly as the callback raised them.

Integration
- Hosts may define __prog__, __styles__ and __codes__ in __main__ to rename the
  program in headers, restyle the output, or remap numeric codes to labels.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .sanitizers import is_empty, print_name

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used by the flag engine (stable identifiers).

    grouping
    - values (2110x): INVALID_VALUE, OUT_OF_RANGE
    - identity (2120x): INVALID_FLAG, EMPTY_FLAG_NAME, UNKNOWN_FLAG

    normalize() allows host remapping to custom labels while keeping the codes stable.
    """
    # --- value errors (21xxx) ---
    INVALID_VALUE   = 21101
    OUT_OF_RANGE    = 21102

    # --- identity errors (21xxx) ---
    INVALID_FLAG    = 21201
    EMPTY_FLAG_NAME = 21202
    UNKNOWN_FLAG    = 21203

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class FlagError(Exception):
    """
    base class of every fault raised by the flag engine.

    options
    - code: FaultCode of the fault.
    - title: short human title used in the rendered header.
    - hint: one actionable sentence shown under the message.
    - any other context (long, short, value, items, ...) kept read-only.
    """
    __code__ = FaultCode.INVALID_FLAG
    __title__ = "invalid flag"

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({
            "code": type(self).__code__,
            "title": type(self).__title__,
            "hint": "",
        } | options)

    @property
    def code(self):
        return self.options["code"]

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        header = Text.assemble(
            "[ ",
            text(getattr(main, "__prog__", "flags"), "prog-name"),
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.options["title"].title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        parts = [message]
        if self.options["hint"]:
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(self.options["hint"], "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*parts), title=header, title_align="left")
        return Group(header, *parts)


class InvalidValueError(FlagError, ValueError):
    """
    raw input could not be converted into the flag's type.

    message: "'abc' is not a valid int32 value for -p, --port"
    """
    __code__ = FaultCode.INVALID_VALUE
    __title__ = "invalid value"

    def __init__(self, value, /, long, short="", type="", **options):
        super().__init__(
            f"'{value}' is not a valid {type} value for {print_name(long, short)}",
            value=value,
            long=long,
            short=short,
            type=type,
            hint=options.pop("hint", f"provide a value that can be read as {type}"),
            **options
        )


class OutOfRangeError(FlagError, ValueError):
    """
    the value parsed, but it is not one of the acceptable values.

    message (items in insertion order, duplicates already removed)
    - no items:  "x is not an acceptable value for --long."
    - one item:  "x is not an acceptable value for --long. The expected value is A."
    - many:      "x is not an acceptable value for --long. The expected values are A,B,C."
    """
    __code__ = FaultCode.OUT_OF_RANGE
    __title__ = "out of range"

    def __init__(self, value, /, long, short="", items=(), **options):
        items = tuple(items)
        message = f"{value} is not an acceptable value for {print_name(long, short)}."
        match len(items):
            case 0:
                pass
            case 1:
                message += f" The expected value is {items[0]}."
            case _:
                message += f" The expected values are {','.join(items)}."
        super().__init__(
            message,
            value=value,
            long=long,
            short=short,
            items=items,
            hint=options.pop("hint", "pick one of the expected values" if items else ""),
            **options
        )


class InvalidFlagError(FlagError):
    """
    a flag cannot be registered (e.g., a duplicated name or key).

    the identity is the key when the flag has one, otherwise "long, short".
    """
    __code__ = FaultCode.INVALID_FLAG
    __title__ = "invalid flag"

    def __init__(self, message, /, long="", short="", key="", **options):
        identity = ""
        if not is_empty(long):
            identity += long
        if not is_empty(short):
            identity += (", " if identity else "") + short
        if not is_empty(key):
            identity = key
        super().__init__(
            f"{identity} {message}",
            long=long,
            short=short,
            key=key,
            **options
        )


class EmptyFlagNameError(InvalidFlagError):
    __code__ = FaultCode.EMPTY_FLAG_NAME
    __title__ = "empty flag name"

    def __init__(self, /, **options):
        FlagError.__init__(self, "the flag name cannot be empty", **options)


class UnknownFlagError(FlagError):
    """
    an undefined flag has been passed on the command line.
    """
    __code__ = FaultCode.UNKNOWN_FLAG
    __title__ = "unknown flag"

    def __init__(self, name, /, **options):
        super().__init__(
            f"{name} is an unknown flag",
            name=name,
            **options
        )


def report(fault, /, **options):
    """
    print a fault to the stderr console.

    options
    - console: rich Console to print to (defaults to the module stderr console).
    - remaining options are rendering switches (colorful, fancy) merged over the
      fault's own options.
    """
    if not isinstance(fault, FlagError):
        raise TypeError("report() argument must be a flag error")
    target = options.pop("console", console)
    if options:
        fault.options = MappingProxyType({**fault.options, **options})
    target.print(fault)


__all__ = (
    "FaultCode",
    "FlagError",
    "InvalidValueError",
    "OutOfRangeError",
    "InvalidFlagError",
    "EmptyFlagNameError",
    "UnknownFlagError",
    "report",
)

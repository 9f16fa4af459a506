"""
Validation policy shared by every flag type.

Precedence (for a candidate value v that parsed successfully)
1. Callback: when a validation callback is configured it is called with v. Whatever it
   raises propagates to the caller untouched; the engine never wraps or renames it.
2. Acceptable values: otherwise, when a non-empty range is configured, v must be one of
   its members or OutOfRangeError is raised.
3. Otherwise v is accepted.

Acceptable values
- Kept in insertion order with duplicates removed (membership goes through the kind's
  fold, and through str.lower when ignore_case is on).
- The rendered items used by messages are built once, when the range is configured.
  Contextual kinds (time) are the exception: they render per failure, in the layout the
  offending input was written in.
- An empty echoed value is shown as '' so the message never ends up with a blank.
"""
from rich.text import Text

from .faults import OutOfRangeError
from .sanitizers import is_empty


class Validation:
    """
    Callback-over-range validation bound to one value kind.
    """

    __slots__ = ("_kind", "_callback", "_members", "_choices", "_items", "_ignore_case")

    def __init__(self, kind, /):
        self._kind = kind
        self._callback = None
        self._members = set()
        self._choices = ()
        self._items = ()
        self._ignore_case = False

    @property
    def callback(self):
        return self._callback

    @property
    def choices(self):
        """
        The acceptable values, de-duplicated, in insertion order.
        """
        return self._choices

    @property
    def items(self):
        """
        Rendered acceptable values (empty for contextual kinds until a failure).
        """
        return self._items

    @property
    def ignore_case(self):
        return self._ignore_case

    @property
    def active(self):
        return self._callback is not None or bool(self._members)

    def set_callback(self, callback, /):
        if callback is not None and not callable(callback):
            raise TypeError("validation callback must be callable")
        self._callback = callback

    def set_range(self, values, /, ignore_case=False):
        """
        Replace the acceptable values.

        An empty collection of values leaves the current range untouched.
        """
        values = [self._kind.coerce(value) for value in values]
        if not values:
            return
        self._ignore_case = bool(ignore_case)
        members, choices = set(), []
        for value in values:
            if (key := self._key(value)) not in members:
                members.add(key)
                choices.append(value)
        self._members = members
        self._choices = tuple(choices)
        self._items = () if self._kind.contextual else tuple(map(self._kind.format, choices))

    def run(self, *arguments):
        """
        Call the callback, if any, and report whether it made the decision.
        """
        if self._callback is None:
            return False
        self._callback(*arguments)
        return True

    def check(self, value, /, text, long, short=""):
        """
        Apply the policy to a parsed value.

        Parameters
        - value: the parsed candidate.
        - text: the input it was parsed from, echoed by the out-of-range message.
        - long, short: the flag names used in the message.

        Raises
        - whatever the callback raises, as-is.
        - OutOfRangeError when the value is not one of the acceptable values.
        """
        if self.run(value):
            return
        if not self._members or self._key(value) in self._members:
            return
        items = self._items
        if self._kind.contextual:
            items = self._kind.render(self._choices, text)
        raise OutOfRangeError(f"'{text}'" if is_empty(text) else text, long, short, items)

    def _key(self, value, /):
        key = self._kind.fold(value)
        if self._ignore_case and isinstance(key, str):
            return key.lower()
        return key

    def __repr__(self):
        return f"Validation({self._kind.typename!r}, callback={self._callback!r}, choices={self._choices!r})"

    def __rich__(self):
        if self._callback is not None:
            return Text(f"callback {getattr(self._callback, '__qualname__', repr(self._callback))}", style="magenta")
        if not self._members:
            return Text("(unrestricted)", style="dim")
        return Text(",".join(self._items or map(str, self._choices)), style="cyan")


__all__ = (
    "Validation",
)

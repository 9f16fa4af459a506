"""
Flag keys: the identifiers used to read flag values from non-CLI sources.

Overview
- Key
  • prefix, id: both upper-case and sanitized (see sanitizers.sanitize_id).
  • explicit: True once the id was assigned by the user. An explicit id locks out any
    later automatic assignment, and an explicit assignment always wins regardless of
    the order of the calls.
  • value / str(key): "ID" without a prefix, "PREFIX_ID" with one, "" while the id is empty.

- bind_keys(flags, prefix=..., auto=False)
  • Registry-level key configuration, passed explicitly instead of living in module state.
  • Applies the prefix to every key and, when auto is on, derives automatic ids from the
    flags' long names.

Example
    >>> key = Key()
    >>> key.set_id("port number")
    >>> key.set_id("auto-generated", automatic=True)
    >>> key.set_prefix("app")
    >>> key.value
    'APP_PORT_NUMBER'
"""
from rich.text import Text

from .sanitizers import is_empty, sanitize_id
from .utils import Unset


class Key:
    """
    Unique flag identifier used by environment variables and custom sources.

    The combination of prefix and id must be unique within a registry; that is
    enforced by the registry, not here.
    """

    __slots__ = ("_prefix", "_id", "_explicit")

    def __init__(self, id="", /, prefix=""):
        self._prefix = sanitize_id(prefix)
        self._id = ""
        self._explicit = False
        if id:
            self.set_id(id)

    @property
    def prefix(self):
        return self._prefix

    @property
    def id(self):
        return self._id

    @property
    def explicit(self):
        """
        True when the current id was assigned explicitly by the user.
        """
        return self._explicit

    @property
    def is_set(self):
        return not is_empty(self._id)

    @property
    def value(self):
        """
        The full key: "ID", "PREFIX_ID", or "" when no id has been assigned.
        """
        if is_empty(self._id):
            return ""
        if is_empty(self._prefix):
            return self._id
        return self._prefix + "_" + self._id

    def set_prefix(self, prefix, /):
        if not isinstance(prefix, str):
            raise TypeError("key 'prefix' must be a string")
        self._prefix = sanitize_id(prefix)

    def set_id(self, id, /, automatic=False):
        """
        Assign the key id.

        An automatic assignment (made by a registry on the user's behalf) is
        ignored once an explicit id is in place; an explicit assignment always
        replaces the id and locks it.
        """
        if not isinstance(id, str):
            raise TypeError("key 'id' must be a string")
        if automatic and self._explicit:
            return
        self._id = sanitize_id(id)
        self._explicit = not automatic

    def __str__(self):
        return self.value

    def __repr__(self):
        return f"Key({self.value!r})"

    def __rich__(self):
        if not self.value:
            return Text("(no key)", style="dim")
        return Text(self.value, style="bold")


def bind_keys(flags, /, prefix=Unset, auto=False):
    """
    Apply registry-level key configuration to a group of flags.

    Parameters
    - flags: iterable of flags (anything exposing .key and .long_name).
    - prefix: Unset | str
      When given, becomes the prefix of every key (an empty string clears it).
    - auto: bool
      When True, each flag receives its long name as an automatic key id.
      Flags whose key was set explicitly keep their id.

    Returns
    - list of the flags, in the given order.
    """
    if not isinstance(prefix, str | Unset):
        raise TypeError("bind_keys() 'prefix' must be a string")
    flags = list(flags)
    for flag in flags:
        if prefix is not Unset:
            flag.key.set_prefix(prefix)
        if auto:
            flag.key.set_id(flag.long_name, automatic=True)
    return flags


__all__ = (
    "Key",
    "bind_keys",
)

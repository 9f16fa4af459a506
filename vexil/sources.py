"""
Value sources: where a flag's raw value comes from when it is not on the command line.

Overview
- Source: anything with read(key) returning the raw string stored under key, or Unset
  when the source has nothing for it. Keys are Key.value strings ("APP_PORT").
- MemorySource: an in-memory mapping, handy for tests and for values computed at runtime.
- EnvironmentSource: environment variables (os.environ unless another mapping is given).
- lookup(sources, key): the first value found, in source order.

Sources never parse: the registry hands the raw string to Flag.set(), so values read
from a source go through exactly the same parsing and validation as command-line input.

Example
    >>> port = IntFlag("port").with_key("port")
    >>> source = MemorySource({"PORT": "8080"})
    >>> if (raw := source.read(port.key)) is not Unset:
    ...     port.set(raw)
"""
import os
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from .keys import Key
from .sanitizers import is_empty
from .utils import *


def _sanitize_key(key, /):
    if isinstance(key, Key):
        return key.value
    if not isinstance(key, str):
        raise TypeError("source key must be a string or a Key")
    return key


@runtime_checkable
class Source(Protocol):
    def read(self, key, /): ...


class MemorySource:
    """
    A source backed by a dictionary.

    Empty (or blank) keys are ignored on insertion, since no flag can be looked up by them.
    """

    __slots__ = ("_values",)

    def __init__(self, values=Unset, /):
        self._values = {}
        if values is not Unset:
            self.update(values)

    def read(self, key, /):
        return self._values.get(_sanitize_key(key), Unset)

    def add(self, key, value, /):
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError("memory source keys and values must be strings")
        if is_empty(key):
            return self
        self._values[key] = value
        return self

    def update(self, values, /):
        """
        Add every pair of a mapping (or an iterable of pairs).
        """
        for key, value in (values.items() if isinstance(values, Mapping) else values):
            self.add(key, value)
        return self

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return f"MemorySource({self._values!r})"

    def __rich_repr__(self):
        yield from self._values.items()


class EnvironmentSource:
    """
    Environment variables, keyed by Key.value ("APP_PORT").
    """

    __slots__ = ("_environ",)

    def __init__(self, environ=Unset, /):
        environ = coalesce(environ, os.environ)
        if not isinstance(environ, Mapping):
            raise TypeError("environment source must read from a mapping")
        self._environ = environ

    def read(self, key, /):
        if is_empty(key := _sanitize_key(key)):
            return Unset
        return self._environ.get(key, Unset)

    def __repr__(self):
        return "EnvironmentSource()" if self._environ is os.environ else f"EnvironmentSource({dict(self._environ)!r})"


def lookup(sources, key, /):
    """
    Return the first value any of the sources holds for key, or Unset.
    """
    for source in sources:
        if not isinstance(source, Source):
            raise TypeError("lookup() sources must implement read(key)")
        if (value := source.read(key)) is not Unset:
            return value
    return Unset


__all__ = (
    "Source",
    "MemorySource",
    "EnvironmentSource",
    "lookup",
)

r"""
Vexil flags: typed flag values driven by one generic engine.

Overview
- Flavors
  • ScalarFlag: one value parsed from one token (bool, integers, floats, string,
    duration, time, ip, cidr, counter).
  • SliceFlag: an ordered list parsed from one delimiter-separated string.
  • StringMapFlag: "key:value" pairs, e.g. "k1:v1,k2:v2" ([string]string).
  • StringSliceMapFlag: a JSON object whose values are delimiter-separated lists
    ([string][]string).
  Concrete classes bind a flavor to a value kind (see kinds.py):
      class Int32Flag(ScalarFlag, kind=INT32): ...

- Lifecycle
  • Constructed with the kind's zero value and is_set False.
  • set(raw): parse -> validate -> commit. The only mutating entry point for input.
  • reset_to_default(): commit the default and clear is_set; a no-op without default.
  A failed set() never changes value or is_set.

- Reading values
  • get() / value: a snapshot of the committed value (collections are copies).
  • var(): a FlagVar handle whose .value always reflects the latest commit.

- Configuration
  Every setting is available as a constructor keyword and as a fluent builder:
      IntFlag("port", "listening port", short="p", default=8080, valid=(80, 8080))
      IntFlag("port", "listening port").with_short("p").with_default(8080)

Errors
- InvalidValueError: the raw input is not a value of the flag's type.
- OutOfRangeError: the value is not one of the acceptable values.
- Validation callback errors propagate as raised.
- TypeError/ValueError for bad configuration; EmptyFlagNameError for a blank long name.

Collections
- Trimmed-empty input commits an empty collection (never None) and sets is_set.
- Non-string slices trim every token and skip empty ones ("1,,2" is [1, 2]).
- String slices keep tokens verbatim (trimming is opt-in) including empty ones.
- String maps reject any token that is not exactly one "key:value" pair, including an
  empty token; key and value trimming are on by default.
- Commits are all-or-nothing.
"""
import functools
import json
import operator
import re
from collections.abc import Iterable, Mapping
from typing import Protocol, runtime_checkable

from .faults import EmptyFlagNameError, InvalidValueError
from .keys import Key
from .kinds import *
from .sanitizers import is_empty, sanitize_long_name, sanitize_short_name
from .utils import *
from .validation import Validation


class FlagType(type):
    """
    Metaclass shared by every flag class.

    Responsibilities
    - Bind a value kind to concrete classes (class options kind=, typename=, ranged=).
    - Expose the private fields named in __introspectable__ as read-only properties.
    - Provide stable __repr__/__rich_repr__ implementations.
    - Seal concrete classes against subclassing.

    Conventions
    - __typename__ is the kind's type name for concrete classes ("int32", "[]string"),
      otherwise derived from the class name ("scalar-flag").
    - __displayable__ (if set) narrows which properties __rich_repr__ shows.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        attributes = {name: mirror(name) for name in namespace.get("__introspectable__", ())}
        if (kind := options.get("kind", Unset)) is not Unset:
            if not isinstance(kind, Kind):
                raise TypeError("flag 'kind' must be a Kind")
            attributes |= {
                "__kind__": kind,
                "__typename__": options.get("typename", kind.typename),
                "__ranged__": options.get("ranged", kind.ranged),
            }
        else:
            attributes["__typename__"] = re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower()

        self = super().__new__(cls, name, bases, namespace | attributes)

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - Int32Flag(long_name='port', short_name='p', typename='int32', ...)
            """
            return f"{type(self).__name__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        if kind is not Unset:
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                """
                Disallow subclassing of concrete flag classes.
                """
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


@runtime_checkable
class EmptyValueProvider(Protocol):
    """
    Flags with a meaningful "present without a value" form (e.g., a bare --verbose).

    A registry that meets the flag with no value token sets empty_value() instead.
    """
    def empty_value(self): ...


@runtime_checkable
class Repeatable(Protocol):
    """
    Flags whose repeated occurrences accumulate (e.g., -vvv).

    once() is the amount a single occurrence contributes.
    """
    def once(self): ...


class FlagVar:
    """
    Read-only handle on a flag's committed value.

    The handle is stable for the flag's lifetime and value always reflects the latest
    successful set() or reset_to_default(). Collections are handed out as copies.
    """

    __slots__ = ("_flag",)

    def __init__(self, flag, /):
        self._flag = flag

    @property
    def flag(self):
        return self._flag

    @property
    def value(self):
        return self._flag.get()

    def __repr__(self):
        return f"FlagVar({self._flag.long_name!r}, value={self.value!r})"

    def __rich_repr__(self):
        yield "flag", self._flag.long_name
        yield "value", self.value


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the metadata shared by every flag.

    - long_name: required string; lower-cased and hyphenated. A blank name raises
      EmptyFlagNameError.
    - usage: string, kept verbatim.
    - hidden/deprecated/required: coerced to bool.
    """
    if not isinstance(long_name := metadata["long_name"], str):
        raise TypeError(f"{cls.__typename__} 'long_name' must be a string")
    if not (long_name := sanitize_long_name(long_name)):
        raise EmptyFlagNameError()
    metadata["long_name"] = long_name

    if not isinstance(metadata["usage"], str):
        raise TypeError(f"{cls.__typename__} 'usage' must be a string")

    for name in ("hidden", "deprecated", "required"):
        metadata[name] = bool(metadata[name])


class Flag(metaclass=FlagType):
    """
    Base of every flag: identity, key, lifecycle and fluent configuration.

    Subclasses provide _convert(raw) (parse and validate, raising on failure),
    _coerce(default) and _zero().
    """

    __kind__ = Unset
    __ranged__ = False

    __introspectable__ = (
        "long_name",
        "short_name",
        "usage",
        "key",
        "is_set",
        "has_default",
        "hidden",
        "deprecated",
        "required",
    )
    __displayable__ = (
        "long_name",
        "short_name",
        "typename",
        "key",
        "value",
        "default",
        "is_set",
    )

    def __init__(
            self,
            long_name,
            usage="",
            /,
            *,
            short=Unset,
            key=Unset,
            default=Unset,
            valid=Unset,
            ignore_case=False,
            validator=None,
            hidden=False,
            deprecated=False,
            required=False
    ):
        """
        Construct a flag.

        Parameters
        - long_name: str, normalized to lower case with hyphens ("Port Number" -> "port-number").
        - usage: str, free help text kept verbatim.
        - short: Unset | str, the short name ("p" for -p).
        - key: Unset | str, an explicit key id (see Key).
        - default: Unset | value, restored by reset_to_default(); not committed here.
        - valid: Unset | Iterable, acceptable values (ranged kinds only).
        - ignore_case: bool, case-insensitive acceptable values (string kinds only).
        - validator: None | Callable, raises to reject a value; wins over valid.
        - hidden/deprecated/required: presentation flags for registries.
        """
        if type(self).__kind__ is Unset:
            raise TypeError(f"type {type(self).__name__!r} cannot be instantiated directly")

        metadata = {
            "long_name": long_name,
            "usage": usage,
            "hidden": hidden,
            "deprecated": deprecated,
            "required": required,
        }
        _sanitize_metadata(type(self), metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._short_name = ""
        self._key = Key()
        self._validation = Validation(type(self).__kind__)
        self._default = None
        self._has_default = False
        self._value = self._zero()
        self._is_set = False

        if short is not Unset:
            self.with_short(short)
        if key is not Unset:
            self.with_key(key)
        if default is not Unset:
            self.with_default(default)
        if valid is not Unset:
            self.with_valid_range(*valid, ignore_case=ignore_case)
        if validator is not None:
            self.with_validation_callback(validator)

    @property
    def typename(self):
        return type(self).__typename__

    @property
    def default(self):
        """
        The configured default, or None when there is none.
        """
        return snapshot(self._default) if self._has_default else None

    @property
    def value(self):
        return snapshot(self._value)

    @property
    def validation(self):
        return self._validation

    def get(self):
        """
        Return the committed value (a copy for collections).
        """
        return snapshot(self._value)

    def var(self):
        return FlagVar(self)

    def set(self, raw, /):
        """
        Parse, validate and commit a raw value.

        Nothing changes when parsing or validation fails.
        """
        if not isinstance(raw, str):
            raise TypeError(f"{self.typename} flag value must be a string")
        value = self._convert(raw)
        self._value = value
        self._is_set = True

    def reset_to_default(self):
        if not self._has_default:
            return
        self._value = snapshot(self._default)
        self._is_set = False

    def with_short(self, short, /):
        if not isinstance(short, str):
            raise TypeError(f"{self.typename} 'short' must be a string")
        self._short_name = sanitize_short_name(short)
        return self

    def with_key(self, id, /):
        """
        Assign an explicit key id; it wins over any automatic id, whatever the order.
        """
        self._key.set_id(id)
        return self

    def with_default(self, default, /):
        self._default = self._coerce(default)
        self._has_default = True
        return self

    def with_valid_range(self, *values, ignore_case=False):
        """
        Restrict the flag to a set of acceptable values.

        Ignored at set() time while a validation callback is configured.
        """
        if not type(self).__ranged__:
            raise TypeError(f"{self.typename} flags do not support acceptable values")
        if ignore_case and type(self).__kind__ is not STRING:
            raise TypeError(f"{self.typename} flags do not support case-insensitive values")
        self._validation.set_range(values, ignore_case=ignore_case)
        return self

    def with_validation_callback(self, callback, /):
        self._validation.set_callback(callback)
        return self

    def hide(self):
        self._hidden = True
        return self

    def mark_as_deprecated(self):
        self._deprecated = True
        return self

    def mark_as_required(self):
        self._required = True
        return self

    def _invalid(self, value, /):
        return InvalidValueError(value, self._long_name, self._short_name, self.typename)


class ScalarFlag(Flag):
    """
    One value parsed from one token.

    set(raw)
    - Trim the input (strings are kept verbatim); trimmed-empty input becomes the kind's
      placeholder ("0", "0.0", "false", "0s"); time, ip and cidr commit their zero value.
    - Parse; a failure raises InvalidValueError.
    - Validate (callback, then acceptable values); the empty ip and cidr values skip this.
    - Commit and mark the flag as set.
    """

    def _zero(self):
        kind = type(self).__kind__
        return kind.parse(kind.prepare(""))

    def _coerce(self, default, /):
        return type(self).__kind__.coerce(default)

    def _convert(self, raw, /):
        kind = type(self).__kind__
        text = kind.prepare(raw)
        try:
            value = kind.parse(text)
        except (ValueError, OverflowError):
            raise self._invalid(text) from None
        if text or kind.validate_empty:
            self._validation.check(value, text, self._long_name, self._short_name)
        return value


class SliceFlag(Flag):
    """
    An ordered list parsed from one delimiter-separated string.

    Every token goes through the scalar parse and validation rules of the kind; one bad
    token fails the whole set() and leaves the committed list untouched.
    """

    __introspectable__ = Flag.__introspectable__ + (
        "delimiter",
        "trimming",
    )

    def __init__(self, long_name, usage="", /, *, delimiter=",", trimming=False, **options):
        self._delimiter = ","
        self._trimming = False
        super().__init__(long_name, usage, **options)
        self._trimming = type(self).__kind__.trim
        self.with_delimiter(delimiter)
        if trimming:
            self.with_trimming()

    def with_delimiter(self, delimiter, /):
        """
        Set the token delimiter; an empty delimiter restores the default ",".
        """
        if not isinstance(delimiter, str):
            raise TypeError(f"{self.typename} 'delimiter' must be a string")
        self._delimiter = delimiter or ","
        return self

    def with_trimming(self):
        """
        Trim the leading and trailing white space of every token.

        Only string slices keep untrimmed tokens by default.
        """
        self._trimming = True
        return self

    def _zero(self):
        return []

    def _coerce(self, default, /):
        if isinstance(default, str | bytes) or not isinstance(default, Iterable):
            raise TypeError(f"{self.typename} 'default' must be an iterable of values")
        return list(map(type(self).__kind__.coerce, default))

    def _convert(self, raw, /):
        kind = type(self).__kind__
        if is_empty(raw):
            return []

        tokens = []
        for token in raw.split(self._delimiter):
            if self._trimming:
                token = token.strip()
            # Stray delimiters are tolerated by every kind except strings.
            if kind.trim and is_empty(token):
                continue
            tokens.append(token)

        values = []
        for token in tokens:
            text = kind.prepare(token)
            try:
                values.append(kind.parse(text))
            except (ValueError, OverflowError):
                raise self._invalid(text) from None

        for value, token in zip(values, tokens):
            self._validation.check(value, kind.prepare(token), self._long_name, self._short_name)
        return values


class StringMapFlag(Flag, kind=STRING, typename="[string]string", ranged=False):
    """
    A string-to-string map: --labels "env:prod, team:core".

    Every token must split on ":" into exactly one key and one value; anything else
    (including an empty token, e.g. a trailing delimiter) fails the whole input. Keys
    and values are trimmed unless trimming is disabled. Duplicate keys keep the last
    value. The validation callback receives (key, value).
    """

    __introspectable__ = Flag.__introspectable__ + (
        "delimiter",
        "trim_keys",
        "trim_values",
    )

    def __init__(self, long_name, usage="", /, *, delimiter=",", trim_keys=True, trim_values=True, **options):
        self._delimiter = ","
        self._trim_keys = bool(trim_keys)
        self._trim_values = bool(trim_values)
        super().__init__(long_name, usage, **options)
        self.with_delimiter(delimiter)

    def with_delimiter(self, delimiter, /):
        if not isinstance(delimiter, str):
            raise TypeError(f"{self.typename} 'delimiter' must be a string")
        self._delimiter = delimiter or ","
        return self

    def disable_key_trimming(self):
        self._trim_keys = False
        return self

    def disable_value_trimming(self):
        self._trim_values = False
        return self

    def _zero(self):
        return {}

    def _coerce(self, default, /):
        if not isinstance(default, Mapping):
            raise TypeError(f"{self.typename} 'default' must be a mapping")
        return {str(key): str(value) for key, value in default.items()}

    def _convert(self, raw, /):
        if is_empty(raw):
            return {}
        mapping = {}
        for pair in raw.split(self._delimiter):
            if len(parts := pair.split(":")) != 2:
                raise self._invalid(raw)
            key, value = parts
            if self._trim_keys:
                key = key.strip()
            if self._trim_values:
                value = value.strip()
            mapping[key] = value
        for key, value in mapping.items():
            self._validation.run(key, value)
        return mapping


class StringSliceMapFlag(Flag, kind=STRING, typename="[string][]string", ranged=False):
    """
    A map of string lists, given as a JSON object of strings:
        --routes '{"eu": "fra,ams", "us": "iad"}'  ->  {"eu": ["fra", "ams"], "us": ["iad"]}

    Each value is split on the delimiter; trimming the items is opt-in. The validation
    callback receives (key, items) with the items as they will be committed.
    """

    __introspectable__ = Flag.__introspectable__ + (
        "delimiter",
        "trimming",
    )

    def __init__(self, long_name, usage="", /, *, delimiter=",", trimming=False, **options):
        self._delimiter = ","
        self._trimming = bool(trimming)
        super().__init__(long_name, usage, **options)
        self.with_delimiter(delimiter)

    def with_delimiter(self, delimiter, /):
        if not isinstance(delimiter, str):
            raise TypeError(f"{self.typename} 'delimiter' must be a string")
        self._delimiter = delimiter or ","
        return self

    def with_trimming(self):
        self._trimming = True
        return self

    def _zero(self):
        return {}

    def _coerce(self, default, /):
        if not isinstance(default, Mapping):
            raise TypeError(f"{self.typename} 'default' must be a mapping")
        result = {}
        for key, items in default.items():
            if isinstance(items, str | bytes) or not isinstance(items, Iterable):
                raise TypeError(f"{self.typename} 'default' values must be iterables of strings")
            result[str(key)] = list(map(str, items))
        return result

    def _convert(self, raw, /):
        text = raw.strip() or "{}"
        try:
            decoded = json.loads(text)
        except ValueError:
            raise self._invalid(text) from None
        if decoded is None:
            decoded = {}
        if not isinstance(decoded, dict) or not all(isinstance(value, str) for value in decoded.values()):
            raise self._invalid(text)

        result = {}
        for key, value in decoded.items():
            items = value.split(self._delimiter)
            if self._trimming:
                items = [item.strip() for item in items]
            self._validation.run(key, list(items))
            result[key] = items
        return result


class BoolFlag(ScalarFlag, kind=BOOL):
    """
    A switch: a bare --flag (no value) means true, trimmed-empty input means false.
    """

    def empty_value(self):
        return "true"


class ByteFlag(ScalarFlag, kind=BYTE): ...
class Int8Flag(ScalarFlag, kind=INT8): ...
class Int16Flag(ScalarFlag, kind=INT16): ...
class Int32Flag(ScalarFlag, kind=INT32): ...
class Int64Flag(ScalarFlag, kind=INT64): ...
class IntFlag(ScalarFlag, kind=INT): ...
class Uint8Flag(ScalarFlag, kind=UINT8): ...
class Uint16Flag(ScalarFlag, kind=UINT16): ...
class Uint32Flag(ScalarFlag, kind=UINT32): ...
class Uint64Flag(ScalarFlag, kind=UINT64): ...
class UintFlag(ScalarFlag, kind=UINT): ...


class Float32Flag(ScalarFlag, kind=FLOAT32):
    """
    Values are rounded to single precision; magnitudes beyond float32 are invalid.
    """


class Float64Flag(ScalarFlag, kind=FLOAT64): ...


class StringFlag(ScalarFlag, kind=STRING):
    """
    Text taken verbatim (no trimming). Acceptable values may ignore case.
    """

    @property
    def default(self):
        """
        The configured default; an empty default reads as '' so it is visible in help.
        """
        if self._has_default and self._default == "":
            return "''"
        return super().default


class DurationFlag(ScalarFlag, kind=DURATION):
    """
    Values such as "1h30m", "300ms" or "-2.5s", held as timedelta.
    """


class TimeFlag(ScalarFlag, kind=TIME):
    """
    Free-form date/time values resolved through layouts.LAYOUTS, held as Instant.

    Out-of-range messages list the acceptable values in the layout the input matched.
    """


class IPAddressFlag(ScalarFlag, kind=IP):
    """
    IPv4 or IPv6 addresses; trimmed-empty input commits None without validation.
    """


class CIDRFlag(ScalarFlag, kind=CIDR_):
    """
    Values in CIDR notation; trimmed-empty input commits the empty CIDR().
    """


class CounterFlag(ScalarFlag, kind=COUNTER):
    """
    A repeatable 8-bit counter (-vvv). A registry adds once() per occurrence.
    """

    def once(self):
        return 1


class BoolSliceFlag(SliceFlag, kind=BOOL, typename="[]bool"): ...
class IntSliceFlag(SliceFlag, kind=INT, typename="[]int"): ...
class UintSliceFlag(SliceFlag, kind=UINT, typename="[]uint"): ...
class Float64SliceFlag(SliceFlag, kind=FLOAT64, typename="[]float64"): ...
class DurationSliceFlag(SliceFlag, kind=DURATION, typename="[]duration"): ...
class IPAddressSliceFlag(SliceFlag, kind=IP, typename="[]ip"): ...
class CIDRSliceFlag(SliceFlag, kind=CIDR_, typename="[]cidr"): ...


class StringSliceFlag(SliceFlag, kind=STRING, typename="[]string"):
    """
    Tokens are kept verbatim, empty ones included; enable trimming with with_trimming().

    Validation runs per token, optionally case-insensitive.
    """


__all__ = (
    # Bases and capabilities
    "Flag",
    "ScalarFlag",
    "SliceFlag",
    "FlagVar",
    "EmptyValueProvider",
    "Repeatable",

    # Scalars
    "BoolFlag",
    "ByteFlag",
    "Int8Flag",
    "Int16Flag",
    "Int32Flag",
    "Int64Flag",
    "IntFlag",
    "Uint8Flag",
    "Uint16Flag",
    "Uint32Flag",
    "Uint64Flag",
    "UintFlag",
    "Float32Flag",
    "Float64Flag",
    "StringFlag",
    "DurationFlag",
    "TimeFlag",
    "IPAddressFlag",
    "CIDRFlag",
    "CounterFlag",

    # Collections
    "BoolSliceFlag",
    "IntSliceFlag",
    "UintSliceFlag",
    "Float64SliceFlag",
    "StringSliceFlag",
    "DurationSliceFlag",
    "IPAddressSliceFlag",
    "CIDRSliceFlag",
    "StringMapFlag",
    "StringSliceMapFlag",
)

# Keep the metaclass out of star-imports and autocompletion.
del FlagType

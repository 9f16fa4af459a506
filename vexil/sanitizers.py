"""
Name and key normalization.

Scope
- Pure string functions shared by Key and by long/short name assignment.
  No side effects, no failure modes: every input yields a (possibly empty) string.

Rules
- is_empty(text): True when the text is empty after trimming.
- sanitize_id(text): trim, collapse runs of whitespace or hyphens into a single "_",
  upper-case. Inputs made only of separators collapse to "" (a "-" key disables the key).
- sanitize_long_name(text): lower-case, then the short-name rule.
- sanitize_short_name(text): trim, collapse whitespace runs into "-", strip leading "-"
  (so "--flag" and "flag" normalize alike). Case is preserved.
- print_name(long, short): "-s, --long" or "--long", used by every flag message.

Examples
    >>> sanitize_id("  key with white space ")
    'KEY_WITH_WHITE_SPACE'
    >>> sanitize_id("------key-------with-----hyphen----")
    '_KEY_WITH_HYPHEN_'
    >>> sanitize_long_name("--Port  Number")
    'port-number'
"""
import re

_SEPARATORS = re.compile(r"[\s-]+")
_WHITESPACE = re.compile(r"\s+")


def is_empty(text, /):
    return not text.strip()


def sanitize_id(text, /):
    if not (text := text.strip()):
        return ""
    # Nothing but separators: there is no identifier to keep.
    if not text.replace("-", "").replace("_", "").strip():
        return ""
    return _SEPARATORS.sub("_", text).upper()


def sanitize_long_name(text, /):
    return sanitize_short_name(text.lower())


def sanitize_short_name(text, /):
    return _WHITESPACE.sub("-", text.strip()).lstrip("-")


def print_name(long, short="", /):
    """
    Render a flag identity the way every message refers to it.

    Returns "-s, --long" when a short name is present, otherwise "--long".
    """
    if is_empty(short):
        return "--" + long
    return f"-{short}, --{long}"


__all__ = (
    "is_empty",
    "sanitize_id",
    "sanitize_long_name",
    "sanitize_short_name",
    "print_name",
)

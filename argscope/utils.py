"""
Argscope utilities.

Scope
- Small helpers shared by the argument model, the schema, the
  classifier/resolver and the renderers.

Overview
- Unset: the "not given" sentinel of every declaration option, so that None
  stays available as a real default or value_optional sentinel.
- coalesce(value, default): turns Unset into a default, keeps everything else.
- rename(name): decorator giving generated methods a readable __name__.
- mirror(name): read-only property over self._name, copying containers.
- quantify(count, text) / pluralize(text) / ordinal(number): fault wording.
- normalize(key): the canonical form of an argument key.
- split(source): shell-like split of a single command-line string.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> normalize("--Output-Dir")
    'output_dir'
    >>> quantify(3, "positional argument")
    '3 positional arguments'
    >>> split('copy "My Documents" dest')
    ['copy', 'My Documents', 'dest']
"""
import functools
import shlex
from collections.abc import Mapping, Sequence, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel: an option that was not given at all.

    Characteristics
    - Single instance; copies return it unchanged.
    - Falsey and printed as "Unset".
    - Usable in unions: isinstance(value, str | Unset).
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    __ror__ = __or__

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("the Unset sentinel type cannot be subclassed")


def coalesce(value, default=None, /):
    """
    Return value, or default when value is Unset.

    None, 0, "" and [] are real values and are returned as-is:
    - coalesce(Unset, ".")  -> "."
    - coalesce(None, ".")   -> None
    """
    return default if value is Unset else value


def rename(name, /):
    """Decorator setting __name__ and __qualname__ of a generated function."""
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _detach(value):
    # Lists, dicts and sets handed out by mirror() are copies; tuples and
    # frozensets are already immutable and keep their type.
    match value:
        case tuple():
            return tuple(map(_detach, value))
        case str() | bytes() | range() | frozenset():
            return value
        case Sequence():
            return list(map(_detach, value))
        case Mapping():
            return {key: _detach(item) for key, item in value.items()}
        case Set():
            return set(map(_detach, value))
    return value


def mirror(name, /):
    """
    Read-only property exposing the backing attribute self._<name>.

    Container values are copied on every access so callers cannot change the
    declaration through the property.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


_IRREGULAR = {
    "is": "are",
    "was": "were",
    "index": "indices",
}


@functools.cache
def pluralize(text, /):
    """
    Plural of the last word of text, keeping its capitalization.

    - pluralize("positional argument") -> "positional arguments"
    - pluralize("entry")               -> "entries"
    """
    if not isinstance(text, str):
        raise TypeError("pluralize() argument must be a string")
    head, _, word = text.rpartition(" ")
    if not word:
        return text

    lower = word.lower()
    if lower in _IRREGULAR:
        plural = _IRREGULAR[lower]
    elif lower.endswith(("s", "x", "z", "ch", "sh")):
        plural = lower + "es"
    elif lower.endswith("y") and lower[-2:-1] not in ("", "a", "e", "i", "o", "u"):
        plural = lower[:-1] + "ies"
    else:
        plural = lower + "s"

    if word[:1].isupper():
        plural = plural.capitalize()
    return f"{head} {plural}" if head else plural


def quantify(count, text, /):
    """
    "<count> <text>", pluralized unless count is one.

    - quantify(1, "value") -> "1 value"
    - quantify(3, "value") -> "3 values"
    """
    return "%d %s" % (count, text if count == 1 else pluralize(text))


_ORDINALS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


def ordinal(number, /):
    """
    Ordinal of a 1-based position: words up to ten, then "11th", "21st", ...
    """
    if 1 <= number <= len(_ORDINALS):
        return _ORDINALS[number - 1]
    if number % 100 in (11, 12, 13):
        return f"{number}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


def normalize(key, /):
    """
    Canonical argument key: stripped, lowercased, leading dashes removed and
    inner dashes turned into underscores ("--Dry-Run" -> "dry_run").

    The result is not validated here; the argument model checks that it is an
    identifier at declaration time.
    """
    return str(key).strip().lower().lstrip("-").replace("-", "_")


def split(source, /):
    """
    Split one command-line string into tokens with shell quoting rules.

    Raises
    - TypeError: source is not a string.
    - ValueError: unbalanced quotes.
    """
    if not isinstance(source, str):
        raise TypeError("split() argument must be a string")
    return shlex.split(source)


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pluralize",
    "quantify",
    "ordinal",
    "normalize",
    "split",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)

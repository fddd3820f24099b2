r"""
Argscope argument model.

Overview
- Kinds
  • ArgumentKind: closed enumeration of the five kinds of arguments
    (POSITIONAL, KEYWORD, FLAG, REST, COMMAND). The tokenizer and the resolver
    dispatch on it with exhaustive `match` statements.

- Arguments
  • PositionalArgument: value identified by its position among un-keyed tokens.
  • KeywordArgument: value identified by a preceding --key or -k.
  • FlagArgument: boolean, true on presence, false when negated (--no-key).
  • RestArgument: collects trailing/unmatched values into a list.
  • CommandArgument: a constrained positional value; once matched, the nested
    arguments of the chosen CommandInstance are spliced into the active schema.
  • CommandInstance: one registered command value of a CommandArgument, owning
    its own nested Schema.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields listed in __introspectable__ via read-only properties (see mirror()).
  • copy.replace(argument, **overrides) rebuilds an argument from its declared
    metadata plus the overrides.

Metadata (sanitized on construction)
- Shared (all kinds)
  • key: str, normalized (lowercase, no leading dashes, dashes → underscores),
    must then start with a letter and contain only letters, digits and underscores.
  • descr: Unset | str | Text (short help), non-empty when provided.
  • short_key: Unset | str, a single ASCII letter or digit (an optional leading
    '-' is accepted); case is preserved.
  • on_parse: Unset | Callable[[value, argument, partial_result], value].
  • usage_break: Unset | str, heading printed before the argument in help.
- Value-bearing (positional, keyword, rest, command)
  • usage_value: Unset | str, label in usage/help (defaults to KEY).
  • sensitive: bool, raw tokens are masked in echoes and logs.
- Validated (positional, keyword, rest)
  • validation: Unset | Collection | str | re.Pattern | Callable.

Quick example:
    >>> from argscope.arguments import PositionalArgument, KeywordArgument
    >>> PositionalArgument("file", "File to process")
    positional-argument(key='file', ...)
    >>> KeywordArgument("--log-level", "Logging level", short_key="l",
    ...                 validation=["debug", "info"], value_optional="info")
    keyword-argument(key='log_level', ...)

Public API
- Enum: ArgumentKind
- Classes: Argument, PositionalArgument, KeywordArgument, FlagArgument,
  RestArgument, CommandArgument, CommandInstance
"""
import functools
import operator
import re
from collections.abc import Collection, Iterable, Mapping, Set
from enum import Enum

from rich.text import Text

from .faults import DuplicateKeyError
from .utils import *


class ArgumentKind(Enum):
    """
    The five kinds of arguments a schema can hold.

    This is a closed set: adding a kind means extending this enumeration and
    every `match` over it (Classifier._classify_*, Resolver._process).
    """
    POSITIONAL = "positional"
    KEYWORD = "keyword"
    FLAG = "flag"
    REST = "rest"
    COMMAND = "command"

    def __str__(self):
        return self.value


class ArgumentType(type):
    """
    Metaclass that turns argument classes into introspectable descriptors.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used in messages and representations.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and pretty printing.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                # Explicit properties declared in the class body take precedence.
                name: mirror(name) for name in namespace.get("__introspectable__", ()) if name not in namespace
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - keyword-argument(key='bar', short_key='b', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield a sequence of (name, object) pairs for pretty printers.

            The set of names comes from type(self).__displayable__ if provided,
            otherwise from type(self).__introspectable__.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate metadata shared by every argument kind.

    Responsibilities
    - key: required string; normalized via normalize() and then checked to be an
      identifier starting with a letter (it becomes a field of the result record).
    - descr: optional short description. If omitted (Unset), it becomes None.
      If provided, it must be a non-empty string (or rich Text) after trimming.
    - short_key: optional single letter or digit, with an optional leading '-'.
    - on_parse: optional callable.
    - usage_break: optional non-empty string.

    Raises
    - TypeError: when a field has the wrong type.
    - ValueError: when a string field is empty or malformed.

    Notes
    - This function mutates the provided metadata dict in place.
    """
    if not isinstance(key := metadata["key"], str):
        raise TypeError(f"{cls.__typename__} 'key' must be a string")
    if not re.fullmatch(r"[^\W\d_]\w*", key := normalize(key)):
        raise ValueError(f"{cls.__typename__} 'key' must start with a letter and contain only letters, digits, "
                         f"dashes or underscores (got {metadata['key']!r})")
    metadata["key"] = key

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(short_key := metadata.get("short_key", Unset), str | Unset):
        raise TypeError(f"{cls.__typename__} 'short_key' must be a string")
    if isinstance(short_key, str):
        if not (match := re.fullmatch(r"-?([A-Za-z0-9])", short_key.strip())):
            raise ValueError(f"{cls.__typename__} 'short_key' must be a single digit or letter (got {short_key!r})")
        short_key = match[1]
    metadata["short_key"] = coalesce(short_key)

    if not callable(on_parse := metadata["on_parse"]) and on_parse is not Unset:
        raise TypeError(f"{cls.__typename__} 'on_parse' must be callable")

    if not isinstance(usage_break := metadata["usage_break"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'usage_break' must be a string")
    elif isinstance(usage_break, str) and not (usage_break := usage_break.strip()):
        raise ValueError(f"{cls.__typename__} 'usage_break' cannot be empty")
    metadata["usage_break"] = coalesce(usage_break)


def _sanitize_value_metadata(cls, metadata, /):
    """
    Internal: validate and normalize metadata for value-bearing arguments.

    Responsibilities
    - usage_value: Unset or a non-empty string; defaults to the upper-cased key.
    - sensitive: coerced to bool.
    - validation (when present in metadata): one of
        • a collection of allowed values (list, tuple, range, set, frozenset)
          → stored as a tuple, or a frozenset for sets;
        • a pattern (str or compiled re.Pattern) → stored compiled;
        • a predicate callable (value, argument, partial_result) → stored as-is.

    Side effects
    - Mutates the provided metadata dict in place.
    """
    if not isinstance(usage_value := metadata["usage_value"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'usage_value' must be a string")
    elif isinstance(usage_value, str) and not (usage_value := usage_value.strip()):
        raise ValueError(f"{cls.__typename__} 'usage_value' cannot be empty")
    metadata["usage_value"] = coalesce(usage_value, metadata["key"].upper())

    metadata["sensitive"] = bool(metadata["sensitive"])

    if "validation" not in metadata:
        return

    match validation := metadata["validation"]:
        case UnsetType():
            pass
        case str():
            try:
                validation = re.compile(validation)
            except re.error as exception:
                raise ValueError(f"{cls.__typename__} 'validation' is not a valid pattern: {exception}") from None
        case re.Pattern():
            pass
        case Set():
            validation = frozenset(validation)
        case Mapping():
            raise TypeError(f"{cls.__typename__} 'validation' cannot be a mapping")
        case Collection():
            validation = tuple(validation)
        case _ if callable(validation):
            pass
        case _:
            raise TypeError(f"{cls.__typename__} 'validation' must be a collection, a pattern or a callable")
    metadata["validation"] = validation


class Argument(metaclass=ArgumentType):
    """
    Abstract base of all argument kinds.

    Subclasses set `kind` and list their read-only fields in
    __introspectable__; instances are built once at declaration time and are
    treated as read-only afterwards.

    Shared read-only attributes
    - key, descr, short_key, required, default, on_parse, usage_break
    - kind (class attribute, an ArgumentKind)
    """
    kind = None
    __introspectable__ = ()

    def __new__(cls, *args, **kwargs):
        if cls.kind is None:
            raise TypeError(f"{cls.__name__} is abstract and cannot be instantiated")
        return super().__new__(cls)

    def _populate(self, metadata, declaration, /):
        # Mirror sanitized metadata into private fields; read-only properties expose them.
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._declaration = declaration

    @property
    def value_bearing(self):
        """True for every kind but FLAG."""
        return self.kind is not ArgumentKind.FLAG

    @property
    def dashed(self):
        """The key as typed on the command line ('dry_run' → 'dry-run')."""
        return self.key.replace("_", "-")

    def __replace__(self, *unused, **overrides):
        """
        Rebuild this argument from its declared metadata plus overrides.

        Used by copy.replace(argument, ...), e.g. to adapt a predefined argument.
        """
        assert not unused, "positional arguments are not allowed"
        declaration = self._declaration | overrides
        key = declaration.pop("key")
        descr = declaration.pop("descr")
        return type(self)(key, descr, **declaration)

    def __str__(self):
        return self.key


class PositionalArgument(Argument):
    """
    An argument set by position on the command line.

    Positional arguments do not need a --key before their value; they are
    typically used for a small number of mandatory values. They may still be
    given by key (--file x), in which case their slot is skipped.

    Defaults
    - required: true, unless a default is given.
    """
    kind = ArgumentKind.POSITIONAL

    __introspectable__ = (
        "key",
        "descr",
        "short_key",
        "required",
        "default",
        "validation",
        "on_parse",
        "sensitive",
        "usage_value",
        "usage_break",
    )

    def __init__(
            self,
            key,
            descr=Unset,
            /,
            *,
            short_key=Unset,
            required=Unset,
            default=None,
            validation=Unset,
            on_parse=Unset,
            sensitive=False,
            usage_value=Unset,
            usage_break=Unset,
    ):
        declaration = {
            "key": key,
            "descr": descr,
            "short_key": short_key,
            "required": required,
            "default": default,
            "validation": validation,
            "on_parse": on_parse,
            "sensitive": sensitive,
            "usage_value": usage_value,
            "usage_break": usage_break,
        }
        metadata = dict(declaration)
        _sanitize_metadata(type(self), metadata)
        _sanitize_value_metadata(type(self), metadata)
        metadata["required"] = bool(coalesce(required, default is None))
        self._populate(metadata, declaration)

    def __str__(self):
        return self.usage_value


class KeywordArgument(Argument):
    """
    An argument specified via a keyword prefix (--key value or -k value).

    Typically used for optional arguments, although keyword arguments can also
    be mandatory where there is no natural ordering.

    value_optional
    - Unset (default): a value must follow the key.
    - anything else: the sentinel used when the key appears with no value, e.g.
      KeywordArgument("opt", value_optional="Used"): '--opt' → "Used".

    Negation
    - '--no-key' yields False for keyword arguments too.
    """
    kind = ArgumentKind.KEYWORD

    __introspectable__ = (
        "key",
        "descr",
        "short_key",
        "required",
        "default",
        "value_optional",
        "validation",
        "on_parse",
        "sensitive",
        "usage_value",
        "usage_break",
    )

    def __init__(
            self,
            key,
            descr=Unset,
            /,
            *,
            short_key=Unset,
            required=False,
            default=None,
            value_optional=Unset,
            validation=Unset,
            on_parse=Unset,
            sensitive=False,
            usage_value=Unset,
            usage_break=Unset,
    ):
        declaration = {
            "key": key,
            "descr": descr,
            "short_key": short_key,
            "required": required,
            "default": default,
            "value_optional": value_optional,
            "validation": validation,
            "on_parse": on_parse,
            "sensitive": sensitive,
            "usage_value": usage_value,
            "usage_break": usage_break,
        }
        metadata = dict(declaration)
        _sanitize_metadata(type(self), metadata)
        _sanitize_value_metadata(type(self), metadata)
        metadata["required"] = bool(required)
        self._populate(metadata, declaration)

    @property
    def accepts_no_value(self):
        """True when the key may appear without a value (value_optional is set)."""
        return self._value_optional is not Unset

    def __str__(self):
        return "--" + self.dashed


class FlagArgument(Argument):
    """
    A boolean argument set when its key is encountered on the command line.

    Flags normally default to None/False and become True when the key is
    present. A flag may default to True; it is then disabled with a 'no-'
    prefix, e.g. --no-export for an --export flag.

    Flags never carry a value, are never required and take no validation.
    """
    kind = ArgumentKind.FLAG

    __introspectable__ = (
        "key",
        "descr",
        "short_key",
        "required",
        "default",
        "on_parse",
        "usage_break",
    )

    def __init__(
            self,
            key,
            descr=Unset,
            /,
            *,
            short_key=Unset,
            default=None,
            on_parse=Unset,
            usage_break=Unset,
    ):
        declaration = {
            "key": key,
            "descr": descr,
            "short_key": short_key,
            "default": default,
            "on_parse": on_parse,
            "usage_break": usage_break,
        }
        metadata = dict(declaration)
        _sanitize_metadata(type(self), metadata)
        metadata["required"] = False
        self._populate(metadata, declaration)

    @property
    def sensitive(self):
        return False

    @property
    def validation(self):
        return Unset

    def __str__(self):
        return "--" + ("no-" if self.default else "") + self.dashed


class RestArgument(Argument):
    """
    An argument collecting every value not claimed by another argument.

    Rest values are those left over after all positional slots are filled, and
    every token after a literal '--'. At most one rest argument exists per scope.

    Defaults
    - default: an empty list (copied for every parse).
    - min_values: 1; the argument is required unless min_values is 0 or
      required=False is given.
    """
    kind = ArgumentKind.REST

    __introspectable__ = (
        "key",
        "descr",
        "short_key",
        "required",
        "default",
        "min_values",
        "validation",
        "on_parse",
        "sensitive",
        "usage_value",
        "usage_break",
    )

    def __init__(
            self,
            key,
            descr=Unset,
            /,
            *,
            short_key=Unset,
            required=Unset,
            default=Unset,
            min_values=1,
            validation=Unset,
            on_parse=Unset,
            sensitive=False,
            usage_value=Unset,
            usage_break=Unset,
    ):
        declaration = {
            "key": key,
            "descr": descr,
            "short_key": short_key,
            "required": required,
            "default": default,
            "min_values": min_values,
            "validation": validation,
            "on_parse": on_parse,
            "sensitive": sensitive,
            "usage_value": usage_value,
            "usage_break": usage_break,
        }
        metadata = dict(declaration)
        _sanitize_metadata(type(self), metadata)
        _sanitize_value_metadata(type(self), metadata)
        if not isinstance(min_values, int) or isinstance(min_values, bool):
            raise TypeError(f"{type(self).__typename__} 'min_values' must be an integer")
        if min_values < 0:
            raise ValueError(f"{type(self).__typename__} 'min_values' cannot be negative")
        metadata["required"] = bool(coalesce(required, min_values > 0))
        match default:
            case UnsetType():
                default = []
            case str():
                default = [default]
            case None:
                pass
            case Iterable():
                default = list(default)
            case _:
                raise TypeError(f"{type(self).__typename__} 'default' must be an iterable of values")
        metadata["default"] = default
        self._populate(metadata, declaration)

    def __str__(self):
        return self.usage_value


class CommandArgument(Argument):
    """
    A constrained positional argument selecting one of several commands.

    Each accepted value is registered as a CommandInstance with command(); an
    instance owns a nested Schema with the arguments specific to that command.
    While parsing, once a token matches a registered command, the working
    schema is collapsed: this argument is replaced by the instance and the
    instance's nested arguments become visible for the remaining tokens.

    Example
        >>> action = CommandArgument("action", "What to do")
        >>> copy = action.command("copy", "Copy files")
        >>> copy.schema.add_positional("source", "Source file")
        >>> action.command("list", "List files")
    """
    kind = ArgumentKind.COMMAND

    __introspectable__ = (
        "key",
        "descr",
        "short_key",
        "required",
        "default",
        "commands",
        "on_parse",
        "usage_value",
        "usage_break",
    )

    def __init__(
            self,
            key,
            descr=Unset,
            /,
            *,
            short_key=Unset,
            on_parse=Unset,
            usage_value=Unset,
            usage_break=Unset,
    ):
        declaration = {
            "key": key,
            "descr": descr,
            "short_key": short_key,
            "on_parse": on_parse,
            "usage_value": usage_value,
            "usage_break": usage_break,
        }
        metadata = dict(declaration, sensitive=False)
        _sanitize_metadata(type(self), metadata)
        _sanitize_value_metadata(type(self), metadata)
        metadata |= {"required": True, "default": None, "commands": {}}
        self._populate(metadata, declaration)

    @property
    def sensitive(self):
        return False

    @property
    def validation(self):
        """The registered command names: a matched token must be one of them."""
        return tuple(self._commands)

    def command(self, name, descr=Unset, /):
        """
        Register a new command value and return its CommandInstance.

        Parameters
        - name: str, the exact token selecting this command.
        - descr: Unset | str, short help for the command.

        Raises
        - DuplicateKeyError: when the name is already registered.
        """
        instance = CommandInstance(name, descr, parent=self)
        if self._commands.setdefault(instance.name, instance) is not instance:
            raise DuplicateKeyError(f"a command named {instance.name!r} is already defined for '{self.key}'")
        return instance

    def __getitem__(self, name):
        """Return the CommandInstance registered under name, or raise KeyError."""
        return self._commands[name]

    def __contains__(self, name):
        return name in self._commands

    def __replace__(self, *unused, **overrides):
        replacement = super().__replace__(*unused, **overrides)
        for name, instance in self._commands.items():
            replacement._commands[name] = CommandInstance(
                name,
                instance._declaration["descr"],
                parent=replacement,
                schema=instance.schema,
            )
        return replacement

    def __str__(self):
        return self.usage_value


class CommandInstance(Argument):
    """
    One command value of a CommandArgument.

    After a schema collapse the instance stands in for its parent argument: it
    shares the parent's key, resolves to its own name (then through the
    parent's on_parse, if any), and brings its nested schema's arguments along.

    Instances are created by CommandArgument.command(); they cannot be added to
    a schema directly.
    """
    kind = ArgumentKind.COMMAND

    __introspectable__ = (
        "name",
        "key",
        "descr",
        "short_key",
        "required",
        "default",
        "on_parse",
        "usage_break",
        "schema",
    )
    __displayable__ = (
        "name",
        "key",
        "descr",
        "schema",
    )

    def __init__(self, name, descr=Unset, /, *, parent, schema=Unset):
        from .schema import Schema

        if not isinstance(parent, CommandArgument):
            raise TypeError(f"{type(self).__typename__} 'parent' must be a command argument")
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        if not (name := name.strip()) or re.search(r"\s", name) or name.startswith(("-", "/")):
            raise ValueError(f"{type(self).__typename__} 'name' must be a single plain token (got {name!r})")

        declaration = {"key": parent.key, "descr": descr}
        metadata = {
            "key": parent.key,
            "descr": descr,
            "on_parse": parent.on_parse,
            "usage_break": Unset,
        }
        _sanitize_metadata(type(self), metadata)
        metadata |= {
            "name": name,
            "parent": parent,
            "schema": coalesce(schema, Schema(title=name)),
            "required": True,
            "default": None,
            "short_key": None,
            "usage_value": name,
        }
        self._populate(metadata, declaration)

    # Plain attributes rather than mirror(): the nested schema and the parent
    # are live objects, not values to copy.
    schema = property(lambda self: self._schema)
    parent = property(lambda self: self._parent)
    usage_value = property(lambda self: self._usage_value)

    @property
    def sensitive(self):
        return False

    @property
    def validation(self):
        return Unset

    def __replace__(self, *unused, **overrides):
        raise TypeError(f"{type(self).__typename__} cannot be replaced; replace its command argument instead")

    def __str__(self):
        return self.name


__all__ = (
    "ArgumentKind",
    "Argument",
    "PositionalArgument",
    "KeywordArgument",
    "FlagArgument",
    "RestArgument",
    "CommandArgument",
    "CommandInstance",
)

# The metaclass is internal; argument classes are the public surface.
del ArgumentType

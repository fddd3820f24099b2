"""
Argscope results: what a parse hands back to the host.

What this module provides
- Arguments: the resolved values of a successful parse, one field per
  argument key of the effective schema, in schema order. It is a read-only
  mapping that also allows attribute access (args.foo is args["foo"]).
- ParseResult: the outcome of one parse, successful or not.

Conventions
- A key that collides with a mapping method (e.g. "items", "keys") is still
  reachable by subscription; attribute access returns the method.
- ParseResult is truthy on success only; failures carry the faults and the
  flags telling the host what to print.

Example
    >>> result = parser.parse("-b gold Here")
    >>> if result:
    ...     print(result.arguments.foo, result.arguments.bar)
    ... else:
    ...     print(*result.errors, sep="\n")
"""
from collections.abc import Mapping

from .faults import *
from .utils import *


class Arguments(Mapping):
    """
    Ordered, read-only record of resolved argument values.

    Construction
    - Arguments(pairs): pairs is an iterable of (key, value), or a mapping.
    """
    __slots__ = ("_values",)

    def __init__(self, pairs=(), /):
        object.__setattr__(self, "_values", dict(pairs))

    def __getitem__(self, key):
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __contains__(self, key):
        return key in self._values

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(f"'arguments' record has no field {name!r}") from None

    def __setattr__(self, name, value):
        raise AttributeError("'arguments' record is read-only")

    def __delattr__(self, name):
        raise AttributeError("'arguments' record is read-only")

    def __dir__(self):
        return list(super().__dir__()) + list(self._values)

    def _asdict(self):
        """Return a plain dict copy of the record."""
        return dict(self._values)

    def __rich_repr__(self):
        yield from self._values.items()

    def __repr__(self):
        return "arguments(%s)" % ", ".join("%s=%r" % pair for pair in self._values.items())


class ParseResult:
    """
    Outcome of a single parse.

    Attributes
    - arguments: Arguments | None, set on success only.
    - faults: tuple[ParseFault, ...], structured problems (empty on success).
    - errors: list[str], the fault messages.
    - show_usage: bool, true whenever a fault was collected.
    - show_help: bool, true when help was requested.
    - schema: the effective (possibly collapsed) schema, for context-specific
      usage and help.
    - tokens: list[str], the input tokens with sensitive values masked.
    """
    __slots__ = ("arguments", "faults", "show_help", "schema", "tokens")

    def __init__(self, *, arguments=None, faults=(), show_help=False, schema=None, tokens=()):
        self.arguments = arguments
        self.faults = tuple(faults)
        self.show_help = bool(show_help)
        self.schema = schema
        self.tokens = list(tokens)

    @property
    def errors(self):
        return [str(fault) for fault in self.faults]

    @property
    def show_usage(self):
        return len(self.faults) > 0

    def __bool__(self):
        return self.arguments is not None

    def unwrap(self, **options):
        """
        Return the Arguments record, or surface the failure.

        Behavior
        - success: the record is returned.
        - help requested: a HelpRequest is triggered (in shell mode the help
          screen is printed and the process exits with status 0).
        - faults: a ParseExit grouping them is triggered (in shell mode the
          faults and the usage line are printed and the process exits with
          status 1).

        Options are forwarded to trigger(): shell, fancy, colorful, prog, width.
        """
        if self:
            return self.arguments
        if self.show_help:
            trigger(HelpRequest(self.schema), **options)
        trigger(ParseExit(self.faults, schema=self.schema), **options)

    def __rich_repr__(self):
        if self:
            yield "arguments", self.arguments
        else:
            yield "errors", self.errors
            yield "show_usage", self.show_usage
            yield "show_help", self.show_help
        yield "tokens", self.tokens

    def __repr__(self):
        return "parse-result(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = (
    "Arguments",
    "ParseResult",
)

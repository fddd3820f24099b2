"""
Argscope registry: reusable, predefined argument declarations.

A Registry is a host-owned table of arguments declared once and reused by
several schemas (e.g. a shared '--log-level' or '--verbose'). Schemas never
share the registered objects themselves: Schema.add_predefined() adds a copy
built with copy.replace(), optionally with overrides.

Example
    >>> registry = Registry()
    >>> registry.register(FlagArgument("verbose", "Print more output", short_key="v"))
    >>> schema.add_predefined("verbose", registry)
    >>> other.add_predefined("v", registry, short_key="V")
"""
from .arguments import *
from .faults import *
from .utils import *


class Registry:
    """
    Mapping of key → Argument, with lookups by key or short key.

    Raises
    - DuplicateKeyError: register() with a key or short key already present.
    - NoSuchArgumentError: lookup of an unknown key.
    """

    def __init__(self, arguments=(), /):
        self._arguments = {}
        self._short_keys = {}
        for argument in arguments:
            self.register(argument)

    def register(self, argument, /):
        """Register an argument declaration and return it."""
        if not isinstance(argument, Argument) or isinstance(argument, CommandInstance):
            raise InvalidArgumentTypeError("only argument declarations can be registered")
        if argument.key in self._arguments:
            raise DuplicateKeyError(f"an argument with key '{argument.key}' is already registered")
        if argument.short_key and argument.short_key in self._short_keys:
            raise DuplicateKeyError(f"an argument with short key '{argument.short_key}' is already registered")
        self._arguments[argument.key] = argument
        if argument.short_key:
            self._short_keys[argument.short_key] = argument
        return argument

    def __getitem__(self, key):
        if not isinstance(key, str):
            raise TypeError("registry key must be a string")
        if (token := key.strip().lstrip("-")) in self._short_keys and len(token) == 1:
            return self._short_keys[token]
        try:
            return self._arguments[normalize(key)]
        except KeyError:
            raise NoSuchArgumentError(f"no predefined argument registered for key '{key}'", key=key) from None

    def __contains__(self, key):
        try:
            self[key]
        except (NoSuchArgumentError, TypeError):
            return False
        return True

    def __iter__(self):
        return iter(self._arguments.values())

    def __len__(self):
        return len(self._arguments)

    def __repr__(self):
        return f"registry({list(self._arguments)!r})"


__all__ = (
    "Registry",
)

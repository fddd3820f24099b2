"""
Argscope schema: the ordered, key-indexed collection of accepted arguments.

What this module provides
- Schema: holds the arguments a program accepts, in declaration order, indexed
  by key and by short key, plus the cross-argument requirement sets
  ("exactly one of", "at least one of").

Core ideas
- Declared once, read many times: a schema is built at startup and is treated
  as read-only afterwards. Parsing never mutates it; when a command value is
  matched, collapse() returns a new schema with the command's nested arguments
  merged in, so repeated or concurrent parses stay independent.
- Closed set of kinds: add() only accepts the five argument kinds.
- Grouping views (positional_args(), keyword_args(), ...) are computed from
  the insertion order on every call, so they always reflect the current scope.

Quick start
    from argscope import Schema

    schema = Schema(title="Fubar", purpose="Process some files")
    schema.add_positional("foo", "Foo arg")
    schema.add_keyword("bar", "Bar arg", short_key="b")
    schema.add_flag("baz", "Baz arg", short_key="z")
    schema.add_rest("files", "Files to process", required=False)
    schema.require_one_of("bar", "baz")
"""
import copy
import difflib
import itertools

from rich.text import Text

from .arguments import *
from .faults import *
from .utils import *


class Schema:
    """
    Ordered collection of Argument objects forming one scope.

    Invariants
    - No two arguments share a key; no two share a short key.
    - At most one rest argument.
    - Only PositionalArgument, KeywordArgument, FlagArgument, RestArgument and
      CommandArgument objects can be added (command instances enter a schema
      only through collapse()).

    Attributes
    - title: str | None, heading of the help screen.
    - purpose: str | None, one paragraph describing the program.
    """

    def __init__(self, title=Unset, purpose=Unset):
        if not isinstance(title, str | Text | Unset):
            raise TypeError("schema 'title' must be a string")
        if not isinstance(purpose, str | Text | Unset):
            raise TypeError("schema 'purpose' must be a string")
        self.title = coalesce(title)
        self.purpose = coalesce(purpose)
        self._arguments = {}
        self._short_keys = {}
        self._requirements = []

    # --- construction ---

    def add(self, argument, /):
        """
        Add an argument to this scope and return it.

        Raises
        - InvalidArgumentTypeError: argument is not one of the five kinds.
        - DuplicateKeyError: key or short key already used in this scope.
        - TooManyRestArgumentsError: a rest argument already exists.
        """
        if not isinstance(argument, Argument) or isinstance(argument, CommandInstance) or \
                argument.kind not in ArgumentKind:
            raise InvalidArgumentTypeError(
                "argument must be a positional, keyword, flag, rest or command argument (got %r)" % type(argument).__name__
            )
        if argument.key in self._arguments:
            raise DuplicateKeyError(f"an argument with key '{argument.key}' has already been defined")
        if argument.short_key and argument.short_key in self._short_keys:
            raise DuplicateKeyError(f"an argument with short key '{argument.short_key}' has already been defined")
        if argument.kind is ArgumentKind.REST and self.rest_arg() is not None:
            raise TooManyRestArgumentsError(
                f"only one rest argument can be defined ('{self.rest_arg().key}' already is)"
            )
        self._insert(argument)
        return argument

    def _insert(self, argument):
        # No collision checks here: used by add() after checking, and by collapse().
        self._arguments[argument.key] = argument
        if argument.short_key:
            self._short_keys[argument.short_key] = argument

    def add_positional(self, key, descr=Unset, /, **options):
        """Declare and add a PositionalArgument; see its constructor for options."""
        return self.add(PositionalArgument(key, descr, **options))

    def add_keyword(self, key, descr=Unset, /, **options):
        """Declare and add a KeywordArgument; see its constructor for options."""
        return self.add(KeywordArgument(key, descr, **options))

    def add_flag(self, key, descr=Unset, /, **options):
        """Declare and add a FlagArgument; see its constructor for options."""
        return self.add(FlagArgument(key, descr, **options))

    def add_rest(self, key, descr=Unset, /, **options):
        """Declare and add the RestArgument of this scope; see its constructor for options."""
        return self.add(RestArgument(key, descr, **options))

    def add_command(self, key, descr=Unset, /, **options):
        """
        Declare and add a CommandArgument.

        The returned argument is used to register the command values:
            action = schema.add_command("action", "What to do")
            action.command("list", "List the files")
        """
        return self.add(CommandArgument(key, descr, **options))

    def add_predefined(self, key, registry, /, **overrides):
        """
        Add a copy of an argument registered in a Registry.

        Parameters
        - key: the key (or short key) under which the argument is registered.
        - registry: argscope.registry.Registry.
        - overrides: declaration options replaced in the copy (e.g. required=True).
        """
        return self.add(copy.replace(registry[key], **overrides))

    def require_one_of(self, *keys):
        """
        Require exactly one of the given arguments to have a truthy value.

        The arguments themselves stay optional; the set is checked after all
        values are resolved.

        Raises
        - NoSuchArgumentError: for an unknown key.
        """
        self._requirements.append(("one", self._requirement_set(keys)))

    def require_any_of(self, *keys):
        """
        Require at least one of the given arguments to have a truthy value.

        Raises
        - NoSuchArgumentError: for an unknown key.
        """
        self._requirements.append(("any", self._requirement_set(keys)))

    def _requirement_set(self, keys):
        if len(keys) < 2:
            raise ValueError("a requirement set needs at least two argument keys")
        return tuple(self.lookup(key) for key in keys)

    # --- lookup ---

    def lookup(self, key, /, *, short=Unset):
        """
        Return the argument for a key or short key.

        Lookup rules
        - short=True: the (single-character) short key is tried first, then the key.
        - short=False: only the normalized key is tried.
        - short=Unset: single characters (after stripping dashes) behave like
          short=True; anything longer like short=False.

        Short keys are case-sensitive; keys are normalized (see normalize()).

        Raises
        - NoSuchArgumentError: no argument matches; suggestions are attached.
        """
        if not isinstance(key, str):
            raise TypeError("schema lookup key must be a string")
        token = key.strip().lstrip("-")
        if coalesce(short, len(token) == 1) and token in self._short_keys:
            return self._short_keys[token]
        try:
            return self._arguments[normalize(key)]
        except KeyError:
            pass

        names = ["--" + argument.dashed for argument in self._arguments.values()]
        names += ["-" + short_key for short_key in self._short_keys]
        suggestions = difflib.get_close_matches("--" + normalize(key).replace("_", "-"), names, 3)
        raise NoSuchArgumentError(f"no argument defined for key '{key}'", key=key, suggestions=suggestions)

    __getitem__ = lookup

    def __contains__(self, key):
        try:
            self.lookup(key)
        except (NoSuchArgumentError, TypeError):
            return False
        return True

    def __iter__(self):
        return iter(self._arguments.values())

    def __len__(self):
        return len(self._arguments)

    # --- views (insertion order) ---

    def _select(self, *kinds):
        return [argument for argument in self._arguments.values() if argument.kind in kinds]

    def args(self):
        """All arguments."""
        return list(self._arguments.values())

    def positional_args(self):
        """The positional slots: positional and command arguments."""
        return self._select(ArgumentKind.POSITIONAL, ArgumentKind.COMMAND)

    def keyword_args(self):
        return self._select(ArgumentKind.KEYWORD)

    def flag_args(self):
        return self._select(ArgumentKind.FLAG)

    def rest_arg(self):
        """The rest argument of this scope, or None."""
        return next(iter(self._select(ArgumentKind.REST)), None)

    def command_args(self):
        return self._select(ArgumentKind.COMMAND)

    def non_positional_args(self):
        """The options: keyword and flag arguments."""
        return self._select(ArgumentKind.KEYWORD, ArgumentKind.FLAG)

    def value_args(self):
        """Every argument that carries a value (all but flags)."""
        return [argument for argument in self._arguments.values() if argument.value_bearing]

    @property
    def requirements(self):
        """Registered requirement sets as (mode, arguments) pairs, mode being 'one' or 'any'."""
        return tuple(self._requirements)

    @property
    def requires_some(self):
        """True if at least one requirement set is registered."""
        return len(self._requirements) > 0

    # --- collapse ---

    def collapse(self, instance, /):
        """
        Return a new schema with a matched command merged in.

        The instance's command argument is replaced by the instance itself, and
        the arguments of the instance's nested schema are inserted right after
        it, in order. Requirement sets of both scopes are carried over. Nested
        scopes are assumed disjoint from this one: collisions are not checked.

        This schema is left untouched.

        Raises
        - ValueError: the instance's command argument is not part of this schema.
        """
        if not isinstance(instance, CommandInstance):
            raise TypeError("collapse() argument must be a command instance")
        if self._arguments.get(instance.key) is not instance.parent:
            raise ValueError(f"command '{instance.name}' does not belong to this schema")

        collapsed = Schema()
        collapsed.title, collapsed.purpose = self.title, self.purpose
        for argument in self._arguments.values():
            if argument is instance.parent:
                for nested in itertools.chain([instance], instance.schema):
                    collapsed._insert(nested)
            else:
                collapsed._insert(argument)
        collapsed._requirements = self._requirements + instance.schema._requirements
        return collapsed

    # --- requirements ---

    def validate_requirements(self, result, /):
        """
        Check every requirement set against resolved values.

        Parameters
        - result: Mapping[str, Any], argument key → resolved value.

        Returns
        - list[RequirementError]: one fault per unsatisfied set (empty if all pass).
        """
        faults = []
        for mode, arguments in self._requirements:
            count = sum(1 for argument in arguments if result.get(argument.key))
            names = ", ".join(map(str, arguments))
            match mode:
                case "one" if count == 0:
                    faults.append(RequirementError(
                        f"no argument has been specified for one of: {names}",
                        title="missing one of",
                        code=FaultCode.ONE_OF_MISSING,
                        hint=f"specify exactly one of {names}",
                        arguments=arguments,
                    ))
                case "one" if count > 1:
                    faults.append(RequirementError(
                        f"only one argument can be specified from: {names}",
                        title="conflicting arguments",
                        code=FaultCode.ONE_OF_CONFLICT,
                        hint=f"keep only one of {names}",
                        arguments=arguments,
                    ))
                case "any" if count == 0:
                    faults.append(RequirementError(
                        f"at least one of the arguments must be specified from: {names}",
                        title="missing any of",
                        code=FaultCode.ANY_OF_MISSING,
                        hint=f"specify one or more of {names}",
                        arguments=arguments,
                    ))
        return faults

    # --- representation ---

    def __rich_repr__(self):
        yield "title", self.title
        yield "arguments", list(self._arguments)

    def __repr__(self):
        return f"schema(title={self.title!r}, arguments={list(self._arguments)!r})"


__all__ = (
    "Schema",
)

"""
Argscope faults (schema errors, parse faults) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing parse
  problem. Codes are grouped by domain to keep logs and searches predictable.
- SchemaError and subclasses: declaration-time (programmer) errors. They are
  raised immediately while a schema is being built.
- ParseFault and subclasses: per-parse problems. The parser collects them into
  a ParseResult instead of raising them; each one carries a message and
  read-only options (code, title, hint, argument, ...).
- ParseExit: an exception group bundling the faults of a failed parse, raised
  (or rendered and exited, in shell mode) by ParseResult.unwrap().
- HelpRequest: raised (or rendered, in shell mode) when help was requested.
- trigger(): central entry point to surface any fault with runtime options.

Rendering
- Faults know how to render themselves with rich (__rich__). Hosts may tune
  the palette with a __styles__ mapping, the program name with __prog__, and
  the code labels with a __codes__ mapping, all looked up in __main__.
"""
import copy
import os
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - tokenization (111xx)
      • UNKNOWN_ARGUMENT, MISPLACED_TERMINATOR, INVALID_NEGATION
    - arity (112xx)
      • MISSING_VALUE, MISSING_REQUIRED, TOO_MANY_POSITIONALS,
        UNEXPECTED_REST_VALUES, NOT_ENOUGH_VALUES
    - values (113xx)
      • INVALID_VALUE, VALIDATION_HANDLER, PARSE_HANDLER
    - requirement sets (114xx)
      • ONE_OF_MISSING, ONE_OF_CONFLICT, ANY_OF_MISSING
    """
    # --- tokenization (111xx) ---
    UNKNOWN_ARGUMENT            = 11101
    MISPLACED_TERMINATOR        = 11102
    INVALID_NEGATION            = 11103

    # --- arity (112xx) ---
    MISSING_VALUE               = 11201
    MISSING_REQUIRED            = 11202
    TOO_MANY_POSITIONALS        = 11203
    UNEXPECTED_REST_VALUES      = 11204
    NOT_ENOUGH_VALUES           = 11205

    # --- values (113xx) ---
    INVALID_VALUE               = 11301
    VALIDATION_HANDLER          = 11302
    PARSE_HANDLER               = 11303

    # --- requirement sets (114xx) ---
    ONE_OF_MISSING              = 11401
    ONE_OF_CONFLICT             = 11402
    ANY_OF_MISSING              = 11403

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(sys.modules.get("__main__"), "__codes__", {}).get(self, self.value))


# --- declaration-time errors ---

class SchemaError(Exception):
    """Base class of errors raised while declaring a schema."""


class DuplicateKeyError(SchemaError, ValueError):
    """An argument key or short key is already used in the same scope."""


class TooManyRestArgumentsError(SchemaError, ValueError):
    """A second rest argument was added to a scope."""


class InvalidArgumentTypeError(SchemaError, TypeError):
    """Something other than one of the five argument kinds was added to a schema."""


class NoSuchArgumentError(SchemaError, LookupError):
    """
    No argument is declared for a key or short key.

    Raised by Schema.lookup(). During a parse the parser catches it, aborts the
    parse and reports it as a single UnknownArgumentError fault.
    """

    def __init__(self, message, /, *, key=Unset, suggestions=()):
        super().__init__(message)
        self.key = key
        self.suggestions = tuple(suggestions)

    def __str__(self):
        return self.args[0]


# --- parse-time faults ---

def _styled(options, defaults):
    main = sys.modules.get("__main__")
    styles = defaultdict(str, defaults | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if options.get("colorful", True) else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not options.get("colorful", True):
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    return styler, text


def _prog(options):
    main = sys.modules.get("__main__")
    return getattr(main, "__prog__", options.get("prog") or os.path.basename(sys.argv[0]) or "argscope")


class ParseFault(Exception):
    """
    A problem found while parsing one token stream.

    Attributes
    - message: str, the one-line human-readable description.
    - options: read-only mapping with at least `code` (FaultCode) and `title`;
      usually `hint` and `argument` too, plus any context the reporter adds.

    str(fault) is the message, so a list of faults converts directly into the
    list of error strings exposed by ParseResult.errors.
    """

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r})"

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        styler, text = _styled(self.options, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

        header = Text.assemble(
            "[ ",
            text(_prog(self.options), styler("prog-name")),
            " — ",
            text(self.code.normalize() if self.code else "?", styler("code")),
            " | ",
            text(str(self.options.get("title", "error")).title(), styler("error-title")),
            " ]"
        )
        renders = [header, text(self.message, styler("error-message"))]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if self.options.get("fancy", False):
            return Panel(Group(*renders[1:]), title=header, title_align="left")
        return Group(*renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownArgumentError(ParseFault): ...
class MisplacedTerminatorError(ParseFault): ...
class InvalidNegationError(ParseFault): ...
class MissingValueError(ParseFault): ...
class TooManyPositionalsError(ParseFault): ...
class UnexpectedRestValuesError(ParseFault): ...
class NotEnoughValuesError(ParseFault): ...
class InvalidValueError(ParseFault): ...
class HandlerError(ParseFault): ...
class RequirementError(ParseFault): ...


class ParseExit(ExceptionGroup):
    """
    Bundle of the faults of one failed parse.

    Outside shell mode it is raised like any exception group (so callers can
    use `except* InvalidValueError:`); in shell mode it is printed to stderr
    and the process exits with status 1.
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad arguments", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad arguments", tuple(exceptions))
        self.options = MappingProxyType(options)

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        styler, text = _styled(self.options, {
            "prog-name": "bold #E6E6F0",
            "title": "bold #FF4DA6",
        })
        header = Text.assemble("[ ", text(_prog(self.options), styler("prog-name")), " — ",
                               text(self.message.title(), styler("title")), " ]")
        renders = [copy.replace(exception, **{**self.options, "fancy": False}) for exception in self.exceptions]
        if (schema := self.options.get("schema")) is not None:
            from .usage import render_usage
            renders.append(Text(""))
            renders.append(render_usage(schema, **_presentation(self.options, "prog", "colorful", "width")))
        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


class HelpRequest(Exception):
    """
    The user asked for help ('--help', '-?', '/?' or a leading 'help').

    Outside shell mode it is raised; in shell mode the help screen of the
    schema is printed to stdout and the process exits with status 0.
    """

    def __init__(self, schema, /, **options):
        super().__init__("help requested")
        self.schema = schema
        self.options = MappingProxyType(options)

    def __rich__(self):
        from .usage import render_help
        return render_help(self.schema, **_presentation(self.options, "prog", "colorful", "fancy", "width"))

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        Console().print(self)
        sys.exit(0)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.schema, **{**self.options, **overrides})


def _presentation(options, *names):
    return {name: options[name] for name in names if name in options}


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ParseFault/ParseExit).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode the fault is rendered on stderr and the process exits;
      otherwise it is raised.

    typical options
    - shell, fancy, colorful, prog.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "SchemaError",
    "DuplicateKeyError",
    "TooManyRestArgumentsError",
    "InvalidArgumentTypeError",
    "NoSuchArgumentError",
    "ParseFault",
    "UnknownArgumentError",
    "MisplacedTerminatorError",
    "InvalidNegationError",
    "MissingValueError",
    "TooManyPositionalsError",
    "UnexpectedRestValuesError",
    "NotEnoughValuesError",
    "InvalidValueError",
    "HandlerError",
    "RequirementError",
    "ParseExit",
    "HelpRequest",
    "trigger",
)

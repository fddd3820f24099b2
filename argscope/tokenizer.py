"""
Argscope tokenizer: classify raw command-line tokens into value buckets.

What this module provides
- Classifier: scans a token list once, left to right, against a schema and
  sorts every value into one of three buckets:
    • positional values, in order of appearance, as (slot, value) pairs
      naming the argument (or matched command) each value went to; the slot
      is None for values past the last positional argument;
    • keyword values, a mapping argument → raw value (None when a key was given
      without a value; last write wins);
    • rest values, in order of appearance.

Token forms
- help requests: '/?', '-?', '--help', and 'help' as the very first token.
- '--': end of options, every remaining token is a rest value.
- short keys: '-x', clusters '-xyz' (letters and digits), and '/x'.
- long keys: '--key' and '/key', with an optional 'no-', 'non-' or 'not-'
  negation prefix ('--no-verbose').
- anything else is a plain value.

Core ideas
- One pending slot: a non-flag key opens a slot that the next plain value
  fills. A later key or help token closes it with None, as does the end
  of the tokens.
- Working schema: the classifier keeps its own schema reference. When a
  command value is matched the reference is replaced by schema.collapse(...),
  so later lookups see the command's nested arguments. The schema the
  classifier was created with is never modified.
- Echo: `tokens` holds a copy of the input where values of sensitive
  arguments are replaced by '******'; logging only ever sees that copy.

Errors
- An unknown key raises NoSuchArgumentError and aborts classification.
- A misplaced '--' and a negated key of the wrong kind are collected in
  `faults` and classification continues.
"""
import logging
import re

from .arguments import *
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)

MASK = "******"

_SHORT = re.compile(r"-([A-Za-z0-9]+)|/([A-Za-z0-9])")
_LONG = re.compile(r"(?:--|/)(?:(no[nt]?)-)?([^\W\d_][\w-]*)")


class Classifier:
    """
    Single-use token classifier bound to a schema.

    Attributes
    - schema: the working schema; replaced by a collapsed copy whenever a
      command value is matched.
    - show_help: bool, set when a help token was seen.
    - faults: list of ParseFault collected while scanning.
    - tokens: the echoed token list (sensitive values masked).

    Example
        >>> classifier = Classifier(schema)
        >>> positional, keywords, rest = classifier.classify(["-b", "gold", "Here"])
    """

    def __init__(self, schema):
        self.schema = schema
        self.show_help = False
        self.faults = []
        self.tokens = []

    def classify(self, tokens, /):
        """
        Classify tokens into (positional_values, keyword_values, rest_values).

        A help token closes any pending slot, like every other key form.

        Raises
        - NoSuchArgumentError: a key does not match any argument of the
          working schema.
        """
        tokens = list(tokens)
        self.tokens = list(tokens)
        self._positional = []
        self._keywords = {}
        self._rest = []
        self._queue = self.schema.positional_args()
        self._pending = None

        for index, token in enumerate(tokens):
            if index == 0 and token.lower() == "help" or token in ("/?", "-?", "--help"):
                logger.debug("help requested by %r", token)
                self._close()
                self.show_help = True
            elif token == "--":
                self._close()
                if self._rest:
                    self.faults.append(MisplacedTerminatorError(
                        "too many positional arguments supplied before -- token",
                        title="misplaced terminator",
                        code=FaultCode.MISPLACED_TERMINATOR,
                        hint="move the values before '--' after it, or drop them",
                    ))
                for offset, value in enumerate(tokens[index + 1:], index + 1):
                    self._store_rest(offset, value)
                break
            elif match := _SHORT.fullmatch(token):
                for character in match[1] or match[2]:
                    self._close()
                    self._keyed(self.schema.lookup(character, short=True), token)
            elif match := _LONG.fullmatch(token):
                self._close()
                self._long(match, token)
            else:
                self._plain(index, token)

        self._close()
        logger.debug(
            "classified %r: positional=%d keywords=%d rest=%d",
            self.tokens, len(self._positional), len(self._keywords), len(self._rest),
        )
        return self._positional, self._keywords, self._rest

    # --- keys ---

    def _long(self, match, token):
        prefix, name = match[1], match[2]
        if prefix:
            # A declared key such as 'no-cache' wins over negating 'cache'.
            try:
                argument = self.schema.lookup(f"{prefix}-{name}", short=False)
            except NoSuchArgumentError:
                argument = self.schema.lookup(name, short=False)
            else:
                prefix = None
        else:
            argument = self.schema.lookup(name, short=False)

        if not prefix:
            self._keyed(argument, token)
            return

        match argument.kind:
            case ArgumentKind.FLAG | ArgumentKind.KEYWORD:
                logger.debug("%r negates %s", token, argument.key)
                self._keywords[argument] = False
            case ArgumentKind.POSITIONAL | ArgumentKind.REST | ArgumentKind.COMMAND:
                self.faults.append(InvalidNegationError(
                    f"the argument '{argument.key}' cannot be negated with {token!r}",
                    title="invalid negation",
                    code=FaultCode.INVALID_NEGATION,
                    hint="only flag and keyword arguments accept a 'no-' prefix",
                    argument=argument,
                ))
            case kind:
                raise AssertionError(f"unhandled argument kind {kind!r}")

    def _keyed(self, argument, token):
        match argument.kind:
            case ArgumentKind.FLAG:
                logger.debug("%r sets %s", token, argument.key)
                self._keywords[argument] = True
            case ArgumentKind.KEYWORD | ArgumentKind.REST:
                self._pending = argument
            case ArgumentKind.POSITIONAL | ArgumentKind.COMMAND:
                # Given by key: its positional slot is no longer available.
                if argument in self._queue:
                    self._queue.remove(argument)
                self._pending = argument
            case kind:
                raise AssertionError(f"unhandled argument kind {kind!r}")

    def _close(self):
        if self._pending is not None:
            logger.debug("no value given for %s", self._pending.key)
            self._keywords[self._pending] = None
            self._pending = None

    # --- values ---

    def _plain(self, index, token):
        if (argument := self._pending) is not None:
            self._pending = None
            self._mask(index, argument)
            match argument.kind:
                case ArgumentKind.KEYWORD | ArgumentKind.POSITIONAL:
                    self._keywords[argument] = token
                case ArgumentKind.REST:
                    self._rest.append(token)
                case ArgumentKind.COMMAND:
                    self._keywords[self._command(argument, token)] = token
                case kind:
                    raise AssertionError(f"unhandled argument kind {kind!r}")
        elif self._queue:
            argument = self._queue.pop(0)
            self._mask(index, argument)
            if argument.kind is ArgumentKind.COMMAND:
                argument = self._command(argument, token)
            self._positional.append((argument, token))
        elif self.schema.rest_arg() is not None:
            self._store_rest(index, token)
        else:
            # Overflow: left for the resolver to report.
            self._positional.append((None, token))

    def _store_rest(self, index, token):
        if (argument := self.schema.rest_arg()) is not None:
            self._mask(index, argument)
        self._rest.append(token)

    def _command(self, argument, token):
        """Collapse the working schema when token names a command; return the slot owner."""
        if not isinstance(argument, CommandArgument) or token not in argument:
            return argument
        instance = argument[token]
        logger.debug("command %r selected for %s", instance.name, argument.key)
        self.schema = self.schema.collapse(instance)
        self._queue[:0] = instance.schema.positional_args()
        return instance

    def _mask(self, index, argument):
        if argument.sensitive:
            self.tokens[index] = MASK


__all__ = (
    "Classifier",
)

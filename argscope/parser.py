"""
Argscope parser: the entry point turning tokens into a ParseResult.

What this module provides
- Parser: binds a declared schema; every parse() call classifies and resolves
  one token stream with fresh Classifier/Resolver objects.
- parse(schema, tokens): one-shot convenience wrapper.

Token sources
- Unset (default): sys.argv[1:].
- str: split with shell quoting rules ('copy "My Documents" dest').
- any other iterable of str: used as-is.
- None: no tokens.

Outcome
- Faults are never raised by parse(): they are collected in the returned
  ParseResult. An unknown key aborts the parse with a single fault; a help
  request skips resolution entirely.

Example
    >>> from argscope import Schema, Parser
    >>> schema = Schema()
    >>> schema.add_positional("foo", "Foo arg")
    >>> Parser(schema).parse(["value"]).arguments.foo
    'value'
"""
import logging
import sys
from collections.abc import Iterable

from .faults import *
from .resolver import Resolver
from .results import ParseResult
from .schema import Schema
from .tokenizer import Classifier
from .utils import *

logger = logging.getLogger(__name__)


class Parser:
    """
    Parser bound to one declared schema.

    The schema is only read: command collapses happen on per-parse copies, so
    one Parser can be reused for any number of parses.
    """

    def __init__(self, schema):
        if not isinstance(schema, Schema):
            raise TypeError("parser 'schema' must be a Schema")
        self.schema = schema

    def parse(self, tokens=Unset, /):
        """
        Parse a token stream against the schema.

        Returns
        - ParseResult: truthy with `arguments` on success; otherwise carrying
          `errors`/`faults`, `show_usage` and `show_help`.

        Raises
        - TypeError: tokens is not a string or an iterable of strings.
        - ValueError: a single string has unbalanced quotes.
        """
        tokens = _tokenize(tokens)
        classifier = Classifier(self.schema)
        try:
            positional, keywords, rest = classifier.classify(tokens)
        except NoSuchArgumentError as error:
            logger.debug("parse aborted: %s", error)
            hint = None
            if error.suggestions:
                hint = "did you mean %s?" % " or ".join(map(repr, error.suggestions))
            return ParseResult(
                faults=[UnknownArgumentError(
                    str(error),
                    title="unknown argument",
                    code=FaultCode.UNKNOWN_ARGUMENT,
                    hint=hint,
                    key=error.key,
                )],
                show_help=classifier.show_help,
                schema=classifier.schema,
                tokens=classifier.tokens,
            )

        if classifier.show_help:
            return ParseResult(show_help=True, schema=classifier.schema, tokens=classifier.tokens)

        resolver = Resolver(classifier.schema)
        arguments = resolver.resolve(positional, keywords, rest)
        faults = classifier.faults + resolver.faults
        if faults:
            return ParseResult(faults=faults, schema=classifier.schema, tokens=classifier.tokens)
        return ParseResult(arguments=arguments, schema=classifier.schema, tokens=classifier.tokens)


def _tokenize(tokens):
    match tokens:
        case UnsetType():
            return sys.argv[1:]
        case None:
            return []
        case str():
            return split(tokens)
        case Iterable():
            tokens = list(tokens)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("parse() tokens must be strings")
            return tokens
        case _:
            raise TypeError("parse() argument must be a string or an iterable of strings")


def parse(schema, tokens=Unset, /):
    """
    Parse tokens against schema; shorthand for Parser(schema).parse(tokens).
    """
    return Parser(schema).parse(tokens)


__all__ = (
    "Parser",
    "parse",
)

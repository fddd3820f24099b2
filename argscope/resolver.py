"""
Argscope resolver: turn classified raw values into a typed result record.

What this module provides
- Resolver: consumes the three buckets produced by the Classifier
  (positional values, keyword values, rest values) against the working
  schema, and produces an Arguments record or a list of faults.

Resolution order
1. Positional values, each into the slot the classifier assigned it. A slot
   whose argument was also given by key keeps the keyed value instead.
   Values without a slot go in front of the rest values when a rest
   argument exists; otherwise they are reported once.
2. Keyword values.
3. Rest values, as a single list (at least min_values of them).
4. Defaults for every argument still missing from the result.
5. Requirement sets of the schema.

Value resolution
- None for a keyword uses its value_optional sentinel, or is an error.
- None for any other value-bearing kind is an error.
- Validation and the on_parse transform run for every value except None and
  False; lists are validated element-wise (predicates get the whole list).
- Exceptions raised by validation predicates or on_parse transforms are
  turned into faults naming the argument; they never escape.
- An argument that fails is left out of the result and is not defaulted.
"""
import logging
import re
from types import MappingProxyType

from .arguments import *
from .faults import *
from .results import Arguments
from .tokenizer import MASK
from .utils import *

logger = logging.getLogger(__name__)


class Resolver:
    """
    Single-use resolver bound to a (possibly collapsed) schema.

    Attributes
    - schema: the schema values are resolved against.
    - faults: list of ParseFault collected during resolve().
    """

    def __init__(self, schema):
        self.schema = schema
        self.faults = []

    def resolve(self, positional, keywords, rest, /):
        """
        Resolve classified values.

        Parameters
        - positional: list[tuple[Argument | None, str]], (slot, value) pairs
          in order; the slot is None for values past the last slot.
        - keywords: Mapping[Argument, str | bool | None], keyed values.
        - rest: list[str], rest values in order.

        Returns
        - Arguments when no fault was collected, else None (see `faults`).
        """
        result = {}
        self._failed = set()
        keyed = {argument.key for argument in keywords}

        # 1. positional slots
        overflow = []
        for argument, value in positional:
            if argument is None:
                overflow.append(value)
            elif argument.key not in keyed:
                self._process(argument, value, result)
            else:
                # Filled by position, then given again by key: the key wins.
                logger.debug("positional value for %s overridden by key", argument.key)
        if overflow:
            if self.schema.rest_arg() is not None:
                rest = overflow + list(rest)
            else:
                defined = len(self.schema.positional_args())
                self.faults.append(TooManyPositionalsError(
                    "%s %s supplied, but only %d %s defined" % (
                        quantify(len(positional), "positional argument"),
                        "was" if len(positional) == 1 else "were",
                        defined,
                        "is" if defined == 1 else "are",
                    ),
                    title="too many arguments",
                    code=FaultCode.TOO_MANY_POSITIONALS,
                    hint="quote values that contain spaces",
                ))

        # 2. keyword values
        for argument, value in keywords.items():
            self._process(argument, value, result)

        # 3. rest values
        if rest:
            if (argument := self.schema.rest_arg()) is None:
                self.faults.append(UnexpectedRestValuesError(
                    "%s %s supplied (%s), but no rest argument is defined" % (
                        quantify(len(rest), "rest value"),
                        "was" if len(rest) == 1 else "were",
                        ", ".join(rest),
                    ),
                    title="unexpected values",
                    code=FaultCode.UNEXPECTED_REST_VALUES,
                ))
            elif argument.key not in self._failed:
                self._process(argument, list(rest), result)

        # 4. defaults
        for argument in self.schema:
            if argument.key not in result and argument.key not in self._failed:
                self._default(argument, result)

        # 5. requirement sets
        self.faults.extend(self.schema.validate_requirements(result))

        if self.faults:
            logger.debug("resolution failed with %d fault(s)", len(self.faults))
            return None
        return Arguments((argument.key, result[argument.key]) for argument in self.schema)

    # --- single values ---

    def _process(self, argument, value, result):
        match argument.kind:
            case ArgumentKind.FLAG:
                pass
            case ArgumentKind.KEYWORD if value is None:
                if not argument.accepts_no_value:
                    return self._fail(MissingValueError(
                        f"no value was specified for keyword argument '{argument}'",
                        title="missing value",
                        code=FaultCode.MISSING_VALUE,
                        hint=f"use '{argument} {argument.usage_value}'",
                        argument=argument,
                    ))
                value = argument.value_optional
            case ArgumentKind.KEYWORD:
                pass
            case ArgumentKind.POSITIONAL | ArgumentKind.REST | ArgumentKind.COMMAND if value is None:
                return self._fail(MissingValueError(
                    f"no value was specified for argument '{argument}'",
                    title="missing value",
                    code=FaultCode.MISSING_VALUE,
                    argument=argument,
                ))
            case ArgumentKind.REST if len(value) < argument.min_values:
                return self._fail(NotEnoughValuesError(
                    "at least %s must be supplied for argument '%s' (got %d)" % (
                        quantify(argument.min_values, "value"), argument, len(value),
                    ),
                    title="not enough values",
                    code=FaultCode.NOT_ENOUGH_VALUES,
                    argument=argument,
                ))
            case ArgumentKind.POSITIONAL | ArgumentKind.REST | ArgumentKind.COMMAND:
                pass
            case kind:
                raise AssertionError(f"unhandled argument kind {kind!r}")

        if value is not None and value is not False:
            if not self._validate(argument, value, result):
                return
            if argument.on_parse is not Unset:
                try:
                    value = argument.on_parse(value, argument, MappingProxyType(result))
                except Exception as exception:
                    return self._fail(HandlerError(
                        f"an error occurred in the on_parse handler for argument '{argument.key}': {exception}",
                        title="transform failed",
                        code=FaultCode.PARSE_HANDLER,
                        argument=argument,
                        exception=exception,
                    ))

        logger.debug("resolved %s = %r", argument.key, MASK if argument.sensitive else value)
        result[argument.key] = value

    def _validate(self, argument, value, result):
        validation = argument.validation
        values = value if isinstance(value, list) else [value]
        match validation:
            case UnsetType():
                return True
            case re.Pattern():
                invalid = [item for item in values if not validation.search(str(item))]
            case tuple() | frozenset():
                invalid = [item for item in values if item not in validation]
            case _:
                try:
                    valid = validation(value, argument, MappingProxyType(result))
                except Exception as exception:
                    self._fail(HandlerError(
                        f"an error occurred in the validation handler for argument '{argument.key}': {exception}",
                        title="validation failed",
                        code=FaultCode.VALIDATION_HANDLER,
                        argument=argument,
                        exception=exception,
                    ))
                    return False
                invalid = [] if valid else [value]

        if not invalid:
            return True

        shown = MASK if argument.sensitive else invalid[0]
        hint = Unset
        if isinstance(validation, tuple | frozenset) and not argument.sensitive:
            hint = "expected one of: " + ", ".join(map(str, validation))
        self._fail(InvalidValueError(
            f"the value '{shown}' is not valid for argument '{argument.key}'",
            title="invalid value",
            code=FaultCode.INVALID_VALUE,
            hint=coalesce(hint),
            argument=argument,
        ))
        return False

    def _default(self, argument, result):
        default = argument.default
        if argument.required and (default is None or default == []):
            hint = None
            if argument in (slots := self.schema.positional_args()):
                hint = f"expected as the {ordinal(slots.index(argument) + 1)} positional value"
            self._fail(MissingValueError(
                f"no value was specified for required argument '{argument}'",
                title="missing argument",
                code=FaultCode.MISSING_REQUIRED,
                hint=hint,
                argument=argument,
            ))
            return
        result[argument.key] = list(default) if isinstance(default, list) else default

    def _fail(self, fault):
        logger.debug("fault: %s", fault)
        if (argument := fault.options.get("argument")) is not None:
            self._failed.add(argument.key)
        self.faults.append(fault)


__all__ = (
    "Resolver",
)

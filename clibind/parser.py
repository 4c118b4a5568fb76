"""
Binder: turn argument strings into a populated record.

Overview
- Parser(settings=None, *, environ=None).parse(target, arguments=None)
  binds arguments to a dataclass type (or into an existing instance) and
  returns a ParseResult. Input problems never raise: they are collected as
  ParseError in a NotParsed result.
- parse(...): one-shot shortcut over Parser.
- invoke(...): parse and return the value; on failure either print the errors
  and the help text to stderr and exit with status 2 (shell=True) or raise
  ParseFailure (shell=False).

Binding rules
- Named tokens resolve through the descriptor (short tokens against short
  names, long tokens against long names; case folding per settings).
- Booleans: an inline value is converted; otherwise a following bare
  "true"/"false" is consumed; otherwise presence means True.
- Arrays and flags: an inline value, or every following bare value up to the
  next option. Each value is split by the separator (empty parts dropped).
  Repeating the option appends.
- Scalars and enums: the inline value or exactly one following bare value;
  repeating the option keeps the last value.
- Bare values nobody consumed fill positional indices in ascending order,
  skipping indices already bound by name. The last positional absorbs every
  remaining value when it is an array.

Precedence for fields absent from the command line
    environment variable (present, non-empty) -> declared default (copied)
    -> current attribute value (parsing into an instance) -> zero value
"""
import copy
import enum
import logging
import os
import re
import sys

from .bindings import *
from .descriptors import *
from .faults import *
from .formatter import print_help
from .results import *
from .settings import *
from .tokens import *
from .utils import *

log = logging.getLogger(__name__)

_CONVERSION_ERRORS = (ValueError, TypeError, ArithmeticError)


def _trim_quotes(raw):
    if len(raw) >= 2 and raw[0] == raw[-1] == '"':
        return raw[1:-1]
    return raw


def _convert_bool(raw):
    match raw.strip().lower():
        case "true":
            return True
        case "false":
            return False
    raise ValueError(f"not a boolean: {raw!r}")


def _convert_member(target, raw):
    raw = raw.strip()
    for name, member in target.__members__.items():
        if name.casefold() == raw.casefold():
            return member
    raise ValueError(f"{raw!r} is not a member of {target.__name__}")


def _convert_element(binding, raw):
    """
    Internal: convert one raw string to the binding's (element) target.
    """
    raw = _trim_quotes(raw)
    if binding.type is not None:
        return binding.type(raw)
    target = binding.target
    if target is bool:
        return _convert_bool(raw)
    if isinstance(target, type) and issubclass(target, enum.Enum):
        return _convert_member(target, raw)
    if target in (int, float):
        return target(raw.strip())
    return target(raw)


def _explode(binding, raw):
    """
    Internal: split one raw array/flags value into its non-empty parts.
    """
    if binding.shape is Shape.FLAGS:
        pattern = r"[\s,%s]+" % re.escape(binding.separator) if binding.separator else r"[\s,]+"
        parts = re.split(pattern, _trim_quotes(raw))
    elif binding.separator:
        parts = _trim_quotes(raw).split(binding.separator)
    else:
        parts = [raw]
    return [part for part in parts if part]


def _normalize_arguments(arguments):
    if arguments is None:
        return sys.argv[1:]
    if isinstance(arguments, str):
        return split(arguments)
    return list(arguments)


class _Session:
    """
    Internal: per-call state of one parse (values bound so far and errors).
    """

    def __init__(self, descriptor, settings, environ):
        self.descriptor = descriptor
        self.settings = settings
        self.environ = environ
        self.values = {}
        self.given = set()
        self.provided = set()
        self.leftovers = []
        self.errors = []
        self.trailing = []

    # errors

    def error(self, position, error_type, option_name, message):
        self.errors.append((position, ParseError(error_type, option_name, message)))

    def invalid(self, binding, raw, position):
        self.error(
            position,
            ParseErrorType.INVALID_VALUE,
            binding.display,
            f"Failed to convert value {raw!r} for option: {binding.display}",
        )

    # assignment

    def assign(self, binding, raw, position):
        self.given.add(binding.name)
        try:
            if binding.shape is Shape.BOOLEAN:
                value = _convert_bool(_trim_quotes(raw))
            else:
                value = _convert_element(binding, raw)
        except _CONVERSION_ERRORS:
            self.invalid(binding, raw, position)
            return
        self.values[binding.name] = value

    def extend(self, binding, raws, position):
        self.given.add(binding.name)
        converted = []
        for raw in raws:
            for part in _explode(binding, raw):
                try:
                    converted.append(_convert_element(binding, part))
                except _CONVERSION_ERRORS:
                    self.invalid(binding, part, position)

        if binding.shape is Shape.FLAGS:
            value = self.values.get(binding.name, binding.target(0))
            for member in converted:
                value |= member
            self.values[binding.name] = value
        else:
            self.values.setdefault(binding.name, []).extend(converted)

    # command line

    def walk(self, tokens):
        count = len(tokens)
        index = 0
        while index < count:
            token = tokens[index]
            index += 1

            if token.kind is TokenKind.VALUE:
                self.leftovers.append(token)
                continue

            if token.kind is TokenKind.LONG:
                binding = self.descriptor.find_long(token.name)
            else:
                binding = self.descriptor.find_short(token.name)

            if binding is None:
                if self.settings.ignore_unknown_arguments:
                    log.debug("dropping unknown option %r at %d", token.name, token.position)
                else:
                    self.error(token.position, ParseErrorType.UNKNOWN_OPTION, token.name, f"Unknown option: {token.name}")
                continue

            match binding.shape:
                case Shape.BOOLEAN:
                    if token.value is not None:
                        raw = token.value
                    elif (
                        index < count and
                        tokens[index].kind is TokenKind.VALUE and
                        tokens[index].value.strip().lower() in ("true", "false")
                    ):
                        raw = tokens[index].value
                        index += 1
                    else:
                        raw = "true"
                    self.assign(binding, raw, token.position)
                case Shape.ARRAY | Shape.FLAGS:
                    if token.value is not None:
                        raws = [token.value]
                    else:
                        raws = []
                        while index < count and tokens[index].kind is TokenKind.VALUE:
                            raws.append(tokens[index].value)
                            index += 1
                    self.extend(binding, raws, token.position)
                case _:
                    if token.value is not None:
                        raw = token.value
                    elif index < count and tokens[index].kind is TokenKind.VALUE:
                        raw = tokens[index].value
                        index += 1
                    else:
                        self.given.add(binding.name)
                        self.error(
                            token.position,
                            ParseErrorType.INVALID_VALUE,
                            binding.display,
                            f"Option '{binding.display}' requires a value.",
                        )
                        continue
                    self.assign(binding, raw, token.position)

    def allocate(self):
        """
        Hand the bare values nobody consumed to the positional bindings.
        """
        slots = [binding for binding in self.descriptor.positionals if binding.name not in self.given]
        leftovers = list(self.leftovers)
        ordinal = 0

        for slot, binding in enumerate(slots):
            if not leftovers:
                break
            variadic = binding.shape is Shape.ARRAY and slot == len(slots) - 1
            if variadic:
                taken, leftovers = leftovers, []
            else:
                taken, leftovers = leftovers[:1], leftovers[1:]
            ordinal += len(taken)

            if binding.shape in (Shape.ARRAY, Shape.FLAGS):
                for token in taken:
                    self.extend(binding, [token.value], token.position)
            else:
                self.assign(binding, taken[0].value, taken[0].position)

        for token in leftovers:
            if self.settings.ignore_unknown_arguments:
                log.debug("dropping surplus value %r at %d", token.value, token.position)
            else:
                self.error(
                    token.position,
                    ParseErrorType.UNKNOWN_OPTION,
                    f"arg{ordinal}",
                    f"Unknown positional argument at index {ordinal}: {token.value}",
                )
            ordinal += 1

    # fallbacks

    def resolve(self, instance):
        for binding in self.descriptor:
            if binding.name in self.given:
                self.provided.add(binding.name)
                continue

            if binding.env is not None and (raw := self.environ.get(binding.env)):
                log.debug("%s falls back to environment variable %s", binding.display, binding.env)
                self.provided.add(binding.name)
                try:
                    if binding.shape in (Shape.ARRAY, Shape.FLAGS):
                        parts = [_convert_element(binding, part) for part in _explode(binding, raw)]
                        if binding.shape is Shape.FLAGS:
                            value = binding.target(0)
                            for member in parts:
                                value |= member
                        else:
                            value = parts
                    elif binding.shape is Shape.BOOLEAN:
                        value = _convert_bool(_trim_quotes(raw))
                    else:
                        value = _convert_element(binding, raw)
                except _CONVERSION_ERRORS:
                    self.trailing.append(ParseError(
                        ParseErrorType.INVALID_VALUE,
                        binding.display,
                        f"Failed to convert value {raw!r} from environment variable {binding.env} "
                        f"for option: {binding.display}",
                    ))
                    continue
                self.values[binding.name] = value
                continue

            if binding.default is not Unset:
                self.provided.add(binding.name)
                if instance is None:
                    self.values[binding.name] = copy.deepcopy(binding.default)
            elif instance is None:
                self.values[binding.name] = self.descriptor.zero(binding)

        for binding in self.descriptor:
            if binding.required and binding.name not in self.provided:
                self.trailing.append(ParseError(
                    ParseErrorType.MISSING_REQUIRED,
                    binding.display,
                    f"Required option '{binding.display}' is missing.",
                ))

    def collect(self):
        """
        Every error: command-line errors by token position, then the rest in field order.
        """
        return [error for _, error in sorted(self.errors, key=lambda item: item[0])] + self.trailing


class Parser:
    """
    Reusable binder configured with ParserSettings and an environment mapping.

    Parameters
    - settings: ParserSettings (defaults: case-insensitive, unknown arguments ignored).
    - environ: mapping used for environment fallbacks; os.environ when omitted
      (read at parse time, never written).
    """

    settings = mirror("settings")

    def __init__(self, settings=None, *, environ=None):
        settings = DEFAULT_SETTINGS if settings is None else settings
        if not isinstance(settings, ParserSettings):
            raise TypeError("parser 'settings' must be a ParserSettings")
        self._settings = settings
        self._environ = environ

    def __repr__(self):
        return f"Parser(settings={self._settings!r})"

    @property
    def environ(self):
        return os.environ if self._environ is None else self._environ

    def parse(self, target, arguments=None):
        """
        Bind arguments to `target` (a dataclass type, or an instance to parse into).

        arguments
        - None: sys.argv[1:]
        - str: split() with POSIX rules
        - iterable of str: used as-is (TypeError on non-strings)

        Returns Parsed(value) or NotParsed(errors). Configuration problems of
        the record raise TypeError/ValueError.
        """
        instance = None if isinstance(target, type) else target
        descriptor = get_descriptor(target, self._settings)
        tokens = tokenize(_normalize_arguments(arguments))

        session = _Session(descriptor, self._settings, self.environ)
        session.walk(tokens)
        session.allocate()
        session.resolve(instance)

        if errors := session.collect():
            log.debug("parse of %s failed with %s", descriptor.type.__qualname__, pluralize(len(errors), "error"))
            return NotParsed(errors, descriptor)

        if instance is None:
            value = descriptor.type(**session.values)
        else:
            value = copy.replace(instance, **session.values)
        log.debug("parsed %s from %s", descriptor.type.__qualname__, pluralize(len(tokens), "token"))
        return Parsed(value, descriptor)


def parse(target, arguments=None, settings=None, environ=None):
    """
    Shortcut for Parser(settings, environ=environ).parse(target, arguments).
    """
    return Parser(settings, environ=environ).parse(target, arguments)


def invoke(target, arguments=None, *, settings=None, environ=None, shell=True):
    """
    Parse and return the bound value, or surface the failure.

    - shell=True: print every error and the help text to stderr, then exit(2).
    - shell=False: raise ParseFailure.
    """
    result = parse(target, arguments, settings, environ)
    if result:
        return result.value
    trigger(result.failure(), shell=shell, deferred=True)
    print_help(target)
    sys.exit(2)


__all__ = (
    # Classes
    "Parser",

    # Functions
    "parse",
    "invoke",
)

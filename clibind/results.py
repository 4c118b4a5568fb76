"""
Parse outcome envelope.

Overview
- ResultType: PARSED / NOT_PARSED tag.
- ParseErrorType: stable numeric codes for input problems
    MISSING_REQUIRED  a required field got no value from any source
    INVALID_VALUE     a raw string could not be converted (or was missing)
    UNKNOWN_OPTION    an unknown name or a surplus bare value (strict mode only)
  normalize() lets the host remap codes through __main__.__codes__.
- ParseError: immutable (error_type, option_name, message); str() is the message.
- ParseResult / Parsed / NotParsed: the tagged union returned by the binder.

Rules
- Parsed carries a value and no errors; NotParsed carries at least one error
  and no value.
- Results are truthy only when parsed; unwrap() returns the value or raises
  clibind.faults.ParseFailure.
"""
from enum import Enum, IntEnum
from typing import NamedTuple

from rich.pretty import Pretty


class ResultType(Enum):
    PARSED = "parsed"
    NOT_PARSED = "not-parsed"


class ParseErrorType(IntEnum):
    """
    Stable codes for parse errors (11200 block; 111xx belongs to the command layer).
    """
    MISSING_REQUIRED = 11201
    INVALID_VALUE    = 11202
    UNKNOWN_OPTION   = 11203

    def normalize(self):
        """
        Return a host-normalized label for this code; the numeric value unless
        __main__ provides a __codes__ mapping.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))

    @property
    def title(self):
        return self.name.replace("_", " ").lower()


class ParseError(NamedTuple):
    error_type: ParseErrorType
    option_name: str
    message: str

    def __str__(self):
        return self.message


class ParseResult:
    """
    Base of the result union. Not instantiated directly; use Parsed/NotParsed.
    """
    __slots__ = ("_descriptor",)

    result = None

    def __init__(self, descriptor=None, /):
        if type(self) is ParseResult:
            raise TypeError("ParseResult cannot be instantiated directly")
        self._descriptor = descriptor

    @property
    def descriptor(self):
        return self._descriptor

    @property
    def value(self):
        return None

    @property
    def errors(self):
        return ()

    @property
    def error_message(self):
        """
        Every error message in order, one per line ("" when parsed).
        """
        return "\n".join(error.message for error in self.errors)

    def __bool__(self):
        return self.result is ResultType.PARSED

    def unwrap(self):
        raise NotImplementedError


class Parsed(ParseResult):
    __slots__ = ("_value",)

    result = ResultType.PARSED

    def __init__(self, value, descriptor=None, /):
        super().__init__(descriptor)
        self._value = value

    @property
    def value(self):
        return self._value

    def unwrap(self):
        return self._value

    def __repr__(self):
        return f"Parsed({self._value!r})"

    def __rich__(self):
        return Pretty(self._value)


class NotParsed(ParseResult):
    __slots__ = ("_errors",)

    result = ResultType.NOT_PARSED

    def __init__(self, errors, descriptor=None, /):
        super().__init__(descriptor)
        errors = tuple(errors)
        if not errors:
            raise ValueError("NotParsed requires at least one error")
        for error in errors:
            if not isinstance(error, ParseError):
                raise TypeError(f"NotParsed errors must be ParseError instances (got {type(error).__name__})")
        self._errors = errors

    @property
    def errors(self):
        return self._errors

    def failure(self, **options):
        """
        Build the ParseFailure exception group describing these errors.
        """
        from .faults import ParseFailure
        return ParseFailure.from_errors(self._errors, **options)

    def unwrap(self):
        raise self.failure()

    def __repr__(self):
        return f"NotParsed({list(self._errors)!r})"

    def __rich__(self):
        return self.failure().__rich__()


__all__ = (
    # Classes
    "ResultType",
    "ParseErrorType",
    "ParseError",
    "ParseResult",
    "Parsed",
    "NotParsed",
)

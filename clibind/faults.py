"""
clibind faults: exceptions over parse errors, and their rendering.

Scope
- ParseException: base fault; wraps exactly one ParseError and renders itself
  through rich (header with program name, code and title; message; hint).
- MissingRequiredError / InvalidValueError / UnknownOptionError: one per
  ParseErrorType.
- ParseFailure: ExceptionGroup of ParseException, raised by unwrap() and by
  invoke(shell=False); renders a pluralized header followed by every fault.
- trigger(): surface a fault; raise it (shell=False) or print it to stderr and
  exit with status 2 (shell=True, the default for faults).

Host integration (all optional, read from __main__)
- __prog__: program name shown in headers (defaults to basename of argv[0]).
- __styles__: style overrides keyed like the defaults below.
- __codes__: ParseErrorType -> label remapping used by normalize().
"""
import copy
import os
import sys
from collections import defaultdict
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .console import console
from .results import *
from .utils import *

_STYLES = {
    # header parts
    "prog-name": "bold #E6E6F0",
    "code": "bold #00E5FF",
    "error-title": "bold #FF4DA6",
    "title": "bold #FF4DA6",

    # body
    "option-name": "bold #FFC2E0",
    "error-message": "#C8C8D0",
    "hint-arrow": "#9CE19C dim",
    "hint": "italic #9CE19C",
}

_HINTS = {
    ParseErrorType.MISSING_REQUIRED: "pass it on the command line or set its environment variable",
    ParseErrorType.INVALID_VALUE: "check the value format expected by {option}",
    ParseErrorType.UNKNOWN_OPTION: "see the usage below for the accepted options",
}


def _prog(options):
    main = __import__("__main__")
    return getattr(main, "__prog__", options.get("prog") or os.path.basename(sys.argv[0]) or "prog")


def _renderers(options):
    """
    Internal: build the (styler, text) pair shared by every renderer.
    """
    styles = defaultdict(str, _STYLES | getattr(__import__("__main__"), "__styles__", {}))
    colorful = options.get("colorful", True)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), style if colorful else "")

    return styler, text


class ParseException(Exception):
    """
    Base fault wrapping one ParseError.

    Options (all optional)
    - shell: print and exit instead of raising when triggered.
    - deferred: in shell mode, print without exiting.
    - fancy: render inside a Panel.
    - colorful: apply styles (default True).
    - prog: program name when __main__.__prog__ is absent.
    - hint: override the default hint for the error type.
    """
    def __init__(self, error, /, **options):
        if not isinstance(error, ParseError):
            raise TypeError(f"{type(self).__name__} argument must be a ParseError")
        super().__init__(error.message)
        self.error = error
        self.message = error.message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.error.error_type

    @classmethod
    def from_error(cls, error, /, **options):
        """
        Instantiate the fault class matching error.error_type.
        """
        return _EXCEPTIONS[error.error_type](error, **options)

    def __rich__(self):
        styler, text = _renderers(self.options)

        header = Text.assemble(
            "[ ",
            text(_prog(self.options), styler("prog-name")),
            " — ",
            text(self.code.normalize(), styler("code")),
            " | ",
            text(self.code.title, styler("error-title")),
            " ]",
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(
            text(" → ", styler("hint-arrow")),
            text(
                self.options.get("hint", _HINTS[self.code]).format(option=self.error.option_name),
                styler("hint"),
            ),
        )

        if self.options.get("fancy", False):
            width = self.options.get("width")
            return Panel(Group(message, hint), title=header, title_align="left", width=width)

        return Group(header, message, hint)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(2)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.error, **{**self.options, **overrides})


class MissingRequiredError(ParseException): ...
class InvalidValueError(ParseException): ...
class UnknownOptionError(ParseException): ...


_EXCEPTIONS = MappingProxyType({
    ParseErrorType.MISSING_REQUIRED: MissingRequiredError,
    ParseErrorType.INVALID_VALUE: InvalidValueError,
    ParseErrorType.UNKNOWN_OPTION: UnknownOptionError,
})


class ParseFailure(ExceptionGroup[ParseException]):
    """
    Every fault of one failed parse, in error order.
    """
    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "parse failure", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("parse failure", tuple(exceptions))
        self.options = MappingProxyType(options)

    @classmethod
    def from_errors(cls, errors, /, **options):
        return cls([ParseException.from_error(error) for error in errors], **options)

    @property
    def errors(self):
        return tuple(exception.error for exception in self.exceptions)

    def __str__(self):
        return "\n".join(exception.message for exception in self.exceptions)

    def __rich__(self):
        styler, text = _renderers(self.options)

        header = Text.assemble(
            "[ ",
            text(_prog(self.options), styler("prog-name")),
            " — ",
            text(pluralize(len(self.exceptions), "error"), styler("title")),
            " ]",
        )

        renders = [
            copy.replace(exception, **{
                name: value for name, value in self.options.items() if name in ("colorful", "prog")
            })
            for exception in self.exceptions
        ]

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(2)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    Surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see ParseException/ParseFailure).
    - options are merged into the fault via copy.replace before triggering.
    - shell=True prints to stderr with rich and exits with status 2
      (deferred=True skips the exit); otherwise the fault is raised.
    """
    if (
        not callable(getattr(fault, "__trigger__", None)) or
        not callable(getattr(fault, "__replace__", None))
    ):
        raise TypeError("trigger() argument must have __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "ParseException",
    "MissingRequiredError",
    "InvalidValueError",
    "UnknownOptionError",
    "ParseFailure",
    "trigger",
)

"""
Formatter: serialize a record back to command-line text, and render help.

Layouts (FormatMethod)
- include_defaults: True emits every field (Complete); False skips optional
  fields whose value equals the declared default, or the zero value when no
  default is declared (Simplify). Required fields are always emitted.
- equal_sign: "--name=value" instead of "--name value".
  COMPLETE, SIMPLIFY, COMPLETE_EQUAL_SIGN and SIMPLIFY_EQUAL_SIGN name the
  four layouts; NONE is COMPLETE.

Rendering
- Positional-only fields first, by index, as bare values; then the named
  fields in declaration order. None values (and empty flags without a zero
  member) are skipped.
- Booleans as True/False, enums by member name, flags by member names.
- Arrays: space style lists the values after the name; equal-sign style joins
  them with the separator, or repeats the option when there is none.
- A value is double-quoted when it is empty or holds whitespace, quotes, a
  backslash or '#'; backslashes and double quotes are escaped inside. split()
  reverses this.

Help
- get_help_text(target, width=100): plain text with a usage line and the
  "Positional Arguments:" and "Options:" sections.
- print_help(target, console=None): the same layout, styled, on stderr.
"""
import enum
import io
import os
import re
import sys
from collections import defaultdict
from typing import NamedTuple

from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from .console import console as _stderr
from .bindings import *
from .descriptors import *
from .utils import *


class FormatMethod(NamedTuple):
    include_defaults: bool = True
    equal_sign: bool = False


FormatMethod.COMPLETE = FormatMethod(include_defaults=True, equal_sign=False)
FormatMethod.SIMPLIFY = FormatMethod(include_defaults=False, equal_sign=False)
FormatMethod.COMPLETE_EQUAL_SIGN = FormatMethod(include_defaults=True, equal_sign=True)
FormatMethod.SIMPLIFY_EQUAL_SIGN = FormatMethod(include_defaults=False, equal_sign=True)
FormatMethod.NONE = FormatMethod.COMPLETE


def quote(value, /):
    """
    Quote one rendered value for a command line (see module docstring).

    >>> quote("plain")
    'plain'
    >>> quote('say "hi"')
    '"say \\\\"hi\\\\""'
    """
    if value and not re.search(r"[\s\"'\\#]", value):
        return value
    return '"%s"' % value.replace("\\", "\\\\").replace('"', '\\"')


def _render(value):
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, enum.Enum):
        return value.name
    return str(value)


def _flag_names(value):
    if names := [member.name for member in value]:
        return names
    # an empty flag only renders when the class names its zero member
    zero = type(value)(0)
    return [zero.name] if zero.name else []


def _skip(descriptor, binding, value, method):
    if value is None:
        return True
    if binding.shape is Shape.FLAGS and not _flag_names(value):
        return True
    if not method.include_defaults and not binding.required:
        reference = descriptor.zero(binding) if binding.default is Unset else binding.default
        return value == reference
    return False


def _fragments(record, method):
    """
    Internal: yield (name, values) pairs; name is None for bare positional values.
    """
    if not isinstance(method, FormatMethod):
        raise TypeError("format method must be a FormatMethod")
    if isinstance(record, type):
        raise TypeError("format target must be a record instance, not a type")
    descriptor = get_descriptor(record)

    # bare positional values first, in index order
    bare = [binding for binding in descriptor.positionals if binding.long is binding.short is None]
    for binding in bare + [binding for binding in descriptor if binding not in bare]:
        value = getattr(record, binding.name)
        if _skip(descriptor, binding, value, method):
            continue

        name = binding.long or binding.short
        match binding.shape:
            case Shape.ARRAY:
                values = [_render(element) for element in value]
                if name is None:
                    if values:
                        yield None, values
                elif not method.equal_sign:
                    yield name, values
                elif binding.separator:
                    yield name, [binding.separator.join(values)]
                elif values:
                    for element in values:
                        yield name, [element]
                else:
                    yield name, [""]
            case Shape.FLAGS:
                names = _flag_names(value)
                if method.equal_sign and name is not None:
                    yield name, [(binding.separator or ",").join(names)]
                else:
                    yield name, names
            case _:
                yield name, [_render(value)]


def _assemble(record, method, transform):
    for name, values in _fragments(record, method):
        values = [transform(value) for value in values]
        if name is None:
            yield from values
        elif method.equal_sign:
            yield "%s=%s" % (name, values[0] if values else "")
        else:
            yield name
            yield from values


def format_args(record, method=FormatMethod.COMPLETE, /):
    """
    Serialize a record into an argument list (no quoting; one string per argument).
    """
    return list(_assemble(record, method, str))


def format_command_line(record, method=FormatMethod.COMPLETE, /):
    """
    Serialize a record into a single command-line string.

    With SIMPLIFY_EQUAL_SIGN a record holding name="demo" and tags=["a", "b"]
    (no other non-default values) renders as: --name=demo --tags=a;b
    """
    return " ".join(_assemble(record, method, quote))


# help

_STYLES = {
    "section": "bold #E6E6F0",
    "usage": "bold #00E5FF",
    "names": "bold #FFC2E0",
    "attributes": "#9CE19C",
    "description": "#C8C8D0",
}


def _prog():
    main = __import__("__main__")
    return getattr(main, "__prog__", os.path.basename(sys.argv[0]) or "prog")


def _placeholder(binding):
    return "<%s>" % coalesce(binding.metavar, "arg%d" % binding.index)


def _attributes(binding):
    attributes = ["Required" if binding.required else "Optional"]
    if binding.positional:
        attributes.append("Index:%d" % binding.index)
    match binding.shape:
        case Shape.ARRAY:
            attributes.append("Array")
        case Shape.ENUM:
            attributes.append("Enum")
        case Shape.FLAGS:
            attributes.append("Flags")
    if binding.default is not Unset:
        default = binding.default
        if isinstance(default, list | tuple):
            default = (binding.separator or " ").join(map(_render, default))
        elif isinstance(default, enum.Flag):
            default = "|".join(_flag_names(default))
        else:
            default = _render(default)
        attributes.append("Default:%s" % default)
    if binding.env is not None:
        attributes.append("Env:%s" % binding.env)
    return ", ".join(attributes)


def _hint(binding):
    target = binding.target
    match binding.shape:
        case Shape.ENUM | Shape.FLAGS:
            prefix = "One of" if binding.shape is Shape.ENUM else "Any of"
            return "%s: %s" % (prefix, ", ".join(target.__members__))
        case Shape.ARRAY:
            element = getattr(target, "__name__", "value")
            return "%s1 %s2" % (element, element)
    return ""


def _description(binding):
    return " ".join(part for part in (binding.help, _hint(binding)) if part)


def _table(rows, styles):
    table = Table(box=None, show_header=False, show_edge=False, pad_edge=True, padding=(0, 2, 0, 2))
    table.add_column(style=styles["names"], no_wrap=True)
    table.add_column(style=styles["attributes"])
    table.add_column(style=styles["description"], overflow="fold")
    for row in rows:
        table.add_row(*map(Text, row))
    return table


def _renderable(target, colorful):
    descriptor = get_descriptor(target)
    styles = defaultdict(str, _STYLES | getattr(__import__("__main__"), "__styles__", {}))
    if not colorful:
        styles = defaultdict(str)

    usage = [_prog()]
    usage += [_placeholder(binding) for binding in descriptor.positionals]
    if descriptor.named or any(binding.names for binding in descriptor.positionals):
        usage.append("[options]")

    parts = [Text.assemble(("Usage: ", styles["usage"]), " ".join(usage))]

    if positionals := descriptor.positionals:
        parts += [
            Text(""),
            Text("Positional Arguments:", styles["section"]),
            _table(
                [(_placeholder(binding), _attributes(binding), _description(binding)) for binding in positionals],
                styles,
            ),
        ]

    if named := [binding for binding in descriptor if binding.names]:
        parts += [
            Text(""),
            Text("Options:", styles["section"]),
            _table(
                [(", ".join(binding.names), _attributes(binding), _description(binding)) for binding in named],
                styles,
            ),
        ]

    return Group(*parts)


def get_help_text(target, /, *, width=100):
    """
    Render the help text for a record type (or instance) as plain text.
    """
    console = Console(file=io.StringIO(), width=width, color_system=None, force_terminal=False, highlight=False)
    with console.capture() as capture:
        console.print(_renderable(target, colorful=False))
    return "\n".join(line.rstrip() for line in capture.get().splitlines())


def print_help(target, /, *, console=None):
    """
    Print the styled help text (stderr by default).
    """
    (console if console is not None else _stderr).print(_renderable(target, colorful=True))


__all__ = (
    # Classes
    "FormatMethod",

    # Functions
    "format_command_line",
    "format_args",
    "get_help_text",
    "print_help",
    "quote",
)

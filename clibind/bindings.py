r"""
clibind option bindings and the dataclass field factory.

Overview
- Binding: the per-field metadata describing how one record attribute maps to
  command-line tokens (short/long names, positional index, required-ness,
  declared default, environment fallback, array separator, help text).
- Shape: the target shape a binding converts to (scalar, array, boolean,
  enum, flags-enum), resolved when a descriptor is built.
- option(...): dataclass field factory carrying a Binding in the field
  metadata; this is the declaration surface for records.

Declaring a record
    >>> from dataclasses import dataclass
    >>> from clibind import option
    >>> @dataclass
    ... class CloneOptions:
    ...     command: str = option(index=0, required=True)
    ...     url: str = option(index=1, metavar="URL")
    ...     verbose: bool = option("-v", "--verbose", help="chatty output")
    ...     tags: list[str] = option("-t", "--tags", separator=";")

Metadata (sanitized on construction)
- names: at most one short ("-x", a single letter) and one long ("--name",
  hyphen-separated segments, unicode letters allowed, no underscores).
- index: Unset | int (>= 0). A binding may carry both names and an index
  (dual mode); one with neither is given an automatic long name when the
  descriptor is built.
- required: bool.
- default: any value, Unset when not declared (None is a declared value).
- env: Unset | non-empty string without whitespace or '='.
- separator: one character, or "" to disable splitting (default ";").
- help / metavar: trimmed strings; metavar must be non-empty when provided.
- type: Unset | callable converter (str -> value) overriding the annotation.

Resolved metadata (filled by the descriptor through copy.replace)
- name: attribute name on the record.
- shape: Shape member.
- target: the target type (element type for arrays).
"""
import builtins
import copy
import dataclasses
import enum
import functools
import operator
import re

from .utils import *

BINDING = "clibind.binding"
"""
Key under which option() stores the Binding in a dataclass field's metadata.
"""


class Shape(enum.Enum):
    """
    Target shape of a binding; decides how raw strings are consumed and converted.
    """
    SCALAR = "scalar"
    ARRAY = "array"
    BOOLEAN = "boolean"
    ENUM = "enum"
    FLAGS = "flags"


class BindingType(type):
    """
    Metaclass giving binding specs stable introspection.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_{name}" backing field.
    - Provide __repr__/__rich_repr__ built from __displayable__ (or
      __introspectable__ when no narrower set is declared).
    - Derive __typename__ from the class name for diagnostics.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"

        def __rich_repr__(self):
            for field in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield field, getattr(self, field)

        generated = {
            "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            "__repr__": __repr__,
            "__rich_repr__": __rich_repr__,
        }
        for field in namespace.get("__introspectable__", ()):
            if field not in namespace:
                generated[field] = mirror(field)
        for method in (__repr__, __rich_repr__):
            method.__qualname__ = "%s.%s" % (name, method.__name__)
        return super().__new__(cls, name, bases, namespace | generated)


def _sanitize_names(cls, metadata, /):
    """
    Internal: split the declared names into one short and one long name.

    Raises
    - TypeError: a name is not a string.
    - ValueError: a name is empty, malformed, duplicated, or a second short/long
      name is declared.
    """
    short = long = None
    for name in metadata.pop("names"):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif re.fullmatch(r"-[^\W\d_]", name):
            if short is not None:
                raise ValueError(f"{cls.__typename__} accepts a single short name (got {short!r} and {name!r})")
            short = name
        elif re.fullmatch(r"--[^\W\d_](-?[^\W_]+)*", name):
            if long is not None:
                raise ValueError(f"{cls.__typename__} accepts a single long name (got {long!r} and {name!r})")
            long = name
        else:
            raise ValueError(f"{cls.__typename__} name {name!r} must look like '-x' or '--long-name'")

    metadata["short"] = short
    metadata["long"] = long


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the declarative fields of a binding.

    Side effects
    - Mutates `metadata` in place; Unset optionals become None (default stays
      Unset so "no default" remains distinguishable from a None default).
    """
    if not isinstance(metadata["required"], bool):
        raise TypeError(f"{cls.__typename__} 'required' must be a boolean")

    if not isinstance(env := metadata["env"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'env' must be a string")
    elif isinstance(env, str) and not re.fullmatch(r"[^\s=]+", env):
        raise ValueError(f"{cls.__typename__} 'env' must be a non-empty variable name")
    metadata["env"] = coalesce(env)

    index = metadata["index"]
    if isinstance(index, bool) or not isinstance(index, int | Unset):
        raise TypeError(f"{cls.__typename__} 'index' must be an integer")
    elif isinstance(index, int) and index < 0:
        raise ValueError(f"{cls.__typename__} 'index' must be a non-negative integer")
    metadata["index"] = coalesce(index)

    if not isinstance(separator := metadata["separator"], str):
        raise TypeError(f"{cls.__typename__} 'separator' must be a string")
    elif len(separator) > 1:
        raise ValueError(f"{cls.__typename__} 'separator' must be a single character")
    metadata["separator"] = separator

    if not isinstance(help := metadata["help"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    metadata["help"] = coalesce(help, "").strip()

    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = coalesce(metavar)

    if metadata["type"] is not Unset and not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")
    metadata["type"] = coalesce(metadata["type"])


def _sanitize_resolution(cls, metadata, /):
    """
    Internal: validate the fields a descriptor fills in (name, shape, target).
    """
    if not isinstance(name := metadata["name"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif isinstance(name, str) and not name.isidentifier():
        raise ValueError(f"{cls.__typename__} 'name' must be an identifier")
    metadata["name"] = coalesce(name)

    if not isinstance(shape := metadata["shape"], Shape | Unset):
        raise TypeError(f"{cls.__typename__} 'shape' must be a Shape")
    metadata["shape"] = coalesce(shape)
    metadata["target"] = coalesce(metadata["target"])


class Binding(metaclass=BindingType):
    """
    Per-field binding rules (the metadata model).

    A Binding is pure data: it knows nothing about tokens or records. The
    descriptor resolves it against a dataclass field (name, shape, target) and
    the parser/formatter interpret it.

    Properties
    - Every name in __introspectable__ is a read-only attribute.
    - positional / names / display are derived conveniences.
    """

    __introspectable__ = (
        "short",
        "long",
        "index",
        "required",
        "default",
        "env",
        "separator",
        "help",
        "metavar",
        "type",
        "name",
        "shape",
        "target",
    )

    __displayable__ = (
        "name",
        "short",
        "long",
        "index",
        "required",
        "default",
        "env",
        "shape",
    )

    def __new__(
            cls,
            *names,
            required=False,
            default=Unset,
            env=Unset,
            index=Unset,
            separator=";",
            help=Unset,
            metavar=Unset,
            type=Unset,
            name=Unset,
            shape=Unset,
            target=Unset,
    ):
        metadata = {
            "names": names,
            "required": required,
            "default": default,
            "env": env,
            "index": index,
            "separator": separator,
            "help": help,
            "metavar": metavar,
            "type": type,
            "name": name,
            "shape": shape,
            "target": target,
        }
        _sanitize_names(cls, metadata)
        _sanitize_metadata(cls, metadata)
        _sanitize_resolution(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'Binding' is not an acceptable base type")

    @property
    def default(self):
        """
        Declared default as given (not frozen); Unset when none was declared.
        Consumers copy it before handing it to a record.
        """
        return self._default

    def __replace__(self, **overrides):
        """
        Return a new binding with `overrides` applied (copy.replace protocol).
        """
        fields = {
            "required": self.required,
            "default": self.default,
            "separator": self.separator,
            "help": self.help,
        } | {
            name: Unset if getattr(self, name) is None else getattr(self, name)
            for name in ("env", "index", "metavar", "type", "name", "shape", "target")
        }
        names = overrides.pop("names", self.names)
        unknown = overrides.keys() - fields.keys()
        if unknown:
            raise TypeError(f"{type(self).__typename__} has no field(s) {", ".join(sorted(unknown))}")
        return type(self)(*names, **fields | overrides)

    @property
    def names(self):
        """
        Declared names, short first.
        """
        return tuple(name for name in (self.short, self.long) if name is not None)

    @property
    def positional(self):
        """
        True when the binding carries a positional index.
        """
        return self.index is not None

    @property
    def display(self):
        """
        Name used in messages: --long, then -s, then <metavar> / <arg{index}>.
        """
        if self.long is not None:
            return self.long
        if self.short is not None:
            return self.short
        if self.metavar is not None:
            return "<%s>" % self.metavar
        if self.index is not None:
            return "<arg%d>" % self.index
        return coalesce(self.name, "<unbound>")


def option(
        *names,
        required=False,
        default=Unset,
        env=Unset,
        index=Unset,
        separator=";",
        help=Unset,
        metavar=Unset,
        type=Unset,
        init=True,
        repr=True,
        compare=True,
):
    """
    Declare a bindable dataclass field.

    Returns a dataclasses.field whose metadata carries the Binding under the
    BINDING key. The dataclass default is the declared default (copied through
    a default_factory when it is a mutable container) or None when none is
    declared; the parser fills the zero value itself.

    Parameters
    - names: "-x" and/or "--long-name".
    - required, default, env, index, separator, help, metavar, type: see Binding.
    - init, repr, compare: forwarded to dataclasses.field.
    """
    binding = Binding(
        *names,
        required=required,
        default=default,
        env=env,
        index=index,
        separator=separator,
        help=help,
        metavar=metavar,
        type=type,
    )
    metadata = {BINDING: binding}

    if default is not Unset and builtins.type(default).__hash__ is None:
        return dataclasses.field(
            default_factory=functools.partial(copy.deepcopy, default),
            init=init,
            repr=repr,
            compare=compare,
            metadata=metadata,
        )
    return dataclasses.field(
        default=coalesce(default),
        init=init,
        repr=repr,
        compare=compare,
        metadata=metadata,
    )


def bindingof(field, /):
    """
    Return the Binding stored on a dataclasses.Field, or None for plain fields.
    """
    if not isinstance(field, dataclasses.Field):
        raise TypeError("bindingof() argument must be a dataclass field")
    return field.metadata.get(BINDING)


__all__ = (
    # Classes
    "Binding",
    "Shape",

    # Functions
    "option",
    "bindingof",

    # Constants
    "BINDING",
)

del BindingType

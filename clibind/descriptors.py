"""
Type descriptors and the process-wide descriptor cache.

Overview
- TypeDescriptor: the immutable, ordered set of resolved bindings for one
  dataclass record, plus lookup tables for short/long names and positions.
- get_descriptor(target, settings=None): return the cached descriptor for a
  record type (or instance), building it on first use.

Resolution
- Every dataclass field carrying a Binding (see clibind.option) is resolved
  against its annotation: name, shape and target type are filled in through
  copy.replace on the binding.
    bool            -> BOOLEAN, bool
    list[T]         -> ARRAY,   T
    enum.Flag       -> FLAGS,   the flag class
    enum.Enum       -> ENUM,    the enum class
    anything else   -> SCALAR,  the annotation
  Optional[T] / T | None unwrap to T first.
- A field with neither names nor an index is given "--{name}" with
  underscores turned into dashes.

Cache
- Keyed by (record type, case sensitivity); entries are never evicted.
- Builds run outside the lock; publication is a lock-guarded setdefault so the
  first completed build wins and every caller sees the same instance.
"""
import copy
import dataclasses
import enum
import logging
import threading
import types
import typing

from .bindings import *
from .settings import *
from .utils import *

log = logging.getLogger(__name__)


def _unwrap_optional(annotation):
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        arguments = [argument for argument in typing.get_args(annotation) if argument is not type(None)]
        if len(arguments) == 1:
            return arguments[0]
    return annotation


def _resolve_shape(annotation, /):
    """
    Internal: map a field annotation to (shape, target).
    """
    annotation = _unwrap_optional(annotation)

    if annotation is bool:
        return Shape.BOOLEAN, bool
    if typing.get_origin(annotation) is list:
        arguments = typing.get_args(annotation)
        return Shape.ARRAY, _unwrap_optional(arguments[0]) if arguments else str
    if annotation is list:
        return Shape.ARRAY, str
    if isinstance(annotation, type) and issubclass(annotation, enum.Flag):
        return Shape.FLAGS, annotation
    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return Shape.ENUM, annotation
    if annotation is typing.Any or not callable(annotation):
        return Shape.SCALAR, str
    return Shape.SCALAR, annotation


class TypeDescriptor:
    """
    Immutable binding metadata for one record type.

    Properties
    - type: the dataclass the descriptor describes.
    - case_sensitive: whether name lookups fall back to case-folded matches.
    - bindings: every binding, in declaration order.
    - positionals: bindings carrying an index, sorted by index.
    - named: bindings without an index.
    """

    type = mirror("type")
    case_sensitive = mirror("case_sensitive")
    bindings = mirror("bindings")
    positionals = mirror("positionals")

    def __init__(self, type, bindings, /, *, case_sensitive=False):
        self._type = type
        self._case_sensitive = case_sensitive
        self._bindings = tuple(bindings)
        self._short = {}
        self._long = {}
        self._positional = {}

        for binding in self._bindings:
            for name, table in ((binding.short, self._short), (binding.long, self._long)):
                if name is None:
                    continue
                if (other := table.setdefault(name, binding)) is not binding:
                    raise ValueError(
                        f"descriptor of {type.__qualname__!r} declares {name!r} "
                        f"on both {other.name!r} and {binding.name!r}"
                    )
            if binding.positional:
                if (other := self._positional.setdefault(binding.index, binding)) is not binding:
                    raise ValueError(
                        f"descriptor of {type.__qualname__!r} declares index {binding.index} "
                        f"on both {other.name!r} and {binding.name!r}"
                    )

        if sorted(self._positional) != list(range(len(self._positional))):
            raise ValueError(
                f"descriptor of {type.__qualname__!r} positional indices must be contiguous "
                f"from 0 (got {sorted(self._positional)})"
            )

        self._positionals = tuple(self._positional[index] for index in sorted(self._positional))

        # first declaration wins when two names only differ by case
        self._folded_short = {}
        self._folded_long = {}
        for name, binding in self._short.items():
            self._folded_short.setdefault(name.casefold(), binding)
        for name, binding in self._long.items():
            self._folded_long.setdefault(name.casefold(), binding)

    def __iter__(self):
        return iter(self._bindings)

    def __len__(self):
        return len(self._bindings)

    def __repr__(self):
        return f"type-descriptor({self._type.__qualname__}, case_sensitive={self._case_sensitive})"

    def __rich_repr__(self):
        yield "type", self._type
        yield "case_sensitive", self._case_sensitive
        yield "bindings", self._bindings

    @property
    def named(self):
        return tuple(binding for binding in self._bindings if not binding.positional)

    def find_short(self, name, /):
        """
        Look up a binding by short name ("-v"); exact match first, then
        case-folded when the descriptor is not case sensitive.
        """
        if (binding := self._short.get(name)) is not None or self._case_sensitive:
            return binding
        return self._folded_short.get(name.casefold())

    def find_long(self, name, /):
        """
        Look up a binding by long name ("--verbose"); same matching rules as find_short().
        """
        if (binding := self._long.get(name)) is not None or self._case_sensitive:
            return binding
        return self._folded_long.get(name.casefold())

    def find_positional(self, index, /):
        return self._positional.get(index)

    def zero(self, binding, /):
        """
        Zero value for a binding's target: False, 0, 0.0, an empty flag, or None.
        """
        match binding.shape:
            case Shape.BOOLEAN:
                return False
            case Shape.FLAGS:
                return binding.target(0)
            case Shape.SCALAR if binding.target in (int, float):
                return binding.target()
        return None

    @classmethod
    def build(cls, target, /, *, case_sensitive=False):
        """
        Build a descriptor by resolving every bound field of a dataclass.

        Raises
        - TypeError: target is not a dataclass type, a bound field is excluded
          from __init__, or a plain field has no default.
        - ValueError: duplicate names, duplicate or non-contiguous indices, or
          an attribute name that cannot become a long option name.
        """
        if not isinstance(target, type) or not dataclasses.is_dataclass(target):
            raise TypeError(f"descriptor target must be a dataclass type (got {target!r})")

        hints = typing.get_type_hints(target)
        bindings = []
        for field in dataclasses.fields(target):
            binding = bindingof(field)
            if binding is None:
                if (
                    field.init and
                    field.default is dataclasses.MISSING and
                    field.default_factory is dataclasses.MISSING
                ):
                    raise TypeError(
                        f"descriptor of {target.__qualname__!r} field {field.name!r} "
                        "has no binding and no default"
                    )
                continue
            if not field.init:
                raise TypeError(f"descriptor of {target.__qualname__!r} bound field {field.name!r} must be an init field")

            shape, resolved = _resolve_shape(hints.get(field.name, str))
            overrides = {"name": field.name, "shape": shape, "target": resolved}
            if not binding.names and not binding.positional:
                overrides["names"] = ("--" + field.name.strip("_").replace("_", "-"),)
            bindings.append(copy.replace(binding, **overrides))

        return cls(target, bindings, case_sensitive=case_sensitive)


_cache = {}
_lock = threading.Lock()


def get_descriptor(target, settings=None):
    """
    Return the cached TypeDescriptor for a record type or instance.

    The first call per (type, case sensitivity) builds the descriptor; later
    calls return that same object. Configuration errors surface here as
    TypeError/ValueError.
    """
    settings = DEFAULT_SETTINGS if settings is None else settings
    if not isinstance(settings, ParserSettings):
        raise TypeError("get_descriptor() settings must be a ParserSettings")
    if not isinstance(target, type):
        target = type(target)

    key = (target, settings.case_sensitive)
    with _lock:
        descriptor = _cache.get(key)
    if descriptor is not None:
        log.debug("descriptor cache hit for %s", target.__qualname__)
        return descriptor

    log.debug("building descriptor for %s (case_sensitive=%s)", target.__qualname__, settings.case_sensitive)
    descriptor = TypeDescriptor.build(target, case_sensitive=settings.case_sensitive)
    with _lock:
        return _cache.setdefault(key, descriptor)


__all__ = (
    # Classes
    "TypeDescriptor",

    # Functions
    "get_descriptor",
)

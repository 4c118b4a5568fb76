"""
clibind utilities (shared helpers for bindings, descriptors and rendering)

Overview
- UnsetType / Unset
  • Singleton sentinel meaning “not declared” where None is a legitimate value
    (a binding default of None is different from no default at all).
  • Falsey, printable as "Unset", non-subclassable.

- coalesce(value, fallback=None)
  • Replace Unset with a concrete fallback; None/0/""/[] are preserved.

- mirror("attr")
  • Read-only property over a private backing field (self._attr); containers
    are exposed as immutable views (tuple, MappingProxyType, frozenset).

- pluralize(count, word)
  • "1 error", "3 errors"; used by the fault and result renderers.

Stability
- Names not in __all__ are internal and may change without notice.
"""
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


def _union(left, right):
    try:
        return left | right
    except TypeError:
        return NotImplemented


@final
class UnsetType:
    """
    Sentinel type for a value that was not declared.

    Falsey but distinct from None and 0, printed as "Unset", one instance per
    process. Copying and pickling hand back that same instance.
    """
    __slots__ = ()
    __instance = None

    def __new__(cls):
        if UnsetType.__instance is None:
            UnsetType.__instance = super().__new__(cls)
        return UnsetType.__instance

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")

    # lets annotations such as `str | Unset` work at runtime
    def __or__(self, other, /):
        return _union(UnsetType, other)

    def __ror__(self, other, /):
        return _union(other, UnsetType)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        # a bare name makes copy/deepcopy/pickle resolve the module global
        return "Unset"


def coalesce(value, fallback=None, /):
    """
    `fallback` when `value` is Unset, `value` otherwise (None included).
    """
    if value is Unset:
        return fallback
    return value


def _freeze(object):
    # shallow: nested containers are left as they are
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the backing attribute "_{name}".

    Containers come back as immutable views so the public surface of a
    binding or descriptor cannot be mutated through its properties. The
    getter is named after the attribute, which keeps tracebacks readable.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")
    attribute = "_" + name

    def getter(self):
        return _freeze(getattr(self, attribute))

    getter.__name__ = getter.__qualname__ = name
    return property(getter)


@functools.cache
def pluralize(count, word, /):
    """
    Render a count with a naively pluralized noun ("1 error", "2 errors").

    Only the suffix rules needed by the message catalogue are covered:
    s/x/z/ch/sh take "es", consonant + y takes "ies", everything else "s".
    """
    if not isinstance(count, int):
        raise TypeError("pluralize() first argument must be an integer")
    if not isinstance(word, str):
        raise TypeError("pluralize() second argument must be a string")

    if count == 1 or not word:
        return "%d %s" % (count, word)

    lower = word.lower()
    if lower.endswith(("s", "x", "z", "ch", "sh")):
        plural = word + "es"
    elif lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        plural = word[:-1] + "ies"
    else:
        plural = word + "s"
    return "%d %s" % (count, plural)


Unset = UnsetType()
"""
Sentinel for “not declared”.

Use Unset as a default when None is a valid, user-meaningful value but the
caller still needs to distinguish “no declaration” from “declared as None”.
"""


__all__ = (
    # Functions
    "coalesce",
    "mirror",
    "pluralize",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)

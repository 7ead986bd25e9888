"""
Argosy utilities (internal helpers shared by the model, engine and renderers)

Overview
- UnsetType / Unset
  • Singleton sentinel for "value not provided", distinct from None.
  • Falsey, printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default while keeping None/0/"" untouched.

- @rename("name")
  • Stable __name__/__qualname__ for generated accessors.

- mirror("attr")
  • Read-only property over a private backing field (self._attr). Lists are
    published as tuples so model state cannot be mutated through the API.

- ordinal(number)
  • Position labels used by faults ("first", "second", ..., "11th").

Quick examples
    >>> coalesce(Unset, "value")
    'value'
    >>> ordinal(3), ordinal(12), ordinal(22)
    ('third', '12th', '22nd')
"""
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel type for parameters that were not provided.

    A single instance, Unset, is exposed. It is falsey but not equal to None,
    which lets the API tell "omitted" apart from "explicitly None".
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    Falsey values (None, 0, "", ()) are preserved as-is.
    """
    return object if object is not Unset else default


def rename(name, /):
    """
    Decorator giving a generated function a stable __name__/__qualname__.
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def decorator(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _freeze(object):
    """
    Publish container state as immutable views.

    Sequences become tuples, mappings become read-only proxies and sets become
    frozensets. Strings and scalars are returned unchanged. Items are not
    copied, so declared nodes keep their identity.
    """
    if isinstance(object, str):
        return object
    if isinstance(object, Sequence):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property reading self._{name} through _freeze().
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"..."tenth").
    - Other numbers use numeric ordinals with English suffixes.
    """
    if not isinstance(number, int):
        raise TypeError("ordinal() argument must be an integer")
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, ...)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


__all__ = (
    # Sentinel
    "Unset",
    "UnsetType",

    # Helpers
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
)

"""
Taskonaut utilities (internal helpers, carefully exposed)

Overview
- UnsetType / Unset
  • Singleton sentinel for "value not provided", distinct from None.
  • Falsey, printable as "Unset", non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; None/0/""/[] are preserved.

- @rename("name")
  • Stable __name__/__qualname__ for callables generated at class creation.

- mirror("attr")
  • Read-only property over a private backing field (self._attr). Containers are
    handed out as shallow read-only views (tuple / MappingProxyType / frozenset)
    so descriptor metadata cannot be mutated through the public surface.

- identifier(text)
  • Validate a Python identifier that is not privacy-marked nor a dunder.

Usage guidance
- Prefer Unset for defaults where None is a meaningful value; materialize with coalesce().
"""
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __ror__(self, other, /):
        """
        Let `str | Unset` stand for `str | UnsetType` in isinstance checks.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    __or__ = __ror__

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None   # None is preserved, not replaced
    """
    return object if object is not Unset else default


def rename(name, /):
    """
    Decorator giving a generated callable a stable __name__/__qualname__,
    so reprs and tracebacks of metaclass-built methods read naturally.

        @rename("__repr__")
        def __repr__(self): ...
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("@rename() must be applied to a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _freeze(object):
    """
    Shallow read-only view of a container; other objects pass through.

    - Sequence (non-string) -> tuple
    - Mapping -> MappingProxyType
    - Set -> frozenset
    """
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the backing attribute "_{name}".

    Example
    - Given self._params, declare params = mirror("params") to expose it as a tuple.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


def identifier(text, /):
    """
    Return True when text is a public Python identifier.

    Public means: a valid identifier that does not carry the privacy marker
    (a leading underscore), which also rules out dunders such as __init__.
    """
    return isinstance(text, str) and text.isidentifier() and not text.startswith("_")


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "identifier",
)

"""
Runtime reflection fallback.

Text scanning only sees signatures written in the task file. Namespaces bound to
objects whose classes live elsewhere (imported, generated) are recovered from
the live root instance instead:

- candidates: public attributes of the instance, then of its classes (builtins
  excluded), in that order; routines, classes, data descriptors, primitives
  and list-likes are skipped, as are props already registered as namespaces.
- each candidate's class chain (builtins excluded) is walked for public,
  non-class callables.
- a candidate with at least one callable is registered with empty, reflected
  TaskDescriptors: no parameter shape, tokens passed through verbatim.
"""
import inspect
import logging

from .descriptors import *

logger = logging.getLogger(__name__)

_SCALARS = (str, bytes, bytearray, int, float, complex, bool, type(None))
_SEQUENCES = (list, tuple, set, frozenset)


def _public(name):
    return not name.startswith("_")


def _user_classes(object):
    return (cls for cls in type(object).__mro__ if cls.__module__ != "builtins")


def _candidates(instance):
    names = dict.fromkeys(getattr(instance, "__dict__", {}))
    for cls in _user_classes(instance):
        names.update(dict.fromkeys(vars(cls)))
    return [name for name in names if _public(name)]


def _skipped(value):
    return (
        inspect.isroutine(value) or
        isinstance(value, type) or
        inspect.isdatadescriptor(value) or
        isinstance(value, _SCALARS + _SEQUENCES)
    )


def methods(object, /):
    """
    Ordered public callable names reachable through the object's class chain.
    """
    found = {}
    for cls in _user_classes(object):
        for name, value in vars(cls).items():
            if _public(name) and name not in found and inspect.isroutine(value):
                found[name] = None
    return list(found)


def reflected(object, /):
    """
    Mapping of method name -> empty reflected TaskDescriptor for an object.
    """
    return {name: TaskDescriptor(reflected=True) for name in methods(object)}


def reflect(instance, registry, /):
    """
    Augment registry.namespaces in place with groups found only at runtime.

    Returns
    - the same registry.
    """
    for name in _candidates(instance):
        if name in registry.namespaces:
            continue
        if _skipped(value := inspect.getattr_static(instance, name)):
            continue
        if tasks := reflected(value):
            logger.debug("namespace %r reflected from %s (%d task(s))", name, type(value).__qualname__, len(tasks))
            registry.namespaces[name] = tasks
    return registry


__all__ = (
    "methods",
    "reflected",
    "reflect",
)

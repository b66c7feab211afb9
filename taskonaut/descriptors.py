r"""
Taskonaut descriptors: the pure-data shape of discovered tasks.

Overview
- ParamType: the five value kinds a CLI token can be coerced into
  (string, number, boolean, object, array).
- FlagSpec: the flag tokens bound to a parameter.
  • long: always "--" + parameter name.
  • short: optional single-character token ("-n").
  • aliases: ordered long-form tokens ("--environment").
- ParameterDescriptor: one parameter of a task (name, type, required, rest, flag).
- TaskDescriptor: a task's description line and its ordered parameters
  (the leading execution-context parameter is never part of it).
- TaskRegistry: root tasks plus namespaces of tasks, and the header doc line.

Introspection & representation
- DescriptorType metaclass provides stable __repr__/__rich_repr__, structural
  equality over __introspectable__ and exposes every introspectable field as a
  read-only property (containers are frozen on the way out).
- Descriptor classes are sealed: they cannot be subclassed.

Validation highlights
- Parameter names must be Python identifiers.
- A rest parameter is never required and never carries a FlagSpec.
- Within one TaskDescriptor at most one parameter is rest, and it is the last.
- Flag tokens: long/aliases start with "--", short is exactly "-" plus one character.

Quick example:
    >>> from taskonaut.descriptors import *
    >>> name = ParameterDescriptor("name", ParamType.STRING, flag=FlagSpec("--name", "-n"))
    >>> TaskDescriptor("Say hello", (name,))
    task-descriptor(description='Say hello', params=(parameter-descriptor(...),), reflected=False)
"""
import enum
import functools
import operator
import re
from collections.abc import Iterable, Mapping

from .utils import *


class ParamType(enum.StrEnum):
    """
    Value kinds a parameter may declare; members compare equal to their names.
    """
    STRING  = "string"
    NUMBER  = "number"
    BOOLEAN = "boolean"
    OBJECT  = "object"
    ARRAY   = "array"


class DescriptorType(type):
    """
    Metaclass that turns descriptor classes into sealed, introspectable records.

    Responsibilities
    - Expose the names listed in __introspectable__ as read-only properties
      mirroring the private "_{name}" fields set during construction.
    - Provide __repr__/__rich_repr__ and field-wise __eq__.
    - Seal the class against subclassing to keep the data model flat.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages and reprs.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        @rename("__eq__")
        def __eq__(self, other):
            if type(other) is not type(self):
                return NotImplemented
            return all(getattr(self, field) == getattr(other, field) for field in type(self).__introspectable__)

        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
                "__eq__": __eq__,
            } | {
                field: mirror(field) for field in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for field in type(self).__introspectable__:
                yield field, getattr(self, field)
        self.__rich_repr__ = __rich_repr__

        @rename("__init_subclass__")
        def __init_subclass__(cls, **options):  # NOQA: F-841
            raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
        self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _sanitize_flag(cls, metadata, /):
    """
    Internal: validate and normalize FlagSpec metadata in place.

    - long: "--" followed by at least one character.
    - short: None or "-" plus exactly one character (not a second dash).
    - aliases: iterable of "--" tokens; repeats collapse, first spelling wins.
    """
    if not isinstance(long := metadata["long"], str):
        raise TypeError(f"{cls.__typename__} 'long' must be a string")
    if not long.startswith("--") or len(long) < 3:
        raise ValueError(f"{cls.__typename__} 'long' must look like '--name'")

    if (short := metadata["short"]) is not None:
        if not isinstance(short, str):
            raise TypeError(f"{cls.__typename__} 'short' must be a string")
        if len(short) != 2 or short[0] != "-" or short[1] == "-":
            raise ValueError(f"{cls.__typename__} 'short' must look like '-x'")

    if isinstance(aliases := metadata["aliases"], str) or not isinstance(aliases, Iterable):
        raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
    aliases = tuple(dict.fromkeys(aliases))
    for alias in aliases:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} aliases must be strings")
        if not alias.startswith("--") or len(alias) < 3:
            raise ValueError(f"{cls.__typename__} aliases must look like '--name'")
    metadata["aliases"] = aliases


def _sanitize_parameter(cls, metadata, /):
    """
    Internal: validate and normalize ParameterDescriptor metadata in place.

    Wiring
    - rest implies not required.
    - rest parameters cannot carry a FlagSpec (they are fed by positionals only).
    """
    if not isinstance(name := metadata["name"], str) or not name.isidentifier():
        raise ValueError(f"{cls.__typename__} 'name' must be an identifier")

    try:
        metadata["type"] = ParamType(metadata["type"])
    except ValueError:
        raise ValueError(
            f"{cls.__typename__} 'type' must be one of {", ".join(map(str, ParamType))}"
        ) from None

    metadata["rest"] = bool(metadata["rest"])
    metadata["required"] = bool(metadata["required"]) and not metadata["rest"]

    if (flag := metadata["flag"]) is not None:
        if not isinstance(flag, FlagSpec):
            raise TypeError(f"{cls.__typename__} 'flag' must be a flag-spec")
        if metadata["rest"]:
            raise TypeError(f"rest {cls.__typename__} cannot carry a flag")


class FlagSpec(metaclass=DescriptorType):
    """
    Flag tokens bound to one parameter.

    Properties
    - long: "--name", derived from the parameter name.
    - short: "-n" or None.
    - aliases: tuple of extra long-form tokens, in declaration order.
    - names: every token, long first, then short, then aliases.
    """

    __introspectable__ = (
        "long",
        "short",
        "aliases",
    )

    def __new__(cls, long, /, short=None, aliases=()):
        metadata = {
            "long": long,
            "short": short,
            "aliases": aliases,
        }
        _sanitize_flag(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def names(self):
        return (self.long, *([self.short] if self.short else []), *self.aliases)


class ParameterDescriptor(metaclass=DescriptorType):
    """
    One declared parameter of a task, in declaration order.

    Fields
    - name: identifier as written in the signature.
    - type: ParamType fixed at classification time.
    - required: False when the declaration has a default value (or is rest).
    - rest: absorbs every remaining positional token.
    - flag: FlagSpec or None (always None for rest parameters).
    """

    __introspectable__ = (
        "name",
        "type",
        "required",
        "rest",
        "flag",
    )

    def __new__(cls, name, /, type=ParamType.STRING, *, required=True, rest=False, flag=None):
        metadata = {
            "name": name,
            "type": type,
            "required": required,
            "rest": rest,
            "flag": flag,
        }
        _sanitize_parameter(cls, metadata)

        self = super().__new__(cls)
        for field, object in metadata.items():
            setattr(self, "_" + field, object)
        return self


class TaskDescriptor(metaclass=DescriptorType):
    """
    Metadata of one callable task.

    Fields
    - description: first usable docstring line, or "".
    - params: tuple of ParameterDescriptor (context parameter excluded).
    - reflected: True when the task was found only on the live instance; such
      tasks have no parameter shape and receive their tokens verbatim.
    """

    __introspectable__ = (
        "description",
        "params",
        "reflected",
    )

    def __new__(cls, description="", params=(), *, reflected=False):
        if not isinstance(description, str):
            raise TypeError(f"{cls.__typename__} 'description' must be a string")

        params = tuple(params)
        for index, param in enumerate(params):
            if not isinstance(param, ParameterDescriptor):
                raise TypeError(f"{cls.__typename__} 'params' must hold parameter-descriptors")
            if param.rest and index != len(params) - 1:
                raise ValueError(f"{cls.__typename__} rest parameter must be the last one")

        self = super().__new__(cls)
        self._description = description
        self._params = params
        self._reflected = bool(reflected)
        return self


class TaskRegistry:
    """
    Two-tier registry of discovered tasks for a single invocation.

    - root: dict of task name -> TaskDescriptor, in source declaration order.
    - namespaces: dict of namespace -> dict of method name -> TaskDescriptor.
    - header_doc: first usable line of the root group's docstring, or None.

    The registry is plain data: built fresh per invocation, augmented by the
    runtime reflection pass, consulted by the dispatcher, then discarded.
    """

    def __init__(self, root=Unset, namespaces=Unset, header_doc=None):
        namespaces = coalesce(namespaces, {})
        if not all(isinstance(methods, Mapping) for methods in namespaces.values()):
            raise TypeError("task-registry namespaces must map names to task mappings")

        self.root = dict(coalesce(root, {}))
        self.namespaces = {namespace: dict(methods) for namespace, methods in namespaces.items()}
        self.header_doc = header_doc

    def __iter__(self):
        """
        Yield (qualified name, TaskDescriptor): root tasks first, then "namespace:method".
        """
        yield from self.root.items()
        for namespace, methods in self.namespaces.items():
            for method, task in methods.items():
                yield f"{namespace}:{method}", task

    def __len__(self):
        return len(self.root) + sum(map(len, self.namespaces.values()))

    def __rich_repr__(self):
        yield "root", self.root
        yield "namespaces", self.namespaces
        yield "header_doc", self.header_doc

    def __repr__(self):
        return f"task-registry({
            ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
        })"


__all__ = (
    "ParamType",
    "FlagSpec",
    "ParameterDescriptor",
    "TaskDescriptor",
    "TaskRegistry",
)

# Keep the metaclass out of star-imports and docs; it is an implementation detail.
del DescriptorType

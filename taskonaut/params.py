r"""
Parameter classifier: raw parameter-list text -> ordered ParameterDescriptors.

Input is the text between a def's parentheses with the receiver and the
execution-context parameter already removed, e.g.

    name: str, count: int = 1, *, data: dict[str, Any] | None = None

Splitting
- Entries are split on top-level commas. Brackets, string literals (defaults
  such as sep: str = ",") and trailing comments never split an entry.
- "/", bare "*" and "**kwargs" entries carry no CLI shape and are skipped.

Rest detection (checked first, short-circuits everything else)
- Any "*name" or "*name: T" entry yields exactly one descriptor: rest=True,
  required=False, type=array when T is list-shaped else string, no FlagSpec.

Type classification (ordered, first match wins)
- Annotations are unquoted and Optional / "| None" wrappers are removed first;
  an unannotated parameter is a string.
1. list-shaped (list, tuple, set, Sequence, ...)   -> array
2. mapping-shaped (dict, Mapping, ...)            -> object
3. inline structural literal ("{...}")            -> object
4. str -> string, int/float -> number, bool -> boolean
5. any other name (TypedDict, dataclass, ...)     -> object

Flags
- long is always "--" + name; short/aliases come from @flag directives.
"""
import re

from . import directives
from .descriptors import *

_LIST = re.compile(
    r"(?:[\w.]*\.)?(?:list|List|tuple|Tuple|set|Set|frozenset|FrozenSet|Sequence|MutableSequence|Iterable|deque)"
    r"(?:\[.*\])?",
    re.DOTALL,
)
_MAPPING = re.compile(
    r"(?:[\w.]*\.)?(?:dict|Dict|Mapping|MutableMapping|OrderedDict|defaultdict)(?:\[.*\])?",
    re.DOTALL,
)
_OPTIONAL = re.compile(r"(?:typing\.)?Optional\[(?P<inner>.*)\]", re.DOTALL)
_UNION = re.compile(r"(?:typing\.)?Union\[(?P<inner>.*)\]", re.DOTALL)
_NONE = ("None", "NoneType", "type(None)")

_PRIMITIVES = {
    "str": ParamType.STRING,
    "int": ParamType.NUMBER,
    "float": ParamType.NUMBER,
    "bool": ParamType.BOOLEAN,
}


def _chars(text):
    """
    Yield (index, char, depth, quoted) for every character outside comments.

    depth counts open brackets; a closing bracket is reported at the outer depth.
    """
    quote = None
    depth = 0
    index = 0
    while index < len(text):
        char = text[index]
        if quote is None:
            if char == "#":
                if (index := text.find("\n", index)) < 0:
                    return
                continue
            if char in "\"'":
                quote = text[index:index + 3] if text[index:index + 3] in ('"""', "'''") else char
                for offset, char in enumerate(quote):
                    yield index + offset, char, depth, True
                index += len(quote)
                continue
            if char in ")]}":
                depth -= 1
            yield index, char, depth, False
            if char in "([{":
                depth += 1
            index += 1
        elif char == "\\":
            for offset, char in enumerate(text[index:index + 2]):
                yield index + offset, char, depth, True
            index += 2
        elif text.startswith(quote, index):
            for offset, char in enumerate(quote):
                yield index + offset, char, depth, True
            index += len(quote)
            quote = None
        else:
            yield index, char, depth, True
            index += 1


def split(text, separator=",", /):
    """
    Split text on a top-level separator; entries are stripped, comments dropped.
    """
    entries = [[]]
    for _, char, depth, quoted in _chars(text or ""):
        if char == separator and not depth and not quoted:
            entries.append([])
        else:
            entries[-1].append(char)
    return [entry for entry in ("".join(chars).strip() for chars in entries) if entry]


def _find(text, target):
    for index, char, depth, quoted in _chars(text):
        if char != target or depth or quoted:
            continue
        # "=" inside comparison operators is never the default marker
        if target == "=" and (text[index + 1:index + 2] == "=" or text[index - 1:index] in ("=", "<", ">", "!", ":")):
            continue
        return index
    return -1


def entry(text, /):
    """
    Parse one parameter entry.

    Returns
    - (stars, name, annotation | None, has_default)
    """
    head = text[:equals] if (equals := _find(text, "=")) >= 0 else text
    head = head.strip()
    stars = len(head) - len(head := head.lstrip("*"))
    if (colon := _find(head, ":")) >= 0:
        return stars, head[:colon].strip(), head[colon + 1:].strip() or None, equals >= 0
    return stars, head.strip(), None, equals >= 0


def _unquote(annotation):
    if len(annotation) >= 2 and annotation[0] == annotation[-1] and annotation[0] in "\"'":
        return annotation.strip("\"'").strip()
    return annotation


def unwrap(annotation, /):
    """
    Strip quoting and Optional wrappers: 'Optional[int]', 'int | None' -> 'int'.
    """
    annotation = _unquote(annotation.strip())
    if match := _OPTIONAL.fullmatch(annotation):
        return unwrap(match["inner"])
    if match := _UNION.fullmatch(annotation):
        members = split(match["inner"])
    else:
        members = split(annotation, "|")
    if len(members) > 1 and len(kept := [member for member in members if member not in _NONE]) == 1:
        return unwrap(kept[0])
    return annotation


def listed(annotation, /):
    return annotation is not None and _LIST.fullmatch(unwrap(annotation)) is not None


def classify_type(annotation, /):
    """
    Map annotation text to a ParamType with the ordered first-match rules.
    """
    if annotation is None:
        return ParamType.STRING
    annotation = unwrap(annotation)
    if _LIST.fullmatch(annotation):
        return ParamType.ARRAY
    if _MAPPING.fullmatch(annotation):
        return ParamType.OBJECT
    if annotation.startswith("{"):
        return ParamType.OBJECT
    if annotation in _PRIMITIVES:
        return _PRIMITIVES[annotation]
    return ParamType.OBJECT


def classify(text, docstring="", /):
    """
    Build the ordered ParameterDescriptor tuple for a parameter-list text.

    Parameters
    - text: str | None, parameters after the execution context.
    - docstring: owning docstring, mined for @flag directives.

    Returns
    - tuple[ParameterDescriptor, ...]
    """
    entries = [entry(item) for item in split(text or "")]

    for stars, name, annotation, _ in entries:
        if stars == 1 and name.isidentifier():
            return (ParameterDescriptor(
                name,
                ParamType.ARRAY if listed(annotation) else ParamType.STRING,
                required=False,
                rest=True,
            ),)

    hints = directives.flags(docstring)
    params = []
    for stars, name, annotation, default in entries:
        if stars or not name.isidentifier():
            continue
        hint = hints.get(name, {})
        params.append(ParameterDescriptor(
            name,
            classify_type(annotation),
            required=not default,
            flag=FlagSpec("--" + name, hint.get("short"), hint.get("aliases", ())),
        ))
    return tuple(params)


__all__ = (
    "split",
    "entry",
    "unwrap",
    "listed",
    "classify_type",
    "classify",
)

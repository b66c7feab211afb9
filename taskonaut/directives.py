"""
Docstring directives.

A directive line starts with "@". Two consumers:
- description(): the first non-empty, non-directive line of a docstring.
- flags(): "@flag <param> <tokens...>" lines, mapping a parameter to its
  short flag ("-n") and long aliases ("--name", in encounter order).

    @flag name -n --who
    @flag count -c

A later directive for the same parameter replaces the earlier one.
"""
import inspect
import re

_FLAG = re.compile(r"^[ \t]*@flag[ \t]+(?P<param>\w+)(?P<tokens>[^\n@]*)", re.MULTILINE)


def lines(docstring, /):
    """
    Usable docstring lines: cleaned, stripped, non-empty and not directives.
    """
    for line in inspect.cleandoc(docstring or "").splitlines():
        if (line := line.strip()) and not line.startswith("@"):
            yield line


def description(docstring, /):
    return next(lines(docstring), "")


def flags(docstring, /):
    """
    Parse @flag directives.

    Returns
    - dict[str, dict]: param name -> {"short": str | None, "aliases": tuple[str, ...]}
    """
    found = {}
    for match in _FLAG.finditer(docstring or ""):
        short = None
        aliases = []
        for token in match["tokens"].split():
            if token.startswith("--") and len(token) > 2:
                aliases.append(token)
            elif token.startswith("-") and len(token) == 2 and token != "--":
                short = token
        found[match["param"]] = {"short": short, "aliases": tuple(aliases)}
    return found


__all__ = (
    "lines",
    "description",
    "flags",
)

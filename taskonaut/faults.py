"""
Taskonaut faults (resolution and execution errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain so logs and searches stay predictable.
- TaskException: base type carrying a message plus options; knows how to render
  itself (rich) and how to surface itself (raise, or print-and-exit in shell mode).
- trigger(): central entry point to surface any fault.
- getdoc(): optional description lookup for a code from the host application.

UX goals
- One short, lowercased line saying what went wrong and with which name.
- A single actionable hint, usually the usage line of the task.

Integration
- Engine functions (scanner, resolver, coercion) raise faults directly.
- The Runner catches them, merges runtime options (shell/fancy/colorful) via
  copy.replace() and calls trigger().
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the runner (stable identifiers).

    grouping (by high-level domain)
    - routing (2110x)
      • UNKNOWN_TASK, UNKNOWN_NAMESPACE, PRIVATE_ACCESS, NOT_CALLABLE
    - arguments (2111x)
      • MISSING_ARGUMENT, TYPE_MISMATCH, INVALID_PAYLOAD
    - loading (2112x)
      • TASKS_NOT_FOUND, TASKS_UNLOADABLE
    - execution (2113x)
      • TASK_FAILED
    """
    # --- routing errors ---
    UNKNOWN_TASK                = 21101
    UNKNOWN_NAMESPACE           = 21102
    PRIVATE_ACCESS              = 21103
    NOT_CALLABLE                = 21104

    # --- argument errors ---
    MISSING_ARGUMENT            = 21111
    TYPE_MISMATCH               = 21112
    INVALID_PAYLOAD             = 21113

    # --- loading errors ---
    TASKS_NOT_FOUND             = 21121
    TASKS_UNLOADABLE            = 21122

    # --- execution errors ---
    TASK_FAILED                 = 21131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class TaskException(Exception):
    """
    base fault: a message plus a read-only mapping of options.

    common options
    - title, code, hint: rendering essentials.
    - tool: the Runner (used for the program name), shell, fancy, colorful.
    - context: parameter, expected, input, suggestions, task, ...
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*([message] if message is not Unset else []))
        self.message = message
        self.options = MappingProxyType(options)

    def __getattr__(self, name):
        try:
            return self.__dict__["options"][name]
        except KeyError:
            raise AttributeError(name) from None

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #FF6B6B",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#7CFFB2 dim",
            "hint": "italic #7CFFB2",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment if colorful else Text(fragment.plain)
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", getattr(self.options.get("tool"), "prog", "tkn")), styler("prog-name"))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "?", styler("code")),
            " | ",
            text(str(self.options.get("title", type(self).__name__)).title(), styler("error-title")),
            " ]"
        )
        message = text(_message(self), styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        message = overrides.pop("message", self.message)
        return type(self)(message, **{**self.options, **overrides})


def _message(fault):
    return fault.message if fault.message is not Unset else type(fault).__name__


class UnknownTaskError(TaskException): ...
class UnknownNamespaceError(TaskException): ...
class PrivateAccessError(TaskException): ...
class NotCallableError(TaskException): ...
class MissingArgumentError(TaskException): ...
class TypeMismatchError(TaskException): ...
class InvalidPayloadError(TaskException): ...
class TasksNotFoundError(TaskException): ...
class TasksUnloadableError(TaskException): ...
class TaskFailedError(TaskException): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see TaskException).
    - options are merged into the fault via copy.replace() before triggering.
    - in shell mode the fault is printed to stderr and the process exits with 1;
      otherwise it is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ keyed by
    FaultCode; when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "TaskException",
    "UnknownTaskError",
    "UnknownNamespaceError",
    "PrivateAccessError",
    "NotCallableError",
    "MissingArgumentError",
    "TypeMismatchError",
    "InvalidPayloadError",
    "TasksNotFoundError",
    "TasksUnloadableError",
    "TaskFailedError",
    "trigger",
    "getdoc",
)

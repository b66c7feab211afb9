"""
Runner: loads a task file, builds the registry and dispatches one command.

Per invocation
1. normalize the prompt into tokens (sys.argv[1:], a shell-like string or an
   iterable of strings).
2. "--version" prints the package version; nothing else is loaded.
3. load the task file: missing -> starter template + TasksNotFoundError; import
   failure or missing root group -> TasksUnloadableError.
4. build the registry from the file text (scanner) and augment it from the live
   root instance (reflection).
5. no tokens / "-h" / "--help" -> overview; "-l" / "--list" -> listing.
6. otherwise select the task ("task", "namespace:task" or "namespace.task"),
   answer "-h" anywhere after it with per-task help, or resolve the remaining
   tokens and call the task with a fresh Context.

Lookup order for a command
- privacy on namespace, then on method (before any existence check).
- namespace existence, then method existence (inherited root methods are
  accepted with a reflected descriptor), then callability.

Faults
- Engine faults are caught here, replaced with the runtime options (tool, shell,
  fancy, colorful) plus a usage hint, and surfaced through trigger().
- Any exception from the task body is reported as TaskFailedError.
"""
import asyncio
import copy
import difflib
import importlib.metadata
import importlib.util
import inspect
import logging
import os
import shlex
import sys
from collections.abc import Iterable
from inspect import Parameter
from pathlib import Path

from rich.console import Console
from rich.text import Text

from . import help, reflection, scanner
from .context import Context
from .descriptors import *
from .faults import *
from .faults import trigger as _trigger
from .resolver import resolve
from .tokens import HELP_TOKENS, strip_help, tokenize
from .utils import *

logger = logging.getLogger(__name__)

LIST_TOKENS = ("-l", "--list")
VERSION_TOKEN = "--version"

STARTER = '''\
from taskonaut import Context


class Tasks:
    """My tasks"""

    def hello(self, c: Context, name: str = "World"):
        """Say hello"""
        print(f"Hello, {name}!")
'''


def split_command(command, /):
    """
    Split "namespace:task" / "namespace.task" at the first separator.

    Returns
    - (namespace | None, method)
    """
    indices = [index for index in (command.find(":"), command.find(".")) if index >= 0]
    if not indices:
        return None, command
    return command[:min(indices)], command[min(indices) + 1:]


def version():
    try:
        return importlib.metadata.version("taskonaut")
    except importlib.metadata.PackageNotFoundError:
        return "0+unknown"


def _suggest(name, available):
    """
    Hint listing close matches first, then everything available.
    """
    hint = "available: %s" % (", ".join(available) or "none")
    if matches := difflib.get_close_matches(name, available, n=3):
        return "did you mean %s? %s" % (" or ".join(map(repr, matches)), hint)
    return hint


class Runner:
    """
    Invocation-scoped task runner bound to one task file.

    Parameters
    - file: path of the task file (default "tasks.py" in the current directory).
    - group: root group class name (default "Tasks").
    - shell: print faults and exit(1) instead of raising.
    - fancy: render help and faults inside panels.
    - colorful: enable rich styling.
    - prog: program name shown in usage lines (host __prog__ wins).
    """

    def __init__(
            self,
            file=Unset,
            /,
            *,
            group=scanner.ROOT,
            shell=False,
            fancy=False,
            colorful=True,
            prog="tkn",
    ):
        if not identifier(group):
            raise ValueError("runner 'group' must be a public identifier")
        self.file = Path(coalesce(file, Path.cwd() / "tasks.py"))
        self.group = group
        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)
        self.prog = getattr(__import__("__main__"), "__prog__", prog)

    @classmethod
    def from_settings(cls, settings, /, **options):
        return cls(
            settings.file,
            group=settings.group,
            fancy=settings.fancy,
            colorful=settings.colorful,
            **options,
        )

    def __repr__(self):
        return f"runner(file={str(self.file)!r}, group={self.group!r})"

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this runner's runtime options merged in.
        """
        _trigger(fault, **options, tool=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    def _print(self, renderable):
        Console(highlight=False).print(renderable)

    def _renderer(self):
        return help.HelpRenderer(self.prog, colorful=self.colorful, fancy=self.fancy)

    def load(self):
        """
        Read and import the task file.

        Returns
        - (source text, live root group instance)
        """
        if not self.file.is_file():
            self._print(Text(f"No {self.file.name} found. Create one to get started:\n"))
            self._print(Text(STARTER))
            self.trigger(TasksNotFoundError(
                "no task file at %s" % self.file,
                title="tasks not found",
                code=FaultCode.TASKS_NOT_FOUND,
                file=str(self.file),
                hint="create %s defining a %r class" % (self.file.name, self.group),
                docs=getdoc(FaultCode.TASKS_NOT_FOUND),
            ))
            return None

        source = self.file.read_text(encoding="utf-8")
        name = "_taskonaut_%s" % (self.file.stem if self.file.stem.isidentifier() else "tasks")

        def unloadable(message, error=None):
            self.trigger(TasksUnloadableError(
                message,
                title="tasks unloadable",
                code=FaultCode.TASKS_UNLOADABLE,
                file=str(self.file),
                error=error,
                docs=getdoc(FaultCode.TASKS_UNLOADABLE),
            ))

        spec = importlib.util.spec_from_file_location(name, self.file)
        if spec is None or spec.loader is None:
            return unloadable("cannot import %s" % self.file)
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        # sibling modules of the task file must be importable from it
        sys.path.insert(0, str(self.file.parent))
        try:
            spec.loader.exec_module(module)
        except Exception as error:
            sys.modules.pop(name, None)
            logger.debug("importing %s failed", self.file, exc_info=True)
            return unloadable("cannot import %s: %s" % (self.file.name, error), error)
        finally:
            sys.path.remove(str(self.file.parent))

        if not isinstance(group := getattr(module, self.group, None), type):
            return unloadable("no class %r in %s" % (self.group, self.file.name))
        try:
            instance = group()
        except Exception as error:
            return unloadable("cannot instantiate %s: %s" % (self.group, error), error)

        return source, instance

    def discover(self, source, instance, /):
        """
        Registry from the source text, augmented from the live instance.
        """
        registry = scanner.discover(source, root=self.group)
        reflection.reflect(instance, registry)
        logger.debug("registry: %d root task(s), %d namespace(s)", len(registry.root), len(registry.namespaces))
        return registry

    def select(self, registry, instance, command, /):
        """
        Resolve a command to (bound callable, TaskDescriptor).

        Raises
        - PrivateAccessError, UnknownNamespaceError, UnknownTaskError, NotCallableError.
        """
        namespace, method = split_command(command)

        for kind, name in (("namespace", namespace), ("method", method)):
            if name is not None and name.startswith("_"):
                raise PrivateAccessError(
                    "cannot call private %s %r" % (kind, name),
                    title="private access denied",
                    code=FaultCode.PRIVATE_ACCESS,
                    name=name,
                    docs=getdoc(FaultCode.PRIVATE_ACCESS),
                )

        if namespace is not None:
            if (methods := registry.namespaces.get(namespace)) is None:
                raise UnknownNamespaceError(
                    "unknown namespace %r" % namespace,
                    title="unknown namespace",
                    code=FaultCode.UNKNOWN_NAMESPACE,
                    name=namespace,
                    suggestions=tuple(registry.namespaces),
                    hint=_suggest(namespace, list(registry.namespaces)),
                    docs=getdoc(FaultCode.UNKNOWN_NAMESPACE),
                )
            if (task := methods.get(method)) is None:
                raise UnknownTaskError(
                    "unknown task %r" % command,
                    title="unknown task",
                    code=FaultCode.UNKNOWN_TASK,
                    name=command,
                    suggestions=tuple(methods),
                    hint=_suggest(method, list(methods)).replace("available:", "available in %s:" % namespace, 1),
                    docs=getdoc(FaultCode.UNKNOWN_TASK),
                )
            target = getattr(instance, namespace, None)
        else:
            target = instance
            if (task := registry.root.get(method)) is None:
                if callable(live := getattr(instance, method, None)) and not isinstance(live, type):
                    logger.debug("task %r not in source, reflected from the instance", method)
                    task = TaskDescriptor(reflected=True)
                else:
                    available = [name for name, _ in registry]
                    raise UnknownTaskError(
                        "unknown task %r" % command,
                        title="unknown task",
                        code=FaultCode.UNKNOWN_TASK,
                        name=command,
                        suggestions=tuple(available),
                        hint=_suggest(command, available),
                        docs=getdoc(FaultCode.UNKNOWN_TASK),
                    )

        if not callable(function := getattr(target, method, None)):
            raise NotCallableError(
                "task %r is not callable" % command,
                title="not callable",
                code=FaultCode.NOT_CALLABLE,
                name=command,
                docs=getdoc(FaultCode.NOT_CALLABLE),
            )
        return function, task

    def bind(self, function, task, argv, /):
        """
        Resolve argv against the task and split values into (args, kwargs).

        Reflected tasks receive argv verbatim. Values of parameters that are
        keyword-only in the live signature are passed by keyword.
        """
        if task.reflected:
            return list(argv), {}

        values = resolve(task.params, tokenize(argv))
        try:
            live = inspect.signature(function).parameters
        except (TypeError, ValueError):
            live = {}

        args, kwargs = [], {}
        fixed = [param for param in task.params if not param.rest]
        for param, value in zip(fixed, values):
            if (parameter := live.get(param.name)) is not None and parameter.kind is Parameter.KEYWORD_ONLY:
                kwargs[param.name] = value
            else:
                args.append(value)
        args.extend(values[len(fixed):])
        return args, kwargs

    def execute(self, command, function, args, kwargs, /):
        """
        Call the task with a fresh Context; coroutines are driven with asyncio.run.
        """
        logger.debug("running %r with %d positional and %d keyword value(s)", command, len(args), len(kwargs))
        try:
            result = function(Context(), *args, **kwargs)
            if inspect.iscoroutine(result):
                result = asyncio.run(result)
        except Exception as error:
            logger.debug("task %r raised", command, exc_info=True)
            return self.trigger(TaskFailedError(
                "error running %r: %s" % (command, error),
                title="task failed",
                code=FaultCode.TASK_FAILED,
                task=command,
                error=error,
                docs=getdoc(FaultCode.TASK_FAILED),
            ))
        return result

    def run(self, tokens, /):
        """
        Run one invocation from a normalized token list.
        """
        if tokens[:1] == [VERSION_TOKEN]:
            return self._print(Text(version()))

        if (loaded := self.load()) is None:
            return None
        registry = self.discover(*loaded)
        instance = loaded[1]

        if not tokens or (len(tokens) == 1 and tokens[0] in HELP_TOKENS):
            return self._print(self._renderer().overview(registry))
        if tokens[0] in LIST_TOKENS:
            return self._print(self._renderer().listing(registry))

        command, *argv = tokens
        wants_help, argv = strip_help(argv)

        try:
            function, task = self.select(registry, instance, command)
        except TaskException as fault:
            return self.trigger(fault)

        if wants_help:
            return self._print(self._renderer().task(command, task))

        try:
            args, kwargs = self.bind(function, task, argv)
        except TaskException as fault:
            usage = "usage: %s %s" % (self.prog, help.signature(command, task))
            return self.trigger(copy.replace(fault, hint=usage, task=command))

        return self.execute(command, function, args, kwargs)

    def __invoke__(self, prompt=Unset):
        """
        Execute one invocation with a token stream.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, passed through verbatim.

        Returns
        - the task's return value (None for help, listing and version views).

        Raises
        - TypeError: when prompt is not Unset/str/Iterable[str].
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            # tokens are values: blank or padded items are kept as given
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError(f"__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError(f"__invoke__() argument must be a string or an iterable of strings")

        return self.run(tokens)


def invoke(object, prompt=Unset, /):
    """
    Convenience entry point.

    Parameters
    - object: a Runner (anything providing __invoke__) or a task file path.
    - prompt: see Runner.__invoke__.

    Raises
    - TypeError: when object is neither invocable nor a path.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    if isinstance(object, str | os.PathLike):
        return invoke(Runner(object), prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method or be a path") from None


__all__ = (
    "STARTER",
    "split_command",
    "version",
    "Runner",
    "invoke",
)

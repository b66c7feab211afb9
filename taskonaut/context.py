"""
Execution context handed to every task as its first argument.

    class Tasks:
        def build(self, c: Context, target: str = "all"):
            \"""Build a target\"""
            with c.cd("src"):
                c.run(f"make {target}", echo=True)

Options (constructor defaults, overridable per call)
- echo: print "$ <command>" before running.
- warn: return a failed RunResult instead of raising RunError.
- hide: do not write the captured stdout/stderr through.
- cwd: working directory (constructor: initial directory; per call: one-off).
"""
import contextlib
import logging
import os
import subprocess
import sys
from dataclasses import dataclass

from rich.console import Console

from .utils import Unset

logger = logging.getLogger(__name__)

console = Console(highlight=False)

OPTIONS = ("echo", "warn", "hide", "cwd")


@dataclass(frozen=True, slots=True)
class RunResult:
    """Outcome of one shell command."""

    stdout: str
    stderr: str
    code: int

    @property
    def ok(self):
        return self.code == 0

    @property
    def failed(self):
        return self.code != 0


class RunError(Exception):
    """
    Raised by Context.run when a command exits non-zero and warn is off.

    The full RunResult is kept on `result`.
    """

    def __init__(self, message, result):
        super().__init__(message)
        self.result = result


def _options(options):
    if unknown := set(options) - set(OPTIONS):
        raise TypeError(f"unexpected run option(s): {", ".join(sorted(unknown))}")
    return {name: value for name, value in options.items() if value is not Unset}


class Context:
    """
    Thin shell runner: commands go through `sh -c` with output captured.
    """

    def __init__(self, *, echo=Unset, warn=Unset, hide=Unset, cwd=Unset):
        self._options = _options({"echo": echo, "warn": warn, "hide": hide, "cwd": cwd})
        self.cwd = os.fspath(cwd) if cwd is not Unset else os.getcwd()

    @property
    def pwd(self):
        return self.cwd

    @property
    def config(self):
        return dict(self._options)

    def run(self, command, /, **options):
        """
        Run a shell command and return its RunResult.

        Raises
        - RunError when the command fails and warn is off.
        """
        # the constructor cwd already lives in self.cwd, which cd() may move
        cwd = os.fspath(options.pop("cwd", self.cwd))
        options = {**self._options, **_options(options)}

        if options.get("echo", False):
            console.print(f"$ {command}", markup=False)

        logger.debug("running %r in %s", command, cwd)
        completed = subprocess.run(
            ["sh", "-c", command],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        result = RunResult(completed.stdout, completed.stderr, completed.returncode)

        if result.failed and not options.get("warn", False):
            raise RunError(f"command failed with exit code {result.code}: {command}", result)

        if not options.get("hide", False):
            if result.stdout:
                sys.stdout.write(result.stdout)
            if result.stderr:
                sys.stderr.write(result.stderr)

        return result

    local = run

    def sudo(self, command, /, **options):
        return self.run(f"sudo {command}", **options)

    @contextlib.contextmanager
    def cd(self, directory, /):
        """
        Temporarily change the working directory used by run(); restored on exit.
        """
        previous = self.cwd
        self.cwd = os.path.normpath(os.path.join(self.cwd, os.fspath(directory)))
        try:
            yield self
        finally:
            self.cwd = previous


__all__ = (
    "RunResult",
    "RunError",
    "Context",
)

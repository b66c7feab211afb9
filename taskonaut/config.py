"""Runtime configuration read from the environment."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_FILE = "tasks.py"
DEFAULT_GROUP = "Tasks"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True, slots=True)
class Settings:
    """Where the tasks live and how the runner presents itself."""

    file: Path = Path(DEFAULT_FILE)
    group: str = DEFAULT_GROUP
    fancy: bool = False
    colorful: bool = True
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ=None):
        """
        Build settings from TASKONAUT_* variables (and NO_COLOR) with local defaults.

        A relative TASKONAUT_FILE is resolved against the current directory.
        """
        environ = os.environ if environ is None else environ
        file = Path(environ.get("TASKONAUT_FILE", DEFAULT_FILE))
        level = environ.get("TASKONAUT_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid log level for TASKONAUT_LOG_LEVEL: {level!r}")
        return cls(
            file=file if file.is_absolute() else Path.cwd() / file,
            group=environ.get("TASKONAUT_GROUP", DEFAULT_GROUP).strip() or DEFAULT_GROUP,
            fancy=_env_bool(environ, "TASKONAUT_FANCY", False),
            # https://no-color.org: any non-empty value disables colors
            colorful=not environ.get("NO_COLOR"),
            log_level=level,
        )


def _env_bool(environ, name, default):
    value = environ.get(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off", ""}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")


__all__ = (
    "Settings",
)

"""
Console entry point: `tkn [task] [args...]`.

Settings come from the environment (see taskonaut.config.Settings); logging goes
to stderr through rich at TASKONAUT_LOG_LEVEL.
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

from .config import Settings
from .runner import Runner, invoke

logger = logging.getLogger(__name__)


def configure_logging(level, /):
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def main(argv=None):
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.debug("settings: %r", settings)

    runner = Runner.from_settings(settings, shell=True)
    invoke(runner, *([] if argv is None else [argv]))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Logging setup for the isotest command line.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed here, once, by the CLI. Log output goes to stderr through a rich
handler so it never interleaves with the report on stdout.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PROJECT_PREFIX = "isotest"


def config_console_handler(level: int = logging.WARNING, color: bool = True) -> RichHandler:
    """Build a RichHandler writing to stderr.

    At DEBUG level the handler also shows the emitting source location.

    Args:
        level: Minimum level for console output.
        color: Enable color output when True.

    Returns:
        RichHandler: Configured handler suitable to attach to the project logger.
    """
    console = Console(color_system="auto" if color else None, stderr=True)
    debug_mode = level <= logging.DEBUG

    handler = RichHandler(
        level=level,
        console=console,
        rich_tracebacks=True,
        show_time=debug_mode,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )
    fmt = "%(name)s: %(message)s" if debug_mode else "%(message)s"
    handler.setFormatter(logging.Formatter(fmt=fmt))
    return handler


def configure_logging(level: str | int = "WARNING", color: bool = True) -> logging.Logger:
    """Attach a console handler to the ``isotest`` logger.

    Calling this again replaces the handler installed by the previous call.

    Args:
        level: Level name or number.
        color: Enable color output when True.

    Returns:
        The configured project logger.
    """
    numeric = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(PROJECT_PREFIX)
    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)
    logger.addHandler(config_console_handler(numeric, color=color))
    logger.setLevel(numeric)
    return logger

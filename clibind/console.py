"""
Shared console and logging setup.

- console: the stderr rich Console used for faults and help output.
- configure_logging(level): route the "clibind" loggers through a RichHandler
  bound to that console. The package itself only installs a NullHandler, so
  nothing is printed unless the host application opts in.
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)


def configure_logging(level=logging.INFO, /, *, target=None):
    """
    Attach (or replace) a RichHandler on the "clibind" logger and set its level.

    Calling it again swaps the handler instead of stacking a second one.
    Returns the package logger.
    """
    logger = logging.getLogger("clibind")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=target if target is not None else console,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


__all__ = (
    "console",
    "configure_logging",
)

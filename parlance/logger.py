"""Logging setup and utilities."""
import logging

from rich.console import Console
from rich.logging import RichHandler

from .utils import Unset, coalesce

__all__ = (
    "LogObjects",
    "get_logger",
    "init_logger",
)

ROOT = "parlance"


class LogObjects:
    """Reusable objects for loggers."""

    handlers: list[logging.Handler] = []


def init_logger(level=logging.INFO, filename=None, *, colorful=True):
    """
    Initialize the logging system.

    - A rich handler on stderr renders records for humans (markup off, so
      user-provided message text is printed verbatim).
    - An optional plain file handler keeps a timestamped copy.

    Calling it again replaces the previously installed handlers.
    """
    root = logging.getLogger(ROOT)
    for handler in LogObjects.handlers:
        root.removeHandler(handler)
    LogObjects.handlers.clear()

    stream_handler = RichHandler(
        console=Console(stderr=True, no_color=not colorful),
        show_path=level <= logging.DEBUG,
        markup=False,
        rich_tracebacks=True,
    )
    LogObjects.handlers.append(stream_handler)

    if filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(logging.Formatter(fmt=r"%(asctime)s [%(levelname)s] %(name)s :: %(message)s :: %(filename)s:%(lineno)d"))
        LogObjects.handlers.append(file_handler)

    for handler in LogObjects.handlers:
        root.addHandler(handler)
    root.setLevel(level)


def get_logger(name=Unset, level=None):
    """
    Return a logger under the package namespace.

    get_logger() is the package root logger, get_logger("registry") is
    "parlance.registry". Dotted names already under the root are kept as-is.
    """
    name = coalesce(name, ROOT)
    if name != ROOT and not name.startswith(ROOT + "."):
        name = f"{ROOT}.{name}"
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger

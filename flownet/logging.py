"""Logging setup shared by every flownet module.

Modules call `get_logger(__name__)`. Their loggers carry no handlers and no
level of their own; both come from the ``flownet`` package logger, which gets
exactly one handler the first time anything asks for it.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Iterator, Optional, Union

#: Name of the package root logger.
PACKAGE_LOGGER = "flownet"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Set once the package logger owns its handler; cleared by reset_logging()
_configured = False


def _package_logger() -> logging.Logger:
    return logging.getLogger(PACKAGE_LOGGER)


def setup_root_logger(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Install the single handler of the ``flownet`` logger.

    Does nothing once configured; call `reset_logging()` to start over.

    Args:
        level: Initial level of the package logger.
        format_string: Record format; `DEFAULT_FORMAT` when omitted.
        handler: Destination; a stdout stream handler when omitted.
    """
    global _configured
    if _configured:
        return

    package_logger = _package_logger()
    package_logger.handlers.clear()
    package_logger.setLevel(level)

    handler = handler or logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    package_logger.addHandler(handler)

    # Propagation stays on so pytest's caplog sees package records
    package_logger.propagate = True
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger ``name``, configuring the package logger if needed.

    Args:
        name: Usually the caller's ``__name__``.
    """
    setup_root_logger()
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: Union[int, str]) -> None:
    """Set the level of the package logger and its handlers.

    Args:
        level: A numeric level or a level name such as ``"DEBUG"``.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level name: {level!r}")

    setup_root_logger()
    package_logger = _package_logger()
    package_logger.setLevel(level)
    for handler in package_logger.handlers:
        handler.setLevel(level)


def enable_debug_logging() -> None:
    """Switch the whole package to DEBUG."""
    set_global_log_level(logging.DEBUG)


def disable_debug_logging() -> None:
    """Switch the whole package back to INFO."""
    set_global_log_level(logging.INFO)


def reset_logging() -> None:
    """Drop the package handler and level; used by tests."""
    global _configured
    _configured = False
    package_logger = _package_logger()
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


@contextmanager
def log_duration(
    logger: logging.Logger, label: str, level: int = logging.DEBUG
) -> Iterator[None]:
    """Log how long the wrapped block took, including when it raises.

    Args:
        logger: Logger to emit on.
        label: Human readable name of the timed block.
        level: Level of the emitted record.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.log(level, "%s took %.6fs", label, time.perf_counter() - start)


setup_root_logger()

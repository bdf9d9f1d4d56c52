"""Logger hierarchy and handler setup shared by the CLI and the service."""

from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "ruleforge"

_CONSOLE_FORMAT = "[ruleforge] %(levelname)s %(message)s"
_VERBOSE_CONSOLE_FORMAT = "[ruleforge] %(levelname)s %(name)s: %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Child of the ``ruleforge`` logger, e.g. ``ruleforge.adapters.windsurf``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Attach a console handler (and a file handler when ``log_file`` is set).

    Calling it again replaces the previous handlers instead of stacking them.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_VERBOSE_CONSOLE_FORMAT if verbose else _CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    return logger


def log_failure(
    logger: logging.Logger, message: str, exc: BaseException, *, level: int = logging.ERROR
) -> None:
    """Log ``exc`` with its traceback in debug mode, as a one-liner otherwise."""
    if logger.isEnabledFor(logging.DEBUG):
        logger.exception("%s: %s", message, exc)
    else:
        logger.log(level, "%s: %s", message, exc)


__all__ = ["ROOT_LOGGER", "configure_logging", "get_logger", "log_failure"]

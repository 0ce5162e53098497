# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Structured logging configuration for SMB OpsBoard.

Console output is rendered with rich for humans; JSON lines can be
requested for scripting (``--json-logs`` on the CLI).
"""

import logging
import sys

import structlog
from rich.console import Console
from rich.logging import RichHandler

LOG_LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}
"""Level names accepted in the ``[logging]`` configuration section."""


def setup_logging(
    level: str = "INFO", *, debug: bool = False, json_output: bool = False
) -> None:
    """
    Configure structlog and the standard logging module.

    Args:
        level: Minimum level name (one of LOG_LEVELS).
        debug: Force debug level logging, whatever `level` says.
        json_output: Render log events as JSON instead of coloured text.

    Raises:
        ValueError: if `level` is not a known level name.
    """
    if debug:
        numeric_level = logging.DEBUG
    else:
        try:
            numeric_level = LOG_LEVELS[level.upper()]
        except KeyError as exc:
            raise ValueError(
                f"Unknown log level {level!r}. Expected one of: "
                f"{', '.join(LOG_LEVELS)}."
            ) from exc

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.dev.set_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
        logging.basicConfig(
            level=numeric_level, format="%(message)s", stream=sys.stderr
        )
    else:
        console = Console(stderr=True)
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=console.is_terminal,
                exception_formatter=structlog.dev.rich_traceback,
            )
        )
        logging.basicConfig(
            level=numeric_level,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=console, show_path=False)],
        )

    # sys.stderr is looked up per logger, it may be swapped after setup
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    return structlog.PrintLogger(file=sys.stderr)


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Get a logger instance with the given name."""
    return structlog.get_logger(name)

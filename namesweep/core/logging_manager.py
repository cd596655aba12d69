#!/usr/bin/env python3
"""
logging_manager.py
--------------------
Run logs for scans and rename applications.

Each CLI component gets one logger writing two rotating files:

    <log_dir>/<component>.log   every record, DEBUG and up
    <log_dir>/errors.log        errors only, with traceback

Records are single lines of ``key=value`` fields so a rename run can be
followed with grep:

    2024-05-01 10:12:03 INFO    rename  scan_for_references | entity_id=npc-7 matches=19
    2024-05-01 10:12:03 WARNING rename  Chronicle not found, skipping | chronicle_id=chr-9

Warnings are echoed to stderr (everything when verbose). Errors are not:
the CLI prints its own one-line message through handle_cli_error and a
patch run reports its failure count.

The engine takes ``logger: Optional[NamesweepLogger] = None`` everywhere;
``safe_logger`` swaps in a NullLogger so library code never branches on it.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

# --- Third party imports ---
import click

FILE_FORMAT = "%(asctime)s %(levelname)-7s %(component)s  %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_fields(details: Optional[Dict[str, Any]]) -> str:
    """
    Render details as ``key=value`` pairs in insertion order.

    Examples:
        >>> format_fields({"entity_id": "npc-7", "new_name": "Frost Queen"})
        "entity_id=npc-7 new_name='Frost Queen'"
    """
    if not details:
        return ""
    parts = []
    for key, value in details.items():
        if isinstance(value, str) and (not value or any(c.isspace() for c in value)):
            value = repr(value)
        parts.append(f"{key}={value}")
    return " ".join(parts)


def _line(message: str, details: Optional[Dict[str, Any]]) -> str:
    fields = format_fields(details)
    return f"{message} | {fields}" if fields else message


def _below_error(record: logging.LogRecord) -> bool:
    return record.levelno < logging.ERROR


class NamesweepLogger:
    """
    Rotating file logger for one CLI component.

    Attributes:
        log_dir: Directory holding the log files
        component_name: Component name; also the main log file's stem
        logger: Underlying ``logging.Logger``
        console: The stderr handler
    """

    def __init__(
        self,
        log_dir: Path,
        component_name: str = "namesweep",
        verbose: bool = False,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 3,
    ) -> None:
        self.log_dir = Path(log_dir)
        self.component_name = component_name
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger(f"namesweep.{component_name}")
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        # A second logger for the same component replaces the first one's handlers
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

        file_formatter = logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT)
        for path, level in (
            (self.log_dir / f"{component_name}.log", logging.DEBUG),
            (self.log_dir / "errors.log", logging.ERROR),
        ):
            handler = RotatingFileHandler(
                path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
            handler.setLevel(level)
            handler.setFormatter(file_formatter)
            self.logger.addHandler(handler)

        self.console = logging.StreamHandler()
        self.console.setLevel(logging.DEBUG if verbose else logging.WARNING)
        self.console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        self.console.addFilter(_below_error)
        self.logger.addHandler(self.console)

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        self.logger.log(level, message, extra={"component": self.component_name}, **kwargs)

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Record a finished scan, patch run or CLI command with its counts."""
        self._log(logging.INFO, _line(operation, details))

    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        """Record an exception, with its traceback, in both files."""
        message = _line(f"{type(error).__name__}: {error}", context)
        self._log(logging.ERROR, message, exc_info=(type(error), error, error.__traceback__))

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.DEBUG, _line(message, details))

    def log_warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.WARNING, _line(message, details))

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        """
        Log an error and return the message the CLI should print.

        Examples:
            >>> logger.log_cli_error(SnapshotError("No entities.yaml"))
            '❌ SnapshotError: No entities.yaml'
        """
        self.log_error(error, context or {"source": "cli"})
        return cli_error_message(error, show_traceback)


def cli_error_message(error: Exception, show_traceback: bool = False) -> str:
    message = f"❌ {type(error).__name__}: {error}"
    if show_traceback:
        tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        message = f"{message}\n\n{tb}"
    return message


def handle_cli_error(
    ctx: "click.Context",
    error: Exception,
    operation: str,
    additional_context: Optional[Dict[str, Any]] = None,
    exit_code: int = 1,
) -> None:
    """
    Log a failed command, print a one-line message and exit.

    The logger and verbose flag come from ``ctx.obj``; with ``-v`` the
    traceback is printed as well.

    Note:
        This function never returns - it always calls sys.exit()
    """
    obj = ctx.obj or {}
    context = {"operation": operation}
    if additional_context:
        context.update(additional_context)

    message = safe_logger(obj.get("logger")).log_cli_error(
        error, context, show_traceback=obj.get("verbose", False)
    )
    click.echo(message, err=True)
    sys.exit(exit_code)


class NullLogger:
    """Stand-in logger for library calls made without one."""

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        return cli_error_message(error, show_traceback)


_null_logger = NullLogger()


def safe_logger(logger: Optional[NamesweepLogger]) -> NamesweepLogger:
    """The given logger, or the shared NullLogger when it is None."""
    return logger if logger is not None else _null_logger  # type: ignore[return-value]

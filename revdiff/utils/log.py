"""Logging utilities for Revdiff.

Console output goes to stderr at ``REVDIFF_LOG_LEVEL`` (WARNING by default),
so diffs written to stdout stay clean. ``--log-file`` adds a file handler
that records everything at DEBUG with structured extras.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

LOG_LEVEL_ENV = "REVDIFF_LOG_LEVEL"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


def level_from_env(default: int = logging.WARNING) -> int:
    """Resolve the console level from ``REVDIFF_LOG_LEVEL``."""
    name = os.getenv(LOG_LEVEL_ENV, "").strip().upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


class StructuredFormatter(logging.Formatter):
    """Append ``extra`` fields as sorted JSON after the message."""

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return created.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        }
        if not extras:
            return message
        return f"{message} | {json.dumps(extras, sort_keys=True, default=str)}"


class RevdiffLogger:
    """A console logger on stderr with an optional debug log file."""

    def __init__(self, name: str = "revdiff"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        self._console_handler = self._find_console_handler()
        if self._console_handler is None:
            self._console_handler = logging.StreamHandler(sys.stderr)
            self._console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
            self.logger.addHandler(self._console_handler)
        self._console_handler.setLevel(level_from_env())

        self._file_handler: Optional[logging.FileHandler] = None

    def _find_console_handler(self) -> Optional[logging.Handler]:
        for handler in self.logger.handlers:
            if type(handler) is logging.StreamHandler:
                return handler
        return None

    @property
    def log_file(self) -> Optional[Path]:
        if self._file_handler is None:
            return None
        return Path(self._file_handler.baseFilename)

    def set_console_level(self, level: int) -> None:
        self._console_handler.setLevel(level)

    def attach_file_handler(self, log_file: Path) -> Path:
        """Write DEBUG and above to ``log_file``, replacing any previous file."""
        log_file = log_file.resolve()
        if self.log_file == log_file:
            return log_file

        if self._file_handler is not None:
            self.logger.removeHandler(self._file_handler)
            self._file_handler.close()

        log_file.parent.mkdir(parents=True, exist_ok=True)
        self._file_handler = logging.FileHandler(log_file, encoding="utf-8")
        self._file_handler.setLevel(logging.DEBUG)
        self._file_handler.setFormatter(StructuredFormatter("%(asctime)s [%(levelname)s] %(message)s"))
        self.logger.addHandler(self._file_handler)
        return log_file

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.error(message, *args, **kwargs)


_logger: Optional[RevdiffLogger] = None


def get_logger() -> RevdiffLogger:
    """Get the global logger instance."""
    global _logger
    if _logger is None:
        _logger = RevdiffLogger()
    return _logger


def configure_logging(verbose: bool = False, log_file: Optional[Path] = None) -> RevdiffLogger:
    """Apply the ``--verbose`` and ``--log-file`` CLI options to the global logger."""
    logger = get_logger()
    if verbose:
        logger.set_console_level(logging.DEBUG)
    if log_file is not None:
        path = logger.attach_file_handler(log_file)
        logger.debug(f"[logging] File logging enabled at {path}")
    return logger

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Stdout logger implementation with structured JSON output."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from familydb_config import LoggingConfig

from .logger import Logger

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class StdoutLogger(Logger):
    """Logger that outputs structured JSON logs to stdout, one object per line."""

    def __init__(self, level: str = "INFO", name: str | None = None):
        """Initialize stdout logger.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR)
            name: Optional logger name for identification

        Raises:
            ValueError: If level is not a known level name
        """
        self.level = level.upper()
        self.name = name or "familydb"

        if self.level not in _LEVEL_MAP:
            raise ValueError(f"Invalid log level: {level}. Must be one of {list(_LEVEL_MAP.keys())}")

        # Configure a stdlib logger so caplog and handlers can capture records
        self._stdlib_logger = logging.getLogger(self.name)
        # Use NOTSET to inherit the root level; filtering happens in _log using self.level
        self._stdlib_logger.setLevel(logging.NOTSET)

    @classmethod
    def from_config(cls, config: LoggingConfig) -> "StdoutLogger":
        """Build a logger from the ``LOG_LEVEL``/``LOG_NAME`` settings.

        Args:
            config: Validated logging settings

        Returns:
            StdoutLogger writing at ``config.level`` and above
        """
        return cls(level=config.level, name=config.name)

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        """Write one JSON line to stdout and mirror the record to stdlib logging.

        Records below the configured level are dropped. Keyword arguments go
        under ``extra``, except ``exc_info`` which is handed to stdlib logging.
        """
        if _LEVEL_MAP[level] < _LEVEL_MAP[self.level]:
            return

        exc_info = kwargs.pop("exc_info", None)

        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "logger": self.name,
            "message": message,
        }
        if kwargs:
            log_entry["extra"] = kwargs

        try:
            print(json.dumps(log_entry, default=str), file=sys.stdout, flush=True)
        except (TypeError, ValueError) as e:
            print(f"{level}: {message} (JSON serialization failed: {e})", file=sys.stderr, flush=True)

        # Mirrored so caplog and root handlers see the same records
        extra = {"extra": kwargs} if kwargs else None
        self._stdlib_logger.log(_LEVEL_MAP[level], message, exc_info=exc_info, extra=extra)

    def info(self, message: str, **kwargs: Any) -> None:
        """Write an INFO line, e.g. a completed demo step."""
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Write a WARNING line."""
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Write an ERROR line, e.g. a store failure that ends the run."""
        self._log("ERROR", message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Write an ERROR line with the active traceback attached to the stdlib record."""
        kwargs.setdefault("exc_info", True)
        self._log("ERROR", message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Write a DEBUG line, shown only when ``LOG_LEVEL=DEBUG``."""
        self._log("DEBUG", message, **kwargs)

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Silent logger implementation for testing."""

from typing import Any

from familydb_config import LoggingConfig

from .logger import Logger


class SilentLogger(Logger):
    """Logger that records entries in memory and prints nothing.

    Every entry is kept regardless of ``level`` so tests can assert on
    debug output as well.
    """

    def __init__(self, level: str = "INFO", name: str | None = None):
        """Initialize silent logger.

        Args:
            level: Stored for parity with StdoutLogger; nothing is filtered
            name: Optional logger name
        """
        self.level = level.upper()
        self.name = name or "familydb"
        self.logs: list[dict[str, Any]] = []

    @classmethod
    def from_config(cls, config: LoggingConfig) -> "SilentLogger":
        """Build a logger from settings with ``LOG_TYPE=silent``."""
        return cls(level=config.level, name=config.name)

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        """Append ``{"level", "message"}`` plus ``extra`` when keyword data is given."""
        log_entry: dict[str, Any] = {"level": level, "message": message}
        if kwargs:
            log_entry["extra"] = kwargs
        self.logs.append(log_entry)

    def info(self, message: str, **kwargs: Any) -> None:
        """Record an INFO entry."""
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Record a WARNING entry."""
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Record an ERROR entry."""
        self._log("ERROR", message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Record an ERROR entry flagged with ``exc_info`` in its extra data."""
        kwargs.setdefault("exc_info", True)
        self._log("ERROR", message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Record a DEBUG entry."""
        self._log("DEBUG", message, **kwargs)

    def clear_logs(self) -> None:
        """Forget every recorded entry."""
        self.logs.clear()

    def get_logs(self, level: str | None = None) -> list[dict[str, Any]]:
        """Return recorded entries, optionally only those at ``level``.

        Args:
            level: DEBUG, INFO, WARNING or ERROR; None returns everything

        Returns:
            Entries in the order they were logged
        """
        if level is None:
            return self.logs
        return [log for log in self.logs if log["level"] == level]

    def has_log(self, message: str, level: str | None = None) -> bool:
        """Tell whether any recorded message contains ``message``.

        Args:
            message: Substring to look for
            level: Optional level the entry must have

        Returns:
            True if a matching entry was recorded
        """
        return any(message in log["message"] for log in self.get_logs(level or None))

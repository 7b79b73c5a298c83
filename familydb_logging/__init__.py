# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""FamilyDB Logging Adapter.

Structured logging with pluggable backends.

Example:
    >>> from familydb_logging import create_logger
    >>>
    >>> logger = create_logger(logger_type="stdout", level="INFO", name="familydb-demo")
    >>> logger.info("Upserted document", id="Stanford.9")
    >>>
    >>> # Create a silent logger for testing
    >>> test_logger = create_logger(logger_type="silent")
    >>> test_logger.info("Test message")
"""

__version__ = "0.1.0"

from .factory import create_logger, create_logger_from_config
from .logger import Logger
from .silent_logger import SilentLogger
from .stdout_logger import StdoutLogger

__all__ = [
    "__version__",
    "Logger",
    "StdoutLogger",
    "SilentLogger",
    "create_logger",
    "create_logger_from_config",
]

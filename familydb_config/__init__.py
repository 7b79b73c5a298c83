# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""FamilyDB Configuration Adapter.

Configuration providers and the typed configuration used by the demo.
"""

__version__ = "0.1.0"

from .base import ConfigProvider
from .env_provider import EnvConfigProvider
from .static_provider import StaticConfigProvider
from .typed_config import (
    ConfigValidationError,
    DemoConfig,
    LoggingConfig,
    StorageConfig,
    load_demo_config,
)

__all__ = [
    # Version
    "__version__",
    # Configuration Providers
    "ConfigProvider",
    "EnvConfigProvider",
    "StaticConfigProvider",
    # Typed configuration
    "DemoConfig",
    "StorageConfig",
    "LoggingConfig",
    "ConfigValidationError",
    "load_demo_config",
]

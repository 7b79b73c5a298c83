# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Typed configuration for the FamilyDB demo.

All settings come from a ConfigProvider (environment variables by default)
and are validated once, up front, so the rest of the program can rely on
plain attributes.
"""

from dataclasses import dataclass, field, replace
from typing import Any

from .base import ConfigProvider
from .env_provider import EnvConfigProvider

STORE_TYPES = ("azure_cosmosdb", "inmemory")
LOG_TYPES = ("stdout", "silent")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class ConfigValidationError(Exception):
    """Raised when configuration values are missing or invalid."""
    pass


@dataclass
class StorageConfig:
    """Document store settings.

    Attributes:
        store_type: Driver name ("azure_cosmosdb" or "inmemory")
        endpoint: Cosmos DB account endpoint URL
        key: Cosmos DB account key; None selects managed identity
        database: Database name
        request_timeout: Client connection timeout in seconds, or None for the client default
    """
    store_type: str = "inmemory"
    endpoint: str | None = None
    key: str | None = None
    database: str = "FamilyDB"
    request_timeout: int | None = None

    def validate(self) -> None:
        if self.store_type not in STORE_TYPES:
            raise ConfigValidationError(
                f"Unknown DOCUMENT_STORE_TYPE '{self.store_type}'. Must be one of: {', '.join(STORE_TYPES)}"
            )
        if self.store_type == "azure_cosmosdb" and not self.endpoint:
            raise ConfigValidationError("COSMOS_ENDPOINT is required when DOCUMENT_STORE_TYPE is azure_cosmosdb")
        if not self.database:
            raise ConfigValidationError("COSMOS_DATABASE must not be empty")
        if self.request_timeout is not None and self.request_timeout < 1:
            raise ConfigValidationError("COSMOS_REQUEST_TIMEOUT must be a positive number of seconds")


@dataclass
class LoggingConfig:
    """Logger settings."""
    logger_type: str = "stdout"
    level: str = "INFO"
    name: str = "familydb"

    def validate(self) -> None:
        if self.logger_type not in LOG_TYPES:
            raise ConfigValidationError(f"Unknown LOG_TYPE '{self.logger_type}'. Must be one of: {', '.join(LOG_TYPES)}")
        if self.level not in LOG_LEVELS:
            raise ConfigValidationError(f"Invalid LOG_LEVEL '{self.level}'. Must be one of: {', '.join(LOG_LEVELS)}")


@dataclass
class DemoConfig:
    """Complete demo configuration."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    collection: str = "FamilyCollection"
    page_size: int = 1
    interactive: bool = True

    def validate(self) -> None:
        """Validate every section.

        Raises:
            ConfigValidationError: On the first invalid value
        """
        self.storage.validate()
        self.logging.validate()
        if not self.collection:
            raise ConfigValidationError("DEMO_COLLECTION must not be empty")
        if self.page_size < 1:
            raise ConfigValidationError("DEMO_PAGE_SIZE must be a positive integer")

    def with_overrides(self, **overrides: Any) -> "DemoConfig":
        """Return a validated copy with top-level or storage fields overridden.

        Keys that name StorageConfig fields (e.g. ``store_type``, ``database``)
        are applied to the storage section; None values are ignored.
        """
        storage_fields = {k: v for k, v in overrides.items() if hasattr(self.storage, k) and v is not None}
        demo_fields = {
            k: v for k, v in overrides.items()
            if k not in storage_fields and v is not None
        }
        updated = replace(self, storage=replace(self.storage, **storage_fields), **demo_fields)
        updated.validate()
        return updated


def load_demo_config(provider: ConfigProvider | None = None) -> DemoConfig:
    """Load and validate the demo configuration.

    Args:
        provider: Source of configuration values (defaults to the environment)

    Returns:
        Validated DemoConfig

    Raises:
        ConfigValidationError: If a value is missing or invalid
    """
    provider = provider or EnvConfigProvider()

    timeout = provider.get("COSMOS_REQUEST_TIMEOUT")
    config = DemoConfig(
        storage=StorageConfig(
            store_type=str(provider.get("DOCUMENT_STORE_TYPE", "inmemory")).lower(),
            endpoint=provider.get("COSMOS_ENDPOINT"),
            key=provider.get("COSMOS_KEY"),
            database=provider.get("COSMOS_DATABASE", "FamilyDB"),
            request_timeout=provider.get_int("COSMOS_REQUEST_TIMEOUT") if timeout is not None else None,
        ),
        logging=LoggingConfig(
            logger_type=str(provider.get("LOG_TYPE", "stdout")).lower(),
            level=str(provider.get("LOG_LEVEL", "INFO")).upper(),
            name=provider.get("LOG_NAME", "familydb"),
        ),
        collection=provider.get("DEMO_COLLECTION", "FamilyCollection"),
        page_size=provider.get_int("DEMO_PAGE_SIZE", 1),
        interactive=provider.get_bool("DEMO_INTERACTIVE", True),
    )
    config.validate()
    return config

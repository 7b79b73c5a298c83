# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Factory for creating document store instances."""

import logging
import os
from collections.abc import Callable

from familydb_config import StorageConfig

from .azure_cosmos_document_store import AzureCosmosDocumentStore
from .document_store import DocumentStore
from .inmemory_document_store import InMemoryDocumentStore

logger = logging.getLogger(__name__)

_DRIVERS: dict[str, Callable[[StorageConfig], DocumentStore]] = {
    "azure_cosmosdb": AzureCosmosDocumentStore.from_config,
    "inmemory": InMemoryDocumentStore.from_config,
}


def create_document_store_from_config(config: StorageConfig) -> DocumentStore:
    """Create a document store from typed storage configuration.

    Args:
        config: StorageConfig with store_type and driver settings

    Returns:
        DocumentStore instance (not yet connected)

    Raises:
        ValueError: If store_type is not recognized
    """
    try:
        build = _DRIVERS[config.store_type]
    except KeyError:
        raise ValueError(
            f"Unknown store_type: {config.store_type}. Must be one of: {', '.join(sorted(_DRIVERS))}"
        ) from None

    logger.debug(f"Creating '{config.store_type}' document store for database '{config.database}'")
    return build(config)


def create_document_store(store_type: str | None = None, **kwargs) -> DocumentStore:
    """Factory function to create a document store.

    Args:
        store_type: Type of document store ("azure_cosmosdb", "inmemory").
                   If None, reads from DOCUMENT_STORE_TYPE environment variable (defaults to "inmemory")
        **kwargs: Store-specific arguments. For Azure Cosmos, endpoint, key and
                 database fall back to COSMOS_ENDPOINT, COSMOS_KEY and COSMOS_DATABASE.

    Returns:
        DocumentStore instance

    Raises:
        ValueError: If store_type is not recognized
    """
    # Auto-detect store type from environment if not provided
    if store_type is None:
        store_type = os.getenv("DOCUMENT_STORE_TYPE", "inmemory")

    if store_type == "azure_cosmosdb":
        # Explicit parameters take precedence over environment variables
        cosmos_kwargs = dict(kwargs)
        cosmos_kwargs.setdefault("endpoint", os.getenv("COSMOS_ENDPOINT"))
        cosmos_kwargs.setdefault("key", os.getenv("COSMOS_KEY"))
        cosmos_kwargs.setdefault("database", os.getenv("COSMOS_DATABASE", "FamilyDB"))
        return AzureCosmosDocumentStore(**cosmos_kwargs)
    elif store_type == "inmemory":
        return InMemoryDocumentStore(database=kwargs.get("database", os.getenv("COSMOS_DATABASE", "FamilyDB")))
    else:
        raise ValueError(f"Unknown store_type: {store_type}")

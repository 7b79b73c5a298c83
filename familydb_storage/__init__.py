# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""FamilyDB Storage Adapter.

Partition-aware document storage over Azure Cosmos DB, with an in-memory
driver for tests and local runs.
"""

__version__ = "0.1.0"

from .azure_cosmos_document_store import AzureCosmosDocumentStore
from .document_store import (
    CollectionNotFoundError,
    DocumentAlreadyExistsError,
    DocumentNotFoundError,
    DocumentStore,
    DocumentStoreConnectionError,
    DocumentStoreError,
    DocumentStoreNotConnectedError,
    DocumentStoreThrottledError,
    FeedPage,
    extract_partition_key,
)
from .factory import create_document_store, create_document_store_from_config
from .inmemory_document_store import InMemoryDocumentStore
from .operations import (
    delete_document,
    ensure_document_exists,
    replace_existing_document,
    scan_all,
    upsert_and_verify,
)

__all__ = [
    # Version
    "__version__",
    # Document Stores
    "DocumentStore",
    "AzureCosmosDocumentStore",
    "InMemoryDocumentStore",
    "FeedPage",
    "create_document_store",
    "create_document_store_from_config",
    "extract_partition_key",
    # Operations
    "ensure_document_exists",
    "upsert_and_verify",
    "scan_all",
    "replace_existing_document",
    "delete_document",
    # Exceptions
    "DocumentStoreError",
    "DocumentStoreNotConnectedError",
    "DocumentStoreConnectionError",
    "DocumentNotFoundError",
    "DocumentAlreadyExistsError",
    "DocumentStoreThrottledError",
    "CollectionNotFoundError",
]

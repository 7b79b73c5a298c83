# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Azure Cosmos DB document store implementation."""

import copy
import logging
from typing import Any, NoReturn

from azure.core.exceptions import AzureError
from azure.cosmos import CosmosClient, PartitionKey
from azure.cosmos import exceptions as cosmos_exceptions

from familydb_config import StorageConfig

from .document_store import (
    DocumentAlreadyExistsError,
    DocumentNotFoundError,
    DocumentStore,
    DocumentStoreConnectionError,
    DocumentStoreError,
    DocumentStoreNotConnectedError,
    DocumentStoreThrottledError,
    FeedPage,
    is_valid_document_id,
    split_partition_key_path,
)
from .filters import build_where_clause

logger = logging.getLogger(__name__)

# Server-generated properties that callers never write back
SYSTEM_FIELDS = ("_rid", "_self", "_etag", "_attachments", "_ts")


def strip_system_fields(doc: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of a Cosmos document without server-generated fields."""
    return {key: value for key, value in doc.items() if key not in SYSTEM_FIELDS}


class AzureCosmosDocumentStore(DocumentStore):
    """Azure Cosmos DB document store implementation using Core (SQL) API.

    The store is bound to one database. Collections map to Cosmos containers
    and keep the partition key path they were created with, so every point
    operation can be routed with the document's partition key value.
    """

    @classmethod
    def from_config(cls, config: StorageConfig) -> "AzureCosmosDocumentStore":
        """Create an AzureCosmosDocumentStore from configuration.

        Args:
            config: Storage configuration with endpoint, key, database and an
                    optional request timeout.

        Returns:
            Configured AzureCosmosDocumentStore instance
        """
        kwargs: dict[str, Any] = {}

        if config.request_timeout is not None:
            kwargs["connection_timeout"] = config.request_timeout

        return cls(endpoint=config.endpoint, key=config.key, database=config.database, **kwargs)

    def __init__(
        self,
        endpoint: str | None = None,
        key: str | None = None,
        database: str = "FamilyDB",
        **kwargs,
    ):
        """Initialize Azure Cosmos DB document store.

        Args:
            endpoint: Cosmos DB endpoint URL (e.g., https://myaccount.documents.azure.com:443/).
            key: Cosmos DB account key (optional; if None, managed identity via DefaultAzureCredential will be used).
            database: Database name (default: "FamilyDB")
            **kwargs: Additional Cosmos client options (e.g., connection_timeout)

        Raises:
            ValueError: If endpoint is not provided
        """
        if not endpoint:
            raise ValueError("endpoint is required for AzureCosmosDocumentStore")

        self.endpoint = endpoint
        self.key = key
        self.database_name = database
        self.client_options = kwargs
        self.client: Any | None = None
        self.database: Any | None = None
        # Cache for containers: {collection_name: container_client}
        self.containers: dict[str, Any] = {}
        # Partition key path per collection: {collection_name: "/LastName"}
        self.partition_key_paths: dict[str, str] = {}

    def connect(self) -> None:
        """Create the Cosmos client.

        The database itself is created by create_database_if_not_exists().

        Raises:
            DocumentStoreConnectionError: If the client cannot be created
        """
        try:
            # If key is provided, use key-based authentication
            # Otherwise, use managed identity via DefaultAzureCredential
            if self.key:
                self.client = CosmosClient(self.endpoint, self.key, **self.client_options)
                logger.info("AzureCosmosDocumentStore: using key-based authentication")
            else:
                from azure.identity import DefaultAzureCredential

                credential = DefaultAzureCredential()
                self.client = CosmosClient(self.endpoint, credential=credential, **self.client_options)
                logger.info("AzureCosmosDocumentStore: using managed identity authentication")

            self.database = self.client.get_database_client(self.database_name)
            logger.info(f"AzureCosmosDocumentStore: connected to {self.endpoint}")

        except (cosmos_exceptions.CosmosHttpResponseError, AzureError) as e:
            logger.error(f"AzureCosmosDocumentStore: connection failed - {e}", exc_info=True)
            raise DocumentStoreConnectionError(
                f"Failed to connect to Cosmos DB at {self.endpoint}", status_code=getattr(e, "status_code", None)
            ) from e
        except Exception as e:
            logger.error(f"AzureCosmosDocumentStore: unexpected error during connect - {e}", exc_info=True)
            raise DocumentStoreConnectionError(f"Unexpected error connecting to Cosmos DB: {str(e)}") from e

    def disconnect(self) -> None:
        """Disconnect from Azure Cosmos DB.

        Note: CosmosClient doesn't require explicit disconnect, but we reset references.
        """
        if self.client:
            self.client = None
            self.database = None
            self.containers = {}
            logger.info("AzureCosmosDocumentStore: disconnected")

    def _require_client(self) -> Any:
        if self.client is None:
            raise DocumentStoreNotConnectedError("Not connected to Cosmos DB")
        return self.client

    def _raise_translated(self, e: Exception, action: str) -> NoReturn:
        """Translate a Cosmos/Azure exception into a DocumentStoreError and raise it."""
        if isinstance(e, cosmos_exceptions.CosmosResourceNotFoundError):
            raise DocumentNotFoundError(f"Not found while trying to {action}") from e
        if isinstance(e, cosmos_exceptions.CosmosResourceExistsError):
            raise DocumentAlreadyExistsError(f"Conflict while trying to {action}") from e
        if isinstance(e, cosmos_exceptions.CosmosHttpResponseError):
            if e.status_code == 429:
                logger.warning(f"AzureCosmosDocumentStore: throttled while trying to {action} - {e}")
                raise DocumentStoreThrottledError(f"Throttled while trying to {action}: {e.message}") from e
            logger.error(f"AzureCosmosDocumentStore: failed to {action} - {e}", exc_info=True)
            raise DocumentStoreError(f"Failed to {action}: {e.message}", status_code=e.status_code) from e
        logger.error(f"AzureCosmosDocumentStore: failed to {action} - {e}", exc_info=True)
        raise DocumentStoreError(f"Failed to {action}: {str(e)}") from e

    def create_database_if_not_exists(self) -> None:
        client = self._require_client()
        try:
            self.database = client.create_database_if_not_exists(id=self.database_name)
            logger.info(f"AzureCosmosDocumentStore: using database '{self.database_name}'")
        except (cosmos_exceptions.CosmosHttpResponseError, AzureError) as e:
            self._raise_translated(e, f"create/access database '{self.database_name}'")

    def delete_database(self) -> None:
        client = self._require_client()
        try:
            client.delete_database(self.database_name)
        except cosmos_exceptions.CosmosResourceNotFoundError as e:
            raise DocumentNotFoundError(f"Database {self.database_name} not found") from e
        except (cosmos_exceptions.CosmosHttpResponseError, AzureError) as e:
            self._raise_translated(e, f"delete database '{self.database_name}'")

        self.containers = {}
        self.partition_key_paths = {}
        logger.info(f"AzureCosmosDocumentStore: deleted database '{self.database_name}'")

    def create_collection_if_not_exists(self, collection: str, partition_key_path: str) -> None:
        self._require_client()
        split_partition_key_path(partition_key_path)

        try:
            container_client = self.database.create_container_if_not_exists(
                id=collection, partition_key=PartitionKey(path=partition_key_path)
            )
        except (cosmos_exceptions.CosmosHttpResponseError, AzureError) as e:
            self._raise_translated(e, f"create/access container '{collection}'")

        self.containers[collection] = container_client
        self.partition_key_paths[collection] = partition_key_path
        logger.info(
            f"AzureCosmosDocumentStore: initialized container '{collection}' "
            f"with partition key '{partition_key_path}'"
        )

    def _get_container(self, collection: str) -> Any:
        """Return the container client for a collection, caching it on first use."""
        self._require_client()
        if collection not in self.containers:
            self.containers[collection] = self.database.get_container_client(collection)
        return self.containers[collection]

    def get_partition_key_path(self, collection: str) -> str:
        if collection in self.partition_key_paths:
            return self.partition_key_paths[collection]

        container = self._get_container(collection)
        try:
            properties = container.read()
        except (cosmos_exceptions.CosmosHttpResponseError, AzureError) as e:
            self._raise_translated(e, f"read container '{collection}'")

        path = properties["partitionKey"]["paths"][0]
        self.partition_key_paths[collection] = path
        return path

    def read_document(self, collection: str, doc_id: str, partition_key: Any) -> dict[str, Any]:
        container = self._get_container(collection)
        try:
            doc = container.read_item(item=doc_id, partition_key=partition_key)
        except cosmos_exceptions.CosmosResourceNotFoundError as e:
            logger.debug(f"AzureCosmosDocumentStore: document {doc_id} not found in {collection}")
            raise DocumentNotFoundError(f"Document {doc_id} not found in collection {collection}") from e
        except (cosmos_exceptions.CosmosHttpResponseError, AzureError) as e:
            self._raise_translated(e, f"read document {doc_id} from {collection}")

        logger.debug(f"AzureCosmosDocumentStore: retrieved document {doc_id} from {collection}")
        return strip_system_fields(doc)

    def _checked_body(self, doc: dict[str, Any]) -> dict[str, Any]:
        doc_id = doc.get("id")
        if not is_valid_document_id(doc_id):
            raise DocumentStoreError(
                f"Invalid document ID '{doc_id}': IDs cannot contain '/', '\\', '#', '?', or control characters",
                status_code=400,
            )
        # Deep copy so nested structures of the caller's document are never shared
        return copy.deepcopy(doc)

    def insert_document(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        container = self._get_container(collection)
        body = self._checked_body(doc)
        try:
            created = container.create_item(body=body)
        except cosmos_exceptions.CosmosResourceExistsError as e:
            logger.debug(f"AzureCosmosDocumentStore: document with id {body['id']} already exists - {e}")
            raise DocumentAlreadyExistsError(
                f"Document with id {body['id']} already exists in collection {collection}"
            ) from e
        except (cosmos_exceptions.CosmosHttpResponseError, AzureError) as e:
            self._raise_translated(e, f"insert document into {collection}")

        logger.debug(f"AzureCosmosDocumentStore: inserted document {body['id']} into {collection}")
        return strip_system_fields(created)

    def upsert_document(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        container = self._get_container(collection)
        body = self._checked_body(doc)
        try:
            stored = container.upsert_item(body=body)
        except (cosmos_exceptions.CosmosHttpResponseError, AzureError) as e:
            self._raise_translated(e, f"upsert document {body['id']} into {collection}")

        logger.debug(f"AzureCosmosDocumentStore: upserted document {body['id']} into {collection}")
        return strip_system_fields(stored)

    def replace_document(self, collection: str, doc_id: str, doc: dict[str, Any]) -> dict[str, Any]:
        container = self._get_container(collection)
        body = self._checked_body({**doc, "id": doc_id})
        try:
            # Partition key is inferred from the body
            replaced = container.replace_item(item=doc_id, body=body)
        except cosmos_exceptions.CosmosResourceNotFoundError as e:
            logger.debug(f"AzureCosmosDocumentStore: document {doc_id} not found in {collection}")
            raise DocumentNotFoundError(f"Document {doc_id} not found in collection {collection}") from e
        except (cosmos_exceptions.CosmosHttpResponseError, AzureError) as e:
            self._raise_translated(e, f"replace document {doc_id} in {collection}")

        logger.debug(f"AzureCosmosDocumentStore: replaced document {doc_id} in {collection}")
        return strip_system_fields(replaced)

    def delete_document(self, collection: str, doc_id: str, partition_key: Any) -> None:
        container = self._get_container(collection)
        try:
            container.delete_item(item=doc_id, partition_key=partition_key)
        except cosmos_exceptions.CosmosResourceNotFoundError as e:
            logger.debug(f"AzureCosmosDocumentStore: document {doc_id} not found in {collection}")
            raise DocumentNotFoundError(f"Document {doc_id} not found in collection {collection}") from e
        except (cosmos_exceptions.CosmosHttpResponseError, AzureError) as e:
            self._raise_translated(e, f"delete document {doc_id} from {collection}")

        logger.debug(f"AzureCosmosDocumentStore: deleted document {doc_id} from {collection}")

    def _run_query(
        self,
        collection: str,
        query: str,
        parameters: list[dict[str, Any]],
        partition_key: Any,
        enable_cross_partition: bool,
        max_item_count: int | None,
    ) -> list[dict[str, Any]]:
        container = self._get_container(collection)

        options: dict[str, Any] = {}
        if partition_key is not None:
            options["partition_key"] = partition_key
        if enable_cross_partition:
            options["enable_cross_partition_query"] = True
        if max_item_count is not None:
            options["max_item_count"] = max_item_count

        try:
            items = list(container.query_items(query=query, parameters=parameters, **options))
        except (cosmos_exceptions.CosmosHttpResponseError, AzureError) as e:
            self._raise_translated(e, f"query documents from {collection}")

        logger.debug(f"AzureCosmosDocumentStore: query '{query}' on {collection} returned {len(items)} documents")
        return [strip_system_fields(item) for item in items]

    def query_documents(
        self,
        collection: str,
        filter_dict: dict[str, Any],
        partition_key: Any = None,
        enable_cross_partition: bool = False,
        max_item_count: int | None = None,
    ) -> list[dict[str, Any]]:
        self._require_scope(partition_key, enable_cross_partition)

        where = build_where_clause(filter_dict)
        if where is None:
            logger.debug("AzureCosmosDocumentStore: $in operator with empty list - returning empty result")
            return []

        clause, parameters = where
        query = "SELECT * FROM c"
        if clause:
            query += f" WHERE {clause}"

        return self._run_query(collection, query, parameters, partition_key, enable_cross_partition, max_item_count)

    def query_sql(
        self,
        collection: str,
        query: str,
        parameters: list[dict[str, Any]] | None = None,
        partition_key: Any = None,
        enable_cross_partition: bool = False,
        max_item_count: int | None = None,
    ) -> list[dict[str, Any]]:
        # Routing of native queries (including partition key extraction from
        # the WHERE clause) is left to the service.
        return self._run_query(
            collection, query, parameters or [], partition_key, enable_cross_partition, max_item_count
        )

    def read_feed_page(
        self, collection: str, max_item_count: int, continuation_token: str | None = None
    ) -> FeedPage:
        container = self._get_container(collection)
        if not isinstance(max_item_count, int) or isinstance(max_item_count, bool) or max_item_count < 1:
            raise DocumentStoreError(
                f"Invalid max_item_count '{max_item_count}': must be a positive integer", status_code=400
            )

        try:
            pager = container.read_all_items(max_item_count=max_item_count).by_page(continuation_token)
            page = next(pager, None)
            items = [strip_system_fields(item) for item in page] if page is not None else []
            next_token = pager.continuation_token if page is not None else None
        except (cosmos_exceptions.CosmosHttpResponseError, AzureError) as e:
            self._raise_translated(e, f"read feed of {collection}")

        logger.debug(f"AzureCosmosDocumentStore: feed page on {collection} returned {len(items)} documents")
        return FeedPage(items=items, continuation_token=next_token or None)

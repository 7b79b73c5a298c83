# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Abstract partition-aware document store interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


class DocumentStoreError(Exception):
    """Base exception for document store errors.

    Attributes:
        status_code: Status classification reported by the backend (HTTP-style
            code such as 404 or 429), or None when the failure was not
            classified by the backend.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DocumentStoreNotConnectedError(DocumentStoreError):
    """Exception raised when attempting operations on a disconnected store."""
    pass


class DocumentStoreConnectionError(DocumentStoreError):
    """Exception raised when connection to the document store fails."""
    pass


class DocumentNotFoundError(DocumentStoreError):
    """Exception raised when a document (or database) is not found."""

    def __init__(self, message: str, status_code: int | None = 404):
        super().__init__(message, status_code)


class DocumentAlreadyExistsError(DocumentStoreError):
    """Exception raised when inserting a document whose key already exists."""

    def __init__(self, message: str, status_code: int | None = 409):
        super().__init__(message, status_code)


class DocumentStoreThrottledError(DocumentStoreError):
    """Exception raised when the backend rejects a request due to rate limiting."""

    def __init__(self, message: str, status_code: int | None = 429):
        super().__init__(message, status_code)


class CollectionNotFoundError(DocumentStoreError):
    """Exception raised when a collection has not been created."""

    def __init__(self, message: str, status_code: int | None = 404):
        super().__init__(message, status_code)


@dataclass
class FeedPage:
    """One page of a paged feed read.

    Attributes:
        items: Documents in this page (may be empty even when more pages remain)
        continuation_token: Opaque cursor for the next page, or None when the
            feed is exhausted
    """
    items: list[dict[str, Any]] = field(default_factory=list)
    continuation_token: str | None = None

    @property
    def has_more(self) -> bool:
        return bool(self.continuation_token)


INVALID_ID_CHARS = ("/", "\\", "#", "?")


def is_valid_document_id(doc_id: Any) -> bool:
    """Validate that a document ID meets Cosmos DB requirements.

    Cosmos DB document IDs cannot contain: '/', '\\', '#', '?', or control characters.
    """
    if not doc_id or not isinstance(doc_id, str):
        return False

    if any(char in doc_id for char in INVALID_ID_CHARS):
        return False

    if any(ord(char) < 32 for char in doc_id):
        return False

    return True


def split_partition_key_path(partition_key_path: str) -> list[str]:
    """Split a partition key path like ``/Address/State`` into its components.

    Raises:
        ValueError: If the path does not start with '/' or has empty components
    """
    if not isinstance(partition_key_path, str) or not partition_key_path.startswith("/"):
        raise ValueError(f"Invalid partition key path '{partition_key_path}': must start with '/'")

    parts = partition_key_path[1:].split("/")
    if any(not part for part in parts):
        raise ValueError(f"Invalid partition key path '{partition_key_path}': empty component")
    return parts


def extract_partition_key(document: dict[str, Any], partition_key_path: str) -> Any:
    """Return the value stored at ``partition_key_path`` in a document.

    Args:
        document: Document to read from
        partition_key_path: Declared partition key path (e.g. "/LastName")

    Returns:
        The partition key value

    Raises:
        DocumentStoreError: If the document has no value at the path
    """
    value: Any = document
    for part in split_partition_key_path(partition_key_path):
        if not isinstance(value, dict) or part not in value:
            raise DocumentStoreError(
                f"Document {document.get('id')!r} has no partition key value at '{partition_key_path}'",
                status_code=400,
            )
        value = value[part]
    return value


class DocumentStore(ABC):
    """Abstract base class for partitioned document storage backends.

    A store is bound to a single database. Every point operation is addressed
    by ``(collection, id, partition key value)``.
    """

    database_name: str

    @abstractmethod
    def connect(self) -> None:
        """Connect to the document store.

        Raises:
            DocumentStoreConnectionError: If connection fails
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the document store."""
        pass

    @abstractmethod
    def create_database_if_not_exists(self) -> None:
        """Create the bound database unless it already exists."""
        pass

    @abstractmethod
    def delete_database(self) -> None:
        """Delete the bound database with every collection and document in it.

        Raises:
            DocumentNotFoundError: If the database does not exist
            DocumentStoreError: If the delete fails
        """
        pass

    @abstractmethod
    def create_collection_if_not_exists(self, collection: str, partition_key_path: str) -> None:
        """Create a collection partitioned on ``partition_key_path`` unless it exists.

        Args:
            collection: Collection name
            partition_key_path: Partition key path, e.g. "/LastName"
        """
        pass

    @abstractmethod
    def get_partition_key_path(self, collection: str) -> str:
        """Return the partition key path declared for a collection."""
        pass

    def partition_key_value(self, collection: str, document: dict[str, Any]) -> Any:
        """Return the document's value for the collection's partition key."""
        return extract_partition_key(document, self.get_partition_key_path(collection))

    @abstractmethod
    def read_document(self, collection: str, doc_id: str, partition_key: Any) -> dict[str, Any]:
        """Point-read a document.

        Raises:
            DocumentNotFoundError: If no document has this id and partition key
            DocumentStoreError: If the read fails for any other reason
        """
        pass

    @abstractmethod
    def insert_document(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        """Insert a new document.

        Returns:
            The stored document

        Raises:
            DocumentAlreadyExistsError: If the id already exists in the partition
            DocumentStoreError: If insertion fails
        """
        pass

    @abstractmethod
    def upsert_document(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        """Insert the document, or replace it when the key already exists.

        Returns:
            The stored document
        """
        pass

    @abstractmethod
    def replace_document(self, collection: str, doc_id: str, doc: dict[str, Any]) -> dict[str, Any]:
        """Replace an existing document in full.

        The partition key is taken from the new body.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        pass

    @abstractmethod
    def delete_document(self, collection: str, doc_id: str, partition_key: Any) -> None:
        """Delete a document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        pass

    @abstractmethod
    def query_documents(
        self,
        collection: str,
        filter_dict: dict[str, Any],
        partition_key: Any = None,
        enable_cross_partition: bool = False,
        max_item_count: int | None = None,
    ) -> list[dict[str, Any]]:
        """Query documents matching a structured filter.

        Filter keys are field paths (dots for nesting). Values are literals
        (equality) or operator dicts using ``$eq``, ``$ne``, ``$gt``, ``$gte``,
        ``$lt``, ``$lte``, ``$in``, ``$exists`` and ``$size``.

        Args:
            collection: Collection name
            filter_dict: Structured predicate
            partition_key: Restrict the query to one partition
            enable_cross_partition: Must be True when partition_key is None
            max_item_count: Page size hint for the backend

        Raises:
            DocumentStoreError: If the filter is invalid, the query would fan
                out without enable_cross_partition, or the query fails
        """
        pass

    @abstractmethod
    def query_sql(
        self,
        collection: str,
        query: str,
        parameters: list[dict[str, Any]] | None = None,
        partition_key: Any = None,
        enable_cross_partition: bool = False,
        max_item_count: int | None = None,
    ) -> list[dict[str, Any]]:
        """Run a query expressed in the store's native SQL dialect."""
        pass

    @abstractmethod
    def read_feed_page(
        self, collection: str, max_item_count: int, continuation_token: str | None = None
    ) -> FeedPage:
        """Read one page of the collection's document feed.

        Args:
            collection: Collection name
            max_item_count: Maximum number of documents in the page
            continuation_token: Token returned by the previous page, or None
                for the first page

        Returns:
            FeedPage whose continuation_token is None when the feed is exhausted
        """
        pass

    @staticmethod
    def _require_scope(partition_key: Any, enable_cross_partition: bool) -> None:
        if partition_key is None and not enable_cross_partition:
            raise DocumentStoreError(
                "Query without a partition key requires enable_cross_partition=True",
                status_code=400,
            )

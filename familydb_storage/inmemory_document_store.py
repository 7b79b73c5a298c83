# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""In-memory document store for testing and local development."""

import base64
import binascii
import copy
import json
import logging
from dataclasses import dataclass, field
from typing import Any

from familydb_config import StorageConfig

from .document_store import (
    CollectionNotFoundError,
    DocumentAlreadyExistsError,
    DocumentNotFoundError,
    DocumentStore,
    DocumentStoreError,
    DocumentStoreNotConnectedError,
    FeedPage,
    extract_partition_key,
    is_valid_document_id,
    split_partition_key_path,
)
from .filters import build_where_clause, matches_filter
from .sql_subset import parse_query

logger = logging.getLogger(__name__)


@dataclass
class InMemoryCollection:
    """A partitioned collection held in memory.

    Documents are keyed by (serialized partition key value, id) and kept in
    insertion order, which is also the feed order.
    """
    name: str
    partition_key_path: str
    documents: dict[tuple[str, str], dict[str, Any]] = field(default_factory=dict)


def _partition_slot(partition_key: Any) -> str:
    # Numbers compare by value, so 1 and 1.0 share a partition
    if isinstance(partition_key, float) and partition_key.is_integer():
        partition_key = int(partition_key)
    return json.dumps(partition_key, sort_keys=True)


def _encode_token(offset: int) -> str:
    return base64.urlsafe_b64encode(json.dumps({"offset": offset}).encode("utf-8")).decode("ascii")


def _decode_token(token: str) -> int:
    try:
        payload = json.loads(base64.urlsafe_b64decode(token.encode("ascii")))
        offset = payload["offset"]
    except (binascii.Error, ValueError, KeyError, TypeError, UnicodeEncodeError) as e:
        raise DocumentStoreError(f"Invalid continuation token '{token}'", status_code=400) from e
    if not isinstance(offset, int) or offset < 0:
        raise DocumentStoreError(f"Invalid continuation token '{token}'", status_code=400)
    return offset


class InMemoryDocumentStore(DocumentStore):
    """In-memory document store implementation for testing.

    Mirrors the addressing rules of the Cosmos DB driver: point operations
    need the exact partition key value, queries without a partition key must
    opt into cross-partition fan-out, and feed reads are paged through opaque
    continuation tokens.
    """

    @classmethod
    def from_config(cls, config: StorageConfig) -> "InMemoryDocumentStore":
        return cls(database=config.database)

    def __init__(self, database: str = "FamilyDB"):
        """Initialize in-memory document store.

        Args:
            database: Name of the database this store is bound to
        """
        self.database_name = database
        self.database_exists = False
        self.collections: dict[str, InMemoryCollection] = {}
        self.connected = False

    def connect(self) -> None:
        """Pretend to connect.

        Note: Always succeeds for in-memory store
        """
        self.connected = True
        logger.debug("InMemoryDocumentStore: connected")

    def disconnect(self) -> None:
        """Pretend to disconnect. Stored data survives a reconnect."""
        self.connected = False
        logger.debug("InMemoryDocumentStore: disconnected")

    def _require_connection(self) -> None:
        if not self.connected:
            raise DocumentStoreNotConnectedError("Not connected to in-memory store")

    def _get_collection(self, collection: str) -> InMemoryCollection:
        self._require_connection()
        try:
            return self.collections[collection]
        except KeyError:
            raise CollectionNotFoundError(
                f"Collection {collection} not found in database {self.database_name}"
            ) from None

    def create_database_if_not_exists(self) -> None:
        self._require_connection()
        if not self.database_exists:
            self.database_exists = True
            logger.info(f"InMemoryDocumentStore: created database '{self.database_name}'")

    def delete_database(self) -> None:
        self._require_connection()
        if not self.database_exists:
            raise DocumentNotFoundError(f"Database {self.database_name} not found")
        self.database_exists = False
        self.collections.clear()
        logger.info(f"InMemoryDocumentStore: deleted database '{self.database_name}'")

    def create_collection_if_not_exists(self, collection: str, partition_key_path: str) -> None:
        self._require_connection()
        if not self.database_exists:
            raise DocumentStoreError(f"Database {self.database_name} not found", status_code=404)
        split_partition_key_path(partition_key_path)

        existing = self.collections.get(collection)
        if existing is not None:
            if existing.partition_key_path != partition_key_path:
                logger.warning(
                    f"InMemoryDocumentStore: collection '{collection}' already partitioned on "
                    f"'{existing.partition_key_path}', ignoring '{partition_key_path}'"
                )
            return

        self.collections[collection] = InMemoryCollection(collection, partition_key_path)
        logger.info(
            f"InMemoryDocumentStore: created collection '{collection}' with partition key '{partition_key_path}'"
        )

    def get_partition_key_path(self, collection: str) -> str:
        return self._get_collection(collection).partition_key_path

    def _key_for(self, coll: InMemoryCollection, doc: dict[str, Any]) -> tuple[str, str]:
        doc_id = doc.get("id")
        if not is_valid_document_id(doc_id):
            raise DocumentStoreError(
                f"Invalid document ID '{doc_id}': IDs cannot contain '/', '\\', '#', '?', or control characters",
                status_code=400,
            )
        return _partition_slot(extract_partition_key(doc, coll.partition_key_path)), doc_id

    def read_document(self, collection: str, doc_id: str, partition_key: Any) -> dict[str, Any]:
        coll = self._get_collection(collection)
        doc = coll.documents.get((_partition_slot(partition_key), doc_id))
        if doc is None:
            logger.debug(f"InMemoryDocumentStore: document {doc_id} not found in {collection}")
            raise DocumentNotFoundError(f"Document {doc_id} not found in collection {collection}")
        logger.debug(f"InMemoryDocumentStore: retrieved document {doc_id} from {collection}")
        # Return a deep copy to prevent external mutations affecting stored data
        return copy.deepcopy(doc)

    def insert_document(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        coll = self._get_collection(collection)
        key = self._key_for(coll, doc)
        if key in coll.documents:
            raise DocumentAlreadyExistsError(f"Document with id {key[1]} already exists in collection {collection}")

        coll.documents[key] = copy.deepcopy(doc)
        logger.debug(f"InMemoryDocumentStore: inserted document {key[1]} into {collection}")
        return copy.deepcopy(doc)

    def upsert_document(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        coll = self._get_collection(collection)
        key = self._key_for(coll, doc)
        coll.documents[key] = copy.deepcopy(doc)
        logger.debug(f"InMemoryDocumentStore: upserted document {key[1]} into {collection}")
        return copy.deepcopy(doc)

    def replace_document(self, collection: str, doc_id: str, doc: dict[str, Any]) -> dict[str, Any]:
        coll = self._get_collection(collection)
        body = copy.deepcopy(doc)
        body["id"] = doc_id
        key = self._key_for(coll, body)
        if key not in coll.documents:
            logger.debug(f"InMemoryDocumentStore: document {doc_id} not found in {collection}")
            raise DocumentNotFoundError(f"Document {doc_id} not found in collection {collection}")

        coll.documents[key] = body
        logger.debug(f"InMemoryDocumentStore: replaced document {doc_id} in {collection}")
        return copy.deepcopy(body)

    def delete_document(self, collection: str, doc_id: str, partition_key: Any) -> None:
        coll = self._get_collection(collection)
        key = (_partition_slot(partition_key), doc_id)
        if key not in coll.documents:
            logger.debug(f"InMemoryDocumentStore: document {doc_id} not found in {collection}")
            raise DocumentNotFoundError(f"Document {doc_id} not found in collection {collection}")
        del coll.documents[key]
        logger.debug(f"InMemoryDocumentStore: deleted document {doc_id} from {collection}")

    def _scoped_documents(self, coll: InMemoryCollection, partition_key: Any) -> list[dict[str, Any]]:
        if partition_key is None:
            return list(coll.documents.values())
        slot = _partition_slot(partition_key)
        return [doc for (doc_slot, _), doc in coll.documents.items() if doc_slot == slot]

    def query_documents(
        self,
        collection: str,
        filter_dict: dict[str, Any],
        partition_key: Any = None,
        enable_cross_partition: bool = False,
        max_item_count: int | None = None,
    ) -> list[dict[str, Any]]:
        coll = self._get_collection(collection)
        self._require_scope(partition_key, enable_cross_partition)
        # Validates the filter the same way the SQL driver does
        if build_where_clause(filter_dict) is None:
            return []

        results = [
            copy.deepcopy(doc)
            for doc in self._scoped_documents(coll, partition_key)
            if matches_filter(doc, filter_dict)
        ]
        logger.debug(
            f"InMemoryDocumentStore: query on {collection} with {filter_dict} returned {len(results)} documents"
        )
        return results

    def query_sql(
        self,
        collection: str,
        query: str,
        parameters: list[dict[str, Any]] | None = None,
        partition_key: Any = None,
        enable_cross_partition: bool = False,
        max_item_count: int | None = None,
    ) -> list[dict[str, Any]]:
        coll = self._get_collection(collection)
        parsed = parse_query(query, parameters)

        # A filter on the partition key path pins the query to one partition
        partition_field = ".".join(split_partition_key_path(coll.partition_key_path))
        pinned = any(c.path == partition_field and c.operator == "$eq" for c in parsed.conditions)
        if not pinned:
            self._require_scope(partition_key, enable_cross_partition)

        results = [
            copy.deepcopy(doc)
            for doc in self._scoped_documents(coll, partition_key)
            if parsed.matches(doc)
        ]
        logger.debug(f"InMemoryDocumentStore: query '{query}' on {collection} returned {len(results)} documents")
        return results

    def read_feed_page(
        self, collection: str, max_item_count: int, continuation_token: str | None = None
    ) -> FeedPage:
        coll = self._get_collection(collection)
        if not isinstance(max_item_count, int) or isinstance(max_item_count, bool) or max_item_count < 1:
            raise DocumentStoreError(
                f"Invalid max_item_count '{max_item_count}': must be a positive integer", status_code=400
            )

        offset = _decode_token(continuation_token) if continuation_token else 0
        documents = list(coll.documents.values())
        end = offset + max_item_count
        items = [copy.deepcopy(doc) for doc in documents[offset:end]]
        next_token = _encode_token(end) if end < len(documents) else None

        logger.debug(
            f"InMemoryDocumentStore: feed page on {collection} at offset {offset} returned {len(items)} documents"
        )
        return FeedPage(items=items, continuation_token=next_token)

    def clear_collection(self, collection: str) -> None:
        """Clear all documents in a collection (useful for testing)."""
        self._get_collection(collection).documents.clear()
        logger.debug(f"InMemoryDocumentStore: cleared collection {collection}")

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Partition-aware document operations built on a DocumentStore.

These helpers encode the few patterns with behavior of their own:
idempotent creation, upsert-and-verify, continuation-token scans, and
replace/delete addressed by (id, partition key value).
"""

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from .document_store import DocumentNotFoundError, DocumentStore, DocumentStoreError

logger = logging.getLogger(__name__)


def ensure_document_exists(store: DocumentStore, collection: str, document: dict[str, Any]) -> bool:
    """Create a document unless one with the same id and partition key exists.

    An existing document is left untouched. Only DocumentNotFoundError from
    the point read is recovered; every other error propagates unchanged.

    The read and the insert are two round trips, so concurrent writers can
    race between them. The loser then sees DocumentAlreadyExistsError.

    Args:
        store: Connected document store
        collection: Collection name
        document: Document to create

    Returns:
        True if the document was created, False if it already existed
    """
    partition_key = store.partition_key_value(collection, document)
    try:
        store.read_document(collection, document["id"], partition_key)
    except DocumentNotFoundError:
        store.insert_document(collection, document)
        logger.info(f"Created document {document['id']} in {collection}")
        return True

    logger.info(f"Found document {document['id']} in {collection}")
    return False


def upsert_and_verify(store: DocumentStore, collection: str, document: dict[str, Any]) -> dict[str, Any]:
    """Upsert a document, then point-read it back to confirm it is visible.

    No retries are attempted here; retry policy belongs to the store client.

    Returns:
        The document as read back from the store

    Raises:
        DocumentStoreError: Logged with its status classification and re-raised
    """
    try:
        store.upsert_document(collection, document)
        return store.read_document(collection, document["id"], store.partition_key_value(collection, document))
    except DocumentStoreError as e:
        logger.error(
            f"{e.status_code} error occurred while upserting document {document.get('id')} "
            f"into {collection}: {e}"
        )
        raise


@dataclass(frozen=True)
class HasMore:
    """Scan state: another page is available at ``token`` (None for the first page)."""
    token: str | None


@dataclass(frozen=True)
class Done:
    """Scan state: the feed is exhausted."""


ScanState = HasMore | Done


def next_scan_state(continuation_token: str | None) -> ScanState:
    """Map a page's continuation token to the next scan state.

    Only an absent or empty token ends the scan; page contents never do.
    """
    return HasMore(continuation_token) if continuation_token else Done()


def scan_all(store: DocumentStore, collection: str, page_size: int = 100) -> Iterator[dict[str, Any]]:
    """Lazily yield every document in a collection, one feed page at a time.

    The continuation token lives only in this generator, so a scan can be
    restarted from the beginning but not resumed.

    Args:
        store: Connected document store
        collection: Collection name
        page_size: Maximum documents requested per page

    Raises:
        ValueError: If page_size is not a positive integer
    """
    if not isinstance(page_size, int) or isinstance(page_size, bool) or page_size < 1:
        raise ValueError(f"page_size must be a positive integer, got {page_size!r}")

    return _scan(store, collection, page_size)


def _scan(store: DocumentStore, collection: str, page_size: int) -> Iterator[dict[str, Any]]:
    state: ScanState = HasMore(None)
    pages = 0
    while isinstance(state, HasMore):
        page = store.read_feed_page(collection, max_item_count=page_size, continuation_token=state.token)
        pages += 1
        yield from page.items
        state = next_scan_state(page.continuation_token)

    logger.debug(f"Scanned {collection} in {pages} page(s)")


def replace_existing_document(
    store: DocumentStore,
    collection: str,
    doc_id: str,
    new_document: dict[str, Any],
    on_found: Callable[[dict[str, Any]], None] | None = None,
) -> dict[str, Any]:
    """Replace a document after confirming that it exists.

    The existence check uses ``doc_id`` and the partition key of
    ``new_document``. Nothing is written when the read fails.

    Args:
        store: Connected document store
        collection: Collection name
        doc_id: Id of the document to replace
        new_document: Full replacement body
        on_found: Called with the current document between the read and the replace

    Raises:
        DocumentNotFoundError: If the target document does not exist
    """
    partition_key = store.partition_key_value(collection, new_document)
    current = store.read_document(collection, doc_id, partition_key)
    logger.info(f"Found document to replace {doc_id} in {collection}")
    if on_found is not None:
        on_found(current)

    replaced = store.replace_document(collection, doc_id, new_document)
    logger.info(f"Replaced document {doc_id} in {collection}")
    return replaced


def delete_document(store: DocumentStore, collection: str, document: dict[str, Any]) -> None:
    """Delete a document addressed by its id and partition key value.

    Raises:
        DocumentNotFoundError: If the document does not exist
    """
    store.delete_document(collection, document["id"], store.partition_key_value(collection, document))
    logger.info(f"Deleted document {document['id']} from {collection}")

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Tests for partition-aware document operations."""

from unittest.mock import MagicMock

import pytest

from familydb_storage import (
    DocumentNotFoundError,
    DocumentStoreError,
    DocumentStoreThrottledError,
    FeedPage,
    delete_document,
    ensure_document_exists,
    replace_existing_document,
    scan_all,
    upsert_and_verify,
)
from familydb_storage.operations import Done, HasMore, next_scan_state
from tests.fixtures import create_family_doc

COLLECTION = "families"


class TestEnsureDocumentExists:
    """Tests for idempotent document creation."""

    def test_creates_missing_document(self, store):
        doc = create_family_doc("Andersen.1", "Andersen")

        created = ensure_document_exists(store, COLLECTION, doc)

        assert created is True
        assert store.read_document(COLLECTION, "Andersen.1", "Andersen")["LastName"] == "Andersen"

    def test_second_call_performs_no_write(self, store):
        doc = create_family_doc("Andersen.1", "Andersen")
        ensure_document_exists(store, COLLECTION, doc)

        store.insert_document = MagicMock(wraps=store.insert_document)
        store.upsert_document = MagicMock(wraps=store.upsert_document)
        created = ensure_document_exists(store, COLLECTION, doc)

        assert created is False
        store.insert_document.assert_not_called()
        store.upsert_document.assert_not_called()
        assert len(list(scan_all(store, COLLECTION, page_size=10))) == 1

    def test_existing_document_is_not_overwritten(self, store):
        ensure_document_exists(store, COLLECTION, create_family_doc("Andersen.1", "Andersen", grade=5))

        ensure_document_exists(store, COLLECTION, create_family_doc("Andersen.1", "Andersen", grade=9))

        doc = store.read_document(COLLECTION, "Andersen.1", "Andersen")
        assert doc["Children"][0]["Grade"] == 5

    def test_same_id_in_other_partition_is_a_different_document(self, store):
        ensure_document_exists(store, COLLECTION, create_family_doc("Smith.1", "Smith"))

        created = ensure_document_exists(store, COLLECTION, create_family_doc("Smith.1", "Smyth"))

        assert created is True
        assert len(list(scan_all(store, COLLECTION, page_size=10))) == 2

    def test_other_read_errors_propagate(self):
        store = MagicMock()
        store.partition_key_value.return_value = "Andersen"
        store.read_document.side_effect = DocumentStoreThrottledError("Throttled")

        with pytest.raises(DocumentStoreThrottledError):
            ensure_document_exists(store, COLLECTION, create_family_doc("Andersen.1", "Andersen"))

        store.insert_document.assert_not_called()

    def test_unauthorized_read_is_not_treated_as_missing(self):
        store = MagicMock()
        store.partition_key_value.return_value = "Andersen"
        store.read_document.side_effect = DocumentStoreError("Unauthorized", status_code=401)

        with pytest.raises(DocumentStoreError) as exc_info:
            ensure_document_exists(store, COLLECTION, create_family_doc("Andersen.1", "Andersen"))

        assert exc_info.value.status_code == 401
        store.insert_document.assert_not_called()


class TestUpsertAndVerify:
    """Tests for upsert followed by a confirming read."""

    def test_upsert_new_key_creates_document(self, store):
        stored = upsert_and_verify(store, COLLECTION, create_family_doc("Stanford.9", "Stanford"))

        assert stored["id"] == "Stanford.9"
        assert store.read_document(COLLECTION, "Stanford.9", "Stanford")["id"] == "Stanford.9"

    def test_upsert_existing_key_overwrites_fields(self, store):
        upsert_and_verify(store, COLLECTION, create_family_doc("Stanford.9", "Stanford", grade=8))

        stored = upsert_and_verify(store, COLLECTION, create_family_doc("Stanford.9", "Stanford", grade=2))

        assert stored["Children"][0]["Grade"] == 2
        assert store.read_document(COLLECTION, "Stanford.9", "Stanford")["Children"][0]["Grade"] == 2
        assert len(list(scan_all(store, COLLECTION, page_size=10))) == 1

    def test_failure_is_logged_and_reraised(self, caplog):
        store = MagicMock()
        store.upsert_document.side_effect = DocumentStoreThrottledError("Request rate is large")

        with pytest.raises(DocumentStoreThrottledError):
            upsert_and_verify(store, COLLECTION, create_family_doc("Stanford.9", "Stanford"))

        assert "429 error occurred" in caplog.text
        store.read_document.assert_not_called()

    def test_verify_read_failure_propagates(self):
        store = MagicMock()
        store.partition_key_value.return_value = "Stanford"
        store.read_document.side_effect = DocumentNotFoundError("not visible yet")

        with pytest.raises(DocumentNotFoundError):
            upsert_and_verify(store, COLLECTION, create_family_doc("Stanford.9", "Stanford"))

        store.upsert_document.assert_called_once()


class TestScanAll:
    """Tests for the continuation-token scan."""

    @pytest.mark.parametrize("page_size", [1, 2, 3, 7, 10, 100])
    def test_emits_every_document_exactly_once(self, store, page_size):
        ids = [f"Family.{i}" for i in range(10)]
        for i, doc_id in enumerate(ids):
            store.insert_document(COLLECTION, create_family_doc(doc_id, f"Name{i % 3}"))

        scanned = [doc["id"] for doc in scan_all(store, COLLECTION, page_size=page_size)]

        assert sorted(scanned) == sorted(ids)
        assert len(scanned) == len(set(scanned))

    def test_empty_collection(self, store):
        assert list(scan_all(store, COLLECTION, page_size=5)) == []

    def test_empty_page_with_token_does_not_stop_scan(self):
        store = MagicMock()
        store.read_feed_page.side_effect = [
            FeedPage(items=[{"id": "a"}], continuation_token="t1"),
            FeedPage(items=[], continuation_token="t2"),
            FeedPage(items=[{"id": "b"}], continuation_token=None),
        ]

        scanned = [doc["id"] for doc in scan_all(store, COLLECTION, page_size=1)]

        assert scanned == ["a", "b"]
        tokens = [call.kwargs["continuation_token"] for call in store.read_feed_page.call_args_list]
        assert tokens == [None, "t1", "t2"]

    def test_empty_string_token_ends_scan(self):
        store = MagicMock()
        store.read_feed_page.return_value = FeedPage(items=[{"id": "a"}], continuation_token="")

        assert [doc["id"] for doc in scan_all(store, COLLECTION, page_size=1)] == ["a"]
        assert store.read_feed_page.call_count == 1

    def test_scan_is_lazy(self):
        store = MagicMock()
        store.read_feed_page.side_effect = [
            FeedPage(items=[{"id": "a"}], continuation_token="t1"),
            FeedPage(items=[{"id": "b"}], continuation_token=None),
        ]

        iterator = scan_all(store, COLLECTION, page_size=1)
        store.read_feed_page.assert_not_called()

        assert next(iterator)["id"] == "a"
        assert store.read_feed_page.call_count == 1

    @pytest.mark.parametrize("page_size", [0, -1, "5", True, None])
    def test_invalid_page_size(self, page_size):
        with pytest.raises(ValueError, match="page_size"):
            scan_all(MagicMock(), COLLECTION, page_size=page_size)

    def test_next_scan_state(self):
        assert next_scan_state("abc") == HasMore("abc")
        assert next_scan_state(None) == Done()
        assert next_scan_state("") == Done()


class TestReplaceAndDelete:
    """Tests for replace and delete addressed by id and partition key."""

    def test_replace_existing_document(self, store):
        store.insert_document(COLLECTION, create_family_doc("Andersen.1", "Andersen", grade=5))

        replace_existing_document(
            store, COLLECTION, "Andersen.1", create_family_doc("Andersen.1", "Andersen", grade=6)
        )

        assert store.read_document(COLLECTION, "Andersen.1", "Andersen")["Children"][0]["Grade"] == 6

    def test_replace_missing_document_leaves_collection_unchanged(self, store):
        store.insert_document(COLLECTION, create_family_doc("Andersen.1", "Andersen"))
        store.replace_document = MagicMock(wraps=store.replace_document)

        with pytest.raises(DocumentNotFoundError):
            replace_existing_document(
                store, COLLECTION, "Missing.1", create_family_doc("Missing.1", "Andersen")
            )

        store.replace_document.assert_not_called()
        assert [doc["id"] for doc in scan_all(store, COLLECTION, page_size=10)] == ["Andersen.1"]

    def test_on_found_runs_before_the_write(self, store):
        store.insert_document(COLLECTION, create_family_doc("Andersen.1", "Andersen", grade=5))
        seen = []

        def on_found(current):
            stored = store.read_document(COLLECTION, "Andersen.1", "Andersen")
            seen.append((current["Children"][0]["Grade"], stored["Children"][0]["Grade"]))

        replace_existing_document(
            store,
            COLLECTION,
            "Andersen.1",
            create_family_doc("Andersen.1", "Andersen", grade=6),
            on_found=on_found,
        )

        assert seen == [(5, 5)]

    def test_on_found_is_skipped_for_missing_document(self, store):
        on_found = MagicMock()

        with pytest.raises(DocumentNotFoundError):
            replace_existing_document(
                store, COLLECTION, "Missing.1", create_family_doc("Missing.1", "Andersen"), on_found=on_found
            )

        on_found.assert_not_called()

    def test_delete_then_read_is_not_found(self, store):
        doc = create_family_doc("Wakefield.7", "Wakefield")
        store.insert_document(COLLECTION, doc)

        delete_document(store, COLLECTION, doc)

        with pytest.raises(DocumentNotFoundError):
            store.read_document(COLLECTION, "Wakefield.7", "Wakefield")

    def test_delete_missing_document(self, store):
        with pytest.raises(DocumentNotFoundError):
            delete_document(store, COLLECTION, create_family_doc("Wakefield.7", "Wakefield"))

    def test_delete_with_wrong_partition_key_is_not_found(self, store):
        store.insert_document(COLLECTION, create_family_doc("Wakefield.7", "Wakefield"))

        with pytest.raises(DocumentNotFoundError):
            delete_document(store, COLLECTION, create_family_doc("Wakefield.7", "Miller"))


def test_andersen_lifecycle(store):
    """Create, re-ensure, replace and delete a single document."""
    doc = {"id": "A.1", "LastName": "Andersen", "grade": 5}
    store.insert_document(COLLECTION, doc)

    assert ensure_document_exists(store, COLLECTION, doc) is False
    assert len(list(scan_all(store, COLLECTION, page_size=1))) == 1
    assert store.read_document(COLLECTION, "A.1", "Andersen")["grade"] == 5

    replace_existing_document(store, COLLECTION, "A.1", {**doc, "grade": 6})
    assert store.read_document(COLLECTION, "A.1", "Andersen")["grade"] == 6

    delete_document(store, COLLECTION, doc)
    with pytest.raises(DocumentNotFoundError):
        store.read_document(COLLECTION, "A.1", "Andersen")

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Tests for the in-memory document store."""

import pytest

from familydb_config import StorageConfig
from familydb_storage import (
    CollectionNotFoundError,
    DocumentAlreadyExistsError,
    DocumentNotFoundError,
    DocumentStoreError,
    DocumentStoreNotConnectedError,
    InMemoryDocumentStore,
)
from tests.fixtures import create_family_doc

COLLECTION = "families"


class TestLifecycle:
    """Tests for connection, database and collection handling."""

    def test_from_config(self):
        store = InMemoryDocumentStore.from_config(StorageConfig(database="Other"))

        assert store.database_name == "Other"
        assert not store.connected

    def test_operations_require_connection(self):
        store = InMemoryDocumentStore()

        with pytest.raises(DocumentStoreNotConnectedError):
            store.create_database_if_not_exists()

    def test_disconnect_keeps_data(self, store):
        store.insert_document(COLLECTION, create_family_doc("Andersen.1", "Andersen"))

        store.disconnect()
        with pytest.raises(DocumentStoreNotConnectedError):
            store.read_document(COLLECTION, "Andersen.1", "Andersen")

        store.connect()
        assert store.read_document(COLLECTION, "Andersen.1", "Andersen")["id"] == "Andersen.1"

    def test_create_database_is_idempotent(self, store):
        store.insert_document(COLLECTION, create_family_doc("Andersen.1", "Andersen"))

        store.create_database_if_not_exists()

        assert store.read_document(COLLECTION, "Andersen.1", "Andersen")["id"] == "Andersen.1"

    def test_create_collection_requires_database(self):
        store = InMemoryDocumentStore()
        store.connect()

        with pytest.raises(DocumentStoreError) as exc_info:
            store.create_collection_if_not_exists(COLLECTION, "/LastName")

        assert exc_info.value.status_code == 404

    def test_create_collection_keeps_existing_partition_key(self, store):
        store.create_collection_if_not_exists(COLLECTION, "/Address/State")

        assert store.get_partition_key_path(COLLECTION) == "/LastName"

    @pytest.mark.parametrize("path", ["LastName", "/", "/Address//State", ""])
    def test_create_collection_rejects_bad_path(self, store, path):
        with pytest.raises(ValueError):
            store.create_collection_if_not_exists("other", path)

    def test_unknown_collection(self, store):
        with pytest.raises(CollectionNotFoundError) as exc_info:
            store.read_document("missing", "Andersen.1", "Andersen")

        assert exc_info.value.status_code == 404

    def test_delete_database_removes_everything(self, store):
        store.insert_document(COLLECTION, create_family_doc("Andersen.1", "Andersen"))

        store.delete_database()

        assert not store.database_exists
        with pytest.raises(CollectionNotFoundError):
            store.read_document(COLLECTION, "Andersen.1", "Andersen")

    def test_delete_missing_database(self, store):
        store.delete_database()

        with pytest.raises(DocumentNotFoundError):
            store.delete_database()

    def test_clear_collection(self, store):
        store.insert_document(COLLECTION, create_family_doc("Andersen.1", "Andersen"))

        store.clear_collection(COLLECTION)

        assert store.collections[COLLECTION].documents == {}


class TestPointOperations:
    """Tests for reads and writes addressed by id and partition key."""

    def test_insert_and_read(self, store):
        doc = create_family_doc("Andersen.1", "Andersen")

        store.insert_document(COLLECTION, doc)

        assert store.read_document(COLLECTION, "Andersen.1", "Andersen") == doc

    def test_read_with_wrong_partition_key(self, store):
        store.insert_document(COLLECTION, create_family_doc("Andersen.1", "Andersen"))

        with pytest.raises(DocumentNotFoundError) as exc_info:
            store.read_document(COLLECTION, "Andersen.1", "Wakefield")

        assert exc_info.value.status_code == 404

    def test_insert_duplicate(self, store):
        store.insert_document(COLLECTION, create_family_doc("Andersen.1", "Andersen"))

        with pytest.raises(DocumentAlreadyExistsError) as exc_info:
            store.insert_document(COLLECTION, create_family_doc("Andersen.1", "Andersen"))

        assert exc_info.value.status_code == 409

    def test_insert_without_partition_key_value(self, store):
        with pytest.raises(DocumentStoreError) as exc_info:
            store.insert_document(COLLECTION, {"id": "NoName.1"})

        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("doc_id", ["a/b", "a\\b", "a#b", "a?b", "a\nb", "", None, 7])
    def test_insert_rejects_invalid_ids(self, store, doc_id):
        with pytest.raises(DocumentStoreError):
            store.insert_document(COLLECTION, {"id": doc_id, "LastName": "Andersen"})

    def test_stored_documents_are_isolated_from_callers(self, store):
        doc = create_family_doc("Andersen.1", "Andersen", grade=5)
        store.insert_document(COLLECTION, doc)

        doc["Children"][0]["Grade"] = 99
        read_back = store.read_document(COLLECTION, "Andersen.1", "Andersen")
        read_back["Children"][0]["Grade"] = 42

        assert store.read_document(COLLECTION, "Andersen.1", "Andersen")["Children"][0]["Grade"] == 5

    def test_nested_partition_key(self, store):
        store.create_collection_if_not_exists("by_state", "/Address/State")
        doc = {"id": "Wakefield.7", "Address": {"State": "NY"}}

        store.insert_document("by_state", doc)

        assert store.read_document("by_state", "Wakefield.7", "NY") == doc
        assert store.partition_key_value("by_state", doc) == "NY"

    def test_numeric_partition_key_matches_by_value(self, store):
        store.create_collection_if_not_exists("by_number", "/n")
        store.insert_document("by_number", {"id": "a", "n": 1})

        assert store.read_document("by_number", "a", 1.0)["id"] == "a"
        with pytest.raises(DocumentAlreadyExistsError):
            store.insert_document("by_number", {"id": "a", "n": 1.0})

        store.delete_document("by_number", "a", 1.0)
        with pytest.raises(DocumentNotFoundError):
            store.read_document("by_number", "a", 1)

    def test_boolean_partition_key_is_not_a_number(self, store):
        store.create_collection_if_not_exists("by_flag", "/n")
        store.insert_document("by_flag", {"id": "a", "n": True})

        with pytest.raises(DocumentNotFoundError):
            store.read_document("by_flag", "a", 1)

    def test_replace_uses_path_id(self, store):
        store.insert_document(COLLECTION, create_family_doc("Andersen.1", "Andersen", grade=5))

        replaced = store.replace_document(
            COLLECTION, "Andersen.1", {"LastName": "Andersen", "Children": [{"Grade": 6}]}
        )

        assert replaced["id"] == "Andersen.1"
        assert store.read_document(COLLECTION, "Andersen.1", "Andersen")["Children"] == [{"Grade": 6}]

    def test_replace_missing(self, store):
        with pytest.raises(DocumentNotFoundError):
            store.replace_document(COLLECTION, "Andersen.1", create_family_doc("Andersen.1", "Andersen"))

        assert store.collections[COLLECTION].documents == {}

    def test_delete(self, store):
        store.insert_document(COLLECTION, create_family_doc("Andersen.1", "Andersen"))

        store.delete_document(COLLECTION, "Andersen.1", "Andersen")

        with pytest.raises(DocumentNotFoundError):
            store.read_document(COLLECTION, "Andersen.1", "Andersen")


class TestQueries:
    """Tests for structured and SQL queries."""

    @pytest.fixture(autouse=True)
    def families(self, store):
        store.insert_document(COLLECTION, create_family_doc("Andersen.1", "Andersen", is_registered=True))
        store.insert_document(COLLECTION, create_family_doc("Wakefield.7", "Wakefield", children=2))
        store.insert_document(COLLECTION, create_family_doc("Stanford.9", "Stanford", children=2))
        store.insert_document(
            COLLECTION, create_family_doc("Stanford.11", "Stanford", is_registered=True)
        )

    def test_in_partition_query(self, store):
        results = store.query_documents(COLLECTION, {"IsRegistered": False}, partition_key="Stanford")

        assert [doc["id"] for doc in results] == ["Stanford.9"]

    def test_cross_partition_query(self, store):
        results = store.query_documents(
            COLLECTION,
            {"IsRegistered": False, "Children": {"$size": {"$gt": 1}}},
            enable_cross_partition=True,
        )

        assert sorted(doc["id"] for doc in results) == ["Stanford.9", "Wakefield.7"]

    @pytest.mark.parametrize("filter_dict", [{"IsRegistered": False}, {"IsRegistered": True}, {}])
    def test_in_partition_and_cross_partition_agree(self, store, filter_dict):
        scoped = store.query_documents(COLLECTION, filter_dict, partition_key="Stanford")
        fanned_out = store.query_documents(
            COLLECTION, {**filter_dict, "LastName": "Stanford"}, enable_cross_partition=True
        )

        assert sorted(doc["id"] for doc in scoped) == sorted(doc["id"] for doc in fanned_out)

    def test_query_without_scope_is_rejected(self, store):
        with pytest.raises(DocumentStoreError) as exc_info:
            store.query_documents(COLLECTION, {"IsRegistered": False})

        assert exc_info.value.status_code == 400

    def test_query_with_invalid_filter(self, store):
        with pytest.raises(DocumentStoreError):
            store.query_documents(COLLECTION, {"IsRegistered": {"$regex": "x"}}, enable_cross_partition=True)

    def test_empty_in_list(self, store):
        assert store.query_documents(COLLECTION, {"id": {"$in": []}}, enable_cross_partition=True) == []

    def test_sql_query_pinned_to_partition(self, store):
        results = store.query_sql(COLLECTION, "SELECT * FROM Family WHERE Family.LastName = 'Andersen'")

        assert [doc["id"] for doc in results] == ["Andersen.1"]

    def test_sql_query_with_parameters(self, store):
        results = store.query_sql(
            COLLECTION,
            "SELECT * FROM c WHERE c.IsRegistered = @registered",
            parameters=[{"name": "@registered", "value": True}],
            enable_cross_partition=True,
        )

        assert sorted(doc["id"] for doc in results) == ["Andersen.1", "Stanford.11"]

    def test_sql_query_fanning_out_needs_opt_in(self, store):
        with pytest.raises(DocumentStoreError) as exc_info:
            store.query_sql(COLLECTION, "SELECT * FROM c WHERE c.IsRegistered = true")

        assert exc_info.value.status_code == 400

    def test_sql_and_structured_queries_agree(self, store):
        structured = store.query_documents(
            COLLECTION, {"LastName": "Andersen"}, enable_cross_partition=True
        )
        sql = store.query_sql(COLLECTION, "SELECT * FROM Family WHERE Family.LastName = 'Andersen'")

        assert structured == sql

    def test_unsupported_sql(self, store):
        with pytest.raises(DocumentStoreError) as exc_info:
            store.query_sql(COLLECTION, "SELECT c.id FROM c", enable_cross_partition=True)

        assert exc_info.value.status_code == 400


class TestFeedPages:
    """Tests for paged feed reads."""

    def test_pages_follow_insertion_order(self, store):
        for i in range(3):
            store.insert_document(COLLECTION, create_family_doc(f"Family.{i}", "Andersen"))

        first = store.read_feed_page(COLLECTION, max_item_count=2)
        second = store.read_feed_page(COLLECTION, max_item_count=2, continuation_token=first.continuation_token)

        assert [doc["id"] for doc in first.items] == ["Family.0", "Family.1"]
        assert first.has_more
        assert [doc["id"] for doc in second.items] == ["Family.2"]
        assert second.continuation_token is None

    def test_exact_fit_has_no_token(self, store):
        for i in range(2):
            store.insert_document(COLLECTION, create_family_doc(f"Family.{i}", "Andersen"))

        page = store.read_feed_page(COLLECTION, max_item_count=2)

        assert len(page.items) == 2
        assert page.continuation_token is None

    def test_empty_collection(self, store):
        page = store.read_feed_page(COLLECTION, max_item_count=1)

        assert page.items == []
        assert not page.has_more

    @pytest.mark.parametrize("token", ["not-base64!", "e30=", "eyJvZmZzZXQiOiAtMX0="])
    def test_invalid_token(self, store, token):
        with pytest.raises(DocumentStoreError) as exc_info:
            store.read_feed_page(COLLECTION, max_item_count=1, continuation_token=token)

        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("max_item_count", [0, -1, True, "2"])
    def test_invalid_max_item_count(self, store, max_item_count):
        with pytest.raises(DocumentStoreError):
            store.read_feed_page(COLLECTION, max_item_count=max_item_count)

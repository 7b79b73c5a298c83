# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Nine-step walkthrough of document operations against a partitioned collection."""

from dataclasses import dataclass, field
from typing import Any

from familydb_config import DemoConfig
from familydb_logging import Logger
from familydb_storage import (
    DocumentStore,
    delete_document,
    ensure_document_exists,
    replace_existing_document,
    scan_all,
    upsert_and_verify,
)

from .console import Console
from .models import Family
from .sample_data import andersen_family, stanford_family_9, stanford_family_11, wakefield_family

# The queries below address partitions by family name
PARTITION_KEY_PATH = "/LastName"
IN_PARTITION_QUERY = {"IsRegistered": False}
IN_PARTITION_KEY = "Stanford"
CROSS_PARTITION_QUERY = {"IsRegistered": False, "Children": {"$size": {"$gt": 1}}}
SQL_QUERY = "SELECT * FROM Family WHERE Family.LastName = 'Andersen'"


@dataclass
class DemoReport:
    """What a run did, step by step."""
    created: list[str] = field(default_factory=list)
    found: list[str] = field(default_factory=list)
    upserted: list[str] = field(default_factory=list)
    queries: dict[str, list[str]] = field(default_factory=dict)
    scanned: list[str] = field(default_factory=list)
    replaced: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    database_deleted: bool = False


class FamilyDemo:
    """Runs the walkthrough against a connected document store."""

    def __init__(self, store: DocumentStore, config: DemoConfig, console: Console, logger: Logger):
        self.store = store
        self.config = config
        self.console = console
        self.logger = logger
        self.collection = config.collection
        self.report = DemoReport()

    # ================ Create calls ================

    def create_database(self) -> None:
        self.store.create_database_if_not_exists()
        self.logger.info("Database ready", database=self.store.database_name)
        self.console.write_and_prompt(f"Created Database: {self.store.database_name}")

    def create_collection(self) -> None:
        self.store.create_collection_if_not_exists(self.collection, PARTITION_KEY_PATH)
        self.logger.info(
            "Collection ready", collection=self.collection, partition_key=PARTITION_KEY_PATH
        )
        self.console.write_and_prompt(f"Created Document Collection: {self.collection}")

    def create_family_if_not_exists(self, family: Family) -> bool:
        created = ensure_document_exists(self.store, self.collection, family.to_dict())
        if created:
            self.report.created.append(family.id)
            self.console.write_and_prompt(f"Created Document: {family.id}")
        else:
            self.report.found.append(family.id)
            self.console.write_and_prompt(f"Found Document: {family.id}")
        return created

    def upsert_family(self, family: Family) -> Family:
        stored = upsert_and_verify(self.store, self.collection, family.to_dict())
        self.report.upserted.append(family.id)
        self.console.write_and_prompt(f"Upserted Document: {family.id}")
        return Family.from_dict(stored)

    # ================ Get calls ================

    def _show_results(self, name: str, documents: list[dict[str, Any]]) -> None:
        self.report.queries[name] = [doc["id"] for doc in documents]
        self.logger.info("Query finished", query=name, count=len(documents))
        for doc in documents:
            self.console.write_and_prompt(f"\tRead {Family.from_dict(doc)}")

    def execute_queries(self) -> None:
        self.console.write("Executing In-Partition Query")
        self._show_results(
            "in_partition",
            self.store.query_documents(self.collection, IN_PARTITION_QUERY, partition_key=IN_PARTITION_KEY),
        )

        self.console.write("Executing Cross-Partition Query")
        self._show_results(
            "cross_partition",
            self.store.query_documents(self.collection, CROSS_PARTITION_QUERY, enable_cross_partition=True),
        )

        self.console.write("Running direct SQL query...")
        self._show_results("sql", self.store.query_sql(self.collection, SQL_QUERY))

    def get_all_documents(self) -> list[dict[str, Any]]:
        self.console.write_and_prompt("Getting All Documents in Collection")
        documents = []
        for doc in scan_all(self.store, self.collection, page_size=self.config.page_size):
            documents.append(doc)
            self.report.scanned.append(doc["id"])
            self.console.write(str(Family.from_dict(doc)))
        self.logger.info("Collection scan finished", collection=self.collection, count=len(documents))
        return documents

    # ================ Update calls ================

    def replace_family(self, doc_id: str, updated: Family) -> None:
        replace_existing_document(
            self.store,
            self.collection,
            doc_id,
            updated.to_dict(),
            on_found=lambda _: self.console.write_and_prompt(f"Found Document to Replace {doc_id}"),
        )
        self.report.replaced.append(doc_id)
        self.console.write_and_prompt(f"Replaced Document {doc_id}")

    # ================ Delete calls ================

    def delete_family(self, family: Family) -> None:
        delete_document(self.store, self.collection, family.to_dict())
        self.report.deleted.append(family.id)
        self.console.write_and_prompt(f"Deleted Document {family.id}")

    def delete_database(self) -> None:
        self.store.delete_database()
        self.report.database_deleted = True
        self.logger.info("Database deleted", database=self.store.database_name)
        self.console.write_and_prompt(f"Deleted Database: {self.store.database_name}")

    def run(self) -> DemoReport:
        """Run all nine steps in order and return what happened."""
        # 1. Create database
        self.create_database()

        # 2. Create document collection
        self.create_collection()

        # 3. Add documents to collection
        andersen = andersen_family()
        wakefield = wakefield_family()
        self.create_family_if_not_exists(andersen)
        self.create_family_if_not_exists(wakefield)

        # 4. Upsert documents
        stanford_9 = stanford_family_9()
        stanford_11 = stanford_family_11()
        self.upsert_family(stanford_9)
        self.upsert_family(stanford_11)

        # 5. Query documents
        self.execute_queries()

        # 6. Get all documents in collection
        self.get_all_documents()

        # 7. Replace document
        andersen.children[0].grade = 6
        self.replace_family("Andersen.1", andersen)

        # 8. Delete documents
        for family in (andersen, wakefield, stanford_9, stanford_11):
            self.delete_family(family)

        # 9. Delete database
        self.delete_database()

        return self.report

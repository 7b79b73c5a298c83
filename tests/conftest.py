# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Shared pytest fixtures."""

import pytest

from familydb_logging import SilentLogger
from familydb_storage import InMemoryDocumentStore

COLLECTION = "families"


@pytest.fixture
def store():
    """Connected in-memory store with a database and a /LastName collection."""
    store = InMemoryDocumentStore(database="TestDB")
    store.connect()
    store.create_database_if_not_exists()
    store.create_collection_if_not_exists(COLLECTION, "/LastName")
    yield store
    store.disconnect()


@pytest.fixture
def silent_logger():
    return SilentLogger(name="test")

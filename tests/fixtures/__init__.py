# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Shared test fixtures for building family documents.

Usage:
    from tests.fixtures import create_family_doc

    doc = create_family_doc("Andersen.1", "Andersen", grade=5)
"""

from .family_fixtures import create_family_doc  # noqa: F401

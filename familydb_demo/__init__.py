# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""FamilyDB walkthrough.

Creates a database and a partitioned collection, writes sample family
documents, queries and scans them, replaces and deletes them, and finally
deletes the database.
"""

__version__ = "0.1.0"

from .console import Console
from .driver import DemoReport, FamilyDemo
from .models import Address, Child, Family, Parent, Pet

__all__ = [
    "__version__",
    "Console",
    "FamilyDemo",
    "DemoReport",
    "Family",
    "Parent",
    "Child",
    "Pet",
    "Address",
]

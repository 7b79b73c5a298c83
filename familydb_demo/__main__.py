# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Module entry point: ``python -m familydb_demo``."""

import sys

from .main import main

if __name__ == "__main__":
    sys.exit(main())

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Setup configuration for the familydb package set."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="familydb",
    version="0.1.0",
    author="FamilyDB Contributors",
    description="Walkthrough of partitioned document CRUD, queries and paging on Azure Cosmos DB",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(
        include=["familydb_config", "familydb_logging", "familydb_storage", "familydb_demo"],
        exclude=["tests", "tests.*"],
    ),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "azure-core>=1.29.0",  # Shared Azure exceptions and paging
        "azure-cosmos>=4.5.0",  # Azure Cosmos DB client
        "azure-identity>=1.16.1",  # Azure managed identity support
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "pylint>=3.0.0",
            "mypy>=1.0.0",
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "familydb-demo=familydb_demo.main:main",
        ],
    },
)

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Command-line entry point for the FamilyDB walkthrough."""

import argparse
import logging
import sys

from familydb_config import ConfigProvider, ConfigValidationError, DemoConfig, load_demo_config
from familydb_logging import Logger, create_logger_from_config
from familydb_storage import DocumentStore, DocumentStoreError, create_document_store_from_config

from .console import Console
from .driver import DemoReport, FamilyDemo


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="familydb-demo",
        description="Walk through document CRUD and query operations against a partitioned collection.",
    )
    parser.add_argument("--store-type", choices=["azure_cosmosdb", "inmemory"],
                        help="Document store driver (default: DOCUMENT_STORE_TYPE or inmemory)")
    parser.add_argument("--database", help="Database name (default: COSMOS_DATABASE or FamilyDB)")
    parser.add_argument("--collection", help="Collection name (default: DEMO_COLLECTION or FamilyCollection)")
    parser.add_argument("--page-size", type=int, help="Documents per page in the full scan (default: 1)")
    parser.add_argument("--non-interactive", action="store_true",
                        help="Do not wait for Enter after each step")
    return parser


def run_demo(config: DemoConfig, store: DocumentStore, console: Console, demo_logger: Logger) -> DemoReport:
    """Connect, run the walkthrough and always disconnect."""
    store.connect()
    try:
        return FamilyDemo(store, config, console, demo_logger).run()
    finally:
        store.disconnect()


def main(
    argv: list[str] | None = None,
    provider: ConfigProvider | None = None,
    console: Console | None = None,
    store: DocumentStore | None = None,
) -> int:
    """Run the walkthrough and report the outcome.

    This is the process boundary: store errors and unexpected failures are
    reported here and turned into a non-zero exit status. Nothing is retried
    or rolled back.

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_demo_config(provider).with_overrides(
            store_type=args.store_type,
            database=args.database,
            collection=args.collection,
            page_size=args.page_size,
            interactive=False if args.non_interactive else None,
        )
    except ConfigValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=config.logging.level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    demo_logger = create_logger_from_config(config.logging)
    console = console or Console(interactive=config.interactive)
    store = store or create_document_store_from_config(config.storage)

    exit_code = 0
    try:
        report = run_demo(config, store, console, demo_logger)
        demo_logger.info(
            "Demo completed",
            created=report.created,
            found=report.found,
            upserted=report.upserted,
            scanned=len(report.scanned),
            deleted=report.deleted,
        )
    except DocumentStoreError as e:
        demo_logger.error(
            f"{e.status_code} error occurred: {e}",
            status_code=e.status_code,
            error_type=type(e).__name__,
            cause=str(e.__cause__) if e.__cause__ else None,
        )
        exit_code = 1
    except Exception as e:
        demo_logger.exception(f"Error: {e}", error_type=type(e).__name__)
        exit_code = 1
    finally:
        console.write("End of demo, press Enter to exit.")
        console.pause("")

    return exit_code


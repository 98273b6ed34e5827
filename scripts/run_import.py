"""Run one OverDrive import batch, look up a library, or build keyword tags.

Examples:
    python scripts/run_import.py import 1225 --limit 200
    python scripts/run_import.py import 1225 --page 3
    python scripts/run_import.py import 1225 --new
    python scripts/run_import.py library 1225
    python scripts/run_import.py keywords --subjects "Fiction, Mystery" --interest 5

Credentials and the library table are read from `OVERDRIVE_IMPORT_*`
environment variables; counters and the cached token live in the state file.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys

from loguru import logger

from overdrive_import.clients.overdrive import OverDriveClient
from overdrive_import.errors import OverDriveError
from overdrive_import.pipeline import ImportPipeline
from overdrive_import.processing.cursor import ImportCursor
from overdrive_import.processing.keywords import normalize_keywords, serialize_keywords
from overdrive_import.utils.logging import configure_logging
from overdrive_import.utils.persistence import JsonFileStore


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("OverDrive import helper")
    sub = parser.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Write the next batch file for a library")
    imp.add_argument("library_id")
    imp.add_argument("--limit", type=int, default=None, help="Records per batch (max 300)")
    group = imp.add_mutually_exclusive_group()
    group.add_argument("--page", type=int, default=None, help="Import this page, newest first")
    group.add_argument("--new", action="store_true", help="Import items added since last run")
    imp.add_argument(
        "--items-imported", type=int, default=None,
        help="Record how many items the import tool holds before running",
    )

    lib = sub.add_parser("library", help="Print the configuration entry for a library")
    lib.add_argument("library_id")

    kw = sub.add_parser("keywords", help="Print serialized keyword buckets")
    for name in ("subjects", "interest", "keywords", "grade", "atos", "lexile"):
        kw.add_argument(f"--{name}", default=None)

    return parser.parse_args(argv)


async def run_import(args: argparse.Namespace, store: JsonFileStore) -> int:
    cursor = ImportCursor(store)
    if args.items_imported is not None:
        cursor.record_items_imported(args.library_id, args.items_imported)
    async with OverDriveClient(store=store) as client:
        pipeline = ImportPipeline(client, cursor)
        url = await pipeline.run(args.library_id, args.limit, args.page or args.new)
    if url:
        print(url)
    return 0


async def run_library(args: argparse.Namespace, store: JsonFileStore) -> int:
    async with OverDriveClient(libraries={}, store=store) as client:
        account = await client.get_library_account(args.library_id)
    if account is None:
        logger.error("Library {} not found", args.library_id)
        return 1
    entry = {account.id: dataclasses.asdict(account.to_config())}
    print(json.dumps(entry, indent=2))
    return 0


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging()

    if args.command == "keywords":
        keyword_set = normalize_keywords(
            args.subjects, args.interest, args.keywords, args.grade, args.atos, args.lexile
        )
        print(serialize_keywords(keyword_set))
        return 0

    store = JsonFileStore()
    try:
        if args.command == "import":
            return await run_import(args, store)
        return await run_library(args, store)
    except OverDriveError as e:
        logger.error("{}: {}", e.__class__.__name__, e)
        return 2


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("Aborted by user")
        sys.exit(1)

"""Create the configured document store if it is missing."""
from __future__ import annotations

import argparse
import sys

from quillpost.core.errors import QuillpostError
from quillpost.core.settings import settings
from quillpost.db.session import create_tables, drop_tables
from quillpost.repositories.cosmos_store import CosmosDocumentStore
from quillpost.repositories.documents import PARTITION_KEY_PATHS


def ensure_cosmos() -> None:
    store = CosmosDocumentStore.from_settings(settings)
    for name, path in PARTITION_KEY_PATHS.items():
        store.container(name)
        print(f"[ensure_store] container {store.container_ids[name]} ready (partition key /{path})")
        if store.apply_indexing_policy(name):
            print(f"[ensure_store] indexing policy applied to {store.container_ids[name]}")


def ensure_sql(drop: bool = False) -> None:
    if drop:
        drop_tables()
        print("[ensure_store] dropped document tables")
    create_tables()
    print("[ensure_store] document tables ready")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Ensure the configured document store exists")
    parser.add_argument(
        "--drop-tables",
        action="store_true",
        help="Drop the SQL tables before recreating them (sql backend only).",
    )
    args = parser.parse_args(argv)
    try:
        if settings.storage_backend == "cosmos":
            ensure_cosmos()
        else:
            ensure_sql(drop=args.drop_tables)
    except (QuillpostError, ValueError) as exc:
        print(f"[ensure_store] ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

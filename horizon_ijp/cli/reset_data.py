#!/usr/bin/env python3
"""
Inspect, seed or reset a SQLite-backed Horizon IJP data store.

Usage examples::

    python -m horizon_ijp.cli.reset_data --db horizon.db            # seed if empty
    python -m horizon_ijp.cli.reset_data --db horizon.db --status
    python -m horizon_ijp.cli.reset_data --db horizon.db --reset
    python -m horizon_ijp.cli.reset_data --db horizon.db --reset --fixtures my_fixtures.yaml
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from functools import partial
from pathlib import Path

from horizon_ijp.db import SQLiteStorage
from horizon_ijp.fixtures import load_fixtures
from horizon_ijp.store import DataStore


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed or reset the Horizon IJP data store")
    parser.add_argument("--db", default=os.getenv("HORIZON_DB_PATH"),
                        help="SQLite file (default: $HORIZON_DB_PATH)")
    parser.add_argument("--fixtures", help="YAML fixture file (default: bundled seed data)")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--reset", action="store_true", help="Discard all data and reseed")
    group.add_argument("--status", action="store_true", help="Only report record counts")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.db:
        print("A database path is required (--db or HORIZON_DB_PATH).")
        return 1

    fixtures = partial(load_fixtures, Path(args.fixtures)) if args.fixtures else None

    with SQLiteStorage(Path(args.db)) as storage:
        store = DataStore(storage, fixtures=fixtures)
        if args.reset:
            if not store.reset():
                print("Reset failed: seed data could not be loaded.")
                return 1
            print(f"Reset {args.db} to seed data.")
        elif not args.status:
            if store.initialize():
                print(f"Seeded {args.db}.")
            else:
                print(f"{args.db} is already initialized.")

        print(f"Initialized: {store.is_initialized()}")
        for name, count in store.counts().items():
            print(f"  {name}: {count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

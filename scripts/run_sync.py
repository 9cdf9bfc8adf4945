#!/usr/bin/env python3
"""Sync sources once and print the counts.

Usage:
    python scripts/run_sync.py                    # all active sources
    python scripts/run_sync.py --source-id 3      # one source
    python scripts/run_sync.py --seed config/sources.json
"""

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from readmaster.config.settings import settings
from readmaster.config.sources import load_sources
from readmaster.errors import ReadMasterError
from readmaster.ingestion.registry import build_default_registry
from readmaster.pipeline.sync import run_sync
from readmaster.storage.factory import get_storage


def seed_sources(storage, registry, path: str) -> int:
    """Create sources from a seed file, skipping ones already stored."""
    created = 0
    for source in load_sources(path, registry=registry):
        existing = storage.get_sources(source.user_id)
        if any(s.name == source.name and s.type == source.type for s in existing):
            continue
        storage.create_source(source)
        created += 1
    return created


async def run(args) -> int:
    if args.seed:
        created = seed_sources(get_storage(), build_default_registry(), args.seed)
        print(f"Seeded {created} new source(s) from {args.seed}")

    results = await run_sync(source_id=args.source_id, user_id=args.user_id)

    print("\nRESULTS:")
    for r in results:
        status = "ok" if r.ok else f"FAILED ({r.fetch_error})"
        print(f"  Source {r.source_id}: {r.fetched} fetched, {r.saved} saved, "
              f"{r.filtered} filtered, {r.duplicates} duplicate, {r.failed} failed - {status}")

    print(f"\nTOTAL: {sum(r.fetched for r in results)} fetched, "
          f"{sum(r.saved for r in results)} saved\n")
    return 0 if all(r.ok for r in results) else 1


def main():
    parser = argparse.ArgumentParser(description="Sync ReadMaster sources")
    parser.add_argument("--source-id", type=int, help="Sync only this source")
    parser.add_argument("--user-id", type=int, default=settings.default_user_id,
                        help="Owner whose active sources are synced")
    parser.add_argument("--seed", help="JSON file of sources to create before syncing")
    args = parser.parse_args()

    try:
        sys.exit(asyncio.run(run(args)))
    except ReadMasterError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()

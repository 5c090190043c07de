#!/usr/bin/env python3
"""Permanently delete items that have been in the trash longer than the retention period.

Usage:
    python scripts/cleanup_trash.py              # per-plan retention
    python scripts/cleanup_trash.py --days 14    # override retention for everyone
    python scripts/cleanup_trash.py --dry-run    # report only
"""

import argparse
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.database import SessionLocal
from src.services.lifecycle import LifecycleEngine
from src.services.realtime import NullNotifier


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--days", type=int, default=None, help="Override the retention period")
    parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be deleted without deleting"
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.dry_run:
        print("DRY RUN - No items will actually be deleted")

    db = SessionLocal()
    try:
        result = LifecycleEngine(db, notifier=NullNotifier()).purge_expired(
            retention_days=args.days, dry_run=args.dry_run
        )
    finally:
        db.close()

    for kind, count in result.count_by_kind().items():
        verb = "Would delete" if args.dry_run else "Deleted"
        print(f"  {kind}: {verb} {count} items")

    if args.dry_run:
        print("Dry run complete. Run without --dry-run to actually delete items.")
    else:
        print(f"Cleanup complete. Total items permanently deleted: {result.affected}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

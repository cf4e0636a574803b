#!/usr/bin/env python3
"""Delete meet rooms whose expiration date has passed.

Meant to run periodically (cron, Kubernetes CronJob) against the same
database as the API.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1] / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from meet.core.time import utcnow  # noqa: E402
from meet.database import get_db_session  # noqa: E402
from meet.repositories import RoomRepository  # noqa: E402
from meet.services import RoomService  # noqa: E402

logger = logging.getLogger("meet.scripts.purge_expired_rooms")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only list the expired rooms without deleting them.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every removed room.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    with get_db_session() as db:
        if args.dry_run:
            expired = RoomRepository(db).find_expired_ids(utcnow())
            for room_id in expired:
                print(room_id)
            print(f"{len(expired)} expired rooms", file=sys.stderr)
            return 0

        purged = RoomService(RoomRepository(db)).purge_expired_rooms()

    print(f"Purged {purged} expired rooms", file=sys.stderr)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())

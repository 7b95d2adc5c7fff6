"""List users with their level and number of chapters."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from frailearn.crud import user_crud
from frailearn.utils.script_utils import add_database_argument, open_session

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="List users and their chapter counts")
    parser.add_argument("--limit", type=int, default=None, help="Maximum number of users to list.")
    add_database_argument(parser)
    args = parser.parse_args(argv)

    try:
        with open_session(args.database_url) as db:
            rows = user_crud.list_users_with_chapter_counts(db, limit=args.limit)
            print(f"👥 {len(rows)} users:")
            for user, chapter_count in rows:
                level = getattr(user.current_level, "value", user.current_level)
                print(
                    f"  - #{user.id} {user.email} ({user.name or 'no name'}) "
                    f"level={level} chapters={chapter_count} "
                    f"skipped_placement={user.skipped_placement_test}"
                )
    except Exception as exc:
        logger.error("❌ Erreur: %s", exc, exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

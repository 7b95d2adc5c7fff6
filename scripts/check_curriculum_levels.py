"""Report chapter titles shared between two levels."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from frailearn.models.user_model import ProficiencyLevel
from frailearn.services import diagnostics_service
from frailearn.utils.script_utils import add_database_argument, level_argument, open_session

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Find identical chapter titles across levels")
    parser.add_argument("--first", type=level_argument, default=ProficiencyLevel.BEGINNER)
    parser.add_argument("--second", type=level_argument, default=ProficiencyLevel.INTERMEDIATE)
    parser.add_argument("--limit", type=int, default=15, help="Chapters considered per level.")
    add_database_argument(parser)
    args = parser.parse_args(argv)

    try:
        with open_session(args.database_url) as db:
            shared = diagnostics_service.shared_chapter_titles(db, args.first, args.second, limit=args.limit)
    except Exception as exc:
        logger.error("❌ Erreur: %s", exc, exc_info=True)
        return 1

    print(f"🔍 Found {len(shared)} identical chapter titles between {args.first.value} and {args.second.value}")
    for title in shared:
        print(f"  - {title}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

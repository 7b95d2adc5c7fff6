"""Chapter status overview (Completed / In Progress / Unlocked / Locked) for a user."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from frailearn.services import diagnostics_service
from frailearn.utils.script_utils import add_database_argument, level_argument, open_session, require_user

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

STATUS_ICONS = {"Completed": "✅", "In Progress": "🟡", "Unlocked": "🔓", "Locked": "🔒"}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Show which chapters a user can access")
    parser.add_argument("user", help="User id or email")
    parser.add_argument("--level", type=level_argument, default=None, help="Level (default: the user's current level).")
    add_database_argument(parser)
    args = parser.parse_args(argv)

    try:
        with open_session(args.database_url) as db:
            user = require_user(db, args.user)
            if user is None:
                return 1
            overview = diagnostics_service.chapter_overview(db, user, level=args.level)
    except Exception as exc:
        logger.error("❌ Erreur: %s", exc, exc_info=True)
        return 1

    print(f"📚 Chapters for {overview.user_email} ({overview.level}): {len(overview.chapters)}")
    for chapter in overview.chapters:
        icon = STATUS_ICONS.get(chapter.status, "•")
        line = f"  {icon} {chapter.chapter_number}. {chapter.title} [section {chapter.section_number}] - {chapter.status}"
        if chapter.status == "Locked" and chapter.unlock_condition:
            line += f" ({chapter.unlock_condition})"
        print(line)

    if overview.status_counts:
        summary = ", ".join(f"{status}: {count}" for status, count in overview.status_counts.items())
        print(f"\n📊 {summary}")

    if overview.bridge_chapters:
        print(f"\n🌉 Bridge course chapters ({len(overview.bridge_chapters)}):")
        for chapter in overview.bridge_chapters:
            mark = "✅" if chapter.is_completed else "⏳"
            print(f"  {mark} {chapter.chapter_number}. {chapter.title}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

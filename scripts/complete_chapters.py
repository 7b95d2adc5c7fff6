"""Mark chapters 1..N (and their lessons) completed for a user.

Usage::

    python -m scripts.complete_chapters learner@example.com --through 5
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from frailearn.services import admin_service
from frailearn.services.errors import LearningFlowError
from frailearn.utils.script_utils import add_database_argument, level_argument, open_session, require_user

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Complete the first chapters of a user")
    parser.add_argument("user", help="User id or email")
    parser.add_argument("--through", type=int, default=5, help="Last chapter number to complete (default: 5).")
    parser.add_argument("--level", type=level_argument, default=None, help="Level (default: the user's current level).")
    parser.add_argument("--mastery", type=float, default=95, help="Mastery score recorded on each chapter.")
    add_database_argument(parser)
    args = parser.parse_args(argv)

    try:
        with open_session(args.database_url) as db:
            user = require_user(db, args.user)
            if user is None:
                return 1
            chapters = admin_service.complete_chapters(
                db, user, args.through, level=args.level, mastery_score=args.mastery
            )
            for chapter in chapters:
                print(f"✅ Completed chapter {chapter.chapter_number}: {chapter.title}")
            count = len(chapters)
    except LearningFlowError as exc:
        print(f"❌ {exc.code}")
        return 1
    except Exception as exc:
        logger.error("❌ Erreur: %s", exc, exc_info=True)
        return 1

    if not count:
        print("ℹ️  No chapters found in that range.")
    else:
        print(f"🎉 {count} chapters completed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Check whether a user may start the progress test for a chapter range."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from frailearn.services import diagnostics_service
from frailearn.services.errors import LearningFlowError
from frailearn.utils.script_utils import add_database_argument, level_argument, open_session, require_user

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check progress test readiness for a chapter range")
    parser.add_argument("user", help="User id or email")
    parser.add_argument("--range", dest="chapter_range", default="1-5", help='Chapter range, e.g. "1-5".')
    parser.add_argument("--level", type=level_argument, default=None, help="Level (default: the user's current level).")
    add_database_argument(parser)
    args = parser.parse_args(argv)

    try:
        with open_session(args.database_url) as db:
            user = require_user(db, args.user)
            if user is None:
                return 1
            readiness = diagnostics_service.progress_readiness(db, user, args.chapter_range, level=args.level)
    except LearningFlowError as exc:
        print(f"❌ {exc.code}: {args.chapter_range!r}")
        return 1
    except Exception as exc:
        logger.error("❌ Erreur: %s", exc, exc_info=True)
        return 1

    print(f"📋 Progress test {readiness.chapter_range} ({readiness.level})")
    print(f"   Completed: {len(readiness.completed_numbers)}/{readiness.required}")
    if readiness.ready:
        print("✅ All chapters completed - the progress test can be started.")
    else:
        missing = ", ".join(str(number) for number in readiness.missing_numbers)
        print(f"❌ Missing chapters: {missing}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

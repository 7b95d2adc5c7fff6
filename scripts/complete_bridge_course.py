"""Complete a user's bridge course by hand and generate the next curriculum."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from frailearn.services import admin_service
from frailearn.services.content_generator import AIContentGenerator
from frailearn.services.errors import NotFound
from frailearn.utils.script_utils import add_database_argument, open_session, require_user

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Manually complete a bridge course")
    parser.add_argument("user", help="User id or email")
    add_database_argument(parser)
    args = parser.parse_args(argv)

    try:
        with open_session(args.database_url) as db:
            user = require_user(db, args.user)
            if user is None:
                return 1
            outcome = admin_service.complete_bridge_course_for_user(db, user, AIContentGenerator())
    except NotFound:
        print(f"❌ No bridge course found for {args.user}")
        return 1
    except Exception as exc:
        logger.error("❌ Erreur: %s", exc, exc_info=True)
        return 1

    print("✅ Bridge course marked as completed.")
    if outcome.error:
        print(f"❌ Curriculum generation for {outcome.level} failed: {outcome.error}")
        return 1
    if outcome.already_present:
        print(f"ℹ️  {outcome.level} curriculum already exists.")
    else:
        print(f"✅ Generated {outcome.chapter_count} {outcome.level} chapters.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

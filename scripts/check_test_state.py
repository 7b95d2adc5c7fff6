"""Show whether a user's latest progress test can still be submitted.

Usage::

    python -m scripts.check_test_state learner@example.com
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from frailearn.services import diagnostics_service
from frailearn.utils.script_utils import add_database_argument, open_session, require_user

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Inspect the latest progress test of a user")
    parser.add_argument("user", help="User id or email")
    add_database_argument(parser)
    args = parser.parse_args(argv)

    try:
        with open_session(args.database_url) as db:
            user = require_user(db, args.user)
            if user is None:
                return 1
            attempt = diagnostics_service.latest_progress_test(db, user)
            if attempt is None:
                print("❌ No test attempt found")
                return 1

            print("📊 Latest Test Attempt:")
            print(f"   ID: {attempt.id}")
            print(f"   Created At: {attempt.created_at}")
            print(f"   Completed At: {attempt.completed_at}")
            print(f"   Score: {attempt.score}%")
            print(f"   Passed: {attempt.passed}")
            print(f"   User Answers: {len(attempt.user_answers or [])}")

            if attempt.is_completed:
                print("⚠️  Test is marked as completed: a new submission will be rejected.")
            else:
                print("✅ Test is not completed - should be submittable")
    except Exception as exc:
        logger.error("❌ Erreur: %s", exc, exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""List the most recent bridge final tests with their downstream state.

Usage::

    python -m scripts.check_bridge_tests --limit 5
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
from frailearn.utils.script_utils import add_database_argument, open_session

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check recent bridge course final tests")
    parser.add_argument("--limit", type=int, default=5, help="Number of tests to show (default: 5).")
    add_database_argument(parser)
    args = parser.parse_args(argv)

    try:
        with open_session(args.database_url) as db:
            statuses = diagnostics_service.recent_bridge_final_tests(db, limit=args.limit)
            print(f"🔍 Found {len(statuses)} recent bridge final tests:")
            for status in statuses:
                print(f"\nTest ID: {status.test_attempt_id}")
                print(f"User: {status.user_email}")
                print(f"Level: {status.level}")
                print(f"Score: {status.score}% (passing score {status.passing_score}%)")
                print(f"Passed: {status.passed}")
                print(f"Completed: {'Yes' if status.completed else 'No'}")
                print(f"Created: {status.created_at}")
                if status.passed and status.completed:
                    print(f"Curriculum chapters generated: {status.curriculum_chapters}")
                    if status.bridge_course_completed is not None:
                        print(f"Bridge course completed: {status.bridge_course_completed}")
                        print(f"Bridge course target level: {status.bridge_target_level}")
    except Exception as exc:
        logger.error("❌ Erreur lors de la vérification des tests: %s", exc, exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Distribution of exercises per lesson; flags lessons with a single exercise."""

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

SHOWN_LESSONS = 10


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check exercise counts per lesson")
    add_database_argument(parser)
    args = parser.parse_args(argv)

    try:
        with open_session(args.database_url) as db:
            report = diagnostics_service.lesson_exercise_distribution(db)
    except Exception as exc:
        logger.error("❌ Erreur: %s", exc, exc_info=True)
        return 1

    print("📊 Lesson Exercise Count Analysis:")
    print("==================================")
    print(f"Lessons analysed: {report.lesson_count}")
    print("Distribution of exercises per lesson:")
    for count, lessons in report.distribution.items():
        print(f"  {count} exercises: {lessons} lessons")

    thin = report.single_exercise_lessons
    print(f"\n❌ Lessons with only 1 exercise ({len(thin)} total):")
    for lesson in thin[:SHOWN_LESSONS]:
        print(f'  - "{lesson.title}" (Topic: {lesson.topic})')
        print(f'    Exercise: "{lesson.exercise_question}"')
    if len(thin) > SHOWN_LESSONS:
        print(f"  ... and {len(thin) - SHOWN_LESSONS} more lessons")

    if thin:
        print("\n🔧 Add more exercises to these lessons: they complete after a single question.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

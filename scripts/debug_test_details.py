"""Dump a user's latest progress test and audit its stored grade.

The stored result is authoritative; the recomputation only flags drift.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from frailearn.schemas.test_schema import parse_questions
from frailearn.services import diagnostics_service
from frailearn.utils.script_utils import add_database_argument, open_session, require_user

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Debug grading of the latest progress test")
    parser.add_argument("user", help="User id or email")
    add_database_argument(parser)
    args = parser.parse_args(argv)

    try:
        with open_session(args.database_url) as db:
            user = require_user(db, args.user)
            if user is None:
                return 1
            details = diagnostics_service.progress_test_details(db, user)
            if details is None:
                print("❌ No test attempt found")
                return 1

            attempt = details.attempt
            print("📊 Test Attempt Details:")
            print(f"   ID: {attempt.id}")
            print(f"   Title: {attempt.title}")
            print(f"   Chapter Range: {attempt.chapter_range}")
            print(f"   Total Questions: {attempt.total_questions}")
            print(f"   Score: {attempt.score}%")
            print(f"   Correct Answers: {attempt.correct_answers}")
            print(f"   Passed: {attempt.passed} (passing score {attempt.passing_score}%)")
            print(f"   Completed At: {attempt.completed_at}")

            questions = parse_questions(attempt.questions)
            print(f"\n📝 Questions ({len(questions)}):")
            for index, question in enumerate(questions, start=1):
                print(f"   Q{index} (ID: {question.id}): {question.question}")
                print(f"      Type: {question.type}")
                print(f'      Correct Answer: "{question.correct_answer}"')
                if question.options:
                    print(f"      Options: {', '.join(question.options)}")

            print(f"\n🔍 Grading Analysis ({len(details.checks)} answers):")
            for check in details.checks:
                if not check.question_found:
                    print(f"   Q{check.question_id}: Question not found!")
                    continue
                mark = "✅" if check.is_correct else "❌"
                print(f'   Q{check.question_id}: "{check.user_answer}" vs "{check.correct_answer}" = {mark}')

            audit = details.audit
            print("\n📊 Recomputed Grading:")
            print(f"   Correct: {audit.recomputed_correct}/{audit.total_count}")
            print(f"   Score: {audit.recomputed_score}%")
            print(f"   Database Score: {audit.stored_score}%")
            if attempt.is_completed and audit.mismatch:
                print("⚠️  GRADING MISMATCH DETECTED!")
                print(f"   Recomputed: {audit.recomputed_correct} correct")
                print(f"   Database: {audit.stored_correct} correct")

            if details.open_remedial_chapters:
                print(f"\n🔧 Open remedial chapters ({len(details.open_remedial_chapters)}):")
                for chapter in details.open_remedial_chapters:
                    print(f"   - {chapter.grammar_point}: {chapter.title} ({chapter.mistake_count} mistakes)")
    except Exception as exc:
        logger.error("❌ Erreur: %s", exc, exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

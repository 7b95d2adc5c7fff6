"""Reproduce the progress test double-submission flow against a running API.

Usage::

    python -m scripts.repro_progress_submit --email learner@example.com --password secret

Logs in, starts the progress test for chapters 1-5, submits an answer for
every question, then submits again and expects the second submission to be
rejected.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from frailearn.client.api_client import ApiError, FrailearnClient
from frailearn.schemas.test_schema import SubmittedAnswer

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _answers_for(questions: list[dict]) -> list[SubmittedAnswer]:
    answers = []
    for question in questions:
        options = question.get("options") or []
        answers.append(SubmittedAnswer(questionId=question.get("id"), userAnswer=options[0] if options else "test"))
    return answers


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Reproduce the progress test submission flow")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--base-url", dest="base_url", default=None, help="API base URL (default: settings.API_BASE_URL).")
    parser.add_argument("--level", default=None, help="Level to test (default: the user's current level).")
    parser.add_argument("--range", dest="chapter_range", default="1-5")
    args = parser.parse_args(argv)

    client = FrailearnClient(args.base_url)
    try:
        client.login(args.email, args.password)
        print("✅ Login successful")

        user = client.me()
        level = args.level or user.get("currentLevel") or user.get("current_level")
        print(f"✅ User: {user.get('email')} ({level})")

        started = client.start_progress_test(level, args.chapter_range)
        test_id = started.get("testId") or started.get("test_id")
        questions = started.get("questions") or []
        print(f"✅ Progress test {test_id} started with {len(questions)} questions")

        result = client.submit_progress_test(test_id, _answers_for(questions))
        print(
            f"✅ Submitted: score {result.score}% "
            f"({result.correct_answers}/{result.total_questions}), passed={result.passed}"
        )
    except ApiError as exc:
        print(f"❌ {exc}")
        return 1
    except Exception as exc:
        logger.error("❌ Erreur: %s", exc, exc_info=True)
        return 1

    try:
        client.submit_progress_test(test_id, _answers_for(questions))
    except ApiError as exc:
        if exc.status_code == 400:
            print(f"✅ Second submission rejected as expected: {exc.message}")
            return 0
        print(f"❌ Second submission failed with an unexpected status: {exc}")
        return 1

    print("❌ Second submission was accepted: the test can be submitted twice!")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())

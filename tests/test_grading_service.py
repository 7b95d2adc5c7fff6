import logging

import pytest

from frailearn.services import grading_service
from frailearn.services.errors import QuestionMismatch
from frailearn.services.grading_service import answers_match, compute_score, grade_answers, round_half_up

from tests.utils import create_test_attempt, create_user, make_answers, make_questions


def test_thirteen_of_fifteen_scores_87():
    result = grade_answers(make_questions(15), make_answers(15, correct=13))

    assert result.correct_count == 13
    assert result.total_count == 15
    assert result.score == 87


def test_eleven_of_fifteen_scores_73():
    result = grade_answers(make_questions(15), make_answers(15, correct=11))

    assert result.correct_count == 11
    assert result.score == 73
    assert len(result.mistakes) == 4


def test_numeric_and_string_ids_are_matched():
    questions = make_questions(2)
    answers = [{"questionId": "1", "userAnswer": "answer-1"}, {"questionId": 2, "userAnswer": "answer-2"}]

    result = grade_answers(questions, answers)

    assert result.correct_count == 2
    assert result.unmatched_question_ids == []


def test_comparison_is_case_insensitive_but_keeps_whitespace():
    assert answers_match("Bonjour", "bonjour")
    assert not answers_match(" bonjour", "bonjour")
    assert not answers_match(None, "bonjour")


def test_unmatched_answers_are_skipped_and_logged(caplog):
    questions = make_questions(3)
    answers = make_answers(3, correct=3) + [{"questionId": "99", "userAnswer": "x"}]

    with caplog.at_level(logging.WARNING, logger=grading_service.__name__):
        result = grade_answers(questions, answers)

    assert result.correct_count == 3
    assert result.total_count == 3
    assert result.score == 100
    assert result.unmatched_question_ids == ["99"]
    assert "Question not found for id: 99" in caplog.text


def test_strict_mode_rejects_unknown_question():
    with pytest.raises(QuestionMismatch) as exc:
        grade_answers(make_questions(2), [{"questionId": "7", "userAnswer": "x"}], strict=True)

    assert exc.value.code == "question_not_found"
    assert exc.value.question_id == "7"


def test_duplicate_answers_count_once():
    questions = make_questions(2)
    answers = [
        {"questionId": 1, "userAnswer": "answer-1"},
        {"questionId": 1, "userAnswer": "answer-1"},
        {"questionId": 1, "userAnswer": "answer-1"},
    ]

    result = grade_answers(questions, answers)

    assert result.correct_count == 1
    assert result.duplicate_question_ids == ["1", "1"]
    assert result.correct_count <= result.total_count


def test_first_answer_for_a_question_wins():
    result = grade_answers(
        make_questions(1),
        [{"questionId": 1, "userAnswer": "wrong"}, {"questionId": 1, "userAnswer": "answer-1"}],
    )

    assert result.correct_count == 0
    assert result.score == 0


def test_unanswered_questions_count_as_wrong():
    result = grade_answers(make_questions(4), make_answers(2, correct=2))

    assert result.correct_count == 2
    assert result.total_count == 4
    assert result.score == 50


def test_repeated_stored_question_id_still_counts_in_total(caplog):
    questions = make_questions(2)
    questions.insert(1, {**questions[0], "correctAnswer": "other"})

    with caplog.at_level(logging.WARNING):
        result = grade_answers(questions, make_answers(2, correct=2))

    assert result.total_count == 3
    assert result.correct_count == 2
    assert result.score == 67
    assert result.topic_breakdown["General"]["total"] == 3
    assert "répétés" in caplog.text


def test_empty_test_scores_zero():
    result = grade_answers([], [])

    assert result.total_count == 0
    assert result.score == 0


@pytest.mark.parametrize(
    ("correct", "total", "expected"),
    [(0, 15, 0), (12, 15, 80), (11, 15, 73), (1, 8, 13), (1, 200, 1), (1, 3, 33), (2, 3, 67), (15, 15, 100)],
)
def test_compute_score_rounds_half_up(correct, total, expected):
    assert compute_score(correct, total) == expected


def test_round_half_up_on_exact_halves():
    assert round_half_up(12.5) == 13
    assert round_half_up(0.5) == 1
    assert round_half_up(72.49) == 72


def test_topic_breakdown_and_areas():
    questions = make_questions(4, topic="verbs") + [
        {"id": 10 + n, "question": "q", "correctAnswer": "a", "topic": "articles"} for n in range(1, 5)
    ]
    answers = make_answers(4, correct=4) + [
        {"questionId": 11, "userAnswer": "a"},
        {"questionId": 12, "userAnswer": "b"},
        {"questionId": 13, "userAnswer": "b"},
    ]

    result = grade_answers(questions, answers)

    assert result.topic_breakdown == {
        "verbs": {"correct": 4, "total": 4},
        "articles": {"correct": 1, "total": 4},
    }
    assert result.strong_areas == ["verbs"]
    assert result.weak_areas == ["articles"]


def test_mistake_severity_follows_difficulty():
    questions = [
        {"id": 1, "question": "q1", "correctAnswer": "a", "difficulty": "hard"},
        {"id": 2, "question": "q2", "correctAnswer": "a", "difficulty": "EASY"},
        {"id": 3, "question": "q3", "correctAnswer": "a"},
    ]
    answers = [{"questionId": n, "userAnswer": "b"} for n in (1, 2, 3)]

    result = grade_answers(questions, answers)

    assert [mistake.severity for mistake in result.mistakes] == ["CRITICAL", "MINOR", "MODERATE"]
    assert result.mistakes[0].topic == grading_service.DEFAULT_TOPIC


def test_audit_flags_stored_score_drift(db_session):
    user = create_user(db_session)
    attempt = create_test_attempt(
        db_session,
        user,
        user_answers=make_answers(15, correct=13),
        correct_answers=12,
        score=80,
    )

    audit = grading_service.audit_attempt(attempt)

    assert audit.recomputed_correct == 13
    assert audit.recomputed_score == 87
    assert audit.mismatch


def test_audit_agrees_with_consistent_attempt(db_session):
    user = create_user(db_session)
    attempt = create_test_attempt(
        db_session,
        user,
        user_answers=make_answers(15, correct=13),
        correct_answers=13,
        score=87,
    )

    assert not grading_service.audit_attempt(attempt).mismatch

"""Grading of submitted test answers against a stored answer key.

Pure computation: nothing here touches the database. The gate decision
(pass / fail and its consequences) lives in :mod:`frailearn.services.gate_service`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from frailearn.schemas.test_schema import (
    QuestionRecord,
    SubmittedAnswer,
    parse_answers,
    parse_questions,
)
from frailearn.services.errors import QuestionMismatch

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "General"
WEAK_AREA_THRESHOLD = 70
STRONG_AREA_THRESHOLD = 85

_SEVERITY_BY_DIFFICULTY = {
    "HARD": "CRITICAL",
    "EASY": "MINOR",
}


@dataclass(slots=True)
class GradedMistake:
    question_id: str
    question: str
    user_answer: str
    correct_answer: str
    topic: str
    severity: str


@dataclass(slots=True)
class GradingResult:
    correct_count: int
    total_count: int
    score: int
    unmatched_question_ids: List[str] = field(default_factory=list)
    duplicate_question_ids: List[str] = field(default_factory=list)
    topic_breakdown: Dict[str, Dict[str, int]] = field(default_factory=dict)
    weak_areas: List[str] = field(default_factory=list)
    strong_areas: List[str] = field(default_factory=list)
    mistakes: List[GradedMistake] = field(default_factory=list)


@dataclass(slots=True)
class GradingAudit:
    test_attempt_id: int
    stored_correct: int
    stored_score: int
    recomputed_correct: int
    recomputed_score: int
    total_count: int
    unmatched_question_ids: List[str] = field(default_factory=list)

    @property
    def mismatch(self) -> bool:
        return (
            self.stored_correct != self.recomputed_correct
            or self.stored_score != self.recomputed_score
        )


def answers_match(submitted: Optional[str], correct: Optional[str]) -> bool:
    """Case-insensitive exact comparison. Whitespace is significant."""
    if submitted is None or correct is None:
        return False
    return str(submitted).lower() == str(correct).lower()


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_score(correct: int, total: int) -> int:
    """Percentage of correct answers, rounded half up."""
    if total <= 0:
        return 0
    return round_half_up(correct / total * 100)


def severity_for(difficulty: Optional[str]) -> str:
    return _SEVERITY_BY_DIFFICULTY.get((difficulty or "").upper(), "MODERATE")


def _summarize_topics(breakdown: Dict[str, Dict[str, int]]) -> tuple[list[str], list[str]]:
    weak: list[str] = []
    strong: list[str] = []
    for topic, stats in breakdown.items():
        if not stats["total"]:
            continue
        accuracy = compute_score(stats["correct"], stats["total"])
        if accuracy < WEAK_AREA_THRESHOLD:
            weak.append(topic)
        elif accuracy >= STRONG_AREA_THRESHOLD:
            strong.append(topic)
    return weak, strong


def grade_answers(
    questions: Sequence[QuestionRecord | Dict[str, Any]],
    answers: Iterable[SubmittedAnswer | Dict[str, Any]],
    *,
    strict: bool = False,
) -> GradingResult:
    """Grade ``answers`` against the answer key in ``questions``.

    Each question counts once: the first answer for a question id is graded
    and later ones are reported in ``duplicate_question_ids``. Answers that
    reference an unknown question are skipped (or raise ``QuestionMismatch``
    when ``strict``). Unanswered questions count as wrong, so the score is
    always relative to the full question set. A stored question repeating an
    earlier id can never be answered and therefore counts as wrong.
    """

    records = [q if isinstance(q, QuestionRecord) else QuestionRecord.model_validate(q) for q in questions]
    submitted = parse_answers(list(answers))

    by_id: Dict[str, QuestionRecord] = {}
    repeated_ids: list[str] = []
    for record in records:
        if record.id in by_id:
            repeated_ids.append(record.id)
            continue
        by_id[record.id] = record
    if repeated_ids:
        logger.warning(
            "Identifiants de question répétés dans le corrigé: %s (comptés comme sans réponse)",
            repeated_ids,
        )

    breakdown: Dict[str, Dict[str, int]] = {}
    for record in records:
        topic = record.topic or DEFAULT_TOPIC
        breakdown.setdefault(topic, {"correct": 0, "total": 0})
        breakdown[topic]["total"] += 1

    graded: set[str] = set()
    unmatched: list[str] = []
    duplicates: list[str] = []
    mistakes: list[GradedMistake] = []
    correct_count = 0

    for answer in submitted:
        question = by_id.get(answer.question_id)
        if question is None:
            if strict:
                raise QuestionMismatch(answer.question_id)
            logger.warning("Question not found for id: %s", answer.question_id)
            unmatched.append(answer.question_id)
            continue

        if question.id in graded:
            duplicates.append(question.id)
            continue
        graded.add(question.id)

        topic = question.topic or DEFAULT_TOPIC
        if answers_match(answer.user_answer, question.correct_answer):
            correct_count += 1
            breakdown[topic]["correct"] += 1
        else:
            mistakes.append(
                GradedMistake(
                    question_id=question.id,
                    question=question.question,
                    user_answer=answer.user_answer,
                    correct_answer=question.correct_answer,
                    topic=topic,
                    severity=severity_for(question.difficulty),
                )
            )

    total_count = len(records)
    weak, strong = _summarize_topics(breakdown)

    return GradingResult(
        correct_count=correct_count,
        total_count=total_count,
        score=compute_score(correct_count, total_count),
        unmatched_question_ids=unmatched,
        duplicate_question_ids=duplicates,
        topic_breakdown=breakdown,
        weak_areas=weak,
        strong_areas=strong,
        mistakes=mistakes,
    )


def audit_attempt(attempt) -> GradingAudit:
    """Recompute a stored attempt and report whether it agrees with the stored result."""

    questions = parse_questions(attempt.questions)
    result = grade_answers(questions, attempt.user_answers or [])
    return GradingAudit(
        test_attempt_id=attempt.id,
        stored_correct=attempt.correct_answers,
        stored_score=attempt.score,
        recomputed_correct=result.correct_count,
        recomputed_score=result.score,
        total_count=result.total_count,
        unmatched_question_ids=result.unmatched_question_ids,
    )

"""Remedial micro-chapters generated for the weak topics of a graded progress test."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List

from sqlalchemy.orm import Session

from frailearn.crud import remedial_chapter_crud
from frailearn.models.progress.remedial_chapter_model import RemedialChapter
from frailearn.models.testing.test_attempt_model import TestAttempt
from frailearn.schemas.course_schema import GeneratedRemedialChapter
from frailearn.services.content_generator import ContentGenerator
from frailearn.services.grading_service import GradedMistake, GradingResult

logger = logging.getLogger(__name__)

MISTAKE_EXAMPLES_PER_TOPIC = 3


@dataclass(slots=True)
class RemedialOutcome:
    created: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)


def build_remedial_chapter(
    attempt: TestAttempt,
    topic: str,
    mistakes: List[GradedMistake],
    data: GeneratedRemedialChapter,
) -> RemedialChapter:
    return RemedialChapter(
        user_id=attempt.user_id,
        level=attempt.level,
        grammar_point=topic,
        title=data.title,
        description=data.description,
        source_test_id=attempt.id,
        triggered_by=attempt.title,
        mistake_count=len(mistakes),
        mistake_question_ids=[mistake.question_id for mistake in mistakes],
        content=dict(data.content),
        exercises=[exercise.model_dump(by_alias=True, exclude_none=True) for exercise in data.exercises],
        is_completed=False,
    )


def ensure_remedial_chapters(
    db: Session,
    attempt: TestAttempt,
    result: GradingResult,
    generator: ContentGenerator,
) -> RemedialOutcome:
    """Create one remedial chapter per weak topic of ``result``.

    A topic that already has an open remedial chapter for the learner is
    skipped. Each chapter is committed on its own; a generation or storage
    failure is rolled back, logged and reported per topic without raising.
    """
    outcome = RemedialOutcome()
    if not result.weak_areas or not result.mistakes:
        return outcome

    for topic in result.weak_areas:
        topic_mistakes = [mistake for mistake in result.mistakes if mistake.topic == topic]
        if not topic_mistakes:
            continue

        if remedial_chapter_crud.get_open_remedial_chapter(db, attempt.user_id, topic) is not None:
            logger.info("Chapitre de remédiation déjà ouvert pour %r (utilisateur %s)", topic, attempt.user_id)
            outcome.skipped.append(topic)
            continue

        examples = [asdict(mistake) for mistake in topic_mistakes[:MISTAKE_EXAMPLES_PER_TOPIC]]
        try:
            data = generator.generate_remedial_chapter(topic, examples)
            db.add(build_remedial_chapter(attempt, topic, topic_mistakes, data))
            db.commit()
        except Exception as exc:
            db.rollback()
            logger.error(
                "Échec de génération du chapitre de remédiation %r pour l'utilisateur %s: %s",
                topic,
                attempt.user_id,
                exc,
                exc_info=True,
            )
            outcome.errors[topic] = str(exc) or exc.__class__.__name__
            continue

        logger.info("Chapitre de remédiation créé pour %r (utilisateur %s)", topic, attempt.user_id)
        outcome.created.append(topic)

    return outcome

"""Pass/fail gate and its downstream effects on the learner's course."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from frailearn.core.config import settings
from frailearn.crud import chapter_crud
from frailearn.models.bridge.bridge_course_model import BridgeCourse
from frailearn.models.testing.test_attempt_model import TestAttempt, TestType
from frailearn.services import curriculum_service
from frailearn.services.content_generator import ContentGenerator
from frailearn.services.errors import LearningFlowError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CurriculumOutcome:
    user_id: int
    level: str
    generated: bool = False
    already_present: bool = False
    chapter_count: int = 0
    error: Optional[str] = None


@dataclass(slots=True)
class UnlockOutcome:
    unlocked: List[int] = field(default_factory=list)
    generated: List[int] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def chapter_numbers(self) -> List[int]:
        return sorted(set(self.unlocked) | set(self.generated))


def passes_gate(score: int, passing_score: int) -> bool:
    return score >= passing_score


def parse_chapter_range(chapter_range: str | None) -> Tuple[int, int]:
    """Parse ``"a-b"`` into ``(a, b)`` with ``1 <= a <= b``."""
    if not chapter_range:
        raise LearningFlowError("invalid_chapter_range")
    parts = chapter_range.split("-")
    if len(parts) != 2:
        raise LearningFlowError("invalid_chapter_range")
    try:
        start, end = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise LearningFlowError("invalid_chapter_range") from exc
    if start < 1 or end < start:
        raise LearningFlowError("invalid_chapter_range")
    return start, end


def complete_bridge_course(bridge_course: BridgeCourse, score: Optional[int], when: datetime | None = None) -> bool:
    """Mark the bridge course completed. Returns ``False`` if it already was.

    ``score`` is the final test score; ``None`` leaves the stored score as is.
    """
    if bridge_course.is_completed:
        return False
    bridge_course.is_completed = True
    if score is not None:
        bridge_course.final_test_score = score
    bridge_course.completed_at = when or datetime.now(timezone.utc)
    bridge_course.completed_chapters = bridge_course.total_chapters
    logger.info("Bridge course %s complété (score %s)", bridge_course.id, score)
    return True


def ensure_curriculum(
    db: Session,
    user_id: int,
    level,
    generator: ContentGenerator,
    per_section: int | None = None,
) -> CurriculumOutcome:
    """Generate the curriculum for ``(user_id, level)`` unless chapters already exist.

    Commits on success. A generation failure is rolled back, logged and
    reported on the outcome; it never propagates.
    """
    level_value = getattr(level, "value", level)
    outcome = CurriculumOutcome(user_id=user_id, level=level_value)

    if chapter_crud.chapters_exist(db, user_id, level):
        logger.info("Curriculum %s déjà présent pour l'utilisateur %s, génération ignorée.", level_value, user_id)
        outcome.already_present = True
        return outcome

    try:
        generated = generator.generate_curriculum(level_value)
        created = curriculum_service.save_curriculum(db, user_id, level, generated, per_section)
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.error("Échec de génération du curriculum %s pour l'utilisateur %s: %s", level_value, user_id, exc, exc_info=True)
        outcome.error = str(exc) or exc.__class__.__name__
        return outcome

    outcome.generated = True
    outcome.chapter_count = len(created)
    return outcome


def unlock_next_section(
    db: Session,
    attempt: TestAttempt,
    generator: ContentGenerator,
    per_section: int | None = None,
) -> UnlockOutcome:
    """Open the chapter range following a passed progress test.

    Existing chapters in the next range are unlocked; if none exist the range
    is generated and created unlocked. Commits on success, logs and reports
    failures without raising.
    """
    outcome = UnlockOutcome()
    if attempt.test_type != TestType.PROGRESS_TEST or not attempt.passed:
        return outcome

    try:
        _, end = parse_chapter_range(attempt.chapter_range)
    except LearningFlowError:
        logger.warning("Plage de chapitres invalide sur le test %s: %r", attempt.id, attempt.chapter_range)
        outcome.error = "invalid_chapter_range"
        return outcome

    per_section = per_section or settings.CHAPTERS_PER_SECTION
    next_start = end + 1
    next_end = end + per_section
    level_value = getattr(attempt.level, "value", attempt.level)

    try:
        existing = chapter_crud.get_chapters_in_range(db, attempt.user_id, attempt.level, next_start, next_end)
        if existing:
            outcome.unlocked = chapter_crud.unlock_chapters(existing)
        else:
            generated = generator.generate_chapter_range(level_value, next_start, next_end)
            created = curriculum_service.save_chapter_range(
                db, attempt.user_id, attempt.level, next_start, generated, per_section
            )
            outcome.generated = [chapter.chapter_number for chapter in created]
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.error(
            "Échec du déverrouillage des chapitres %s-%s pour l'utilisateur %s: %s",
            next_start,
            next_end,
            attempt.user_id,
            exc,
            exc_info=True,
        )
        outcome.error = str(exc) or exc.__class__.__name__
        return outcome

    logger.info(
        "Chapitres %s-%s ouverts pour l'utilisateur %s (débloqués=%s, générés=%s)",
        next_start,
        next_end,
        attempt.user_id,
        outcome.unlocked,
        outcome.generated,
    )
    return outcome

"""Administrative repair operations.

Every operation here goes through the same gate helpers as the normal
submission path and can be re-run safely: a second run finds nothing left
to change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from frailearn.crud import bridge_course_crud, chapter_crud, test_attempt_crud
from frailearn.models.course.chapter_model import Chapter
from frailearn.models.testing.test_attempt_model import TestAttempt, TestType
from frailearn.models.user_model import User
from frailearn.services import gate_service
from frailearn.services.content_generator import ContentGenerator
from frailearn.services.errors import LearningFlowError, NotFound
from frailearn.services.gate_service import CurriculumOutcome

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReconciledTest:
    test_attempt_id: int
    user_id: int
    score: int
    passing_score: int
    bridge_course_completed: bool
    curriculum: Optional[CurriculumOutcome] = None


@dataclass(slots=True)
class ReconcileReport:
    examined: int = 0
    reconciled: List[ReconciledTest] = field(default_factory=list)
    below_threshold: List[int] = field(default_factory=list)
    missing_bridge_course: List[int] = field(default_factory=list)
    backfilled: List[CurriculumOutcome] = field(default_factory=list)

    @property
    def curriculum_errors(self) -> List[CurriculumOutcome]:
        outcomes = [item.curriculum for item in self.reconciled if item.curriculum is not None]
        outcomes.extend(self.backfilled)
        return [outcome for outcome in outcomes if outcome.error]


def _bridge_course_for(db: Session, attempt: TestAttempt):
    if attempt.bridge_course_id is not None:
        return bridge_course_crud.get_bridge_course(db, attempt.bridge_course_id)
    return bridge_course_crud.get_bridge_course_for_user(db, attempt.user_id)


def reconcile_bridge_final_tests(
    db: Session,
    generator: ContentGenerator,
    passing_score: Optional[int] = None,
) -> ReconcileReport:
    """Repair bridge final tests that were graded as failed despite clearing the threshold.

    With ``passing_score`` the given threshold is applied (and recorded on the
    attempt); otherwise each attempt is judged against its own stored
    threshold. Completed bridge courses that still lack a curriculum at their
    target level are backfilled afterwards.
    """
    report = ReconcileReport()
    attempted_users: set[int] = set()
    candidates = test_attempt_crud.list_tests(db, TestType.BRIDGE_FINAL, completed=True, passed=False)
    report.examined = len(candidates)

    for attempt in candidates:
        threshold = passing_score if passing_score is not None else attempt.passing_score
        if not gate_service.passes_gate(attempt.score, threshold):
            report.below_threshold.append(attempt.id)
            continue

        bridge_course = _bridge_course_for(db, attempt)
        attempt.passed = True
        attempt.passing_score = threshold

        completed = False
        if bridge_course is None:
            logger.warning("Aucun bridge course pour le test %s (utilisateur %s)", attempt.id, attempt.user_id)
            report.missing_bridge_course.append(attempt.id)
        else:
            completed = gate_service.complete_bridge_course(bridge_course, attempt.score)
        db.commit()

        item = ReconciledTest(
            test_attempt_id=attempt.id,
            user_id=attempt.user_id,
            score=attempt.score,
            passing_score=threshold,
            bridge_course_completed=completed,
        )
        if bridge_course is not None:
            attempted_users.add(attempt.user_id)
            item.curriculum = gate_service.ensure_curriculum(db, attempt.user_id, bridge_course.target_level, generator)
        report.reconciled.append(item)
        logger.info("Test %s marqué réussi (score %s, seuil %s)", attempt.id, attempt.score, threshold)

    for bridge_course in bridge_course_crud.list_completed_bridge_courses(db):
        if bridge_course.user_id in attempted_users:
            continue
        if chapter_crud.chapters_exist(db, bridge_course.user_id, bridge_course.target_level):
            continue
        report.backfilled.append(
            gate_service.ensure_curriculum(db, bridge_course.user_id, bridge_course.target_level, generator)
        )

    return report


def complete_chapters(
    db: Session,
    user: User,
    through_chapter: int,
    level=None,
    mastery_score: float = 95,
) -> List[Chapter]:
    """Mark chapters ``1..through_chapter`` and all their lessons completed."""
    if through_chapter < 1:
        raise LearningFlowError("invalid_chapter_range")
    level = level or user.current_level
    now = datetime.now(timezone.utc)

    chapters = chapter_crud.get_chapters_in_range(db, user.id, level, 1, through_chapter)
    for chapter in chapters:
        for lesson in chapter.lessons:
            if not lesson.is_completed:
                lesson.is_completed = True
                lesson.completed_at = now
        if not chapter.is_completed:
            chapter.is_unlocked = True
            chapter.unlocked_at = chapter.unlocked_at or now
            chapter.is_started = True
            chapter.is_completed = True
            chapter.completed_at = now
            chapter.mastery_score = float(mastery_score)
    db.commit()
    logger.info("%s chapitres complétés pour l'utilisateur %s (%s)", len(chapters), user.id, getattr(level, "value", level))
    return chapters


def delete_progress_tests(db: Session, user: User) -> int:
    deleted = test_attempt_crud.delete_tests_for_user(db, user.id, TestType.PROGRESS_TEST)
    db.commit()
    logger.info("%s tests de progression supprimés pour l'utilisateur %s", deleted, user.id)
    return deleted


def complete_bridge_course_for_user(db: Session, user: User, generator: ContentGenerator) -> CurriculumOutcome:
    """Finish a user's bridge course by hand and make sure the next curriculum exists."""
    bridge_course = bridge_course_crud.get_bridge_course_for_user(db, user.id)
    if bridge_course is None:
        raise NotFound("BridgeCourse", user.id)

    now = datetime.now(timezone.utc)
    for chapter in bridge_course.chapters:
        if not chapter.is_completed:
            chapter.is_completed = True
            chapter.completed_at = now

    gate_service.complete_bridge_course(bridge_course, None, when=now)
    db.commit()

    return gate_service.ensure_curriculum(db, user.id, bridge_course.target_level, generator)
